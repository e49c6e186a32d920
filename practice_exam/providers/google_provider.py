"""Google Generative AI provider integration."""

import json
import logging
from typing import Any, Dict

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from .base import BaseLLMProvider, strip_code_fences

logger = logging.getLogger(__name__)


class GoogleProvider(BaseLLMProvider):
    """Gemini integration for practice question generation."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        """
        Initialize Google provider.

        Args:
            api_key: Google API key
            model: Model to use (default: gemini-2.5-flash)
        """
        super().__init__(api_key, model)
        genai.configure(api_key=api_key)
        self.client = genai.GenerativeModel(model)

    async def generate_structured_completion_async(
        self,
        prompt: str,
        response_format: Dict[str, Any],
        temperature: float = 0.7,
        max_tokens: int = 8192,
        **kwargs: Any,
    ) -> Any:
        """
        Generate a JSON completion with Gemini's JSON response mode.

        The schema is also appended to the prompt; JSON mode guarantees
        syntax, the prompt steers the shape.

        Raises:
            LLMProviderError: If the call fails, the response is blocked or
                empty, or the text is not valid JSON
        """
        json_prompt = (
            f"{prompt}\n\n"
            f"Respond with valid JSON matching this schema: {json.dumps(response_format)}\n"
            f"Your response must be only valid JSON with no additional text."
        )
        generation_config = GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json",
            **kwargs,
        )

        try:
            response = await self.client.generate_content_async(
                json_prompt,
                generation_config=generation_config,
            )
            # .text raises ValueError when the candidate was blocked
            content = response.text
            logger.debug(f"Google API response content: {content[:500]}")
            if not content:
                raise ValueError("Empty response from model")
            return json.loads(strip_code_fences(content))
        except Exception as e:
            raise self._handle_api_error(e) from e
