"""Base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..error_classifier import ClassifiedError, classify_error


class LLMProviderError(Exception):
    """Exception raised by LLM providers with classification.

    Attributes:
        classified_error: The classified error with its category
        original_exception: The original exception that was raised
    """

    def __init__(
        self,
        classified_error: ClassifiedError,
        original_exception: Exception,
    ):
        self.classified_error = classified_error
        self.original_exception = original_exception
        super().__init__(str(classified_error))


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence from a model response."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class BaseLLMProvider(ABC):
    """Abstract base class for LLM provider integrations."""

    def __init__(self, api_key: str, model: str):
        """
        Initialize the LLM provider.

        Args:
            api_key: API key for the provider
            model: Model identifier to use
        """
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def generate_structured_completion_async(
        self,
        prompt: str,
        response_format: Dict[str, Any],
        temperature: float = 0.7,
        max_tokens: int = 8192,
        **kwargs: Any,
    ) -> Any:
        """
        Generate a structured (JSON) completion from the LLM.

        Args:
            prompt: The prompt to send to the model
            response_format: JSON schema for the expected response
            temperature: Sampling temperature
            max_tokens: Maximum number of tokens to generate
            **kwargs: Additional provider-specific parameters

        Returns:
            The parsed JSON value (object or array)

        Raises:
            LLMProviderError: If the API call fails or the response is not JSON
        """

    def get_provider_name(self) -> str:
        """
        Get the name of this provider.

        Returns:
            Provider name (e.g., "google")
        """
        return self.__class__.__name__.replace("Provider", "").lower()

    def _handle_api_error(self, error: Exception) -> LLMProviderError:
        """Classify and wrap an API error."""
        return LLMProviderError(
            classified_error=classify_error(error, provider=self.get_provider_name()),
            original_exception=error,
        )
