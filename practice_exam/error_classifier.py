"""Error classification for question generation failures.

Generation failures all surface to the user as one generic message, but the
logs should say *why* a request failed: a bad API key needs a different fix
than a malformed model response or a dropped connection.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple


class ErrorCategory(Enum):
    """Categories of generation errors."""

    AUTHENTICATION = "authentication"  # API key missing, invalid or expired
    QUOTA = "quota"  # Billing or free-tier quota exhausted
    RATE_LIMIT = "rate_limit"  # Throttled, retry later
    MODEL_ERROR = "model_error"  # Model name unknown or unavailable
    CONTENT_BLOCKED = "content_blocked"  # Response withheld by safety filters
    MALFORMED_RESPONSE = "malformed_response"  # Output was not the expected JSON
    SERVER_ERROR = "server_error"  # Provider 5xx
    NETWORK_ERROR = "network_error"  # Connection problems and timeouts
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedError:
    """A provider error with its category."""

    category: ErrorCategory
    provider: str
    original_error: str
    message: str
    is_retryable: bool = False

    def __str__(self) -> str:
        return f"{self.provider}: {self.category.value} - {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "category": self.category.value,
            "provider": self.provider,
            "original_error": self.original_error,
            "message": self.message,
            "is_retryable": self.is_retryable,
        }


# (category, retryable, patterns); first matching rule wins
_RULES: Tuple[Tuple[ErrorCategory, bool, Sequence[str]], ...] = (
    (
        ErrorCategory.AUTHENTICATION,
        False,
        (
            r"api[ _]?key.*(invalid|not valid|expired|missing)",
            r"invalid.*api[ _]?key",
            r"permission[ _]denied",
            r"unauthenticated",
            r"\b40[13]\b",
        ),
    ),
    (
        ErrorCategory.QUOTA,
        False,
        (r"quota", r"billing", r"resource[ _]exhausted", r"\b402\b"),
    ),
    (
        ErrorCategory.RATE_LIMIT,
        True,
        (r"rate.*limit", r"too many requests", r"\b429\b"),
    ),
    (
        ErrorCategory.MODEL_ERROR,
        False,
        (r"model.*not.*found", r"model.*(unavailable|deprecated)", r"\b404\b"),
    ),
    (
        ErrorCategory.CONTENT_BLOCKED,
        False,
        (r"block(ed)?[ _]reason", r"finish_reason.*safety", r"\bsafety\b"),
    ),
    (
        ErrorCategory.SERVER_ERROR,
        True,
        (r"internal.*error", r"service.*unavailable", r"\b50[0-9]\b"),
    ),
    (
        ErrorCategory.NETWORK_ERROR,
        True,
        (r"connection", r"timed? ?out", r"deadline.*exceeded", r"network"),
    ),
)

_MESSAGES = {
    ErrorCategory.AUTHENTICATION: "Authentication failed. Check the configured API key.",
    ErrorCategory.QUOTA: "Quota or billing limit reached for this API key.",
    ErrorCategory.RATE_LIMIT: "Rate limit exceeded. Try again shortly.",
    ErrorCategory.MODEL_ERROR: "The configured model is not available.",
    ErrorCategory.CONTENT_BLOCKED: "The response was blocked by the provider's safety filters.",
    ErrorCategory.MALFORMED_RESPONSE: "The model did not return the expected JSON.",
    ErrorCategory.SERVER_ERROR: "Provider server error. This may be temporary.",
    ErrorCategory.NETWORK_ERROR: "Network connectivity issue. This may be temporary.",
}


def classify_error(error: Exception, provider: str) -> ClassifiedError:
    """Classify an exception raised while calling a provider.

    Args:
        error: The exception that was raised
        provider: Provider name (e.g. "google")

    Returns:
        ClassifiedError with the first matching category
    """
    error_type = type(error).__name__

    category: Optional[ErrorCategory] = None
    retryable = False
    if isinstance(error, (json.JSONDecodeError, TypeError)):
        category = ErrorCategory.MALFORMED_RESPONSE
    elif isinstance(error, (TimeoutError, ConnectionError)):
        category, retryable = ErrorCategory.NETWORK_ERROR, True
    else:
        text = f"{error_type} {error}".lower()
        for rule_category, rule_retryable, patterns in _RULES:
            if any(re.search(p, text) for p in patterns):
                category, retryable = rule_category, rule_retryable
                break

    if category is None:
        return ClassifiedError(
            category=ErrorCategory.UNKNOWN,
            provider=provider,
            original_error=error_type,
            message=f"Unclassified error from {provider}: {str(error)[:100]}",
        )

    return ClassifiedError(
        category=category,
        provider=provider,
        original_error=error_type,
        message=_MESSAGES[category],
        is_retryable=retryable,
    )
