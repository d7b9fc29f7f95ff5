"""Exception types for recipe generation.

Terminal errors (raised to callers):
- LLMConnectionError: the LLM could not be reached after all attempts
- RecipeResponseValidationError: the final attempt returned JSON that fails the recipe schema

Attempt-level errors (handled inside the retry loop):
- LLMTransportError: a single LLM call failed at the transport/API level
- RecipeParseError: response text is not JSON
- RecipeSchemaError: parsed JSON does not match the recipe schema
"""

from typing import Any, Optional


class RecipeGenerationError(Exception):
    """Base class for errors raised by the generation pipeline."""


class LLMConnectionError(RecipeGenerationError):
    """LLM unreachable or erroring after exhausting retries."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class RecipeResponseValidationError(RecipeGenerationError):
    """The LLM replied, but its final-attempt output fails the recipe schema.

    Attributes:
        validation_errors: Field-path-annotated issues, e.g.
            [{"path": "ingredients.0.quantity", "message": "Field required", "type": "missing"}]
        response: Raw response text that failed validation.
    """

    def __init__(self, message: str, validation_errors: list[dict[str, Any]], response: str) -> None:
        super().__init__(message)
        self.validation_errors = validation_errors
        self.response = response


class LLMTransportError(Exception):
    """A single LLM call failed before returning content.

    Args:
        message: Human-readable cause.
        retryable: False for failures retrying cannot fix (invalid API key, permission denied).
        status_code: HTTP status reported by the API, if any.
    """

    def __init__(self, message: str, *, retryable: bool = True, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class RecipeParseError(ValueError):
    """Response text could not be parsed as JSON."""


class RecipeSchemaError(ValueError):
    """Parsed response does not match the recipe schema."""

    def __init__(self, message: str, issues: list[dict[str, Any]]) -> None:
        super().__init__(message)
        self.issues = issues
