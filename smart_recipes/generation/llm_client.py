"""LLM client used by the recipe generator.

The generator depends only on the `LLMClient` protocol: one `complete()`
coroutine taking the system prompt, user prompt and temperature and returning
the raw response text. `GeminiRecipeClient` is the production implementation
on top of the google-genai SDK; tests inject their own objects.
"""

import asyncio
from typing import Optional, Protocol

from google import genai
from google.genai import errors, types

from smart_recipes.generation.errors import LLMTransportError
from smart_recipes.utils.config import Config, config as default_config
from smart_recipes.utils.logger import logger


# Status codes retrying cannot fix (invalid API key, permission denied)
NON_RETRYABLE_STATUS_CODES = (401, 403)


class LLMClient(Protocol):
    async def complete(self, *, system_prompt: str, prompt: str, temperature: float) -> str:
        """Return the model's text answer ("" when the model returned no content).

        Raises:
            LLMTransportError: If the call fails before any content is returned.
        """
        ...


class GeminiRecipeClient:
    """Gemini chat client requesting strict JSON output.

    Args:
        api_key: Gemini API key.
        model: Model id, e.g. "gemini-2.5-flash".
        max_output_tokens: Response length cap.
        timeout_seconds: Transport timeout for a single call.
        client: Pre-built genai.Client (optional, mainly for tests).
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_output_tokens: int = 2048,
        timeout_seconds: int = 60,
        client: Optional[genai.Client] = None,
    ) -> None:
        if client is None and not api_key:
            raise ValueError("GEMINI_API_KEY is required")

        self.model = model
        self.max_output_tokens = max_output_tokens
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout_seconds * 1000),
        )

    @classmethod
    def from_config(cls, cfg: Config = default_config) -> "GeminiRecipeClient":
        return cls(
            api_key=cfg.GEMINI_API_KEY,
            model=cfg.GEMINI_MODEL,
            max_output_tokens=cfg.MAX_OUTPUT_TOKENS,
            timeout_seconds=cfg.LLM_TIMEOUT_SECONDS,
        )

    async def complete(self, *, system_prompt: str, prompt: str, temperature: float) -> str:
        """Single Gemini call in JSON response mode (no retries here).

        Uses asyncio.to_thread to call the sync Gemini client without blocking
        the event loop.

        Raises:
            LLMTransportError: On API errors (non-retryable for 401/403) and
                network failures.
        """
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=temperature,
                    max_output_tokens=self.max_output_tokens,
                    response_mime_type="application/json",
                ),
            )
        except errors.APIError as e:
            status_code = getattr(e, "code", None)
            retryable = status_code not in NON_RETRYABLE_STATUS_CODES
            logger.debug(f"Gemini API error (status={status_code}, retryable={retryable}): {e}")
            raise LLMTransportError(
                f"Gemini API error {status_code}: {e}", retryable=retryable, status_code=status_code
            ) from e
        except Exception as e:
            raise LLMTransportError(f"Gemini request failed: {e}") from e

        return (response.text or "").strip()
