"""Settings for the recipe generator and HTTP service.

Values come from the process environment first, then a local .env file,
then the defaults below. Retry and temperature settings can be tuned
per deployment without code changes.
"""

import os

from dotenv import load_dotenv


# A missing .env is fine: production sets real environment variables
load_dotenv()


class Config:
    """Recipe generation settings read from the environment at construction time."""

    def __init__(self) -> None:
        # Required when the service starts, optional for imports and tests
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Generation model. Default: gemini-2.5-flash (fast, supports JSON response mode)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # HTTP port for app.py
        self.PORT: int = int(os.getenv("PORT", "7777"))

        # Retry Configuration - one initial attempt plus MAX_RETRIES retries
        # Default: 2 retries = 3 attempts in total
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "2"))
        # Temperature of the first attempt. Each retry adds TEMPERATURE_STEP (0.7 → 0.8 → 0.9)
        self.BASE_TEMPERATURE: float = float(os.getenv("BASE_TEMPERATURE", "0.7"))
        self.TEMPERATURE_STEP: float = float(os.getenv("TEMPERATURE_STEP", "0.1"))
        # DELAY_BETWEEN_RETRIES: backoff unit in seconds, doubled each retry after a transport error (1s → 2s)
        self.DELAY_BETWEEN_RETRIES: float = float(os.getenv("DELAY_BETWEEN_RETRIES", "1.0"))

        # Gemini request parameters
        # Max Output Tokens: 2048 is sufficient for a full recipe with instructions and tips
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
        # Transport timeout for a single LLM call, in seconds
        self.LLM_TIMEOUT_SECONDS: int = int(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

    @property
    def MAX_TEMPERATURE(self) -> float:
        """Temperature used by the final attempt."""
        return self.BASE_TEMPERATURE + self.MAX_RETRIES * self.TEMPERATURE_STEP

    def validate(self) -> None:
        """Check that the API key is set and every numeric setting is in range.

        Raises:
            ValueError: Naming the first missing or out-of-range setting.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if self.MAX_RETRIES < 0:
            raise ValueError(
                f"MAX_RETRIES must be at least 0, got: {self.MAX_RETRIES}"
            )
        if not (0.0 <= self.BASE_TEMPERATURE <= 2.0):
            raise ValueError(
                f"BASE_TEMPERATURE must be between 0.0 and 2.0, got: {self.BASE_TEMPERATURE}"
            )
        if self.TEMPERATURE_STEP < 0.0:
            raise ValueError(
                f"TEMPERATURE_STEP must not be negative, got: {self.TEMPERATURE_STEP}"
            )
        if self.MAX_TEMPERATURE > 2.0:
            raise ValueError(
                f"BASE_TEMPERATURE + MAX_RETRIES * TEMPERATURE_STEP must not exceed 2.0, "
                f"got: {self.MAX_TEMPERATURE:.2f}"
            )
        if self.DELAY_BETWEEN_RETRIES <= 0:
            raise ValueError(
                f"DELAY_BETWEEN_RETRIES must be greater than 0 seconds, got: {self.DELAY_BETWEEN_RETRIES}"
            )
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.LLM_TIMEOUT_SECONDS < 1:
            raise ValueError(
                f"LLM_TIMEOUT_SECONDS must be at least 1 second, got: {self.LLM_TIMEOUT_SECONDS}"
            )


# Module-level config instance. Validated at service start (app.py, query.py)
# so that library code and tests can import it without credentials.
config = Config()
