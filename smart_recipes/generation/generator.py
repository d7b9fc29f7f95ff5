"""Recipe generation orchestrator.

Drives one generation call from prompt to a validated or safely degraded result:

    BUILDING_PROMPT → ATTEMPTING(n) → SUCCESS | ATTEMPTING(n+1) | FALLBACK

**Attempt policy:**
- Up to max_retries + 1 attempts, all sharing one prompt
- Attempt i uses temperature base + i * step (0.7 → 0.8 → 0.9) to escape
  degenerate or malformed answers
- Client errors of any kind: exponential backoff (1s → 2s), LLMConnectionError once
  attempts are exhausted or the error is not retryable
- Empty content, unparseable JSON, allergen hits, missing required
  ingredients and schema mismatches: retried immediately (soft failures)
- Schema mismatch on the final attempt: RecipeResponseValidationError
- Anything else that exhausts the attempts: static fallback recipe flagged
  `fallback=True`

The per-attempt decision is made by the pure `evaluate_response()`; the
network loop in `RecipeGenerator.generate()` only acts on its outcome.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from smart_recipes.generation.errors import (
    LLMConnectionError,
    RecipeGenerationError,
    RecipeParseError,
    RecipeResponseValidationError,
    RecipeSchemaError,
)
from smart_recipes.generation.llm_client import GeminiRecipeClient, LLMClient
from smart_recipes.generation.validator import (
    find_allergens,
    find_missing_ingredients,
    parse_recipe_json,
    validate_recipe_response,
)
from smart_recipes.models.models import (
    GeneratedRecipe,
    GenerationRequest,
    GenerationResult,
    IngredientPreference,
    UserPreferences,
)
from smart_recipes.prompts.prompts import SYSTEM_PROMPT, build_recipe_prompt
from smart_recipes.utils.config import Config, config as default_config
from smart_recipes.utils.logger import logger


class AttemptOutcome(Enum):
    SUCCESS = "success"
    SOFT_RETRY = "soft_retry"
    TERMINAL_ERROR = "terminal_error"


@dataclass(frozen=True)
class AttemptResult:
    """Decision for one LLM response.

    Exactly one of `recipe` (SUCCESS) or `error` (TERMINAL_ERROR) is set;
    SOFT_RETRY carries only the reason.
    """

    outcome: AttemptOutcome
    reason: str
    recipe: Optional[GeneratedRecipe] = None
    error: Optional[RecipeGenerationError] = None


def _schema_error(content: str, error: RecipeSchemaError) -> RecipeResponseValidationError:
    return RecipeResponseValidationError(
        "LLM response failed validation after multiple attempts",
        validation_errors=error.issues,
        response=content,
    )


def evaluate_response(
    content: Optional[str],
    *,
    allergies: Sequence[str],
    required_ingredients: Sequence[str] = (),
    is_final_attempt: bool = False,
) -> AttemptResult:
    """Classify one LLM response as SUCCESS, SOFT_RETRY or TERMINAL_ERROR.

    Checks run in order: empty content → JSON parse → allergen check →
    required-ingredient check → schema validation. A response containing an
    allergen is never a SUCCESS, even when it is otherwise valid.

    On the final attempt a schema mismatch is TERMINAL_ERROR (also when it
    coincides with an allergen hit or a missing ingredient); every other
    failure stays SOFT_RETRY so the caller falls through to the fallback recipe.

    Args:
        content: Raw response text ("" or None when the model returned nothing).
        allergies: User allergy terms.
        required_ingredients: Ingredients the request insists on.
        is_final_attempt: Whether no attempt follows this one.

    Returns:
        AttemptResult describing what the retry loop should do next.
    """
    if not content or not content.strip():
        return AttemptResult(AttemptOutcome.SOFT_RETRY, "empty response content")

    try:
        data = parse_recipe_json(content)
    except RecipeParseError as e:
        return AttemptResult(AttemptOutcome.SOFT_RETRY, str(e))

    content_problem = None
    allergens = find_allergens(data, allergies)
    if allergens:
        content_problem = f"recipe contains allergens that must be excluded: {', '.join(allergens)}"
    else:
        missing = find_missing_ingredients(data, required_ingredients)
        if missing:
            content_problem = f"recipe does not include required ingredients: {', '.join(missing)}"

    if content_problem and not is_final_attempt:
        return AttemptResult(AttemptOutcome.SOFT_RETRY, content_problem)

    try:
        recipe = validate_recipe_response(data)
    except RecipeSchemaError as e:
        if is_final_attempt:
            return AttemptResult(AttemptOutcome.TERMINAL_ERROR, str(e), error=_schema_error(content, e))
        return AttemptResult(AttemptOutcome.SOFT_RETRY, str(e))

    if content_problem:
        return AttemptResult(AttemptOutcome.SOFT_RETRY, content_problem)

    return AttemptResult(AttemptOutcome.SUCCESS, "valid recipe", recipe=recipe)


def fallback_title(request: GenerationRequest) -> str:
    """Title for the fallback recipe, e.g. "Simple Recipe with chicken and rice (Italian) - dinner"."""
    title = "Simple Recipe"
    if request.include_ingredients:
        title += f" with {' and '.join(request.include_ingredients)}"
    if request.cuisine:
        title += f" ({request.cuisine})"
    if request.meal_type:
        title += f" - {request.meal_type}"
    return title


def build_fallback_recipe(request: GenerationRequest) -> GeneratedRecipe:
    """Static minimal recipe returned when every attempt failed softly."""
    return GeneratedRecipe.model_validate(
        {
            "title": fallback_title(request),
            "description": "A simple recipe generated as a fallback.",
            "ingredients": [
                {"name": "Ingredient 1", "quantity": "As needed"},
                {"name": "Ingredient 2", "quantity": "As needed"},
            ],
            "instructions": "1. Combine ingredients. 2. Cook as preferred.",
            "cookingTime": 30,
            "prepTime": 10,
            "servings": 2,
            "cuisine": "Mixed",
            "difficulty": "easy",
            "spiceLevel": "mild",
            "tips": ["Keep it simple"],
        }
    )


class RecipeGenerator:
    """Generate recipes with retries, validation, allergen safety and fallback.

    Holds no per-call state: concurrent `generate()` calls share only the
    stateless LLM client.

    Args:
        llm_client: Any object implementing the LLMClient protocol.
        max_retries: Retries after the first attempt (default: 2 = 3 attempts).
        base_temperature: Temperature of the first attempt.
        temperature_step: Added per retry.
        retry_delay: Backoff unit in seconds; attempt i waits 2**i * retry_delay
            after a transport error.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        max_retries: int = 2,
        base_temperature: float = 0.7,
        temperature_step: float = 0.1,
        retry_delay: float = 1.0,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be at least 0, got: {max_retries}")

        self.llm_client = llm_client
        self.max_retries = max_retries
        self.base_temperature = base_temperature
        self.temperature_step = temperature_step
        self.retry_delay = retry_delay

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def temperature_for(self, attempt: int) -> float:
        """Sampling temperature for 0-based attempt index."""
        return round(self.base_temperature + attempt * self.temperature_step, 2)

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after a transport error on 0-based attempt index."""
        return (2 ** attempt) * self.retry_delay

    async def generate(
        self,
        preferences: UserPreferences,
        ingredient_preferences: Sequence[IngredientPreference],
        request: GenerationRequest,
    ) -> GenerationResult:
        """Generate one recipe.

        Args:
            preferences: Stored user preferences (allergies drive the safety check).
            ingredient_preferences: Like/dislike/stretch annotations.
            request: Per-call constraints.

        Returns:
            GenerationResult with a validated recipe, or the fallback recipe
            with `fallback=True`.

        Raises:
            LLMConnectionError: Transport errors on every attempt, or a
                non-retryable transport error.
            RecipeResponseValidationError: Final attempt returned JSON failing
                the recipe schema.
        """
        prompt = build_recipe_prompt(preferences, ingredient_preferences, request)
        log_extra = {"user_id": request.user_id}

        logger.info(
            f"Generating recipe (user_id={request.user_id}, cuisine={request.cuisine}, "
            f"meal_type={request.meal_type}, include={request.include_ingredients}, "
            f"exclude={request.exclude_ingredients})",
            extra=log_extra,
        )
        logger.debug(f"Generation prompt:\n{prompt}", extra=log_extra)

        for attempt in range(self.total_attempts):
            temperature = self.temperature_for(attempt)
            is_final_attempt = attempt == self.total_attempts - 1
            attempt_label = f"{attempt + 1}/{self.total_attempts}"
            attempt_extra = {**log_extra, "attempt": attempt + 1, "temperature": temperature}

            logger.debug(f"Attempt {attempt_label} with temperature {temperature}", extra=attempt_extra)

            try:
                content = await self.llm_client.complete(
                    system_prompt=SYSTEM_PROMPT,
                    prompt=prompt,
                    temperature=temperature,
                )
            except Exception as e:
                # Any client failure counts as a transport error; cancellation still propagates
                retryable = getattr(e, "retryable", True)
                if is_final_attempt or not retryable:
                    logger.error(
                        f"LLM call failed on attempt {attempt_label} (retryable={retryable}): {e}",
                        extra=attempt_extra,
                    )
                    raise LLMConnectionError(
                        f"Failed to connect to the recipe generation service after {attempt + 1} attempt(s)",
                        original_error=e,
                    ) from e

                delay = self.backoff_delay(attempt)
                logger.warning(
                    f"LLM call failed on attempt {attempt_label} (temperature {temperature}), "
                    f"retrying in {delay}s: {e}",
                    extra=attempt_extra,
                )
                await asyncio.sleep(delay)
                continue

            result = evaluate_response(
                content,
                allergies=preferences.allergies,
                required_ingredients=request.include_ingredients,
                is_final_attempt=is_final_attempt,
            )

            if result.outcome is AttemptOutcome.SUCCESS:
                logger.info(
                    f"Recipe generated on attempt {attempt_label}: {result.recipe.title}",
                    extra=attempt_extra,
                )
                return GenerationResult(recipe=result.recipe, generated_prompt=prompt)

            if result.outcome is AttemptOutcome.TERMINAL_ERROR:
                logger.error(f"Attempt {attempt_label} failed validation: {result.reason}", extra=attempt_extra)
                raise result.error

            logger.warning(
                f"Attempt {attempt_label} (temperature {temperature}) failed: {result.reason}",
                extra=attempt_extra,
            )

        recipe = build_fallback_recipe(request)
        logger.warning(
            f"All {self.total_attempts} attempts exhausted, returning fallback recipe: {recipe.title}",
            extra=log_extra,
        )
        return GenerationResult(recipe=recipe, generated_prompt=prompt, fallback=True)


def initialize_recipe_generator(cfg: Config = default_config, llm_client: Optional[LLMClient] = None) -> RecipeGenerator:
    """Build a RecipeGenerator from configuration.

    Validates the configuration first (fail-fast on missing API key or
    invalid retry settings), then wires the Gemini client unless one is given.

    Raises:
        ValueError: If configuration is invalid.
    """
    cfg.validate()
    client = llm_client or GeminiRecipeClient.from_config(cfg)
    logger.info(
        f"Recipe generator ready (model={cfg.GEMINI_MODEL}, attempts={cfg.MAX_RETRIES + 1}, "
        f"temperature={cfg.BASE_TEMPERATURE}+{cfg.TEMPERATURE_STEP}/retry)"
    )
    return RecipeGenerator(
        llm_client=client,
        max_retries=cfg.MAX_RETRIES,
        base_temperature=cfg.BASE_TEMPERATURE,
        temperature_step=cfg.TEMPERATURE_STEP,
        retry_delay=cfg.DELAY_BETWEEN_RETRIES,
    )
