"""HTTP routes for recipe generation and preference management.

Thin adapter over RecipeGenerator. Outcome mapping for POST /recipes/generate:
- validated recipe → 200 {recipe, generatedPrompt}
- fallback recipe → 200 {recipe, generatedPrompt, fallback: true, warning}
- LLMConnectionError → 503 (client may retry later)
- RecipeResponseValidationError → 502 (upstream produced an invalid recipe)
"""

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request

from smart_recipes.api.repository import InMemoryPreferenceRepository, PreferenceRepository
from smart_recipes.generation.errors import LLMConnectionError, RecipeResponseValidationError
from smart_recipes.generation.generator import RecipeGenerator
from smart_recipes.models.models import GenerateRecipeResponse, GenerationRequest, UserPreferenceProfile
from smart_recipes.utils.logger import logger


FALLBACK_WARNING = "Could not generate a proper recipe. Returning a fallback recipe instead."

router = APIRouter()


def get_generator(request: Request) -> RecipeGenerator:
    return request.app.state.generator


def get_repository(request: Request) -> PreferenceRepository:
    return request.app.state.preference_repository


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.put(
    "/users/{user_id}/preferences",
    response_model=UserPreferenceProfile,
    response_model_exclude_none=True,
)
async def update_preferences(
    user_id: int,
    profile: UserPreferenceProfile,
    repository: PreferenceRepository = Depends(get_repository),
):
    """Store a user's preferences and ingredient annotations (replaces existing ones)."""
    await repository.save(user_id, profile)
    logger.info(
        f"Preferences saved for user {user_id} "
        f"({len(profile.preferences.allergies)} allergies, "
        f"{len(profile.ingredient_preferences)} ingredient preferences)"
    )
    return profile


@router.get(
    "/users/{user_id}/preferences",
    response_model=UserPreferenceProfile,
    response_model_exclude_none=True,
)
async def get_preferences(
    user_id: int,
    repository: PreferenceRepository = Depends(get_repository),
):
    profile = await repository.get(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User preferences not found")
    return profile


@router.post(
    "/recipes/generate",
    response_model=GenerateRecipeResponse,
    response_model_exclude_none=True,
)
async def generate_recipe(
    generation_request: GenerationRequest,
    generator: RecipeGenerator = Depends(get_generator),
    repository: PreferenceRepository = Depends(get_repository),
):
    """Generate a recipe from the user's stored preferences and the request constraints."""
    if generation_request.user_id is None:
        raise HTTPException(status_code=400, detail="userId is required")

    profile = await repository.get(generation_request.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User preferences not found")

    try:
        result = await generator.generate(
            profile.preferences,
            profile.ingredient_preferences,
            generation_request,
        )
    except LLMConnectionError as e:
        logger.error(f"Recipe generation service unreachable: {e.original_error}")
        raise HTTPException(
            status_code=503,
            detail="Unable to connect to the recipe generation service. Please try again later.",
        ) from e
    except RecipeResponseValidationError as e:
        logger.error(f"Recipe generation returned an invalid recipe: {e.validation_errors}")
        logger.debug(f"Invalid response: {e.response}")
        raise HTTPException(
            status_code=502,
            detail="The recipe generation service produced an invalid response. Please try again with different parameters.",
        ) from e

    return GenerateRecipeResponse(
        recipe=result.recipe,
        generated_prompt=result.generated_prompt,
        fallback=result.fallback,
        warning=FALLBACK_WARNING if result.is_fallback else None,
    )


def create_app(generator: RecipeGenerator, repository: PreferenceRepository | None = None) -> FastAPI:
    """Build the FastAPI application around a ready RecipeGenerator."""
    app = FastAPI(
        title="Smart Recipes",
        description="Personalized AI recipe generation with allergen safety checks",
    )
    app.state.generator = generator
    app.state.preference_repository = repository or InMemoryPreferenceRepository()
    app.include_router(router)
    return app
