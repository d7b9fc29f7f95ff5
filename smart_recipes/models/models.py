"""Data models and schemas for the recipe generation service.

Defines Pydantic models for request/response validation and domain objects.
All models use Pydantic v2. Wire-facing models accept and emit camelCase keys
(`includeIngredients`, `cookingTime`, ...) while Python code uses snake_case.
"""

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, field_validator, model_validator
from pydantic.alias_generators import to_camel


SpiceLevel = Literal["mild", "medium", "hot"]
Difficulty = Literal["easy", "medium", "hard"]
PreferenceValue = Literal["like", "dislike", "stretch"]
RecipeSource = Literal["user", "ai"]


def _integral_float_to_int(value):
    """Turn 30.0 into 30; fractional floats, strings and booleans are left for the strict check."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# Positive integer that rejects strings, fractional floats and booleans (LLM output is not coerced).
# JSON numbers such as 30.0 are integers too.
StrictPositiveInt = Annotated[int, BeforeValidator(_integral_float_to_int), Field(strict=True, gt=0)]


def _unique_terms(values: Optional[List[str]]) -> List[str]:
    """Strip, drop blanks and de-duplicate case-insensitively, keeping first-seen order."""
    seen: set[str] = set()
    unique: List[str] = []
    for value in values or []:
        term = value.strip() if isinstance(value, str) else value
        if not term:
            continue
        key = term.lower()
        if key not in seen:
            seen.add(key)
            unique.append(term)
    return unique


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting snake_case names too."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserPreferences(CamelModel):
    """Stored cooking preferences of one user.

    Read-only to the generation pipeline. Dietary restrictions and allergies
    behave as sets: duplicates (case-insensitive) are dropped on input.
    """

    dietary_restrictions: Annotated[
        List[str], Field(default_factory=list, description="Diets the user follows (vegetarian, halal, ...)")
    ]
    allergies: Annotated[
        List[str], Field(default_factory=list, description="Ingredients that must never appear in a recipe")
    ]
    cuisine_preferences: Annotated[
        List[str], Field(default_factory=list, description="Preferred cuisines, most preferred first")
    ]
    spice_level: Annotated[SpiceLevel, Field("medium", description="Preferred spice level")]
    max_cooking_time: Annotated[
        Optional[int], Field(None, gt=0, description="Upper bound on cooking time in minutes")
    ]
    serving_size: Annotated[int, Field(2, gt=0, description="Number of servings to cook for")]

    @field_validator("dietary_restrictions", "allergies")
    @classmethod
    def dedupe_terms(cls, values: List[str]) -> List[str]:
        return _unique_terms(values)


class IngredientPreference(CamelModel):
    """A user's annotation on a single ingredient."""

    ingredient: Annotated[str, Field(min_length=1, max_length=200, description="Ingredient name")]
    preference: Annotated[PreferenceValue, Field(description="like, dislike or stretch")]


class UserPreferenceProfile(CamelModel):
    """Everything the pipeline reads about a user: preferences plus ingredient annotations."""

    preferences: UserPreferences
    ingredient_preferences: Annotated[List[IngredientPreference], Field(default_factory=list)]


class GenerationRequest(CamelModel):
    """Per-call generation constraints. Never persisted.

    Older clients send `ingredients` and `cuisineType`; they are accepted as
    aliases of `includeIngredients` and `cuisine`.
    """

    user_id: Annotated[Optional[int], Field(None, gt=0, description="Owner of the stored preferences")]
    include_ingredients: Annotated[List[str], Field(default_factory=list, description="Ingredients that must be used")]
    exclude_ingredients: Annotated[List[str], Field(default_factory=list, description="Ingredients to leave out")]
    dietary_restrictions: Annotated[
        List[str], Field(default_factory=list, description="Extra restrictions for this request only")
    ]
    cuisine: Annotated[Optional[str], Field(None, max_length=100)]
    meal_type: Annotated[Optional[str], Field(None, max_length=100)]
    cooking_time: Annotated[Optional[int], Field(None, gt=0, description="Maximum cooking time in minutes")]
    difficulty: Optional[Difficulty] = None
    message: Annotated[
        Optional[str], Field(None, min_length=2, max_length=2000, description="Free-text instruction")
    ]

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data):
        """Map legacy `ingredients` / `cuisineType` keys onto their current names."""
        if isinstance(data, dict):
            data = dict(data)
            legacy_ingredients = data.pop("ingredients", None)
            if legacy_ingredients and not data.get("includeIngredients") and not data.get("include_ingredients"):
                data["includeIngredients"] = legacy_ingredients
            legacy_cuisine = data.pop("cuisineType", None)
            if legacy_cuisine and not data.get("cuisine"):
                data["cuisine"] = legacy_cuisine
        return data

    @field_validator("include_ingredients", "exclude_ingredients", "dietary_restrictions")
    @classmethod
    def clean_terms(cls, values: List[str]) -> List[str]:
        return _unique_terms(values)


class LLMResponseModel(CamelModel):
    """Base for models parsed from LLM output: camelCase keys only.

    A snake_case key such as `cooking_time` is an unknown key here and is
    ignored, so construct these models with alias keys.
    """

    model_config = ConfigDict(populate_by_name=False)


class RecipeIngredient(LLMResponseModel):
    """One ingredient line of a generated recipe."""

    name: StrictStr
    quantity: StrictStr
    notes: Optional[StrictStr] = None


class GeneratedRecipe(LLMResponseModel):
    """Structured recipe as returned by the LLM.

    This is the exact contract a model response must satisfy before it is
    trusted: strings must be strings and counts must be positive integers, no
    coercion. Unknown keys are ignored and `source` defaults to "ai".
    """

    title: StrictStr
    description: Optional[StrictStr] = None
    ingredients: List[RecipeIngredient]
    instructions: StrictStr
    cooking_time: Optional[StrictPositiveInt] = None
    prep_time: Optional[StrictPositiveInt] = None
    servings: Optional[StrictPositiveInt] = None
    cuisine: Optional[StrictStr] = None
    difficulty: Optional[Difficulty] = None
    spice_level: Optional[SpiceLevel] = None
    tips: Optional[List[StrictStr]] = None
    source: RecipeSource = "ai"


class GenerationResult(CamelModel):
    """Outcome of one generation call.

    `fallback` is True only for the static fallback recipe and None otherwise.
    """

    recipe: GeneratedRecipe
    generated_prompt: str
    fallback: Optional[bool] = None

    @property
    def is_fallback(self) -> bool:
        return bool(self.fallback)


class GenerateRecipeResponse(CamelModel):
    """HTTP response body for POST /recipes/generate."""

    recipe: GeneratedRecipe
    generated_prompt: str
    fallback: Optional[bool] = None
    warning: Optional[str] = None
