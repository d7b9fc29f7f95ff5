"""System prompt and prompt builder for recipe generation.

`build_recipe_prompt` renders stored user preferences, ingredient annotations
and per-request constraints into the user message sent to the LLM. It is a
pure function: identical inputs always produce byte-identical prompts.
"""

from typing import List, Sequence

from smart_recipes.models.models import GenerationRequest, IngredientPreference, UserPreferences


SYSTEM_PROMPT = """You are a professional chef specialized in creating personalized recipes based on user preferences, dietary restrictions, and available ingredients.

CRITICAL INSTRUCTIONS:
1. ALWAYS respect allergies and dietary restrictions as they are critical for health and safety
2. When specific ingredients are marked as "REQUIRED" or "CRITICAL REQUIREMENT", you MUST include ALL of them in your recipe
3. When a user requests a recipe with specific ingredients (like "chicken and rice"), those ingredients are MANDATORY and must be the main components of your recipe
4. Format your response as valid JSON exactly matching the required schema
5. Never ignore or substitute required ingredients - the user is counting on you to use what they specified

Your reputation depends on following these instructions precisely."""


TASK_STATEMENT = "Create a detailed recipe with the following requirements:"

OUTPUT_FORMAT = """IMPORTANT: Return the recipe in a properly formatted JSON with these exact fields:
{
  "title": "Recipe Title",
  "description": "Brief description of the recipe",
  "ingredients": [
    { "name": "Ingredient name", "quantity": "Amount needed", "notes": "Optional preparation notes" }
  ],
  "instructions": "Detailed step-by-step cooking instructions",
  "cookingTime": 30, // in minutes
  "prepTime": 15, // in minutes
  "servings": 4,
  "cuisine": "Cuisine type",
  "difficulty": "easy", // must be one of: easy, medium, hard
  "spiceLevel": "mild", // must be one of: mild, medium, hot
  "tips": ["Cooking tip 1", "Cooking tip 2"]
}"""


def _join(values: Sequence[str]) -> str:
    return ", ".join(values)


def partition_ingredient_preferences(
    ingredient_preferences: Sequence[IngredientPreference],
) -> tuple[List[str], List[str], List[str]]:
    """Split ingredient annotations into (liked, disliked, stretch) name lists.

    Order within each group follows the input order.
    """
    liked = [p.ingredient for p in ingredient_preferences if p.preference == "like"]
    disliked = [p.ingredient for p in ingredient_preferences if p.preference == "dislike"]
    stretch = [p.ingredient for p in ingredient_preferences if p.preference == "stretch"]
    return liked, disliked, stretch


def merge_dietary_restrictions(preferences: UserPreferences, request: GenerationRequest) -> List[str]:
    """Stored restrictions first, then request-only ones; case-insensitive de-duplication."""
    merged: List[str] = []
    seen: set[str] = set()
    for restriction in [*preferences.dietary_restrictions, *request.dietary_restrictions]:
        if restriction.lower() not in seen:
            seen.add(restriction.lower())
            merged.append(restriction)
    return merged


def build_recipe_prompt(
    preferences: UserPreferences,
    ingredient_preferences: Sequence[IngredientPreference],
    request: GenerationRequest,
) -> str:
    """Render the generation prompt.

    Sections appear in a fixed order and are omitted when their data is empty.
    Spice level and serving size are always present. Request-level cuisine and
    cooking time take precedence over the stored preferences.

    Args:
        preferences: Stored user preferences.
        ingredient_preferences: Like/dislike/stretch annotations (may be empty).
        request: Per-call constraints.

    Returns:
        The prompt, sections separated by a blank line.
    """
    liked, disliked, stretch = partition_ingredient_preferences(ingredient_preferences)
    dietary_restrictions = merge_dietary_restrictions(preferences, request)
    required = request.include_ingredients

    sections: List[str] = [TASK_STATEMENT]

    if dietary_restrictions:
        sections.append(f"DIETARY RESTRICTIONS (CRITICAL - MUST FOLLOW): {_join(dietary_restrictions)}.")

    if preferences.allergies:
        sections.append(
            f"ALLERGIES (CRITICAL - ABSOLUTELY DO NOT INCLUDE THESE INGREDIENTS): {_join(preferences.allergies)}."
        )

    if liked:
        sections.append(f"Preferred ingredients (try to use some of these): {_join(liked)}.")

    if disliked:
        sections.append(f"Disliked ingredients (avoid using these): {_join(disliked)}.")

    if stretch:
        sections.append(
            f'"Stretch" ingredients (user is willing to try these, use 1-2 maximum): {_join(stretch)}.'
        )

    if required:
        sections.append(
            f"CRITICAL REQUIREMENT - REQUIRED INGREDIENTS (YOU MUST USE ALL OF THESE): {_join(required)}.\n"
            f"The recipe will be rejected if it does not contain ALL of these required ingredients. "
            f"These ingredients MUST appear in your ingredients list."
        )

    if request.exclude_ingredients:
        sections.append(f"EXCLUDED ingredients (do not use these): {_join(request.exclude_ingredients)}.")

    if request.cuisine:
        sections.append(f"Cuisine type: {request.cuisine}.")
    elif preferences.cuisine_preferences:
        sections.append(f"Preferred cuisines: {_join(preferences.cuisine_preferences)}.")

    if request.meal_type:
        sections.append(f"Meal type: {request.meal_type}.")

    cooking_time = request.cooking_time or preferences.max_cooking_time
    if cooking_time:
        sections.append(f"Maximum cooking time: {cooking_time} minutes.")

    if request.difficulty:
        sections.append(f"Difficulty level: {request.difficulty}.")

    sections.append(f"Spice level: {preferences.spice_level}.")
    sections.append(f"Serving size: {preferences.serving_size}.")

    if request.message:
        sections.append(f"Additional request: {request.message}")

    if required:
        sections.append(
            f"FINAL REMINDER: Your recipe MUST include these ingredients: {_join(required)}. "
            f"The user specifically requested a recipe using these ingredients."
        )

    sections.append(OUTPUT_FORMAT)

    return "\n\n".join(sections)
