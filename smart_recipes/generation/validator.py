"""Response validation for LLM recipe output.

Three independent checks run on every model response:

1. parse_recipe_json(): raw text → JSON value (RecipeParseError on failure)
2. find_allergens() / find_missing_ingredients(): content checks on the parsed
   value, before the schema is applied
3. validate_recipe_response(): JSON value → GeneratedRecipe
   (RecipeSchemaError with field-path-annotated issues on failure)
"""

import json
from typing import Any, List, Sequence

from pydantic import ValidationError

from smart_recipes.generation.errors import RecipeParseError, RecipeSchemaError
from smart_recipes.models.models import GeneratedRecipe


ROOT_PATH = "<root>"


def parse_recipe_json(response_text: str) -> Any:
    """Parse LLM response text as JSON.

    The model runs in JSON response mode, so no lenient extraction is
    attempted: anything that is not a JSON document is a failed attempt.

    Raises:
        RecipeParseError: If the text is not valid JSON.
    """
    try:
        return json.loads(response_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise RecipeParseError(f"Response is not valid JSON: {e}") from e


def format_validation_issues(error: ValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into path/message/type dicts."""
    issues = []
    for detail in error.errors(include_url=False):
        path = ".".join(str(part) for part in detail["loc"]) or ROOT_PATH
        issues.append({"path": path, "message": detail["msg"], "type": detail["type"]})
    return issues


def validate_recipe_response(data: Any) -> GeneratedRecipe:
    """Validate a parsed response against the recipe schema.

    Args:
        data: Parsed JSON value.

    Returns:
        GeneratedRecipe with `source` defaulted to "ai" when absent.

    Raises:
        RecipeSchemaError: With one issue per offending field, e.g.
            {"path": "cookingTime", "message": "Input should be greater than 0", "type": "greater_than"}
    """
    try:
        return GeneratedRecipe.model_validate(data)
    except ValidationError as e:
        issues = format_validation_issues(e)
        summary = ", ".join(f"{issue['path']}: {issue['message']}" for issue in issues)
        raise RecipeSchemaError(f"Recipe failed schema validation ({summary})", issues) from e


def _ingredient_names(data: Any) -> List[str]:
    """Ingredient names from a parsed response, skipping malformed entries."""
    if not isinstance(data, dict):
        return []
    ingredients = data.get("ingredients")
    if not isinstance(ingredients, list):
        return []
    return [
        item["name"]
        for item in ingredients
        if isinstance(item, dict) and isinstance(item.get("name"), str)
    ]


def find_allergens(data: Any, allergies: Sequence[str]) -> List[str]:
    """Return ingredient names that contain any allergy term.

    Matching is a case-insensitive substring test: "peanut" flags
    "Peanut butter" and also "peanut-free sauce". This is a coarse
    heuristic and is kept as-is.
    """
    terms = [a.lower() for a in allergies if a]
    if not terms:
        return []
    return [name for name in _ingredient_names(data) if any(term in name.lower() for term in terms)]


def find_missing_ingredients(data: Any, required: Sequence[str]) -> List[str]:
    """Return required ingredients that no recipe ingredient matches.

    A requirement is met when it and an ingredient name contain one another,
    case-insensitively ("chicken" matches "chicken thighs").
    """
    names = [name.lower() for name in _ingredient_names(data)]
    missing = []
    for requirement in required:
        wanted = requirement.lower()
        if not any(wanted in name or (name and name in wanted) for name in names):
            missing.append(requirement)
    return missing
