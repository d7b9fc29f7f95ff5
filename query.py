#!/usr/bin/env python3
"""Ad hoc recipe generation runner.

Generate a recipe directly without starting the API server.

Usage:
    python query.py "Something quick with chicken and rice"
    python query.py --preferences prefs.json "Italian dinner"
    python query.py --request '{"cuisine": "Italian", "cookingTime": 30}' "Make it cozy"
    python query.py --debug "Your message"  # Show full JSON result and prompt

Features:
- Direct generator execution via generate()
- Preferences from a JSON file ({"preferences": {...}, "ingredientPreferences": [...]})
- Extra request constraints as inline JSON
- Recipe rendered as markdown, fallback results flagged
"""

import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown

from smart_recipes.generation.errors import RecipeGenerationError
from smart_recipes.generation.generator import initialize_recipe_generator
from smart_recipes.models.models import GeneratedRecipe, GenerationRequest, UserPreferenceProfile, UserPreferences
from smart_recipes.utils.config import config
from smart_recipes.utils.logger import logger

console = Console()


def recipe_to_markdown(recipe: GeneratedRecipe) -> str:
    """Render a recipe as markdown for terminal display."""
    lines = [f"# {recipe.title}"]
    if recipe.description:
        lines += ["", recipe.description]

    facts = []
    if recipe.servings:
        facts.append(f"Serves: {recipe.servings}")
    if recipe.prep_time:
        facts.append(f"Prep: {recipe.prep_time} min")
    if recipe.cooking_time:
        facts.append(f"Cook: {recipe.cooking_time} min")
    if recipe.difficulty:
        facts.append(f"Difficulty: {recipe.difficulty}")
    if recipe.spice_level:
        facts.append(f"Spice: {recipe.spice_level}")
    if facts:
        lines += ["", " | ".join(facts)]

    lines += ["", "## Ingredients", ""]
    for ingredient in recipe.ingredients:
        line = f"- {ingredient.name} ({ingredient.quantity})"
        if ingredient.notes:
            line += f": {ingredient.notes}"
        lines.append(line)

    lines += ["", "## Instructions", "", recipe.instructions]

    if recipe.tips:
        lines += ["", "## Tips", ""]
        lines += [f"- {tip}" for tip in recipe.tips]

    return "\n".join(lines)


def load_profile(preferences_path: str | None) -> UserPreferenceProfile:
    """Load a preference profile from JSON, or return default preferences."""
    if not preferences_path:
        return UserPreferenceProfile(preferences=UserPreferences())

    path = Path(preferences_path)
    if not path.exists():
        console.print(f"[red]✗ Error: Preferences file not found: {preferences_path}[/red]")
        sys.exit(1)
    return UserPreferenceProfile.model_validate_json(path.read_text())


def run_query(message: str, preferences_path: str | None = None, request_json: str | None = None, debug: bool = False) -> None:
    """Generate a single recipe and print it.

    Args:
        message: Free-text instruction for the recipe.
        preferences_path: Optional path to a preference profile JSON file.
        request_json: Optional JSON object with extra GenerationRequest fields.
        debug: If True, display the full JSON result including the prompt.
    """
    try:
        generator = initialize_recipe_generator(config)
        profile = load_profile(preferences_path)

        request_data = json.loads(request_json) if request_json else {}
        if message:
            request_data["message"] = message
        request = GenerationRequest.model_validate(request_data)

        logger.info(f"Generating recipe for: {request.message}")
        logger.info("---")

        result = asyncio.run(generator.generate(profile.preferences, profile.ingredient_preferences, request))

        logger.info("---")
        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Result[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(data=result.model_dump(by_alias=True, exclude_none=True))
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        if result.is_fallback:
            console.print("[yellow]⚠ Could not generate a proper recipe. Showing a fallback recipe instead.[/yellow]")
            console.print()

        console.print(Markdown(recipe_to_markdown(result.recipe)))

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except RecipeGenerationError as e:
        logger.error(f"Recipe generation failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print('Usage: python query.py [--debug] [--preferences PATH] [--request JSON] "<your message>"')
        print("")
        print("Examples:")
        print('  python query.py "Something quick with chicken and rice"')
        print('  python query.py --preferences prefs.json "Italian dinner"')
        print('  python query.py --request \'{"cuisine": "Thai", "difficulty": "easy"}\' "Weeknight dinner"')
        sys.exit(1)

    debug_mode = False
    preferences_path = None
    request_json = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        flag = sys.argv[argv_start]
        if flag == "--debug":
            debug_mode = True
            argv_start += 1
        elif flag in ("--preferences", "--request"):
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            if flag == "--preferences":
                preferences_path = sys.argv[argv_start]
            else:
                request_json = sys.argv[argv_start]
            argv_start += 1
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)

    # Join all arguments after flags as the message (handles messages with spaces)
    message = " ".join(sys.argv[argv_start:])

    run_query(message, preferences_path=preferences_path, request_json=request_json, debug=debug_mode)
