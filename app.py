"""Smart Recipes HTTP service.

Single entry point for the recipe generation API:
- Validates configuration (fail-fast on missing GEMINI_API_KEY)
- Builds the RecipeGenerator with the Gemini client
- Serves the REST API via FastAPI/uvicorn

Run with: python app.py
"""

import uvicorn

from smart_recipes.api.routes import create_app
from smart_recipes.generation.generator import initialize_recipe_generator
from smart_recipes.utils.config import config
from smart_recipes.utils.logger import logger


logger.info("Initializing recipe generator...")
try:
    generator = initialize_recipe_generator(config)
except ValueError as e:
    logger.error(f"Configuration invalid: {e}")
    raise SystemExit(1)

app = create_app(generator)
logger.info("Application configured successfully")


if __name__ == "__main__":
    logger.info(f"Starting Smart Recipes service on port {config.PORT}")
    logger.info(f"Model: {config.GEMINI_MODEL} | attempts per request: {config.MAX_RETRIES + 1}")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
