from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config

recipes_api = RecipesApiClient(
    base_url=config.API_BASE_URL,
    timeout_s=config.API_TIMEOUT_S,
)
