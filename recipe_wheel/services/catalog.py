# recipe_wheel/services/catalog.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config
from recipe_wheel.core.errors import ValidationFailure
from recipe_wheel.models.recipe import (
    Recipe,
    RecipeFilters,
    RecipeInput,
    RecipePage,
    total_pages,
)
from recipe_wheel.services.cache import QueryCache

log = logging.getLogger("recipe_wheel.catalog")

LIST_KIND = "recipes"
PAGES_KIND = "recipes.pages"
DETAIL_KIND = "recipe"


def _window_key(filters: RecipeFilters, per_page: int) -> Dict[str, Any]:
    return {"filters": filters.to_params(), "per_page": per_page}


class CatalogService:
    def __init__(self, client: RecipesApiClient, cache: Optional[QueryCache] = None):
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    def known_total_pages(self, filters: RecipeFilters, per_page: int) -> Optional[int]:
        key = _window_key(filters, per_page)
        if not self.cache.is_fresh(PAGES_KIND, key):
            return None
        return self.cache.peek(PAGES_KIND, key)

    async def list_recipes(
        self,
        filters: Optional[RecipeFilters] = None,
        page: int = 1,
        per_page: int = config.LIST_PER_PAGE,
    ) -> RecipePage:
        filters = filters or RecipeFilters()
        if page < 1:
            raise ValidationFailure(f"page must be >= 1, got {page}")

        pages = self.known_total_pages(filters, per_page)
        if pages is not None and page > max(pages, 1):
            raise ValidationFailure(f"page {page} is past the last page ({pages})")

        params = {**_window_key(filters, per_page), "page": page}

        async def fetch() -> RecipePage:
            return await self.client.list(filters, page=page, per_page=per_page)

        result: RecipePage = await self.cache.get_or_fetch(LIST_KIND, params, fetch)
        # trust our own arithmetic over whatever the server echoed
        self.cache.set(PAGES_KIND, _window_key(filters, per_page), total_pages(result.meta.total, per_page))
        return result

    async def get_recipe(self, recipe_id: int) -> Recipe:
        async def fetch() -> Recipe:
            return await self.client.get(recipe_id)

        return await self.cache.get_or_fetch(DETAIL_KIND, {"id": recipe_id}, fetch)

    def _invalidate_lists(self) -> None:
        self.cache.invalidate(LIST_KIND)
        self.cache.invalidate(PAGES_KIND)

    async def create_recipe(self, data: RecipeInput) -> Recipe:
        recipe = await self.client.create(data)
        self._invalidate_lists()
        log.info("recipe created", extra={"recipe_id": recipe.id})
        return recipe

    async def update_recipe(self, recipe_id: int, data: RecipeInput) -> Recipe:
        recipe = await self.client.update(recipe_id, data)
        self._invalidate_lists()
        self.cache.set(DETAIL_KIND, {"id": recipe_id}, recipe)
        log.info("recipe updated", extra={"recipe_id": recipe_id})
        return recipe

    async def delete_recipe(self, recipe_id: int) -> None:
        await self.client.delete(recipe_id)
        self._invalidate_lists()
        self.cache.invalidate(DETAIL_KIND, {"id": recipe_id})
        log.info("recipe deleted", extra={"recipe_id": recipe_id})

    async def spin(self, filters: Optional[RecipeFilters] = None) -> Recipe:
        # every spin is a new draw
        return await self.client.spin(filters)
