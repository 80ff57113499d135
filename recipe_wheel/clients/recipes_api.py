# recipe_wheel/clients/recipes_api.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from recipe_wheel.core import config
from recipe_wheel.core.errors import (
    EmptyResultError,
    NotFoundError,
    RemoteApiError,
    TransportError,
    ValidationFailure,
)
from recipe_wheel.core.request_context import forwarded_headers
from recipe_wheel.models.recipe import Recipe, RecipeFilters, RecipeInput, RecipePage
from recipe_wheel.models.spin import SpinResponse

log = logging.getLogger("recipe_wheel.api")


def _error_message(resp: httpx.Response) -> str:
    # the API answers failures with {"error": "..."}
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.reason_phrase


class RecipesApiClient:
    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout_s: float = config.API_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        not_found: type[NotFoundError] = NotFoundError,
    ) -> httpx.Response:
        headers = forwarded_headers()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.request(
                    method, f"{self.base_url}{path}", params=params, json=json, headers=headers
                )
        except httpx.TransportError as e:
            log.warning("recipes api unreachable", extra={"method": method, "path": path})
            raise TransportError(f"{method} {path} failed: {e!r}") from e
        except httpx.RequestError as e:
            # undecodable body or too many redirects
            log.warning("recipes api bad response", extra={"method": method, "path": path})
            raise RemoteApiError(f"{method} {path} failed: {e!r}") from e

        if r.is_success:
            return r

        message = _error_message(r)
        log.info(
            "recipes api error",
            extra={"method": method, "path": path, "status_code": r.status_code},
        )
        if r.status_code == 404:
            raise not_found(message, status_code=404)
        if r.status_code in (400, 422):
            raise ValidationFailure(message, status_code=r.status_code)
        raise RemoteApiError(message, status_code=r.status_code)

    @staticmethod
    def _recipe_from(r: httpx.Response) -> Recipe:
        try:
            return Recipe.model_validate(r.json()["data"])
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            raise RemoteApiError(f"unexpected recipe payload: {e}", status_code=r.status_code) from e

    async def list(
        self,
        filters: Optional[RecipeFilters] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> RecipePage:
        params = (filters or RecipeFilters()).to_params()
        if page:
            params["page"] = page
        if per_page:
            params["per_page"] = per_page

        r = await self._request("GET", "/recipes", params=params)
        try:
            return RecipePage.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise RemoteApiError(f"unexpected list payload: {e}", status_code=r.status_code) from e

    async def get(self, recipe_id: int) -> Recipe:
        r = await self._request("GET", f"/recipes/{int(recipe_id)}")
        return self._recipe_from(r)

    async def create(self, recipe: RecipeInput) -> Recipe:
        r = await self._request("POST", "/recipes", json=recipe.model_dump(mode="json", exclude_none=True))
        return self._recipe_from(r)

    async def update(self, recipe_id: int, recipe: RecipeInput) -> Recipe:
        r = await self._request(
            "PUT",
            f"/recipes/{int(recipe_id)}",
            json=recipe.model_dump(mode="json", exclude_none=True),
        )
        return self._recipe_from(r)

    async def delete(self, recipe_id: int) -> None:
        await self._request("DELETE", f"/recipes/{int(recipe_id)}")

    async def spin(self, filters: Optional[RecipeFilters] = None) -> Recipe:
        body = (filters or RecipeFilters()).to_params()
        r = await self._request("POST", "/spin", json=body, not_found=EmptyResultError)
        try:
            return SpinResponse.model_validate(r.json()).recipe
        except (ValueError, ValidationError) as e:
            raise RemoteApiError(f"unexpected spin payload: {e}", status_code=r.status_code) from e
