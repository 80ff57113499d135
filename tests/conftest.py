from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional

import httpx
import pytest

from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.models.recipe import CATEGORIES, VARIANTS, Recipe
from recipe_wheel.services.cache import QueryCache
from recipe_wheel.services.catalog import CatalogService

BASE_URL = "http://api.test/api"

EDITABLE = (
    "title", "description", "ingredients", "instructions", "cooking_time",
    "skill_level", "category_id", "variant_id", "servings", "image_url",
)


def make_recipe(recipe_id: int, title: str, **overrides: Any) -> Dict[str, Any]:
    row = {
        "id": recipe_id,
        "title": title,
        "description": f"{title}, the house version",
        "ingredients": "Rice 2 cups, Eggs 2, Garlic 3 cloves",
        "instructions": "Heat the pan\nFry the garlic\n\nAdd rice and eggs",
        "cooking_time": 20,
        "skill_level": "beginner",
        "category_id": 1,
        "category_name": CATEGORIES[1],
        "variant_id": 1,
        "variant_name": VARIANTS[1],
        "servings": 2,
    }
    row.update(overrides)
    return row


class FakeRecipesApi:
    """In-memory stand-in for the recipes REST API, served through httpx.MockTransport."""

    def __init__(self, recipes: Optional[List[Dict[str, Any]]] = None):
        self.recipes: Dict[int, Dict[str, Any]] = {r["id"]: dict(r) for r in recipes or []}
        self.next_id = max(self.recipes, default=0) + 1
        self.requests: List[httpx.Request] = []
        self.spin_pick: Optional[int] = None
        self.down = False

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == "/api" + path)

    def _matches(self, f: Dict[str, Any]) -> List[Dict[str, Any]]:
        out = []
        for r in sorted(self.recipes.values(), key=lambda r: r["id"]):
            if f.get("search") and f["search"].lower() not in (r["title"] + " " + r["description"]).lower():
                continue
            if f.get("skill_level") and r["skill_level"] != f["skill_level"]:
                continue
            if f.get("category_id") and r["category_id"] != int(f["category_id"]):
                continue
            if f.get("variant_id") and r["variant_id"] != int(f["variant_id"]):
                continue
            if f.get("max_cooking_time") and r["cooking_time"] > int(f["max_cooking_time"]):
                continue
            out.append(r)
        return out

    def _with_names(self, body: Dict[str, Any], recipe_id: int) -> Dict[str, Any]:
        row = {k: body.get(k) for k in EDITABLE if body.get(k) is not None}
        row["id"] = recipe_id
        row["category_name"] = CATEGORIES.get(row.get("category_id"), "")
        row["variant_name"] = VARIANTS.get(row.get("variant_id"), "")
        return row

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path.removeprefix("/api")
        parts = [p for p in path.split("/") if p]

        if parts == ["recipes"] and request.method == "GET":
            q = dict(request.url.params)
            page = int(q.get("page", 1))
            per_page = int(q.get("per_page", 10))
            rows = self._matches(q)
            start = (page - 1) * per_page
            return httpx.Response(200, json={
                "data": rows[start:start + per_page],
                "meta": {
                    "total": len(rows),
                    "page": page,
                    "per_page": per_page,
                    "total_pages": math.ceil(len(rows) / per_page),
                },
            })

        if parts == ["recipes"] and request.method == "POST":
            body = json.loads(request.content)
            if not body.get("title"):
                return httpx.Response(400, json={"error": "invalid parameters: title is required"})
            recipe_id = self.next_id
            self.next_id += 1
            self.recipes[recipe_id] = self._with_names(body, recipe_id)
            return httpx.Response(201, json={"data": self.recipes[recipe_id]})

        if len(parts) == 2 and parts[0] == "recipes":
            recipe_id = int(parts[1])
            if recipe_id not in self.recipes:
                return httpx.Response(404, json={"error": "recipe not found"})
            if request.method == "GET":
                return httpx.Response(200, json={"data": self.recipes[recipe_id]})
            if request.method == "PUT":
                self.recipes[recipe_id] = self._with_names(json.loads(request.content), recipe_id)
                return httpx.Response(200, json={"data": self.recipes[recipe_id]})
            if request.method == "DELETE":
                del self.recipes[recipe_id]
                return httpx.Response(200, json={"message": "recipe deleted successfully"})

        if parts == ["spin"] and request.method == "POST":
            rows = self._matches(json.loads(request.content or b"{}"))
            if not rows:
                return httpx.Response(404, json={"error": "no recipes match the criteria"})
            picked = next((r for r in rows if r["id"] == self.spin_pick), rows[0])
            return httpx.Response(200, json={"recipe": picked})

        return httpx.Response(500, json={"error": "unexpected request"})


def sample_recipes() -> List[Dict[str, Any]]:
    titles = [
        "Soto Ayam", "Rendang", "Gado-Gado", "Nasi Goreng",
        "Sate Ayam", "Bakso", "Pisang Goreng", "Mie Goreng",
    ]
    # Nasi Goreng gets id 7 and lands at index 3 of the wheel
    ids = [1, 2, 3, 7, 9, 10, 11, 12]
    return [make_recipe(i, t) for i, t in zip(ids, titles)]


@pytest.fixture
def fake_api() -> FakeRecipesApi:
    return FakeRecipesApi(sample_recipes())


@pytest.fixture
def api_client(fake_api: FakeRecipesApi) -> RecipesApiClient:
    return RecipesApiClient(base_url=BASE_URL, timeout_s=1, transport=httpx.MockTransport(fake_api))


@pytest.fixture
def catalog(api_client: RecipesApiClient) -> CatalogService:
    return CatalogService(api_client, QueryCache())


def as_recipe(row: Dict[str, Any]) -> Recipe:
    return Recipe.model_validate(row)
