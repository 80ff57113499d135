from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from conftest import FakeRecipesApi
from recipe_wheel.clients.recipes_api import RecipesApiClient
from recipe_wheel.core import config
from recipe_wheel.main import create_app

NEW_RECIPE = {
    "title": "Klepon",
    "description": "Pandan rice cake balls",
    "ingredients": "Glutinous rice flour, Palm sugar, Grated coconut",
    "instructions": "Knead the dough\nFill with sugar\nBoil until they float",
    "cooking_time": "40",
    "servings": "4",
    "skill_level": "intermediate",
    "category_id": "4",
    "variant_id": "3",
    "image_url": "",
}


@pytest.fixture
def client(api_client: RecipesApiClient) -> Iterator[TestClient]:
    with TestClient(create_app(client=api_client)) as c:
        yield c


def test_dashboard_shows_total_and_latest(client: TestClient, fake_api: FakeRecipesApi):
    r = client.get("/")
    assert r.status_code == 200
    assert '<strong class="total">8</strong>' in r.text
    assert "Soto Ayam" in r.text
    assert "Gado-Gado" in r.text
    assert "Nasi Goreng" not in r.text
    assert 'href="/spin"' in r.text
    assert dict(fake_api.requests[-1].url.params) == {"page": "1", "per_page": "6"}


def test_list_page(client: TestClient):
    r = client.get("/recipes")
    assert r.status_code == 200
    assert "Nasi Goreng" in r.text
    assert "Soto Ayam" in r.text
    assert r.headers["X-Request-ID"]


def test_list_page_clamps_known_last_page(client: TestClient, fake_api: FakeRecipesApi):
    client.get("/recipes")
    r = client.get("/recipes", params={"page": 5})
    assert r.status_code == 200
    assert "Soto Ayam" in r.text
    assert dict(fake_api.requests[-1].url.params)["page"] == "1"


def test_list_page_rejects_unknown_skill_level(client: TestClient):
    r = client.get("/recipes", params={"skill_level": "expert"})
    assert r.status_code == 400


def test_detail_page_splits_ingredients_and_steps(client: TestClient):
    r = client.get("/recipes/7")
    assert r.status_code == 200
    assert "<li>Eggs 2</li>" in r.text
    assert "<li>Add rice and eggs</li>" in r.text
    assert r.text.count("<li>") == 6


def test_detail_page_not_found(client: TestClient):
    r = client.get("/recipes/404")
    assert r.status_code == 404
    assert "Recipe not found." in r.text


def test_create_recipe_from_form(client: TestClient, fake_api: FakeRecipesApi):
    client.get("/recipes")
    r = client.post("/recipes", data=NEW_RECIPE, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/recipes"

    created = fake_api.recipes[13]
    assert created["category_name"] == "Dessert"
    assert created["cooking_time"] == 40
    assert "image_url" not in created

    assert "Klepon" in client.get("/recipes").text


def test_create_recipe_invalid_form_rerenders(client: TestClient, fake_api: FakeRecipesApi):
    r = client.post("/recipes", data={**NEW_RECIPE, "title": "  ", "servings": "0"})
    assert r.status_code == 400
    assert "title" in r.text
    assert "servings" in r.text
    assert fake_api.count("POST", "/recipes") == 0


def test_new_and_edit_forms(client: TestClient):
    r = client.get("/recipes/new")
    assert r.status_code == 200
    assert 'action="/recipes"' in r.text

    r = client.get("/recipes/7/edit")
    assert r.status_code == 200
    assert 'action="/recipes/7/edit"' in r.text
    assert 'value="Nasi Goreng"' in r.text


def test_update_recipe_from_form(client: TestClient):
    client.get("/recipes/7")
    r = client.post("/recipes/7/edit", data={**NEW_RECIPE, "title": "Nasi Goreng Kampung"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/recipes/7"
    assert "Nasi Goreng Kampung" in client.get("/recipes/7").text


def test_delete_recipe_refreshes_listing(client: TestClient):
    assert "Nasi Goreng" in client.get("/recipes/7").text
    assert "Nasi Goreng" in client.get("/recipes").text

    r = client.post("/recipes/7/delete", follow_redirects=False)
    assert r.status_code == 303

    assert "Nasi Goreng" not in client.get("/recipes").text
    assert client.get("/recipes/7").status_code == 404
    assert client.post("/recipes/7/delete").status_code == 404


def test_api_down_shows_retry(client: TestClient, fake_api: FakeRecipesApi):
    fake_api.down = True
    r = client.get("/recipes", params={"search": "soto"})
    assert r.status_code == 502
    assert "Try again" in r.text


def test_spin_page_renders_wheel(client: TestClient):
    r = client.get("/spin")
    assert r.status_code == 200
    assert r.text.count('class="segment"') == 8
    assert config.SESSION_COOKIE in r.cookies


def test_spin_page_without_matches(client: TestClient):
    r = client.get("/spin", params={"search": "durian"})
    assert r.status_code == 200
    assert "No recipes found matching your filters." in r.text

    status = client.post("/api/spin").json()
    assert status["state"] == "idle"
    assert status["started"] is False
    assert status["error"]["kind"] == "empty"


def test_spin_api_cycle(client: TestClient, fake_api: FakeRecipesApi):
    client.get("/spin", params={"skill_level": "beginner", "max_cooking_time": "30"})
    fake_api.spin_pick = 7

    status = client.post("/api/spin").json()
    assert status["started"] is True
    assert status["state"] == "animating"
    assert status["recipe"]["id"] == 7
    assert status["rotation"] % 360 == pytest.approx(247.5)
    assert len(status["segments"]) == 8

    again = client.post("/api/spin").json()
    assert again["started"] is False
    assert fake_api.count("POST", "/spin") == 1

    r = client.put("/api/spin/filters", json={"category_id": 2})
    assert r.status_code == 409

    assert client.post("/api/spin/complete").json()["state"] == "revealed"
    assert client.get("/api/spin").json()["recipe"]["title"] == "Nasi Goreng"

    dismissed = client.post("/api/spin/dismiss").json()
    assert dismissed["dismissed"] is True
    assert dismissed["state"] == "idle"
    assert dismissed["recipe"] is None


def test_spin_filters_update(client: TestClient):
    client.get("/spin")
    r = client.put("/api/spin/filters", json={"search": "goreng", "variant_id": 0})
    assert r.status_code == 200
    body = r.json()
    assert body["filters"]["search"] == "goreng"
    assert body["filters"]["variant_id"] is None
    assert [s["label"] for s in body["segments"]] == ["Nasi Goreng", "Pisang Goreng", "Mie Goreng"]


def test_spin_session_close(client: TestClient):
    client.get("/spin")
    assert client.delete("/api/spin").status_code == 204
    assert len(client.app.state.spin_sessions) == 0


def test_spin_polls_do_not_open_sessions(client: TestClient):
    for _ in range(50):
        status = client.get("/api/spin").json()
        assert status["state"] == "idle"
        assert status["segments"] == []
    assert client.post("/api/spin/complete").json()["state"] == "idle"
    assert client.post("/api/spin/dismiss").json()["dismissed"] is False
    assert len(client.app.state.spin_sessions) == 0

    client.get("/spin")
    assert len(client.app.state.spin_sessions) == 1


def test_health(client: TestClient, fake_api: FakeRecipesApi):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/version").json()["version"] == config.APP_VERSION

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["recipes_api"]["status"] == "ok"

    fake_api.down = True
    ready = client.get("/health/ready")
    assert ready.status_code == 503
    assert ready.json()["status"] == "fail"
