"""Tests for the FastAPI server."""

import json
import pytest
from fastapi.testclient import TestClient

from pantryplan.api import server


RECIPES = [
    {"id": "omelette", "title": "Spinach Omelette",
     "ingredients": [{"name": "eggs", "amount": "3"}, {"name": "spinach", "amount": "1 cup"}],
     "cuisines": ["french"]},
    {"id": "stir-fry", "title": "Chicken Stir Fry",
     "ingredients": [{"name": "chicken breast"}, {"name": "rice"}]},
    {"id": "pasta", "title": "Tomato Pasta",
     "ingredients": [{"name": "spaghetti"}, {"name": "tomatoes"}], "cuisines": ["italian"]},
]


@pytest.fixture
def client(tmp_path, monkeypatch):
    path = tmp_path / "recipes.json"
    path.write_text(json.dumps({"recipes": RECIPES}))
    monkeypatch.setattr(server, "recipes_path", str(path))
    monkeypatch.delenv("PANTRYPLAN_AI_API_KEY", raising=False)
    return TestClient(server.app)


def _plan_body(**overrides):
    body = {
        "pantry": [
            {"name": "Spinach", "expiry_date": "2026-03-11", "category": "vegetables"},
            {"name": "Rice"},
        ],
        "recipes": RECIPES,
        "meals_per_day": 1,
        "now": "2026-03-10",
    }
    body.update(overrides)
    return body


class TestPlanEndpoint:
    def test_plan_week(self, client):
        response = client.post("/api/plan", json=_plan_body())

        assert response.status_code == 200
        data = response.json()
        assert data["strategy"] == "greedy"
        assert data["fill_report"] == {"slots_filled": 7, "slots_needed": 7}
        assert data["meals"][0]["recipe_id"] == "omelette"
        assert data["explanation"]
        assert "eggs" in data["shopping_list"]

    def test_selected_ids(self, client):
        response = client.post("/api/plan", json=_plan_body(selected_ids=["pasta"]))

        data = response.json()
        assert {m["recipe_id"] for m in data["meals"]} == {"pasta"}
        assert data["fill_report"]["slots_filled"] == 3
        assert data["warnings"]

    def test_pinned_slot(self, client):
        pinned = [{"day": 0, "meal_type": "breakfast", "recipe_id": "pasta"}]
        data = client.post("/api/plan", json=_plan_body(pinned=pinned)).json()

        assert data["meals"][0]["recipe_id"] == "pasta"
        assert data["meals"][0]["pinned"] is True

    def test_catalog_supplements_pool(self, client):
        body = _plan_body(recipes=[], use_catalog=True)
        data = client.post("/api/plan", json=body).json()
        assert data["fill_report"]["slots_filled"] > 0

    def test_ai_without_key_falls_back(self, client):
        data = client.post("/api/plan", json=_plan_body(use_ai=True)).json()
        assert data["strategy"] == "greedy"

    def test_no_recipes(self, client):
        response = client.post("/api/plan", json=_plan_body(recipes=[]))
        assert response.status_code == 422

    @pytest.mark.parametrize("overrides", [
        {"meals_per_day": 4},
        {"pinned": [{"day": 7, "meal_type": "lunch", "recipe_id": "pasta"}]},
        {"pinned": [{"day": 0, "meal_type": "brunch", "recipe_id": "pasta"}]},
    ])
    def test_validation_errors(self, client, overrides):
        response = client.post("/api/plan", json=_plan_body(**overrides))
        assert response.status_code == 422


class TestRecipesEndpoint:
    def test_list_recipes(self, client):
        response = client.get("/api/recipes")

        assert response.status_code == 200
        assert response.json()[0] == {"id": "omelette", "title": "Spinach Omelette", "cuisines": ["french"]}
        assert len(response.json()) == 3

    def test_missing_file(self, client, monkeypatch):
        monkeypatch.setattr(server, "recipes_path", "/nonexistent/recipes.json")
        assert client.get("/api/recipes").status_code == 500
