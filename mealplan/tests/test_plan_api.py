import tempfile
import unittest
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from mealplan.api.api_run import app
from mealplan.api.deps import get_lifecycle
from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.domain.Nutrition import NutritionVector
from mealplan.logic.planning.orchestrator import days_from_output
from mealplan.logic.planning.schemas import PlanOut

from generation_stubs import ScriptedGenerator, dates, make_lifecycle, plan_response

DAYS = dates("2024-01-01", 3)
HEADERS = {"X-User-Id": "u1"}


class TestPlanAPI(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.lifecycle = make_lifecycle(Path(self.tmp.name), ScriptedGenerator(plan=plan_response(DAYS)))
        app.dependency_overrides[get_lifecycle] = lambda: self.lifecycle
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.tmp.cleanup()

    def _store_plan(self, status="pending", user_id="u1"):
        days = days_from_output(PlanOut.model_validate(plan_response(DAYS)))
        return self.lifecycle.plans.create(user_id, DAYS[0], days, status)

    def test_user_header_required(self):
        resp = self.client.get("/api/plan/active")
        self.assertEqual(resp.status_code, 401)

    def test_no_plans_yet(self):
        self.assertEqual(self.client.get("/api/plan/active", headers=HEADERS).json(), {"plan": None})
        self.assertEqual(self.client.get("/api/plan/pending", headers=HEADERS).json(), {"plan": None})

    def test_pending_plan_document(self):
        plan = self._store_plan()
        data = self.client.get("/api/plan/pending", headers=HEADERS).json()["plan"]
        self.assertEqual(data["id"], plan.id)
        self.assertEqual(data["status"], "pending")
        self.assertEqual(list(data["days"]), DAYS)
        self.assertEqual(data["days"][DAYS[0]]["totalNutrition"]["calories"], 1800)

    def test_generate_while_creating(self):
        self.lifecycle.users.try_start_creating("u1")
        resp = self.client.post("/api/plan/generate", headers=HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "already_creating")

    def test_approve_errors(self):
        self.assertEqual(self.client.post("/api/plan/missing/approve", headers=HEADERS).status_code, 404)
        other = self._store_plan(user_id="u2")
        self.assertEqual(self.client.post(f"/api/plan/{other.id}/approve", headers=HEADERS).status_code, 403)
        archived = self._store_plan(status="archived")
        self.assertEqual(self.client.post(f"/api/plan/{archived.id}/approve", headers=HEADERS).status_code, 400)

    def test_reject_without_body(self):
        plan = self._store_plan()
        resp = self.client.post(f"/api/plan/{plan.id}/reject", headers=HEADERS)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])
        self.assertEqual(self.lifecycle.plans.get(plan.id).status, "archived")
        self.assertIsNone(self.lifecycle.users.get_or_create("u1")["planRejectionFeedback"])

    def test_reject_with_feedback(self):
        plan = self._store_plan()
        resp = self.client.post(f"/api/plan/{plan.id}/reject", headers=HEADERS,
                                json={"feedback": " 辛いものは避けて "})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.lifecycle.users.get_or_create("u1")["planRejectionFeedback"], "辛いものは避けて")

    def test_swap_meal(self):
        plan = self._store_plan(status="active")
        body = {
            "date": DAYS[1],
            "meal_type": "dinner",
            "meal": {
                "title": "鯖の味噌煮",
                "nutrition": {"calories": 650, "protein": 40, "fat": 25, "carbs": 60},
                "ingredients": [{"name": "鯖", "amount": "1切れ"}],
                "steps": ["煮る", " "],
            },
        }
        resp = self.client.post(f"/api/plan/{plan.id}/swap", headers=HEADERS, json=body)
        self.assertEqual(resp.status_code, 200, resp.text)
        day = resp.json()["day"]
        self.assertEqual(day["meals"]["dinner"]["status"], "swapped")
        self.assertEqual(day["meals"]["dinner"]["steps"], ["煮る"])
        self.assertEqual(day["totalNutrition"], {"calories": 1730, "protein": 112, "fat": 55, "carbs": 180})

    def test_swap_rejects_bad_input(self):
        plan = self._store_plan(status="active")
        body = {"date": DAYS[0], "meal_type": "brunch",
                "meal": {"title": "x", "nutrition": {"calories": 100}}}
        self.assertEqual(self.client.post(f"/api/plan/{plan.id}/swap", headers=HEADERS, json=body).status_code, 422)
        body.update(meal_type="lunch", date="2031-01-01")
        self.assertEqual(self.client.post(f"/api/plan/{plan.id}/swap", headers=HEADERS, json=body).status_code, 400)

    def test_plan_nutrition(self):
        plan = self._store_plan()
        resp = self.client.get(f"/api/plan/{plan.id}/nutrition", headers=HEADERS)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["plan_totals"]["calories"], 5400)
        self.assertEqual(data["daily_average"]["protein"], 120)
        # default goal is 100 g protein
        self.assertEqual(data["deviation_percent"]["protein"], 20.0)
        self.assertEqual(self.client.get("/api/plan/nope/nutrition", headers=HEADERS).status_code, 404)
        self.assertEqual(self.client.get(f"/api/plan/{plan.id}/nutrition",
                                         headers={"X-User-Id": "u2"}).status_code, 403)

    def test_update_settings(self):
        resp = self.client.put("/api/user/settings", headers=HEADERS, json={
            "nutrition": {"calories": 2100, "protein": 140, "fat": 60, "carbs": 230},
            "meal_settings": {"lunch": {"mode": "custom", "text": " 麺類 "}},
            "disliked_ingredients": ["パクチー", " パクチー ", "", "セロリ"],
        })
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data["nutrition"]["calories"], 2100)
        self.assertEqual(data["mealSettings"]["lunch"], {"mode": "custom", "text": "麺類"})
        self.assertEqual(data["mealSettings"]["breakfast"], {"mode": "auto", "text": ""})
        self.assertEqual(data["dislikedIngredients"], ["パクチー", "セロリ"])
        self.assertEqual(data["cheatDayFrequency"], "weekly")

        resp = self.client.put("/api/user/settings", headers=HEADERS, json={"cheat_day_frequency": "biweekly"})
        self.assertEqual(resp.json()["cheatDayFrequency"], "biweekly")
        self.assertEqual(self.lifecycle.users.cheat_day_frequency("u1"), "biweekly")

        bad = self.client.put("/api/user/settings", headers=HEADERS,
                              json={"meal_settings": {"brunch": {"mode": "fixed", "text": "x"}}})
        self.assertEqual(bad.status_code, 422)
        bad = self.client.put("/api/user/settings", headers=HEADERS, json={"cheat_day_frequency": "daily"})
        self.assertEqual(bad.status_code, 422)

    def test_shopping_list_endpoints(self):
        plan = self._store_plan(status="active")
        self.assertEqual(self.client.get(f"/api/shopping-list/{plan.id}", headers=HEADERS).status_code, 404)

        self.lifecycle.create_shopping_list(plan.id)
        data = self.client.get(f"/api/shopping-list/{plan.id}", headers=HEADERS).json()
        self.assertEqual(data["planId"], plan.id)
        self.assertEqual(data["items"][0]["ingredient"], "鶏むね肉")

        toggled = self.client.post(f"/api/shopping-list/{plan.id}/toggle", headers=HEADERS,
                                   json={"index": 0, "checked": True})
        self.assertEqual(toggled.status_code, 200)
        self.assertTrue(toggled.json()["checked"])
        out_of_range = self.client.post(f"/api/shopping-list/{plan.id}/toggle", headers=HEADERS,
                                        json={"index": 7, "checked": True})
        self.assertEqual(out_of_range.status_code, 400)
        negative = self.client.post(f"/api/shopping-list/{plan.id}/toggle", headers=HEADERS,
                                    json={"index": -1, "checked": True})
        self.assertEqual(negative.status_code, 422)

        grouped = self.client.get(f"/api/shopping-list/{plan.id}/by-category", headers=HEADERS).json()
        self.assertEqual(list(grouped), ["肉類"])
        self.assertTrue(grouped["肉類"][0]["checked"])

    def test_shopping_list_pantry_items(self):
        day = DayPlan(meals={"dinner": MealSlot(
            title="冷奴",
            nutrition=NutritionVector(200, 15, 10, 5),
            ingredients=[IngredientLine("豆腐", "1丁"), IngredientLine("醤油", "小さじ1")],
        )})
        plan = self.lifecycle.plans.create("u1", DAYS[0], {DAYS[0]: day}, "active")
        self.lifecycle.create_shopping_list(plan.id)
        grouped = self.client.get(f"/api/shopping-list/{plan.id}/by-category", headers=HEADERS).json()
        self.assertIn("基本調味料・常備品 (お家にあれば購入不要)", grouped)
        self.assertEqual(grouped["基本調味料・常備品 (お家にあれば購入不要)"][0]["ingredient"], "醤油")


@pytest.mark.asyncio
async def test_generate_approve_flow(tmp_path):
    generator = ScriptedGenerator(
        plan=plan_response(DAYS),
        recipe_detail={"ingredients": [{"name": "卵", "amount": "1個"}], "steps": ["ゆでる"]},
    )
    lifecycle = make_lifecycle(tmp_path, generator)
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.post("/api/plan/generate", headers=HEADERS)
            assert resp.json()["status"] == "started"
            await lifecycle.wait_idle()

            pending = (await ac.get("/api/plan/pending", headers=HEADERS)).json()["plan"]
            assert pending["isValid"] is True

            resp = await ac.post(f"/api/plan/{pending['id']}/approve", headers=HEADERS)
            assert resp.status_code == 200
            await lifecycle.wait_idle()

            active = (await ac.get("/api/plan/active", headers=HEADERS)).json()["plan"]
            assert active["id"] == pending["id"]
            shopping = (await ac.get(f"/api/shopping-list/{active['id']}", headers=HEADERS)).json()
            assert [i["ingredient"] for i in shopping["items"]] == ["鶏むね肉"]
    finally:
        app.dependency_overrides.clear()
