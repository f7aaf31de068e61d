import pytest

from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.Nutrition import NutritionVector
from mealplan.logic.planning.orchestrator import PlanStage
from mealplan.logic.planning.schemas import DaySkeletonOut, IngredientPoolOut, MealOut
from mealplan.logic.planning.skeleton import (
    SkeletonExpander, day_targets, find_pool, report_unused_pool_items, snack_target,
)
from mealplan.logic.nutrition.math import split_daily_target
from mealplan.utilities.constants import FALLBACK_TAG
from mealplan.utilities.errors import GenerationError

from generation_stubs import ScriptedGenerator, dates, meal

DAILY = NutritionVector(1800, 120, 50, 200)
START = "2024-03-01"
DAYS = dates(START, 10)


def skeleton_day(d, snack=False):
    meals = {
        "breakfast": {"title": f"朝 {d}", "main_ingredients": ["卵"], "approx_calories": 400},
        "lunch": {"title": f"昼 {d}", "main_ingredients": ["鶏むね肉"], "approx_calories": 700},
        "dinner": {"title": f"夜 {d}", "main_ingredients": ["鮭"], "approx_calories": 700},
    }
    if snack:
        meals["snack"] = {"title": f"間食 {d}", "main_ingredients": ["ヨーグルト"], "approx_calories": 200}
    return {"date": d, "meals": meals}


SKELETON = {
    "days": [skeleton_day(d) for d in DAYS],
    "ingredient_pools": [
        {"period": "2024-03-01 to 2024-03-05", "ingredients": ["鶏むね肉", "卵"], "strategy": "前半"},
        {"period": "2024-03-06 to 2024-03-10", "ingredients": ["鮭", "豆腐"], "strategy": "後半"},
    ],
}


def detail_for(payload):
    d = payload["date"]
    return {"date": d, "meals": {
        m: meal(payload["skeleton"][m]["title"], *(t[k] for k in ("calories", "protein", "fat", "carbs")))
        for m, t in payload["targets"].items()
    }}


def test_day_targets_rescale_to_skeleton_calories():
    day = DaySkeletonOut.model_validate(skeleton_day("2024-03-01"))
    targets = day_targets(day, split_daily_target(DAILY))
    # breakfast 360/24/10/40 re-anchored to 400 kcal
    assert targets["breakfast"] == NutritionVector(400, 27, 11, 44)
    assert targets["lunch"] == NutritionVector(700, 47, 19, 78)
    assert "snack" not in targets


def test_snack_target_uses_fixed_ratios():
    assert snack_target(200) == NutritionVector(200, 20, 10, 30)
    day = DaySkeletonOut.model_validate(skeleton_day("2024-03-01", snack=True))
    assert day_targets(day, split_daily_target(DAILY))["snack"] == NutritionVector(200, 20, 10, 30)


def test_find_pool_by_period_then_first():
    pools = [IngredientPoolOut.model_validate(p) for p in SKELETON["ingredient_pools"]]
    assert find_pool(pools, "2024-03-07").strategy == "後半"
    assert find_pool(pools, "2024-03-05").strategy == "前半"
    assert find_pool(pools, "2024-04-01").strategy == "前半"
    assert find_pool([], "2024-03-01") is None


def test_malformed_period_never_covers():
    pool = IngredientPoolOut(period="March", ingredients=["米"])
    assert pool.covers("2024-03-01") is False


@pytest.mark.asyncio
async def test_expands_every_day_with_its_pool():
    generator = ScriptedGenerator(skeleton=SKELETON, day_detail=detail_for)
    result = await SkeletonExpander(generator).run(START, DAILY, duration=10, disliked_ingredients=["セロリ"])

    assert result.is_valid is True
    assert sorted(result.days) == DAYS
    assert result.stages == [PlanStage.SKELETON, PlanStage.DETAIL, PlanStage.DONE]
    detail_calls = {p["date"]: p for p in generator.calls_for("day_detail")}
    assert len(detail_calls) == 10
    assert detail_calls["2024-03-02"]["pool"] == ["鶏むね肉", "卵"]
    assert detail_calls["2024-03-09"]["pool"] == ["鮭", "豆腐"]
    assert detail_calls["2024-03-09"]["dislikedIngredients"] == ["セロリ"]
    lunch = result.days["2024-03-04"].meals["lunch"]
    assert lunch.title == "昼 2024-03-04"
    assert lunch.tags == ["鶏むね肉"]
    assert generator.calls_for("skeleton")[0]["dates"] == DAYS


@pytest.mark.asyncio
async def test_failed_day_gets_fallback_meals():
    def detail_or_fail(payload):
        if payload["date"] == "2024-03-03":
            return GenerationError("bad json")
        return detail_for(payload)

    generator = ScriptedGenerator(skeleton=SKELETON, day_detail=detail_or_fail)
    result = await SkeletonExpander(generator).run(START, DAILY, duration=10)

    assert result.is_valid is False
    assert result.invalid_meals_count == 3
    failed_day = result.days["2024-03-03"]
    assert all(FALLBACK_TAG in m.tags for _, m in failed_day.present_meals())
    assert failed_day.meals["breakfast"].nutrition == NutritionVector(400, 27, 11, 44)
    assert FALLBACK_TAG not in result.days["2024-03-04"].meals["breakfast"].tags
    assert PlanStage.FALLBACK in result.stages


@pytest.mark.asyncio
async def test_detail_calls_respect_concurrency_limit():
    generator = ScriptedGenerator(skeleton=SKELETON, day_detail=detail_for)
    generator.delay = 0.01
    await SkeletonExpander(generator, concurrency=2).run(START, DAILY, duration=10)
    assert generator.max_in_flight == 2
    assert len(generator.calls_for("day_detail")) == 10


@pytest.mark.asyncio
async def test_skeleton_failure_propagates():
    generator = ScriptedGenerator(skeleton=GenerationError("down"))
    with pytest.raises(GenerationError):
        await SkeletonExpander(generator).run(START, DAILY, duration=10)


def test_unused_pool_items_are_reported():
    slot = MealOut.model_validate(meal("鶏の照り焼き", 700, 47, 19, 78)).to_slot()
    days = {"2024-03-02": DayPlan(meals={"lunch": slot})}
    pools = [IngredientPoolOut.model_validate(p) for p in SKELETON["ingredient_pools"]]
    assert report_unused_pool_items(pools, days) == ["卵", "鮭", "豆腐"]
