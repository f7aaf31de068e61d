"""
Two-phase plan generation for longer horizons.

Phase 1 asks for a coarse skeleton of the whole horizon (titles, main
ingredients and approximate calories per meal) together with ingredient
pools shared across contiguous date ranges. Phase 2 expands every day into
full recipes, concurrently, one call per day.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from mealplan.domain.Anchor import MealSlotSetting
from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.Nutrition import NutritionVector
from mealplan.logic.nutrition.math import round_half_up, scale_target_to_calories, split_daily_target
from mealplan.logic.planning.budget import horizon_dates, slot_constraints
from mealplan.logic.planning.fallback import build_fallback_meal
from mealplan.logic.planning.orchestrator import PlanGenerationResult, PlanStage
from mealplan.logic.planning.schemas import (
    DayDetailOut, DaySkeletonOut, IngredientPoolOut, MealSkeletonOut, WeeklySkeletonOut,
)
from mealplan.utilities.config import DETAIL_CONCURRENCY, PLAN_DURATION_DAYS
from mealplan.utilities.constants import DEFAULT_CHEAT_DAY_FREQUENCY, SNACK_MACRO_RATIOS

logger = logging.getLogger(__name__)


def find_pool(pools: List[IngredientPoolOut], date: str) -> Optional[IngredientPoolOut]:
    '''The pool whose period contains date; the first pool when none does.'''
    for pool in pools:
        if pool.covers(date):
            return pool
    return pools[0] if pools else None


def snack_target(approx_calories: float) -> NutritionVector:
    return NutritionVector(
        calories=approx_calories,
        protein=round_half_up(approx_calories * SNACK_MACRO_RATIOS["protein"]),
        fat=round_half_up(approx_calories * SNACK_MACRO_RATIOS["fat"]),
        carbs=round_half_up(approx_calories * SNACK_MACRO_RATIOS["carbs"]),
    )


def day_targets(day: DaySkeletonOut, meal_targets: Dict[str, NutritionVector]) -> Dict[str, NutritionVector]:
    """Rescale each meal target to the skeleton's approximate calories.

    P/F/C keep the proportions of the 20/40/40 split target; a snack, which has no
    split target, gets fixed grams per kcal.
    """
    targets = {}
    for meal_type in ("breakfast", "lunch", "dinner", "snack"):
        skeleton_meal: Optional[MealSkeletonOut] = getattr(day.meals, meal_type)
        if skeleton_meal is None:
            continue
        if meal_type == "snack":
            targets[meal_type] = snack_target(skeleton_meal.approx_calories)
        else:
            targets[meal_type] = scale_target_to_calories(meal_targets[meal_type], skeleton_meal.approx_calories)
    return targets


class SkeletonExpander:
    def __init__(self, generator, *, concurrency: int = DETAIL_CONCURRENCY):
        self.generator = generator
        self.concurrency = max(1, concurrency)

    async def run(self, start_date: str, daily_target: NutritionVector, *, duration: int = PLAN_DURATION_DAYS,
                  disliked_ingredients: Optional[List[str]] = None, feedback: str = "",
                  preferences: Optional[Dict] = None, settings: Optional[Dict[str, MealSlotSetting]] = None,
                  cheat_day_frequency: str = DEFAULT_CHEAT_DAY_FREQUENCY) -> PlanGenerationResult:
        stages = [PlanStage.SKELETON]
        disliked = list(disliked_ingredients or [])
        constraints = slot_constraints(settings)
        meal_targets = split_daily_target(daily_target)

        logger.info("Phase 1: generating skeleton for %d day(s)", duration)
        payload = {
            "task": "skeleton",
            "dates": horizon_dates(start_date, duration),
            "dailyTarget": daily_target.to_dict(),
            "slotTargets": {m: t.to_dict() for m, t in meal_targets.items()},
            "dislikedIngredients": disliked,
            "cheatDayFrequency": cheat_day_frequency,
            **constraints,
        }
        if feedback:
            payload["feedback"] = feedback
        if preferences:
            payload["preferences"] = preferences
        skeleton: WeeklySkeletonOut = await self.generator.generate(payload, WeeklySkeletonOut)

        stages.append(PlanStage.DETAIL)
        logger.info("Phase 2: expanding %d day(s), at most %d at a time", len(skeleton.days), self.concurrency)
        semaphore = asyncio.Semaphore(self.concurrency)
        expanded = await asyncio.gather(*(
            self._expand_day(day, skeleton.ingredient_pools, meal_targets, disliked, constraints, semaphore)
            for day in skeleton.days
        ))

        days: Dict[str, DayPlan] = {}
        invalid_count = 0
        for date, day_plan, failed in expanded:
            days[date] = day_plan
            invalid_count += failed
        if invalid_count:
            stages.append(PlanStage.FALLBACK)

        report_unused_pool_items(skeleton.ingredient_pools, days)
        stages.append(PlanStage.DONE)
        return PlanGenerationResult(days, invalid_count == 0, invalid_count, stages=stages)

    async def _expand_day(self, day: DaySkeletonOut, pools: List[IngredientPoolOut],
                          meal_targets: Dict[str, NutritionVector], disliked: List[str],
                          constraints: Dict, semaphore: asyncio.Semaphore):
        pool = find_pool(pools, day.date)
        targets = day_targets(day, meal_targets)
        payload = {
            "task": "day_detail",
            "date": day.date,
            "skeleton": day.meals.model_dump(exclude_none=True),
            "targets": {m: t.to_dict() for m, t in targets.items()},
            "pool": list(pool.ingredients) if pool else [],
            "dislikedIngredients": disliked,
            **constraints,
        }
        try:
            async with semaphore:
                detail: DayDetailOut = await self.generator.generate(payload, DayDetailOut)
        except Exception:
            logger.exception("Detail generation failed for %s; using fallback meals", day.date)
            meals = {m: build_fallback_meal(m, t) for m, t in targets.items()}
            return day.date, DayPlan(meals=meals, is_cheat_day=day.is_cheat_day), len(meals)

        meals = {}
        for meal_type in targets:
            detailed = getattr(detail.meals, meal_type)
            if detailed is None:
                continue
            skeleton_meal = getattr(day.meals, meal_type)
            meals[meal_type] = detailed.to_slot(tags=skeleton_meal.main_ingredients)
        return day.date, DayPlan(meals=meals, is_cheat_day=day.is_cheat_day), 0


def report_unused_pool_items(pools: List[IngredientPoolOut], days: Dict[str, DayPlan]) -> List[str]:
    '''Pool usage is advisory; unused items are only logged.'''
    unused = []
    for pool in pools:
        names = [line.name for date, day in days.items() if pool.covers(date)
                 for _, meal in day.present_meals() for line in meal.ingredients]
        for item in pool.ingredients:
            if not any(item in name or name in item for name in names if name):
                unused.append(item)
    if unused:
        logger.info("Pool items not used by any recipe: %s", ", ".join(unused))
    return unused


__all__ = ['SkeletonExpander', 'find_pool', 'day_targets', 'snack_target', 'report_unused_pool_items']
