"""Nutrition arithmetic for the planning pipeline.

Pure functions: splitting a daily goal into per-meal targets, relative
tolerance checks and whole-plan validation. Nothing here performs I/O.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.MealSlot import MealSlot
from mealplan.domain.Nutrition import NutritionVector
from mealplan.domain.Validation import PlanValidationError, ValidationResult
from mealplan.utilities.config import TOLERANCE_PERCENT
from mealplan.utilities.constants import MEAL_RATIOS, MEAL_TYPES, NUTRIENTS


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _scale(vector: NutritionVector, factor: float) -> NutritionVector:
    return NutritionVector(*(round_half_up(vector.get(n) * factor) for n in NUTRIENTS))


def split_daily_target(daily: NutritionVector) -> Dict[str, NutritionVector]:
    """Split a daily goal 20/40/40 across breakfast, lunch and dinner.

    Each component is rounded to the nearest integer on its own; the rounding
    error is not redistributed, so the three targets may not add up exactly.
    """
    return {meal_type: _scale(daily, MEAL_RATIOS[meal_type]) for meal_type in MEAL_TYPES}


def within_tolerance(actual: float, target: float, pct: float = TOLERANCE_PERCENT) -> bool:
    if target == 0:
        return actual == 0
    deviation = abs(actual - target)
    allowed = abs(target) * pct / 100
    # 115 vs 100 must pass even though 115 - 100 is not exact in binary
    return deviation <= allowed or math.isclose(deviation, allowed, rel_tol=1e-9)


def validate_meal(meal: MealSlot, target: NutritionVector, pct: float = TOLERANCE_PERCENT) -> List[str]:
    '''Returns one message per nutrient outside the tolerance band; empty when the meal passes.'''
    errors = []
    for nutrient in NUTRIENTS:
        actual = meal.nutrition.get(nutrient)
        expected = target.get(nutrient)
        if within_tolerance(actual, expected, pct):
            continue
        if expected == 0:
            errors.append(f"{nutrient}: expected 0, got {actual}")
            continue
        diff = (actual - expected) / expected * 100
        direction = "over" if diff > 0 else "under"
        errors.append(f"{nutrient}: {abs(diff):.1f}% {direction} target ({actual} vs {expected})")
    return errors


def _is_fixed_menu(title: str, fixed: Optional[str]) -> bool:
    return bool(fixed) and (title == fixed or fixed in title)


def validate_plan_nutrition(days: Dict[str, DayPlan], targets: Dict[str, NutritionVector],
                            pct: float = TOLERANCE_PERCENT,
                            fixed_titles: Optional[Dict[str, str]] = None) -> ValidationResult:
    """Check every meal of every non-cheat day against its slot target.

    Args:
        days: plan days keyed by ISO date.
        targets: per meal type target; meal types without a target are not checked.
        pct: tolerance in percent.
        fixed_titles: fixed menu title per meal type; a meal of that type whose
            title equals or contains it is accepted as is.

    Returns:
        ValidationResult listing one PlanValidationError per failing slot.
    """
    fixed_titles = fixed_titles or {}
    invalid: List[PlanValidationError] = []
    total = 0
    for date in sorted(days):
        day = days[date]
        if day.is_cheat_day:
            continue
        for meal_type, meal in day.present_meals():
            target = targets.get(meal_type)
            if target is None:
                continue
            total += 1
            if _is_fixed_menu(meal.title, fixed_titles.get(meal_type)):
                continue
            errors = validate_meal(meal, target, pct)
            if errors:
                invalid.append(PlanValidationError(date, meal_type, meal.nutrition.copy(), target, errors))
    return ValidationResult(invalid, total)


def recompute_day_totals(day: DayPlan) -> DayPlan:
    day.total_nutrition = day.sum_meals()
    return day


def scale_target_to_calories(target: NutritionVector, approx_calories: float) -> NutritionVector:
    '''Re-anchors a target to an approximate calorie count, keeping its P/F/C proportions.'''
    ratio = approx_calories / target.calories if target.calories else 1
    return NutritionVector(
        calories=approx_calories,
        protein=round_half_up(target.protein * ratio),
        fat=round_half_up(target.fat * ratio),
        carbs=round_half_up(target.carbs * ratio),
    )


def plan_slot_targets(daily: NutritionVector, anchors=None) -> Dict[str, NutritionVector]:
    """Per meal type targets used to validate a generated plan.

    Anchor slots target their own estimate; the remaining budget is shared
    by the auto slots in proportion to their usual ratios.
    """
    anchors = list(anchors or [])
    if not anchors:
        return split_daily_target(daily)
    targets = {a.meal_type: a.estimated_nutrition.copy() for a in anchors if a.meal_type in MEAL_TYPES}
    remaining = daily.copy()
    for estimate in targets.values():
        remaining = remaining - estimate
    remaining = remaining.floor_at_zero()
    auto_types = [m for m in MEAL_TYPES if m not in targets]
    share = sum(MEAL_RATIOS[m] for m in auto_types)
    for meal_type in auto_types:
        targets[meal_type] = _scale(remaining, MEAL_RATIOS[meal_type] / share)
    return targets


__all__ = [
    'round_half_up', 'split_daily_target', 'within_tolerance', 'validate_meal', 'validate_plan_nutrition',
    'recompute_day_totals', 'scale_target_to_calories', 'plan_slot_targets',
]
