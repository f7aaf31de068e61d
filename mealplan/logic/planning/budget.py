"""Remaining nutrition budget and the constraint payload of the fill stage."""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from mealplan.domain.Anchor import Anchor, MealSlotSetting
from mealplan.domain.Nutrition import NutritionVector
from mealplan.logic.nutrition.math import plan_slot_targets
from mealplan.utilities.constants import DEFAULT_CHEAT_DAY_FREQUENCY


def compute_remaining_budget(daily: NutritionVector, anchors: Iterable[Anchor]) -> NutritionVector:
    '''Daily target minus the anchors' nutrition, each component floored at 0.'''
    remaining = daily.copy()
    for anchor in anchors:
        remaining = remaining - anchor.estimated_nutrition
    return remaining.floor_at_zero()


def horizon_dates(start_date: str, duration: int) -> List[str]:
    start = date.fromisoformat(start_date)
    return [(start + timedelta(days=i)).isoformat() for i in range(duration)]


def build_fill_payload(start_date: str, duration: int, daily: NutritionVector, anchors: List[Anchor],
                       disliked_ingredients: Optional[List[str]] = None, feedback: str = "",
                       preferences: Optional[Dict] = None,
                       cheat_day_frequency: str = DEFAULT_CHEAT_DAY_FREQUENCY) -> Dict:
    """Constraint payload for the GENERATE call.

    Anchor slots are handed over pre-filled and must come back unchanged on
    every day; the auto slots share the remaining budget.
    """
    remaining = compute_remaining_budget(daily, anchors)
    slot_targets = plan_slot_targets(daily, anchors)
    payload = {
        "task": "plan",
        "dates": horizon_dates(start_date, duration),
        "dailyTarget": daily.to_dict(),
        "remainingBudget": remaining.to_dict(),
        "slotTargets": {meal_type: t.to_dict() for meal_type, t in slot_targets.items()},
        "anchors": {
            a.meal_type: {
                "title": a.resolved_title,
                "nutrition": a.estimated_nutrition.to_dict(),
                "constraint": a.constraint(),
            }
            for a in anchors
        },
        "dislikedIngredients": list(disliked_ingredients or []),
        "cheatDayFrequency": cheat_day_frequency,
    }
    if feedback:
        payload["feedback"] = feedback
    if preferences:
        payload["preferences"] = preferences
    return payload


def slot_constraints(settings: Optional[Dict[str, MealSlotSetting]]) -> Dict:
    """User meal settings as the generator sees them when no anchors are resolved.

    Fixed slots become 'fixedMeals' entries carrying the menu title, custom
    slots become free-text 'mealConstraints'. Auto slots are left out.
    """
    fixed, constraints = {}, {}
    for meal_type, setting in (settings or {}).items():
        if setting.is_auto():
            continue
        if setting.mode == "fixed":
            fixed[meal_type] = {"title": setting.text}
        else:
            constraints[meal_type] = setting.text
    result = {}
    if fixed:
        result["fixedMeals"] = fixed
    if constraints:
        result["mealConstraints"] = constraints
    return result


__all__ = ['compute_remaining_budget', 'horizon_dates', 'build_fill_payload', 'slot_constraints']
