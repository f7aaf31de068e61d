"""Nutrition aggregation over a stored plan."""
from typing import Any, Dict, Optional

from mealplan.domain.Nutrition import NutritionVector
from mealplan.utilities.constants import NUTRIENTS


def _round(vector: NutritionVector, digits: int = 1) -> Dict[str, float]:
    return {n: round(vector.get(n), digits) for n in NUTRIENTS}


def compute_plan_nutrition(plan, targets: Optional[NutritionVector] = None) -> Dict[str, Any]:
    """Aggregate nutrition stats for a plan.

    Returns structure:
    {
      'days': {
         '2024-01-01': {'isCheatDay': bool, 'total': {...}, 'meals': {'breakfast': {'title': str, 'nutrition': {...}}, ...}},
         ...
      },
      'plan_totals': {'calories', 'protein', 'fat', 'carbs'},
      'daily_average': average over non-cheat days,
      'deviation_percent': daily_average vs targets per nutrient (None without a target)
    }
    """
    empty = NutritionVector.zero()
    if plan is None or not getattr(plan, 'days', None):
        return {'days': {}, 'plan_totals': empty.to_dict(), 'daily_average': empty.to_dict(),
                'deviation_percent': None}

    days_result = {}
    totals = NutritionVector.zero()
    counted = NutritionVector.zero()
    counted_days = 0
    for date in plan.dates():
        day = plan.days[date]
        day_total = day.sum_meals()
        days_result[date] = {
            'isCheatDay': day.is_cheat_day,
            'total': day_total.to_dict(),
            'meals': {meal_type: {'title': meal.title, 'nutrition': meal.nutrition.to_dict()}
                      for meal_type, meal in day.present_meals()},
        }
        totals = totals + day_total
        if not day.is_cheat_day:
            counted = counted + day_total
            counted_days += 1

    average = NutritionVector.zero()
    if counted_days:
        average = NutritionVector(*(counted.get(n) / counted_days for n in NUTRIENTS))

    deviation = None
    if targets is not None and counted_days:
        deviation = {}
        for n in NUTRIENTS:
            expected = targets.get(n)
            deviation[n] = round((average.get(n) - expected) / expected * 100, 1) if expected else None

    return {
        'days': days_result,
        'plan_totals': totals.to_dict(),
        'daily_average': _round(average),
        'deviation_percent': deviation,
    }


__all__ = ['compute_plan_nutrition']
