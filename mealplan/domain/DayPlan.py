"""DayPlan domain entity: the meals of one calendar day and their summed nutrition."""
from typing import Dict, Any, Optional
from mealplan.domain.MealSlot import MealSlot
from mealplan.domain.Nutrition import NutritionVector
from mealplan.utilities.constants import MEAL_TYPES, OPTIONAL_MEAL_TYPES


class DayPlan:
    def __init__(self, meals: Optional[Dict[str, MealSlot]] = None, is_cheat_day: bool = False,
                 total_nutrition: Optional[NutritionVector] = None):
        self.is_cheat_day = is_cheat_day
        self.meals: Dict[str, MealSlot] = dict(meals or {})
        self.total_nutrition = total_nutrition if total_nutrition is not None else self.sum_meals()

    def present_meals(self):
        '''Yields (meal_type, slot) for present slots in breakfast, lunch, dinner, snack order.'''
        for meal_type in MEAL_TYPES + OPTIONAL_MEAL_TYPES:
            slot = self.meals.get(meal_type)
            if slot is not None:
                yield meal_type, slot

    def set_meal(self, meal_type: str, slot: MealSlot) -> "DayPlan":
        '''Replaces one slot and refreshes the day totals.'''
        self.meals[meal_type] = slot
        self.total_nutrition = self.sum_meals()
        return self

    def sum_meals(self) -> NutritionVector:
        total = NutritionVector.zero()
        for _, slot in self.present_meals():
            total = total + slot.nutrition
        return total

    def titles(self):
        return [slot.title for _, slot in self.present_meals()]

    def __str__(self) -> str:
        cheat = " (cheat day)" if self.is_cheat_day else ""
        return f"DayPlan{cheat}: {', '.join(self.titles())} - {self.total_nutrition}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "DayPlan":
        d = dict(data) if isinstance(data, dict) else {}
        raw_meals = d.get('meals') or {}
        meals = {k: MealSlot.from_dict(v) for k, v in raw_meals.items()
                 if k in MEAL_TYPES + OPTIONAL_MEAL_TYPES and v}
        total = d.get('totalNutrition')
        return DayPlan(
            meals=meals,
            is_cheat_day=bool(d.get('isCheatDay', False)),
            total_nutrition=NutritionVector.from_dict(total) if total else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isCheatDay": self.is_cheat_day,
            "meals": {meal_type: slot.to_dict() for meal_type, slot in self.present_meals()},
            "totalNutrition": self.total_nutrition.to_dict(),
        }
