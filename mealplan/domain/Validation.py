"""Nutrition validation results for a generated plan."""
from typing import List, Dict, Any
from mealplan.domain.Nutrition import NutritionVector


class PlanValidationError:
    '''One meal slot whose nutrition fell outside the tolerance band of its target.'''

    def __init__(self, date: str, meal_type: str, actual: NutritionVector, target: NutritionVector,
                 errors: List[str]):
        self.date = date
        self.meal_type = meal_type
        self.actual = actual
        self.target = target
        self.errors = errors[:]

    @property
    def key(self) -> str:
        return f"{self.date}_{self.meal_type}"

    def __str__(self) -> str:
        return f"{self.key}: {'; '.join(self.errors)}"

    __repr__ = __str__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "mealType": self.meal_type,
            "actual": self.actual.to_dict(),
            "target": self.target.to_dict(),
            "errors": self.errors,
        }


class ValidationResult:
    def __init__(self, invalid_meals: List[PlanValidationError], total_meals: int):
        self.invalid_meals = invalid_meals[:]
        self.total_meals = total_meals

    @property
    def is_valid(self) -> bool:
        return not self.invalid_meals

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "totalMeals": self.total_meals,
            "validMeals": self.total_meals - len(self.invalid_meals),
            "invalidMeals": len(self.invalid_meals),
        }

    def __str__(self) -> str:
        s = self.summary
        return f"{s['validMeals']}/{s['totalMeals']} meals valid"

    __repr__ = __str__
