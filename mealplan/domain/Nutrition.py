"""NutritionVector value object: calories (kcal), protein, fat and carbs (g)."""
from typing import Dict, Any, Optional

# Key synonyms accepted when reading documents written by other tools
_SYNONYMS = {
    'calories': ('calories', 'kcal', 'calories_per_serving'),
    'protein': ('protein',),
    'fat': ('fat', 'fats'),
    'carbs': ('carbs', 'carbohydrates'),
}


def _number(value) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    return int(n) if n.is_integer() else n


class NutritionVector:
    __slots__ = ('calories', 'protein', 'fat', 'carbs')

    def __init__(self, calories: float = 0, protein: float = 0, fat: float = 0, carbs: float = 0):
        self.calories = calories
        self.protein = protein
        self.fat = fat
        self.carbs = carbs

    @classmethod
    def zero(cls) -> "NutritionVector":
        return cls(0, 0, 0, 0)

    def __add__(self, other: "NutritionVector") -> "NutritionVector":
        return NutritionVector(self.calories + other.calories, self.protein + other.protein,
                               self.fat + other.fat, self.carbs + other.carbs)

    def __sub__(self, other: "NutritionVector") -> "NutritionVector":
        return NutritionVector(self.calories - other.calories, self.protein - other.protein,
                               self.fat - other.fat, self.carbs - other.carbs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NutritionVector):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def floor_at_zero(self) -> "NutritionVector":
        '''Clamps every component to a minimum of 0.'''
        return NutritionVector(max(self.calories, 0), max(self.protein, 0),
                               max(self.fat, 0), max(self.carbs, 0))

    def copy(self) -> "NutritionVector":
        return NutritionVector(self.calories, self.protein, self.fat, self.carbs)

    def get(self, nutrient: str) -> float:
        return getattr(self, nutrient)

    def __str__(self) -> str:
        return f"{self.calories}kcal, P{self.protein}g, F{self.fat}g, C{self.carbs}g"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "NutritionVector":
        '''Creates a NutritionVector from a dictionary; unknown or missing keys count as 0.'''
        d = data if isinstance(data, dict) else {}
        values = {}
        for field, keys in _SYNONYMS.items():
            raw = next((d[k] for k in keys if d.get(k) is not None), 0)
            values[field] = _number(raw)
        return NutritionVector(**values)

    def to_dict(self) -> Dict[str, float]:
        return {
            'calories': self.calories,
            'protein': self.protein,
            'fat': self.fat,
            'carbs': self.carbs,
        }
