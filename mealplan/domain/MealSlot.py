"""MealSlot domain entity: one meal of a day plan (title, nutrition, ingredients, steps)."""
from uuid import uuid4
from typing import List, Optional, Dict, Any
from mealplan.domain.Nutrition import NutritionVector


class IngredientLine:
    def __init__(self, name: str = "", amount: str = ""):
        self.name = name
        self.amount = amount

    def __str__(self) -> str:
        return f"{self.name} {self.amount}".strip()

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, IngredientLine):
            return NotImplemented
        return (self.name, self.amount) == (other.name, other.amount)

    @staticmethod
    def from_dict(data) -> "IngredientLine":
        if isinstance(data, str):
            # Older documents stored "name (amount)" or a bare name
            return IngredientLine(name=data.strip(), amount="")
        d = data if isinstance(data, dict) else {}
        return IngredientLine(name=str(d.get('name') or ''), amount=str(d.get('amount') or ''))

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "amount": self.amount}


class MealSlot:
    def __init__(self, title: str = "", nutrition: Optional[NutritionVector] = None, status: str = "planned",
                 tags: Optional[List[str]] = None, ingredients: Optional[List[IngredientLine]] = None,
                 steps: Optional[List[str]] = None, id: Optional[str] = None):
        self.id = id or f"recipe-{uuid4().hex[:12]}"
        self.title = title
        self.status = status
        self.nutrition = nutrition if nutrition is not None else NutritionVector.zero()
        self.tags = tags[:] if tags else []
        self.ingredients = ingredients[:] if ingredients else []
        self.steps = steps[:] if steps else []

    def has_details(self) -> bool:
        '''True when both the ingredient list and the steps are present.'''
        return bool(self.ingredients) and bool(self.steps)

    def __str__(self) -> str:
        return f"{self.title} [{self.status}] - {self.nutrition}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "MealSlot":
        d = dict(data) if isinstance(data, dict) else {}
        return MealSlot(
            id=d.get('id') or d.get('recipeId'),
            title=d.get('title', ''),
            status=d.get('status', 'planned'),
            nutrition=NutritionVector.from_dict(d.get('nutrition')),
            tags=list(d.get('tags') or []),
            ingredients=[IngredientLine.from_dict(i) for i in d.get('ingredients') or []],
            steps=[str(s) for s in d.get('steps') or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "nutrition": self.nutrition.to_dict(),
            "tags": self.tags,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "steps": self.steps,
        }
