"""
Output schemas the generation service must satisfy, one per generation task.

A response that does not validate against its schema is rejected as a
whole; nothing is partially applied.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.domain.Nutrition import NutritionVector


class NutritionOut(BaseModel):
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)

    def to_vector(self) -> NutritionVector:
        return NutritionVector.from_dict(self.model_dump())


class IngredientOut(BaseModel):
    name: str = Field(..., min_length=1)
    amount: str = ""

    @field_validator('name', 'amount')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class MealOut(BaseModel):
    """A fully described meal."""
    title: str = Field(..., min_length=1)
    nutrition: NutritionOut
    tags: List[str] = Field(default_factory=list)
    ingredients: List[IngredientOut] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)

    @field_validator('steps')
    @classmethod
    def drop_empty_steps(cls, v):
        return [step.strip() for step in v if step and step.strip()]

    def to_slot(self, tags: Optional[List[str]] = None) -> MealSlot:
        return MealSlot(
            title=self.title.strip(),
            nutrition=self.nutrition.to_vector(),
            tags=list(tags if tags is not None else self.tags),
            ingredients=[IngredientLine(i.name, i.amount) for i in self.ingredients],
            steps=list(self.steps),
        )


class MealsOut(BaseModel):
    breakfast: MealOut
    lunch: MealOut
    dinner: MealOut
    snack: Optional[MealOut] = None

    def items(self):
        for meal_type in ("breakfast", "lunch", "dinner", "snack"):
            meal = getattr(self, meal_type)
            if meal is not None:
                yield meal_type, meal


class DayOut(BaseModel):
    date: str = Field(..., pattern=r'^\d{4}-\d{2}-\d{2}$')
    is_cheat_day: bool = False
    meals: MealsOut


class PlanOut(BaseModel):
    """Answer to the 'plan' task: every day of the horizon."""
    days: List[DayOut] = Field(..., min_length=1)


class RepairCandidate(BaseModel):
    key: str = Field(..., description="'{date}_{mealType}', e.g. 2024-01-01_breakfast")
    recipe: MealOut


class RepairOut(BaseModel):
    """Answer to the 'repair' task: one replacement per failing slot."""
    meals: List[RepairCandidate] = Field(default_factory=list)

    def as_map(self) -> Dict[str, MealOut]:
        return {c.key.strip(): c.recipe for c in self.meals}


class MealSkeletonOut(BaseModel):
    title: str = Field(..., min_length=1)
    main_ingredients: List[str] = Field(default_factory=list)
    approx_calories: float = Field(..., ge=0)


class SkeletonMealsOut(BaseModel):
    breakfast: MealSkeletonOut
    lunch: MealSkeletonOut
    dinner: MealSkeletonOut
    snack: Optional[MealSkeletonOut] = None


class DaySkeletonOut(BaseModel):
    date: str = Field(..., pattern=r'^\d{4}-\d{2}-\d{2}$')
    is_cheat_day: bool = False
    meals: SkeletonMealsOut


class IngredientPoolOut(BaseModel):
    period: str = Field(..., description="'YYYY-MM-DD to YYYY-MM-DD'")
    ingredients: List[str] = Field(default_factory=list)
    strategy: str = ""

    def covers(self, date: str) -> bool:
        '''ISO dates compare correctly as strings.'''
        start, sep, end = self.period.partition(" to ")
        if not sep:
            return False
        return start.strip() <= date <= end.strip()


class WeeklySkeletonOut(BaseModel):
    """Answer to the 'skeleton' task."""
    days: List[DaySkeletonOut] = Field(..., min_length=1)
    ingredient_pools: List[IngredientPoolOut] = Field(default_factory=list)


class DayDetailOut(BaseModel):
    """Answer to the 'day_detail' task."""
    date: str
    meals: MealsOut


class RecipeDetailOut(BaseModel):
    """Answer to the 'recipe_detail' task."""
    ingredients: List[IngredientOut] = Field(..., min_length=1)
    steps: List[str] = Field(..., min_length=1)


class EstimateOut(BaseModel):
    """Answer to the 'estimate' task."""
    resolved_title: str = Field(..., min_length=1)
    nutrition: NutritionOut
    reason: str = ""


__all__ = [
    'NutritionOut', 'IngredientOut', 'MealOut', 'MealsOut', 'DayOut', 'PlanOut',
    'RepairCandidate', 'RepairOut', 'MealSkeletonOut', 'SkeletonMealsOut', 'DaySkeletonOut',
    'IngredientPoolOut', 'WeeklySkeletonOut', 'DayDetailOut', 'RecipeDetailOut', 'EstimateOut',
]
