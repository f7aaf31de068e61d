"""
Request schemas of the HTTP layer.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.domain.Nutrition import NutritionVector


class NutritionInput(BaseModel):
    calories: float = Field(..., ge=0, le=20000)
    protein: float = Field(0, ge=0, le=2000)
    fat: float = Field(0, ge=0, le=2000)
    carbs: float = Field(0, ge=0, le=3000)

    def to_vector(self) -> NutritionVector:
        return NutritionVector.from_dict(self.model_dump())


class IngredientInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: str = Field("", max_length=50)

    @field_validator('name', 'amount')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v


class MealInput(BaseModel):
    """Schema of a meal a user puts into a plan by hand."""
    title: str = Field(..., min_length=1, max_length=200)
    nutrition: NutritionInput
    tags: List[str] = Field(default_factory=list)
    ingredients: List[IngredientInput] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Meal title cannot be empty')
        return v.strip()

    @field_validator('tags', 'steps')
    @classmethod
    def drop_blank(cls, v):
        return [s.strip() for s in v if s and s.strip()]

    def to_slot(self) -> MealSlot:
        return MealSlot(
            title=self.title,
            nutrition=self.nutrition.to_vector(),
            tags=self.tags,
            ingredients=[IngredientLine(i.name, i.amount) for i in self.ingredients],
            steps=self.steps,
        )


class SwapMealInput(BaseModel):
    date: str = Field(..., pattern=r'^\d{4}-\d{2}-\d{2}$')
    meal_type: str = Field(..., pattern=r'^(breakfast|lunch|dinner|snack)$')
    meal: MealInput


class RejectPlanInput(BaseModel):
    feedback: Optional[str] = Field(None, max_length=1000)

    @field_validator('feedback')
    @classmethod
    def blank_to_none(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip()


class ShoppingToggleInput(BaseModel):
    index: int = Field(..., ge=0)
    checked: bool


class MealSlotSettingInput(BaseModel):
    mode: str = Field("auto", pattern=r'^(auto|fixed|custom)$')
    text: str = Field("", max_length=200)

    @field_validator('text')
    @classmethod
    def strip_text(cls, v):
        return v.strip()


class UserSettingsInput(BaseModel):
    """Schema for the planning inputs stored on the user."""
    nutrition: Optional[NutritionInput] = None
    meal_settings: Optional[Dict[str, MealSlotSettingInput]] = None
    disliked_ingredients: Optional[List[str]] = None
    cheat_day_frequency: Optional[str] = Field(None, pattern=r'^(weekly|biweekly)$')

    @field_validator('meal_settings')
    @classmethod
    def known_meal_types(cls, v):
        if v is None:
            return v
        unknown = set(v) - {"breakfast", "lunch", "dinner"}
        if unknown:
            raise ValueError(f"Unknown meal type(s): {', '.join(sorted(unknown))}")
        return v

    @field_validator('disliked_ingredients')
    @classmethod
    def clean_dislikes(cls, v):
        if v is None:
            return v
        seen = []
        for item in v:
            item = (item or '').strip()
            if item and item not in seen:
                seen.append(item)
        return seen
