"""Deterministic substitute meal used when generation and repair both missed a slot's target."""
from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.domain.Nutrition import NutritionVector
from mealplan.utilities.constants import (
    FALLBACK_INGREDIENTS, FALLBACK_STEPS, FALLBACK_TAG, FALLBACK_TAGS, FALLBACK_TITLE, MEAL_TYPE_LABELS,
)


def build_fallback_meal(meal_type: str, target: NutritionVector) -> MealSlot:
    # nutrition is the target itself, so the slot validates by construction
    label = MEAL_TYPE_LABELS.get(meal_type, meal_type)
    return MealSlot(
        title=f"{FALLBACK_TITLE} ({label})",
        nutrition=target.copy(),
        tags=list(FALLBACK_TAGS),
        ingredients=[IngredientLine(name, amount) for name, amount in FALLBACK_INGREDIENTS],
        steps=list(FALLBACK_STEPS),
    )


def is_fallback(meal: MealSlot) -> bool:
    return FALLBACK_TAG in meal.tags


__all__ = ['build_fallback_meal', 'is_fallback']
