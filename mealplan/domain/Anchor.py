"""Meal slot settings chosen by the user and the anchors resolved from them."""
from typing import Dict, Any, Optional
from mealplan.domain.Nutrition import NutritionVector
from mealplan.utilities.constants import SLOT_MODES


class MealSlotSetting:
    def __init__(self, mode: str = "auto", text: str = ""):
        self.mode = mode if mode in SLOT_MODES else "auto"
        self.text = (text or "").strip()

    def is_auto(self) -> bool:
        # A fixed/custom slot without text carries no constraint
        return self.mode == "auto" or not self.text

    def __str__(self) -> str:
        return f"{self.mode}: {self.text}" if self.text else self.mode

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "MealSlotSetting":
        d = data if isinstance(data, dict) else {}
        return MealSlotSetting(mode=d.get('mode', 'auto'), text=d.get('text', ''))

    def to_dict(self) -> Dict[str, str]:
        return {"mode": self.mode, "text": self.text}


class Anchor:
    '''A meal slot whose content and nutrition are decided by the user rather than generated.'''

    def __init__(self, meal_type: str, resolved_title: str, estimated_nutrition: NutritionVector,
                 reason: str = "", mode: str = "fixed", text: str = ""):
        self.meal_type = meal_type
        self.resolved_title = resolved_title
        self.estimated_nutrition = estimated_nutrition
        self.reason = reason
        self.mode = mode
        self.text = text

    def is_fixed(self) -> bool:
        return self.mode == "fixed"

    def constraint(self) -> Dict[str, str]:
        '''The user's constraint restated for prompts that must not regress it.'''
        return {"mode": self.mode, "text": self.text, "resolvedTitle": self.resolved_title}

    def __str__(self) -> str:
        return f"Anchor {self.meal_type}: {self.resolved_title} ({self.estimated_nutrition})"

    __repr__ = __str__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mealType": self.meal_type,
            "resolvedTitle": self.resolved_title,
            "estimatedNutrition": self.estimated_nutrition.to_dict(),
            "reason": self.reason,
            "mode": self.mode,
            "text": self.text,
        }
