"""Resolve user meal-slot settings into nutrition anchors."""
import logging
from typing import Dict, List, Optional

from mealplan.domain.Anchor import Anchor, MealSlotSetting
from mealplan.domain.Nutrition import NutritionVector
from mealplan.utilities.constants import MEAL_TYPES

logger = logging.getLogger(__name__)


class AnchorResolution:
    def __init__(self, anchors: Optional[List[Anchor]] = None):
        self.anchors = anchors[:] if anchors else []

    def by_meal_type(self) -> Dict[str, Anchor]:
        return {a.meal_type: a for a in self.anchors}

    def fixed_titles(self) -> Dict[str, str]:
        return {a.meal_type: a.resolved_title for a in self.anchors if a.is_fixed()}

    def __bool__(self) -> bool:
        return bool(self.anchors)

    def __str__(self) -> str:
        return f"AnchorResolution({', '.join(str(a) for a in self.anchors) or 'no anchors'})"

    __repr__ = __str__


async def resolve_anchors(settings: Dict[str, MealSlotSetting], daily_target: NutritionVector,
                          estimator) -> AnchorResolution:
    """Estimate the nutrition of every fixed or custom meal slot.

    Args:
        settings: slot setting per meal type; missing types count as auto.
        daily_target: the user's daily goal, given to the estimator as context.
        estimator: object with ``async estimate(description, daily_target)``.

    Returns:
        AnchorResolution. It is empty when every slot is auto, and also when
        any estimate fails: a fully generated plan is preferred over none.
    """
    pending = [(meal_type, settings[meal_type]) for meal_type in MEAL_TYPES
               if meal_type in settings and not settings[meal_type].is_auto()]
    if not pending:
        return AnchorResolution()

    anchors = []
    try:
        for meal_type, setting in pending:
            estimate = await estimator.estimate(setting.text, daily_target)
            anchors.append(Anchor(
                meal_type=meal_type,
                resolved_title=estimate.resolved_title,
                estimated_nutrition=estimate.nutrition.to_vector(),
                reason=estimate.reason,
                mode=setting.mode,
                text=setting.text,
            ))
    except Exception:
        logger.exception("Anchor estimation failed; treating every slot as auto")
        return AnchorResolution()

    logger.info("Resolved %d anchor(s): %s", len(anchors), ", ".join(a.meal_type for a in anchors))
    return AnchorResolution(anchors)


__all__ = ['AnchorResolution', 'resolve_anchors']
