"""
Plan generation state machine.

ANCHOR_RESOLVE -> GENERATE -> VALIDATE -> (REPAIR -> VALIDATE)* -> FALLBACK -> DONE

Only a failure of the GENERATE call propagates to the caller. Anchor
estimation and repair failures degrade towards the fallback meal, so a
usable plan always comes out of a successful GENERATE.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional

from mealplan.domain.Anchor import Anchor, MealSlotSetting
from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.Nutrition import NutritionVector
from mealplan.domain.Validation import PlanValidationError
from mealplan.logic.nutrition.math import plan_slot_targets, validate_plan_nutrition, within_tolerance
from mealplan.logic.planning.anchors import resolve_anchors
from mealplan.logic.planning.budget import build_fill_payload
from mealplan.logic.planning.fallback import build_fallback_meal
from mealplan.logic.planning.schemas import MealOut, PlanOut, RepairOut
from mealplan.utilities.config import (
    MAX_EXISTING_TITLES, MAX_REPAIR_ROUNDS, PLAN_DURATION_DAYS, REPAIR_TOLERANCE_PERCENT, TOLERANCE_PERCENT,
)
from mealplan.utilities.constants import DEFAULT_CHEAT_DAY_FREQUENCY, MEAL_TYPE_LABELS

logger = logging.getLogger(__name__)


class PlanStage(str, Enum):
    ANCHOR_RESOLVE = "anchor_resolve"
    GENERATE = "generate"
    VALIDATE = "validate"
    REPAIR = "repair"
    FALLBACK = "fallback"
    SKELETON = "skeleton"
    DETAIL = "detail"
    DONE = "done"


class TitleLedger:
    """Titles already used in the plan, handed to repair calls to avoid duplicates."""

    def __init__(self, limit: int = MAX_EXISTING_TITLES):
        self.limit = limit
        self._titles: List[str] = []

    def record(self, title: str) -> None:
        title = (title or '').strip()
        if title and title not in self._titles:
            self._titles.append(title)

    def record_days(self, days: Dict[str, DayPlan]) -> None:
        for date in sorted(days):
            for title in days[date].titles():
                self.record(title)

    def snapshot(self) -> List[str]:
        return self._titles[:self.limit]

    def __contains__(self, title: str) -> bool:
        return title in self._titles

    def __len__(self) -> int:
        return len(self._titles)


class PlanGenerationResult:
    def __init__(self, days: Dict[str, DayPlan], is_valid: bool, invalid_meals_count: int,
                 anchors: Optional[List[Anchor]] = None, stages: Optional[List[PlanStage]] = None):
        self.days = days
        self.is_valid = is_valid
        self.invalid_meals_count = invalid_meals_count
        self.anchors = anchors[:] if anchors else []
        self.stages = stages[:] if stages else []

    def __str__(self) -> str:
        return (f"PlanGenerationResult(days={len(self.days)}, valid={self.is_valid}, "
                f"invalid={self.invalid_meals_count})")

    __repr__ = __str__

    def to_dict(self) -> Dict:
        return {
            "days": {date: self.days[date].to_dict() for date in sorted(self.days)},
            "isValid": self.is_valid,
            "invalidMealsCount": self.invalid_meals_count,
            "anchors": [a.to_dict() for a in self.anchors],
            "stages": [s.value for s in self.stages],
        }


def days_from_output(output: PlanOut) -> Dict[str, DayPlan]:
    days = {}
    for day in output.days:
        meals = {meal_type: meal.to_slot() for meal_type, meal in day.meals.items()}
        days[day.date] = DayPlan(meals=meals, is_cheat_day=day.is_cheat_day)
    return days


def split_key(key: str):
    date, sep, meal_type = key.partition("_")
    return (date, meal_type) if sep else (None, None)


class PlanOrchestrator:
    """Drives one plan through generate, validate, repair and fallback.

    Args:
        generator: object with ``async generate(payload, output_schema)``.
        estimator: object with ``async estimate(description, daily_target)``.
        max_repair_rounds: repair/validate cycles before falling back.
    """

    def __init__(self, generator, estimator, *, tolerance_pct: float = TOLERANCE_PERCENT,
                 repair_tolerance_pct: float = REPAIR_TOLERANCE_PERCENT,
                 max_repair_rounds: int = MAX_REPAIR_ROUNDS,
                 max_existing_titles: int = MAX_EXISTING_TITLES):
        self.generator = generator
        self.estimator = estimator
        self.tolerance_pct = tolerance_pct
        self.repair_tolerance_pct = repair_tolerance_pct
        self.max_repair_rounds = max(0, max_repair_rounds)
        self.max_existing_titles = max_existing_titles

    async def run(self, start_date: str, daily_target: NutritionVector,
                  settings: Optional[Dict[str, MealSlotSetting]] = None, *,
                  duration: int = PLAN_DURATION_DAYS, disliked_ingredients: Optional[List[str]] = None,
                  feedback: str = "", preferences: Optional[Dict] = None,
                  cheat_day_frequency: str = DEFAULT_CHEAT_DAY_FREQUENCY) -> PlanGenerationResult:
        stages: List[PlanStage] = []
        disliked = list(disliked_ingredients or [])

        self._enter(stages, PlanStage.ANCHOR_RESOLVE)
        resolution = await resolve_anchors(settings or {}, daily_target, self.estimator)
        anchors = resolution.anchors
        targets = plan_slot_targets(daily_target, anchors)
        fixed_titles = resolution.fixed_titles()

        self._enter(stages, PlanStage.GENERATE)
        payload = build_fill_payload(start_date, duration, daily_target, anchors, disliked, feedback, preferences,
                                     cheat_day_frequency)
        output = await self.generator.generate(payload, PlanOut)
        days = days_from_output(output)
        ledger = TitleLedger(self.max_existing_titles)
        ledger.record_days(days)

        self._enter(stages, PlanStage.VALIDATE)
        result = validate_plan_nutrition(days, targets, self.tolerance_pct, fixed_titles)
        logger.info("Validation: %s", result)

        for round_no in range(1, self.max_repair_rounds + 1):
            if result.is_valid:
                break
            self._enter(stages, PlanStage.REPAIR)
            await self.repair(days, result.invalid_meals, targets, resolution.by_meal_type(), ledger, disliked)
            self._enter(stages, PlanStage.VALIDATE)
            result = validate_plan_nutrition(days, targets, self.tolerance_pct, fixed_titles)
            logger.info("Validation after repair round %d: %s", round_no, result)

        invalid_count = len(result.invalid_meals)
        if invalid_count:
            self._enter(stages, PlanStage.FALLBACK)
            apply_fallback(days, result.invalid_meals, targets)

        self._enter(stages, PlanStage.DONE)
        return PlanGenerationResult(days, invalid_count == 0, invalid_count, anchors, stages)

    async def repair(self, days: Dict[str, DayPlan], invalid_meals: List[PlanValidationError],
                     targets: Dict[str, NutritionVector], anchors: Dict[str, Anchor], ledger: TitleLedger,
                     disliked_ingredients: List[str]) -> int:
        """Regenerate every failing slot in one batched call.

        A candidate replaces its slot only when its calories are within the
        repair tolerance of the slot target. Candidates for keys that were not
        requested are dropped. If anything raises, no candidate is applied.

        Returns:
            Number of slots replaced.
        """
        requested = {err.key: err for err in invalid_meals}
        payload = self.build_repair_payload(invalid_meals, anchors, ledger, disliked_ingredients)
        logger.info("Repairing %d meal(s) in one batch", len(requested))

        try:
            output = await self.generator.generate(payload, RepairOut)
            accepted: Dict[str, MealOut] = {}
            for key, candidate in output.as_map().items():
                if key not in requested:
                    logger.warning("Dropping repair candidate for unknown slot %s", key)
                    continue
                date, meal_type = split_key(key)
                if date not in days or meal_type not in targets:
                    logger.warning("Dropping repair candidate for unknown slot %s", key)
                    continue
                target = targets[meal_type]
                if not within_tolerance(candidate.nutrition.calories, target.calories, self.repair_tolerance_pct):
                    logger.info("Rejected repair candidate for %s: %s kcal vs target %s kcal",
                                key, candidate.nutrition.calories, target.calories)
                    continue
                accepted[key] = candidate
        except Exception:
            logger.exception("Repair batch failed; %d meal(s) left for fallback", len(requested))
            return 0

        for key, candidate in accepted.items():
            date, meal_type = split_key(key)
            days[date].set_meal(meal_type, candidate.to_slot())
            ledger.record(candidate.title)
        logger.info("Repair accepted %d of %d meal(s)", len(accepted), len(requested))
        return len(accepted)

    @staticmethod
    def build_repair_payload(invalid_meals: List[PlanValidationError], anchors: Dict[str, Anchor],
                             ledger: TitleLedger, disliked_ingredients: List[str]) -> Dict:
        invalid = {}
        for err in invalid_meals:
            entry = {
                "date": err.date,
                "mealType": err.meal_type,
                "mealTypeLabel": MEAL_TYPE_LABELS.get(err.meal_type, err.meal_type),
                "target": err.target.to_dict(),
                "errors": err.errors,
            }
            anchor = anchors.get(err.meal_type)
            if anchor is not None:
                entry["constraint"] = anchor.constraint()
            invalid[err.key] = entry
        return {
            "task": "repair",
            "invalidMeals": invalid,
            "dislikedIngredients": list(disliked_ingredients),
            "existingTitles": ledger.snapshot(),
        }

    @staticmethod
    def _enter(stages: List[PlanStage], stage: PlanStage) -> None:
        stages.append(stage)
        logger.info("Plan generation stage: %s", stage.value)


def apply_fallback(days: Dict[str, DayPlan], invalid_meals: List[PlanValidationError],
                   targets: Dict[str, NutritionVector]) -> None:
    logger.warning("Applying fallback meal to %d slot(s)", len(invalid_meals))
    for err in invalid_meals:
        target = targets.get(err.meal_type, err.target)
        days[err.date].set_meal(err.meal_type, build_fallback_meal(err.meal_type, target))


__all__ = [
    'PlanStage', 'TitleLedger', 'PlanGenerationResult', 'PlanOrchestrator',
    'days_from_output', 'apply_fallback', 'split_key',
]
