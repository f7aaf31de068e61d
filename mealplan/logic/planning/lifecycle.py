"""
Caller-facing plan lifecycle: pending -> active | archived.

Generation and post-approval work run as background tasks because they span
several generation-service round trips. A persisted per-user flag (with a
lease) keeps at most one generation running per user.
"""
import asyncio
import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Set

from mealplan.domain.MealSlot import MealSlot
from mealplan.domain.Plan import Plan
from mealplan.domain.ShoppingList import ShoppingItem, ShoppingList
from mealplan.events.event_helpers import (
    publish_generation_failed, publish_generation_started, publish_plan_approved,
    publish_plan_generated, publish_plan_rejected, publish_shopping_list_created,
)
from mealplan.infra.Plan_Repository import PlanRepository
from mealplan.infra.ShoppingList_Repository import ShoppingListRepository
from mealplan.infra.User_Repository import UserRepository
from mealplan.logic.planning.backfill import backfill_plan_details
from mealplan.logic.planning.orchestrator import PlanGenerationResult, PlanOrchestrator
from mealplan.logic.planning.skeleton import SkeletonExpander
from mealplan.logic.shopping.list_builder import build_shopping_list, group_by_category
from mealplan.utilities.config import PLAN_DURATION_DAYS, TWO_PHASE_MIN_DAYS
from mealplan.utilities.constants import MEAL_TYPES, OPTIONAL_MEAL_TYPES, PLAN_STATUS_MESSAGES
from mealplan.utilities.errors import PlanAccessError, PlanNotFoundError, PlanStateError

logger = logging.getLogger(__name__)


class PlanLifecycle:
    def __init__(self, generator=None, estimator=None, *, plans: Optional[PlanRepository] = None,
                 users: Optional[UserRepository] = None, shopping_lists: Optional[ShoppingListRepository] = None,
                 duration: int = PLAN_DURATION_DAYS, two_phase_min_days: int = TWO_PHASE_MIN_DAYS,
                 orchestrator: Optional[PlanOrchestrator] = None, expander: Optional[SkeletonExpander] = None,
                 today: Callable[[], date] = date.today, backfill_options: Optional[Dict] = None):
        if generator is None:
            from mealplan.infra.ai_generator import OpenAIGenerator
            generator = OpenAIGenerator()
        if estimator is None:
            from mealplan.infra.nutrition_estimator import make_estimator
            estimator = make_estimator(generator)
        self.generator = generator
        self.plans = plans or PlanRepository()
        self.users = users or UserRepository()
        self.shopping_lists = shopping_lists or ShoppingListRepository()
        self.duration = duration
        self.two_phase_min_days = two_phase_min_days
        self.orchestrator = orchestrator or PlanOrchestrator(generator, estimator)
        self.expander = expander or SkeletonExpander(generator)
        self.today = today
        self.backfill_options = dict(backfill_options or {})
        self._tasks: Set[asyncio.Task] = set()

    # === Background tasks ===
    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every background task started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # === Generation ===
    async def generate_plan(self, user_id: str) -> Dict[str, str]:
        if not self.users.try_start_creating(user_id):
            logger.info("Plan generation already in progress for user %s", user_id)
            return {"status": "already_creating", "message": PLAN_STATUS_MESSAGES["already_creating"]}
        logger.info("Started plan generation for user %s", user_id)
        publish_generation_started(user_id)
        self._spawn(self._generate_background(user_id))
        return {"status": "started", "message": PLAN_STATUS_MESSAGES["started"]}

    async def _generate_background(self, user_id: str) -> Optional[Plan]:
        try:
            plan = await self.create_plan(user_id)
        except Exception as e:
            logger.exception("Plan generation failed for user %s", user_id)
            publish_generation_failed(user_id, str(e))
            return None
        finally:
            self.users.set_created(user_id)
        publish_plan_generated(user_id, plan.id, plan.is_valid, plan.invalid_meals_count)
        return plan

    async def create_plan(self, user_id: str) -> Plan:
        """Run the pipeline for one user and store the result as the pending plan.

        Raises whatever the initial generation raises; nothing is stored then.
        """
        user = self.users.get_or_create(user_id)
        daily = self.users.daily_target(user_id)
        disliked = self.users.disliked_ingredients(user_id)
        feedback = (user.get('planRejectionFeedback') or '').strip()
        preferences = user.get('preferences') or None
        settings = self.users.meal_settings(user_id)
        cheat_day_frequency = self.users.cheat_day_frequency(user_id)
        start_date = self.today().isoformat()

        if self.duration >= self.two_phase_min_days:
            logger.info("Using two-phase generation for %d day(s)", self.duration)
            result: PlanGenerationResult = await self.expander.run(
                start_date, daily, duration=self.duration, disliked_ingredients=disliked,
                feedback=feedback, preferences=preferences, settings=settings,
                cheat_day_frequency=cheat_day_frequency)
        else:
            result = await self.orchestrator.run(
                start_date, daily, settings, duration=self.duration, disliked_ingredients=disliked,
                feedback=feedback, preferences=preferences, cheat_day_frequency=cheat_day_frequency)

        if not result.is_valid:
            logger.warning("%d meal(s) had the fallback applied for user %s", result.invalid_meals_count, user_id)

        self._archive_superseded(user_id)
        plan = self.plans.create(user_id, start_date, result.days, "pending",
                                 result.is_valid, result.invalid_meals_count)
        self.users.set_rejection_feedback(user_id, None)
        logger.info("Stored pending plan %s for user %s", plan.id, user_id)
        return plan

    def _archive_superseded(self, user_id: str, statuses=("active", "pending")) -> None:
        for status in statuses:
            for old in self.plans.list_for_user(user_id, status):
                self.plans.update_status(old.id, "archived")
                logger.info("Archived superseded plan %s (%s)", old.id, status)

    # === Approval / rejection ===
    def _owned_plan(self, user_id: str, plan_id: str) -> Plan:
        plan = self.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan not found: {plan_id}")
        if plan.user_id != user_id:
            raise PlanAccessError("You do not have access to this plan")
        return plan

    def _pending_plan(self, user_id: str, plan_id: str, action: str) -> Plan:
        plan = self._owned_plan(user_id, plan_id)
        if plan.status != "pending":
            raise PlanStateError(f"Plan {plan_id} cannot be {action} in status '{plan.status}'")
        return plan

    async def approve_plan(self, user_id: str, plan_id: str) -> Dict:
        self._pending_plan(user_id, plan_id, "approved")
        self._archive_superseded(user_id, statuses=("active",))
        self.plans.update_status(plan_id, "active")
        publish_plan_approved(user_id, plan_id)
        self._spawn(self._approve_background(user_id, plan_id))
        return {"success": True, "message": "Plan approved. Recipe details are being generated."}

    async def _approve_background(self, user_id: str, plan_id: str) -> Optional[ShoppingList]:
        try:
            await backfill_plan_details(plan_id, self.plans, self.generator,
                                        disliked_ingredients=self.users.disliked_ingredients(user_id),
                                        **self.backfill_options)
            return self.create_shopping_list(plan_id)
        except Exception:
            logger.exception("Post-approval processing failed for plan %s", plan_id)
            return None

    def create_shopping_list(self, plan_id: str) -> Optional[ShoppingList]:
        plan = self.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan not found: {plan_id}")
        items = build_shopping_list(plan.days)
        if not items:
            logger.info("Plan %s has no ingredients; no shopping list created", plan_id)
            return None
        shopping_list = self.shopping_lists.save(ShoppingList(plan_id, items))
        publish_shopping_list_created(plan_id, len(items))
        return shopping_list

    async def reject_plan(self, user_id: str, plan_id: str, feedback: Optional[str] = None) -> Dict:
        self._pending_plan(user_id, plan_id, "rejected")
        self.plans.update_status(plan_id, "archived")
        if feedback and feedback.strip():
            self.users.set_rejection_feedback(user_id, feedback.strip())
        publish_plan_rejected(user_id, plan_id)
        return {"success": True, "message": "Plan rejected."}

    # === Queries and edits ===
    def update_settings(self, user_id: str, *, nutrition=None, meal_settings=None,
                        disliked_ingredients: Optional[List[str]] = None,
                        cheat_day_frequency: Optional[str] = None) -> Dict:
        '''Stores the planning inputs used by the next generation.'''
        fields = {}
        if nutrition is not None:
            fields['nutrition'] = nutrition.to_dict()
        if meal_settings is not None:
            current = self.users.meal_settings(user_id)
            current.update(meal_settings)
            fields['mealSettings'] = {m: s.to_dict() for m, s in current.items()}
        if disliked_ingredients is not None:
            fields['dislikedIngredients'] = list(disliked_ingredients)
        if cheat_day_frequency is not None:
            fields['cheatDayFrequency'] = cheat_day_frequency
        self.users.get_or_create(user_id)
        return self.users.update(user_id, **fields) if fields else self.users.get_or_create(user_id)

    def get_active_plan(self, user_id: str) -> Optional[Plan]:
        return self.plans.get_latest(user_id, "active")

    def get_pending_plan(self, user_id: str) -> Optional[Plan]:
        return self.plans.get_latest(user_id, "pending")

    def swap_meal(self, user_id: str, plan_id: str, date: str, meal_type: str, meal: MealSlot) -> Plan:
        """Replace one meal of a live plan; the day's totals are recomputed."""
        plan = self._owned_plan(user_id, plan_id)
        if plan.status == "archived":
            raise PlanStateError(f"Plan {plan_id} is archived")
        if meal_type not in MEAL_TYPES + OPTIONAL_MEAL_TYPES:
            raise PlanStateError(f"Unknown meal type: {meal_type}")
        if date not in plan.days:
            raise PlanStateError(f"Plan {plan_id} has no day {date}")
        meal.status = "swapped"
        return self.plans.update_meal(plan_id, date, meal_type, meal)

    def get_shopping_list(self, user_id: str, plan_id: str) -> ShoppingList:
        self._owned_plan(user_id, plan_id)
        shopping_list = self.shopping_lists.get(plan_id)
        if shopping_list is None:
            raise PlanNotFoundError(f"No shopping list for plan {plan_id}")
        return shopping_list

    def toggle_shopping_item(self, user_id: str, plan_id: str, index: int, checked: bool) -> ShoppingItem:
        self.get_shopping_list(user_id, plan_id)
        try:
            return self.shopping_lists.toggle_item(plan_id, index, checked)
        except IndexError as e:
            raise PlanStateError(str(e)) from e

    def get_items_by_category(self, user_id: str, plan_id: str) -> Dict[str, List[ShoppingItem]]:
        return group_by_category(self.get_shopping_list(user_id, plan_id).items)


__all__ = ['PlanLifecycle']
