"""Fill in ingredients and steps of approved plan meals that were stored without them."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.logic.planning.schemas import RecipeDetailOut
from mealplan.utilities.config import BACKFILL_BATCH_SIZE, BACKFILL_CONCURRENCY, BACKFILL_DELAY_SECONDS

logger = logging.getLogger(__name__)


def pending_details(plan) -> List[Tuple[str, str, MealSlot]]:
    '''(date, meal_type, meal) for every meal without an ingredient list, in date order.'''
    return [(date, meal_type, meal)
            for date in plan.dates()
            for meal_type, meal in plan.days[date].present_meals()
            if not meal.ingredients]


async def backfill_plan_details(plan_id: str, plans, generator, *, disliked_ingredients: Optional[List[str]] = None,
                                batch_size: int = BACKFILL_BATCH_SIZE, concurrency: int = BACKFILL_CONCURRENCY,
                                delay: float = BACKFILL_DELAY_SECONDS,
                                sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> int:
    """Generate the missing recipe details of a stored plan.

    Meals are processed in batches of ``batch_size`` with at most
    ``concurrency`` calls in flight, waiting ``delay`` seconds between
    batches. A failing meal is logged and skipped. Every success is written
    back to the plan straight away.

    Returns:
        Number of meals that received details.
    """
    plan = plans.get(plan_id)
    if plan is None:
        logger.warning("Backfill skipped: plan %s not found", plan_id)
        return 0
    queue = pending_details(plan)
    if not queue:
        return 0

    logger.info("Backfilling details of %d meal(s) for plan %s", len(queue), plan_id)
    semaphore = asyncio.Semaphore(max(1, concurrency))
    disliked = list(disliked_ingredients or [])

    async def one(date: str, meal_type: str, meal: MealSlot) -> bool:
        payload = {
            "task": "recipe_detail",
            "title": meal.title,
            "mealType": meal_type,
            "nutrition": meal.nutrition.to_dict(),
            "dislikedIngredients": disliked,
        }
        try:
            async with semaphore:
                detail: RecipeDetailOut = await generator.generate(payload, RecipeDetailOut)
            current = plans.get(plan_id).days[date].meals[meal_type]
            current.ingredients = [IngredientLine(i.name, i.amount) for i in detail.ingredients]
            current.steps = list(detail.steps)
            plans.update_meal(plan_id, date, meal_type, current)
            return True
        except Exception:
            logger.exception("Failed to generate recipe details for %s %s", date, meal_type)
            return False

    done = 0
    for start in range(0, len(queue), batch_size):
        batch = queue[start:start + batch_size]
        results = await asyncio.gather(*(one(*item) for item in batch))
        done += sum(1 for ok in results if ok)
        if start + batch_size < len(queue):
            await sleep(delay)
    logger.info("Backfill finished for plan %s: %d/%d meal(s)", plan_id, done, len(queue))
    return done


__all__ = ['pending_details', 'backfill_plan_details']
