import logging
from fastapi import APIRouter, Depends

from mealplan.api.deps import current_user, get_lifecycle
from mealplan.api.errors import to_http_error
from mealplan.utilities.errors import MealPlanError
from mealplan.utilities.validators import ShoppingToggleInput

router = APIRouter(prefix="/api/shopping-list")
logger = logging.getLogger(__name__)


@router.get("/{plan_id}")
def get_shopping_list(plan_id: str, user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    try:
        return lifecycle.get_shopping_list(user_id, plan_id).to_dict()
    except MealPlanError as e:
        raise to_http_error(e)


@router.get("/{plan_id}/by-category")
def get_shopping_list_by_category(plan_id: str, user_id: str = Depends(current_user),
                                  lifecycle=Depends(get_lifecycle)):
    try:
        grouped = lifecycle.get_items_by_category(user_id, plan_id)
    except MealPlanError as e:
        raise to_http_error(e)
    return {category: [item.to_dict() for item in items] for category, items in grouped.items()}


@router.post("/{plan_id}/toggle")
def toggle_shopping_item(plan_id: str, body: ShoppingToggleInput, user_id: str = Depends(current_user),
                         lifecycle=Depends(get_lifecycle)):
    try:
        item = lifecycle.toggle_shopping_item(user_id, plan_id, body.index, body.checked)
    except MealPlanError as e:
        raise to_http_error(e)
    logger.info("Shopping item %d of plan %s set to %s", body.index, plan_id, body.checked)
    return item.to_dict()
