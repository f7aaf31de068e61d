from fastapi import FastAPI, Depends, HTTPException, Query, Body
from typing import Optional
import logging

from mealplan.api.deps import current_user, get_lifecycle
from mealplan.api.errors import to_http_error
from mealplan.api.routes import shopping
from mealplan.domain.Anchor import MealSlotSetting
from mealplan.events.web_observers import start as start_event_observers, get_events as get_web_events
from mealplan.logic.reporting.nutrition import compute_plan_nutrition
from mealplan.utilities.errors import MealPlanError
from mealplan.utilities.validators import RejectPlanInput, SwapMealInput, UserSettingsInput

# Logging
logger = logging.getLogger("mealplan_app")

app = FastAPI(title="Meal Plan Generator API")
app.include_router(shopping.router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers so clients can poll plan events."""
    start_event_observers()
    logger.info("Web observers for plan events started")


def _plan_or_none(plan):
    return {"plan": plan.to_dict() if plan else None}


# -------------------- User settings --------------------
@app.put("/api/user/settings")
def update_settings(body: UserSettingsInput, user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    settings = None
    if body.meal_settings is not None:
        settings = {m: MealSlotSetting(s.mode, s.text) for m, s in body.meal_settings.items()}
    doc = lifecycle.update_settings(
        user_id,
        nutrition=body.nutrition.to_vector() if body.nutrition else None,
        meal_settings=settings,
        disliked_ingredients=body.disliked_ingredients,
        cheat_day_frequency=body.cheat_day_frequency,
    )
    return {k: doc.get(k) for k in ("nutrition", "mealSettings", "dislikedIngredients", "cheatDayFrequency")}


# -------------------- Plans --------------------
@app.post("/api/plan/generate")
async def generate_plan(user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    return await lifecycle.generate_plan(user_id)


@app.get("/api/plan/active")
def get_active_plan(user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    return _plan_or_none(lifecycle.get_active_plan(user_id))


@app.get("/api/plan/pending")
def get_pending_plan(user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    return _plan_or_none(lifecycle.get_pending_plan(user_id))


@app.post("/api/plan/{plan_id}/approve")
async def approve_plan(plan_id: str, user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    try:
        return await lifecycle.approve_plan(user_id, plan_id)
    except MealPlanError as e:
        raise to_http_error(e)


@app.post("/api/plan/{plan_id}/reject")
async def reject_plan(plan_id: str, body: Optional[RejectPlanInput] = Body(default=None),
                      user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    feedback = body.feedback if body else None
    try:
        return await lifecycle.reject_plan(user_id, plan_id, feedback)
    except MealPlanError as e:
        raise to_http_error(e)


@app.post("/api/plan/{plan_id}/swap")
def swap_meal(plan_id: str, body: SwapMealInput, user_id: str = Depends(current_user),
              lifecycle=Depends(get_lifecycle)):
    try:
        plan = lifecycle.swap_meal(user_id, plan_id, body.date, body.meal_type, body.meal.to_slot())
    except MealPlanError as e:
        raise to_http_error(e)
    return {"day": plan.days[body.date].to_dict()}


@app.get("/api/plan/{plan_id}/nutrition")
def plan_nutrition(plan_id: str, user_id: str = Depends(current_user), lifecycle=Depends(get_lifecycle)):
    plan = lifecycle.plans.get(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    if plan.user_id != user_id:
        raise HTTPException(status_code=403, detail="You do not have access to this plan")
    return compute_plan_nutrition(plan, lifecycle.users.daily_target(user_id))


# -------------------- Events --------------------
@app.get("/api/events")
def get_events(since: Optional[int] = Query(default=None), user_id: str = Depends(current_user)):
    return get_web_events(since, user_id)
