"""Shared FastAPI dependencies."""
from functools import lru_cache

from fastapi import Header, HTTPException

from mealplan.logic.planning.lifecycle import PlanLifecycle


@lru_cache(maxsize=1)
def get_lifecycle() -> PlanLifecycle:
    return PlanLifecycle()


def current_user(x_user_id: str = Header(default="")) -> str:
    # authentication is handled upstream; the user id arrives in a header
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id
