from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from pathlib import Path

from mealplan.domain.Anchor import MealSlotSetting
from mealplan.domain.Nutrition import NutritionVector
from mealplan.infra.json_store import JsonDocumentStore
from mealplan.infra.paths import USERS_FILE
from mealplan.utilities.config import PLAN_CREATION_LEASE_SECONDS
from mealplan.utilities.constants import (
    CHEAT_DAY_FREQUENCIES, DEFAULT_CHEAT_DAY_FREQUENCY, DEFAULT_DAILY_TARGET, MEAL_TYPES,
)


def _new_user(user_id: str) -> Dict[str, Any]:
    return {
        "id": user_id,
        "nutrition": None,
        "mealSettings": {m: {"mode": "auto", "text": ""} for m in MEAL_TYPES},
        "dislikedIngredients": [],
        "cheatDayFrequency": DEFAULT_CHEAT_DAY_FREQUENCY,
        "preferences": {},
        "planRejectionFeedback": None,
        "planCreationStatus": "idle",
        "planCreationStartedAt": None,
    }


class UserRepository:
    """User documents: planning inputs and the plan-creation flag."""

    def __init__(self, path: Optional[Path] = None):
        self.store = JsonDocumentStore(path or USERS_FILE)

    def get_or_create(self, user_id: str) -> Dict[str, Any]:
        with self.store.lock:
            data = self.store.load()
            if user_id not in data:
                data[user_id] = _new_user(user_id)
                self.store.save(data)
            doc = _new_user(user_id)
            doc.update(data[user_id])
            return doc

    def update(self, user_id: str, **fields) -> Dict[str, Any]:
        with self.store.lock:
            doc = self.get_or_create(user_id)
            doc.update(fields)
            data = self.store.load()
            data[user_id] = doc
            self.store.save(data)
            return doc

    def daily_target(self, user_id: str) -> NutritionVector:
        nutrition = self.get_or_create(user_id).get('nutrition')
        vector = NutritionVector.from_dict(nutrition)
        if vector.calories <= 0:
            return NutritionVector.from_dict(DEFAULT_DAILY_TARGET)
        return vector

    def meal_settings(self, user_id: str) -> Dict[str, MealSlotSetting]:
        raw = self.get_or_create(user_id).get('mealSettings') or {}
        return {m: MealSlotSetting.from_dict(raw.get(m)) for m in MEAL_TYPES}

    def disliked_ingredients(self, user_id: str) -> List[str]:
        return list(self.get_or_create(user_id).get('dislikedIngredients') or [])

    def cheat_day_frequency(self, user_id: str) -> str:
        frequency = self.get_or_create(user_id).get('cheatDayFrequency')
        return frequency if frequency in CHEAT_DAY_FREQUENCIES else DEFAULT_CHEAT_DAY_FREQUENCY

    def is_creating(self, user_id: str, now: Optional[datetime] = None) -> bool:
        """True while a generation holds the flag and its lease has not expired."""
        doc = self.get_or_create(user_id)
        if doc.get('planCreationStatus') != 'creating':
            return False
        started = doc.get('planCreationStartedAt')
        if not started:
            return True
        try:
            started_at = datetime.fromisoformat(started)
        except ValueError:
            return False
        now = now or datetime.now()
        return now - started_at < timedelta(seconds=PLAN_CREATION_LEASE_SECONDS)

    def try_start_creating(self, user_id: str) -> bool:
        '''Sets the flag unless a live one exists; check and set happen under one lock.'''
        with self.store.lock:
            if self.is_creating(user_id):
                return False
            self.update(user_id, planCreationStatus='creating',
                        planCreationStartedAt=datetime.now().isoformat(timespec='seconds'))
            return True

    def set_created(self, user_id: str) -> None:
        self.update(user_id, planCreationStatus='idle', planCreationStartedAt=None)

    def set_rejection_feedback(self, user_id: str, feedback: Optional[str]) -> None:
        self.update(user_id, planRejectionFeedback=feedback)
