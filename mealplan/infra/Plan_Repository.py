from typing import Dict, List, Optional
from pathlib import Path

from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.MealSlot import MealSlot
from mealplan.domain.Plan import Plan
from mealplan.infra.json_store import JsonDocumentStore
from mealplan.infra.paths import PLANS_FILE


class PlanRepository:
    """Plans keyed by id. Updates replace the whole ``days`` map of a plan."""

    def __init__(self, path: Optional[Path] = None):
        self.store = JsonDocumentStore(path or PLANS_FILE)

    def get(self, plan_id: str) -> Optional[Plan]:
        data = self.store.load().get(plan_id)
        return Plan.from_dict(data) if data else None

    def save(self, plan: Plan) -> Plan:
        with self.store.lock:
            data = self.store.load()
            data[plan.id] = plan.to_dict()
            self.store.save(data)
        return plan

    def create(self, user_id: str, start_date: str, days: Dict[str, DayPlan], status: str = "pending",
               is_valid: bool = True, invalid_meals_count: int = 0) -> Plan:
        plan = Plan(user_id=user_id, days=days, status=status, start_date=start_date,
                    is_valid=is_valid, invalid_meals_count=invalid_meals_count)
        return self.save(plan)

    def list_for_user(self, user_id: str, status: Optional[str] = None) -> List[Plan]:
        plans = [Plan.from_dict(d) for d in self.store.load().values() if d.get('userId') == user_id]
        if status is not None:
            plans = [p for p in plans if p.status == status]
        return sorted(plans, key=lambda p: p.created_at, reverse=True)

    def get_latest(self, user_id: str, status: str) -> Optional[Plan]:
        plans = self.list_for_user(user_id, status)
        return plans[0] if plans else None

    def update_status(self, plan_id: str, status: str) -> Plan:
        with self.store.lock:
            plan = self.get(plan_id)
            if plan is None:
                raise KeyError(plan_id)
            plan.status = status
            return self.save(plan)

    def replace_days(self, plan_id: str, days: Dict[str, DayPlan]) -> Plan:
        with self.store.lock:
            plan = self.get(plan_id)
            if plan is None:
                raise KeyError(plan_id)
            plan.days = dict(days)
            return self.save(plan)

    def update_meal(self, plan_id: str, date: str, meal_type: str, meal: MealSlot) -> Plan:
        '''Re-reads the plan, replaces one slot, recomputes that day and writes the full days map back.'''
        with self.store.lock:
            plan = self.get(plan_id)
            if plan is None:
                raise KeyError(plan_id)
            if date not in plan.days:
                raise KeyError(f"{plan_id}/{date}")
            plan.days[date].set_meal(meal_type, meal)
            return self.replace_days(plan_id, plan.days)
