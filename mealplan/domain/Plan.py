"""Plan domain entity: a user's multi-day meal plan keyed by ISO date, with its lifecycle status."""
from uuid import uuid4
from datetime import datetime
from typing import Dict, Any, Optional, List
from mealplan.domain.DayPlan import DayPlan


class Plan:
    def __init__(self, user_id: str, days: Optional[Dict[str, DayPlan]] = None, status: str = "pending",
                 start_date: str = "", id: Optional[str] = None, created_at: Optional[str] = None,
                 is_valid: bool = True, invalid_meals_count: int = 0):
        self.id = id or uuid4().hex
        self.user_id = user_id
        self.status = status
        self.start_date = start_date
        self.days: Dict[str, DayPlan] = dict(days or {})
        self.created_at = created_at or datetime.now().isoformat()
        self.is_valid = is_valid
        self.invalid_meals_count = invalid_meals_count

    def dates(self) -> List[str]:
        return sorted(self.days.keys())

    def __str__(self) -> str:
        return f"Plan {self.id} [{self.status}] user={self.user_id} days={len(self.days)}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Plan":
        d = dict(data)
        return Plan(
            id=d.get('id'),
            user_id=d.get('userId', ''),
            status=d.get('status', 'pending'),
            start_date=d.get('startDate', ''),
            days={date: DayPlan.from_dict(day) for date, day in (d.get('days') or {}).items()},
            created_at=d.get('createdAt'),
            is_valid=bool(d.get('isValid', True)),
            invalid_meals_count=int(d.get('invalidMealsCount', 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "status": self.status,
            "startDate": self.start_date,
            "createdAt": self.created_at,
            "isValid": self.is_valid,
            "invalidMealsCount": self.invalid_meals_count,
            "days": {date: self.days[date].to_dict() for date in self.dates()},
        }
