"""Simple Event Bus / Observer implementation for plan lifecycle notifications.

Event names:
  plan.generation_started -> payload {"user_id": str}
  plan.generated -> payload {"user_id": str, "plan_id": str, "is_valid": bool, "invalid_meals_count": int}
  plan.generation_failed -> payload {"user_id": str, "error": str}
  plan.approved / plan.rejected -> payload {"user_id": str, "plan_id": str}
  shopping_list.created -> payload {"plan_id": str, "count": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_GENERATION_STARTED = "plan.generation_started"
PLAN_GENERATED = "plan.generated"
PLAN_GENERATION_FAILED = "plan.generation_failed"
PLAN_APPROVED = "plan.approved"
PLAN_REJECTED = "plan.rejected"
SHOPPING_LIST_CREATED = "shopping_list.created"

ALL_EVENTS = (
	PLAN_GENERATION_STARTED, PLAN_GENERATED, PLAN_GENERATION_FAILED,
	PLAN_APPROVED, PLAN_REJECTED, SHOPPING_LIST_CREATED,
)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				# a broken subscriber must not break the pipeline that published
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def create_event(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'create_event', 'ALL_EVENTS',
	'PLAN_GENERATION_STARTED', 'PLAN_GENERATED', 'PLAN_GENERATION_FAILED',
	'PLAN_APPROVED', 'PLAN_REJECTED', 'SHOPPING_LIST_CREATED',
]
