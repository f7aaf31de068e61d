"""Typed helpers for publishing plan lifecycle events on the global bus."""
from __future__ import annotations
from .Event_Bus import (
    create_event,
    PLAN_GENERATION_STARTED, PLAN_GENERATED, PLAN_GENERATION_FAILED,
    PLAN_APPROVED, PLAN_REJECTED, SHOPPING_LIST_CREATED,
)

__all__ = [
    'publish_generation_started', 'publish_plan_generated', 'publish_generation_failed',
    'publish_plan_approved', 'publish_plan_rejected', 'publish_shopping_list_created',
]


def publish_generation_started(user_id: str):
    create_event(PLAN_GENERATION_STARTED, {'user_id': user_id})


def publish_plan_generated(user_id: str, plan_id: str, is_valid: bool, invalid_meals_count: int):
    """Publish a plan.generated event once the pending plan is stored."""
    create_event(PLAN_GENERATED, {
        'user_id': user_id,
        'plan_id': plan_id,
        'is_valid': is_valid,
        'invalid_meals_count': invalid_meals_count,
    })


def publish_generation_failed(user_id: str, error: str):
    create_event(PLAN_GENERATION_FAILED, {'user_id': user_id, 'error': error})


def publish_plan_approved(user_id: str, plan_id: str):
    create_event(PLAN_APPROVED, {'user_id': user_id, 'plan_id': plan_id})


def publish_plan_rejected(user_id: str, plan_id: str):
    create_event(PLAN_REJECTED, {'user_id': user_id, 'plan_id': plan_id})


def publish_shopping_list_created(plan_id: str, count: int):
    create_event(SHOPPING_LIST_CREATED, {'plan_id': plan_id, 'count': count})
