"""Web-facing observer for plan lifecycle events.

Subscribes to every plan event on the GLOBAL_EVENT_BUS and keeps a bounded
in-memory ring buffer that the web layer polls to learn when a background
generation finished.

  * Each event gets an auto-increment id (cursor); clients ask for events
    newer than the last id they saw (since=<last_id_seen>).
  * A Lock guards the buffer. With several worker processes the buffer is
    per process.
  * MAX_EVENTS caps memory use.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import GLOBAL_EVENT_BUS, ALL_EVENTS

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False


def _record(event_name: str, payload: Any):
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        if isinstance(payload, dict):
            for k in ('user_id', 'plan_id', 'is_valid', 'invalid_meals_count', 'count', 'error'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe once."""
    global _started
    if _started:
        return
    for event_name in ALL_EVENTS:
        GLOBAL_EVENT_BUS.subscribe(event_name, _record)
    _started = True


def get_events(since: int | None = None, user_id: str | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive), optionally only those of one user.

    Response includes next_cursor (largest id) so the client can poll with since=next_cursor.
    """
    with _lock:
        data = list(_events) if since is None else [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    if user_id is not None:
        data = [e for e in data if e.get('user_id') in (None, user_id)]
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events', 'MAX_EVENTS']
