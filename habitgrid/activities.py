"""Activity list and status mutation for HabitGrid.

All functions return new values; inputs are never modified.
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import date
from typing import Callable, Sequence

from habitgrid.models import Activity, Status, StatusSnapshot

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8


def new_activity_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def add_activity(
    activities: Sequence[Activity],
    name: str,
    id_factory: Callable[[], str] = new_activity_id,
) -> tuple[Activity, ...]:
    """Prepend a new activity. Blank names are ignored (no-op)."""
    name = (name or "").strip()
    if not name:
        return tuple(activities)
    existing = {a.id for a in activities}
    activity_id = id_factory()
    while activity_id in existing:
        activity_id = id_factory()
    return (Activity(id=activity_id, name=name), *activities)


def delete_activity(activities: Sequence[Activity], activity_id: str) -> tuple[Activity, ...]:
    """Remove an activity from the active list. Its history is left in place."""
    return tuple(a for a in activities if a.id != activity_id)


def next_toggle(current: Status) -> Status:
    """done -> absent, absent -> done. MISSED cells are not user-editable."""
    if current is Status.DONE:
        return Status.ABSENT
    if current is Status.ABSENT:
        return Status.DONE
    return current


def toggle_today(snapshot: StatusSnapshot, activity_id: str, day: date, today: date) -> StatusSnapshot:
    """Toggle a cell. Only today's cells are editable; other days are returned unchanged."""
    if day != today:
        logger.debug("Ignoring toggle of %s on read-only day %s", activity_id, day)
        return snapshot
    current = snapshot.get(activity_id, day)
    nxt = next_toggle(current)
    if nxt is current:
        return snapshot
    return snapshot.with_status(activity_id, day, nxt)
