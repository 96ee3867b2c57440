"""Day-closure engine for HabitGrid.

Brings the closure cursor up to today, marking every activity as missed on
each skipped day that has no entry. Today itself is never closed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Iterator, NamedTuple

from habitgrid.days import add_days, days_between
from habitgrid.models import Activity, Status, StatusSnapshot

logger = logging.getLogger(__name__)


class Reconciliation(NamedTuple):
    snapshot: StatusSnapshot
    last_closed: date


def missed_days(last_closed: date | None, today: date) -> Iterator[date]:
    """Days strictly between *last_closed* and *today*."""
    if last_closed is None:
        return
    elapsed = days_between(last_closed, today)
    for i in range(1, elapsed + 1):
        day = add_days(last_closed, i)
        if day == today:
            break
        yield day


def reconcile(
    activities: Iterable[Activity],
    snapshot: StatusSnapshot,
    last_closed: date | None,
    today: date,
) -> Reconciliation:
    """Backfill MISSED for elapsed, unmarked days and advance the cursor.

    - No cursor (first run): nothing to backfill, cursor becomes today.
    - Cursor on or after today: nothing changes, the cursor never rewinds.
    - Existing entries (DONE in particular) are never overwritten.
    """
    if last_closed is None:
        return Reconciliation(snapshot, today)

    if days_between(last_closed, today) <= 0:
        return Reconciliation(snapshot, last_closed)

    activities = list(activities)
    updates = [
        (a.id, day, Status.MISSED)
        for day in missed_days(last_closed, today)
        for a in activities
        if snapshot.get(a.id, day) is Status.ABSENT
    ]
    if updates:
        logger.info(
            "Closed %s..%s: %d missed entries backfilled",
            add_days(last_closed, 1), add_days(today, -1), len(updates),
        )
        snapshot = snapshot.apply(updates)
    return Reconciliation(snapshot, today)
