"""Tracker session: the single owner of the in-memory HabitGrid state.

UI shells (terminal app, HTTP API) drive a TrackerSession. It re-reads
persisted state on every lifecycle trigger, reconciles it against the current
day, and saves after every state transition. Storage failures are reported
through the notify callback and never stop the session; it keeps working on
its in-memory state.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable

from habitgrid import days
from habitgrid.activities import add_activity, delete_activity, toggle_today
from habitgrid.closure import reconcile
from habitgrid.errors import (
    CorruptSnapshotError,
    HabitGridError,
    MalformedDateError,
    StorageUnavailable,
)
from habitgrid.hooks import run_hooks
from habitgrid.models import Activity, Status, TrackerState
from habitgrid.series import MonthlySeries, build_series
from habitgrid.store import SnapshotStore
from habitgrid.workspace import load_settings, workspace_root

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class AppState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


class TrackerSession:
    def __init__(
        self,
        root: Path | None = None,
        store: SnapshotStore | None = None,
        clock: Callable[[], date] | None = None,
        notify: Notifier | None = None,
        hooks: bool = True,
    ) -> None:
        if root is None:
            root = workspace_root()
        self.root = root
        self.settings = load_settings(root)
        self.store = store or SnapshotStore(root, self.settings.storage_key)
        tz = self.settings.tzinfo()
        self._clock = clock or (lambda: days.today(tz))
        self._notify = notify
        self._hooks = hooks
        self._lock = threading.RLock()
        self._app_state_lock = threading.Lock()
        self._app_state = AppState.ACTIVE
        self.state = TrackerState()
        self.today = self._clock()
        self.last_error: HabitGridError | None = None
        self._load_failed = False

    # ── Lifecycle triggers ────────────────────────────────────

    def start(self) -> TrackerState:
        """Cold start."""
        return self.refresh()

    def on_app_state_change(self, next_state: AppState) -> bool:
        """React to host lifecycle changes; only background -> active refreshes."""
        with self._app_state_lock:
            prev = self._app_state
            self._app_state = next_state
        if prev in (AppState.INACTIVE, AppState.BACKGROUND) and next_state is AppState.ACTIVE:
            self.refresh()
            return True
        return False

    def refresh(self) -> TrackerState:
        """Re-read persisted state, close elapsed days and save the result."""
        with self._lock:
            self.today = self._clock()
            loaded: TrackerState | None = None
            try:
                loaded = self.store.load()
                self._load_failed = False
            except (StorageUnavailable, MalformedDateError, CorruptSnapshotError) as e:
                # Never save over a document that could not be read.
                self._load_failed = True
                self._report(e)

            base = loaded if loaded is not None else self.state
            result = reconcile(base.activities, base.statuses, base.last_closed, self.today)
            new_state = base.evolve(statuses=result.snapshot, last_closed=result.last_closed)
            self.state = new_state

            if loaded is None or new_state != loaded:
                self._save()
            advanced = base.last_closed != new_state.last_closed
            context = {
                "today": days.format_day(self.today),
                "previousLastClosed": days.format_day(base.last_closed) if base.last_closed else None,
                "lastClosed": days.format_day(new_state.last_closed),
            }
        if advanced:
            self._run_hooks("post_reconcile", context)
        return new_state

    # ── Mutations ─────────────────────────────────────────────

    def add_activity(self, name: str) -> Activity | None:
        """Prepend an activity; blank names are ignored and return None."""
        with self._lock:
            activities = add_activity(self.state.activities, name)
            if activities == self.state.activities:
                return None
            self.state = self.state.evolve(activities=activities)
            self._save()
            added = activities[0]
        self._run_hooks("on_activity_add", added.to_dict())
        return added

    def delete_activity(self, activity_id: str) -> bool:
        """Remove an activity from the list; its history stays in the snapshot."""
        with self._lock:
            activity = self.state.find_activity(activity_id)
            if activity is None:
                return False
            self.state = self.state.evolve(activities=delete_activity(self.state.activities, activity_id))
            self._save()
        self._run_hooks("on_activity_delete", activity.to_dict())
        return True

    def toggle(self, activity_id: str, day: date) -> Status:
        """Toggle today's cell for an activity; returns the cell's new status."""
        with self._lock:
            statuses = toggle_today(self.state.statuses, activity_id, day, self.today)
            new_status = statuses.get(activity_id, day)
            if statuses == self.state.statuses:
                return new_status
            self.state = self.state.evolve(statuses=statuses)
            self._save()
        self._run_hooks("on_toggle", {
            "activityId": activity_id,
            "day": days.format_day(day),
            "status": new_status.value,
        })
        return new_status

    # ── Views ─────────────────────────────────────────────────

    def is_editable(self, day: date) -> bool:
        return day == self.today

    def status(self, activity_id: str, day: date) -> Status:
        return self.state.statuses.get(activity_id, day)

    def week(self) -> list[date]:
        return days.week_days(self.today)

    def series(self, year: int | None = None, month: int | None = None) -> MonthlySeries:
        return build_series(
            year or self.today.year,
            month or self.today.month,
            self.state.statuses,
            self.today,
        )

    # ── Internals ─────────────────────────────────────────────

    def save(self) -> bool:
        """Persist the current in-memory state; False if storage is unavailable."""
        with self._lock:
            return self._save()

    def _save(self) -> bool:
        if self._load_failed:
            logger.warning("Snapshot at %s could not be read; not saving", self.store.path)
            return False
        try:
            self.store.save(self.state)
        except StorageUnavailable as e:
            self._report(e)
            return False
        self.last_error = None
        return True

    def _report(self, error: HabitGridError) -> None:
        self.last_error = error
        logger.warning("%s", error)
        if self._notify is not None:
            severity = "warning" if isinstance(error, StorageUnavailable) else "error"
            self._notify(str(error), severity)

    def _run_hooks(self, event: str, context: dict) -> None:
        if self._hooks:
            run_hooks(event, context, self.root)
