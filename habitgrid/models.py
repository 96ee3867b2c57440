"""Typed dataclasses for the HabitGrid data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
Models are immutable: every change returns a new value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

from habitgrid.days import format_day, parse_day
from habitgrid.errors import CorruptSnapshotError

logger = logging.getLogger(__name__)


# ── Status ────────────────────────────────────────────────────


class Status(str, Enum):
    """State of one (activity, day) cell. ABSENT is never persisted."""

    DONE = "done"
    MISSED = "missed"
    ABSENT = "absent"

    @property
    def symbol(self) -> str:
        return {"done": "✓", "missed": "✗"}.get(self.value, "")


PERSISTED_STATUSES = {Status.DONE.value, Status.MISSED.value}


# ── Activity ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Activity:
    id: str
    name: str

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Activity:
        return cls(id=str(d.get("id", "")), name=str(d.get("name", "")))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


# ── Status snapshot ───────────────────────────────────────────


@dataclass(frozen=True)
class StatusSnapshot:
    """Mapping activity id -> day -> Status (DONE or MISSED only)."""

    entries: Mapping[str, Mapping[date, Status]] = field(default_factory=dict)

    def get(self, activity_id: str, day: date) -> Status:
        return self.entries.get(activity_id, {}).get(day, Status.ABSENT)

    def activity_ids(self) -> list[str]:
        return list(self.entries.keys())

    def days_for(self, activity_id: str) -> dict[date, Status]:
        return dict(self.entries.get(activity_id, {}))

    def count(self, day: date, status: Status = Status.DONE) -> int:
        """Count activity ids (orphans included) with *status* on *day*."""
        return sum(1 for days in self.entries.values() if days.get(day) is status)

    def with_status(self, activity_id: str, day: date, status: Status) -> StatusSnapshot:
        return self.apply([(activity_id, day, status)])

    def apply(self, updates: Iterable[tuple[str, date, Status]]) -> StatusSnapshot:
        """Return a new snapshot with *updates* applied. ABSENT removes the entry."""
        entries = dict(self.entries)
        copied: set[str] = set()
        for activity_id, day, status in updates:
            if activity_id not in copied:
                entries[activity_id] = dict(entries.get(activity_id, {}))
                copied.add(activity_id)
            if status is Status.ABSENT:
                entries[activity_id].pop(day, None)
            else:
                entries[activity_id][day] = status
        return StatusSnapshot(entries)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StatusSnapshot:
        """Decode {activityId: {'YYYY-MM-DD': 'done'|'missed'|null}}.

        Null values load as absent. Malformed day keys raise MalformedDateError;
        any other shape problem raises CorruptSnapshotError.
        """
        if not isinstance(d, dict):
            raise CorruptSnapshotError(f"statusByDate must be a mapping, got {type(d).__name__}")
        entries: dict[str, dict[date, Status]] = {}
        for activity_id, days in d.items():
            if not isinstance(days, dict):
                raise CorruptSnapshotError(f"statuses for {activity_id!r} must be a mapping")
            parsed: dict[date, Status] = {}
            for day_str, value in days.items():
                day = parse_day(day_str)
                if value is None:
                    continue
                if not isinstance(value, str):
                    raise CorruptSnapshotError(f"status for {activity_id!r} on {day_str} must be a string, got {value!r}")
                if value not in PERSISTED_STATUSES:
                    logger.warning("Ignoring unknown status %r for %s on %s", value, activity_id, day_str)
                    continue
                parsed[day] = Status(value)
            entries[str(activity_id)] = parsed
        return cls(entries)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {
            activity_id: {format_day(day): status.value for day, status in sorted(days.items())}
            for activity_id, days in self.entries.items()
        }


# ── Persisted state ───────────────────────────────────────────


@dataclass(frozen=True)
class TrackerState:
    """The whole durable state: activities, statuses and the closure cursor."""

    activities: tuple[Activity, ...] = ()
    statuses: StatusSnapshot = field(default_factory=StatusSnapshot)
    last_closed: date | None = None

    def find_activity(self, activity_id: str) -> Activity | None:
        for a in self.activities:
            if a.id == activity_id:
                return a
        return None

    def evolve(self, **changes: Any) -> TrackerState:
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TrackerState:
        if not d or not isinstance(d, dict):
            return cls()
        raw_activities = d.get("activities") or []
        if not isinstance(raw_activities, list):
            raise CorruptSnapshotError("activities must be a list")
        activities = tuple(Activity.from_dict(a) for a in raw_activities if isinstance(a, dict))
        last_closed_raw = d.get("lastClosedISO")
        return cls(
            activities=activities,
            statuses=StatusSnapshot.from_dict(d.get("statusByDate") or {}),
            last_closed=parse_day(last_closed_raw) if last_closed_raw is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "activities": [a.to_dict() for a in self.activities],
            "statusByDate": self.statuses.to_dict(),
            "lastClosedISO": format_day(self.last_closed) if self.last_closed else None,
        }
