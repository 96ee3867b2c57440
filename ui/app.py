from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from habitgrid import (
    CorruptSnapshotError,
    MalformedDateError,
    StorageUnavailable,
    TrackerSession,
    chart_max,
    format_day,
    parse_day,
)
from habitgrid.logging_config import configure_logging

configure_logging()


# ── Auth ──────────────────────────────────────────────────────

app = FastAPI(title="HabitGrid API", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("HABITGRID_USERNAME", "")
    expected_password = os.environ.get("HABITGRID_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Session ───────────────────────────────────────────────────


def _raise_for_storage(session: TrackerSession) -> None:
    err = session.last_error
    if isinstance(err, (MalformedDateError, CorruptSnapshotError)):
        raise HTTPException(status_code=500, detail=f"Stored snapshot is corrupt: {err}")
    if isinstance(err, StorageUnavailable):
        raise HTTPException(status_code=503, detail=str(err))


def get_session(username: str = Depends(get_current_user)) -> TrackerSession:
    """Every request re-reads persisted state and closes elapsed days first."""
    session = TrackerSession()
    session.refresh()
    _raise_for_storage(session)
    return session


def _state_payload(session: TrackerSession) -> dict[str, Any]:
    week = session.week()
    state = session.state
    grid = {
        a.id: {format_day(d): session.status(a.id, d).value for d in week}
        for a in state.activities
    }
    return {
        "today": format_day(session.today),
        "lastClosedISO": format_day(state.last_closed) if state.last_closed else None,
        "activities": [a.to_dict() for a in state.activities],
        "week": [format_day(d) for d in week],
        "grid": grid,
    }


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/state")
def api_state(session: TrackerSession = Depends(get_session)) -> dict[str, Any]:
    """Reconciled state plus the current week's grid."""
    return _state_payload(session)


@app.post("/api/activities")
def api_add_activity(payload: dict[str, Any] = Body(...), session: TrackerSession = Depends(get_session)) -> dict[str, Any]:
    """Add an activity. Blank names are ignored (added=false)."""
    activity = session.add_activity(str(payload.get("name", "") or ""))
    _raise_for_storage(session)
    if activity is None:
        return {"ok": True, "added": False}
    return {"ok": True, "added": True, "activity": activity.to_dict()}


@app.delete("/api/activities/{activity_id}")
def api_delete_activity(activity_id: str, session: TrackerSession = Depends(get_session)) -> dict[str, Any]:
    """Remove an activity from the list; its history is kept."""
    if not session.delete_activity(activity_id):
        raise HTTPException(status_code=404, detail=f"Activity not found: {activity_id}")
    _raise_for_storage(session)
    return {"ok": True}


@app.post("/api/toggle")
def api_toggle(payload: dict[str, Any] = Body(...), session: TrackerSession = Depends(get_session)) -> dict[str, Any]:
    """Toggle today's cell for an activity (done <-> absent)."""
    activity_id = str(payload.get("activityId", ""))
    try:
        day = parse_day(payload.get("day", ""))
    except MalformedDateError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if session.state.find_activity(activity_id) is None:
        raise HTTPException(status_code=404, detail=f"Activity not found: {activity_id}")
    if not session.is_editable(day):
        raise HTTPException(status_code=409, detail=f"Only today ({format_day(session.today)}) can be changed")
    new_status = session.toggle(activity_id, day)
    _raise_for_storage(session)
    return {"ok": True, "activityId": activity_id, "day": format_day(day), "status": new_status.value}


@app.get("/api/series")
def api_series(
    year: int | None = None,
    month: int | None = None,
    session: TrackerSession = Depends(get_session),
) -> dict[str, Any]:
    """Per-day done counts for a month; days after today are null."""
    if month is not None and not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail=f"Invalid month: {month}")
    if year is not None and not 1 <= year <= 9999:
        raise HTTPException(status_code=422, detail=f"Invalid year: {year}")
    series = session.series(year, month)
    values = series.values
    return {
        "year": series.year,
        "month": series.month,
        "labels": series.labels,
        "values": values,
        "maxY": chart_max(values, session.settings.chart_min_y),
    }
