"""Tests for habitgrid/models.py — snapshot semantics and JSON mapping."""

from datetime import date

import pytest

from habitgrid.errors import CorruptSnapshotError, MalformedDateError
from habitgrid.models import Activity, Status, StatusSnapshot, TrackerState

D1 = date(2024, 1, 2)
D2 = date(2024, 1, 3)


def test_missing_entry_is_absent():
    snap = StatusSnapshot()
    assert snap.get("x", D1) is Status.ABSENT


def test_with_status_returns_new_snapshot():
    snap = StatusSnapshot()
    nxt = snap.with_status("x", D1, Status.DONE)
    assert nxt.get("x", D1) is Status.DONE
    assert snap.get("x", D1) is Status.ABSENT


def test_absent_removes_entry():
    snap = StatusSnapshot({"x": {D1: Status.DONE}})
    nxt = snap.with_status("x", D1, Status.ABSENT)
    assert nxt.get("x", D1) is Status.ABSENT
    assert nxt.to_dict() == {"x": {}}


def test_apply_does_not_touch_other_activities():
    inner = {D1: Status.DONE}
    snap = StatusSnapshot({"x": inner, "y": {D1: Status.MISSED}})
    nxt = snap.apply([("x", D2, Status.MISSED)])
    assert inner == {D1: Status.DONE}
    assert nxt.entries["y"] is snap.entries["y"]


def test_count_includes_every_activity_id():
    snap = StatusSnapshot({
        "x": {D1: Status.DONE},
        "y": {D1: Status.DONE},
        "z": {D1: Status.MISSED},
    })
    assert snap.count(D1) == 2
    assert snap.count(D1, Status.MISSED) == 1
    assert snap.count(D2) == 0


def test_snapshot_from_dict_skips_nulls_and_unknown():
    snap = StatusSnapshot.from_dict({
        "x": {"2024-01-02": "done", "2024-01-03": None, "2024-01-04": "maybe"},
    })
    assert snap.get("x", D1) is Status.DONE
    assert snap.days_for("x") == {D1: Status.DONE}


def test_snapshot_from_dict_malformed_day():
    with pytest.raises(MalformedDateError):
        StatusSnapshot.from_dict({"x": {"2024-1-2": "done"}})


def test_snapshot_from_dict_rejects_non_string_status():
    with pytest.raises(CorruptSnapshotError):
        StatusSnapshot.from_dict({"x": {"2024-01-02": 1}})


def test_tracker_state_from_dict():
    state = TrackerState.from_dict({
        "activities": [{"id": "a1", "name": "Read"}],
        "statusByDate": {"a1": {"2024-01-02": "missed"}},
        "lastClosedISO": "2024-01-03",
        "somethingElse": 1,
    })
    assert state.activities == (Activity("a1", "Read"),)
    assert state.statuses.get("a1", D1) is Status.MISSED
    assert state.last_closed == D2
    assert state.find_activity("a1").name == "Read"
    assert state.find_activity("nope") is None


def test_tracker_state_to_dict_shape():
    state = TrackerState(
        activities=(Activity("a1", "Read"),),
        statuses=StatusSnapshot({"a1": {D2: Status.DONE, D1: Status.MISSED}}),
        last_closed=None,
    )
    assert state.to_dict() == {
        "activities": [{"id": "a1", "name": "Read"}],
        "statusByDate": {"a1": {"2024-01-02": "missed", "2024-01-03": "done"}},
        "lastClosedISO": None,
    }


def test_tracker_state_empty():
    state = TrackerState.from_dict({})
    assert state.activities == ()
    assert state.last_closed is None


def test_status_symbols():
    assert Status.DONE.symbol == "✓"
    assert Status.MISSED.symbol == "✗"
    assert Status.ABSENT.symbol == ""
