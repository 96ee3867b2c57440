"""Shared test fixtures for HabitGrid tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary, empty workspace (first run)."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    settings = {"storage_key": "habitgrid_v1", "chart_min_y": 4}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    os.environ["HABITGRID_ROOT"] = str(root)
    yield root
    if "HABITGRID_ROOT" in os.environ:
        del os.environ["HABITGRID_ROOT"]


@pytest.fixture
def seeded_workspace(workspace: Path) -> Path:
    """Workspace with a saved snapshot last closed on 2024-03-10."""
    document = {
        "activities": [
            {"id": "read0001", "name": "Read"},
            {"id": "walk0001", "name": "Walk"},
        ],
        "statusByDate": {
            "read0001": {"2024-03-08": "done", "2024-03-09": "missed"},
            "walk0001": {"2024-03-09": "done", "2024-03-10": "done"},
            "gone0001": {"2024-03-09": "done"},
        },
        "lastClosedISO": "2024-03-10",
    }
    (workspace / "data").mkdir()
    (workspace / "data" / "habitgrid_v1.json").write_text(
        json.dumps(document, indent=2), encoding="utf-8"
    )
    return workspace
