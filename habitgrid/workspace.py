"""Workspace root, settings and path helpers for HabitGrid."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from habitgrid import days
from habitgrid.series import DEFAULT_CHART_MIN_Y

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "habitgrid_v1"


def workspace_root() -> Path:
    """Get the workspace root directory (holds settings, hooks and data)."""
    return Path(
        os.environ.get("HABITGRID_ROOT", str(Path.home() / "habitgrid"))
    ).expanduser().resolve()


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning empty dict if missing or empty."""
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str | None = None  # None = host local calendar
    storage_key: str = DEFAULT_STORAGE_KEY
    chart_min_y: int = DEFAULT_CHART_MIN_Y

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=d.get("timezone") or None,
            storage_key=str(d.get("storage_key") or DEFAULT_STORAGE_KEY),
            chart_min_y=int(d.get("chart_min_y", DEFAULT_CHART_MIN_Y)),
        )

    def tzinfo(self) -> ZoneInfo | None:
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r in settings; using local calendar", self.timezone)
            return None


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults on a parse error."""
    if root is None:
        root = workspace_root()
    try:
        return Settings.from_dict(read_yaml(settings_path(root)))
    except (yaml.YAMLError, OSError, ValueError, TypeError) as e:
        logger.warning("Could not read %s: %s; using defaults", settings_path(root), e)
        return Settings()


def today(root: Path | None = None) -> date:
    """Today's calendar day according to the workspace settings."""
    return days.today(load_settings(root).tzinfo())


# ── Path helpers ──────────────────────────────────────────────

def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habitgrid.log"
