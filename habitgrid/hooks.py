"""Shell hooks fired on tracker events.

hooks.yaml in the workspace root maps an event name to a list of commands,
either bare strings or {command, timeout} mappings:

    post_reconcile:
      - notify-send "HabitGrid closed missed days"
    on_toggle:
      - command: ./sync.sh
        timeout: 5

Each command gets the event payload as JSON on stdin. post_reconcile only
fires when a reconcile actually closed days or moved the cursor.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from habitgrid.workspace import hooks_config_path, read_yaml, workspace_root

logger = logging.getLogger(__name__)

HOOK_EVENTS = frozenset({
    "post_reconcile",
    "on_activity_add",
    "on_activity_delete",
    "on_toggle",
})

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


@dataclass(frozen=True)
class HookSpec:
    command: str
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def parse(cls, entry: Any) -> HookSpec | None:
        """Accept a bare command string or a {command, timeout} mapping."""
        if isinstance(entry, str):
            return cls(entry) if entry.strip() else None
        if not isinstance(entry, dict) or not entry.get("command"):
            return None
        try:
            timeout = float(entry.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError):
            logger.warning("Bad timeout %r for hook %r; using default", entry.get("timeout"), entry["command"])
            timeout = DEFAULT_TIMEOUT
        return cls(str(entry["command"]), timeout)


@dataclass(frozen=True)
class HookResult:
    event: str
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.error

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_hooks_config(root: Path | None = None) -> dict[str, list[HookSpec]]:
    """Parse hooks.yaml into event -> specs. Unknown events and junk entries are dropped."""
    if root is None:
        root = workspace_root()
    try:
        raw = read_yaml(hooks_config_path(root))
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring unreadable hooks config: %s", e)
        return {}

    config: dict[str, list[HookSpec]] = {}
    for event, entries in raw.items():
        if event not in HOOK_EVENTS:
            logger.warning("Ignoring hooks for unknown event %r", event)
            continue
        if not isinstance(entries, list):
            entries = [entries]
        specs = [s for s in (HookSpec.parse(e) for e in entries) if s is not None]
        if specs:
            config[event] = specs
    return config


def _execute(spec: HookSpec, event: str, payload: str, cwd: Path) -> HookResult:
    try:
        proc = subprocess.run(
            spec.command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=spec.timeout,
            cwd=str(cwd),
        )
    except subprocess.TimeoutExpired:
        logger.warning("Hook %r (%s) timed out after %ss", spec.command, event, spec.timeout)
        return HookResult(event, spec.command, -1, error=f"timed out after {spec.timeout:g}s")
    except OSError as e:
        logger.warning("Hook %r (%s) failed to start: %s", spec.command, event, e)
        return HookResult(event, spec.command, -1, error=str(e))

    if proc.returncode != 0:
        logger.warning("Hook %r (%s) exited %d", spec.command, event, proc.returncode)
    return HookResult(
        event,
        spec.command,
        proc.returncode,
        stdout=proc.stdout[:OUTPUT_CAP],
        stderr=proc.stderr[:OUTPUT_CAP],
    )


def run_hooks(event: str, context: dict[str, Any], root: Path | None = None) -> list[HookResult]:
    """Run every hook registered for *event*, in order. Failures never raise."""
    if event not in HOOK_EVENTS:
        return []
    if root is None:
        root = workspace_root()

    specs = load_hooks_config(root).get(event, [])
    if not specs:
        return []
    payload = json.dumps({"event": event, **context}, ensure_ascii=False)
    return [_execute(spec, event, payload, root) for spec in specs]
