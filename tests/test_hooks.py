"""Tests for habitgrid/hooks.py — hook system."""

import json

import yaml

from habitgrid.hooks import DEFAULT_TIMEOUT, HookSpec, load_hooks_config, run_hooks


def _write_hooks(workspace, config):
    (workspace / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    assert load_hooks_config(workspace) == {}
    assert run_hooks("post_reconcile", {"today": "2024-01-04"}, workspace) == []


def test_run_hooks_with_echo(workspace):
    """Hook receives the event name and context as JSON on stdin."""
    _write_hooks(workspace, {"on_toggle": ["cat"]})
    results = run_hooks("on_toggle", {"activityId": "a1", "status": "done"}, workspace)
    assert len(results) == 1
    assert results[0].ok
    assert results[0].event == "on_toggle"
    assert json.loads(results[0].stdout) == {"event": "on_toggle", "activityId": "a1", "status": "done"}


def test_load_hooks_config_parses_entries(workspace):
    _write_hooks(workspace, {
        "on_toggle": ["cat", {"command": "true", "timeout": 5}, {"timeout": 2}, ""],
        "on_activity_add": "echo added",
        "post_finalize": ["cat"],
    })
    config = load_hooks_config(workspace)
    assert config == {
        "on_toggle": [HookSpec("cat", DEFAULT_TIMEOUT), HookSpec("true", 5.0)],
        "on_activity_add": [HookSpec("echo added")],
    }


def test_bad_timeout_falls_back_to_default():
    assert HookSpec.parse({"command": "true", "timeout": "soon"}) == HookSpec("true", DEFAULT_TIMEOUT)


def test_run_hooks_invalid_hook_point(workspace):
    _write_hooks(workspace, {"post_finalize": ["cat"]})
    assert run_hooks("post_finalize", {}, workspace) == []


def test_run_hooks_nonzero_exit(workspace):
    _write_hooks(workspace, {"on_activity_add": [{"command": "echo oops >&2; exit 3"}]})
    [result] = run_hooks("on_activity_add", {}, workspace)
    assert result.exit_code == 3
    assert not result.ok
    assert result.stderr.strip() == "oops"


def test_run_hooks_timeout(workspace):
    _write_hooks(workspace, {"post_reconcile": [{"command": "sleep 10", "timeout": 1}]})
    results = run_hooks("post_reconcile", {}, workspace)
    assert len(results) == 1
    assert results[0].exit_code == -1
    assert "timed out" in results[0].error
    assert results[0].to_dict()["error"] == results[0].error


def test_broken_hooks_yaml_is_ignored(workspace):
    (workspace / "hooks.yaml").write_text("on_toggle: [unclosed", encoding="utf-8")
    assert run_hooks("on_toggle", {}, workspace) == []
