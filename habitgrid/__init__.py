"""HabitGrid core library — day codec, closure engine and shared data layer.

Public API re-exports for convenient imports:
    from habitgrid import reconcile, build_series, TrackerSession, ...
"""

# Errors
from habitgrid.errors import (
    HabitGridError,
    MalformedDateError,
    CorruptSnapshotError,
    StorageUnavailable,
)

# Calendar-day codec
from habitgrid.days import (
    WEEKDAY_LABELS,
    today,
    parse_day,
    format_day,
    format_pretty,
    add_days,
    days_between,
    start_of_week,
    week_days,
    days_in_month,
)

# Workspace & settings
from habitgrid.workspace import (
    Settings,
    workspace_root,
    load_settings,
    settings_path,
    hooks_config_path,
    data_dir,
    log_path,
)

# Models
from habitgrid.models import (
    Status,
    Activity,
    StatusSnapshot,
    TrackerState,
)

# Engines
from habitgrid.closure import Reconciliation, reconcile, missed_days
from habitgrid.series import (
    MonthlySeries,
    SeriesPoint,
    build_series,
    chart_max,
    sparse_labels,
    render_text_chart,
)
from habitgrid.activities import (
    add_activity,
    delete_activity,
    toggle_today,
    new_activity_id,
)

# Persistence & session
from habitgrid.store import KeyValueStore, SnapshotStore
from habitgrid.hooks import HookResult, HookSpec, run_hooks, load_hooks_config
from habitgrid.session import AppState, TrackerSession
