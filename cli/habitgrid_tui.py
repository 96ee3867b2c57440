#!/usr/bin/env python3
"""HabitGrid TUI — weekly habit grid and monthly chart powered by Textual."""

from __future__ import annotations

from datetime import date

from textual import events, on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static

from habitgrid import (
    WEEKDAY_LABELS,
    AppState,
    TrackerSession,
    format_day,
    format_pretty,
    log_path,
    parse_day,
    render_text_chart,
    workspace_root,
)
from habitgrid.logging_config import configure_logging

NAME_COLUMN = "activity"


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#date-pill {
    height: 1;
    padding: 0 2;
    color: $text-muted;
}

#grid {
    height: auto;
    max-height: 60%;
    margin: 1 1 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#month-chart {
    height: auto;
    padding: 0 2;
}

#status-bar {
    dock: bottom;
    height: 1;
    background: $primary-background;
    color: $text-muted;
    padding: 0 2;
}

.dialog {
    width: 60;
    height: auto;
    padding: 1 2;
    border: tall $primary;
    background: $surface;
}

.dialog-buttons {
    height: auto;
    margin: 1 0 0 0;
}

AddActivityScreen, ConfirmScreen {
    align: center middle;
}
"""


# ── Modals ─────────────────────────────────────────────────────


class AddActivityScreen(ModalScreen[str | None]):
    """Ask for the name of a new activity."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label("New activity", classes="section-title"),
            Input(placeholder="e.g. Read 20 pages", id="activity-name"),
            Horizontal(
                Button("Add", variant="primary", id="add"),
                Button("Cancel", id="cancel"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#activity-name", Input).focus()

    @on(Input.Submitted)
    def _on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    @on(Button.Pressed, "#add")
    def _on_add(self) -> None:
        self.dismiss(self.query_one("#activity-name", Input).value)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self.message),
            Horizontal(
                Button("Delete", variant="error", id="confirm"),
                Button("Cancel", id="cancel"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    @on(Button.Pressed, "#confirm")
    def _on_confirm(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(False)


# ── Grid screen ────────────────────────────────────────────────


class GridScreen(Screen):
    """Week grid (one row per activity) plus this month's completion chart."""

    BINDINGS = [
        Binding("a", "add_activity", "Add"),
        Binding("x", "delete_activity", "Delete"),
        Binding("space", "toggle_cell", "Toggle"),
        Binding("r", "reload", "Reload"),
        Binding("q", "app.quit", "Quit"),
    ]

    def __init__(self, session: TrackerSession) -> None:
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="date-pill")
        yield DataTable(id="grid", cursor_type="cell", zebra_stripes=True)
        yield Label("Activities done this month", classes="section-title")
        yield Static(id="month-chart")
        yield Static(id="status-bar")
        yield Footer()

    def on_screen_resume(self, event: events.ScreenResume) -> None:
        # Covers first display and every return to this view.
        self.action_reload()

    def action_reload(self) -> None:
        self._reload()

    @work(thread=True, group="tracker")
    def _reload(self) -> None:
        self.session.refresh()
        self.app.call_from_thread(self.render_state)

    # ── Rendering ──────────────────────────────────────────────

    def render_state(self) -> None:
        session = self.session
        today = session.today
        week = session.week()

        self.query_one("#date-pill", Static).update(format_pretty(today))

        table = self.query_one("#grid", DataTable)
        cursor = table.cursor_coordinate
        table.clear(columns=True)
        table.add_column("Activity", key=NAME_COLUMN)
        for label, day in zip(WEEKDAY_LABELS, week):
            header = f"[{label} {day.day}]" if day == today else f"{label} {day.day}"
            table.add_column(header, key=format_day(day))

        for activity in session.state.activities:
            cells = [activity.name]
            for day in week:
                cells.append(session.status(activity.id, day).symbol)
            table.add_row(*cells, key=activity.id)

        if session.state.activities:
            table.move_cursor(
                row=min(cursor.row, len(session.state.activities) - 1),
                column=cursor.column if cursor.column else week.index(today) + 1,
            )

        chart = render_text_chart(session.series(), session.settings.chart_min_y)
        self.query_one("#month-chart", Static).update(chart)

        if not session.state.activities:
            status = "No activities yet. Press 'a' to add one."
        elif session.last_error is not None:
            status = f"Storage problem: {session.last_error}"
        elif session.state.last_closed is not None:
            status = f"Closed through {format_day(session.state.last_closed)}. Only today's column is editable."
        else:
            status = ""
        self.query_one("#status-bar", Static).update(status)

    # ── Cell helpers ───────────────────────────────────────────

    def _cursor_cell(self) -> tuple[str, date] | None:
        """(activity_id, day) under the cursor, or None for the name column."""
        table = self.query_one("#grid", DataTable)
        if not table.row_count:
            return None
        row_key, column_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        if column_key.value == NAME_COLUMN:
            return None
        return row_key.value, parse_day(column_key.value)

    def _cursor_activity_id(self) -> str | None:
        table = self.query_one("#grid", DataTable)
        if not table.row_count:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    # ── Actions ────────────────────────────────────────────────

    @on(DataTable.CellSelected)
    def _on_cell_selected(self, event: DataTable.CellSelected) -> None:
        self.action_toggle_cell()

    def action_toggle_cell(self) -> None:
        cell = self._cursor_cell()
        if cell is None:
            return
        activity_id, day = cell
        if not self.session.is_editable(day):
            self.notify("Only today's cells can be changed.", severity="warning")
            return
        self._toggle(activity_id, day)

    @work(thread=True, group="tracker")
    def _toggle(self, activity_id: str, day: date) -> None:
        self.session.toggle(activity_id, day)
        self.app.call_from_thread(self.render_state)

    def action_add_activity(self) -> None:
        def _added(name: str | None) -> None:
            if name is not None:
                self._add(name)

        self.app.push_screen(AddActivityScreen(), _added)

    @work(thread=True, group="tracker")
    def _add(self, name: str) -> None:
        if self.session.add_activity(name) is not None:
            self.app.call_from_thread(self.render_state)

    def action_delete_activity(self) -> None:
        activity_id = self._cursor_activity_id()
        if activity_id is None:
            return
        activity = self.session.state.find_activity(activity_id)
        if activity is None:
            return

        def _confirmed(ok: bool | None) -> None:
            if ok:
                self._delete(activity_id)

        self.app.push_screen(
            ConfirmScreen(f"Delete '{activity.name}'? Its monthly history is kept."),
            _confirmed,
        )

    @work(thread=True, group="tracker")
    def _delete(self, activity_id: str) -> None:
        if self.session.delete_activity(activity_id):
            self.app.call_from_thread(self.render_state)


# ── Main app ───────────────────────────────────────────────────


class HabitGridApp(App):
    """HabitGrid — mark today's habits; skipped days close as missed."""

    TITLE = "HabitGrid"
    CSS = CSS

    def __init__(self, session: TrackerSession | None = None) -> None:
        super().__init__()
        self.session = session or TrackerSession(notify=self._notify_from_worker)

    def _notify_from_worker(self, message: str, severity: str) -> None:
        self.call_from_thread(self.notify, message, title="Storage", severity=severity)

    def on_mount(self) -> None:
        self.push_screen(GridScreen(self.session))

    # ── Lifecycle: only a background -> foreground edge reconciles ──

    def on_app_blur(self, event: events.AppBlur) -> None:
        self.session.on_app_state_change(AppState.BACKGROUND)

    def on_app_focus(self, event: events.AppFocus) -> None:
        self._resume()

    @work(thread=True, group="tracker")
    def _resume(self) -> None:
        if self.session.on_app_state_change(AppState.ACTIVE):
            self.call_from_thread(self._render_grid)

    def _render_grid(self) -> None:
        if isinstance(self.screen, GridScreen):
            self.screen.render_state()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    configure_logging(log_path(root))
    HabitGridApp().run()


if __name__ == "__main__":
    main()
