#!/usr/bin/env python3
"""Daybook TUI — browse, search and edit journal records, powered by Textual."""

from __future__ import annotations

import sys

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Input, Label, Static

from daybook import (
    KINDS,
    DaybookError,
    Record,
    RecordListModel,
    Services,
    ValidationError,
    build_services,
    setup_logging,
)
from daybook.query import SORT_OPTIONS
from ui.presentation import category_style

KIND_ORDER = list(KINDS)


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#records-table {
    height: 1fr;
}

#stats-info {
    height: auto;
    padding: 1 2;
    margin: 0 0 1 0;
    border: tall $primary-background-darken-2;
}

#status-bar {
    height: auto;
    padding: 0 1;
    color: $text-muted;
}
"""


def _row(model: RecordListModel, rec: Record) -> tuple[str, ...]:
    style = category_style(model.kind, rec.category)
    flags = ("★" if rec.is_favorite else "") + ("▣" if rec.is_archived else "")
    text = rec.display_text(model.kind.display_field)
    if len(text) > 60:
        text = text[:59] + "…"
    return (
        rec.day.isoformat() if rec.day else "",
        f"{style['icon']} {style['label']}",
        text,
        flags,
    )


def _stats_text(model: RecordListModel) -> str:
    stats = model.statistics
    lines = [
        f"Total: {stats.total}  Active: {stats.active}  Archived: {stats.archived}",
        f"Favorites: {stats.favorites}",
        f"Streak: {stats.current_streak} days (best {stats.best_streak})",
        f"This week: {stats.weekly_completion}%  This month: {stats.monthly_completion}%",
    ]
    if stats.most_popular_category:
        lines.append(f"Most popular: {model.kind.category_label(stats.most_popular_category)}")
    dist = ", ".join(f"{model.kind.category_label(c)} {n}" for c, n in stats.distribution.items() if n)
    if dist:
        lines.append(dist)
    return "\n".join(lines)


# ── Main app ───────────────────────────────────────────────────


class DaybookApp(App):
    """Daybook — one screen per record kind."""

    TITLE = "Daybook"
    CSS = CSS
    AUTO_FOCUS = "#records-table"

    BINDINGS = [
        Binding("k", "next_kind", "Kind"),
        Binding("slash", "focus_search", "Search"),
        Binding("n", "new_record", "New"),
        Binding("f", "toggle_favorite", "Favorite"),
        Binding("a", "toggle_archive", "Archive"),
        Binding("x", "delete_record", "Delete"),
        Binding("v", "toggle_archived_view", "Archived"),
        Binding("o", "cycle_sort", "Sort"),
        Binding("c", "clear_filters", "Clear"),
        Binding("r", "random_record", "Random"),
        Binding("w", "spin_wheel", "Wheel"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    kind_name: reactive[str] = reactive(KIND_ORDER[0], init=False)

    def __init__(self, services: Services) -> None:
        super().__init__()
        self.services = services
        self.model: RecordListModel | None = None
        self._row_ids: list[str] = []

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Hide single-key bindings while typing in an input."""
        if action in ("blur_focus", "quit_app"):
            return True
        return None if isinstance(self.focused, Input) else True

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Input(placeholder="search…", id="search"),
                DataTable(id="records-table", cursor_type="row"),
                id="left-pane",
            ),
            Vertical(
                Label("Statistics", classes="section-title"),
                Static(id="stats-info"),
                Label("New entry", classes="section-title"),
                Input(placeholder="category", id="new-category"),
                Input(placeholder="text, then Enter", id="new-payload"),
                Static(id="status-bar"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#records-table", DataTable)
        table.add_columns("Day", "Category", "Entry", "")
        self._bind_model()

    # ── Model binding ──────────────────────────────────────────

    def _bind_model(self) -> None:
        if self.model is not None:
            self.model.close()
        self.model = self.services.model(self.kind_name)
        self.model.subscribe(lambda _event: self._refresh())
        self.query_one("#search", Input).value = ""
        self.query_one("#new-category", Input).value = self.model.kind.default_category
        self._refresh()

    def watch_kind_name(self, _old: str, _new: str) -> None:
        if self.is_mounted:
            self._bind_model()

    def _refresh(self) -> None:
        model = self.model
        if model is None:
            return
        view = "archived" if model.filters.archived_only else "active"
        self.sub_title = f"{model.kind.label} [{view}, sort: {model.sort}]"

        records = model.archived_items if model.filters.archived_only else model.items
        table = self.query_one("#records-table", DataTable)
        table.clear()
        self._row_ids = []
        for rec in records:
            table.add_row(*_row(model, rec), key=rec.id)
            self._row_ids.append(rec.id)

        self.query_one("#stats-info", Static).update(_stats_text(model))
        if model.last_error:
            self._status(f"Not saved: {model.last_error}")

    def _status(self, text: str) -> None:
        self.query_one("#status-bar", Static).update(text)

    def _selected_id(self) -> str | None:
        table = self.query_one("#records-table", DataTable)
        if not self._row_ids or table.cursor_row is None:
            return None
        if 0 <= table.cursor_row < len(self._row_ids):
            return self._row_ids[table.cursor_row]
        return None

    def _select(self, record_id: str) -> None:
        if record_id in self._row_ids:
            self.query_one("#records-table", DataTable).move_cursor(row=self._row_ids.index(record_id))

    # ── Inputs ─────────────────────────────────────────────────

    @on(Input.Changed, "#search")
    def _on_search(self, event: Input.Changed) -> None:
        if self.model is not None:
            self.model.search(event.value)

    @on(Input.Submitted, "#new-payload")
    def _on_new_payload(self, event: Input.Submitted) -> None:
        model = self.model
        if model is None:
            return
        category = self.query_one("#new-category", Input).value.strip()
        if not model.can_save(event.value, category):
            self._status(f"Cannot save: check the category ({', '.join(model.kind.category_ids)})")
            return
        field = "title" if model.kind.display_field == "title" else "payload"
        data = {"category": category, "payload": event.value}
        if field == "title":
            data["title"] = event.value
        try:
            rec = model.add(data)
        except ValidationError as e:
            self._status(str(e))
            return
        event.input.value = ""
        if rec is not None:
            self._status(f"Saved {rec.day}")
            self._select(rec.id)
        self.set_focus(self.query_one("#records-table", DataTable))

    # ── Actions ────────────────────────────────────────────────

    def action_next_kind(self) -> None:
        idx = KIND_ORDER.index(self.kind_name)
        self.kind_name = KIND_ORDER[(idx + 1) % len(KIND_ORDER)]

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()
        self.refresh_bindings()

    def action_new_record(self) -> None:
        self.query_one("#new-payload", Input).focus()
        self.refresh_bindings()

    def action_blur_focus(self) -> None:
        self.set_focus(self.query_one("#records-table", DataTable))
        self.refresh_bindings()

    def action_toggle_favorite(self) -> None:
        record_id = self._selected_id()
        if record_id and self.model is not None:
            self.model.toggle_favorite(record_id)
            self._select(record_id)

    def action_toggle_archive(self) -> None:
        record_id = self._selected_id()
        if record_id and self.model is not None:
            rec = self.model.toggle_archive(record_id)
            if rec is not None:
                self._status("Archived" if rec.is_archived else "Restored")

    def action_delete_record(self) -> None:
        record_id = self._selected_id()
        if record_id and self.model is not None:
            self.model.remove(record_id)
            self._status("Deleted")

    def action_toggle_archived_view(self) -> None:
        if self.model is not None:
            self.model.set_filters(archived_only=not self.model.filters.archived_only)

    def action_cycle_sort(self) -> None:
        if self.model is not None:
            idx = SORT_OPTIONS.index(self.model.sort)
            self.model.set_sort(SORT_OPTIONS[(idx + 1) % len(SORT_OPTIONS)])

    def action_clear_filters(self) -> None:
        if self.model is not None:
            self.query_one("#search", Input).value = ""
            self.model.clear_filters()

    def action_random_record(self) -> None:
        if self.model is None:
            return
        try:
            rec = self.model.random_record()
        except DaybookError as e:
            self.notify(str(e), title="Random", severity="warning")
            return
        if rec is None:
            self.notify("Nothing to pick from", title="Random", severity="warning")
            return
        self._select(rec.id)
        self.notify(rec.display_text(self.model.kind.display_field), title="Random pick")

    def action_spin_wheel(self) -> None:
        if self.model is None:
            return
        try:
            result = self.model.spin()
        except DaybookError as e:
            self.notify(str(e), title="Wheel", severity="warning")
            return
        if result is None or result.record is None:
            self.notify("The wheel is empty", title="Wheel", severity="warning")
            return
        self._select(result.record.id)
        self.notify(
            f"{result.record.display_text(self.model.kind.display_field)} (segment {result.segment_index + 1})",
            title="Wheel stopped",
        )

    def action_quit_app(self) -> None:
        if self.model is not None:
            self.model.close()
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    services = build_services()
    setup_logging(services.settings.log_level)
    if not services.root.exists():
        print(f"Workspace not found: {services.root}")
        print("Set DAYBOOK_ROOT to an existing directory.")
        sys.exit(1)

    app = DaybookApp(services)
    app.run()


if __name__ == "__main__":
    main()
