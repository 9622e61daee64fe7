"""Observable view-model: the surface a screen binds to.

Wraps one RecordStore with the screen's current filters and sort order,
recomputes lists and statistics on demand, and tells subscribers when
anything they display may have changed.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, Callable, Iterable, TypeVar

from daybook.analytics import compute_snapshot
from daybook.errors import EmptyCandidatesError, NotFoundError, PersistenceError, ValidationError
from daybook.models import Record, StatisticsSnapshot, WheelSpin
from daybook.query import SORT_OPTIONS, RecordFilter, query_records
from daybook.randomizer import pick, spin_wheel
from daybook.store import RecordStore, validate_record

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordListModel:
    def __init__(
        self,
        store: RecordStore,
        today: Callable[[], date] | None = None,
        rng: random.Random | None = None,
        strict: bool = False,
        wheel_turns: tuple[int, int] = (3, 6),
        sort: str = "alphabetical",
    ) -> None:
        self.store = store
        self.kind = store.kind
        self._today = today or date.today
        self.rng = rng or random.Random()
        self.strict = strict
        self.wheel_turns = wheel_turns
        self.filters = RecordFilter()
        self.sort = sort
        self.last_error: str | None = None
        self.last_pick: Record | None = None
        self._listeners: list[Callable[[str], None]] = []
        self._unsubscribe_store = store.subscribe(self._on_store_change)

    def close(self) -> None:
        self._unsubscribe_store()
        self._listeners.clear()

    # ── Change notification ───────────────────────────────────

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _on_store_change(self, event: str, _record: Record | None) -> None:
        self._emit(event)

    # ── Derived views ─────────────────────────────────────────

    @property
    def today(self) -> date:
        return self._today()

    @property
    def items(self) -> list[Record]:
        """Current list under the active filters and sort order."""
        return query_records(self.store.all(), self.filters, self.kind, self.sort, self.today)

    @property
    def archived_items(self) -> list[Record]:
        flt = self.filters.with_changes(archived_only=True)
        return query_records(self.store.all(), flt, self.kind, "date_archived", self.today)

    @property
    def favorites(self) -> list[Record]:
        flt = self.filters.with_changes(favorites_only=True)
        return query_records(self.store.all(), flt, self.kind, self.sort, self.today)

    @property
    def statistics(self) -> StatisticsSnapshot:
        return compute_snapshot(self.store.all(), self.kind, self.today)

    # ── Filters ───────────────────────────────────────────────

    def search(self, text: str) -> None:
        self.filters = self.filters.with_changes(text_query=text or "")
        self._emit("filters")

    def set_filters(self, **changes: Any) -> None:
        if "categories" in changes:
            changes["categories"] = frozenset(changes["categories"] or ())
        self.filters = self.filters.with_changes(**changes)
        self._emit("filters")

    def clear_filters(self) -> None:
        self.filters = self.filters.cleared()
        self._emit("filters")

    def set_sort(self, option: str) -> None:
        if option not in SORT_OPTIONS:
            raise ValidationError(f"Invalid sort option: {option}")
        self.sort = option
        self._emit("filters")

    # ── Actions ───────────────────────────────────────────────

    def can_save(self, payload: str, category: str) -> bool:
        """Whether a save button for this input should be enabled."""
        draft = Record(category=category, payload=payload or "", day=self.today)
        return not validate_record(draft, self.kind)

    def _guard(
        self,
        action: Callable[[], T],
        fallback: T,
        unsaved: Callable[[PersistenceError], T] | None = None,
    ) -> T:
        """Run a store mutation, absorbing missing ids and failed saves.

        On a failed save the change is still in memory; ``unsaved`` turns the
        error into the value the caller would have got, otherwise ``fallback``.
        """
        try:
            result = action()
        except NotFoundError as e:
            logger.warning("%s; treating as no-op", e)
            return fallback
        except PersistenceError as e:
            self.last_error = str(e)
            logger.warning("Change kept in memory only: %s", e)
            if unsaved is not None:
                return unsaved(e)
            return fallback
        self.last_error = None
        return result

    @staticmethod
    def _unsaved_record(error: PersistenceError) -> Record | None:
        return error.record

    @staticmethod
    def _unsaved_count(error: PersistenceError) -> int:
        return error.changed or 0

    def add(self, record: Record | dict[str, Any]) -> Record | None:
        return self._guard(lambda: self.store.add(record), None, self._unsaved_record)

    def update(self, record_id: str, changes) -> Record | None:
        return self._guard(lambda: self.store.update(record_id, changes), None, self._unsaved_record)

    def remove(self, record_id: str) -> bool:
        # a failed save still removed the record from memory
        return self._guard(lambda: self.store.remove(record_id), True)

    def toggle_favorite(self, record_id: str) -> Record | None:
        return self._guard(lambda: self.store.toggle_favorite(record_id), None, self._unsaved_record)

    def toggle_archive(self, record_id: str) -> Record | None:
        return self._guard(lambda: self.store.toggle_archive(record_id), None, self._unsaved_record)

    def toggle_checklist_item(self, record_id: str, checklist: str, index: int) -> Record | None:
        return self._guard(
            lambda: self.store.toggle_checklist_item(record_id, checklist, index), None, self._unsaved_record
        )

    def archive_many(self, record_ids: Iterable[str]) -> int:
        ids = list(record_ids)
        return self._guard(lambda: self.store.archive_many(ids), 0, self._unsaved_count)

    def restore_many(self, record_ids: Iterable[str]) -> int:
        ids = list(record_ids)
        return self._guard(lambda: self.store.restore_many(ids), 0, self._unsaved_count)

    def remove_many(self, record_ids: Iterable[str]) -> int:
        ids = list(record_ids)
        return self._guard(lambda: self.store.remove_many(ids), 0, self._unsaved_count)

    # ── Random surfacing ──────────────────────────────────────

    def _empty(self, error: EmptyCandidatesError) -> None:
        if self.strict:
            raise error
        logger.warning("%s for %s; ignoring", error, self.kind.name)

    def random_record(self, favorites_weight: float | None = None) -> Record | None:
        """Surface a random visible record, avoiding the previous pick."""
        candidates = self.items
        weights = None
        if favorites_weight is not None:
            weights = [favorites_weight if r.is_favorite else 1.0 for r in candidates]
        last_id = self.last_pick.id if self.last_pick else None
        previous = next((r for r in candidates if r.id == last_id), None)
        try:
            chosen = pick(candidates, previous=previous, rng=self.rng, weights=weights)
        except EmptyCandidatesError as e:
            self._empty(e)
            return None
        self.last_pick = chosen
        return chosen

    def spin(self) -> WheelSpin | None:
        """Spin the wheel over the visible records."""
        min_turns, max_turns = self.wheel_turns
        try:
            result = spin_wheel(self.items, rng=self.rng, min_turns=min_turns, max_turns=max_turns)
        except EmptyCandidatesError as e:
            self._empty(e)
            return None
        self.last_pick = result.record
        return result
