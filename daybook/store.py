"""Record Store: validation, CRUD, lifecycle and change notification for Daybook."""

from __future__ import annotations

import copy
import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable

from daybook.errors import NotFoundError, PersistenceError, ValidationError
from daybook.kinds import RecordKind
from daybook.models import Record, new_record_id

logger = logging.getLogger(__name__)

Listener = Callable[[str, "Record | None"], None]


# ── Validation ────────────────────────────────────────────────


CHECKLISTS = {"tools": "tools_checked", "steps": "steps_completed"}

# Field names accepted by update(); camelCase aliases map to attributes.
EDITABLE_FIELDS = {
    "category": "category",
    "payload": "payload",
    "title": "title",
    "day": "day",
    "isFavorite": "is_favorite",
    "is_favorite": "is_favorite",
    "isArchived": "is_archived",
    "is_archived": "is_archived",
    "tools": "tools",
    "toolsChecked": "tools_checked",
    "tools_checked": "tools_checked",
    "steps": "steps",
    "stepsCompleted": "steps_completed",
    "steps_completed": "steps_completed",
}
IGNORED_FIELDS = {"id", "createdAt", "created_at", "updatedAt", "updated_at", "archivedAt", "archived_at"}


def validate_record(record: Record, kind: RecordKind) -> list[str]:
    """Validate a record against its kind and return list of errors (empty if valid)."""
    errors = []
    if record.category not in kind.categories:
        errors.append(f"Invalid category for {kind.name}: {record.category!r}")
    if kind.payload_required and not record.payload.strip():
        errors.append("Payload must not be empty")
    if kind.date_partitioned and record.day is None:
        errors.append("Missing required field: day")
    if any(not isinstance(t, str) for t in record.tools):
        errors.append("tools must be a list of strings")
    if any(not isinstance(s, str) for s in record.steps):
        errors.append("steps must be a list of strings")
    return errors


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def _coerce_field(attr: str, value: Any) -> Any:
    if attr == "day":
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date) or value is None:
            return value
        try:
            return date.fromisoformat(str(value))
        except ValueError as e:
            raise ValidationError(f"Invalid day: {value!r}") from e
    if attr in ("is_favorite", "is_archived"):
        return bool(value)
    if attr in ("tools", "steps"):
        return [str(v) for v in (value or [])]
    if attr in ("tools_checked", "steps_completed"):
        return [bool(v) for v in (value or [])]
    return "" if value is None else str(value)


def apply_changes(record: Record, changes: dict[str, Any]) -> None:
    """Apply a mapping of field changes to *record* in place."""
    unknown = [k for k in changes if k not in EDITABLE_FIELDS and k not in IGNORED_FIELDS]
    if unknown:
        raise ValidationError([f"Unknown field: {k}" for k in unknown])
    for key, value in changes.items():
        attr = EDITABLE_FIELDS.get(key)
        if attr:
            setattr(record, attr, _coerce_field(attr, value))


# ── Store ─────────────────────────────────────────────────────


class RecordStore:
    """Single source of truth for one kind's record collection.

    The in-memory list is authoritative for the session; every mutation is
    persisted through the repository and announced to subscribers.
    """

    def __init__(self, kind: RecordKind, repository, clock: Callable[[], datetime] | None = None) -> None:
        self.kind = kind
        self.repository = repository
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._records: list[Record] = []
        self._listeners: list[Listener] = []
        self.dirty = False

    def __len__(self) -> int:
        return len(self._records)

    # ── Loading / saving ──────────────────────────────────────

    def load(self) -> int:
        """Replace the in-memory collection with the persisted one."""
        records = self.repository.load_all()
        if self.kind.date_partitioned:
            records = self._dedupe_days(records)
        self._records = records
        self.dirty = False
        logger.debug("Loaded %d %s records", len(records), self.kind.name)
        self._notify("loaded", None)
        return len(records)

    def save(self) -> None:
        """Persist the current collection. Raises PersistenceError on failure."""
        try:
            self.repository.save_all(self._records)
        except PersistenceError:
            self.dirty = True
            logger.warning("Could not persist %s records; keeping in-memory state", self.kind.name, exc_info=True)
            raise
        self.dirty = False

    def _dedupe_days(self, records: list[Record]) -> list[Record]:
        by_day: dict[date | None, Record] = {}
        result = []
        for rec in records:
            kept = by_day.get(rec.day)
            if kept is None:
                by_day[rec.day] = rec
                result.append(rec)
                continue
            logger.warning("Duplicate %s record for %s; keeping the most recent", self.kind.name, rec.day)
            newer = rec.updated_at or rec.created_at
            older = kept.updated_at or kept.created_at
            if newer is not None and (older is None or newer > older):
                result[result.index(kept)] = rec
                by_day[rec.day] = rec
        return result

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, record: Record | None) -> None:
        snapshot = copy.deepcopy(record) if record is not None else None
        for listener in list(self._listeners):
            listener(event, snapshot)

    def _commit(self, event: str, record: Record | None, changed: int | None = None) -> None:
        try:
            self.save()
        except PersistenceError as e:
            if record is not None:
                e.record = copy.deepcopy(record)
            e.changed = changed
            raise
        finally:
            self._notify(event, record)
        logger.info("%s %s record %s", event.capitalize(), self.kind.name, record.id if record else "(bulk)")

    # ── Reads ─────────────────────────────────────────────────

    def all(self) -> list[Record]:
        """Snapshot of every record, in insertion order."""
        return copy.deepcopy(self._records)

    def get(self, record_id: str) -> Record | None:
        for rec in self._records:
            if rec.id == record_id:
                return copy.deepcopy(rec)
        return None

    def find_by_date(self, day: date | str) -> Record | None:
        """Return the record on the given calendar day, if any."""
        if isinstance(day, datetime):
            day = day.date()
        elif isinstance(day, str):
            day = date.fromisoformat(day)
        for rec in self._records:
            if rec.day == day:
                return copy.deepcopy(rec)
        return None

    def _index(self, record_id: str) -> int:
        for i, rec in enumerate(self._records):
            if rec.id == record_id:
                return i
        raise NotFoundError(record_id)

    # ── Mutations ─────────────────────────────────────────────

    def _prepare(self, record: Record) -> None:
        record.payload = truncate(record.payload, self.kind.payload_limit)
        record.title = truncate(record.title, self.kind.title_limit)
        record.normalize_checklists()
        errors = validate_record(record, self.kind)
        if errors:
            raise ValidationError(errors)

    def add(self, record: Record | dict[str, Any]) -> Record:
        """Add a record, assigning id and timestamps if absent.

        For date-partitioned kinds, a record for an occupied day updates the
        existing record instead of inserting a second one.
        """
        if isinstance(record, dict):
            try:
                record = Record.from_dict(record)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid record: {e}") from e
        else:
            record = copy.deepcopy(record)
        now = self._clock()
        if record.day is None:
            record.day = (record.created_at or now).date()
        self._prepare(record)

        if self.kind.date_partitioned:
            existing = self.find_by_date(record.day)
            if existing is not None:
                return self.update(existing.id, self._merge_fields(record))

        record.id = record.id or new_record_id()
        if any(r.id == record.id for r in self._records):
            raise ValidationError(f"Record ID already exists: {record.id}")
        record.created_at = record.created_at or now
        record.updated_at = record.created_at
        if record.is_archived and record.archived_at is None:
            record.archived_at = now
        self._records.append(record)
        self._commit("added", record)
        return copy.deepcopy(record)

    @staticmethod
    def _merge_fields(record: Record) -> dict[str, Any]:
        """Fields an add onto an occupied day carries over to the existing record."""
        changes: dict[str, Any] = {
            "category": record.category,
            "payload": record.payload,
            "title": record.title,
        }
        if record.is_favorite:
            changes["isFavorite"] = True
        if record.tools:
            changes["tools"] = record.tools
            changes["toolsChecked"] = record.tools_checked
        if record.steps:
            changes["steps"] = record.steps
            changes["stepsCompleted"] = record.steps_completed
        return changes

    def update(self, record_id: str, changes: Callable[[Record], None] | dict[str, Any]) -> Record:
        """Apply a mutator (callable or field mapping) to a record and persist."""
        idx = self._index(record_id)
        original = self._records[idx]
        record = copy.deepcopy(original)
        if callable(changes):
            changes(record)
        else:
            apply_changes(record, changes)

        record.id = original.id
        record.created_at = original.created_at
        self._prepare(record)

        if self.kind.date_partitioned and record.day != original.day:
            clash = self.find_by_date(record.day)
            if clash is not None and clash.id != record.id:
                raise ValidationError(f"A {self.kind.name} record already exists for {record.day}")

        now = self._clock()
        if record.is_archived and not original.is_archived:
            record.archived_at = now
        elif not record.is_archived:
            record.archived_at = None
        record.updated_at = now
        self._records[idx] = record
        self._commit("updated", record)
        return copy.deepcopy(record)

    def remove(self, record_id: str) -> bool:
        """Delete by id. Removing an absent id is a no-op."""
        for i, rec in enumerate(self._records):
            if rec.id == record_id:
                removed = self._records.pop(i)
                self._commit("removed", removed)
                return True
        logger.debug("Remove of absent %s record %s ignored", self.kind.name, record_id)
        return False

    def toggle_favorite(self, record_id: str) -> Record:
        def flip(rec: Record) -> None:
            rec.is_favorite = not rec.is_favorite
        return self.update(record_id, flip)

    def toggle_archive(self, record_id: str) -> Record:
        def flip(rec: Record) -> None:
            rec.is_archived = not rec.is_archived
        return self.update(record_id, flip)

    def toggle_checklist_item(self, record_id: str, checklist: str, index: int) -> Record:
        """Flip one entry of the tools or steps checklist."""
        attr = CHECKLISTS.get(checklist)
        if attr is None:
            raise ValidationError(f"Unknown checklist: {checklist}")

        def flip(rec: Record) -> None:
            flags = getattr(rec, attr)
            if not 0 <= index < len(flags):
                raise ValidationError(f"{checklist} index out of range: {index}")
            flags[index] = not flags[index]

        return self.update(record_id, flip)

    # ── Bulk operations ───────────────────────────────────────

    def _bulk_archive(self, record_ids: Iterable[str], archived: bool) -> int:
        wanted = set(record_ids)
        now = self._clock()
        changed = 0
        for rec in self._records:
            if rec.id in wanted and rec.is_archived != archived:
                rec.is_archived = archived
                rec.archived_at = now if archived else None
                rec.updated_at = now
                changed += 1
        if changed:
            self._commit("archived" if archived else "restored", None, changed)
        return changed

    def archive_many(self, record_ids: Iterable[str]) -> int:
        return self._bulk_archive(record_ids, True)

    def restore_many(self, record_ids: Iterable[str]) -> int:
        return self._bulk_archive(record_ids, False)

    def remove_many(self, record_ids: Iterable[str]) -> int:
        wanted = set(record_ids)
        before = len(self._records)
        self._records = [r for r in self._records if r.id not in wanted]
        removed = before - len(self._records)
        if removed:
            self._commit("removed", None, removed)
        return removed
