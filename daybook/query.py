"""Query engine: filtered and sorted read-only views over a record collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Iterable

from daybook.errors import ValidationError
from daybook.kinds import RecordKind
from daybook.models import Record

logger = logging.getLogger(__name__)

PERIODS = ("all", "today", "week", "month", "custom")
SORT_OPTIONS = ("alphabetical", "date_created", "date_archived", "category")


@dataclass(frozen=True)
class RecordFilter:
    """Predicate set for list views. Defaults select every active record."""

    categories: frozenset[str] = field(default_factory=frozenset)
    favorites_only: bool = False
    include_archived: bool = False
    archived_only: bool = False
    text_query: str = ""
    period: str = "all"
    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if self.period not in PERIODS:
            raise ValidationError(f"Invalid period: {self.period}")
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))

    def is_active(self) -> bool:
        return bool(
            self.categories
            or self.favorites_only
            or self.text_query.strip()
            or self.period != "all"
            or self.start
            or self.end
        )

    def cleared(self) -> RecordFilter:
        """Same archive partition, every other predicate reset."""
        return RecordFilter(include_archived=self.include_archived, archived_only=self.archived_only)

    def with_changes(self, **changes) -> RecordFilter:
        return replace(self, **changes)


def date_window(flt: RecordFilter, today: date) -> tuple[date | None, date | None]:
    """Resolve the filter's period to an inclusive (start, end) day window."""
    if flt.period == "today":
        return today, today
    if flt.period == "week":
        return today - timedelta(days=6), today
    if flt.period == "month":
        return today.replace(day=1), today
    return flt.start, flt.end


def _search_fields(record: Record, kind: RecordKind) -> Iterable[str]:
    yield record.payload
    yield record.title
    yield kind.category_label(record.category)
    yield from record.tools
    yield from record.steps


def matches_text(record: Record, query: str, kind: RecordKind) -> bool:
    needle = query.strip().casefold()
    if not needle:
        return True
    return any(needle in text.casefold() for text in _search_fields(record, kind))


def matches(record: Record, flt: RecordFilter, kind: RecordKind, today: date | None = None) -> bool:
    """True if *record* satisfies every predicate in *flt*."""
    if flt.archived_only:
        if not record.is_archived:
            return False
    elif not flt.include_archived and record.is_archived:
        return False

    if flt.categories and not set(kind.categories) <= flt.categories:
        if record.category not in flt.categories:
            return False

    if flt.favorites_only and not record.is_favorite:
        return False

    start, end = date_window(flt, today or date.today())
    if start is not None and (record.day is None or record.day < start):
        return False
    if end is not None and (record.day is None or record.day > end):
        return False

    return matches_text(record, flt.text_query, kind)


def filter_records(
    records: Iterable[Record],
    flt: RecordFilter,
    kind: RecordKind,
    today: date | None = None,
) -> list[Record]:
    """Records satisfying *flt*, in input order. Empty list when nothing matches."""
    today = today or date.today()
    result = [r for r in records if matches(r, flt, kind, today)]
    logger.debug("Filter on %s kept %d records", kind.name, len(result))
    return result


# ── Sorting ───────────────────────────────────────────────────


def _created_ts(record: Record) -> float:
    return record.created_at.timestamp() if record.created_at else 0.0


def sort_records(records: Iterable[Record], option: str, kind: RecordKind) -> list[Record]:
    """Sort for display.

    alphabetical: display field, case-insensitive ascending.
    date_created: newest first.
    date_archived: most recently archived first, falling back to creation time.
    category: category label ascending, then newest first.
    """
    records = list(records)
    if option == "alphabetical":
        return sorted(records, key=lambda r: r.display_text(kind.display_field).casefold())
    if option == "date_created":
        return sorted(records, key=_created_ts, reverse=True)
    if option == "date_archived":
        return sorted(
            records,
            key=lambda r: r.archived_at.timestamp() if r.archived_at else _created_ts(r),
            reverse=True,
        )
    if option == "category":
        return sorted(records, key=lambda r: (kind.category_label(r.category).casefold(), -_created_ts(r)))
    raise ValidationError(f"Invalid sort option: {option}")


def query_records(
    records: Iterable[Record],
    flt: RecordFilter,
    kind: RecordKind,
    sort: str = "alphabetical",
    today: date | None = None,
) -> list[Record]:
    """Filter then sort."""
    return sort_records(filter_records(records, flt, kind, today), sort, kind)
