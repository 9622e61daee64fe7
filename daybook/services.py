"""Service container built once at the application root.

Entry points construct a Services object and hand it to the presentation
layer; nothing in Daybook keeps module-level state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from daybook.export import write_export
from daybook.kinds import KINDS, get_kind
from daybook.models import Settings
from daybook.query import RecordFilter, query_records
from daybook.repository import JsonRecordRepository
from daybook.store import RecordStore
from daybook.viewmodel import RecordListModel
from daybook.workspace import data_path, get_user_timezone, load_settings, workspace_root

logger = logging.getLogger(__name__)


@dataclass
class Services:
    root: Path
    settings: Settings
    tz: ZoneInfo
    rng: random.Random = field(default_factory=random.Random)
    _stores: dict[str, RecordStore] = field(default_factory=dict)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def store(self, kind_name: str) -> RecordStore:
        """The store for *kind_name*, created and loaded on first use."""
        store = self._stores.get(kind_name)
        if store is None:
            kind = get_kind(kind_name, self.settings.payload_limits)
            repo = JsonRecordRepository(data_path(kind.name, self.root), kind.name)
            store = RecordStore(kind, repo, clock=self.now)
            store.load()
            self._stores[kind_name] = store
        return store

    def model(self, kind_name: str, sort: str = "alphabetical") -> RecordListModel:
        return RecordListModel(
            self.store(kind_name),
            today=self.today,
            rng=self.rng,
            strict=self.settings.strict,
            wheel_turns=(self.settings.wheel_min_turns, self.settings.wheel_max_turns),
            sort=sort,
        )

    def export(self, kind_name: str, flt: RecordFilter | None = None) -> Path:
        """Export the records selected by *flt* (default: everything, archived included)."""
        store = self.store(kind_name)
        flt = flt or RecordFilter(include_archived=True)
        records = query_records(store.all(), flt, store.kind, "date_created", self.today())
        return write_export(records, store.kind, flt.period, self.now(), self.root)


def build_services(root: Path | None = None) -> Services:
    if root is None:
        root = workspace_root()
    settings = load_settings(root)
    tz = get_user_timezone(root, settings)
    logger.debug("Services for %s (%s), kinds: %s", root, tz.key, ", ".join(KINDS))
    return Services(root=root, settings=settings, tz=tz)
