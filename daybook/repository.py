"""Persistence boundary: load/save the full record collection of one kind."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

from daybook.errors import PersistenceError
from daybook.fileio import read_json, write_json_atomic
from daybook.models import Record

logger = logging.getLogger(__name__)


class JsonRecordRepository:
    """One JSON document per kind: {"kind": ..., "records": [...]}."""

    def __init__(self, path: Path, kind: str) -> None:
        self.path = path
        self.kind = kind

    def load_all(self) -> list[Record]:
        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        try:
            return [Record.from_dict(r) for r in (data.get("records") or []) if isinstance(r, dict)]
        except ValueError as e:
            raise PersistenceError(f"Malformed record in {self.path}: {e}") from e

    def save_all(self, records: list[Record]) -> None:
        payload = {"kind": self.kind, "records": [r.to_dict() for r in records]}
        try:
            write_json_atomic(self.path, payload)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Saved %d %s records to %s", len(records), self.kind, self.path)


class MemoryRecordRepository:
    """Volatile repository for sessions without local storage."""

    def __init__(self, records: list[Record] | None = None) -> None:
        self._records = copy.deepcopy(records or [])
        self.save_count = 0

    def load_all(self) -> list[Record]:
        return copy.deepcopy(self._records)

    def save_all(self, records: list[Record]) -> None:
        self._records = copy.deepcopy(records)
        self.save_count += 1
