"""JSON export of a record selection."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from daybook.errors import PersistenceError
from daybook.fileio import write_json_atomic
from daybook.kinds import RecordKind
from daybook.models import Record
from daybook.workspace import exports_dir

logger = logging.getLogger(__name__)


def build_export(records: Iterable[Record], kind: RecordKind, time_range: str, now: datetime) -> dict[str, Any]:
    entries = [r.to_dict() for r in records]
    return {
        "kind": kind.name,
        "timeRange": time_range,
        "exportDate": now.isoformat(timespec="seconds"),
        "totalEntries": len(entries),
        "entries": entries,
    }


def export_filename(kind: RecordKind, now: datetime) -> str:
    return f"{kind.name}_export_{now.strftime('%Y-%m-%d_%H-%M-%S')}.json"


def write_export(
    records: Iterable[Record],
    kind: RecordKind,
    time_range: str,
    now: datetime,
    root: Path | None = None,
) -> Path:
    """Write the export document under <root>/exports and return its path."""
    document = build_export(records, kind, time_range, now)
    path = exports_dir(root) / export_filename(kind, now)
    try:
        write_json_atomic(path, document)
    except OSError as e:
        raise PersistenceError(f"Cannot write export {path}: {e}") from e
    logger.info("Exported %d %s records to %s", document["totalEntries"], kind.name, path)
    return path
