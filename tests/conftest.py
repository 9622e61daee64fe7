"""Shared test fixtures for Daybook tests."""

from __future__ import annotations

import json
import os
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from daybook.kinds import GRATITUDE, MOOD, PARTY_TASK, REPAIR
from daybook.models import Record
from daybook.repository import MemoryRecordRepository
from daybook.store import RecordStore


class FixedClock:
    """Settable clock for stores; advance() moves it forward by whole seconds."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 1) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def gratitude_store(clock) -> RecordStore:
    store = RecordStore(GRATITUDE, MemoryRecordRepository(), clock=clock)
    store.load()
    return store


@pytest.fixture
def mood_store(clock) -> RecordStore:
    store = RecordStore(MOOD, MemoryRecordRepository(), clock=clock)
    store.load()
    return store


@pytest.fixture
def party_store(clock) -> RecordStore:
    store = RecordStore(PARTY_TASK, MemoryRecordRepository(), clock=clock)
    store.load()
    return store


@pytest.fixture
def repair_store(clock) -> RecordStore:
    store = RecordStore(REPAIR, MemoryRecordRepository(), clock=clock)
    store.load()
    return store


def make_record(day: str, category: str, payload: str = "entry", **kwargs) -> Record:
    """Record on *day* with createdAt at noon UTC that day."""
    d = date.fromisoformat(day)
    created = datetime(d.year, d.month, d.day, 12, 0, tzinfo=timezone.utc)
    return Record(
        id=kwargs.pop("id", f"{category}-{day}-{payload}"),
        category=category,
        payload=payload,
        day=d,
        created_at=created,
        updated_at=created,
        **kwargs,
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with standard structure."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    # Settings
    settings = {
        "timezone": "UTC",
        "log_level": "DEBUG",
        "strict": False,
        "wheel_min_turns": 3,
        "wheel_max_turns": 6,
        "payload_limits": {"gratitude": 200},
    }
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    # Gratitude entries
    gratitude = {
        "kind": "gratitude",
        "records": [
            {
                "id": "g1",
                "category": "family",
                "payload": "Dinner with my parents",
                "day": "2024-03-10",
                "createdAt": "2024-03-10T19:30:00+00:00",
                "updatedAt": "2024-03-10T19:30:00+00:00",
                "isFavorite": True,
                "isArchived": False,
            },
            {
                "id": "g2",
                "category": "nature",
                "payload": "Sunshine on the walk to work",
                "day": "2024-03-11",
                "createdAt": "2024-03-11T08:15:00+00:00",
                "updatedAt": "2024-03-11T08:15:00+00:00",
                "isFavorite": False,
                "isArchived": False,
            },
            {
                "id": "g3",
                "category": "work",
                "payload": "Finished the quarterly report",
                "day": "2024-02-28",
                "createdAt": "2024-02-28T17:00:00+00:00",
                "updatedAt": "2024-03-01T09:00:00+00:00",
                "isFavorite": False,
                "isArchived": True,
                "archivedAt": "2024-03-01T09:00:00+00:00",
            },
        ],
    }
    (root / "data" / "gratitude.json").write_text(
        json.dumps(gratitude, indent=2), encoding="utf-8"
    )

    # Moods
    mood = {
        "kind": "mood",
        "records": [
            {
                "id": "m1",
                "category": "happy",
                "payload": "",
                "day": "2024-03-10",
                "createdAt": "2024-03-10T21:00:00+00:00",
                "updatedAt": "2024-03-10T21:00:00+00:00",
                "isFavorite": False,
                "isArchived": False,
            },
            {
                "id": "m2",
                "category": "calm",
                "payload": "Quiet Sunday",
                "day": "2024-03-11",
                "createdAt": "2024-03-11T21:00:00+00:00",
                "updatedAt": "2024-03-11T21:00:00+00:00",
                "isFavorite": False,
                "isArchived": False,
            },
        ],
    }
    (root / "data" / "mood.json").write_text(
        json.dumps(mood, indent=2), encoding="utf-8"
    )

    # Repair guides
    repair = {
        "kind": "repair",
        "records": [
            {
                "id": "r1",
                "category": "plumbing",
                "title": "Fix a dripping tap",
                "payload": "Turn off the supply, replace the washer.",
                "createdAt": "2024-03-01T10:00:00+00:00",
                "updatedAt": "2024-03-01T10:00:00+00:00",
                "isFavorite": False,
                "isArchived": False,
                "tools": ["Wrench", "Washer"],
                "toolsChecked": [False, False],
                "steps": ["Shut off water", "Remove handle", "Swap washer"],
                "stepsCompleted": [True, False, False],
            },
        ],
    }
    (root / "data" / "repair.json").write_text(
        json.dumps(repair, indent=2), encoding="utf-8"
    )

    # Set env var
    os.environ["DAYBOOK_ROOT"] = str(root)
    yield root
    # Cleanup
    if "DAYBOOK_ROOT" in os.environ:
        del os.environ["DAYBOOK_ROOT"]
