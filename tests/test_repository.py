"""Tests for daybook/repository.py and daybook/fileio.py — persistence."""

import pytest

from daybook.errors import PersistenceError
from daybook.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic
from daybook.kinds import MOOD
from daybook.repository import JsonRecordRepository, MemoryRecordRepository
from daybook.store import RecordStore
from daybook.workspace import data_path


def test_read_json_missing(tmp_path):
    assert read_json(tmp_path / "nope.json") == {}


def test_read_json_blank(tmp_path):
    p = tmp_path / "blank.json"
    p.write_text("  \n", encoding="utf-8")
    assert read_json(p) == {}


def test_write_json_atomic_creates_parents(tmp_path):
    p = tmp_path / "a" / "b" / "doc.json"
    write_json_atomic(p, {"x": "ü"})
    assert read_json(p) == {"x": "ü"}
    assert p.read_text(encoding="utf-8").endswith("\n")
    assert not any(f.name.startswith(".tmp_") for f in p.parent.iterdir())


def test_yaml_round_trip(tmp_path):
    p = tmp_path / "settings.yaml"
    write_yaml_atomic(p, {"timezone": "UTC", "strict": True})
    assert read_yaml(p) == {"timezone": "UTC", "strict": True}


def test_load_all(workspace):
    repo = JsonRecordRepository(data_path("gratitude", workspace), "gratitude")
    records = repo.load_all()
    assert [r.id for r in records] == ["g1", "g2", "g3"]
    assert records[2].is_archived is True


def test_load_missing_file_is_empty(tmp_path):
    assert JsonRecordRepository(tmp_path / "data" / "mood.json", "mood").load_all() == []


def test_save_of_unchanged_load_is_byte_identical(workspace):
    path = data_path("repair", workspace)
    repo = JsonRecordRepository(path, "repair")
    repo.save_all(repo.load_all())
    first = path.read_bytes()
    repo.save_all(repo.load_all())
    assert path.read_bytes() == first


def test_round_trip_preserves_records(workspace):
    repo = JsonRecordRepository(data_path("mood", workspace), "mood")
    before = repo.load_all()
    repo.save_all(before)
    assert repo.load_all() == before


def test_corrupt_file_raises_persistence_error(tmp_path):
    path = tmp_path / "data" / "mood.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonRecordRepository(path, "mood").load_all()


def test_malformed_record_raises_persistence_error(tmp_path):
    path = tmp_path / "mood.json"
    path.write_text('{"records": [{"id": "x", "createdAt": "yesterday"}]}', encoding="utf-8")
    with pytest.raises(PersistenceError, match="Malformed"):
        JsonRecordRepository(path, "mood").load_all()


def test_unwritable_location_raises_persistence_error(tmp_path):
    blocker = tmp_path / "data"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    repo = JsonRecordRepository(blocker / "mood.json", "mood")
    with pytest.raises(PersistenceError):
        repo.save_all([])


def test_store_over_json_repository(workspace, clock):
    path = data_path("mood", workspace)
    store = RecordStore(MOOD, JsonRecordRepository(path, "mood"), clock=clock)
    assert store.load() == 2
    store.add({"category": "joyful", "payload": "Sunny"})

    reloaded = RecordStore(MOOD, JsonRecordRepository(path, "mood"))
    reloaded.load()
    assert len(reloaded) == 3
    assert reloaded.find_by_date("2024-03-15").category == "joyful"


def test_memory_repository_isolated():
    repo = MemoryRecordRepository()
    assert repo.load_all() == []
    assert repo.save_count == 0
