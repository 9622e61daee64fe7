"""Tests for daybook/models.py — dataclass serialization."""

from datetime import date, datetime, timezone

from daybook.models import ChecklistProgress, Record, Settings, StatisticsSnapshot, WheelSpin


def test_record_from_dict_camel_case():
    rec = Record.from_dict({
        "id": "a1",
        "category": "family",
        "payload": "Hello",
        "day": "2024-01-05",
        "createdAt": "2024-01-05T10:00:00+00:00",
        "updatedAt": "2024-01-05T11:00:00+00:00",
        "isFavorite": True,
        "isArchived": True,
        "archivedAt": "2024-01-06T09:00:00+00:00",
    })
    assert rec.id == "a1"
    assert rec.day == date(2024, 1, 5)
    assert rec.created_at == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert rec.is_favorite is True
    assert rec.is_archived is True
    assert rec.archived_at.day == 6


def test_record_from_dict_snake_case():
    rec = Record.from_dict({"id": "a", "category": "work", "payload": "x", "is_favorite": True, "created_at": "2024-02-01T08:00:00"})
    assert rec.is_favorite is True
    assert rec.created_at == datetime(2024, 2, 1, 8, 0)


def test_record_day_derived_from_created_at():
    rec = Record.from_dict({"id": "a", "category": "work", "payload": "x", "createdAt": "2024-02-01T23:30:00+02:00"})
    assert rec.day == date(2024, 2, 1)


def test_record_from_dict_empty():
    rec = Record.from_dict({})
    assert rec.id == ""
    assert rec.day is None
    assert rec.tools == []


def test_record_from_dict_null_id_and_category():
    rec = Record.from_dict({"id": None, "category": None, "payload": "x"})
    assert rec.id == ""
    assert rec.category == ""


def test_record_to_dict_omits_unset_optionals():
    rec = Record(id="a", category="family", payload="p", day=date(2024, 1, 1))
    d = rec.to_dict()
    assert d["day"] == "2024-01-01"
    assert d["createdAt"] is None
    assert "title" not in d
    assert "archivedAt" not in d
    assert "tools" not in d


def test_record_round_trip():
    original = {
        "id": "r1",
        "category": "plumbing",
        "payload": "Turn off the supply.",
        "day": "2024-03-01",
        "createdAt": "2024-03-01T10:00:00+00:00",
        "updatedAt": "2024-03-01T10:00:00+00:00",
        "isFavorite": False,
        "isArchived": False,
        "title": "Fix a tap",
        "tools": ["Wrench"],
        "toolsChecked": [True],
        "steps": ["Shut off water", "Swap washer"],
        "stepsCompleted": [False, True],
    }
    assert Record.from_dict(original).to_dict() == original


def test_checklists_normalized_to_entry_count():
    rec = Record.from_dict({"tools": ["a", "b", "c"], "toolsChecked": [True], "steps": ["x"], "stepsCompleted": [True, True]})
    assert rec.tools_checked == [True, False, False]
    assert rec.steps_completed == [True]


def test_checklist_progress():
    rec = Record(steps=["a", "b", "c"], steps_completed=[True, False, True])
    progress = rec.steps_progress()
    assert (progress.done, progress.total) == (2, 3)
    assert progress.percent == 67
    assert ChecklistProgress().percent == 0
    assert rec.tools_progress().to_dict() == {"done": 0, "total": 0, "percent": 0}


def test_display_text():
    rec = Record(payload="body", title="Heading")
    assert rec.display_text("title") == "Heading"
    assert rec.display_text("payload") == "body"
    assert Record(payload="body").display_text("title") == "body"


def test_settings_defaults():
    s = Settings.from_dict({})
    assert s.timezone == "UTC"
    assert s.log_level == "INFO"
    assert s.strict is False
    assert (s.wheel_min_turns, s.wheel_max_turns) == (3, 6)


def test_settings_round_trip():
    s = Settings.from_dict({"timezone": "Europe/Berlin", "log_level": "debug", "strict": True, "payload_limits": {"mood": "150"}})
    assert s.log_level == "DEBUG"
    assert s.payload_limits == {"mood": 150}
    assert Settings.from_dict(s.to_dict()) == s


def test_snapshot_to_dict_camel_case():
    d = StatisticsSnapshot(total=3, current_streak=2).to_dict()
    assert d["total"] == 3
    assert d["currentStreak"] == 2
    assert d["lastActivity"] is None


def test_wheel_spin_to_dict():
    spin = WheelSpin(rotation=1234.56789, pointer_angle=205.4321, segment_index=2, record=Record(id="x"))
    d = spin.to_dict()
    assert d["rotation"] == 1234.568
    assert d["segmentIndex"] == 2
    assert d["record"]["id"] == "x"
