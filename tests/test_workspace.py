"""Tests for daybook/workspace.py, daybook/kinds.py, daybook/log.py and services."""

import logging

import pytest

from daybook.errors import ValidationError
from daybook.kinds import KINDS, get_kind
from daybook.log import setup_logging
from daybook.models import Settings
from daybook.services import build_services
from daybook.workspace import (
    data_path,
    get_user_timezone,
    load_settings,
    save_settings,
    settings_path,
    workspace_root,
)


def test_workspace_root_from_env(workspace):
    assert workspace_root() == workspace.resolve()
    assert settings_path() == workspace.resolve() / "settings.yaml"
    assert data_path("mood") == workspace.resolve() / "data" / "mood.json"


def test_load_settings(workspace):
    s = load_settings(workspace)
    assert s.timezone == "UTC"
    assert s.log_level == "DEBUG"
    assert s.payload_limits == {"gratitude": 200}


def test_load_settings_missing_file(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_log_level_env_override(workspace, monkeypatch):
    monkeypatch.setenv("DAYBOOK_LOG_LEVEL", "warning")
    assert load_settings(workspace).log_level == "WARNING"


def test_save_settings_round_trip(tmp_path):
    s = Settings(timezone="Europe/Paris", strict=True, wheel_min_turns=2)
    save_settings(s, tmp_path)
    assert load_settings(tmp_path) == s


def test_unknown_timezone_falls_back_to_utc(caplog):
    with caplog.at_level(logging.WARNING):
        tz = get_user_timezone(settings=Settings(timezone="Mars/Olympus"))
    assert tz.key == "UTC"
    assert "Mars/Olympus" in caplog.text


def test_kinds_registry():
    assert set(KINDS) == {"mood", "gratitude", "repair", "party_task", "day_note"}
    assert KINDS["mood"].date_partitioned is True
    assert KINDS["repair"].payload_limit == 1000
    assert KINDS["party_task"].default_category == "other"
    assert KINDS["mood"].default_category == "joyful"


def test_get_kind_with_limit_override():
    assert get_kind("mood", {"mood": 150}).payload_limit == 150
    assert get_kind("mood").payload_limit == 200
    with pytest.raises(ValidationError):
        get_kind("dream")


def test_setup_logging_sets_level():
    setup_logging("debug")
    assert logging.getLogger("daybook").level == logging.DEBUG
    setup_logging("nonsense")
    assert logging.getLogger("daybook").level == logging.INFO


def test_build_services(workspace):
    services = build_services()
    assert services.root == workspace.resolve()
    store = services.store("gratitude")
    assert len(store) == 3
    assert services.store("gratitude") is store
    assert services.today() == services.now().date()


def test_services_apply_payload_limit_override(workspace):
    (workspace / "settings.yaml").write_text("payload_limits:\n  gratitude: 10\n", encoding="utf-8")
    store = build_services(workspace).store("gratitude")
    rec = store.add({"category": "family", "payload": "A very long sentence"})
    assert rec.payload == "A very lon"


def test_services_model_settings(workspace):
    (workspace / "settings.yaml").write_text("strict: true\nwheel_min_turns: 1\nwheel_max_turns: 2\n", encoding="utf-8")
    model = build_services(workspace).model("party_task")
    assert model.strict is True
    assert model.wheel_turns == (1, 2)
