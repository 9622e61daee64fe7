"""Workspace root, settings, timezone and path helpers for Daybook."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from daybook.fileio import read_yaml, write_yaml_atomic
from daybook.models import Settings

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains settings.yaml and data/)."""
    return Path(
        os.environ.get("DAYBOOK_ROOT", str(Path.home() / "daybook"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def data_path(kind: str, root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / f"{kind}.json"


def exports_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "exports"


# ── Settings ──────────────────────────────────────────────────

def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml; DAYBOOK_LOG_LEVEL overrides the file."""
    settings = Settings.from_dict(read_yaml(settings_path(root)))
    env_level = os.environ.get("DAYBOOK_LOG_LEVEL")
    if env_level:
        settings.log_level = env_level.upper()
    return settings


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(settings_path(root), settings.to_dict())


def get_user_timezone(root: Path | None = None, settings: Settings | None = None) -> ZoneInfo:
    """Get the configured timezone, defaulting to UTC."""
    if settings is None:
        settings = load_settings(root)
    try:
        return ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in settings, using UTC", settings.timezone)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None, settings: Settings | None = None) -> datetime:
    """Get current datetime in the user's timezone."""
    return datetime.now(get_user_timezone(root, settings))


def today_local(root: Path | None = None, settings: Settings | None = None) -> date:
    return now_local(root, settings).date()


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the user's timezone."""
    return today_local(root).isoformat()
