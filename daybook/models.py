"""Typed dataclasses for the Daybook data model.

All persisted models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


def new_record_id() -> str:
    return uuid.uuid4().hex


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def _fit_flags(flags: list[bool], size: int) -> list[bool]:
    """Pad or trim a checklist flag list to *size* entries."""
    flags = [bool(f) for f in flags[:size]]
    return flags + [False] * (size - len(flags))


# ── Records ───────────────────────────────────────────────────


@dataclass
class ChecklistProgress:
    done: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.done / self.total * 100)

    def to_dict(self) -> dict[str, Any]:
        return {"done": self.done, "total": self.total, "percent": self.percent}


@dataclass
class Record:
    """A single user entry: mood, gratitude, repair instruction, party task or day note."""

    id: str = ""
    category: str = ""
    payload: str = ""
    title: str = ""
    day: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_favorite: bool = False
    is_archived: bool = False
    archived_at: datetime | None = None
    tools: list[str] = field(default_factory=list)
    tools_checked: list[bool] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    steps_completed: list[bool] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Record:
        created = _parse_datetime(d.get("createdAt", d.get("created_at")))
        day = _parse_date(d.get("day", d.get("date")))
        if day is None and created is not None:
            day = created.date()
        record = cls(
            id=str(d.get("id") or ""),
            category=str(d.get("category") or ""),
            payload=str(d.get("payload", d.get("text", "")) or ""),
            title=str(d.get("title", "") or ""),
            day=day,
            created_at=created,
            updated_at=_parse_datetime(d.get("updatedAt", d.get("updated_at"))),
            is_favorite=bool(d.get("isFavorite", d.get("is_favorite", False))),
            is_archived=bool(d.get("isArchived", d.get("is_archived", False))),
            archived_at=_parse_datetime(d.get("archivedAt", d.get("archived_at"))),
            tools=[str(t) for t in (d.get("tools") or [])],
            tools_checked=list(d.get("toolsChecked", d.get("tools_checked")) or []),
            steps=[str(s) for s in (d.get("steps") or [])],
            steps_completed=list(d.get("stepsCompleted", d.get("steps_completed")) or []),
        )
        record.normalize_checklists()
        return record

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "category": self.category,
            "payload": self.payload,
            "day": self.day.isoformat() if self.day else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "isFavorite": self.is_favorite,
            "isArchived": self.is_archived,
        }
        if self.title:
            d["title"] = self.title
        if self.archived_at:
            d["archivedAt"] = self.archived_at.isoformat()
        if self.tools:
            d["tools"] = list(self.tools)
            d["toolsChecked"] = list(self.tools_checked)
        if self.steps:
            d["steps"] = list(self.steps)
            d["stepsCompleted"] = list(self.steps_completed)
        return d

    def normalize_checklists(self) -> None:
        self.tools_checked = _fit_flags(self.tools_checked, len(self.tools))
        self.steps_completed = _fit_flags(self.steps_completed, len(self.steps))

    def display_text(self, display_field: str = "payload") -> str:
        if display_field == "title" and self.title:
            return self.title
        return self.payload

    def tools_progress(self) -> ChecklistProgress:
        return ChecklistProgress(done=sum(self.tools_checked), total=len(self.tools))

    def steps_progress(self) -> ChecklistProgress:
        return ChecklistProgress(done=sum(self.steps_completed), total=len(self.steps))


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    log_level: str = "INFO"
    strict: bool = False
    wheel_min_turns: int = 3
    wheel_max_turns: int = 6
    payload_limits: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        limits = {}
        for kind, limit in (d.get("payload_limits") or {}).items():
            limits[str(kind)] = int(limit)
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            log_level=str(d.get("log_level", "INFO")).upper(),
            strict=bool(d.get("strict", False)),
            wheel_min_turns=int(d.get("wheel_min_turns", 3)),
            wheel_max_turns=int(d.get("wheel_max_turns", 6)),
            payload_limits=limits,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "timezone": self.timezone,
            "log_level": self.log_level,
            "strict": self.strict,
            "wheel_min_turns": self.wheel_min_turns,
            "wheel_max_turns": self.wheel_max_turns,
        }
        if self.payload_limits:
            d["payload_limits"] = dict(self.payload_limits)
        return d


# ── Statistics ────────────────────────────────────────────────


@dataclass
class StreakRun:
    start: date
    end: date
    length: int

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "length": self.length}


@dataclass
class StatisticsSnapshot:
    total: int = 0
    active: int = 0
    archived: int = 0
    favorites: int = 0
    distribution: dict[str, int] = field(default_factory=dict)
    current_streak: int = 0
    best_streak: int = 0
    weekly_completion: int = 0
    monthly_completion: int = 0
    weekday_pattern: dict[str, int] = field(default_factory=dict)
    last_activity: datetime | None = None
    most_popular_category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "active": self.active,
            "archived": self.archived,
            "favorites": self.favorites,
            "distribution": self.distribution,
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "weeklyCompletion": self.weekly_completion,
            "monthlyCompletion": self.monthly_completion,
            "weekdayPattern": self.weekday_pattern,
            "lastActivity": self.last_activity.isoformat() if self.last_activity else None,
            "mostPopularCategory": self.most_popular_category,
        }


# ── Random selection ──────────────────────────────────────────


@dataclass
class WheelSpin:
    rotation: float = 0.0
    pointer_angle: float = 0.0
    segment_index: int = 0
    record: Record | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rotation": round(self.rotation, 3),
            "pointerAngle": round(self.pointer_angle, 3),
            "segmentIndex": self.segment_index,
            "record": self.record.to_dict() if self.record else None,
        }
