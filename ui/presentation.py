"""Category → icon/colour lookup for the presentation layer.

The record engine only knows category ids and labels; everything about
how a category looks lives here.
"""

from __future__ import annotations

from typing import Any

from daybook.kinds import KINDS, RecordKind

DEFAULT_STYLE = {"icon": "•", "color": "#8e8e93"}

CATEGORY_STYLES: dict[str, dict[str, dict[str, str]]] = {
    "mood": {
        "joyful": {"icon": "🤩", "color": "#ffcc00"},
        "happy": {"icon": "😊", "color": "#34c759"},
        "calm": {"icon": "😌", "color": "#5ac8fa"},
        "neutral": {"icon": "😐", "color": "#8e8e93"},
        "sad": {"icon": "😢", "color": "#007aff"},
        "anxious": {"icon": "😰", "color": "#af52de"},
        "angry": {"icon": "😠", "color": "#ff3b30"},
    },
    "gratitude": {
        "family": {"icon": "👪", "color": "#ff9500"},
        "friends": {"icon": "🤝", "color": "#34c759"},
        "health": {"icon": "💪", "color": "#ff2d55"},
        "nature": {"icon": "🌿", "color": "#30b0c7"},
        "work": {"icon": "💼", "color": "#5856d6"},
        "other": {"icon": "✨", "color": "#8e8e93"},
    },
    "repair": {
        "plumbing": {"icon": "🚰", "color": "#007aff"},
        "electrical": {"icon": "⚡", "color": "#ffcc00"},
        "carpentry": {"icon": "🪚", "color": "#a2845e"},
        "painting": {"icon": "🎨", "color": "#ff2d55"},
        "appliances": {"icon": "🔌", "color": "#5856d6"},
        "other": {"icon": "🔧", "color": "#8e8e93"},
    },
    "party_task": {
        "singing": {"icon": "🎤", "color": "#ff9500"},
        "dancing": {"icon": "💃", "color": "#af52de"},
        "animals": {"icon": "🐾", "color": "#34c759"},
        "funny": {"icon": "🤪", "color": "#ffcc00"},
        "other": {"icon": "🎉", "color": "#8e8e93"},
    },
    "day_note": {
        "personal": {"icon": "📝", "color": "#ff9500"},
        "work": {"icon": "💼", "color": "#5856d6"},
        "health": {"icon": "❤️", "color": "#ff2d55"},
        "other": {"icon": "📌", "color": "#8e8e93"},
    },
}


def category_style(kind: RecordKind, category: str) -> dict[str, str]:
    style = CATEGORY_STYLES.get(kind.name, {}).get(category, DEFAULT_STYLE)
    return {"label": kind.category_label(category), **style}


def describe_kind(kind: RecordKind) -> dict[str, Any]:
    return {
        "name": kind.name,
        "label": kind.label,
        "payloadLimit": kind.payload_limit,
        "payloadRequired": kind.payload_required,
        "datePartitioned": kind.date_partitioned,
        "displayField": kind.display_field,
        "categories": [{"id": c, **category_style(kind, c)} for c in kind.category_ids],
    }


def describe_kinds() -> list[dict[str, Any]]:
    return [describe_kind(k) for k in KINDS.values()]
