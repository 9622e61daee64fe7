"""Record kinds: the per-app parameters of the shared record engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from daybook.errors import ValidationError


@dataclass(frozen=True)
class RecordKind:
    """Shape of one app's records.

    categories maps category id -> display label, in enumeration order.
    """

    name: str
    label: str
    categories: dict[str, str] = field(default_factory=dict)
    payload_limit: int = 200
    payload_required: bool = True
    date_partitioned: bool = False
    display_field: str = "payload"
    title_limit: int = 100

    @property
    def category_ids(self) -> list[str]:
        return list(self.categories)

    @property
    def default_category(self) -> str:
        return "other" if "other" in self.categories else self.category_ids[0]

    def category_label(self, category: str) -> str:
        return self.categories.get(category, category)

    def with_payload_limit(self, limit: int) -> RecordKind:
        return replace(self, payload_limit=limit)


MOOD = RecordKind(
    name="mood",
    label="Mood",
    categories={
        "joyful": "Joyful",
        "happy": "Happy",
        "calm": "Calm",
        "neutral": "Neutral",
        "sad": "Sad",
        "anxious": "Anxious",
        "angry": "Angry",
    },
    payload_limit=200,
    payload_required=False,
    date_partitioned=True,
)

GRATITUDE = RecordKind(
    name="gratitude",
    label="Gratitude",
    categories={
        "family": "Family",
        "friends": "Friends",
        "health": "Health",
        "nature": "Nature",
        "work": "Work",
        "other": "Other",
    },
    payload_limit=200,
)

REPAIR = RecordKind(
    name="repair",
    label="Home Repair",
    categories={
        "plumbing": "Plumbing",
        "electrical": "Electrical",
        "carpentry": "Carpentry",
        "painting": "Painting",
        "appliances": "Appliances",
        "other": "Other",
    },
    payload_limit=1000,
    display_field="title",
)

PARTY_TASK = RecordKind(
    name="party_task",
    label="Party Tasks",
    categories={
        "singing": "Singing",
        "dancing": "Dancing",
        "animals": "Animals",
        "funny": "Funny",
        "other": "Other",
    },
    payload_limit=200,
)

DAY_NOTE = RecordKind(
    name="day_note",
    label="Day Notes",
    categories={
        "personal": "Personal",
        "work": "Work",
        "health": "Health",
        "other": "Other",
    },
    payload_limit=500,
    date_partitioned=True,
)

KINDS: dict[str, RecordKind] = {
    k.name: k for k in (MOOD, GRATITUDE, REPAIR, PARTY_TASK, DAY_NOTE)
}


def get_kind(name: str, payload_limits: dict[str, int] | None = None) -> RecordKind:
    """Look up a kind by name, applying any configured payload limit override."""
    kind = KINDS.get(name)
    if kind is None:
        raise ValidationError(f"Unknown record kind: {name}")
    if payload_limits and name in payload_limits:
        kind = kind.with_payload_limit(payload_limits[name])
    return kind
