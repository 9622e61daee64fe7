"""Tests for daybook/randomizer.py — random picks and the wheel."""

import random

import pytest

from daybook.errors import EmptyCandidatesError
from daybook.models import Record
from daybook.randomizer import pick, pointer_angle_for, segment_index, spin_wheel


class ScriptedRandom(random.Random):
    """Random source that returns scripted values from choice() and uniform()."""

    def __init__(self, choices=(), uniforms=()) -> None:
        super().__init__(0)
        self._choices = list(choices)
        self._uniforms = list(uniforms)
        self.choice_calls = 0

    def choice(self, seq):
        self.choice_calls += 1
        return self._choices.pop(0)

    def uniform(self, a, b):
        return self._uniforms.pop(0)


def test_pick_redraws_previous():
    a, b = Record(id="a"), Record(id="b")
    rng = ScriptedRandom(choices=[a, a, a, b])
    assert pick([a, b], previous=a, max_attempts=10, rng=rng) is b
    assert rng.choice_calls == 4


def test_pick_accepts_repeat_after_max_attempts():
    a, b = Record(id="a"), Record(id="b")
    rng = ScriptedRandom(choices=[a] * 4)
    assert pick([a, b], previous=a, max_attempts=3, rng=rng) is a
    assert rng.choice_calls == 4


def test_pick_single_candidate_repeats():
    a = Record(id="a")
    assert pick([a], previous=a, rng=random.Random(1)) is a


def test_pick_never_repeats_with_seeded_rng():
    candidates = ["x", "y", "z"]
    rng = random.Random(42)
    previous = None
    for _ in range(50):
        chosen = pick(candidates, previous=previous, max_attempts=50, rng=rng)
        assert chosen != previous
        previous = chosen


def test_pick_empty_raises():
    with pytest.raises(EmptyCandidatesError):
        pick([])


def test_pick_weighted():
    rng = random.Random(7)
    picks = [pick(["fav", "plain"], rng=rng, weights=[1.0, 0.0]) for _ in range(20)]
    assert set(picks) == {"fav"}


# ── Wheel ─────────────────────────────────────────────────────


def test_segment_index():
    assert segment_index(0, 4) == 0
    assert segment_index(89.9, 4) == 0
    assert segment_index(90, 4) == 1
    assert segment_index(359.9, 4) == 3


def test_segment_index_clamps():
    assert segment_index(360, 4) == 3
    assert segment_index(-5, 4) == 0


def test_segment_index_no_segments():
    with pytest.raises(EmptyCandidatesError):
        segment_index(10, 0)


def test_pointer_angle_for():
    assert pointer_angle_for(0) == 0
    assert pointer_angle_for(90) == 270
    assert pointer_angle_for(360 * 3 + 45) == 315


def test_spin_wheel_lands_on_segment():
    records = [Record(id=str(i)) for i in range(4)]
    # 3 full turns plus 45 degrees: pointer over 315 degrees, last segment
    rng = ScriptedRandom(uniforms=[3.0, 45.0])
    result = spin_wheel(records, rng=rng)
    assert result.rotation == 3 * 360 + 45
    assert result.pointer_angle == 315
    assert result.segment_index == 3
    assert result.record.id == "3"


def test_spin_wheel_respects_turn_range():
    records = [Record(id=str(i)) for i in range(5)]
    rng = random.Random(3)
    for _ in range(20):
        result = spin_wheel(records, rng=rng, min_turns=2, max_turns=4)
        assert 2 * 360 <= result.rotation <= 5 * 360
        assert 0 <= result.segment_index < 5
        assert result.record is records[result.segment_index]


def test_spin_wheel_empty():
    with pytest.raises(EmptyCandidatesError):
        spin_wheel([], rng=random.Random())
