import os
import sys
from pathlib import Path

import pytest

# Kivy reads these when it is first imported.
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_LOG_MODE", "PYTHON")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from workout_core import settings  # noqa: E402
from workout_core.models import (  # noqa: E402
    Exercise,
    ExerciseGroup,
    Workout,
    WorkoutSet,
)


def make_set(set_id, **fields):
    return WorkoutSet(id=set_id, **fields)


def make_exercise(instance_id, sets=(), name=None, **fields):
    return Exercise(
        instance_id=instance_id,
        exercise_id=f"lib-{instance_id}",
        name=name or instance_id.upper(),
        sets=list(sets),
        **fields,
    )


class FakeEvent:
    def __init__(self, clock, callback, timeout, repeat):
        self.clock = clock
        self.callback = callback
        self.timeout = timeout
        self.repeat = repeat
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Stand-in for :class:`kivy.clock.Clock` that only runs when told to."""

    def __init__(self):
        self.events: list[FakeEvent] = []

    def schedule_once(self, callback, timeout=0):
        event = FakeEvent(self, callback, timeout, repeat=False)
        self.events.append(event)
        return event

    def schedule_interval(self, callback, timeout):
        event = FakeEvent(self, callback, timeout, repeat=True)
        self.events.append(event)
        return event

    @property
    def live(self):
        return [e for e in self.events if not e.cancelled]

    def fire(self, dt=0):
        """Run every live event once, like a single frame."""

        for event in list(self.live):
            if event.cancelled:
                continue
            result = event.callback(dt)
            if not event.repeat or result is False:
                event.cancel()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the real settings file."""

    monkeypatch.setattr(settings, "SETTINGS_PATH", tmp_path / "settings.json")
    settings.reset_cache()
    yield
    settings.reset_cache()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def bench():
    return make_exercise(
        "bench",
        [
            make_set("s1", weight="100", reps="10"),
            make_set("s2", weight="90", reps="8"),
            make_set("s3", weight="80", reps="8"),
            make_set("s4", weight="70", reps="6"),
        ],
        name="Bench Press",
    )


@pytest.fixture
def grouped_tree(bench):
    """``[A, G(B, C), D]`` with the bench press as a standalone exercise."""

    a = make_exercise("a", [make_set("a1", rest_period_seconds=60)])
    b = make_exercise("b", [make_set("b1")])
    c = make_exercise("c", [make_set("c1")])
    d = make_exercise("d", [make_set("d1")])
    group = ExerciseGroup(instance_id="g", group_type="Superset", children=[b, c])
    return [a, group, d, bench]


@pytest.fixture
def workout(grouped_tree):
    return Workout(id="w1", name="Push Day", started_at=1000.0, exercises=grouped_tree)


class WorkoutHolder:
    """Keeps the latest committed workout, the way a screen would."""

    def __init__(self, workout):
        self.workout = workout
        self.updates = []

    def get(self):
        return self.workout

    def update(self, workout):
        self.updates.append(workout)
        self.workout = workout


@pytest.fixture
def holder(workout):
    return WorkoutHolder(workout)
