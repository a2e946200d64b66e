"""Data model for an in-progress workout.

Every class here is a frozen dataclass.  Screens never mutate these objects;
edits go through :mod:`workout_core.tree` and friends, which return new
instances and reuse the untouched ones.  Sequences are plain lists that are
treated as read-only once attached to a model object.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

SET_TYPES = ("Working", "Warmup", "Failure")
GROUP_TYPES = ("Superset", "HIIT")
# Uniform types a dropset partition can carry
GROUP_SET_TYPES = ("warmup", "dropset", "failure")
CATEGORIES = ("Lifts", "Cardio", "Training")


@dataclass(frozen=True)
class Note:
    id: str
    text: str = ""
    date: str = ""
    pinned: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "date": self.date,
            "pinned": self.pinned,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            date=data.get("date", ""),
            pinned=bool(data.get("pinned", False)),
        )


@dataclass(frozen=True)
class WorkoutSet:
    """A single set row of an exercise.

    ``drop_set_id`` ties consecutive sets into a dropset partition.  The
    ``is_*`` flags describe the partition type when one was chosen.
    """

    id: str
    type: str = "Working"
    weight: str = ""
    reps: str = ""
    duration: str = ""
    distance: str = ""
    completed: bool = False
    drop_set_id: str | None = None
    is_warmup: bool = False
    is_dropset: bool = False
    is_failure: bool = False
    rest_period_seconds: int | None = None
    rest_timer_completed: bool = False

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSet":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class Exercise:
    """One occurrence of a library exercise inside a workout."""

    instance_id: str
    exercise_id: str
    name: str
    category: str = "Lifts"
    sets: list[WorkoutSet] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    weight_unit: str = "lbs"
    track_reps: bool | None = None
    track_duration: bool | None = None
    track_distance: bool | None = None
    collapsed: bool = False

    kind = "exercise"

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "instance_id": self.instance_id,
            "exercise_id": self.exercise_id,
            "name": self.name,
            "category": self.category,
            "sets": [s.to_dict() for s in self.sets],
            "notes": [n.to_dict() for n in self.notes],
            "weight_unit": self.weight_unit,
            "track_reps": self.track_reps,
            "track_duration": self.track_duration,
            "track_distance": self.track_distance,
            "collapsed": self.collapsed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        return cls(
            instance_id=data["instance_id"],
            exercise_id=data.get("exercise_id", ""),
            name=data.get("name", ""),
            category=data.get("category", "Lifts"),
            sets=[WorkoutSet.from_dict(s) for s in data.get("sets", [])],
            notes=[Note.from_dict(n) for n in data.get("notes", [])],
            weight_unit=data.get("weight_unit", "lbs"),
            track_reps=data.get("track_reps"),
            track_duration=data.get("track_duration"),
            track_distance=data.get("track_distance"),
            collapsed=bool(data.get("collapsed", False)),
        )


@dataclass(frozen=True)
class ExerciseGroup:
    """Superset or HIIT container.  Groups hold exercises only."""

    instance_id: str
    group_type: str = "Superset"
    children: list[Exercise] = field(default_factory=list)

    kind = "group"

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "instance_id": self.instance_id,
            "group_type": self.group_type,
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseGroup":
        return cls(
            instance_id=data["instance_id"],
            group_type=data.get("group_type", "Superset"),
            children=[Exercise.from_dict(c) for c in data.get("children", [])],
        )


def item_from_dict(data: dict) -> Exercise | ExerciseGroup:
    """Return an :class:`Exercise` or :class:`ExerciseGroup` for ``data``."""

    if data.get("type") == "group":
        return ExerciseGroup.from_dict(data)
    return Exercise.from_dict(data)


def is_group(item) -> bool:
    return getattr(item, "kind", None) == "group"


@dataclass(frozen=True)
class Workout:
    id: str
    name: str
    started_at: float
    exercises: list = field(default_factory=list)
    session_notes: list[Note] = field(default_factory=list)
    ended_at: float | None = None

    def to_dict(self) -> dict:
        """Return a JSON-serialisable representation of the workout."""

        return {
            "id": self.id,
            "name": self.name,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "exercises": [item.to_dict() for item in self.exercises],
            "session_notes": [n.to_dict() for n in self.session_notes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Workout":
        """Reconstruct a :class:`Workout` from ``data``."""

        return cls(
            id=data["id"],
            name=data.get("name", ""),
            started_at=data.get("started_at", 0.0),
            ended_at=data.get("ended_at"),
            exercises=[item_from_dict(i) for i in data.get("exercises", [])],
            session_notes=[Note.from_dict(n) for n in data.get("session_notes", [])],
        )


@dataclass(frozen=True)
class RestTimer:
    """Countdown attached to one set.

    ``remaining_seconds`` is the last displayed value.  The authoritative
    remaining time is derived from ``started_at``, ``duration_seconds`` and
    ``paused_duration`` so scheduler jitter never accumulates.
    """

    exercise_id: str
    set_id: str
    remaining_seconds: int
    total_seconds: int
    is_paused: bool = False
    started_at: float = 0.0
    duration_seconds: float = 0.0
    paused_at: float | None = None
    paused_duration: float = 0.0


@dataclass(frozen=True)
class DragItem:
    """One row of the flattened, draggable exercise list."""

    kind: str
    id: str
    group_id: str | None = None
    group_type: str | None = None
    exercise: Exercise | None = None
    is_first_in_group: bool = False
    is_last_in_group: bool = False
    child_count: int = 0
    set_count: int = 0
    is_collapsed: bool = False
