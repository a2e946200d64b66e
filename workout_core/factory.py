"""Construction of exercise instances from library entries."""

from __future__ import annotations

from dataclasses import replace

from workout_core import DEFAULT_SETS_PER_EXERCISE
from workout_core.models import Exercise, Note, WorkoutSet
from workout_core.tree import new_id


def new_set(**fields) -> WorkoutSet:
    """Return a blank set with a fresh id; ``fields`` override defaults."""

    fields.setdefault("id", new_id("set"))
    return WorkoutSet(**fields)


def _exercise_from_library(library_item: dict, sets: list[WorkoutSet], pinned_notes) -> Exercise:
    category = library_item.get("category") or "Lifts"
    return Exercise(
        instance_id=new_id("exercise"),
        exercise_id=str(library_item["id"]),
        name=library_item.get("name", ""),
        category=category,
        sets=sets,
        notes=[n if isinstance(n, Note) else Note.from_dict(n) for n in pinned_notes],
        weight_unit=library_item.get("weight_unit", "lbs"),
        track_reps=library_item.get("track_reps"),
        track_duration=library_item.get("track_duration"),
        track_distance=library_item.get("track_distance"),
    )


def create_exercise_instance(
    library_item: dict,
    set_count: int = DEFAULT_SETS_PER_EXERCISE,
    is_dropset: bool = False,
    pinned_notes=(),
) -> Exercise:
    """Return a new :class:`Exercise` for ``library_item``.

    ``library_item`` is a mapping with at least an ``id``.  When
    ``is_dropset`` is set all the generated sets share one dropset id, which
    only happens with two sets or more.
    """

    if set_count < 1:
        raise ValueError("An exercise needs at least one set")
    drop_set_id = new_id("dropset") if is_dropset and set_count >= 2 else None
    sets = [
        new_set(drop_set_id=drop_set_id, is_dropset=drop_set_id is not None)
        for _ in range(set_count)
    ]
    return _exercise_from_library(library_item, sets, pinned_notes)


def create_exercise_instance_with_set_groups(
    library_item: dict,
    set_groups,
    pinned_notes=(),
) -> Exercise:
    """Return a new :class:`Exercise` built from a list of set groups.

    Each entry of ``set_groups`` is a mapping with ``count`` and an optional
    ``type`` (``"warmup"``, ``"dropset"`` or ``"failure"``).  Every entry of
    two sets or more becomes its own dropset partition.
    """

    sets: list[WorkoutSet] = []
    for group in set_groups:
        count = int(group.get("count", 0))
        if count < 1:
            continue
        group_type = group.get("type")
        drop_set_id = new_id("dropset") if count >= 2 else None
        for _ in range(count):
            s = new_set(drop_set_id=drop_set_id)
            if group_type == "warmup":
                s = replace(s, is_warmup=True, type="Warmup")
            elif group_type == "failure":
                s = replace(s, is_failure=True, type="Failure")
            elif group_type == "dropset" and drop_set_id is not None:
                s = replace(s, is_dropset=True)
            sets.append(s)
    if not sets:
        sets = [new_set()]
    return _exercise_from_library(library_item, sets, pinned_notes)
