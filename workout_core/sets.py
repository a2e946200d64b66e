"""Set level edits on a single exercise."""

from __future__ import annotations

from dataclasses import replace

from workout_core.grouping import normalize_dropsets
from workout_core.models import WorkoutSet
from workout_core.tree import (
    find_by_instance_id,
    find_set,
    new_id,
    replace_sets,
    update_by_instance_id,
    update_set,
)

LBS_PER_KG = 2.20462


def add_set(tree, exercise_id: str):
    """Append a set that copies the values of the exercise's last set."""

    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        return tree
    last = exercise.sets[-1] if exercise.sets else None
    new = WorkoutSet(
        id=new_id("set"),
        weight=last.weight if last else "",
        reps=last.reps if last else "",
        duration=last.duration if last else "",
        distance=last.distance if last else "",
    )
    return replace_sets(tree, exercise_id, exercise.sets + [new])


def insert_set_after(tree, exercise_id: str, set_id: str):
    """Insert a copy of ``set_id`` right after it.

    The new set joins the same dropset and keeps the warmup/failure flags
    and rest period of its source.
    """

    source = find_set(tree, exercise_id, set_id)
    if source is None:
        return tree
    new = WorkoutSet(
        id=new_id("set"),
        weight=source.weight,
        reps=source.reps,
        duration=source.duration,
        distance=source.distance,
        drop_set_id=source.drop_set_id,
        is_warmup=source.is_warmup,
        is_dropset=source.is_dropset,
        is_failure=source.is_failure,
        rest_period_seconds=source.rest_period_seconds,
    )
    sets = find_by_instance_id(tree, exercise_id).sets
    index = next(i for i, s in enumerate(sets) if s.id == set_id)
    return replace_sets(tree, exercise_id, sets[: index + 1] + [new] + sets[index + 1 :])


def delete_set(tree, exercise_id: str, set_id: str):
    """Remove ``set_id``; a dropset left with one member is dissolved."""

    if find_set(tree, exercise_id, set_id) is None:
        return tree
    sets = find_by_instance_id(tree, exercise_id).sets
    remaining = normalize_dropsets([s for s in sets if s.id != set_id])
    return replace_sets(tree, exercise_id, remaining)


def update_set_fields(tree, exercise_id: str, set_id: str, **changes):
    """Return ``tree`` with ``changes`` applied to one set."""

    return update_set(tree, exercise_id, set_id, lambda s: replace(s, **changes))


def set_rest_period(tree, exercise_id: str, set_id: str, seconds: int):
    """Attach a rest period to a set.  Non-positive values are ignored."""

    if seconds <= 0:
        return tree
    return update_set(
        tree,
        exercise_id,
        set_id,
        lambda s: replace(s, rest_period_seconds=int(seconds)),
    )


def clear_rest_period(tree, exercise_id: str, set_id: str):
    return update_set(
        tree,
        exercise_id,
        set_id,
        lambda s: replace(s, rest_period_seconds=None, rest_timer_completed=False),
    )


def toggle_set_flag(tree, exercise_id: str, set_id: str, flag: str):
    """Flip the warmup or failure marker of a single set.

    The two markers are exclusive, and ``type`` follows them.
    """

    if flag not in ("warmup", "failure"):
        raise ValueError(f"Unknown set flag '{flag}'")

    def _toggle(s: WorkoutSet) -> WorkoutSet:
        if flag == "warmup":
            on = not s.is_warmup
            return replace(
                s,
                is_warmup=on,
                is_failure=False if on else s.is_failure,
                type="Warmup" if on else "Working",
            )
        on = not s.is_failure
        return replace(
            s,
            is_failure=on,
            is_warmup=False if on else s.is_warmup,
            type="Failure" if on else "Working",
        )

    return update_set(tree, exercise_id, set_id, _toggle)


def _convert_weight(value: str, to_kg: bool) -> str:
    if not value:
        return value
    try:
        number = float(value)
    except ValueError:
        return value
    result = number / LBS_PER_KG if to_kg else number * LBS_PER_KG
    return f"{round(result, 1):g}"


def convert_weight_unit(tree, exercise_id: str):
    """Switch an exercise between lbs and kg, converting lift weights."""

    def _convert(ex):
        to_kg = ex.weight_unit != "kg"
        sets = ex.sets
        if ex.category == "Lifts":
            sets = [replace(s, weight=_convert_weight(s.weight, to_kg)) for s in sets]
        return replace(ex, weight_unit="kg" if to_kg else "lbs", sets=sets)

    if find_by_instance_id(tree, exercise_id) is None:
        return tree
    return update_by_instance_id(tree, exercise_id, _convert)
