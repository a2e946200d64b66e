from __future__ import annotations

from workout_core import (
    DEFAULT_REST_DURATION,
    DEFAULT_SETS_PER_EXERCISE,
    DRAG_SETTLE_DELAY,
    REST_ADJUST_STEPS,
)
from workout_core.drag_reorder import from_flat_drag_list, to_flat_drag_list
from workout_core.grouping import (
    cancel_selection,
    create_dropset,
    create_superset,
    dropsets_are_contiguous,
    edit_dropset,
    edit_superset,
)
from workout_core.models import Workout, is_group
from workout_core.rest_timer import (
    adjust_rest_timer,
    cancel_rest_timer,
    pause_rest_timer,
    resume_rest_timer,
    start_rest_timer,
    tick_rest_timer,
)
from workout_core.tree import (
    delete_by_instance_id,
    find_by_instance_id,
    update_by_instance_id,
)

# Short names used by screen code
find = find_by_instance_id
update = update_by_instance_id
delete = delete_by_instance_id

__all__ = [
    "DEFAULT_REST_DURATION",
    "DEFAULT_SETS_PER_EXERCISE",
    "DRAG_SETTLE_DELAY",
    "REST_ADJUST_STEPS",
    "find",
    "update",
    "delete",
    "create_dropset",
    "edit_dropset",
    "cancel_selection",
    "create_superset",
    "edit_superset",
    "to_flat_drag_list",
    "from_flat_drag_list",
    "start_rest_timer",
    "tick_rest_timer",
    "pause_rest_timer",
    "resume_rest_timer",
    "adjust_rest_timer",
    "cancel_rest_timer",
    "validate_workout",
]


def validate_workout(workout: Workout) -> list[str]:
    """Return a list of structural problems found in ``workout``.

    An empty list means the exercise tree is well formed: ids are unique,
    groups are flat and non-empty and every dropset is contiguous.
    """

    errors: list[str] = []
    seen: set[str] = set()

    def _check_id(instance_id: str) -> None:
        if instance_id in seen:
            errors.append(f"Duplicate instance id {instance_id}")
        seen.add(instance_id)

    def _check_exercise(exercise) -> None:
        _check_id(exercise.instance_id)
        if not dropsets_are_contiguous(exercise.sets):
            errors.append(f"{exercise.name or exercise.instance_id}: dropset is split")

    for item in workout.exercises:
        if not is_group(item):
            _check_exercise(item)
            continue
        _check_id(item.instance_id)
        if not item.children:
            errors.append(f"Group {item.instance_id} is empty")
        for child in item.children:
            if is_group(child):
                errors.append(f"Group {item.instance_id} contains a nested group")
                continue
            _check_exercise(child)
    return errors
