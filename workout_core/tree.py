"""Pure helpers for walking and editing the exercise tree.

A *tree* is the ``exercises`` list of a :class:`~workout_core.models.Workout`:
bare :class:`Exercise` leaves and one-level :class:`ExerciseGroup`
containers.  None of these helpers mutate their input.  When the requested
id does not exist the input list object is returned as-is, since ids can go
stale between a user gesture and the edit it triggers.
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from dataclasses import replace
from typing import Callable, Iterator

from workout_core.models import Exercise, ExerciseGroup, WorkoutSet, is_group


def new_id(prefix: str) -> str:
    """Return a fresh time-based id such as ``"set-1712345678901-3f9a0c2d1"``."""

    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def iter_exercises(tree) -> Iterator[Exercise]:
    """Yield every leaf exercise in display order."""

    for item in tree:
        if is_group(item):
            yield from item.children
        else:
            yield item


def find_by_instance_id(tree, instance_id: str) -> Exercise | None:
    """Return the leaf exercise with ``instance_id`` or ``None``."""

    for exercise in iter_exercises(tree):
        if exercise.instance_id == instance_id:
            return exercise
    return None


def find_group(tree, group_id: str) -> ExerciseGroup | None:
    for item in tree:
        if is_group(item) and item.instance_id == group_id:
            return item
    return None


def find_parent_group(tree, exercise_id: str) -> ExerciseGroup | None:
    """Return the group containing ``exercise_id`` if it is grouped."""

    for item in tree:
        if is_group(item) and any(c.instance_id == exercise_id for c in item.children):
            return item
    return None


def top_level_index(tree, instance_id: str) -> int:
    """Return the index of the top-level item holding ``instance_id``.

    For grouped exercises this is the index of the parent group.  ``-1`` is
    returned when the id is unknown.
    """

    for index, item in enumerate(tree):
        if item.instance_id == instance_id:
            return index
        if is_group(item) and any(c.instance_id == instance_id for c in item.children):
            return index
    return -1


def standalone_exercises(tree) -> list[Exercise]:
    """Return the exercises that are not part of any group."""

    return [item for item in tree if not is_group(item)]


def _update(items, instance_id: str, fn: Callable):
    changed = False
    result = []
    for item in items:
        if item.instance_id == instance_id:
            result.append(fn(item))
            changed = True
            continue
        if is_group(item):
            children = _update(item.children, instance_id, fn)
            if children is not item.children:
                item = replace(item, children=children)
                changed = True
        result.append(item)
    return result if changed else items


def update_by_instance_id(tree, instance_id: str, fn: Callable):
    """Return a copy of ``tree`` with the item ``instance_id`` replaced.

    ``fn`` receives the matching item (a leaf, or a group when a group id is
    given) and returns its replacement.  Only the path to the match is
    copied.
    """

    result = _update(tree, instance_id, fn)
    if result is tree:
        logging.debug("No item %s to update", instance_id)
    return result


def delete_by_instance_id(tree, instance_id: str):
    """Return ``tree`` without the item ``instance_id``.

    A group left without children disappears.  A group that shrinks from
    several children to a single one is replaced by that exercise.
    """

    changed = False
    result = []
    for item in tree:
        if item.instance_id == instance_id:
            changed = True
            continue
        if is_group(item):
            children = [c for c in item.children if c.instance_id != instance_id]
            if len(children) != len(item.children):
                changed = True
                if not children:
                    continue
                if len(children) == 1:
                    result.append(children[0])
                    continue
                item = replace(item, children=children)
        result.append(item)
    if not changed:
        logging.debug("No item %s to delete", instance_id)
        return tree
    return result


def deep_copy(tree) -> list:
    """Return an independent copy of ``tree``."""

    return copy.deepcopy(list(tree))


def find_set(tree, exercise_id: str, set_id: str) -> WorkoutSet | None:
    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        return None
    for s in exercise.sets:
        if s.id == set_id:
            return s
    return None


def replace_sets(tree, exercise_id: str, sets: list[WorkoutSet]):
    """Return ``tree`` with the set list of ``exercise_id`` swapped out."""

    return update_by_instance_id(tree, exercise_id, lambda ex: replace(ex, sets=sets))


def update_set(tree, exercise_id: str, set_id: str, fn: Callable[[WorkoutSet], WorkoutSet]):
    """Return ``tree`` with set ``set_id`` of ``exercise_id`` replaced by ``fn(set)``."""

    if find_set(tree, exercise_id, set_id) is None:
        logging.debug("No set %s in exercise %s", set_id, exercise_id)
        return tree
    return update_by_instance_id(
        tree,
        exercise_id,
        lambda ex: replace(
            ex, sets=[fn(s) if s.id == set_id else s for s in ex.sets]
        ),
    )
