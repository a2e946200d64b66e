"""Drag reordering of the sets inside one exercise.

Dropset membership follows the landing position of a dragged set: it joins
a dropset when dropped inside it or against one of its ends, and leaves its
old dropset otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from workout_core.grouping import (
    apply_group_set_type,
    dropset_group_type,
    normalize_dropsets,
)
from workout_core.models import WorkoutSet
from workout_core.tree import find_by_instance_id, replace_sets

DROPSET_HEADER = "DropsetHeader"
DROPSET_FOOTER = "DropsetFooter"
SET = "Set"


@dataclass(frozen=True)
class SetDragItem:
    kind: str
    id: str
    drop_set_id: str | None = None
    set: WorkoutSet | None = None
    set_count: int = 0
    has_rest_timer: bool = False


def to_set_drag_list(exercise) -> list[SetDragItem]:
    """Return the drag rows of ``exercise``'s sets, framing each dropset."""

    sets = exercise.sets
    items: list[SetDragItem] = []
    for index, s in enumerate(sets):
        gid = s.drop_set_id
        if gid and (index == 0 or sets[index - 1].drop_set_id != gid):
            items.append(
                SetDragItem(
                    kind=DROPSET_HEADER,
                    id=f"dropset-header-{gid}",
                    drop_set_id=gid,
                    set_count=sum(1 for m in sets if m.drop_set_id == gid),
                )
            )
        items.append(
            SetDragItem(
                kind=SET,
                id=s.id,
                drop_set_id=gid,
                set=s,
                has_rest_timer=bool(s.rest_period_seconds),
            )
        )
        if gid and (index == len(sets) - 1 or sets[index + 1].drop_set_id != gid):
            items.append(
                SetDragItem(kind=DROPSET_FOOTER, id=f"dropset-footer-{gid}", drop_set_id=gid)
            )
    return items


def _landing_group(moved: WorkoutSet, prev: WorkoutSet | None, nxt: WorkoutSet | None) -> str | None:
    before = prev.drop_set_id if prev else None
    after = nxt.drop_set_id if nxt else None
    if before and before == after:
        return before
    if before and after:
        return moved.drop_set_id if moved.drop_set_id in (before, after) else None
    return before or after


def reorder_sets(tree, exercise_id: str, from_index: int, to_index: int):
    """Move the set at ``from_index`` to ``to_index`` within one exercise.

    Indices refer to the exercise's set list.  The moved set's
    ``drop_set_id`` is rebound from its new neighbours and partitions left
    with a single member are cleared.
    """

    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        logging.debug("Set reorder target %s no longer exists", exercise_id)
        return tree
    sets = list(exercise.sets)
    if from_index == to_index or not 0 <= from_index < len(sets):
        return tree
    to_index = max(0, min(to_index, len(sets) - 1))

    moved = sets.pop(from_index)
    sets.insert(to_index, moved)
    prev = sets[to_index - 1] if to_index > 0 else None
    nxt = sets[to_index + 1] if to_index + 1 < len(sets) else None
    gid = _landing_group(moved, prev, nxt)

    if gid is None:
        rebound = replace(moved, drop_set_id=None, is_dropset=False)
    elif gid != moved.drop_set_id:
        rebound = apply_group_set_type(
            replace(moved, drop_set_id=gid), dropset_group_type(sets, gid)
        )
    else:
        rebound = moved
    sets[to_index] = rebound
    return replace_sets(tree, exercise_id, normalize_dropsets(sets))
