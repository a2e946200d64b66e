"""Dropset and superset grouping.

Two grouping axes share the same algebra:

* **Dropsets** live inside one exercise.  Membership is nothing more than a
  shared ``drop_set_id`` on consecutive sets, so every edit rebuilds the set
  list by filtering out the moving sets and splicing them back in as one
  block.
* **Supersets/HIIT groups** bundle exercises into an
  :class:`~workout_core.models.ExerciseGroup`.

The module level functions are pure.  :class:`DropsetSelection` and
:class:`SupersetSelection` hold the transient "selection mode" state a
screen needs while the user ticks rows, and turn it into a single edit on
commit.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace

from workout_core.models import (
    GROUP_SET_TYPES,
    GROUP_TYPES,
    ExerciseGroup,
    WorkoutSet,
    is_group,
)
from workout_core.tree import (
    find_by_instance_id,
    find_group,
    find_parent_group,
    find_set,
    new_id,
    replace_sets,
)


def _check_group_set_type(group_type: str | None) -> None:
    if group_type is not None and group_type not in GROUP_SET_TYPES:
        raise ValueError(f"Unknown dropset type '{group_type}'")


def apply_group_set_type(s: WorkoutSet, group_type: str | None) -> WorkoutSet:
    if group_type is None:
        return s
    return replace(
        s,
        is_warmup=group_type == "warmup",
        is_dropset=group_type == "dropset",
        is_failure=group_type == "failure",
    )


def clear_group_set_type(s: WorkoutSet) -> WorkoutSet:
    return replace(s, is_warmup=False, is_dropset=False, is_failure=False)


def dropset_group_type(sets: list[WorkoutSet], drop_set_id: str) -> str | None:
    """Return the uniform type shared by every member of ``drop_set_id``."""

    members = [s for s in sets if s.drop_set_id == drop_set_id]
    if not members:
        return None
    if all(s.is_warmup for s in members):
        return "warmup"
    if all(s.is_failure for s in members):
        return "failure"
    if all(s.is_dropset for s in members):
        return "dropset"
    return None


def dropsets_are_contiguous(sets: list[WorkoutSet]) -> bool:
    """Return ``True`` if every dropset occupies one unbroken index range."""

    seen: set[str] = set()
    previous = None
    for s in sets:
        current = s.drop_set_id
        if current is not None and current != previous:
            if current in seen:
                return False
            seen.add(current)
        previous = current
    return True


def normalize_dropsets(sets: list[WorkoutSet]) -> list[WorkoutSet]:
    """Clear ``drop_set_id`` on partitions that have a single member."""

    counts = Counter(s.drop_set_id for s in sets if s.drop_set_id is not None)
    lonely = {gid for gid, count in counts.items() if count < 2}
    if not lonely:
        return sets
    return [
        replace(s, drop_set_id=None, is_dropset=False) if s.drop_set_id in lonely else s
        for s in sets
    ]


# ----------------------------------------------------------------------
# Dropsets
# ----------------------------------------------------------------------


def create_dropset(tree, exercise_id: str, set_ids, group_type: str | None = None):
    """Group the selected ungrouped sets of ``exercise_id`` into a dropset.

    The block is inserted where the first selected set used to be.  Fewer
    than two eligible sets leaves ``tree`` untouched.
    """

    _check_group_set_type(group_type)
    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        logging.debug("Dropset target %s no longer exists", exercise_id)
        return tree

    wanted = set(set_ids)
    selected = [s for s in exercise.sets if s.id in wanted and s.drop_set_id is None]
    if len(selected) < 2:
        return tree

    drop_set_id = new_id("dropset")
    selected_ids = {s.id for s in selected}
    first_index = next(i for i, s in enumerate(exercise.sets) if s.id in selected_ids)
    block = [
        apply_group_set_type(replace(s, drop_set_id=drop_set_id), group_type)
        for s in selected
    ]
    remaining = [s for s in exercise.sets if s.id not in selected_ids]
    sets = remaining[:first_index] + block + remaining[first_index:]
    return replace_sets(tree, exercise_id, sets)


def edit_dropset(
    tree,
    exercise_id: str,
    drop_set_id: str,
    selected_set_ids,
    group_type: str | None = None,
):
    """Apply an edited selection to the existing dropset ``drop_set_id``.

    Deselected members are released first, then newly selected ungrouped
    sets join at the end of the block, then ``group_type`` is applied.  A
    ``group_type`` of ``None`` clears the warmup/dropset/failure flags of
    the members.  The released sets are placed directly after the block.  If
    fewer than two members remain the partition is dissolved and its last
    member loses its flags too.
    """

    _check_group_set_type(group_type)
    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        logging.debug("Dropset target %s no longer exists", exercise_id)
        return tree
    sets = exercise.sets
    if not any(s.drop_set_id == drop_set_id for s in sets):
        return tree

    selected = set(selected_set_ids)
    kept = [s for s in sets if s.drop_set_id == drop_set_id and s.id in selected]
    released = [
        replace(s, drop_set_id=None, is_dropset=False)
        for s in sets
        if s.drop_set_id == drop_set_id and s.id not in selected
    ]
    added = [
        replace(s, drop_set_id=drop_set_id)
        for s in sets
        if s.drop_set_id is None and s.id in selected
    ]
    if group_type is None:
        block = [clear_group_set_type(s) for s in kept + added]
    else:
        block = [apply_group_set_type(s, group_type) for s in kept + added]
    if not released and not added and block == kept:
        return tree
    if len(block) < 2:
        block = [clear_group_set_type(replace(s, drop_set_id=None)) for s in block]

    anchor = (kept or added or released)[0].id
    moving = {s.id for s in kept + added + released}
    anchor_pos = next(i for i, s in enumerate(sets) if s.id == anchor)
    insert_at = sum(1 for s in sets[:anchor_pos] if s.id not in moving)
    others = [s for s in sets if s.id not in moving]
    new_sets = others[:insert_at] + block + released + others[insert_at:]
    return replace_sets(tree, exercise_id, new_sets)


def add_sets_to_dropset(tree, exercise_id: str, set_ids, target_drop_set_id: str):
    """Move ``set_ids`` to the end of the dropset ``target_drop_set_id``."""

    exercise = find_by_instance_id(tree, exercise_id)
    if exercise is None:
        return tree
    sets = exercise.sets
    if not any(s.drop_set_id == target_drop_set_id for s in sets):
        return tree

    wanted = set(set_ids)
    target_type = dropset_group_type(sets, target_drop_set_id)
    moving = [s for s in sets if s.id in wanted and s.drop_set_id != target_drop_set_id]
    if not moving:
        return tree

    moved = [
        apply_group_set_type(replace(s, drop_set_id=target_drop_set_id), target_type)
        for s in moving
    ]
    moving_ids = {s.id for s in moving}
    others = [s for s in sets if s.id not in moving_ids]
    last = max(i for i, s in enumerate(others) if s.drop_set_id == target_drop_set_id)
    new_sets = normalize_dropsets(others[: last + 1] + moved + others[last + 1 :])
    return replace_sets(tree, exercise_id, new_sets)


class DropsetSelection:
    """Selection-mode state for building or editing a dropset.

    ``begin`` on an ungrouped set starts a new dropset with that set ticked.
    ``begin`` on a grouped set edits that dropset with its members ticked.
    Only ungrouped sets (and, when editing, members of the edited group)
    can be toggled.
    """

    def __init__(self) -> None:
        self.cancel()

    @property
    def active(self) -> bool:
        return self.exercise_id is not None

    def begin(self, tree, exercise_id: str, set_id: str) -> bool:
        s = find_set(tree, exercise_id, set_id)
        if s is None:
            self.cancel()
            return False
        self.exercise_id = exercise_id
        if s.drop_set_id:
            sets = find_by_instance_id(tree, exercise_id).sets
            self.editing_group_id = s.drop_set_id
            self.selected_set_ids = {
                m.id for m in sets if m.drop_set_id == s.drop_set_id
            }
            self.group_set_type = dropset_group_type(sets, s.drop_set_id)
        else:
            self.editing_group_id = None
            self.selected_set_ids = {set_id}
            self.group_set_type = None
        return True

    def toggle(self, tree, set_id: str) -> None:
        if not self.active:
            return
        s = find_set(tree, self.exercise_id, set_id)
        if s is None:
            return
        if self.editing_group_id:
            allowed = s.drop_set_id in (None, self.editing_group_id)
        else:
            allowed = s.drop_set_id is None
        if not allowed:
            return
        if set_id in self.selected_set_ids:
            self.selected_set_ids.discard(set_id)
        else:
            self.selected_set_ids.add(set_id)

    def set_group_type(self, group_type: str | None) -> None:
        _check_group_set_type(group_type)
        self.group_set_type = group_type

    def add_to_group(self, tree, target_set_id: str):
        """Move the current selection into the dropset of ``target_set_id``."""

        if not self.active:
            return tree
        target = find_set(tree, self.exercise_id, target_set_id)
        if target is None or not target.drop_set_id:
            return tree
        result = add_sets_to_dropset(
            tree, self.exercise_id, self.selected_set_ids, target.drop_set_id
        )
        self.cancel()
        return result

    def commit(self, tree):
        if not self.active:
            return tree
        if self.editing_group_id:
            result = edit_dropset(
                tree,
                self.exercise_id,
                self.editing_group_id,
                self.selected_set_ids,
                self.group_set_type,
            )
        else:
            result = create_dropset(
                tree, self.exercise_id, self.selected_set_ids, self.group_set_type
            )
        self.cancel()
        return result

    def cancel(self) -> None:
        self.exercise_id: str | None = None
        self.editing_group_id: str | None = None
        self.selected_set_ids: set[str] = set()
        self.group_set_type: str | None = None


# ----------------------------------------------------------------------
# Supersets / HIIT
# ----------------------------------------------------------------------


def create_superset(tree, exercise_ids, group_type: str = "Superset"):
    """Bundle the selected bare exercises into a new group.

    The group takes the position of the first selected exercise.  Fewer
    than two eligible exercises leaves ``tree`` untouched.
    """

    if group_type not in GROUP_TYPES:
        raise ValueError(f"Unknown group type '{group_type}'")
    wanted = set(exercise_ids)
    selected = [i for i in tree if not is_group(i) and i.instance_id in wanted]
    if len(selected) < 2:
        return tree

    selected_ids = {e.instance_id for e in selected}
    first_index = next(i for i, item in enumerate(tree) if item.instance_id in selected_ids)
    group = ExerciseGroup(instance_id=new_id("group"), group_type=group_type, children=selected)
    others = [item for item in tree if item.instance_id not in selected_ids]
    return others[:first_index] + [group] + others[first_index:]


def edit_superset(tree, group_id: str, selected_ids):
    """Apply an edited selection to the group ``group_id``.

    Kept members stay in order, newly selected bare exercises are appended
    and deselected members follow the group as bare exercises.  A group left
    with one member or none is dissolved in place.
    """

    group = find_group(tree, group_id)
    if group is None:
        logging.debug("Group %s no longer exists", group_id)
        return tree

    selected = set(selected_ids)
    kept = [c for c in group.children if c.instance_id in selected]
    unselected = [c for c in group.children if c.instance_id not in selected]
    added = [i for i in tree if not is_group(i) and i.instance_id in selected]
    if not unselected and not added:
        return tree

    members = kept + added
    added_ids = {e.instance_id for e in added}
    result = []
    for item in tree:
        if item.instance_id in added_ids:
            continue
        if item.instance_id == group_id:
            if len(members) <= 1:
                result.extend(members + unselected)
            else:
                result.append(replace(item, children=members))
                result.extend(unselected)
            continue
        result.append(item)
    return result


def add_to_superset(tree, exercise_id: str, group_id: str):
    """Append the bare exercise ``exercise_id`` to the group ``group_id``."""

    group = find_group(tree, group_id)
    exercise = next(
        (i for i in tree if not is_group(i) and i.instance_id == exercise_id), None
    )
    if group is None or exercise is None:
        return tree
    result = []
    for item in tree:
        if item.instance_id == exercise_id:
            continue
        if item.instance_id == group_id:
            item = replace(item, children=item.children + [exercise])
        result.append(item)
    return result


class SupersetSelection:
    """Selection-mode state for building or editing a superset/HIIT group."""

    def __init__(self) -> None:
        self.cancel()

    @property
    def active(self) -> bool:
        return self.exercise_id is not None

    @property
    def mode(self) -> str | None:
        if not self.active:
            return None
        return "edit" if self.group_id else "create"

    def begin(self, tree, exercise_id: str, group_type: str = "Superset") -> bool:
        if find_by_instance_id(tree, exercise_id) is None:
            self.cancel()
            return False
        self.exercise_id = exercise_id
        group = find_parent_group(tree, exercise_id)
        if group is not None:
            self.group_id = group.instance_id
            self.group_type = group.group_type
            self.selected_exercise_ids = [c.instance_id for c in group.children]
        else:
            self.group_id = None
            self.group_type = group_type
            self.selected_exercise_ids = [exercise_id]
        return True

    def toggle(self, tree, exercise_id: str) -> None:
        if not self.active:
            return
        parent = find_parent_group(tree, exercise_id)
        if parent is not None and parent.instance_id != self.group_id:
            return
        if parent is None and find_by_instance_id(tree, exercise_id) is None:
            return
        if exercise_id in self.selected_exercise_ids:
            self.selected_exercise_ids.remove(exercise_id)
        else:
            self.selected_exercise_ids.append(exercise_id)

    def commit(self, tree):
        if not self.active:
            return tree
        if self.group_id:
            result = edit_superset(tree, self.group_id, self.selected_exercise_ids)
        else:
            result = create_superset(tree, self.selected_exercise_ids, self.group_type)
        self.cancel()
        return result

    def cancel(self) -> None:
        self.exercise_id: str | None = None
        self.group_id: str | None = None
        self.group_type: str = "Superset"
        self.selected_exercise_ids: list[str] = []


def cancel_selection(*selections) -> None:
    """Discard the state of every selection container passed in."""

    for selection in selections:
        selection.cancel()
