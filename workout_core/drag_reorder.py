"""Flat drag list projection of the exercise tree.

Drag libraries only understand flat lists, so the nested tree is projected
into :class:`~workout_core.models.DragItem` rows: a header, one row per
child and a footer for every group, plus a single row per bare exercise.
After a drop the rows are folded back into a tree.  Group membership is
decided purely by where an exercise row ends up relative to the header and
footer markers.

The flat list is a derived view.  It is regenerated from the tree whenever
needed and is never stored as the source of truth.
"""

from __future__ import annotations

from dataclasses import replace

from workout_core.models import DragItem, ExerciseGroup, is_group

GROUP_HEADER = "GroupHeader"
GROUP_FOOTER = "GroupFooter"
EXERCISE = "Exercise"


def to_flat_drag_list(tree, collapsed_group_id: str | None = None) -> list[DragItem]:
    """Flatten ``tree`` into drag rows.

    Rows of ``collapsed_group_id`` are flagged ``is_collapsed`` so they can be
    drawn as ghost cards under their header.
    """

    items: list[DragItem] = []
    for item in tree:
        if not is_group(item):
            items.append(
                DragItem(
                    kind=EXERCISE,
                    id=item.instance_id,
                    exercise=item,
                    set_count=len(item.sets),
                )
            )
            continue

        gid = item.instance_id
        collapsed = gid == collapsed_group_id
        items.append(
            DragItem(
                kind=GROUP_HEADER,
                id=f"header-{gid}",
                group_id=gid,
                group_type=item.group_type,
                child_count=len(item.children),
                is_collapsed=collapsed,
            )
        )
        last = len(item.children) - 1
        for index, child in enumerate(item.children):
            items.append(
                DragItem(
                    kind=EXERCISE,
                    id=child.instance_id,
                    group_id=gid,
                    group_type=item.group_type,
                    exercise=child,
                    is_first_in_group=index == 0,
                    is_last_in_group=index == last,
                    set_count=len(child.sets),
                    is_collapsed=collapsed,
                )
            )
        items.append(
            DragItem(
                kind=GROUP_FOOTER,
                id=f"footer-{gid}",
                group_id=gid,
                group_type=item.group_type,
                is_collapsed=collapsed,
            )
        )
    return items


def collapse_groups(items: list[DragItem], group_ids) -> list[DragItem]:
    """Return ``items`` with every row of ``group_ids`` marked collapsed."""

    group_ids = set(group_ids)
    return [
        replace(i, is_collapsed=True)
        if i.group_id in group_ids and not i.is_collapsed
        else i
        for i in items
    ]


def expand_all_groups(items: list[DragItem]) -> list[DragItem]:
    return [replace(i, is_collapsed=False) if i.is_collapsed else i for i in items]


def index_of(items: list[DragItem], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


def _owning_group(items: list[DragItem], index: int) -> str | None:
    """Return the group whose header and footer enclose ``items[index]``."""

    found = None
    for prev in reversed(items[:index]):
        if prev.kind == GROUP_FOOTER:
            return None
        if prev.kind == GROUP_HEADER:
            found = prev.group_id
            break
    if found is None:
        return None
    for nxt in items[index + 1 :]:
        if nxt.kind == GROUP_HEADER:
            return None
        if nxt.kind == GROUP_FOOTER and nxt.group_id == found:
            return found
    return None


def from_flat_drag_list(items: list[DragItem]) -> list:
    """Fold drag rows back into a tree.

    Groups keep the id and type of their header row.  A group whose rows
    all left it disappears; one that shrank to a single child from a larger
    size is unwrapped into a bare exercise.
    """

    entries: list[tuple[DragItem, list | None]] = []
    children_by_group: dict[str, list] = {}
    for index, item in enumerate(items):
        if item.kind == GROUP_HEADER:
            children: list = []
            children_by_group[item.group_id] = children
            entries.append((item, children))
        elif item.kind == EXERCISE and item.exercise is not None:
            gid = _owning_group(items, index)
            if gid is not None and gid in children_by_group:
                children_by_group[gid].append(item.exercise)
            else:
                entries.append((item, None))

    tree = []
    for item, children in entries:
        if children is None:
            tree.append(item.exercise)
        elif not children:
            continue
        elif len(children) == 1 and item.child_count >= 2:
            tree.append(children[0])
        else:
            tree.append(
                ExerciseGroup(
                    instance_id=item.group_id,
                    group_type=item.group_type or "Superset",
                    children=children,
                )
            )
    return tree


def move_drag_item(items: list[DragItem], from_index: int, to_index: int) -> list[DragItem]:
    """Return ``items`` with the row at ``from_index`` moved to ``to_index``.

    Dragging a group header carries the whole group with it, and the group
    is never dropped inside another group.  ``to_index`` is the position in
    the list once the dragged rows have been taken out.
    """

    items = list(items)
    if not 0 <= from_index < len(items):
        return items
    moving = items[from_index]
    if moving.kind == GROUP_FOOTER:
        return items

    end = from_index
    if moving.kind == GROUP_HEADER:
        for index in range(from_index + 1, len(items)):
            if items[index].kind == GROUP_FOOTER and items[index].group_id == moving.group_id:
                end = index
                break
    block = items[from_index : end + 1]
    rest = items[:from_index] + items[end + 1 :]
    to_index = max(0, min(to_index, len(rest)))

    if moving.kind == GROUP_HEADER:
        open_gid = None
        for item in rest[:to_index]:
            if item.kind == GROUP_HEADER:
                open_gid = item.group_id
            elif item.kind == GROUP_FOOTER and item.group_id == open_gid:
                open_gid = None
        if open_gid is not None:
            footer = index_of(rest, f"footer-{open_gid}")
            to_index = footer + 1 if footer >= 0 else len(rest)

    return rest[:to_index] + block + rest[to_index:]


def layout_offsets(
    items: list[DragItem],
    card_height: float,
    ghost_height: float,
    marker_height: float,
) -> list[float]:
    """Return the top offset of every row for the given row heights."""

    tops = []
    y = 0.0
    for item in items:
        tops.append(y)
        if item.kind != EXERCISE:
            y += marker_height
        elif item.is_collapsed:
            y += ghost_height
        else:
            y += card_height
    return tops
