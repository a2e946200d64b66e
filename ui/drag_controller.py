"""Exercise level drag session.

A drag goes through ``idle -> preparing -> dragging -> idle``.  While
preparing, groups are collapsed into ghost rows and the list is given one
:class:`~kivy.clock.Clock` step to settle before the drag really starts.
Nothing is written to the workout until the row is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from kivy.clock import Clock

from workout_core import DRAG_SETTLE_DELAY, settings
from workout_core.drag_reorder import (
    GROUP_HEADER,
    collapse_groups,
    expand_all_groups,
    from_flat_drag_list,
    index_of,
    layout_offsets,
    move_drag_item,
    to_flat_drag_list,
)
from workout_core.models import DragItem, Workout

IDLE = "idle"
PREPARING = "preparing"
DRAGGING = "dragging"


class DragSession:
    def __init__(
        self,
        on_update: Callable[[Workout], None],
        on_drag_start: Callable[[str, float], None] | None = None,
        clock=None,
        settle_delay: float | None = None,
        card_height: float | None = None,
        ghost_height: float | None = None,
        marker_height: float = 24.0,
    ) -> None:
        self.on_update = on_update
        self.on_drag_start = on_drag_start
        self.clock = clock or Clock
        # Unset sizes and delays come from the user settings
        if settle_delay is None:
            settle_delay = settings.get_value("drag_settle_delay", DRAG_SETTLE_DELAY)
        if card_height is None:
            card_height = settings.get_value("card_row_height", 72.0)
        if ghost_height is None:
            ghost_height = settings.get_value("ghost_row_height", 24.0)
        self.settle_delay = settle_delay
        self.card_height = card_height
        self.ghost_height = ghost_height
        self.marker_height = marker_height
        self._settle_event = None
        self._reset()

    def _reset(self) -> None:
        self.state = IDLE
        self.workout: Workout | None = None
        self.item_id: str | None = None
        self.items: list[DragItem] = []
        self.collapsed: set[str] = set()
        self.anchor_shift = 0.0
        self.touch_y: float | None = None
        self.finger_offset = 0.0

    def _top_of(self, items: list[DragItem], item_id: str) -> float:
        index = index_of(items, item_id)
        if index < 0:
            return 0.0
        return layout_offsets(
            items, self.card_height, self.ghost_height, self.marker_height
        )[index]

    def press(self, item_id: str, y: float, items: list[DragItem] | None = None) -> None:
        """Remember where the finger touched ``item_id``."""

        self.item_id = item_id
        self.touch_y = y
        if items:
            self.finger_offset = y - self._top_of(items, item_id)
        else:
            self.finger_offset = 0.0

    def prepare(self, workout: Workout, item_id: str) -> list[DragItem]:
        """Collapse groups around ``item_id`` and schedule the drag start.

        The dragged exercise's own group stays expanded.  When a group
        header is dragged every group, including its own, is collapsed.
        Returns the drag rows to display.
        """

        if self._settle_event:
            self._settle_event.cancel()
            self._settle_event = None

        expanded = to_flat_drag_list(workout.exercises)
        index = index_of(expanded, item_id)
        if index < 0:
            logging.debug("Drag item %s is not in the list", item_id)
            self._reset()
            return []

        dragged = expanded[index]
        group_ids = {i.group_id for i in expanded if i.kind == GROUP_HEADER}
        if dragged.kind != GROUP_HEADER and dragged.group_id:
            group_ids.discard(dragged.group_id)

        self.items = collapse_groups(expanded, group_ids)
        self.collapsed = group_ids
        self.anchor_shift = self._top_of(expanded, item_id) - self._top_of(self.items, item_id)
        self.workout = workout
        self.item_id = item_id
        self.state = PREPARING
        self._settle_event = self.clock.schedule_once(self._begin_drag, self.settle_delay)
        return self.items

    def _begin_drag(self, _dt) -> None:
        self._settle_event = None
        if self.state != PREPARING:
            return
        self.state = DRAGGING
        if self.on_drag_start:
            self.on_drag_start(self.item_id, self.anchor_shift)

    def drop(
        self,
        items: list[DragItem] | None = None,
        from_index: int | None = None,
        to_index: int | None = None,
    ):
        """Finish the drag and commit the new order once.

        ``items`` is the reordered list reported by the list widget.  When
        only the indices are given the move is applied to the session's rows.
        Returns the new tree, or ``None`` when nothing changed.
        """

        if self.state != DRAGGING:
            logging.debug("Drop while %s, abandoning drag", self.state)
            self.cancel()
            return None
        if items is None:
            if from_index is None or to_index is None:
                self.cancel()
                return None
            items = move_drag_item(self.items, from_index, to_index)

        workout = self.workout
        tree = from_flat_drag_list(expand_all_groups(items))
        self._reset()
        if tree == workout.exercises:
            return None
        logging.info("Drag reordered workout %s", workout.id)
        self.on_update(replace(workout, exercises=tree))
        return tree

    def cancel(self) -> None:
        """Abort the drag, restoring the list and leaving the workout alone."""

        if self._settle_event:
            self._settle_event.cancel()
            self._settle_event = None
        self._reset()
