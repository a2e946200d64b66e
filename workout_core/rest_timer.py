"""Rest timer state machine.

A :class:`~workout_core.models.RestTimer` is an immutable snapshot.  Each
operation returns the next snapshot, or ``None`` once the timer is gone::

    Inactive -> Running <-> Paused -> (Expired | Cancelled | Completed)

Remaining time is always derived from wall clock timestamps::

    remaining = duration - (now - started_at - paused_duration)

so a late or skipped tick never makes the countdown drift.  The functions
near the bottom of the module apply the timer's effects to the exercise
tree (``rest_timer_completed`` flags) and resolve the interaction between
set completion and an already running timer.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import replace

from workout_core.models import RestTimer
from workout_core.sets import clear_rest_period, delete_set
from workout_core.tree import delete_by_instance_id, find_set, update_set


def _now(now: float | None) -> float:
    return time.time() if now is None else now


def _exact_remaining(timer: RestTimer, now: float) -> float:
    reference = timer.paused_at if timer.is_paused and timer.paused_at is not None else now
    elapsed = reference - timer.started_at - timer.paused_duration
    return timer.duration_seconds - elapsed


def start_rest_timer(set_ref: tuple[str, str], seconds: int, now: float | None = None) -> RestTimer:
    """Return a running timer of ``seconds`` for ``set_ref``.

    ``set_ref`` is an ``(exercise_instance_id, set_id)`` pair.
    """

    if seconds <= 0:
        raise ValueError("Rest timer length must be positive")
    exercise_id, set_id = set_ref
    now = _now(now)
    logging.info("Rest timer started for set %s (%ss)", set_id, seconds)
    return RestTimer(
        exercise_id=exercise_id,
        set_id=set_id,
        remaining_seconds=int(seconds),
        total_seconds=int(seconds),
        is_paused=False,
        started_at=now,
        duration_seconds=float(seconds),
    )


def tick_rest_timer(timer: RestTimer | None, now: float | None = None) -> RestTimer | None:
    """Return ``timer`` with an up to date ``remaining_seconds``.

    ``None`` is returned once the countdown reaches zero.  A paused timer is
    returned unchanged.
    """

    if timer is None or timer.is_paused:
        return timer
    remaining = math.ceil(_exact_remaining(timer, _now(now)))
    if remaining <= 0:
        logging.info("Rest timer for set %s expired", timer.set_id)
        return None
    if remaining == timer.remaining_seconds:
        return timer
    return replace(timer, remaining_seconds=remaining)


def pause_rest_timer(timer: RestTimer | None, now: float | None = None) -> RestTimer | None:
    """Freeze ``timer`` at its current remaining time."""

    if timer is None or timer.is_paused:
        return timer
    now = _now(now)
    remaining = max(1, math.ceil(_exact_remaining(timer, now)))
    return replace(timer, is_paused=True, paused_at=now, remaining_seconds=remaining)


def resume_rest_timer(timer: RestTimer | None, now: float | None = None) -> RestTimer | None:
    """Continue ``timer``; the paused interval is excluded from elapsed time."""

    if timer is None or not timer.is_paused:
        return timer
    now = _now(now)
    paused_for = max(0.0, now - (timer.paused_at if timer.paused_at is not None else now))
    return replace(
        timer,
        is_paused=False,
        paused_at=None,
        paused_duration=timer.paused_duration + paused_for,
    )


def toggle_pause(timer: RestTimer | None, now: float | None = None) -> RestTimer | None:
    if timer is None:
        return None
    if timer.is_paused:
        return resume_rest_timer(timer, now)
    return pause_rest_timer(timer, now)


def adjust_rest_timer(timer: RestTimer | None, seconds: int, now: float | None = None) -> RestTimer | None:
    """Add (positive) or remove (negative) ``seconds`` of rest.

    Additions grow ``total_seconds`` too so progress indicators stay in
    proportion.  Removal never takes the remaining time below one second.
    """

    if timer is None or seconds == 0:
        return timer
    now = _now(now)
    current = math.ceil(_exact_remaining(timer, now))
    if seconds > 0:
        return replace(
            timer,
            remaining_seconds=current + seconds,
            total_seconds=timer.total_seconds + seconds,
            duration_seconds=timer.duration_seconds + seconds,
        )
    new_remaining = max(1, current + seconds)
    return replace(
        timer,
        remaining_seconds=new_remaining,
        duration_seconds=timer.duration_seconds - (current - new_remaining),
    )


def cancel_rest_timer(timer: RestTimer | None) -> None:
    """Drop ``timer`` without marking its set as rested."""

    if timer is not None:
        logging.info("Rest timer for set %s cancelled", timer.set_id)
    return None


def rest_progress(timer: RestTimer | None, now: float | None = None) -> float:
    """Return the elapsed fraction of ``timer`` as a float in ``[0, 1]``.

    This is continuous in time and is meant to drive a smooth animation
    independent of the once-per-second label update.
    """

    if timer is None or timer.total_seconds <= 0:
        return 0.0
    remaining = _exact_remaining(timer, _now(now))
    fraction = 1.0 - remaining / timer.total_seconds
    return min(1.0, max(0.0, fraction))


def format_rest_time(seconds: int) -> str:
    """Return ``seconds`` formatted as ``M:SS``."""

    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def parse_rest_time_input(text: str) -> int:
    """Convert keypad input to seconds.

    One or two digits are plain seconds.  Longer input is read as ``MMSS``
    when the last two digits form valid seconds, e.g. ``"130"`` is 90.
    Invalid or non-positive input yields ``0``.
    """

    try:
        value = int(str(text).strip())
    except ValueError:
        return 0
    if value <= 0:
        return 0
    if value <= 99:
        return value
    minutes, secs = divmod(value, 100)
    if secs < 60:
        return minutes * 60 + secs
    return value


# ----------------------------------------------------------------------
# Tree side effects
# ----------------------------------------------------------------------


def mark_rest_completed(tree, timer: RestTimer | None):
    """Return ``tree`` with ``timer``'s set flagged ``rest_timer_completed``."""

    if timer is None:
        return tree
    return update_set(
        tree,
        timer.exercise_id,
        timer.set_id,
        lambda s: replace(s, rest_timer_completed=True),
    )


def start_timer_for_set(
    tree,
    timer: RestTimer | None,
    exercise_id: str,
    set_id: str,
    seconds: int,
    now: float | None = None,
):
    """Explicitly start a ``seconds`` long timer on a set.

    The set's rest period is updated to ``seconds``.  A timer already
    running for another set is completed first.  Returns ``(tree, timer)``.
    """

    if find_set(tree, exercise_id, set_id) is None or seconds <= 0:
        return tree, timer
    if timer is not None and timer.set_id != set_id:
        tree = mark_rest_completed(tree, timer)
    tree = update_set(
        tree,
        exercise_id,
        set_id,
        lambda s: replace(s, rest_period_seconds=seconds, rest_timer_completed=False),
    )
    return tree, start_rest_timer((exercise_id, set_id), seconds, now)


def complete_set(
    tree,
    timer: RestTimer | None,
    exercise_id: str,
    set_id: str,
    now: float | None = None,
    auto_start: bool = True,
):
    """Mark a set completed and reconcile the active rest timer.

    A timer running for a different set is force-completed.  A new timer is
    started when the completed set carries a rest period and ``auto_start``
    is on.  Returns ``(tree, timer)``.
    """

    s = find_set(tree, exercise_id, set_id)
    if s is None:
        return tree, timer
    tree = update_set(tree, exercise_id, set_id, lambda x: replace(x, completed=True))
    if timer is not None and timer.set_id != set_id:
        tree = mark_rest_completed(tree, timer)
        timer = None
    if auto_start and s.rest_period_seconds and s.rest_period_seconds > 0:
        tree = update_set(
            tree, exercise_id, set_id, lambda x: replace(x, rest_timer_completed=False)
        )
        timer = start_rest_timer((exercise_id, set_id), s.rest_period_seconds, now)
    return tree, timer


def uncomplete_set(tree, timer: RestTimer | None, exercise_id: str, set_id: str):
    """Mark a set as not done; its own timer is cancelled, not completed."""

    if find_set(tree, exercise_id, set_id) is None:
        return tree, timer
    tree = update_set(
        tree,
        exercise_id,
        set_id,
        lambda s: replace(s, completed=False, rest_timer_completed=False),
    )
    if timer is not None and timer.set_id == set_id:
        timer = cancel_rest_timer(timer)
    return tree, timer


def toggle_set_complete(
    tree,
    timer: RestTimer | None,
    exercise_id: str,
    set_id: str,
    now: float | None = None,
    auto_start: bool = True,
):
    s = find_set(tree, exercise_id, set_id)
    if s is None:
        return tree, timer
    if s.completed:
        return uncomplete_set(tree, timer, exercise_id, set_id)
    return complete_set(tree, timer, exercise_id, set_id, now, auto_start)


def remove_rest_period(tree, timer: RestTimer | None, exercise_id: str, set_id: str):
    """Strip the rest period from a set, cancelling its timer if running."""

    if find_set(tree, exercise_id, set_id) is None:
        return tree, timer
    tree = clear_rest_period(tree, exercise_id, set_id)
    if timer is not None and timer.set_id == set_id:
        timer = cancel_rest_timer(timer)
    return tree, timer


def delete_set_with_timer(tree, timer: RestTimer | None, exercise_id: str, set_id: str):
    """Delete a set and cancel the timer if it belonged to that set."""

    tree = delete_set(tree, exercise_id, set_id)
    if timer is not None and timer.set_id == set_id:
        timer = cancel_rest_timer(timer)
    return tree, timer


def delete_exercise_with_timer(tree, timer: RestTimer | None, instance_id: str):
    """Delete an exercise or group; a timer whose set went with it is cancelled."""

    tree = delete_by_instance_id(tree, instance_id)
    if timer is not None and find_set(tree, timer.exercise_id, timer.set_id) is None:
        timer = cancel_rest_timer(timer)
    return tree, timer
