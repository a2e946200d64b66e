"""Owner of the active rest timer for a workout screen.

The controller keeps exactly one countdown alive.  Ticks are driven by
:class:`~kivy.clock.Clock` and every tree change is handed to ``on_update``
so the screen commits a single new workout per user action or expiry.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from kivy.clock import Clock

from workout_core import DEFAULT_REST_DURATION, REST_ADJUST_STEPS, settings
from workout_core import rest_timer as engine
from workout_core.models import RestTimer, Workout


class RestTimerController:
    """Drive a :class:`~workout_core.models.RestTimer` with Kivy's clock.

    ``get_workout`` returns the current workout and ``on_update`` receives
    the replacement.  ``on_dismiss`` is called once the timer expires or is
    completed by hand.  ``on_tick`` receives the timer after each label
    update and ``on_progress`` a float in ``[0, 1]`` at a faster cadence for
    animations.  ``clock`` defaults to Kivy's global clock.  Unset options
    fall back to the user settings.
    """

    tick_interval = 1.0
    progress_interval = 0.1

    def __init__(
        self,
        get_workout: Callable[[], Workout],
        on_update: Callable[[Workout], None],
        on_dismiss: Callable[[], None] | None = None,
        on_tick: Callable[[RestTimer], None] | None = None,
        on_progress: Callable[[float], None] | None = None,
        clock=None,
        auto_start: bool | None = None,
    ) -> None:
        self.get_workout = get_workout
        self.on_update = on_update
        self.on_dismiss = on_dismiss
        self.on_tick = on_tick
        self.on_progress = on_progress
        self.clock = clock or Clock
        if auto_start is None:
            auto_start = settings.get_value("auto_start_rest_timer", True)
        self.auto_start = auto_start
        # Increments offered by the +/- buttons of the timer popup
        self.adjust_steps = tuple(settings.get_value("rest_adjust_steps", REST_ADJUST_STEPS))
        self.timer: RestTimer | None = None
        self._event = None
        self._progress_event = None

    @property
    def active(self) -> bool:
        return self.timer is not None

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def _schedule(self) -> None:
        self._unschedule()
        self._event = self.clock.schedule_interval(self._tick, self.tick_interval)
        if self.on_progress is not None:
            self._progress_event = self.clock.schedule_interval(
                self._progress, self.progress_interval
            )

    def _unschedule(self) -> None:
        if self._event:
            self._event.cancel()
            self._event = None
        if self._progress_event:
            self._progress_event.cancel()
            self._progress_event = None

    def _tick(self, _dt) -> bool | None:
        if self.timer is None:
            self._unschedule()
            return False
        timer = engine.tick_rest_timer(self.timer)
        if timer is None:
            self._expire()
            return False
        self.timer = timer
        if self.on_tick:
            self.on_tick(timer)
        return None

    def _progress(self, _dt) -> None:
        if self.timer is not None and self.on_progress:
            self.on_progress(engine.rest_progress(self.timer))

    def _expire(self) -> None:
        expired = self.timer
        self.timer = None
        self._unschedule()
        self._commit(engine.mark_rest_completed(self._tree(), expired))
        if self.on_dismiss:
            self.on_dismiss()

    # ------------------------------------------------------------------
    # Tree helpers
    # ------------------------------------------------------------------
    def _tree(self):
        return self.get_workout().exercises

    def _commit(self, tree) -> None:
        workout = self.get_workout()
        if tree is workout.exercises:
            return
        self.on_update(replace(workout, exercises=tree))

    def _apply(self, tree, timer: RestTimer | None) -> None:
        previous = self.timer
        self.timer = timer
        self._commit(tree)
        if timer is None:
            self._unschedule()
        elif timer is not previous:
            self._schedule()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def start(self, exercise_id: str, set_id: str, seconds: int | None = None) -> None:
        """Start an explicit ``seconds`` long rest after a set.

        Without ``seconds`` the default rest length from the settings is used.
        """

        if seconds is None:
            seconds = settings.get_value("default_rest_seconds", DEFAULT_REST_DURATION)
        tree, timer = engine.start_timer_for_set(
            self._tree(), self.timer, exercise_id, set_id, seconds
        )
        self._apply(tree, timer)

    def toggle_complete(self, exercise_id: str, set_id: str) -> None:
        tree, timer = engine.toggle_set_complete(
            self._tree(), self.timer, exercise_id, set_id, auto_start=self.auto_start
        )
        self._apply(tree, timer)

    def on_set_completed(self, exercise_id: str, set_id: str) -> None:
        tree, timer = engine.complete_set(
            self._tree(), self.timer, exercise_id, set_id, auto_start=self.auto_start
        )
        self._apply(tree, timer)

    def on_set_uncompleted(self, exercise_id: str, set_id: str) -> None:
        tree, timer = engine.uncomplete_set(self._tree(), self.timer, exercise_id, set_id)
        self._apply(tree, timer)

    def remove_rest_period(self, exercise_id: str, set_id: str) -> None:
        tree, timer = engine.remove_rest_period(self._tree(), self.timer, exercise_id, set_id)
        self._apply(tree, timer)

    def delete_set(self, exercise_id: str, set_id: str) -> None:
        tree, timer = engine.delete_set_with_timer(
            self._tree(), self.timer, exercise_id, set_id
        )
        self._apply(tree, timer)

    def delete_exercise(self, instance_id: str) -> None:
        """Remove an exercise or group, dropping a timer that belonged to it."""

        tree, timer = engine.delete_exercise_with_timer(self._tree(), self.timer, instance_id)
        self._apply(tree, timer)

    def pause(self) -> None:
        self.timer = engine.pause_rest_timer(self.timer)

    def resume(self) -> None:
        self.timer = engine.resume_rest_timer(self.timer)

    def toggle_pause(self) -> None:
        self.timer = engine.toggle_pause(self.timer)

    def adjust(self, seconds: int) -> None:
        if self.timer is None:
            return
        self.timer = engine.adjust_rest_timer(self.timer, seconds)
        if self.on_tick:
            self.on_tick(self.timer)

    def cancel(self) -> None:
        """Stop the countdown without marking the rest as done."""

        self.timer = engine.cancel_rest_timer(self.timer)
        self._unschedule()

    def complete_now(self) -> None:
        """Skip the rest of the countdown and mark it done."""

        if self.timer is None:
            return
        logging.info("Rest timer for set %s completed early", self.timer.set_id)
        self._expire()

    def close(self) -> None:
        """Release clock events; the timer state is discarded."""

        self._unschedule()
        self.timer = None
