from ui.drag_controller import DRAGGING, IDLE, PREPARING, DragSession
from workout_core import settings
from workout_core.models import ExerciseGroup


def _session(holder, fake_clock, started=None):
    def on_drag_start(item_id, shift):
        if started is not None:
            started.append((item_id, shift))

    return DragSession(
        on_update=holder.update,
        on_drag_start=on_drag_start,
        clock=fake_clock,
        card_height=72,
        ghost_height=24,
        marker_height=24,
    )


def test_prepare_collapses_other_groups(holder, fake_clock):
    started = []
    session = _session(holder, fake_clock, started)
    items = session.prepare(holder.workout, "d")
    assert session.state == PREPARING
    assert session.collapsed == {"g"}
    assert [i.is_collapsed for i in items] == [False, True, True, True, True, False, False]
    # d sits below three expanded rows of the group that shrink to ghosts
    assert session.anchor_shift == 96
    assert len(fake_clock.live) == 1
    assert fake_clock.live[0].timeout == session.settle_delay

    fake_clock.fire()
    assert session.state == DRAGGING
    assert started == [("d", 96)]


def test_prepare_keeps_own_group_expanded(holder, fake_clock):
    session = _session(holder, fake_clock)
    items = session.prepare(holder.workout, "b")
    assert session.collapsed == set()
    assert not any(i.is_collapsed for i in items)


def test_header_drag_collapses_its_group(holder, fake_clock):
    session = _session(holder, fake_clock)
    session.prepare(holder.workout, "header-g")
    assert session.collapsed == {"g"}
    assert session.anchor_shift == 0


def test_drop_commits_once(holder, fake_clock):
    session = _session(holder, fake_clock)
    session.prepare(holder.workout, "a")
    fake_clock.fire()
    # move a to the end of the list
    tree = session.drop(from_index=0, to_index=6)
    assert [i.instance_id for i in tree] == ["g", "d", "bench", "a"]
    assert len(holder.updates) == 1
    assert holder.workout.exercises == tree
    assert isinstance(holder.workout.exercises[0], ExerciseGroup)
    assert session.state == IDLE


def test_drop_without_change_does_not_commit(holder, fake_clock):
    session = _session(holder, fake_clock)
    session.prepare(holder.workout, "a")
    fake_clock.fire()
    assert session.drop(from_index=0, to_index=0) is None
    assert holder.updates == []


def test_drop_before_settle_abandons_drag(holder, fake_clock):
    started = []
    session = _session(holder, fake_clock, started)
    session.prepare(holder.workout, "d")
    assert session.drop(from_index=0, to_index=3) is None
    assert session.state == IDLE
    assert session.collapsed == set()
    assert fake_clock.live == []
    fake_clock.fire()
    assert started == []
    assert holder.updates == []


def test_cancel_discards_pending_drag(holder, fake_clock):
    started = []
    session = _session(holder, fake_clock, started)
    session.prepare(holder.workout, "d")
    session.cancel()
    assert session.state == IDLE
    assert session.items == []
    assert fake_clock.live == []
    fake_clock.fire()
    assert started == []
    assert holder.updates == []


def test_prepare_unknown_item(holder, fake_clock):
    session = _session(holder, fake_clock)
    assert session.prepare(holder.workout, "ghost") == []
    assert session.state == IDLE
    assert fake_clock.live == []


def test_press_records_finger_offset(holder, fake_clock):
    session = _session(holder, fake_clock)
    items = session.prepare(holder.workout, "b")
    session.press("b", 110.0, items)
    # b starts below a (72) and the header (24)
    assert session.finger_offset == 14.0


def test_session_reads_sizes_from_settings(holder, fake_clock):
    settings.set_value("drag_settle_delay", 0.2)
    settings.set_value("card_row_height", 100.0)
    session = DragSession(on_update=holder.update, clock=fake_clock)
    assert session.settle_delay == 0.2
    assert session.card_height == 100.0
    assert session.ghost_height == 24.0
    session.prepare(holder.workout, "a")
    assert fake_clock.live[0].timeout == 0.2
