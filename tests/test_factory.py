import pytest

from workout_core import factory
from workout_core.models import Note

LIBRARY_ITEM = {"id": 7, "name": "Squat", "category": "Lifts", "track_reps": True}


def test_create_exercise_instance_defaults():
    ex = factory.create_exercise_instance(LIBRARY_ITEM)
    assert ex.exercise_id == "7"
    assert ex.name == "Squat"
    assert ex.track_reps is True
    assert len(ex.sets) == 1
    assert ex.sets[0].drop_set_id is None
    assert ex.instance_id.startswith("exercise-")


def test_instances_get_unique_ids():
    first = factory.create_exercise_instance(LIBRARY_ITEM, set_count=3)
    second = factory.create_exercise_instance(LIBRARY_ITEM, set_count=3)
    assert first.instance_id != second.instance_id
    ids = [s.id for s in first.sets + second.sets]
    assert len(set(ids)) == 6


def test_dropset_instance_shares_one_id():
    ex = factory.create_exercise_instance(LIBRARY_ITEM, set_count=3, is_dropset=True)
    assert len({s.drop_set_id for s in ex.sets}) == 1
    assert ex.sets[0].drop_set_id is not None
    assert all(s.is_dropset for s in ex.sets)


def test_single_set_dropset_is_plain():
    ex = factory.create_exercise_instance(LIBRARY_ITEM, set_count=1, is_dropset=True)
    assert ex.sets[0].drop_set_id is None
    assert not ex.sets[0].is_dropset


def test_create_rejects_zero_sets():
    with pytest.raises(ValueError):
        factory.create_exercise_instance(LIBRARY_ITEM, set_count=0)


def test_pinned_notes_are_copied():
    note = {"id": "n1", "text": "Keep elbows in", "pinned": True}
    ex = factory.create_exercise_instance(LIBRARY_ITEM, pinned_notes=[note])
    assert ex.notes == [Note(id="n1", text="Keep elbows in", pinned=True)]


def test_set_groups():
    ex = factory.create_exercise_instance_with_set_groups(
        LIBRARY_ITEM,
        [{"count": 2, "type": "warmup"}, {"count": 1}, {"count": 3, "type": "dropset"}],
    )
    sets = ex.sets
    assert len(sets) == 6
    assert sets[0].drop_set_id == sets[1].drop_set_id is not None
    assert sets[0].is_warmup and sets[0].type == "Warmup"
    assert sets[2].drop_set_id is None
    assert len({s.drop_set_id for s in sets[3:]}) == 1
    assert sets[3].drop_set_id != sets[0].drop_set_id
    assert all(s.is_dropset for s in sets[3:])


def test_set_groups_empty_falls_back_to_one_set():
    ex = factory.create_exercise_instance_with_set_groups(LIBRARY_ITEM, [{"count": 0}])
    assert len(ex.sets) == 1


def test_new_set_overrides():
    s = factory.new_set(weight="20", reps="5")
    assert s.weight == "20"
    assert s.id.startswith("set-")
