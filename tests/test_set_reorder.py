from workout_core import set_reorder as sr
from workout_core.grouping import dropsets_are_contiguous
from workout_core.tree import find_by_instance_id

from conftest import make_exercise, make_set


def _exercise():
    return make_exercise(
        "ex",
        [
            make_set("s1"),
            make_set("s2", drop_set_id="X", is_dropset=True),
            make_set("s3", drop_set_id="X", is_dropset=True),
            make_set("s4"),
            make_set("s5"),
        ],
    )


def _state(tree):
    return [(s.id, s.drop_set_id) for s in find_by_instance_id(tree, "ex").sets]


def test_drag_list_frames_dropsets():
    items = sr.to_set_drag_list(_exercise())
    assert [i.id for i in items] == [
        "s1",
        "dropset-header-X",
        "s2",
        "s3",
        "dropset-footer-X",
        "s4",
        "s5",
    ]
    assert items[1].set_count == 2
    assert items[1].kind == sr.DROPSET_HEADER


def test_dropping_between_members_joins():
    tree = sr.reorder_sets([_exercise()], "ex", 4, 2)
    assert _state(tree) == [("s1", None), ("s2", "X"), ("s5", "X"), ("s3", "X"), ("s4", None)]
    assert find_by_instance_id(tree, "ex").sets[2].is_dropset


def test_dropping_after_last_member_joins():
    tree = sr.reorder_sets([_exercise()], "ex", 4, 3)
    assert _state(tree) == [("s1", None), ("s2", "X"), ("s3", "X"), ("s5", "X"), ("s4", None)]


def test_dragging_member_out_dissolves_pair():
    tree = sr.reorder_sets([_exercise()], "ex", 1, 4)
    state = _state(tree)
    assert [s for s, _ in state] == ["s1", "s3", "s4", "s5", "s2"]
    assert all(gid is None for _, gid in state)


def test_reorder_keeps_dropsets_contiguous():
    for start in range(5):
        for end in range(5):
            tree = sr.reorder_sets([_exercise()], "ex", start, end)
            assert dropsets_are_contiguous(find_by_instance_id(tree, "ex").sets)


def test_reorder_noops():
    tree = [_exercise()]
    assert sr.reorder_sets(tree, "ex", 2, 2) is tree
    assert sr.reorder_sets(tree, "missing", 0, 1) is tree
    assert sr.reorder_sets(tree, "ex", 9, 1) is tree
