from workout_core import drag_reorder as dr
from workout_core.models import ExerciseGroup

from conftest import make_exercise


def _shape(tree):
    return [
        (i.instance_id, [c.instance_id for c in i.children])
        if isinstance(i, ExerciseGroup)
        else i.instance_id
        for i in tree
    ]


def test_flat_list_structure(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    assert [i.id for i in items] == ["a", "header-g", "b", "c", "footer-g", "d", "bench"]
    header = items[1]
    assert header.kind == dr.GROUP_HEADER
    assert header.child_count == 2
    assert items[2].is_first_in_group and not items[2].is_last_in_group
    assert items[3].is_last_in_group
    assert items[2].group_id == "g"
    assert items[0].group_id is None
    assert items[6].set_count == 4


def test_round_trip(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    assert dr.from_flat_drag_list(items) == grouped_tree


def test_round_trip_keeps_single_child_group():
    tree = [ExerciseGroup(instance_id="solo", children=[make_exercise("x")]), make_exercise("y")]
    assert dr.from_flat_drag_list(dr.to_flat_drag_list(tree)) == tree


def test_drag_exercise_out_of_group():
    a, b, c, d = (make_exercise(x) for x in "abcd")
    tree = [ExerciseGroup(instance_id="g", children=[a, b, c]), d]
    items = dr.to_flat_drag_list(tree)
    moved = dr.move_drag_item(items, dr.index_of(items, "b"), 4)
    result = dr.from_flat_drag_list(moved)
    assert _shape(result) == [("g", ["a", "c"]), "b", "d"]


def test_drag_exercise_into_group(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    # a leaves index 0, then lands between b and c
    moved = dr.move_drag_item(items, 0, 2)
    result = dr.from_flat_drag_list(moved)
    assert _shape(result) == [("g", ["b", "a", "c"]), "d", "bench"]


def test_group_shrunk_to_one_is_unwrapped(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    moved = dr.move_drag_item(items, dr.index_of(items, "c"), 5)
    result = dr.from_flat_drag_list(moved)
    assert _shape(result) == ["a", "b", "d", "c", "bench"]


def test_empty_group_disappears():
    tree = [ExerciseGroup(instance_id="g", children=[make_exercise("x")]), make_exercise("y")]
    items = dr.to_flat_drag_list(tree)
    moved = dr.move_drag_item(items, 1, 3)
    assert _shape(dr.from_flat_drag_list(moved)) == ["y", "x"]


def test_header_drag_moves_whole_group(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    moved = dr.move_drag_item(items, 1, 3)
    assert [i.id for i in moved] == ["a", "d", "bench", "header-g", "b", "c", "footer-g"]
    assert _shape(dr.from_flat_drag_list(moved)) == ["a", "d", "bench", ("g", ["b", "c"])]


def test_group_never_lands_inside_another_group():
    tree = [
        ExerciseGroup(instance_id="g1", children=[make_exercise("a"), make_exercise("b")]),
        ExerciseGroup(instance_id="g2", children=[make_exercise("c"), make_exercise("d")]),
    ]
    items = dr.to_flat_drag_list(tree)
    # drop g2 between a and b
    moved = dr.move_drag_item(items, dr.index_of(items, "header-g2"), 2)
    assert _shape(dr.from_flat_drag_list(moved)) == [("g1", ["a", "b"]), ("g2", ["c", "d"])]


def test_footer_is_not_draggable(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    assert dr.move_drag_item(items, dr.index_of(items, "footer-g"), 0) == items


def test_collapse_and_expand(grouped_tree):
    items = dr.to_flat_drag_list(grouped_tree)
    collapsed = dr.collapse_groups(items, ["g"])
    assert [i.is_collapsed for i in collapsed] == [False, True, True, True, True, False, False]
    assert dr.expand_all_groups(collapsed) == items
    assert dr.to_flat_drag_list(grouped_tree, collapsed_group_id="g") == collapsed


def test_layout_offsets_use_ghost_height(grouped_tree):
    items = dr.collapse_groups(dr.to_flat_drag_list(grouped_tree), ["g"])
    tops = dr.layout_offsets(items, card_height=100, ghost_height=20, marker_height=10)
    assert tops == [0, 100, 110, 130, 150, 160, 260]
