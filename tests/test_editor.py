import pytest

from roguevox.editor import Editor, map_range
from roguevox.input import KEY_A, KEY_D, KEY_R, InputState

SIZE = 40
VIEW = 400


def frame(editor, state, keys=(), mouse=(0, 0), left=False, right=False):
    state.update(set(keys), mouse[0], mouse[1], left, right)
    editor.update(state, VIEW, VIEW, VIEW, VIEW)


def test_default_layout_has_border_and_segments():
    editor = Editor(20, 20)
    assert editor.is_wall(0, 0)
    assert editor.is_wall(19, 5)
    assert editor.is_wall(5, 19)
    assert editor.is_wall(8, 7)
    assert editor.is_wall(7, 12)
    assert not editor.is_wall(7, 13)
    assert not editor.is_wall(5, 5)


def test_is_wall_out_of_range_is_false():
    editor = Editor(20, 20)
    assert editor.is_wall(-1, 3) is False
    assert editor.is_wall(20, 3) is False


def test_invalid_dimensions_raise():
    with pytest.raises(ValueError):
        Editor(0, 10)


def test_map_range():
    assert map_range(5, 0, 10, 0, 100) == pytest.approx(50.0)
    assert map_range(0, 0, 10, 3, 9) == 3
    with pytest.raises(ValueError):
        map_range(1, 2, 2, 0, 1)


def test_world_pos_from_coord():
    editor = Editor(10, 10)
    assert editor.world_pos_from_coord(2, 3) == pytest.approx((0.2, 0.0, 0.3))


def test_camera_pans_and_resets():
    editor = Editor(SIZE, SIZE)
    state = InputState()
    initial = (editor.camera_x, editor.camera_z)
    frame(editor, state, keys={KEY_D})
    assert editor.camera_x == initial[0] + 10
    frame(editor, state, keys={KEY_D, KEY_A})
    assert editor.camera_x == initial[0] + 10
    frame(editor, state, keys={KEY_R})
    assert (editor.camera_x, editor.camera_z) == initial


def test_left_click_places_wall_and_right_click_clears():
    calls = []
    editor = Editor(SIZE, SIZE, on_map_changed=lambda: calls.append(1))
    state = InputState()
    frame(editor, state, mouse=(105, 125))
    gx, gz = editor.mouse_grid_x, editor.mouse_grid_z
    assert editor.in_range(gx, gz)
    assert not editor.is_wall(gx, gz)
    frame(editor, state, mouse=(105, 125), left=True)
    assert editor.is_wall(gx, gz)
    assert len(calls) == 1
    frame(editor, state, mouse=(105, 125), right=True)
    assert not editor.is_wall(gx, gz)
    assert len(calls) == 2


def test_no_edit_when_mouse_off_map():
    calls = []
    editor = Editor(SIZE, SIZE, on_map_changed=lambda: calls.append(1))
    state = InputState()
    for _ in range(30):
        frame(editor, state, keys={KEY_A})
    frame(editor, state, mouse=(0, 125))
    assert editor.mouse_world_x < 0
    assert editor.mouse_grid_x < 0
    frame(editor, state, mouse=(0, 125), left=True)
    assert calls == []


def test_set_wall_out_of_range_raises():
    editor = Editor(10, 10)
    with pytest.raises(IndexError):
        editor.set_wall(10, 0, True)


def test_is_obstacle_free():
    editor = Editor(SIZE, SIZE)
    assert editor.is_obstacle_free(3, 3) is True
    assert editor.is_obstacle_free(20, 10) is False
    assert editor.is_obstacle_free(0, 5) is False
    assert editor.is_obstacle_free(SIZE, 5) is False
    editor.set_wall(3, 3, True)
    assert editor.is_obstacle_free(3, 3) is False


def test_find_path_through_editor():
    editor = Editor(SIZE, SIZE)
    path = editor.find_path(2, 2, 5, 5)
    assert (path[0].x, path[0].y) == (2, 2)
    assert (path[-1].x, path[-1].y) == (5, 5)
    assert all(editor.is_obstacle_free(n.x, n.y) for n in path)


def test_find_path_into_wall_is_empty():
    editor = Editor(SIZE, SIZE)
    assert editor.find_path(2, 2, 0, 0) == []