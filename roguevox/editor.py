"""Top-down wall editor: camera, mouse picking, wall grid and path queries."""
from __future__ import annotations

from collections.abc import Callable

from .input import KEY_A, KEY_D, KEY_R, KEY_S, KEY_W, InputState
from .pathfinding import Node, find_path

GRID_SPACING = 0.1

# Fixed blocked regions (x_min, x_max, y_min, y_max), inclusive.
_FIXED_OBSTACLES = (
    (18, 23, 9, 14),
    (18, 23, 20, 27),
    (7, 10, 7, 7),
    (7, 7, 7, 12),
)


def map_range(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map value from [in_min, in_max] onto [out_min, out_max]."""
    if in_max == in_min:
        raise ValueError("input range is empty")
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)


class Editor:
    """Wall grid editing driven by input state, with a panning camera."""

    def __init__(
        self,
        width: int,
        depth: int,
        on_map_changed: Callable[[], None] | None = None,
    ) -> None:
        if width < 1 or depth < 1:
            raise ValueError("editor grid dimensions must be positive")
        self.width = width
        self.depth = depth
        self.on_map_changed = on_map_changed
        self.camera_x = 0
        self.camera_z = 0
        self.mouse_screen_x = 0
        self.mouse_screen_z = 0
        self.mouse_grid_x = 0
        self.mouse_grid_z = 0
        self.mouse_world_x = 0.0
        self.mouse_world_z = 0.0
        self._walls: list[list[bool]] = []
        self.reset()

    def reset(self) -> None:
        """Restore the camera and the default wall layout."""
        self.reset_camera()
        self._walls = [[False] * self.depth for _ in range(self.width)]
        for x in range(self.width):
            self._walls[x][0] = True
            self._walls[x][self.depth - 1] = True
        for z in range(self.depth):
            self._walls[0][z] = True
            self._walls[self.width - 1][z] = True
        for x in range(7, 11):
            if self.in_range(x, 7):
                self._walls[x][7] = True
        for z in range(7, 13):
            if self.in_range(7, z):
                self._walls[7][z] = True

    def in_range(self, grid_x: int, grid_z: int) -> bool:
        return 0 <= grid_x < self.width and 0 <= grid_z < self.depth

    def is_wall(self, grid_x: int, grid_z: int) -> bool:
        return self.in_range(grid_x, grid_z) and self._walls[grid_x][grid_z]

    def set_wall(self, grid_x: int, grid_z: int, value: bool) -> None:
        """Set or clear a wall and notify the map-changed callback."""
        if not self.in_range(grid_x, grid_z):
            raise IndexError(f"grid cell ({grid_x}, {grid_z}) outside the map")
        self._walls[grid_x][grid_z] = bool(value)
        if self.on_map_changed is not None:
            self.on_map_changed()

    def reset_camera(self) -> None:
        map_width = self.width * GRID_SPACING
        map_depth = self.depth * GRID_SPACING
        self.camera_x = int(map_width / 2.0 / GRID_SPACING / GRID_SPACING)
        self.camera_z = int(map_depth / -2.0 / GRID_SPACING / GRID_SPACING)

    def update(
        self,
        input_state: InputState,
        viewport_width: int,
        viewport_height: int,
        window_width: int,
        window_height: int,
    ) -> None:
        """Pan the camera, apply wall edits and recompute the picked cell."""
        step = int(1 / GRID_SPACING)
        if input_state.key_down(KEY_A):
            self.camera_x -= step
        if input_state.key_down(KEY_D):
            self.camera_x += step
        if input_state.key_down(KEY_W):
            self.camera_z += step
        if input_state.key_down(KEY_S):
            self.camera_z -= step
        if input_state.key_pressed(KEY_R):
            self.reset_camera()

        if self.in_range(self.mouse_grid_x, self.mouse_grid_z):
            if input_state.left_mouse_down:
                self.set_wall(self.mouse_grid_x, self.mouse_grid_z, True)
            if input_state.right_mouse_down():
                self.set_wall(self.mouse_grid_x, self.mouse_grid_z, False)

        mouse_x, mouse_y = input_state.mouse_position
        self.mouse_screen_x = int(map_range(mouse_x, 0, window_width, 0, viewport_width))
        self.mouse_screen_z = int(map_range(mouse_y, 0, window_height, 0, viewport_height))
        half_width = int(viewport_width / 2)
        half_height = int(viewport_height / 2)
        self.mouse_world_x = (self.mouse_screen_x + self.camera_x - half_width) * GRID_SPACING
        self.mouse_world_z = (self.mouse_screen_z - self.camera_z - half_height) * GRID_SPACING
        self.mouse_grid_x = int(self.mouse_world_x) - (1 if self.mouse_world_x < 0 else 0)
        self.mouse_grid_z = int(self.mouse_world_z)

    def world_pos_from_coord(self, x: int, z: int) -> tuple[float, float, float]:
        return (x * GRID_SPACING, 0.0, z * GRID_SPACING)

    def is_obstacle_free(self, x: int, y: int) -> bool:
        """Whether a cell can be walked through by path queries."""
        for x_min, x_max, y_min, y_max in _FIXED_OBSTACLES:
            if x_min <= x <= x_max and y_min <= y <= y_max:
                return False
        if not self.in_range(x, y):
            return False
        return not self._walls[x][y]

    def find_path(self, start_x: int, start_z: int, goal_x: int, goal_z: int) -> list[Node]:
        return find_path(
            (start_x, start_z),
            (goal_x, goal_z),
            self.is_obstacle_free,
            self.width,
            self.depth,
        )