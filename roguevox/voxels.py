"""Solid voxel map, dynamic occupancy, light setups and grid ray marching."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

Vec3 = tuple[float, float, float]

VOXEL_SIZE = 0.2
VOXEL_HALF_SIZE = VOXEL_SIZE * 0.5
FAKE_CEILING_HEIGHT = 13

WHITE: Vec3 = (1.0, 1.0, 1.0)
RED: Vec3 = (1.0, 0.0, 0.0)
LIGHT_BLUE: Vec3 = (0.26, 0.8, 1.0)


@dataclass
class HitData:
    """Result of a ray march: whether a solid cell was met and where."""

    hit_found: bool = False
    hit_pos: Vec3 = (0.0, 0.0, 0.0)


@dataclass
class Light:
    """A point light placed in grid coordinates."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    radius: float = 6.0
    strength: float = 1.0
    color: Vec3 = field(default=WHITE)


def round_to_grid_coord(value: float) -> int:
    """Truncate towards zero, stepping one further down for negative values."""
    if value >= 0:
        return int(value)
    return int(value) - 1


class VoxelWorld:
    """A fixed-size voxel grid built from a wall layout plus dynamic occupancy."""

    def __init__(
        self,
        width: int,
        height: int,
        depth: int,
        is_wall: Callable[[int, int], bool] | None = None,
    ) -> None:
        if width < 1 or height < 1 or depth < 1:
            raise ValueError("voxel world dimensions must be positive")
        self.width = width
        self.height = height
        self.depth = depth
        self.is_wall = is_wall
        self.voxel_size = VOXEL_SIZE
        self.voxel_half_size = VOXEL_HALF_SIZE
        self.lights: list[Light] = []
        self._solid = np.zeros((width, height, depth), dtype=bool)
        self._dynamic = np.zeros((width, height, depth), dtype=bool)

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.width, self.height, self.depth

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth

    def init_map(self) -> None:
        """Rebuild the static map: walls, floor, ceiling with a hole, two cubes."""
        solid = self._solid
        solid[:] = False
        ceiling = FAKE_CEILING_HEIGHT

        if self.is_wall is not None:
            for x in range(self.width):
                for z in range(self.depth):
                    if self.is_wall(x, z):
                        solid[x, :ceiling, z] = True

        solid[:, 0, :] = True
        if self.height > ceiling:
            solid[:, ceiling, :] = True
            solid[19:24, ceiling, 16:21] = False

        solid[:, :ceiling, 0] = True
        solid[:, :ceiling, self.depth - 1] = True
        solid[0, :ceiling, :] = True
        solid[self.width - 1, :ceiling, :] = True

        for cube_x, cube_z in ((18, 9), (18, 22)):
            solid[cube_x:cube_x + 6, 1:7, cube_z:cube_z + 6] = True

        self.load_light_setup(0)

    def load_light_setup(self, index: int) -> None:
        """Replace the lights with preset 0 (four lights) or 1 (one light)."""
        if index == 1:
            self.lights = [Light(x=21, y=21, z=18, radius=10.0, strength=1.0)]
        elif index == 0:
            self.lights = [
                Light(x=3, y=9, z=3, strength=0.5),
                Light(x=13, y=3, z=3, strength=0.5, color=RED),
                Light(x=5, y=3, z=30, radius=3.0, strength=0.75, color=LIGHT_BLUE),
                Light(x=21, y=21, z=18, radius=10.0, strength=1.0),
            ]

    def is_static_solid(self, x: int, y: int, z: int) -> bool:
        """Whether the static map has a solid voxel here; False outside the map."""
        if not self.in_bounds(x, y, z):
            return False
        return bool(self._solid[x, y, z])

    def cell_is_solid(self, x: int, y: int, z: int) -> bool:
        if not self.in_bounds(x, y, z):
            return False
        return bool(self._solid[x, y, z] or self._dynamic[x, y, z])

    def cell_is_empty(self, x: int, y: int, z: int) -> bool:
        """Whether the cell is inside the map and neither static nor dynamic solid."""
        if not self.in_bounds(x, y, z):
            return False
        return not (self._solid[x, y, z] or self._dynamic[x, y, z])

    def set_dynamic_solid(self, x: int, y: int, z: int, value: bool) -> None:
        if not self.in_bounds(x, y, z):
            raise IndexError(f"voxel ({x}, {y}, {z}) outside the map")
        self._dynamic[x, y, z] = bool(value)

    def clear_dynamic_solids(self) -> None:
        self._dynamic[:] = False

    def closest_hit(
        self,
        origin: Vec3,
        destination: Vec3,
        initial_offset: Vec3 = (0.5, 0.5, 0.5),
    ) -> HitData:
        """March from origin towards destination and report the first solid cell."""
        x1, y1, z1 = (float(v) for v in origin)
        x2, y2, z2 = (float(v) for v in destination)
        step = max(abs(x2 - x1), abs(y2 - y1), abs(z2 - z1))
        if step == 0:
            return HitData()
        dx = (x2 - x1) / step
        dy = (y2 - y1) / step
        dz = (z2 - z1) / step
        ox, oy, oz = initial_offset
        x, y, z = x1 + ox, y1 + oy, z1 + oz

        i = 1
        while i < step:
            x += dx
            y += dy
            z += dz
            if self.cell_is_solid(
                round_to_grid_coord(x), round_to_grid_coord(y), round_to_grid_coord(z)
            ):
                return HitData(True, (x, y, z))
            i += 1
        return HitData()

    def light_by_index(self, index: int) -> Light:
        """The light at index, or a detached default light when out of range."""
        if 0 <= index < len(self.lights):
            return self.lights[index]
        return Light()

    def solid_positions(self) -> list[Vec3]:
        """World positions of the solid voxels on the x = 0 plane."""
        return [
            (0.0, y * self.voxel_size, z * self.voxel_size)
            for y in range(self.width)
            for z in range(self.width)
            if self.cell_is_solid(0, y, z)
        ]