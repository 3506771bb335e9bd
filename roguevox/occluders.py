"""Greedy merging of exposed voxel faces into axis-aligned occluder triangles."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import product

import numpy as np

from .voxels import Vec3, VoxelWorld

NRM_X_FORWARD: Vec3 = (1.0, 0.0, 0.0)
NRM_X_BACK: Vec3 = (-1.0, 0.0, 0.0)
NRM_Y_UP: Vec3 = (0.0, 1.0, 0.0)
NRM_Y_DOWN: Vec3 = (0.0, -1.0, 0.0)
NRM_Z_FORWARD: Vec3 = (0.0, 0.0, 1.0)
NRM_Z_BACK: Vec3 = (0.0, 0.0, -1.0)

_COLLISION_HEIGHT = 0.1

Line = tuple[Vec3, Vec3]


@dataclass(frozen=True)
class Triangle:
    """A triangle with the face direction it was generated for as its colour."""

    p1: Vec3
    p2: Vec3
    p3: Vec3
    color: Vec3 = (0.0, 0.0, 0.0)

    @property
    def normal(self) -> Vec3:
        """Unit normal from the winding p1 -> p2 -> p3."""
        ux, uy, uz = (b - a for a, b in zip(self.p1, self.p2))
        vx, vy, vz = (b - a for a, b in zip(self.p1, self.p3))
        nx = uy * vz - uz * vy
        ny = uz * vx - ux * vz
        nz = ux * vy - uy * vx
        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        if length == 0:
            return (0.0, 0.0, 0.0)
        return (nx / length, ny / length, nz / length)


@dataclass
class OccluderMesh:
    """Occluder triangles grouped by facing, plus floor-level collision lines."""

    y_up: list[Triangle] = field(default_factory=list)
    y_down: list[Triangle] = field(default_factory=list)
    x_facing: list[Triangle] = field(default_factory=list)
    z_facing: list[Triangle] = field(default_factory=list)
    collision_lines: list[Line] = field(default_factory=list)
    _ordered: list[Triangle] = field(default_factory=list, repr=False)

    def all_triangles(self) -> list[Triangle]:
        """Every occluder triangle in generation order."""
        return list(self._ordered)


@dataclass(frozen=True)
class _Sweep:
    """One face direction: which axis is constant, and how the rectangle grows."""

    normal: Vec3
    const_axis: int
    across_axis: int
    second_axis: int
    sign: int
    reversed_winding: bool
    static_hole: bool
    bucket: str
    collision: bool


_SWEEPS = (
    _Sweep(NRM_Z_FORWARD, 2, 0, 1, +1, False, True, "z_facing", True),
    _Sweep(NRM_Z_BACK, 2, 0, 1, -1, True, True, "z_facing", True),
    _Sweep(NRM_X_FORWARD, 0, 2, 1, +1, True, True, "x_facing", True),
    _Sweep(NRM_X_BACK, 0, 2, 1, -1, False, True, "x_facing", True),
    _Sweep(NRM_Y_UP, 1, 2, 0, +1, False, False, "y_up", False),
    _Sweep(NRM_Y_DOWN, 1, 2, 0, -1, True, False, "y_down", False),
)


class _Builder:
    def __init__(self, world: VoxelWorld) -> None:
        self.world = world
        self.dims = world.shape
        self.mesh = OccluderMesh()
        self.accounted = {sweep: np.zeros(self.dims, dtype=bool) for sweep in _SWEEPS}

    @staticmethod
    def _at(sweep: _Sweep, c, a, s) -> tuple:
        cell = [0, 0, 0]
        cell[sweep.const_axis] = c
        cell[sweep.across_axis] = a
        cell[sweep.second_axis] = s
        return tuple(cell)

    def run(self, sweep: _Sweep, start: tuple[int, int, int]) -> None:
        world = self.world
        at = self._at
        acc = self.accounted[sweep]
        c = start[sweep.const_axis]
        a0 = start[sweep.across_axis]
        s0 = start[sweep.second_axis]
        a_dim = self.dims[sweep.across_axis]
        s_dim = self.dims[sweep.second_axis]

        if sweep.sign > 0 and c >= self.dims[sweep.const_axis] - 1:
            return
        if sweep.sign < 0 and c - 1 <= 0:
            return
        n = c + sweep.sign
        if world.is_static_solid(*at(sweep, n, a0, s0)):
            return
        if acc[at(sweep, c, a0, s0)]:
            return
        if not world.is_static_solid(*at(sweep, c, a0, s0)):
            return

        a_max = a_dim
        for a in range(a0, a_dim):
            if not world.is_static_solid(*at(sweep, c, a, s0)) or acc[at(sweep, c, a, s0)]:
                a_max = a
                break
            if world.cell_is_empty(*at(sweep, n, a, s0)) and world.cell_is_solid(
                *at(sweep, n, a + 1, s0)
            ):
                a_max = a + 1
                break

        def hole(a: int, s: int) -> bool:
            cell = at(sweep, c, a, s)
            if sweep.static_hole:
                return not world.is_static_solid(*cell)
            return world.cell_is_empty(*cell)

        def blocks(a: int, s: int) -> bool:
            return (
                hole(a, s)
                or bool(acc[at(sweep, c, a, s)])
                or (
                    world.cell_is_solid(*at(sweep, n, a, s))
                    and world.cell_is_empty(*at(sweep, n, a, s - 1))
                )
            )

        s_max = s_dim
        for s in range(s0 + 1, s_dim):
            if any(blocks(a, s) for a in range(a0, a_max)):
                s_max = s
                break

        acc[at(sweep, c, slice(a0, a_max), slice(s0, s_max))] = True
        self._emit(sweep, c, a0, a_max, s0, s_max)

    def _emit(self, sweep: _Sweep, c: int, a0: int, a1: int, s0: int, s1: int) -> None:
        size = self.world.voxel_size
        half = self.world.voxel_half_size
        a_lo, a_hi = a0 * size - half, a1 * size - half
        s_lo, s_hi = s0 * size - half, s1 * size - half
        const = c * size + sweep.sign * half

        def point(a: float, s: float) -> Vec3:
            return self._at(sweep, const, a, s)

        corner_a = point(a_hi, s_hi)
        corner_b = point(a_lo, s_hi)
        corner_c = point(a_lo, s_lo)
        corner_d = point(a_hi, s_lo)
        if sweep.reversed_winding:
            first = Triangle(corner_c, corner_b, corner_a, sweep.normal)
            second = Triangle(corner_d, corner_c, corner_a, sweep.normal)
        else:
            first = Triangle(corner_a, corner_b, corner_c, sweep.normal)
            second = Triangle(corner_a, corner_c, corner_d, sweep.normal)

        self.mesh._ordered.extend((first, second))
        getattr(self.mesh, sweep.bucket).extend((first, second))

        if sweep.collision and s_lo <= _COLLISION_HEIGHT:
            self.mesh.collision_lines.append((corner_c, corner_d))


def generate_occluders(world: VoxelWorld) -> OccluderMesh:
    """Merge the world's exposed static faces into rectangles of two triangles each."""
    builder = _Builder(world)
    for cell in product(range(world.width), range(world.height), range(world.depth)):
        if not world.is_static_solid(*cell):
            continue
        for sweep in _SWEEPS:
            builder.run(sweep, cell)
    return builder.mesh