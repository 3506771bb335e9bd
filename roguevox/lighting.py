"""Direct lighting of exposed voxel faces and a propagated light-probe grid."""
from __future__ import annotations

import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from itertools import chain, product

import numpy as np

from .occluders import (
    NRM_X_BACK,
    NRM_X_FORWARD,
    NRM_Y_DOWN,
    NRM_Y_UP,
    NRM_Z_BACK,
    NRM_Z_FORWARD,
)
from .voxels import FAKE_CEILING_HEIGHT, WHITE, Light, Vec3, VoxelWorld

BLACK: Vec3 = (0.0, 0.0, 0.0)
PROPAGATION_SPACING = 1
SEARCH_SIZE = 12
DEFAULT_SAMPLES_PER_FRAME = 500
_DIRECT_OFFSET: Vec3 = (0.5, 0.5, 0.5)

LightModel = Callable[[Light, Vec3, float], Vec3] | Callable[[Light, Vec3, Vec3, float], Vec3]

# Cell face attributes in the order direct lighting visits them.
_FACE_ATTRS = (
    (NRM_X_FORWARD, "forward_face_x"),
    (NRM_X_BACK, "back_face_x"),
    (NRM_Z_FORWARD, "forward_face_z"),
    (NRM_Z_BACK, "back_face_z"),
    (NRM_Y_UP, "y_up_face"),
    (NRM_Y_DOWN, "y_down_face"),
)

# Face list order used when gathering exposed faces.
_FACE_LIST_ORDER = (NRM_X_FORWARD, NRM_X_BACK, NRM_Y_UP, NRM_Y_DOWN, NRM_Z_FORWARD, NRM_Z_BACK)

# (axis, direction, cell face) checks made when a probe gathers light.
_PROPAGATION_CHECKS = (
    (0, +1, "forward_face_x"),
    (1, +1, "y_up_face"),
    (2, +1, "forward_face_z"),
    (0, -1, "back_face_x"),
    (1, -1, "y_down_face"),
    (2, -1, "back_face_z"),
)


def _add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _scale(a, s: float) -> Vec3:
    return (a[0] * s, a[1] * s, a[2] * s)


def _div(v: Vec3, divisor: float) -> Vec3:
    """Component-wise division with IEEE results (inf/nan) for a zero divisor."""
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.asarray(v, dtype=np.float64) / np.float64(divisor)
    return tuple(float(c) for c in result)


def _offset(pos: tuple[int, int, int], normal: Vec3) -> tuple[int, int, int]:
    return (pos[0] + int(normal[0]), pos[1] + int(normal[1]), pos[2] + int(normal[2]))


def manhattan_distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    """Sum of the absolute coordinate differences of two grid cells."""
    return sum(abs(q - p) for p, q in zip(a, b))


@dataclass
class VoxelFace:
    """One exposed side of a solid voxel and the light it carries."""

    x: int = 0
    y: int = 0
    z: int = 0
    color: Vec3 = WHITE
    normal: Vec3 = BLACK
    accumulated_direct_lighting: Vec3 = BLACK
    indirect_lighting: Vec3 = BLACK


@dataclass
class VoxelCell:
    """Direct-lighting state of all six sides of one voxel."""

    color: Vec3 = WHITE
    forward_face_x: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_X_FORWARD))
    back_face_x: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_X_BACK))
    forward_face_z: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_Z_FORWARD))
    back_face_z: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_Z_BACK))
    y_up_face: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_Y_UP))
    y_down_face: VoxelFace = field(default_factory=lambda: VoxelFace(normal=NRM_Y_DOWN))


@dataclass
class GridProbe:
    """A light probe of the propagation grid."""

    color: Vec3 = BLACK
    samples_received: int = 0
    world_position: Vec3 = BLACK
    ignore: bool = False


def _new_cell(pos: tuple[int, int, int]) -> VoxelCell:
    cell = VoxelCell()
    for normal, attr in _FACE_ATTRS:
        setattr(cell, attr, VoxelFace(*pos, color=cell.color, normal=normal))
    return cell


class LightingGrid:
    """Face lighting for a voxel world and a grid of probes that gather it."""

    def __init__(self, world: VoxelWorld, seed: int | None = 0) -> None:
        self.world = world
        self.spacing = PROPAGATION_SPACING
        self.width = world.width // self.spacing
        self.height = world.height // self.spacing
        self.depth = world.depth // self.spacing
        self.probes: dict[tuple[int, int, int], GridProbe] = {}
        self.cells: dict[tuple[int, int, int], VoxelCell] = {}
        self.faces: dict[Vec3, list[VoxelFace]] = {n: [] for n in _FACE_LIST_ORDER}
        self.propagation_enabled = True
        self.debug_view = False
        self._rng = random.Random(seed)
        self._probe_order: list[tuple[int, int, int]] | None = None
        self._last_probe_index = 0
        self.generate_probes()

    def _probe_coords(self) -> Iterator[tuple[int, int, int]]:
        return product(range(self.width), range(self.height), range(self.depth))

    def _probe_ignored(self, x: int, y: int, z: int) -> bool:
        gx, gy, gz = x * self.spacing, y * self.spacing, z * self.spacing
        outside = (
            gx > self.world.width - 1
            or gy > FAKE_CEILING_HEIGHT
            or gz > self.world.depth - 1
        )
        return outside or self.world.cell_is_solid(gx, gy, gz)

    def generate_probes(self) -> None:
        """Reset every probe: black, no samples, placed and flagged afresh."""
        size = self.spacing * self.world.voxel_size
        self.probes = {
            (x, y, z): GridProbe(
                color=BLACK,
                samples_received=0,
                world_position=(x * size, y * size, z * size),
                ignore=self._probe_ignored(x, y, z),
            )
            for x, y, z in self._probe_coords()
        }

    def update_probe_flags(self) -> None:
        """Recompute which probes lie outside the map or inside geometry."""
        for (x, y, z), probe in self.probes.items():
            probe.ignore = self._probe_ignored(x, y, z)

    def _solid_cells(self) -> Iterator[tuple[int, int, int]]:
        world = self.world
        for pos in product(range(world.width), range(world.height), range(world.depth)):
            if world.cell_is_solid(*pos):
                yield pos

    def collect_faces(self) -> None:
        """Gather every solid-voxel side that borders an empty cell."""
        self.faces = {n: [] for n in _FACE_LIST_ORDER}
        for pos in self._solid_cells():
            cell = self.cells.get(pos)
            color = cell.color if cell is not None else WHITE
            for normal in _FACE_LIST_ORDER:
                if self.world.cell_is_empty(*_offset(pos, normal)):
                    self.faces[normal].append(VoxelFace(*pos, color=color, normal=normal))

    def _all_faces(self) -> Iterator[VoxelFace]:
        return chain.from_iterable(self.faces.values())

    def total_face_count(self) -> int:
        return sum(len(faces) for faces in self.faces.values())

    def calculate_direct_lighting(self, light_model: LightModel) -> None:
        """Light each exposed cell side from every light it can see.

        light_model(light, position, normal, voxel_size) gives the colour a
        light contributes at a world position on a face with that normal.
        """
        self.collect_faces()
        if self.debug_view:
            for face in self._all_faces():
                face.accumulated_direct_lighting = _add(_scale(face.normal, 0.5), (0.5, 0.5, 0.5))

        world = self.world
        size = world.voxel_size
        for pos in self._solid_cells():
            cell = self.cells.get(pos)
            if cell is None:
                cell = self.cells[pos] = _new_cell(pos)
            for _, attr in _FACE_ATTRS:
                getattr(cell, attr).accumulated_direct_lighting = BLACK
            for light in world.lights:
                destination = (float(light.x), float(light.y), float(light.z))
                for normal, attr in _FACE_ATTRS:
                    origin = _offset(pos, normal)
                    if not world.cell_is_empty(*origin):
                        continue
                    if world.closest_hit(origin, destination, _DIRECT_OFFSET).hit_found:
                        continue
                    face = getattr(cell, attr)
                    contribution = light_model(light, _scale(pos, size), normal, size)
                    face.accumulated_direct_lighting = _add(
                        face.accumulated_direct_lighting, contribution
                    )

    def toggle_propagation(self) -> None:
        self.propagation_enabled = not self.propagation_enabled

    def _gather(self, coord: tuple[int, int, int]) -> Vec3:
        world = self.world
        probe_cell = tuple(c * self.spacing for c in coord)
        target = tuple(float(c) for c in probe_cell)
        limits = (world.width - 1, world.height - 1, world.depth - 1)
        ranges = [
            range(max(0, p - SEARCH_SIZE), min(limit, p + SEARCH_SIZE))
            for p, limit in zip(probe_cell, limits)
        ]
        color = BLACK
        samples = 0
        for pos in product(*ranges):
            if manhattan_distance(pos, probe_cell) > SEARCH_SIZE:
                continue
            if not world.cell_is_solid(*pos):
                continue
            cell = self.cells.get(pos)
            for axis, sign, attr in _PROPAGATION_CHECKS:
                facing = pos[axis] < probe_cell[axis] if sign > 0 else pos[axis] > probe_cell[axis]
                if not facing:
                    continue
                neighbour = list(pos)
                neighbour[axis] += sign
                if not world.cell_is_empty(*neighbour):
                    continue
                if world.closest_hit(tuple(neighbour), target).hit_found:
                    continue
                if cell is not None:
                    color = _add(color, getattr(cell, attr).accumulated_direct_lighting)
                samples += 1
        return _div(color, samples)

    def propagate(self, samples_per_frame: int = DEFAULT_SAMPLES_PER_FRAME) -> None:
        """Refresh a batch of probes, walking a fixed shuffled probe order.

        A probe that sees no lit face gets a NaN colour, as 0/0 gives.
        """
        if not self.propagation_enabled:
            return
        if samples_per_frame < 0:
            raise ValueError("samples_per_frame must not be negative")
        if self._probe_order is None:
            order = list(self._probe_coords())
            self._rng.shuffle(order)
            self._probe_order = order
        order = self._probe_order
        count = len(order)
        self._last_probe_index = (self._last_probe_index + samples_per_frame) % count
        start = self._last_probe_index
        for i in range(start, start + samples_per_frame):
            coord = order[i % count]
            probe = self.probes[coord]
            if probe.ignore:
                continue
            probe.color = self._gather(coord)
            probe.samples_received = 1

    def calculate_indirect_lighting(self) -> None:
        """Average the neighbouring probes' light onto every collected face."""
        dims = (self.width, self.height, self.depth)
        for face in self._all_faces():
            base = (face.x // self.spacing, face.y // self.spacing, face.z // self.spacing)
            total = BLACK
            samples = 0
            for delta in product((-1, 0, 1), repeat=3):
                coord = tuple(b + d for b, d in zip(base, delta))
                if any(c < 0 or c > dim - 2 for c, dim in zip(coord, dims)):
                    continue
                probe = self.probes[coord]
                if probe.ignore:
                    continue
                total = _add(total, _div(probe.color, probe.samples_received))
                samples += 1
            face.indirect_lighting = _div(total, samples)

    def texture_data(self) -> np.ndarray:
        """Probe colours as an RGBA array indexed [z, y, x]; ignored probes have alpha 0."""
        data = np.zeros((self.depth, self.height, self.width, 4), dtype=np.float32)
        for (x, y, z), probe in self.probes.items():
            data[z, y, x, :3] = probe.color
            data[z, y, x, 3] = 0.0 if probe.ignore else 1.0
        return data

    def face_world_pos(self, face: VoxelFace) -> Vec3:
        """World position just outside the face, one voxel along its normal."""
        size = self.world.voxel_size
        return _add(_scale((face.x, face.y, face.z), size), _scale(face.normal, size))