"""Eight-connected A* search over a rectangular grid."""
from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from operator import attrgetter


@dataclass
class Node:
    """A grid cell with its search costs and parent link."""

    x: int
    y: int
    parent_x: int = -1
    parent_y: int = -1
    f_cost: float = math.inf
    g_cost: float = math.inf
    h_cost: float = math.inf


def heuristic(x: int, y: int, goal: tuple[int, int]) -> float:
    """Euclidean distance from (x, y) to the goal cell."""
    gx, gy = goal
    return math.hypot(x - gx, y - gy)


def _pop_next(open_list: list[Node], valid: Callable[[int, int], bool]) -> Node | None:
    while open_list:
        node = min(open_list, key=attrgetter("f_cost"))
        open_list.remove(node)
        if valid(node.x, node.y):
            return node
    return None


def _make_path(grid: list[list[Node]], gx: int, gy: int) -> list[Node]:
    path = []
    x, y = gx, gy
    while True:
        cell = grid[x][y]
        path.append(replace(cell))
        if (cell.parent_x, cell.parent_y) == (x, y) or cell.parent_x == -1:
            break
        x, y = cell.parent_x, cell.parent_y
    path.reverse()
    return path


def find_path(
    start: tuple[int, int],
    goal: tuple[int, int],
    passable: Callable[[int, int], bool],
    width: int,
    depth: int,
) -> list[Node]:
    """Return the nodes from start to goal, or an empty list when there is no path.

    An impassable goal, a goal equal to the start, or an unreachable goal all
    give an empty list.
    """
    if width <= 0 or depth <= 0:
        raise ValueError("grid dimensions must be positive")

    def valid(x: int, y: int) -> bool:
        return 0 <= x < width and 0 <= y < depth and bool(passable(x, y))

    sx, sy = start
    gx, gy = goal
    if not valid(gx, gy):
        return []
    if (sx, sy) == (gx, gy):
        return []
    if not (0 <= sx < width and 0 <= sy < depth):
        raise ValueError(f"start {start} lies outside the grid")

    grid = [[Node(x, y) for y in range(depth)] for x in range(width)]
    closed = [[False] * depth for _ in range(width)]

    origin = grid[sx][sy]
    origin.f_cost = origin.g_cost = origin.h_cost = 0.0
    origin.parent_x, origin.parent_y = sx, sy

    open_list = [replace(origin)]
    limit = width * depth

    while open_list and len(open_list) < limit:
        node = _pop_next(open_list, valid)
        if node is None:
            break
        x, y = node.x, node.y
        closed[x][y] = True

        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                nx, ny = x + dx, y + dy
                if not valid(nx, ny):
                    continue
                cell = grid[nx][ny]
                if (nx, ny) == (gx, gy):
                    cell.parent_x, cell.parent_y = x, y
                    return _make_path(grid, gx, gy)
                if closed[nx][ny]:
                    continue
                g_new = node.g_cost + 1.0
                h_new = heuristic(nx, ny, goal)
                f_new = g_new + h_new
                if cell.f_cost == math.inf or cell.f_cost > f_new:
                    cell.f_cost = f_new
                    cell.g_cost = g_new
                    cell.h_cost = h_new
                    cell.parent_x, cell.parent_y = x, y
                    open_list.append(replace(cell))
    return []