# A* and Dijkstra Grid Planners
# Mazerunner, blind & omniscient maze solving

# Both planners run the same best-first search over a BoundedGrid; Dijkstra
# is A* with a zero heuristic. Every move costs 1 and only cardinal moves
# exist, so Manhattan distance is admissible and consistent.

import heapq
import logging
from typing import Callable, Optional

from cells import MoveDirection, Position
from maze_grid import BoundedGrid

logger = logging.getLogger(__name__)

STEP_COST = 1


# Define Function for our Heuristic
# Using Manhattan Distance
def heuristic(start, goal):
    return abs(start[0] - goal[0]) + abs(start[1] - goal[1])


def no_heuristic(start, goal):
    return 0


def build_path(
    parents: dict[Position, tuple[Position, MoveDirection]],
    start: Position,
    goal: Position,
) -> list[MoveDirection]:
    """Walk the predecessor map back from goal to start, then reverse it."""
    path = []
    current = goal
    while current != start:
        current, direction = parents[current]
        path.append(direction)
    path.reverse()
    return path


def best_first_search(
    grid: BoundedGrid,
    start: Position,
    goal: Position,
    h: Callable[[Position, Position], int] = heuristic,
) -> Optional[list[MoveDirection]]:
    """
    Best-first search ordered by f = g + h.

    Equal f values pop by row then column, so search order is reproducible.

    Returns:
        The move sequence from start to goal, or None if goal is unreachable
    """
    start = Position(*start)
    goal = Position(*goal)

    # Cost so far to each cell
    g = {start: 0}
    # parents[child] = (parent, direction taken from parent)
    parents: dict[Position, tuple[Position, MoveDirection]] = {}
    closed = set()

    frontier = [(h(start, goal), start.row, start.col, 0)]
    expanded = 0

    while frontier:
        _, row, col, g_cost = heapq.heappop(frontier)
        current = Position(row, col)

        if current == goal:
            logger.debug("search expanded %d cells", expanded)
            return build_path(parents, start, goal)

        if current in closed:
            continue
        # Stale queue entry, a cheaper route was found after it was pushed
        if g_cost > g.get(current, g_cost):
            continue
        closed.add(current)
        expanded += 1

        for neighbor, direction in grid.neighbors(current):
            if neighbor in closed:
                continue

            new_g = g_cost + STEP_COST
            if neighbor not in g or new_g < g[neighbor]:
                g[neighbor] = new_g
                parents[neighbor] = (current, direction)
                f = new_g + h(neighbor, goal)
                heapq.heappush(frontier, (f, neighbor.row, neighbor.col, new_g))

    return None


class AStar:
    """A* with Manhattan distance heuristic."""

    name = "A*"

    def find_path(
        self, grid: BoundedGrid, start: Position, target: Position
    ) -> Optional[list[MoveDirection]]:
        return best_first_search(grid, start, target, heuristic)

    def reset(self):
        pass


class Dijkstra:
    """Uniform-cost search, kept as an optimality cross-check against A*."""

    name = "Dijkstra"

    def find_path(
        self, grid: BoundedGrid, start: Position, target: Position
    ) -> Optional[list[MoveDirection]]:
        return best_first_search(grid, start, target, no_heuristic)

    def reset(self):
        pass
