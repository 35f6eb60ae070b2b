# Exploration: Recursive Backtracker
# Mazerunner, blind & omniscient maze solving

import logging
from collections import deque
from typing import Optional

from cells import CARDINAL_ORDER, MoveDirection, SensorReadings, UnboundedPosition
from exploration import ExplorationState, is_open
from maze_grid import UnboundedGrid

logger = logging.getLogger(__name__)


class RecursiveBacktracker:
    """
    Depth-first exploration with backtracking over discovered terrain.

    Walks into any unvisited open neighbour, remembering where it came from.
    At a dead end it heads back toward the last branch point, re-planning the
    route over the known grid on every step. Done when there is nowhere left
    to go back to.
    """

    name = "Recursive Backtracker"

    def __init__(self):
        self.reset()

    def reset(self):
        self.state = ExplorationState.NOT_STARTED
        self.visited: set[UnboundedPosition] = set()
        self.stack: list[UnboundedPosition] = []

    def unvisited_neighbors(
        self, position: UnboundedPosition, readings: SensorReadings
    ) -> list[tuple[UnboundedPosition, MoveDirection]]:
        out = []
        for direction in CARDINAL_ORDER:
            if not is_open(readings, direction):
                continue
            neighbor = position.move(direction)
            if neighbor not in self.visited:
                out.append((neighbor, direction))
        return out

    def next_move(
        self,
        position: UnboundedPosition,
        readings: SensorReadings,
        grid: UnboundedGrid,
    ) -> Optional[MoveDirection]:
        position = UnboundedPosition(*position)

        if self.state is ExplorationState.COMPLETE:
            return None
        self.state = ExplorationState.EXPLORING
        self.visited.add(position)

        unvisited = self.unvisited_neighbors(position, readings)
        if unvisited:
            _, direction = unvisited[0]
            self.stack.append(position)
            return direction

        while self.stack:
            backtrack_to = self.stack.pop()
            if backtrack_to == position:
                continue

            logger.debug("backtracking to (%d, %d)", backtrack_to.row, backtrack_to.col)
            first_move = first_step_toward(grid, position, backtrack_to)
            if first_move is not None:
                return first_move
            logger.warning(
                "no known route from %s back to %s, skipping it",
                tuple(position),
                tuple(backtrack_to),
            )

        self.state = ExplorationState.COMPLETE
        return None


def first_step_toward(
    grid: UnboundedGrid, start: UnboundedPosition, goal: UnboundedPosition
) -> Optional[MoveDirection]:
    """BFS over discovered walkable cells; only the first move of the route is returned."""
    queue = deque([start])
    parents: dict[UnboundedPosition, tuple[UnboundedPosition, MoveDirection]] = {}
    seen = {start}

    while queue:
        current = queue.popleft()
        if current == goal:
            # Walk back until the cell whose parent is start
            while True:
                prev, direction = parents[current]
                if prev == start:
                    return direction
                current = prev

        for neighbor, direction in grid.neighbors(current):
            if neighbor not in seen:
                seen.add(neighbor)
                parents[neighbor] = (current, direction)
                queue.append(neighbor)

    return None
