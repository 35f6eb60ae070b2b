# Depth-First Search Planner
# Mazerunner, blind & omniscient maze solving

from typing import Optional

from a_star import build_path
from cells import MoveDirection, Position
from maze_grid import BoundedGrid


class DFS:
    """
    Stack-based depth-first search.

    Returns the first path it finds, which is valid but not necessarily
    shortest. Useful as a baseline for how much informed search saves.
    """

    name = "DFS"

    def find_path(
        self, grid: BoundedGrid, start: Position, target: Position
    ) -> Optional[list[MoveDirection]]:
        start = Position(*start)
        target = Position(*target)

        visited = {start}
        parents: dict[Position, tuple[Position, MoveDirection]] = {}
        stack = [start]

        while stack:
            current = stack.pop()
            if current == target:
                return build_path(parents, start, target)

            # Neighbors come back Up, Down, Left, Right; the last pushed pops first
            for neighbor, direction in grid.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    parents[neighbor] = (current, direction)
                    stack.append(neighbor)

        return None

    def reset(self):
        pass
