# Planning utilities: pathfinder interface, results and registry
# Mazerunner, blind & omniscient maze solving

from dataclasses import dataclass
from typing import Optional, Protocol

from a_star import AStar, Dijkstra
from cells import MoveDirection, Position
from dfs import DFS
from errors import UnreachableError
from maze_grid import BoundedGrid


class Pathfinder(Protocol):
    """Anything that can plan a full route over a known grid."""

    name: str

    def find_path(
        self, grid: BoundedGrid, start: Position, target: Position
    ) -> Optional[list[MoveDirection]]: ...

    def reset(self): ...


@dataclass
class PathResult:
    """Outcome of one solve: steps taken and where the time went (seconds)."""

    steps: int
    planning_time: float
    execution_time: float
    exploration_steps: int = 0

    @property
    def total_time(self) -> float:
        return self.planning_time + self.execution_time

    @property
    def execution_steps(self) -> int:
        return self.steps - self.exploration_steps


# CLI name -> planner class
PATHFINDERS = {
    "astar": AStar,
    "dijkstra": Dijkstra,
    "dfs": DFS,
}
PATHFINDER_ALIASES = {"a-star": "astar"}


def pathfinder_names() -> list[str]:
    return list(PATHFINDERS)


def make_pathfinder(name: str) -> Pathfinder:
    key = PATHFINDER_ALIASES.get(name.lower(), name.lower())
    try:
        return PATHFINDERS[key]()
    except KeyError:
        raise ValueError(
            f"unknown pathfinding algorithm {name!r}, expected one of {pathfinder_names()}"
        ) from None


def walk_path(
    grid: BoundedGrid, start: Position, moves: list[MoveDirection]
) -> list[Position]:
    """
    Replay moves from start over grid.

    Returns:
        Every position occupied along the way, start included

    Raises:
        UnreachableError: a move leaves the grid or enters a cell that isn't walkable
    """
    current = Position(*start)
    cells = [current]
    for step, direction in enumerate(moves, start=1):
        nxt = current.move(direction, grid.bounds)
        if nxt is None or not grid.is_walkable(nxt):
            raise UnreachableError(
                f"step {step} ({direction}) from {tuple(current)} is not walkable"
            )
        current = nxt
        cells.append(current)
    return cells
