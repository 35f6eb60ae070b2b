# Exploration: shared interface and target detection
# Mazerunner, blind & omniscient maze solving

# An explorer decides one move at a time from live sensor readings and the
# terrain discovered so far. A sensed target counts as blocked while
# exploring so the robot keeps mapping; reaching the target is left to the
# planning phase once the explorer reports it is done.

from enum import Enum
from typing import Optional, Protocol

from cells import MoveDirection, SensorReadings, SensorState, UnboundedPosition
from maze_grid import UnboundedGrid


class ExplorationState(Enum):
    NOT_STARTED = "not_started"
    EXPLORING = "exploring"
    COMPLETE = "complete"
    FATAL = "fatal"


class Explorer(Protocol):
    name: str
    state: ExplorationState

    def next_move(
        self,
        position: UnboundedPosition,
        readings: SensorReadings,
        grid: UnboundedGrid,
    ) -> Optional[MoveDirection]:
        """Next single move, or None once exploration is finished."""
        ...

    def reset(self): ...


def is_open(readings: SensorReadings, direction: MoveDirection) -> bool:
    """Only FREE counts; the target is treated as a wall during exploration."""
    return readings.cardinal(direction) is SensorState.FREE


def detect_target(
    position: UnboundedPosition, readings: SensorReadings
) -> Optional[UnboundedPosition]:
    """Coordinate of the first TARGET channel in scan order N, S, W, E, NW, NE, SW, SE."""
    for state, dr, dc in readings.channels():
        if state is SensorState.TARGET:
            return UnboundedPosition(position[0] + dr, position[1] + dc)
    return None


def make_explorer(name: str) -> Explorer:
    # Imported here, both explorer modules import this one
    from recursive_backtracker import RecursiveBacktracker
    from wall_follower import WallFollower

    explorers = {
        "wall-follower": WallFollower,
        "recursive-backtracker": RecursiveBacktracker,
    }
    try:
        return explorers[name.lower()]()
    except KeyError:
        raise ValueError(
            f"unknown exploration algorithm {name!r}, expected one of {EXPLORER_NAMES}"
        ) from None


EXPLORER_NAMES = ["wall-follower", "recursive-backtracker"]
