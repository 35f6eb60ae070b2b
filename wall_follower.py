# Exploration: Wall Follower (left-hand rule)
# Mazerunner, blind & omniscient maze solving

import logging
from typing import Optional

from cells import MoveDirection, SensorReadings, UnboundedPosition
from errors import SurroundedError
from exploration import ExplorationState, is_open
from maze_grid import UnboundedGrid

logger = logging.getLogger(__name__)

# Priority for the very first move, before there is a facing to turn from
FIRST_MOVE_ORDER = (
    MoveDirection.UP,
    MoveDirection.RIGHT,
    MoveDirection.DOWN,
    MoveDirection.LEFT,
)


class WallFollower:
    """
    Keep the left hand on the wall.

    Each step tries turn-left, straight, turn-right, turn-around relative to
    the current facing. Exploration is complete once the robot is back at its
    start after having been somewhere else, i.e. it has closed the loop
    around the region it can reach.
    """

    name = "Wall Follower"

    def __init__(self):
        self.reset()

    def reset(self):
        self.state = ExplorationState.NOT_STARTED
        self.facing = MoveDirection.UP
        self.start: Optional[UnboundedPosition] = None
        self.visited: set[UnboundedPosition] = set()

    def next_move(
        self,
        position: UnboundedPosition,
        readings: SensorReadings,
        grid: UnboundedGrid,
    ) -> Optional[MoveDirection]:
        position = UnboundedPosition(*position)

        if self.state is ExplorationState.COMPLETE:
            return None

        if self.state is ExplorationState.NOT_STARTED:
            self.start = position
            self.visited.add(position)
            self.state = ExplorationState.EXPLORING
            return self._turn_to(self._pick(FIRST_MOVE_ORDER, readings, position))

        self.visited.add(position)
        if position == self.start and len(self.visited) > 1:
            logger.debug(
                "back at start after %d distinct cells", len(self.visited)
            )
            self.state = ExplorationState.COMPLETE
            return None

        candidates = (
            self.facing.turn_left(),
            self.facing,
            self.facing.turn_right(),
            self.facing.turn_around(),
        )
        return self._turn_to(self._pick(candidates, readings, position))

    def _pick(self, candidates, readings, position) -> MoveDirection:
        for direction in candidates:
            if is_open(readings, direction):
                return direction
        self.state = ExplorationState.FATAL
        raise SurroundedError(f"no valid move from {tuple(position)}, completely surrounded")

    def _turn_to(self, direction: MoveDirection) -> MoveDirection:
        self.facing = direction
        return direction
