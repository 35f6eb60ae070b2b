# Blind Solver: explore with sensors only, then plan and execute
# Mazerunner, blind & omniscient maze solving

# Phase 1: explore, growing an unbounded grid from sensor readings
# Phase 2: convert what was discovered into a zero-based bounded grid
# Phase 3: plan an optimal route over it
# Phase 4: reset the maze and execute the route from the real origin

import asyncio
import logging
import time
from typing import Callable, Optional

from cells import MoveDirection, Position, SensorReadings, UnboundedPosition
from errors import LoopGuardError, MoveFailure, NotFoundError, UnreachableError
from exploration import Explorer, detect_target
from maze_grid import BoundedGrid, UnboundedGrid
from planning import PathResult, Pathfinder
from transport import SensorSubscription, Transport

logger = logging.getLogger(__name__)

# Safety valve against explorers that wander forever
STEP_LIMIT = 10_000
# Seconds to let the sensor stream settle after subscribing
SENSOR_SETTLE = 0.1
# Seconds to let the maze settle after a reset
RESET_SETTLE = 0.5

ORIGIN = UnboundedPosition(0, 0)


def convert_to_bounded(
    grid: UnboundedGrid,
    target: UnboundedPosition,
    origin: UnboundedPosition = ORIGIN,
) -> tuple[BoundedGrid, Position, Position]:
    """
    Translate the discovered grid, the robot's origin and the target into
    the zero-based frame of a bounded grid.

    Raises:
        NotFoundError: no cells were ever observed
    """
    bounded, (min_row, min_col) = grid.to_bounded()
    start = Position(origin[0] - min_row, origin[1] - min_col)
    goal = Position(target[0] - min_row, target[1] - min_col)
    return bounded, start, goal


class BlindSolver:
    """
    Solve a maze knowing only the robot's eight-connected neighbourhood.

    Readings are cached per visited position. The stream only ever carries
    the current cell's readings, so a revisit reuses what was seen the first
    time instead of waiting on the stream.
    """

    def __init__(
        self,
        explorer: Explorer,
        pathfinder: Pathfinder,
        delay_ms: int = 0,
        step_limit: int = STEP_LIMIT,
        sensor_settle: float = SENSOR_SETTLE,
        reset_settle: float = RESET_SETTLE,
        on_step: Optional[Callable[[UnboundedGrid, UnboundedPosition], None]] = None,
    ):
        self.explorer = explorer
        self.pathfinder = pathfinder
        self.delay = delay_ms / 1000.0
        self.step_limit = step_limit
        self.sensor_settle = sensor_settle
        self.reset_settle = reset_settle
        self.on_step = on_step
        self._clear()

    def _clear(self):
        self.discovered = UnboundedGrid()
        self.sensor_cache: dict[UnboundedPosition, SensorReadings] = {}
        self.position = ORIGIN
        self.target: Optional[UnboundedPosition] = None
        self.exploration_moves: list[MoveDirection] = []
        self.bounded: Optional[BoundedGrid] = None
        self.start: Optional[Position] = None
        self.goal: Optional[Position] = None
        self.path: Optional[list[MoveDirection]] = None
        self.planning_time = 0.0

    async def solve(self, transport: Transport) -> PathResult:
        self._clear()
        self.explorer.reset()
        self.pathfinder.reset()
        total_start = time.perf_counter()

        logger.info("phase 1: exploring maze with %s", self.explorer.name)
        exploration_steps = await self.explore(transport)
        logger.info(
            "exploration complete: found target at (%d, %d) in %d steps",
            self.target.row, self.target.col, exploration_steps,
        )

        logger.info("phase 2: planning optimal path with %s", self.pathfinder.name)
        planning_start = time.perf_counter()
        self.bounded, self.start, self.goal = convert_to_bounded(self.discovered, self.target)
        path = self.pathfinder.find_path(self.bounded, self.start, self.goal)
        self.planning_time += time.perf_counter() - planning_start
        if path is None:
            raise UnreachableError(
                f"{self.pathfinder.name}: no path found to target over discovered terrain"
            )
        self.path = path
        logger.info("planned optimal path: %d steps", len(path))

        logger.info("resetting maze and executing optimal path")
        await transport.reset(False, "")
        if self.reset_settle > 0:
            await asyncio.sleep(self.reset_settle)
        execution_steps = await self.execute(transport, path)

        total_time = time.perf_counter() - total_start
        logger.info(
            "total: %d exploration + %d execution = %d steps",
            exploration_steps, execution_steps, exploration_steps + execution_steps,
        )
        return PathResult(
            exploration_steps + execution_steps,
            self.planning_time,
            total_time - self.planning_time,
            exploration_steps=exploration_steps,
        )

    async def _settle_and_drain(self, sensors: SensorSubscription):
        if self.sensor_settle > 0:
            await asyncio.sleep(self.sensor_settle)
        # Readings captured before a reset or a move belong to another cell
        dropped = sensors.drain()
        if dropped:
            logger.debug("drained %d stale readings", dropped)

    async def explore(self, transport: Transport) -> int:
        """Run the explorer until it reports completion. Returns the step count."""
        sensors = transport.subscribe_sensors()
        try:
            logger.debug("waiting for sensors")
            await self._settle_and_drain(sensors)
            self.sensor_cache[ORIGIN] = await sensors.recv()
            logger.info("starting at origin")

            steps = 0
            while True:
                readings = await self._readings_for(sensors, self.position)
                self.discovered.update_from_sensors(self.position, readings)

                # Note the target but keep exploring
                if self.target is None:
                    sighting = detect_target(self.position, readings)
                    if sighting is not None:
                        logger.info("target spotted at (%d, %d)", sighting.row, sighting.col)
                        self.target = sighting

                if self.on_step is not None:
                    self.on_step(self.discovered, self.position)

                decide_start = time.perf_counter()
                direction = self.explorer.next_move(self.position, readings, self.discovered)
                self.planning_time += time.perf_counter() - decide_start

                if direction is None:
                    logger.info("exploration complete after %d steps", steps)
                    break

                if self.delay > 0:
                    await asyncio.sleep(self.delay)

                logger.debug(
                    "exploration step %d: %s from (%d, %d)",
                    steps + 1, direction, self.position.row, self.position.col,
                )
                if not await transport.move(direction):
                    raise MoveFailure(steps + 1, direction, phase="exploration")

                new_position = self.position.move(direction)
                self.discovered.move_robot(self.position, new_position)
                self.position = new_position
                self.exploration_moves.append(direction)

                steps += 1
                if steps > self.step_limit:
                    raise LoopGuardError(steps)
        finally:
            sensors.close()

        if self.target is None:
            raise NotFoundError("exploration complete but target never spotted")
        return steps

    async def _readings_for(
        self, sensors: SensorSubscription, position: UnboundedPosition
    ) -> SensorReadings:
        cached = self.sensor_cache.get(position)
        if cached is not None:
            logger.debug("cache hit for (%d, %d)", position.row, position.col)
            return cached

        dropped = sensors.drain()
        if dropped:
            logger.debug("drained %d stale readings", dropped)
        fresh = await sensors.recv()
        self.sensor_cache[position] = fresh
        return fresh

    async def execute(self, transport: Transport, path: list[MoveDirection]) -> int:
        """Walk a planned route from the real origin. Returns the step count."""
        sensors = transport.subscribe_sensors()
        try:
            await self._settle_and_drain(sensors)
            # One fresh reading to resynchronise after the reset
            await sensors.recv()
        finally:
            sensors.close()

        for step, direction in enumerate(path, start=1):
            if self.delay > 0:
                await asyncio.sleep(self.delay)

            logger.debug("executing step %d/%d: %s", step, len(path), direction)
            if not await transport.move(direction):
                raise MoveFailure(step, direction, phase="execution")

        logger.info("reached target")
        return len(path)
