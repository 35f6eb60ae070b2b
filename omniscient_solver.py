# Omniscient Solver: full map known up front
# Mazerunner, blind & omniscient maze solving

import asyncio
import logging
import time

from errors import MoveFailure, NotFoundError, UnreachableError
from maze_grid import BoundedGrid
from planning import PathResult, Pathfinder
from transport import Transport

logger = logging.getLogger(__name__)


class OmniscientSolver:
    """Fetch the whole grid, plan once, walk the plan."""

    def __init__(self, pathfinder: Pathfinder, delay_ms: int = 0):
        self.pathfinder = pathfinder
        self.delay = delay_ms / 1000.0
        self.path = None

    async def solve(self, transport: Transport) -> PathResult:
        logger.debug("fetching maze map")
        snapshot = await transport.get_full_grid()
        grid = BoundedGrid.from_flattened(snapshot.cells, snapshot.shape)

        start = grid.find_robot()
        if start is None:
            raise NotFoundError("robot not found in maze")
        target = grid.find_target()
        if target is None:
            raise NotFoundError("target not found in maze")

        logger.debug(
            "%dx%d maze: (%d, %d) -> (%d, %d)",
            grid.height, grid.width, start.row, start.col, target.row, target.col,
        )

        self.pathfinder.reset()
        planning_start = time.perf_counter()
        path = self.pathfinder.find_path(grid, start, target)
        planning_time = time.perf_counter() - planning_start
        if path is None:
            raise UnreachableError(
                f"{self.pathfinder.name}: no path from {tuple(start)} to {tuple(target)}"
            )
        self.path = path

        logger.info("planned %d steps in %.6fs", len(path), planning_time)

        logger.debug("executing")
        execution_start = time.perf_counter()
        for step, direction in enumerate(path, start=1):
            if self.delay > 0:
                await asyncio.sleep(self.delay)

            logger.debug("step %d/%d: %s", step, len(path), direction)
            if not await transport.move(direction):
                raise MoveFailure(step, direction)
        execution_time = time.perf_counter() - execution_start

        logger.info("reached target")
        return PathResult(len(path), planning_time, execution_time)
