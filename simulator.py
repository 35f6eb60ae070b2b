# Maze Simulation: in-process transport with ground-truth grid
# Mazerunner, blind & omniscient maze solving

# Stands in for the remote maze service: answers get-map, move and reset
# calls against a ground-truth grid, and a background task keeps publishing
# the robot's current sensor readings like a live topic would.

import asyncio
import logging
from pathlib import Path
from typing import Optional

import networkx as nx
import numpy as np

from cells import SENSOR_CHANNELS, Cell, MoveDirection, Position, SensorReadings, SensorState
from errors import NotFoundError
from maze_grid import BoundedGrid
from transport import SENSOR_BUFFER, GridSnapshot, SensorChannel, SensorSubscription

logger = logging.getLogger(__name__)

# Seconds between background sensor publications
PUBLISH_INTERVAL = 0.01

# Random maze defaults
RANDOM_ROWS = 12
RANDOM_COLS = 16
RANDOM_DENSITY = 0.3
MAX_GENERATION_ATTEMPTS = 200

MAPS = {
    "default": [
        "rffbfffff",
        "bbfbfbbbf",
        "ffffbbtff",
        "fbbbfbbbf",
        "fffbfffbf",
        "bbfbbbfbf",
        "fffffffff",
    ],
    "ring": [
        "bbbbb",
        "brffb",
        "bfbtb",
        "bfffb",
        "bbbbb",
    ],
    "corridor": [
        "rfffft",
    ],
    "open": [
        "rffff",
        "fffff",
        "ffbff",
        "fffff",
        "fffft",
    ],
    "walled": [
        "rfb",
        "ffb",
        "bbt",
    ],
}


# Tetromino obstacle shapes (ignoring duplicate rotation shapes Z, J)
TETROMINOS = [
    np.array([[1], [1], [1], [1]]),
    np.array([[1, 1], [0, 1], [0, 1]]),
    np.array([[1, 1], [1, 1]]),
    np.array([[1, 0], [1, 1], [0, 1]]),
    np.array([[0, 1], [1, 1], [0, 1]]),
]


def readings_at(cells: np.ndarray, pos: Position) -> SensorReadings:
    """Eight-channel readings around pos; off-grid and unknown terrain read as blocked."""
    rows, cols = cells.shape
    states = {}
    for name, dr, dc in SENSOR_CHANNELS:
        r, c = pos[0] + dr, pos[1] + dc
        if not (0 <= r < rows and 0 <= c < cols):
            states[name] = SensorState.BLOCKED
            continue
        cell = cells[r, c]
        if cell == Cell.TARGET:
            states[name] = SensorState.TARGET
        elif cell in (Cell.FREE, Cell.ROBOT):
            states[name] = SensorState.FREE
        else:
            states[name] = SensorState.BLOCKED
    return SensorReadings(**states)


def target_reachable(cells: np.ndarray) -> bool:
    """True if the target can be reached from the robot with cardinal moves."""
    robot = np.argwhere(cells == Cell.ROBOT)
    target = np.argwhere(cells == Cell.TARGET)
    if len(robot) == 0 or len(target) == 0:
        return False

    rows, cols = cells.shape
    graph = nx.grid_2d_graph(rows, cols)
    graph.remove_nodes_from(
        [(int(r), int(c)) for r, c in np.argwhere(cells == Cell.BLOCKED)]
        + [(int(r), int(c)) for r, c in np.argwhere(cells == Cell.UNKNOWN)]
    )
    start = (int(robot[0][0]), int(robot[0][1]))
    goal = (int(target[0][0]), int(target[0][1]))
    return nx.has_path(graph, start, goal)


def _place_random_tetromino(grid, rng, attempts=50) -> int:
    """Drop one randomly rotated tetromino on empty cells. Returns cells filled."""
    rows, cols = grid.shape
    tet = np.rot90(TETROMINOS[rng.integers(len(TETROMINOS))], rng.integers(4))
    height, width = tet.shape
    if height > rows or width > cols:
        return 0

    for _ in range(attempts):
        r = int(rng.integers(0, rows - height + 1))
        c = int(rng.integers(0, cols - width + 1))
        region = grid[r : r + height, c : c + width]
        # Make sure all cells to be filled by the tetromino are empty
        if (region[tet == 1] == Cell.FREE).all():
            region[tet == 1] = Cell.BLOCKED
            return int(tet.sum())
    return 0


def _place_on_empty(grid, rng, cell: Cell) -> Position:
    empty = np.argwhere(grid == Cell.FREE)
    if len(empty) == 0:
        raise ValueError("no empty cell left to place on")
    r, c = empty[rng.integers(len(empty))]
    grid[r, c] = cell
    return Position(int(r), int(c))


def generate_maze(
    rows: int = RANDOM_ROWS,
    cols: int = RANDOM_COLS,
    density: float = RANDOM_DENSITY,
    rng: Optional[np.random.Generator] = None,
    max_attempts: int = MAX_GENERATION_ATTEMPTS,
) -> BoundedGrid:
    """
    Random tetromino field with a robot and a reachable target.

    Args:
        rows, cols: Grid size
        density: Fraction of cells to fill with obstacles
        rng: numpy Generator, a fresh one if not given
        max_attempts: Fields to try before giving up on a reachable target
    """
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be positive")
    if not (0.0 <= density < 1.0):
        raise ValueError("density must be in [0, 1)")
    if rows * cols < 2:
        raise ValueError("need at least two cells for a robot and a target")
    rng = rng if rng is not None else np.random.default_rng()

    for attempt in range(1, max_attempts + 1):
        grid = np.full((rows, cols), Cell.FREE, dtype=np.uint8)

        # Keep two cells open for the robot and target
        goal_filled = min(int(rows * cols * density), rows * cols - 2)
        filled = 0
        misses = 0
        while filled < goal_filled and misses < 20:
            placed = _place_random_tetromino(grid, rng)
            if placed:
                filled += placed
            else:
                misses += 1

        if np.count_nonzero(grid == Cell.FREE) < 2:
            continue

        _place_on_empty(grid, rng, Cell.ROBOT)
        _place_on_empty(grid, rng, Cell.TARGET)

        if target_reachable(grid):
            logger.debug("generated %dx%d maze after %d attempts", rows, cols, attempt)
            return BoundedGrid(grid)

    raise ValueError(f"could not generate a solvable maze in {max_attempts} attempts")


def load_map(name: str) -> BoundedGrid:
    """
    Built-in map by name, or a text file of cell codes with one row per line.

    Blank lines and lines starting with '#' in map files are ignored.
    """
    if name in MAPS:
        return BoundedGrid.from_rows(MAPS[name])

    path = Path(name)
    if not path.is_file():
        raise NotFoundError(f"no built-in map or map file named {name!r}")

    rows = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            rows.append(line.replace(" ", ""))
    return BoundedGrid.from_rows(rows)


class SimulatedMaze:
    """
    In-process maze service.

    The ground truth lives in a mutable copy of the grid; the robot's cell is
    tagged ROBOT and moves with it, restoring the target if it stood on it.
    """

    def __init__(
        self,
        grid: BoundedGrid,
        publish_interval: float = PUBLISH_INTERVAL,
        rng: Optional[np.random.Generator] = None,
        sensor_buffer: int = SENSOR_BUFFER,
    ):
        self.publish_interval = publish_interval
        self.rng = rng if rng is not None else np.random.default_rng()
        self.channel = SensorChannel(sensor_buffer)
        self.moves = 0
        self.resets = 0
        self._task: Optional[asyncio.Task] = None
        self._load(grid)
        # Random resets keep the footprint of the maze we were built with
        self.random_shape = grid.bounds

    def _load(self, grid: BoundedGrid):
        robot = grid.find_robot()
        if robot is None:
            raise NotFoundError("robot not found in maze")
        self.initial = grid
        self.cells = np.array(grid.cells, dtype=np.uint8)
        self.robot = robot
        self.target = grid.find_target()

    @property
    def grid(self) -> BoundedGrid:
        return BoundedGrid(self.cells)

    def current_readings(self) -> SensorReadings:
        return readings_at(self.cells, self.robot)

    def _publish(self):
        if not self.channel.closed:
            self.channel.publish(self.current_readings())

    async def _pump(self):
        logger.debug("sensor publisher started")
        while not self.channel.closed:
            self._publish()
            await asyncio.sleep(self.publish_interval)

    def start(self):
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._pump())

    async def stop(self):
        self.channel.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, *exc):
        await self.stop()

    async def get_full_grid(self) -> GridSnapshot:
        await asyncio.sleep(0)
        return GridSnapshot(self.grid.to_codes(), [self.grid.height, self.grid.width])

    async def move(self, direction: MoveDirection) -> bool:
        await asyncio.sleep(0)
        nxt = self.robot.move(direction, self.cells.shape)
        if nxt is None or not Cell(int(self.cells[nxt.row, nxt.col])).is_walkable():
            logger.debug("move %s from %s rejected", direction, tuple(self.robot))
            return False

        self.cells[self.robot.row, self.robot.col] = (
            Cell.TARGET if self.robot == self.target else Cell.FREE
        )
        self.robot = nxt
        self.cells[nxt.row, nxt.col] = Cell.ROBOT
        self.moves += 1
        self._publish()
        return True

    async def reset(self, is_random: bool = False, map_name: str = "") -> None:
        await asyncio.sleep(0)
        if map_name:
            self._load(load_map(map_name))
        elif is_random:
            rows, cols = self.random_shape
            self._load(generate_maze(rows, cols, rng=self.rng))
        else:
            self._load(self.initial)
        self.resets += 1
        logger.debug("maze reset, robot at %s", tuple(self.robot))
        self._publish()

    def subscribe_sensors(self) -> SensorSubscription:
        return self.channel.subscribe()

    @property
    def at_target(self) -> bool:
        return self.robot == self.target
