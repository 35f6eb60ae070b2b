# Cell, Direction and Sensor Types
# Mazerunner, blind & omniscient maze solving

# Defines the terrain states a grid cell can hold, the four move directions,
# the eight-channel sensor readings and the two position types.

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterator, NamedTuple, Optional


class Cell(IntEnum):
    FREE = 0
    BLOCKED = 1
    TARGET = 2
    ROBOT = 3
    UNKNOWN = 4

    @classmethod
    def from_code(cls, code: str) -> "Cell":
        # Anything we don't recognise is terrain we know nothing about
        return _CELL_BY_CODE.get(code, cls.UNKNOWN)

    @property
    def code(self) -> str:
        return _CELL_CODES[self]

    def is_walkable(self) -> bool:
        return self in WALKABLE


_CELL_CODES = {
    Cell.FREE: "f",
    Cell.BLOCKED: "b",
    Cell.TARGET: "t",
    Cell.ROBOT: "r",
    Cell.UNKNOWN: "u",
}
_CELL_BY_CODE = {code: cell for cell, code in _CELL_CODES.items()}

WALKABLE = frozenset((Cell.FREE, Cell.TARGET, Cell.ROBOT))


class MoveDirection(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def from_str(cls, s: str) -> "MoveDirection":
        try:
            return cls(s.lower())
        except ValueError:
            raise ValueError(f"invalid move direction: {s!r}") from None

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    def turn_left(self) -> "MoveDirection":
        return _LEFT_OF[self]

    def turn_right(self) -> "MoveDirection":
        return _RIGHT_OF[self]

    def turn_around(self) -> "MoveDirection":
        return _LEFT_OF[_LEFT_OF[self]]

    def __str__(self):
        return self.value


_DELTAS = {
    MoveDirection.UP: (-1, 0),
    MoveDirection.DOWN: (1, 0),
    MoveDirection.LEFT: (0, -1),
    MoveDirection.RIGHT: (0, 1),
}
_LEFT_OF = {
    MoveDirection.UP: MoveDirection.LEFT,
    MoveDirection.LEFT: MoveDirection.DOWN,
    MoveDirection.DOWN: MoveDirection.RIGHT,
    MoveDirection.RIGHT: MoveDirection.UP,
}
_RIGHT_OF = {turned: facing for facing, turned in _LEFT_OF.items()}

# Fixed neighbour order used by both grids and the planners
CARDINAL_ORDER = (
    MoveDirection.UP,
    MoveDirection.DOWN,
    MoveDirection.LEFT,
    MoveDirection.RIGHT,
)


class SensorState(Enum):
    FREE = "f"
    BLOCKED = "b"
    TARGET = "t"

    @classmethod
    def from_code(cls, code: str) -> "SensorState":
        try:
            return cls(code.lower())
        except ValueError:
            raise ValueError(f"invalid sensor state: {code!r}") from None

    def to_cell(self) -> Cell:
        return _CELL_BY_SENSOR[self]


_CELL_BY_SENSOR = {
    SensorState.FREE: Cell.FREE,
    SensorState.BLOCKED: Cell.BLOCKED,
    SensorState.TARGET: Cell.TARGET,
}

# Channel name -> (d_row, d_col), in scan order N, S, W, E, NW, NE, SW, SE
SENSOR_CHANNELS = (
    ("up", -1, 0),
    ("down", 1, 0),
    ("left", 0, -1),
    ("right", 0, 1),
    ("up_left", -1, -1),
    ("up_right", -1, 1),
    ("down_left", 1, -1),
    ("down_right", 1, 1),
)


@dataclass(frozen=True)
class SensorReadings:
    """Eight observations anchored at the robot's current cell."""

    up: SensorState
    down: SensorState
    left: SensorState
    right: SensorState
    up_left: SensorState
    up_right: SensorState
    down_left: SensorState
    down_right: SensorState

    @classmethod
    def from_codes(cls, codes) -> "SensorReadings":
        """Build readings from a mapping of channel name -> single-letter code."""
        return cls(
            **{name: SensorState.from_code(codes[name]) for name, _, _ in SENSOR_CHANNELS}
        )

    def cardinal(self, direction: MoveDirection) -> SensorState:
        return getattr(self, direction.value)

    def channels(self) -> Iterator[tuple[SensorState, int, int]]:
        for name, dr, dc in SENSOR_CHANNELS:
            yield getattr(self, name), dr, dc


class Position(NamedTuple):
    """Unsigned row/col inside a bounded grid."""

    row: int
    col: int

    def to_index(self, width: int) -> int:
        return self.row * width + self.col

    @classmethod
    def from_index(cls, index: int, width: int) -> "Position":
        return cls(index // width, index % width)

    def manhattan(self, other: "Position") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def move(
        self, direction: MoveDirection, bounds: tuple[int, int]
    ) -> Optional["Position"]:
        """Step one cell, or None if that leaves (height, width)."""
        height, width = bounds
        dr, dc = direction.delta
        row, col = self.row + dr, self.col + dc
        if 0 <= row < height and 0 <= col < width:
            return Position(row, col)
        return None

    def neighbors(
        self, bounds: tuple[int, int]
    ) -> list[tuple["Position", MoveDirection]]:
        out = []
        for direction in CARDINAL_ORDER:
            pos = self.move(direction, bounds)
            if pos is not None:
                out.append((pos, direction))
        return out


class UnboundedPosition(NamedTuple):
    """Signed row/col used while the maze footprint is still unknown."""

    row: int
    col: int

    def move(self, direction: MoveDirection) -> "UnboundedPosition":
        dr, dc = direction.delta
        return UnboundedPosition(self.row + dr, self.col + dc)

    def offset(self, dr: int, dc: int) -> "UnboundedPosition":
        return UnboundedPosition(self.row + dr, self.col + dc)

    def neighbors(self) -> list[tuple["UnboundedPosition", MoveDirection]]:
        return [(self.move(direction), direction) for direction in CARDINAL_ORDER]
