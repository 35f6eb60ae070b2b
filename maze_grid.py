# Maze Grids: fully-known bounded grid and sparse discovered grid
# Mazerunner, blind & omniscient maze solving

from typing import Optional, Sequence

import numpy as np

from cells import Cell, MoveDirection, Position, SensorReadings, UnboundedPosition
from errors import NotFoundError, ShapeError


class BoundedGrid:
    """
    Dense, rectangular, fully-known maze used for planning.

    Cells live in a read-only (height, width) uint8 array of Cell values.
    """

    def __init__(self, cells: np.ndarray):
        if cells.ndim != 2:
            raise ShapeError(f"expected a 2D cell array, got {cells.ndim}D")
        self.cells = cells.astype(np.uint8, copy=True)
        self.cells.flags.writeable = False
        self.height, self.width = self.cells.shape

    @classmethod
    def from_flattened(cls, cells: Sequence[str], shape: Sequence[int]) -> "BoundedGrid":
        """
        Build a grid from single-letter cell codes in row-major order.

        Args:
            cells: Flattened codes (f, b, t, r, anything else is unknown)
            shape: [height, width]

        Raises:
            ShapeError: shape is not two elements or doesn't match len(cells)
        """
        if len(shape) != 2:
            raise ShapeError(f"invalid shape: expected [height, width], got {list(shape)}")

        height, width = int(shape[0]), int(shape[1])
        if height < 0 or width < 0:
            raise ShapeError(f"invalid shape: negative dimension in {list(shape)}")
        if len(cells) != height * width:
            raise ShapeError(
                f"grid size mismatch: expected {height * width}, got {len(cells)}"
            )

        codes = np.fromiter(
            (Cell.from_code(code) for code in cells), dtype=np.uint8, count=len(cells)
        )
        return cls(codes.reshape(height, width))

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "BoundedGrid":
        """Build a grid from equal-length strings of cell codes, one per row."""
        widths = {len(row) for row in rows}
        if len(widths) > 1:
            raise ShapeError(f"ragged rows: widths {sorted(widths)}")
        width = widths.pop() if widths else 0
        return cls.from_flattened([code for row in rows for code in row], [len(rows), width])

    @property
    def bounds(self) -> tuple[int, int]:
        return (self.height, self.width)

    def get(self, pos: Position) -> Optional[Cell]:
        """Cell at pos, or None when pos is out of bounds."""
        row, col = pos
        if 0 <= row < self.height and 0 <= col < self.width:
            return Cell(int(self.cells[row, col]))
        return None

    def is_walkable(self, pos: Position) -> bool:
        cell = self.get(pos)
        return cell is not None and cell.is_walkable()

    def neighbors(self, pos: Position) -> list[tuple[Position, MoveDirection]]:
        return [(p, d) for p, d in Position(*pos).neighbors(self.bounds) if self.is_walkable(p)]

    def _find(self, cell: Cell) -> Optional[Position]:
        hits = np.flatnonzero(self.cells == cell)
        if hits.size == 0:
            return None
        return Position.from_index(int(hits[0]), self.width)

    def find_robot(self) -> Optional[Position]:
        return self._find(Cell.ROBOT)

    def find_target(self) -> Optional[Position]:
        return self._find(Cell.TARGET)

    def to_codes(self) -> list[str]:
        return [Cell(int(v)).code for v in self.cells.ravel()]

    def to_rows(self) -> list[str]:
        return [
            "".join(Cell(int(v)).code for v in self.cells[r]) for r in range(self.height)
        ]

    def __repr__(self):
        return f"BoundedGrid({self.height}x{self.width})"


class UnboundedGrid:
    """
    Sparse maze grown from sensor readings during blind exploration.

    Keyed by signed coordinates relative to where the robot started; a
    position that was never observed reads as UNKNOWN. Cells are only ever
    set, never removed.
    """

    def __init__(self):
        self.cells: dict[UnboundedPosition, Cell] = {}

    def get(self, pos: UnboundedPosition) -> Cell:
        return self.cells.get(pos, Cell.UNKNOWN)

    def set(self, pos: UnboundedPosition, cell: Cell):
        self.cells[UnboundedPosition(*pos)] = cell

    def is_walkable(self, pos: UnboundedPosition) -> bool:
        return self.get(pos).is_walkable()

    def neighbors(
        self, pos: UnboundedPosition
    ) -> list[tuple[UnboundedPosition, MoveDirection]]:
        return [
            (p, d) for p, d in UnboundedPosition(*pos).neighbors() if self.is_walkable(p)
        ]

    def get_bounds(self) -> Optional[tuple[int, int, int, int]]:
        """Inclusive (min_row, max_row, min_col, max_col), or None when empty."""
        if not self.cells:
            return None
        rows = [p.row for p in self.cells]
        cols = [p.col for p in self.cells]
        return (min(rows), max(rows), min(cols), max(cols))

    def update_from_sensors(self, pos: UnboundedPosition, readings: SensorReadings):
        """Mark pos as the robot and overwrite the eight cells around it."""
        pos = UnboundedPosition(*pos)
        self.set(pos, Cell.ROBOT)
        for state, dr, dc in readings.channels():
            self.set(pos.offset(dr, dc), state.to_cell())

    def move_robot(self, old: UnboundedPosition, new: UnboundedPosition):
        self.set(old, Cell.FREE)
        self.set(new, Cell.ROBOT)

    def to_bounded(self) -> tuple[BoundedGrid, tuple[int, int]]:
        """
        Normalize the observed bounding box into a zero-based bounded grid.

        Returns:
            (grid, (min_row, min_col)) - subtract the offset from an unbounded
            position to get its coordinate in the bounded grid

        Raises:
            NotFoundError: nothing has been observed yet
        """
        bounds = self.get_bounds()
        if bounds is None:
            raise NotFoundError("empty maze: no cells were ever observed")

        min_row, max_row, min_col, max_col = bounds
        height = max_row - min_row + 1
        width = max_col - min_col + 1

        dense = np.full((height, width), Cell.UNKNOWN, dtype=np.uint8)
        for (row, col), cell in self.cells.items():
            dense[row - min_row, col - min_col] = cell

        return BoundedGrid(dense), (min_row, min_col)

    def __len__(self):
        return len(self.cells)

    def __repr__(self):
        return f"UnboundedGrid({len(self.cells)} cells, bounds={self.get_bounds()})"
