import numpy as np
import pytest

from cells import SENSOR_CHANNELS, Cell, MoveDirection, Position, SensorReadings, UnboundedPosition
from errors import NotFoundError, ShapeError
from maze_grid import BoundedGrid, UnboundedGrid
from simulator import MAPS


def all_free():
    return SensorReadings.from_codes({name: "f" for name, _, _ in SENSOR_CHANNELS})


class TestBoundedGrid:
    def test_from_flattened_checks_size(self):
        grid = BoundedGrid.from_flattened(list("rfffbt"), [2, 3])
        assert grid.bounds == (2, 3)
        assert grid.get(Position(1, 2)) is Cell.TARGET
        with pytest.raises(ShapeError):
            BoundedGrid.from_flattened(list("rffbt"), [2, 3])

    def test_from_flattened_checks_shape(self):
        with pytest.raises(ShapeError):
            BoundedGrid.from_flattened(list("rf"), [2])
        with pytest.raises(ShapeError):
            BoundedGrid.from_flattened([], [-1, 0])

    def test_ragged_rows(self):
        with pytest.raises(ShapeError):
            BoundedGrid.from_rows(["rff", "ft"])

    def test_not_2d(self):
        with pytest.raises(ShapeError):
            BoundedGrid(np.zeros(4))

    def test_cells_are_read_only(self, default_grid):
        with pytest.raises(ValueError):
            default_grid.cells[0, 0] = Cell.FREE

    def test_find_robot_and_target(self, default_grid):
        assert default_grid.find_robot() == Position(0, 0)
        assert default_grid.find_target() == Position(2, 6)
        assert BoundedGrid.from_rows(["fff"]).find_robot() is None

    def test_get_out_of_bounds(self, default_grid):
        assert default_grid.get(Position(0, 3)) is Cell.BLOCKED
        assert default_grid.get(Position(-1, 0)) is None
        assert default_grid.get(Position(7, 0)) is None
        assert not default_grid.is_walkable(Position(0, 9))

    def test_unknown_codes(self):
        grid = BoundedGrid.from_rows(["r?t"])
        assert grid.get(Position(0, 1)) is Cell.UNKNOWN

    def test_rows_round_trip(self):
        assert BoundedGrid.from_rows(MAPS["default"]).to_rows() == MAPS["default"]

    def test_neighbors_skip_walls(self, default_grid):
        assert default_grid.neighbors(Position(0, 0)) == [(Position(0, 1), MoveDirection.RIGHT)]




class TestUnboundedGrid:
    def test_empty(self):
        grid = UnboundedGrid()
        assert grid.get(UnboundedPosition(5, -5)) is Cell.UNKNOWN
        assert grid.get_bounds() is None
        assert len(grid) == 0
        with pytest.raises(NotFoundError):
            grid.to_bounded()

    def test_update_from_sensors(self):
        grid = UnboundedGrid()
        grid.update_from_sensors(UnboundedPosition(0, 0), all_free())
        assert len(grid) == 9
        assert grid.get(UnboundedPosition(0, 0)) is Cell.ROBOT
        assert grid.get(UnboundedPosition(-1, -1)) is Cell.FREE
        assert grid.get_bounds() == (-1, 1, -1, 1)

    def test_move_robot(self):
        grid = UnboundedGrid()
        grid.move_robot(UnboundedPosition(0, 0), UnboundedPosition(0, 1))
        assert grid.get(UnboundedPosition(0, 0)) is Cell.FREE
        assert grid.get(UnboundedPosition(0, 1)) is Cell.ROBOT

    def test_to_bounded_offsets_and_fills_unknown(self):
        grid = UnboundedGrid()
        grid.update_from_sensors(UnboundedPosition(0, 0), all_free())
        grid.update_from_sensors(UnboundedPosition(3, 3), all_free())

        bounded, offset = grid.to_bounded()
        assert offset == (-1, -1)
        assert bounded.bounds == (6, 6)
        assert bounded.get(Position(1, 1)) is Cell.ROBOT
        assert bounded.get(Position(4, 4)) is Cell.ROBOT
        # (-1, 4) was never observed
        assert bounded.get(Position(0, 5)) is Cell.UNKNOWN

    def test_to_bounded_preserves_cells(self):
        grid = UnboundedGrid()
        grid.set(UnboundedPosition(-3, 2), Cell.BLOCKED)
        grid.set(UnboundedPosition(-1, -2), Cell.TARGET)
        grid.set(UnboundedPosition(0, 0), Cell.ROBOT)
        grid.set(UnboundedPosition(1, 1), Cell.FREE)

        bounded, (min_row, min_col) = grid.to_bounded()
        min_r, max_r, min_c, max_c = grid.get_bounds()
        for row in range(min_r, max_r + 1):
            for col in range(min_c, max_c + 1):
                original = grid.get(UnboundedPosition(row, col))
                assert bounded.get(Position(row - min_row, col - min_col)) is original
