import asyncio
from functools import partial

import pytest

from blind_solver import BlindSolver, convert_to_bounded
from cells import SENSOR_CHANNELS, Cell, MoveDirection, Position, SensorReadings, UnboundedPosition
from conftest import FAST_SOLVER, run_with_maze, shortest_length
from errors import LoopGuardError, MoveFailure, NotFoundError, ShapeError, UnreachableError
from exploration import make_explorer
from maze_grid import BoundedGrid, UnboundedGrid
from omniscient_solver import OmniscientSolver
from planning import make_pathfinder, pathfinder_names
from simulator import MAPS, SimulatedMaze
from transport import GridSnapshot


class StubbornMaze(SimulatedMaze):
    """Rejects the move with the given 1-based index."""

    def __init__(self, grid, fail_at=1, **kwargs):
        super().__init__(grid, **kwargs)
        self.fail_at = fail_at

    async def move(self, direction):
        if self.moves + 1 == self.fail_at:
            return False
        return await super().move(direction)


class TaintedMaze(SimulatedMaze):
    """
    Counts sensor reads and floods every subscription with bogus all-target
    readings whenever they would be stale: on subscribe and after each move.
    """

    BOGUS = SensorReadings.from_codes({name: "t" for name, _, _ in SENSOR_CHANNELS})

    def __init__(self, grid, **kwargs):
        super().__init__(grid, **kwargs)
        self.reads = 0

    def subscribe_sensors(self):
        sensors = super().subscribe_sensors()
        for _ in range(5):
            sensors._push(self.BOGUS)
        recv = sensors.recv

        async def counted_recv():
            self.reads += 1
            return await recv()

        sensors.recv = counted_recv
        return sensors

    async def move(self, direction):
        moved = await super().move(direction)
        if moved:
            self.channel.publish(self.BOGUS)
        return moved


class BrokenMap:
    async def get_full_grid(self):
        return GridSnapshot(["f"] * 5, [2, 3])


def blind(exploration, pathfinding="astar", **kwargs):
    options = dict(FAST_SOLVER)
    options.update(kwargs)
    return BlindSolver(make_explorer(exploration), make_pathfinder(pathfinding), **options)


class TestOmniscientSolver:
    @pytest.mark.parametrize("name", pathfinder_names())
    def test_reaches_target(self, name, default_grid):
        solver = OmniscientSolver(make_pathfinder(name))
        result, maze = run_with_maze(default_grid, solver.solve)
        assert maze.at_target
        assert result.steps == len(solver.path)
        assert result.exploration_steps == 0
        assert result.planning_time >= 0

    def test_optimal_steps(self, default_grid):
        solver = OmniscientSolver(make_pathfinder("astar"))
        result, _ = run_with_maze(default_grid, solver.solve)
        expected = shortest_length(
            default_grid, default_grid.find_robot(), default_grid.find_target()
        )
        assert result.steps == expected

    def test_unreachable(self):
        solver = OmniscientSolver(make_pathfinder("astar"))
        with pytest.raises(UnreachableError):
            run_with_maze(BoundedGrid.from_rows(MAPS["walled"]), solver.solve)

    def test_no_target(self):
        solver = OmniscientSolver(make_pathfinder("dijkstra"))
        with pytest.raises(NotFoundError):
            run_with_maze(BoundedGrid.from_rows(["rff"]), solver.solve)

    def test_malformed_map(self):
        solver = OmniscientSolver(make_pathfinder("astar"))
        with pytest.raises(ShapeError):
            asyncio.run(solver.solve(BrokenMap()))

    def test_move_failure(self, corridor_grid):
        solver = OmniscientSolver(make_pathfinder("astar"))
        with pytest.raises(MoveFailure) as exc:
            run_with_maze(corridor_grid, solver.solve, partial(StubbornMaze, fail_at=2))
        assert exc.value.step == 2
        assert exc.value.direction is MoveDirection.RIGHT


class TestBlindSolver:
    def test_ring_with_wall_follower(self, ring_grid):
        steps = []
        solver = blind("wall-follower", on_step=lambda grid, pos: steps.append(pos))
        result, maze = run_with_maze(ring_grid, solver.solve)

        assert result.exploration_steps == 4
        assert result.execution_steps == 3
        assert result.steps == 7
        assert len(steps) == 5
        assert maze.at_target
        assert maze.resets == 1
        assert solver.target == UnboundedPosition(1, 2)

    @pytest.mark.parametrize("exploration", ["wall-follower", "recursive-backtracker"])
    def test_corridor(self, exploration, corridor_grid):
        solver = blind(exploration)
        result, maze = run_with_maze(corridor_grid, solver.solve)
        assert result.exploration_steps == 8
        assert result.execution_steps == 5
        assert solver.path == [MoveDirection.RIGHT] * 5
        assert maze.at_target

    @pytest.mark.parametrize("name", pathfinder_names())
    def test_backtracker_finds_optimal_route(self, name, default_grid):
        solver = blind("recursive-backtracker", name)
        result, maze = run_with_maze(default_grid, solver.solve)
        assert maze.at_target
        expected = shortest_length(
            default_grid, default_grid.find_robot(), default_grid.find_target()
        )
        if name == "dfs":
            assert result.execution_steps >= expected
        else:
            assert result.execution_steps == expected

    def test_discovered_grid_matches_truth(self, default_grid):
        solver = blind("recursive-backtracker")
        run_with_maze(default_grid, solver.solve)
        # Everything the robot stood on is free ground in the real maze
        for pos, cell in solver.discovered.cells.items():
            real = Position(pos.row, pos.col)
            truth = default_grid.get(real)
            if truth is None:
                assert cell is Cell.BLOCKED
            elif cell is Cell.ROBOT:
                assert truth.is_walkable()
            elif truth is Cell.ROBOT:
                assert cell is Cell.FREE
            else:
                assert cell is truth

    def test_reads_each_position_once_and_skips_stale_readings(self, default_grid):
        solver = blind("recursive-backtracker")
        result, maze = run_with_maze(default_grid, solver.solve, TaintedMaze)
        assert maze.at_target

        position = UnboundedPosition(0, 0)
        occupied = [position]
        for direction in solver.exploration_moves:
            position = position.move(direction)
            occupied.append(position)
        distinct = set(occupied)
        # Dead ends force the robot back over cells it already sensed
        assert len(occupied) > len(distinct)

        # One read per new cell, plus the resync read before execution
        assert maze.reads == len(distinct) + 1
        assert set(solver.sensor_cache) == distinct

        targets = [pos for pos, cell in solver.discovered.cells.items() if cell is Cell.TARGET]
        assert targets == [UnboundedPosition(2, 6)]
        assert solver.target == UnboundedPosition(2, 6)
        assert result.execution_steps == shortest_length(
            default_grid, default_grid.find_robot(), default_grid.find_target()
        )

    def test_target_never_seen(self):
        grid = BoundedGrid.from_rows(["rfbff", "ffbft"])
        with pytest.raises(NotFoundError):
            run_with_maze(grid, blind("recursive-backtracker").solve)

    def test_unreachable_target(self):
        grid = BoundedGrid.from_rows(MAPS["walled"])
        with pytest.raises(UnreachableError):
            run_with_maze(grid, blind("recursive-backtracker").solve)

    def test_loop_guard(self, corridor_grid):
        solver = blind("recursive-backtracker", step_limit=3)
        with pytest.raises(LoopGuardError) as exc:
            run_with_maze(corridor_grid, solver.solve)
        assert exc.value.steps == 4

    def test_exploration_move_failure(self, corridor_grid):
        with pytest.raises(MoveFailure) as exc:
            run_with_maze(corridor_grid, blind("wall-follower").solve, StubbornMaze)
        assert exc.value.step == 1
        assert exc.value.phase == "exploration"

    def test_execution_move_failure(self, corridor_grid):
        # Eight exploration moves succeed, the first execution move is rejected
        maze_cls = partial(StubbornMaze, fail_at=9)
        with pytest.raises(MoveFailure) as exc:
            run_with_maze(corridor_grid, blind("recursive-backtracker").solve, maze_cls)
        assert exc.value.step == 1
        assert exc.value.phase == "execution"

    def test_surrounded_robot(self):
        grid = BoundedGrid.from_rows(["bbbb", "brbt", "bbbb"])
        with pytest.raises(NotFoundError):
            run_with_maze(grid, blind("recursive-backtracker").solve)


class TestConvertToBounded:
    def test_shifts_into_zero_based_frame(self):
        grid = UnboundedGrid()
        grid.set(UnboundedPosition(-2, -1), Cell.FREE)
        grid.set(UnboundedPosition(0, 0), Cell.ROBOT)
        grid.set(UnboundedPosition(1, 3), Cell.TARGET)

        bounded, start, target = convert_to_bounded(grid, UnboundedPosition(1, 3))
        assert bounded.bounds == (4, 5)
        assert start == Position(2, 1)
        assert target == Position(3, 4)
        assert bounded.get(target) is Cell.TARGET

    def test_empty(self):
        with pytest.raises(NotFoundError):
            convert_to_bounded(UnboundedGrid(), UnboundedPosition(0, 0))
