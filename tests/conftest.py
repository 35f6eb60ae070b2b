import asyncio
import os

# Headless pygame and matplotlib
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("MPLBACKEND", "Agg")

import networkx as nx
import pytest

from cells import Cell
from maze_grid import BoundedGrid
from simulator import MAPS, SimulatedMaze

# Fast settings for end-to-end solver runs
FAST_PUBLISH = 0.001
FAST_SOLVER = {"sensor_settle": 0, "reset_settle": 0}


def shortest_length(grid: BoundedGrid, start, goal):
    """Independent BFS oracle over walkable cells."""
    graph = nx.grid_2d_graph(grid.height, grid.width)
    graph.remove_nodes_from(
        [(r, c) for r in range(grid.height) for c in range(grid.width)
         if not Cell(int(grid.cells[r, c])).is_walkable()]
    )
    try:
        return nx.shortest_path_length(graph, tuple(start), tuple(goal))
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return None


def run_with_maze(grid, coro_fn, maze_cls=SimulatedMaze):
    """Run coro_fn(maze) with a started simulator and return (result, maze)."""

    async def runner():
        async with maze_cls(grid, publish_interval=FAST_PUBLISH) as maze:
            return await coro_fn(maze), maze

    return asyncio.run(runner())


@pytest.fixture
def default_grid():
    return BoundedGrid.from_rows(MAPS["default"])


@pytest.fixture
def ring_grid():
    return BoundedGrid.from_rows(MAPS["ring"])


@pytest.fixture
def corridor_grid():
    return BoundedGrid.from_rows(MAPS["corridor"])
