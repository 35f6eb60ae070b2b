# Mazerunner, blind & omniscient maze solving
# Command line entry point: solve or benchmark a simulated maze

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from benchmark import plot_benchmark, print_summary, run_blind_benchmark, run_omniscient_benchmark
from blind_solver import BlindSolver
from errors import MazeError
from exploration import EXPLORER_NAMES, make_explorer
from omniscient_solver import OmniscientSolver
from planning import PathResult, make_pathfinder, pathfinder_names, walk_path
from simulator import MAPS, SimulatedMaze, generate_maze, load_map

logger = logging.getLogger(__name__)

# =============================================================================
# TUNABLE PARAMETERS - Adjust these to change behavior
# =============================================================================

# --- Maze ---
DEFAULT_MAP = "default"  # Built-in map used when neither --map-name nor -g is given
RANDOM_ROWS = 12  # Rows of a generated maze (-g)
RANDOM_COLS = 16  # Columns of a generated maze (-g)

# --- Execution ---
DELAY_MS = 0  # Pause before each move (ms)
PUBLISH_INTERVAL = 0.01  # Seconds between simulated sensor publications

# --- Rendering ---
CELL_SIZE = 32  # Pixels per cell for the viewer and snapshots

# --- Logging ---
LOG_LEVELS = ["debug", "info", "warning", "error"]
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s]: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mazerunner", description="Blind and omniscient maze solving"
    )
    parser.add_argument(
        "-v", "--verbosity", choices=LOG_LEVELS, default="info", help="Log level (default: info)"
    )
    parser.add_argument(
        "--map-name",
        default="",
        help=f"Built-in map ({', '.join(MAPS)}) or path to a map file",
    )
    parser.add_argument(
        "-g", "--generate", action="store_true", help="Solve a randomly generated maze"
    )
    parser.add_argument(
        "-d", "--delay", type=int, default=DELAY_MS, metavar="MS", help="Delay between moves in ms"
    )
    parser.add_argument("--show", action="store_true", help="Open a live pygame window")
    parser.add_argument(
        "--snapshot", type=Path, metavar="DIR", help="Write PNG snapshots of the result to DIR"
    )

    sub = parser.add_subparsers(dest="mode", required=True)

    omniscient = sub.add_parser("omniscient", help="Plan with the full map known up front")
    omniscient.add_argument("algorithm", help=f"One of {', '.join(pathfinder_names())}")

    blind = sub.add_parser("blind", help="Explore with sensors only, then plan")
    blind.add_argument("exploration", help=f"One of {', '.join(EXPLORER_NAMES)}")
    blind.add_argument("pathfinding", help=f"One of {', '.join(pathfinder_names())}")

    bench = sub.add_parser("benchmark", help="Run every algorithm on the same maze")
    bench.add_argument("kind", choices=["omniscient", "blind"])
    bench.add_argument("--plot", type=Path, metavar="FILE", help="Save a bar chart to FILE")

    return parser


def configure_logging(verbosity: str):
    logging.basicConfig(level=getattr(logging, verbosity.upper()), format=LOG_FORMAT)


def create_maze(args) -> SimulatedMaze:
    if args.map_name:
        grid = load_map(args.map_name)
    elif args.generate:
        grid = generate_maze(RANDOM_ROWS, RANDOM_COLS)
    else:
        grid = load_map(DEFAULT_MAP)
    logger.info("maze %dx%d", grid.height, grid.width)
    return SimulatedMaze(grid, publish_interval=PUBLISH_INTERVAL)


def print_result(label: str, result: PathResult):
    print(f"{label}: {result.steps} steps")
    if result.exploration_steps:
        print(f"  exploration steps: {result.exploration_steps}")
        print(f"  execution steps:   {result.execution_steps}")
    print(f"  planning time:  {result.planning_time:.6f}s")
    print(f"  execution time: {result.execution_time:.4f}s")
    print(f"  total time:     {result.total_time:.4f}s")


async def solve_omniscient(args, maze: SimulatedMaze, viewer=None) -> PathResult:
    solver = OmniscientSolver(make_pathfinder(args.algorithm), delay_ms=args.delay)
    start = maze.initial.find_robot()
    result = await solver.solve(maze)
    print_result(solver.pathfinder.name, result)

    route = walk_path(maze.initial, start, solver.path)
    if viewer is not None:
        viewer.update(maze.initial, route[-1], route)
    if args.snapshot is not None:
        from render import save_snapshot

        save_snapshot(maze.initial, args.snapshot / "omniscient.png", CELL_SIZE, route)
    return result


async def solve_blind(args, maze: SimulatedMaze, viewer=None) -> PathResult:
    on_step = viewer.update if viewer is not None else None
    solver = BlindSolver(
        make_explorer(args.exploration),
        make_pathfinder(args.pathfinding),
        delay_ms=args.delay,
        on_step=on_step,
    )
    result = await solver.solve(maze)
    print_result(f"{solver.explorer.name} + {solver.pathfinder.name}", result)

    route = walk_path(solver.bounded, solver.start, solver.path)
    if viewer is not None:
        viewer.update(solver.bounded, route[-1], route)
    if args.snapshot is not None:
        from render import save_snapshot

        save_snapshot(solver.discovered, args.snapshot / "discovered.png", CELL_SIZE)
        save_snapshot(solver.bounded, args.snapshot / "planned.png", CELL_SIZE, route, solver.start)
    return result


async def benchmark(args, maze: SimulatedMaze):
    if args.kind == "omniscient":
        entries = await run_omniscient_benchmark(maze, delay_ms=args.delay)
    else:
        entries = await run_blind_benchmark(maze, delay_ms=args.delay)
    print_summary(entries)
    if args.plot is not None:
        plot_benchmark(entries, args.plot, title=f"{args.kind} benchmark")
    return entries


async def main(args):
    viewer = None
    if args.show and args.mode != "benchmark":
        from render import GridViewer

        viewer = GridViewer(CELL_SIZE)

    try:
        async with create_maze(args) as maze:
            if args.mode == "omniscient":
                return await solve_omniscient(args, maze, viewer)
            if args.mode == "blind":
                return await solve_blind(args, maze, viewer)
            return await benchmark(args, maze)
    finally:
        if viewer is not None:
            viewer.close()


def run(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbosity)

    try:
        asyncio.run(main(args))
    except ValueError as e:
        # Unknown algorithm names and bad generation parameters
        parser.error(str(e))
    except MazeError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
