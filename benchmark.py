# Benchmarks: run every algorithm against the same maze
# Mazerunner, blind & omniscient maze solving

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from blind_solver import BlindSolver
from errors import MazeError
from exploration import EXPLORER_NAMES, make_explorer
from omniscient_solver import OmniscientSolver
from planning import PathResult, make_pathfinder, pathfinder_names
from transport import Transport

logger = logging.getLogger(__name__)

# Seconds to let the maze settle between algorithms
BENCHMARK_SETTLE = 0.5
# Route planner used after each blind exploration
BLIND_PATHFINDER = "astar"


@dataclass
class BenchmarkEntry:
    name: str
    result: Optional[PathResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


async def _between_runs(transport: Transport, settle: float):
    await transport.reset(False, "")
    if settle > 0:
        await asyncio.sleep(settle)


async def run_omniscient_benchmark(
    transport: Transport, settle: float = BENCHMARK_SETTLE, delay_ms: int = 0
) -> list[BenchmarkEntry]:
    entries = []
    for i, name in enumerate(pathfinder_names()):
        if i > 0:
            await _between_runs(transport, settle)
        solver = OmniscientSolver(make_pathfinder(name), delay_ms=delay_ms)
        logger.info("benchmarking %s", solver.pathfinder.name)
        try:
            result = await solver.solve(transport)
        except MazeError as e:
            logger.error("%s failed: %s", solver.pathfinder.name, e)
            entries.append(BenchmarkEntry(solver.pathfinder.name, error=str(e)))
            continue
        entries.append(BenchmarkEntry(solver.pathfinder.name, result))
    return entries


async def run_blind_benchmark(
    transport: Transport,
    settle: float = BENCHMARK_SETTLE,
    delay_ms: int = 0,
    pathfinder: str = BLIND_PATHFINDER,
    **solver_kwargs,
) -> list[BenchmarkEntry]:
    """Every explorer paired with one route planner."""
    entries = []
    for i, name in enumerate(EXPLORER_NAMES):
        if i > 0:
            await _between_runs(transport, settle)
        solver = BlindSolver(
            make_explorer(name), make_pathfinder(pathfinder), delay_ms=delay_ms, **solver_kwargs
        )
        label = f"{solver.explorer.name} + {solver.pathfinder.name}"
        logger.info("benchmarking %s", label)
        try:
            result = await solver.solve(transport)
        except MazeError as e:
            logger.error("%s failed: %s", label, e)
            entries.append(BenchmarkEntry(label, error=str(e)))
            continue
        entries.append(BenchmarkEntry(label, result))
    return entries


def best_entry(entries: list[BenchmarkEntry]) -> Optional[BenchmarkEntry]:
    """Fewest total steps; earlier entries win ties."""
    ok = [e for e in entries if e.ok]
    return min(ok, key=lambda e: e.result.steps) if ok else None


def fastest_entry(entries: list[BenchmarkEntry]) -> Optional[BenchmarkEntry]:
    ok = [e for e in entries if e.ok]
    return min(ok, key=lambda e: e.result.total_time) if ok else None


def format_summary(entries: list[BenchmarkEntry]) -> str:
    lines = [
        f"{'Algorithm':<40} {'Steps':>6} {'Explore':>8} {'Plan (s)':>10} {'Exec (s)':>10}",
        "-" * 78,
    ]
    for e in entries:
        if e.ok:
            r = e.result
            lines.append(
                f"{e.name:<40} {r.steps:>6} {r.exploration_steps:>8} "
                f"{r.planning_time:>10.6f} {r.execution_time:>10.4f}"
            )
        else:
            lines.append(f"{e.name:<40} FAILED: {e.error}")

    best = best_entry(entries)
    fastest = fastest_entry(entries)
    lines.append("")
    if best is None:
        lines.append("No algorithm reached the target")
    else:
        lines.append(f"Best (fewest steps): {best.name} ({best.result.steps} steps)")
        lines.append(f"Fastest: {fastest.name} ({fastest.result.total_time:.4f}s)")
    return "\n".join(lines)


def print_summary(entries: list[BenchmarkEntry]):
    print(format_summary(entries))


def plot_benchmark(entries: list[BenchmarkEntry], filename, title="Benchmark"):
    """Bar chart of step counts and total time per algorithm."""
    ok = [e for e in entries if e.ok]
    names = [e.name for e in ok]
    steps = [e.result.steps for e in ok]
    times = [e.result.total_time for e in ok]

    fig, (ax_steps, ax_time) = plt.subplots(1, 2, figsize=(12, 5))
    ax_steps.bar(names, steps, color="tab:blue")
    ax_steps.set_title("Total steps")
    ax_steps.set_ylabel("steps")
    ax_time.bar(names, times, color="tab:orange")
    ax_time.set_title("Total time")
    ax_time.set_ylabel("seconds")
    for ax in (ax_steps, ax_time):
        ax.tick_params(axis="x", labelrotation=20)
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)
    logger.info("saved benchmark chart to %s", filename)
