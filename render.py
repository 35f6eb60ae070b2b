# Maze Rendering: pygame drawing for bounded and discovered grids
# Mazerunner, blind & omniscient maze solving

import logging
from pathlib import Path
from typing import Iterable, Optional

import pygame

from cells import Cell, Position, UnboundedPosition
from maze_grid import BoundedGrid, UnboundedGrid

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GREEN = (0, 200, 0)
PURPLE = (102, 0, 204)
BLUE = (102, 178, 255)
FOG_GRAY = (90, 90, 90)
GRID_LINE_COLOR = (200, 200, 200)

CELL_COLORS = {
    Cell.FREE: WHITE,
    Cell.BLOCKED: BLACK,
    Cell.TARGET: GREEN,
    Cell.ROBOT: WHITE,
    Cell.UNKNOWN: FOG_GRAY,
}

CELL_SIZE = 32
INSET = 2
VIEWER_FPS = 30


def _draw_cell(surface, x, y, cell_size, cell: Cell):
    pygame.draw.rect(surface, CELL_COLORS[cell], (x, y, cell_size, cell_size))


def _draw_path_cell(surface, x, y, cell_size):
    pygame.draw.rect(
        surface,
        BLUE,
        (x + INSET, y + INSET, cell_size - 2 * INSET, cell_size - 2 * INSET),
    )


def _draw_robot(surface, x, y, cell_size):
    cx = x + cell_size // 2
    cy = y + cell_size // 2
    pygame.draw.circle(surface, PURPLE, (cx, cy), max(1, cell_size // 2 - INSET))


def _draw_grid_lines(surface, rows, cols, cell_size):
    w = cols * cell_size
    h = rows * cell_size
    for c in range(cols + 1):
        x = c * cell_size
        pygame.draw.line(surface, GRID_LINE_COLOR, (x, 0), (x, h), 1)
    for r in range(rows + 1):
        y = r * cell_size
        pygame.draw.line(surface, GRID_LINE_COLOR, (0, y), (w, y), 1)


def render_grid(
    surface,
    grid: BoundedGrid,
    cell_size: int = CELL_SIZE,
    path_cells: Iterable[Position] = (),
    robot: Optional[Position] = None,
):
    """
    Draw a bounded grid with an optional route overlay.

    The robot is drawn at `robot` if given, otherwise wherever the grid
    tags a ROBOT cell.
    """
    surface.fill(WHITE)
    for r in range(grid.height):
        y = r * cell_size
        for c in range(grid.width):
            _draw_cell(surface, c * cell_size, y, cell_size, Cell(int(grid.cells[r, c])))

    for r, c in path_cells:
        _draw_path_cell(surface, c * cell_size, r * cell_size, cell_size)

    if robot is None:
        robot = grid.find_robot()
    if robot is not None:
        _draw_robot(surface, robot[1] * cell_size, robot[0] * cell_size, cell_size)

    _draw_grid_lines(surface, grid.height, grid.width, cell_size)


def render_unbounded(
    surface,
    grid: UnboundedGrid,
    cell_size: int = CELL_SIZE,
    robot: Optional[UnboundedPosition] = None,
):
    """Draw the discovered part of an unbounded grid, fogging what was never seen."""
    surface.fill(FOG_GRAY)
    bounds = grid.get_bounds()
    if bounds is None:
        return
    min_row, max_row, min_col, max_col = bounds

    for (row, col), cell in grid.cells.items():
        x = (col - min_col) * cell_size
        y = (row - min_row) * cell_size
        _draw_cell(surface, x, y, cell_size, cell)
        if cell == Cell.ROBOT and robot is None:
            _draw_robot(surface, x, y, cell_size)

    if robot is not None:
        _draw_robot(
            surface,
            (robot[1] - min_col) * cell_size,
            (robot[0] - min_row) * cell_size,
            cell_size,
        )

    _draw_grid_lines(surface, max_row - min_row + 1, max_col - min_col + 1, cell_size)


def _surface_size(grid, cell_size) -> tuple[int, int]:
    if isinstance(grid, BoundedGrid):
        return grid.width * cell_size, grid.height * cell_size
    bounds = grid.get_bounds()
    if bounds is None:
        return cell_size, cell_size
    min_row, max_row, min_col, max_col = bounds
    return (max_col - min_col + 1) * cell_size, (max_row - min_row + 1) * cell_size


def save_snapshot(
    grid,
    filename,
    cell_size: int = CELL_SIZE,
    path_cells: Iterable[Position] = (),
    robot=None,
) -> Path:
    """Draw a bounded or discovered grid offscreen and save it as an image."""
    surface = pygame.Surface(_surface_size(grid, cell_size))
    if isinstance(grid, BoundedGrid):
        render_grid(surface, grid, cell_size, path_cells, robot)
    else:
        render_unbounded(surface, grid, cell_size, robot)

    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)
    pygame.image.save(surface, str(filename))
    logger.debug("saved snapshot %s", filename)
    return filename


class GridViewer:
    """Live window following the robot; resizes as the discovered grid grows."""

    def __init__(self, cell_size: int = CELL_SIZE, caption: str = "Mazerunner"):
        pygame.init()
        pygame.display.set_caption(caption)
        self.cell_size = cell_size
        self.screen = None
        self.clock = pygame.time.Clock()
        self.closed = False

    def _ensure_screen(self, size):
        if self.screen is None or self.screen.get_size() != size:
            self.screen = pygame.display.set_mode(size)

    def update(self, grid, robot=None, path_cells: Iterable[Position] = ()):
        if self.closed:
            return
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.close()
                return

        self._ensure_screen(_surface_size(grid, self.cell_size))
        if isinstance(grid, BoundedGrid):
            render_grid(self.screen, grid, self.cell_size, path_cells, robot)
        else:
            render_unbounded(self.screen, grid, self.cell_size, robot)
        pygame.display.flip()
        self.clock.tick(VIEWER_FPS)

    def close(self):
        if not self.closed:
            self.closed = True
            pygame.quit()
