# Maze Solving Errors
# Mazerunner, blind & omniscient maze solving


class MazeError(Exception):
    """Base class for every failure a solve can end with."""


class ShapeError(MazeError):
    """Grid dimensions and flattened cell count disagree."""


class NotFoundError(MazeError):
    """Robot, target or observed terrain missing where planning needs it."""


class UnreachableError(MazeError):
    """No path exists between start and target."""


class MoveFailure(MazeError):
    def __init__(self, step: int, direction, phase: str = "move"):
        self.step = step
        self.direction = direction
        self.phase = phase
        super().__init__(f"{phase} failed at step {step}: {direction}")


class SurroundedError(MazeError):
    """Exploration has no legal move left."""


class LoopGuardError(MazeError):
    def __init__(self, steps: int):
        self.steps = steps
        super().__init__(f"too many steps ({steps}) - possible infinite loop")


class ChannelClosed(MazeError):
    """The sensor stream ended."""
