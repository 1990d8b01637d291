"""Exception types raised by the matchday engine.

All engine errors are caller-input errors: they are raised before any result
is returned and carry an HTTP-style status hint for the calling layer.
"""


class EngineError(ValueError):
    """Base class for invalid input passed to the engine."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class SchedulingError(EngineError):
    """Invalid team list, anchor index or schedule structure."""


class TeamError(EngineError):
    """Invalid team configuration, roster or allocation method."""


class RankingError(EngineError):
    """Invalid input to points, ranking or ELO computation."""
