"""Error taxonomy for the Super Bowl pipeline.

All core components fail fast with one of these. The CLI layer is the only
place that catches them for display.
"""

from typing import Optional, Sequence


class SBQuantError(Exception):
    """Base class for pipeline errors."""
    pass


class InputError(SBQuantError):
    """Raised for malformed input: bad raw fields, length mismatches, zero-game records."""

    def __init__(
        self,
        message: str,
        year: Optional[int] = None,
        team: Optional[str] = None,
    ):
        self.year = year
        self.team = team
        if year is not None or team is not None:
            message = f"{message} (year={year}, team={team})"
        super().__init__(message)


class NumericalError(SBQuantError):
    """Raised when the regression design matrix is singular or near-singular."""

    def __init__(self, message: str, features: Optional[Sequence[str]] = None):
        self.features = list(features) if features is not None else []
        if self.features:
            message = f"{message}; features={self.features}"
        super().__init__(message)


class StateError(SBQuantError):
    """Raised on programming errors: predicting before fit, feature-count mismatch."""
    pass
