"""
Error taxonomy for the clustering engine.

Every error names the offending parameter and the constraint it violated.
None of them are retriable: the engine stops and returns no partial result.
"""

from typing import Optional


class ClusteringError(Exception):
    """Base class for all errors raised by gkmeans."""

    def __init__(self, parameter: str, constraint: str, detail: Optional[str] = None):
        """
        Args:
            parameter: Name of the offending parameter or component
            constraint: The constraint that was violated
            detail: Optional extra context appended to the message
        """
        self.parameter = parameter
        self.constraint = constraint
        self.detail = detail
        message = f"{parameter}: {constraint}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConfigurationError(ClusteringError, ValueError):
    """Invalid algorithm configuration (cluster count, iterations, features)."""


class InputError(ClusteringError, ValueError):
    """Invalid input data (missing, empty or inconsistent vectors)."""


class StructuralError(ClusteringError, RuntimeError):
    """The clustering reached an inconsistent state between iterations."""


class EmptyClusterError(StructuralError):
    """A cluster ended an assignment pass without members."""


class DuplicateCenterError(StructuralError):
    """Two clusters collapsed to the same recomputed center."""


class TooManyClustersError(StructuralError, ConfigurationError):
    """More clusters requested than the dataset has elements.

    Raised before seeding. Also a ConfigurationError.
    """


class NumericError(ClusteringError, ArithmeticError):
    """A centroid computation produced a non-finite component."""


class ClusteringCancelledError(ClusteringError):
    """The caller requested cancellation through ``should_stop``."""


class ConvergenceWarning(UserWarning):
    """Emitted when the iteration budget runs out before convergence."""
