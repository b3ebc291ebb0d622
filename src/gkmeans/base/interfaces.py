"""
Core interfaces for the generic K-means engine.

This module defines the abstract base classes for every pluggable component.
The engine only talks to these capabilities (compare, sample, calculate,
equals, create), so any combination of implementations can be injected.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, List, Dict, Any
import torch
from torch import Tensor


class DissimilarityFunction(ABC):
    """Abstract base class for pairwise dissimilarity between feature vectors.

    Lower values mean more similar objects. Implementations must not mutate
    their inputs and should be symmetric.
    """

    @abstractmethod
    def compare(self, source: Tensor, compare_to: Tensor) -> float:
        """Compute the dissimilarity between two vectors.

        Args:
            source: (d,) feature vector
            compare_to: (d,) feature vector

        Returns:
            Non-negative dissimilarity (may be +inf for incomparable vectors)
        """
        pass

    def compare_many(self, points: Tensor, other: Tensor) -> Tensor:
        """Compute dissimilarities from every row of points to one vector.

        Args:
            points: (n, d) tensor of vectors
            other: (d,) vector

        Returns:
            (n,) float64 tensor where entry i is compare(points[i], other)
        """
        return torch.tensor(
            [self.compare(point, other) for point in points],
            dtype=torch.float64
        )


class EqualityComparer(ABC):
    """Identity test over feature vectors, consistent with a hash."""

    @abstractmethod
    def equals(self, v1: Optional[Tensor], v2: Optional[Tensor]) -> bool:
        """Whether two vectors are considered the same."""
        pass

    @abstractmethod
    def hash(self, v: Tensor) -> int:
        """Hash consistent with equals: equal vectors hash equal."""
        pass


class VectorFactory(ABC):
    """Allocates fresh vectors so centroid accumulation never touches inputs."""

    @abstractmethod
    def create(self) -> Tensor:
        """Return a new zero-valued vector of the working dimension."""
        pass


class CentroidsCalculator(ABC):
    """Reduces a group of member vectors to one or more centroid candidates."""

    @abstractmethod
    def calculate(self, members: Sequence[Tensor],
                  factory: VectorFactory) -> List[Tensor]:
        """Compute centroid candidates for a cluster.

        Args:
            members: Non-empty sequence of (d,) member vectors
            factory: Source of fresh zero vectors

        Returns:
            Candidates in order of preference. The engine takes the first
            one not already claimed by another cluster.
        """
        pass


class Sampler(ABC):
    """Selects distinct representatives from a population."""

    @abstractmethod
    def get_sample(self, population: Sequence[Tensor], sample_count: int,
                   generator: Optional[torch.Generator] = None) -> List[int]:
        """Choose sample_count distinct elements.

        Args:
            population: Sequence of (d,) vectors
            sample_count: Number of elements to select
            generator: Random source owned by the caller

        Returns:
            Indices into population, pairwise distinct
        """
        pass


class ConvergenceCriterion(ABC):
    """Abstract base class for convergence checking."""

    def __init__(self):
        self.history = []

    @abstractmethod
    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if algorithm has converged.

        Args:
            current_state: Dictionary containing current algorithm state

        Returns:
            True if converged, False otherwise
        """
        pass

    def reset(self):
        """Reset convergence history."""
        self.history = []
