"""
Vector identity and allocation helpers.
"""

from typing import Optional
import torch
from torch import Tensor

from .interfaces import EqualityComparer, VectorFactory
from .exceptions import ConfigurationError


class VectorEqualityComparer(EqualityComparer):
    """Exact component-wise equality between vectors of equal length."""

    def equals(self, v1: Optional[Tensor], v2: Optional[Tensor]) -> bool:
        if v1 is None and v2 is None:
            return True
        if v1 is None or v2 is None or v1.shape != v2.shape:
            return False
        return bool(torch.equal(v1, v2))

    def hash(self, v: Tensor) -> int:
        # Every component, in order. 0.0 and -0.0 compare and hash equal.
        return hash(tuple(v.tolist()))


class ZeroVectorFactory(VectorFactory):
    """Creates zero vectors of a fixed dimension."""

    def __init__(self, dimension: int, dtype: torch.dtype = torch.float64):
        """
        Args:
            dimension: Length of the vectors to create
            dtype: Tensor dtype of the vectors
        """
        if dimension < 1:
            raise ConfigurationError("dimension", "must be at least 1",
                                     f"got {dimension}")
        self.dimension = dimension
        self.dtype = dtype

    def create(self) -> Tensor:
        return torch.zeros(self.dimension, dtype=self.dtype)

    def __repr__(self) -> str:
        return f"ZeroVectorFactory(dimension={self.dimension}, dtype={self.dtype})"
