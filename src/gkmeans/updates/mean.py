"""
Mean centroid calculator for centroid-based clustering.
"""

from typing import List, Optional, Sequence
import torch
from torch import Tensor

from ..base.interfaces import CentroidsCalculator, VectorFactory
from ..base.exceptions import InputError, NumericError


class MeanCalculator(CentroidsCalculator):
    """Computes the component-wise mean of a cluster's members."""

    def calculate(self, members: Optional[Sequence[Tensor]],
                  factory: VectorFactory) -> List[Tensor]:
        """Average the member vectors into a fresh vector.

        Args:
            members: Vectors assigned to the cluster
            factory: Provides the zero vector to accumulate into

        Returns:
            Single-element list holding the mean vector
        """
        if members is None:
            raise InputError("members", "must not be None")

        total = factory.create()
        count = 0
        for vector in members:
            if vector.shape != total.shape:
                raise InputError("members", "vectors must match the factory dimension",
                                 f"got {tuple(vector.shape)}, expected {tuple(total.shape)}")
            total += vector
            count += 1

        if count == 0:
            raise InputError("members", "must not be empty")

        total /= count

        if not torch.isfinite(total).all():
            raise NumericError("members", "mean has a non-finite component",
                               "a member vector holds NaN or infinite values")

        return [total]
