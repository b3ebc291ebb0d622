"""
Euclidean distance metrics.

Plain (optionally weighted) Euclidean distance, for data that is already on
a common scale.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import DissimilarityFunction
from ..base.exceptions import ConfigurationError, InputError


class EuclideanDistance(DissimilarityFunction):
    """Euclidean distance metric.

    Computes ||x - y|| or, with squared=True, ||x - y||².
    """

    def __init__(self, squared: bool = False):
        """
        Args:
            squared: If True, return squared distances.
                    If False (default), return actual Euclidean distances.
        """
        self.squared = squared

    def compare(self, source: Tensor, compare_to: Tensor) -> float:
        if source.shape != compare_to.shape:
            raise InputError("compare_to", "vectors must have the same length",
                             f"{source.shape[0]} != {compare_to.shape[0]}")
        diff = (source - compare_to).to(torch.float64)
        squared_distance = torch.sum(diff * diff)

        if self.squared:
            return float(squared_distance)
        else:
            return float(torch.sqrt(squared_distance))

    def compare_many(self, points: Tensor, other: Tensor) -> Tensor:
        diff = (points - other.unsqueeze(0)).to(torch.float64)
        squared_distances = torch.sum(diff * diff, dim=1)

        if self.squared:
            return squared_distances
        else:
            return torch.sqrt(squared_distances)


class WeightedEuclideanDistance(DissimilarityFunction):
    """Weighted Euclidean distance with feature weights.

    Computes sqrt(sum_i w_i * (x_i - y_i)²) where w_i are feature weights.
    """

    def __init__(self, weights: Tensor, squared: bool = False):
        """
        Args:
            weights: (d,) tensor of non-negative feature weights
            squared: Whether to return squared distances
        """
        weights = torch.as_tensor(weights, dtype=torch.float64)
        if weights.dim() != 1 or (weights < 0).any():
            raise ConfigurationError("weights", "must be a 1D tensor of non-negative values")
        self.weights = weights
        self.squared = squared

    def compare(self, source: Tensor, compare_to: Tensor) -> float:
        return float(self.compare_many(source.unsqueeze(0), compare_to)[0])

    def compare_many(self, points: Tensor, other: Tensor) -> Tensor:
        if points.shape[1] != self.weights.shape[0] or other.shape[0] != self.weights.shape[0]:
            raise InputError("points", "vector length must match the weights",
                             f"expected {self.weights.shape[0]}")
        diff = (points - other.unsqueeze(0)).to(torch.float64)
        squared_distances = torch.sum(self.weights.unsqueeze(0) * diff * diff, dim=1)

        if self.squared:
            return squared_distances
        else:
            return torch.sqrt(squared_distances)
