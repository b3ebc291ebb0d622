"""Dissimilarity functions for the K-means engine."""

from .normalized_euclidean import NormalizedEuclideanDistance
from .euclidean import EuclideanDistance, WeightedEuclideanDistance

__all__ = [
    'NormalizedEuclideanDistance',
    'EuclideanDistance',
    'WeightedEuclideanDistance'
]
