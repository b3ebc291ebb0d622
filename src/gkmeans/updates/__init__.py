"""Centroid calculators for the K-means engine."""

from .mean import MeanCalculator

__all__ = [
    'MeanCalculator'
]
