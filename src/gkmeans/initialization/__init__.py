"""Seeding strategies for the K-means engine."""

from .random import RandomSampler
from .kmeans_plusplus import KMeansPlusPlusSampler
from .from_previous import PresetSampler

__all__ = [
    'RandomSampler',
    'KMeansPlusPlusSampler',
    'PresetSampler'
]
