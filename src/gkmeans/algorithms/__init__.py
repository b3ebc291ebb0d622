"""Clustering algorithm implementations."""

from .generic_kmeans import GenericKMeans, KMeansObjective
from .kmeans import KMeans
from .builder import ClusteringBuilder, create_kmeans

__all__ = [
    'GenericKMeans',
    'KMeansObjective',
    'KMeans',
    'ClusteringBuilder',
    'create_kmeans'
]
