"""
GKMeans: generic, pluggable K-means clustering.

This package implements Lloyd's algorithm over injected components:
- a dissimilarity function (normalized Euclidean by default)
- a seeding sampler (K-means++ by default)
- a centroid calculator, vector factory and equality comparer

Example usage:
    >>> import torch
    >>> from gkmeans import KMeans
    >>>
    >>> # Generate sample data
    >>> X = torch.randn(1000, 10, dtype=torch.float64)
    >>>
    >>> # Fit K-means
    >>> kmeans = KMeans(n_clusters=5, random_state=0, verbose=1)
    >>> kmeans.fit(X)
    >>>
    >>> # Get cluster assignments
    >>> labels = kmeans.labels_
"""

__version__ = '0.1.0'

# Import main algorithms
from .algorithms.generic_kmeans import GenericKMeans, KMeansObjective
from .algorithms.kmeans import KMeans
from .algorithms.builder import ClusteringBuilder, create_kmeans

# Components
from .distances import NormalizedEuclideanDistance, EuclideanDistance, WeightedEuclideanDistance
from .initialization import KMeansPlusPlusSampler, RandomSampler, PresetSampler
from .updates import MeanCalculator
from .adapters import RecordSchema, RecordVectorAdapter, RecordKMeans

# Convenience imports
from .base import (
    ClusteringStatus,
    Cluster,
    ClusteringResult,
    AlgorithmState,
    VectorEqualityComparer,
    ZeroVectorFactory,
    ClusteringError,
    ConfigurationError,
    InputError,
    StructuralError,
    EmptyClusterError,
    DuplicateCenterError,
    TooManyClustersError,
    NumericError,
    ClusteringCancelledError,
    ConvergenceWarning
)

__all__ = [
    # Algorithms
    'GenericKMeans',
    'KMeansObjective',
    'KMeans',

    # Builder
    'ClusteringBuilder',
    'create_kmeans',

    # Components
    'NormalizedEuclideanDistance',
    'EuclideanDistance',
    'WeightedEuclideanDistance',
    'KMeansPlusPlusSampler',
    'RandomSampler',
    'PresetSampler',
    'MeanCalculator',
    'VectorEqualityComparer',
    'ZeroVectorFactory',

    # Adapters
    'RecordSchema',
    'RecordVectorAdapter',
    'RecordKMeans',

    # Core data structures
    'ClusteringStatus',
    'Cluster',
    'ClusteringResult',
    'AlgorithmState',

    # Errors
    'ClusteringError',
    'ConfigurationError',
    'InputError',
    'StructuralError',
    'EmptyClusterError',
    'DuplicateCenterError',
    'TooManyClustersError',
    'NumericError',
    'ClusteringCancelledError',
    'ConvergenceWarning',

    # Version
    '__version__'
]
