"""Base classes and interfaces for the generic K-means engine."""

from .interfaces import (
    DissimilarityFunction,
    EqualityComparer,
    VectorFactory,
    CentroidsCalculator,
    Sampler,
    ConvergenceCriterion
)

from .data_structures import (
    ClusteringStatus,
    Cluster,
    ClusteringResult,
    AlgorithmState
)

from .exceptions import (
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

from .vectors import VectorEqualityComparer, ZeroVectorFactory

from .clustering_base import BaseClusteringAlgorithm

__all__ = [
    # Interfaces
    'DissimilarityFunction',
    'EqualityComparer',
    'VectorFactory',
    'CentroidsCalculator',
    'Sampler',
    'ConvergenceCriterion',

    # Data structures
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

    # Vector helpers
    'VectorEqualityComparer',
    'ZeroVectorFactory',

    # Base algorithm
    'BaseClusteringAlgorithm'
]
