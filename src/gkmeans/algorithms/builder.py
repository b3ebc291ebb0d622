"""
Builder pattern for constructing K-means engines.

Provides a fluent interface for assembling a GenericKMeans from
interchangeable components.
"""

from typing import Optional, Union, Callable, Iterable
import torch
from torch import Tensor

from ..base.interfaces import (
    DissimilarityFunction, EqualityComparer, CentroidsCalculator,
    VectorFactory, Sampler
)
from ..base.exceptions import ConfigurationError
from ..base.vectors import VectorEqualityComparer
from ..distances.normalized_euclidean import NormalizedEuclideanDistance
from ..initialization import RandomSampler, KMeansPlusPlusSampler
from ..updates import MeanCalculator
from ..utils.validation import validate_dataset
from .generic_kmeans import GenericKMeans


class ClusteringBuilder:
    """Fluent builder for creating K-means engines.

    Examples
    --------
    >>> engine = (ClusteringBuilder()
    ...     .with_normalized_euclidean(X, features=[0, 1])
    ...     .with_kmeans_plusplus_sampler()
    ...     .with_max_iter(50)
    ...     .with_random_state(0)
    ...     .build(n_clusters=3))
    >>> result = engine.find_clusters_and_centers(X)
    """

    def __init__(self):
        """Initialize builder with defaults."""
        # Defaults
        self._dissimilarity: Optional[DissimilarityFunction] = None
        self._equality_comparer: EqualityComparer = VectorEqualityComparer()
        self._centroids_calculator: CentroidsCalculator = MeanCalculator()
        self._factory: Optional[VectorFactory] = None
        self._sampler: Optional[Sampler] = None
        self._use_kmeans_plusplus = True

        # Algorithm parameters
        self._max_iter = 100
        self._verbose = 0
        self._random_state = None
        self._should_stop = None
        self._on_cancel = 'raise'

    def with_dissimilarity(self, dissimilarity: DissimilarityFunction) -> 'ClusteringBuilder':
        """Set the dissimilarity function."""
        self._dissimilarity = dissimilarity
        return self

    def with_normalized_euclidean(self, reference: Iterable[Tensor],
                                  features: Optional[Iterable[int]] = None) -> 'ClusteringBuilder':
        """Use the normalized Euclidean distance over a reference collection."""
        reference = validate_dataset(reference, name="reference")
        if features is None:
            features = range(reference[0].shape[0])
        return self.with_dissimilarity(NormalizedEuclideanDistance(reference, features))

    def with_equality_comparer(self, comparer: EqualityComparer) -> 'ClusteringBuilder':
        """Set the vector equality comparer."""
        self._equality_comparer = comparer
        return self

    def with_centroids_calculator(self, calculator: CentroidsCalculator) -> 'ClusteringBuilder':
        """Set the centroid calculator."""
        self._centroids_calculator = calculator
        return self

    def with_mean_calculator(self) -> 'ClusteringBuilder':
        """Use the component-wise mean as centroid."""
        return self.with_centroids_calculator(MeanCalculator())

    def with_factory(self, factory: VectorFactory) -> 'ClusteringBuilder':
        """Set the vector factory."""
        self._factory = factory
        return self

    def with_sampler(self, sampler: Sampler) -> 'ClusteringBuilder':
        """Set the seeding sampler."""
        self._sampler = sampler
        self._use_kmeans_plusplus = False
        return self

    def with_kmeans_plusplus_sampler(self) -> 'ClusteringBuilder':
        """Use K-means++ seeding over the configured dissimilarity."""
        self._sampler = None
        self._use_kmeans_plusplus = True
        return self

    def with_random_sampler(self) -> 'ClusteringBuilder':
        """Use uniform random seeding."""
        return self.with_sampler(RandomSampler())

    def with_max_iter(self, max_iter: int) -> 'ClusteringBuilder':
        """Set maximum iterations."""
        self._max_iter = max_iter
        return self

    def with_verbose(self, verbose: int) -> 'ClusteringBuilder':
        """Set verbosity level."""
        self._verbose = verbose
        return self

    def with_random_state(self, random_state: Union[int, torch.Generator]) -> 'ClusteringBuilder':
        """Set random seed or generator."""
        self._random_state = random_state
        return self

    def with_cancellation(self, should_stop: Callable[[], bool],
                          on_cancel: str = 'raise') -> 'ClusteringBuilder':
        """Poll should_stop for cooperative cancellation."""
        self._should_stop = should_stop
        self._on_cancel = on_cancel
        return self

    def build(self, n_clusters: int) -> GenericKMeans:
        """Build the engine.

        Args:
            n_clusters: Number of clusters

        Returns:
            Configured GenericKMeans
        """
        if self._dissimilarity is None:
            raise ConfigurationError("dissimilarity", "must be set before build()")

        sampler = self._sampler
        if self._use_kmeans_plusplus:
            sampler = KMeansPlusPlusSampler(self._dissimilarity)

        return GenericKMeans(
            dissimilarity=self._dissimilarity,
            equality_comparer=self._equality_comparer,
            centroids_calculator=self._centroids_calculator,
            factory=self._factory,
            sampler=sampler,
            n_clusters=n_clusters,
            max_iter=self._max_iter,
            random_state=self._random_state,
            verbose=self._verbose,
            should_stop=self._should_stop,
            on_cancel=self._on_cancel
        )


def create_kmeans(reference: Iterable[Tensor], n_clusters: int,
                  features: Optional[Iterable[int]] = None,
                  **kwargs) -> GenericKMeans:
    """Create a K-means++ engine over the normalized Euclidean distance.

    Args:
        reference: Vectors used for the normalization range
        n_clusters: Number of clusters
        features: Feature indices to weigh (all if None)
        **kwargs: max_iter, random_state, verbose

    Returns:
        Configured GenericKMeans
    """
    builder = ClusteringBuilder().with_normalized_euclidean(reference, features)

    if 'max_iter' in kwargs:
        builder.with_max_iter(kwargs['max_iter'])
    if 'random_state' in kwargs:
        builder.with_random_state(kwargs['random_state'])
    if 'verbose' in kwargs:
        builder.with_verbose(kwargs['verbose'])

    return builder.build(n_clusters)
