"""
K-means clustering algorithm.

K-means++ seeded K-means over the normalized Euclidean distance, assembled
from the generic engine's components.
"""

from typing import Optional, List, Sequence, Union
import torch
from torch import Tensor

from ..base.clustering_base import BaseClusteringAlgorithm
from ..base.interfaces import Sampler
from ..base.data_structures import ClusteringResult
from ..base.exceptions import ConfigurationError
from ..base.vectors import VectorEqualityComparer, ZeroVectorFactory
from ..distances.normalized_euclidean import NormalizedEuclideanDistance
from ..initialization.kmeans_plusplus import KMeansPlusPlusSampler
from ..initialization.random import RandomSampler
from ..initialization.from_previous import PresetSampler
from ..updates.mean import MeanCalculator
from ..utils.validation import validate_dataset, DatasetLike
from .generic_kmeans import GenericKMeans


class KMeans(BaseClusteringAlgorithm):
    """K-means clustering algorithm.

    Classic K-means that partitions data into K clusters, using the
    normalized Euclidean distance so that features on different scales
    weigh equally.

    Parameters
    ----------
    n_clusters : int, default=2
        Number of clusters
    init : str or sequence of int, default='k-means++'
        Seeding method:
        - 'k-means++' : K-means++ seeding
        - 'random' : Uniform random seeding
        - sequence of n_clusters indices : Use those rows as initial centers
    max_iter : int, default=100
        Maximum number of iterations
    features : sequence of int, optional
        Feature indices the distance weighs. All features if None.
    verbose : int, default=0
        Verbosity level
    random_state : int or torch.Generator, optional
        Random seed for reproducibility

    Attributes
    ----------
    cluster_centers_ : Tensor of shape (n_clusters, n_features)
        Cluster centroids
    labels_ : Tensor of shape (n_samples,)
        Cluster assignments for training data
    inertia_ : float
        Sum of distances to the assigned cluster center
    n_iter_ : int
        Number of iterations run
    result_ : ClusteringResult
        Full partition of the training data
    """

    def __init__(self,
                 n_clusters: int = 2,
                 init: Union[str, Sequence[int]] = 'k-means++',
                 max_iter: int = 100,
                 features: Optional[Sequence[int]] = None,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None):
        """Initialize K-means algorithm."""
        super().__init__(
            n_clusters=n_clusters,
            max_iter=max_iter,
            verbose=verbose,
            random_state=random_state
        )
        self.init = init
        self.features = features

        self.dissimilarity_: Optional[NormalizedEuclideanDistance] = None
        self.engine_: Optional[GenericKMeans] = None
        self.result_: Optional[ClusteringResult] = None
        self.labels_ = None
        self.cluster_centers_ = None
        self.inertia_ = None

    def _create_sampler(self, dissimilarity: NormalizedEuclideanDistance) -> Sampler:
        if isinstance(self.init, str):
            if self.init == 'k-means++':
                return KMeansPlusPlusSampler(dissimilarity)
            elif self.init == 'random':
                return RandomSampler()
            else:
                raise ConfigurationError("init", "must be 'k-means++', 'random' or a list of indices",
                                         f"got {self.init!r}")
        return PresetSampler(self.init)

    def _create_engine(self, vectors: List[Tensor]) -> GenericKMeans:
        """Create K-means specific components."""
        dimension = vectors[0].shape[0]
        features = self.features if self.features is not None else range(dimension)

        dissimilarity = NormalizedEuclideanDistance(vectors, features)
        self.dissimilarity_ = dissimilarity

        return GenericKMeans(
            dissimilarity=dissimilarity,
            equality_comparer=VectorEqualityComparer(),
            centroids_calculator=MeanCalculator(),
            factory=ZeroVectorFactory(dimension),
            sampler=self._create_sampler(dissimilarity),
            n_clusters=self.n_clusters,
            max_iter=self.max_iter,
            random_state=self.random_state,
            verbose=self.verbose
        )

    def fit(self, X: DatasetLike, y=None) -> 'KMeans':
        """Fit K-means clustering.

        Parameters
        ----------
        X : Tensor of shape (n_samples, n_features)
            Training data
        y : Ignored
            Not used, present for API consistency

        Returns
        -------
        self : KMeans
            Fitted estimator
        """
        self._check_params()
        vectors = validate_dataset(X)
        self._check_params(n_samples=len(vectors))

        self.engine_ = self._create_engine(vectors)
        result = self.engine_.find_clusters_and_centers(vectors)

        self.result_ = result
        self.labels_ = result.labels
        self.cluster_centers_ = torch.stack(result.centers)
        self.inertia_ = result.objective
        self.n_iter_ = result.n_iter
        self.status_ = result.status
        self.history_ = self.engine_.history_
        self.generator_ = self.engine_.generator_
        self.fitted_ = True
        return self

    def fit_predict(self, X: DatasetLike, y=None) -> Tensor:
        """Fit and return labels of the training data."""
        self.fit(X, y)
        return self.labels_

    def predict(self, X: DatasetLike) -> Tensor:
        """Predict the closest cluster for each sample.

        Parameters
        ----------
        X : Tensor of shape (n_samples, n_features)
            New data to predict

        Returns
        -------
        labels : Tensor of shape (n_samples,)
            Cluster labels
        """
        if not self.fitted_:
            raise RuntimeError("Model must be fitted before calling predict")

        points = torch.stack(validate_dataset(X))
        distances = torch.stack([
            self.dissimilarity_.compare_many(points, center)
            for center in self.cluster_centers_
        ], dim=1)
        return torch.argmin(distances, dim=1)

    def score(self, X: DatasetLike, y=None) -> float:
        """Opposite of the K-means objective of X under the fitted centers."""
        points = torch.stack(validate_dataset(X))
        labels = self.predict(points)
        return -self.engine_.objective.compute(points, list(self.cluster_centers_), labels)

    def get_params(self, deep: bool = True):
        params = super().get_params(deep)
        params.update({'init': self.init, 'features': self.features})
        return params
