"""
Normalized Euclidean distance.

Each feature difference is scaled by the feature's observed range
(max - min) in a reference collection before the Euclidean norm is taken.
The range covers every feature of the vectors, not only the weighted ones,
so several metrics over different feature subsets can share one range.
"""

from typing import Iterable, List, Optional, Sequence
import torch
from torch import Tensor

from ..base.interfaces import DissimilarityFunction
from ..base.exceptions import ConfigurationError, InputError
from ..utils.validation import validate_dataset


class NormalizedEuclideanDistance(DissimilarityFunction):
    """Euclidean distance over selected features, normalized by feature range.

    Computes sqrt(sum_{i in F, r_i > 0} (|a_i - b_i| / r_i)²) where r is the
    per-feature range of the reference vectors and F the selected features.
    Features that are constant in the reference set (r_i = 0) are ignored.

    Examples
    --------
    >>> metric = NormalizedEuclideanDistance([[0., 0.], [10., 10.]], [0, 1])
    >>> metric.compare(torch.tensor([0., 0.]), torch.tensor([10., 10.]))
    1.4142135623730951
    """

    def __init__(self, vectors: Iterable[Tensor], features: Iterable[int]):
        """
        Args:
            vectors: Reference collection used to compute feature ranges
            features: Indices of the features to weight

        Raises:
            ConfigurationError: If features is None, empty or out of range
            InputError: If vectors is None, empty or of mixed lengths
        """
        features = self._check_features(features)

        if vectors is None:
            raise InputError("vectors", "must not be None")
        reference = torch.stack(validate_dataset(vectors, name="vectors"))

        max_values = reference.max(dim=0).values
        min_values = reference.min(dim=0).values
        self._init_from_ranges(max_values - min_values, features)

    @classmethod
    def _from_ranges(cls, feature_ranges: Tensor,
                     features: Iterable[int]) -> 'NormalizedEuclideanDistance':
        metric = cls.__new__(cls)
        metric._init_from_ranges(feature_ranges, cls._check_features(features))
        return metric

    @classmethod
    def create_distances(cls, vectors: Iterable[Tensor],
                         collection_of_features: Optional[Iterable[Iterable[int]]]
                         ) -> List['NormalizedEuclideanDistance']:
        """Build one metric per feature subset, all sharing one range.

        The range is computed once, while building the first metric, and
        reused unchanged for every other metric in the batch.

        Args:
            vectors: Reference collection
            collection_of_features: One feature-index collection per metric

        Returns:
            Metrics in the order of collection_of_features
        """
        if collection_of_features is None:
            raise ConfigurationError("collection_of_features", "must not be None")

        distances = []
        for features in collection_of_features:
            if not distances:
                distances.append(cls(vectors, features))
            else:
                distances.append(cls._from_ranges(distances[0]._feature_ranges, features))
        return distances

    @staticmethod
    def _check_features(features: Optional[Iterable[int]]) -> List[int]:
        if features is None:
            raise ConfigurationError("features", "must not be None")
        features = [int(i) for i in features]
        if len(features) == 0:
            raise ConfigurationError("features", "must not be empty")
        return features

    def _init_from_ranges(self, feature_ranges: Tensor, features: List[int]) -> None:
        length = feature_ranges.shape[0]
        for i in features:
            if not 0 <= i < length:
                raise ConfigurationError("features", "indices must lie within the vector length",
                                         f"index {i}, length {length}")

        self._feature_ranges = feature_ranges
        self._features = features

        # Precomputed selection of features that can contribute.
        index = torch.tensor(features, dtype=torch.long)
        positive = feature_ranges[index] > 0
        self._active_index = index[positive]
        self._active_ranges = feature_ranges[self._active_index]

    @property
    def feature_ranges(self) -> Tensor:
        """Per-feature (max - min) of the reference collection (a copy)."""
        return self._feature_ranges.clone()

    @property
    def features(self) -> List[int]:
        """Weighted feature indices."""
        return list(self._features)

    def shares_ranges_with(self, other: 'NormalizedEuclideanDistance') -> bool:
        """Whether both metrics hold the very same range tensor."""
        return self._feature_ranges is other._feature_ranges

    def _check_length(self, v: Tensor, name: str) -> None:
        if v.shape[-1] != self._feature_ranges.shape[0]:
            raise InputError(name, "vector length must match the normalization range",
                             f"got {v.shape[-1]}, expected {self._feature_ranges.shape[0]}")

    def compare(self, source: Tensor, compare_to: Tensor) -> float:
        """Compute the normalized Euclidean distance between two vectors."""
        self._check_length(source, "source")
        self._check_length(compare_to, "compare_to")

        diff = (source[self._active_index] - compare_to[self._active_index]).abs()
        normalized = diff.to(torch.float64) / self._active_ranges.to(torch.float64)
        return float(torch.sqrt(torch.sum(normalized * normalized)))

    def compare_many(self, points: Tensor, other: Tensor) -> Tensor:
        """Vectorised compare of every row of points against one vector."""
        self._check_length(points, "points")
        self._check_length(other, "other")

        diff = (points[:, self._active_index] - other[self._active_index].unsqueeze(0)).abs()
        normalized = diff.to(torch.float64) / self._active_ranges.to(torch.float64).unsqueeze(0)
        return torch.sqrt(torch.sum(normalized * normalized, dim=1))

    def __repr__(self) -> str:
        return (f"NormalizedEuclideanDistance(features={self._features}, "
                f"dimension={self._feature_ranges.shape[0]})")
