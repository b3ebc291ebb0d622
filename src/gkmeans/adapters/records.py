"""
Record adapter for clustering structured data.

Exposes records with named numeric features (dicts or any mapping) as
feature vectors, clusters them, and maps the groups back to the original
records. Centers are written into newly created records.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import torch
from torch import Tensor

from ..base.exceptions import ConfigurationError, InputError
from ..utils.validation import check_n_clusters
from ..algorithms.builder import create_kmeans


class RecordSchema:
    """Ordered feature names shared by every record of a dataset."""

    def __init__(self, feature_names: Sequence[str]):
        feature_names = list(feature_names)
        if not feature_names:
            raise ConfigurationError("feature_names", "must not be empty")
        if len(set(feature_names)) != len(feature_names):
            raise ConfigurationError("feature_names", "must be unique")
        self.feature_names = feature_names

    def __len__(self) -> int:
        return len(self.feature_names)

    def index_of(self, name: str) -> int:
        try:
            return self.feature_names.index(name)
        except ValueError:
            raise ConfigurationError("feature", "must be one of the schema features",
                                     f"unknown feature {name!r}") from None


class RecordVectorAdapter:
    """Converts between records and feature vectors, preserving feature order."""

    def __init__(self, schema: RecordSchema, dtype: torch.dtype = torch.float64):
        self.schema = schema
        self.dtype = dtype

    def to_vector(self, record: Mapping[str, Any]) -> Tensor:
        values = []
        for name in self.schema.feature_names:
            if name not in record:
                raise InputError("record", "must provide every schema feature",
                                 f"missing {name!r}")
            try:
                values.append(float(record[name]))
            except (TypeError, ValueError) as exc:
                raise InputError("record", "feature values must be numeric",
                                 f"{name!r}: {exc}") from exc
        return torch.tensor(values, dtype=self.dtype)

    def to_vectors(self, records: Sequence[Mapping[str, Any]]) -> List[Tensor]:
        return [self.to_vector(record) for record in records]

    def to_record(self, vector: Tensor,
                  record_factory: Callable[[], Dict[str, Any]] = dict) -> Dict[str, Any]:
        """Write vector values into a newly created record."""
        if vector.shape[0] != len(self.schema):
            raise InputError("vector", "length must match the schema",
                             f"got {vector.shape[0]}, expected {len(self.schema)}")
        record = record_factory()
        for name, value in zip(self.schema.feature_names, vector.tolist()):
            record[name] = value
        return record


class RecordKMeans:
    """K-means++ over records, returning groups of the original records.

    Parameters
    ----------
    schema : RecordSchema or sequence of str
        Features to read from each record
    n_clusters : int, default=2
        Number of clusters
    max_iter : int, default=100
        Maximum number of iterations
    features : sequence of str, optional
        Names of the features the distance weighs. All if None.
    random_state : int or torch.Generator, optional
        Random seed for reproducibility
    record_factory : callable, default=dict
        Creates the records that receive center values
    """

    def __init__(self,
                 schema: Union[RecordSchema, Sequence[str]],
                 n_clusters: int = 2,
                 max_iter: int = 100,
                 features: Optional[Sequence[str]] = None,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 record_factory: Callable[[], Dict[str, Any]] = dict):
        if not isinstance(schema, RecordSchema):
            schema = RecordSchema(schema)
        self.schema = schema
        self.adapter = RecordVectorAdapter(schema)
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.features = features
        self.random_state = random_state
        self.record_factory = record_factory

    def _feature_indices(self) -> List[int]:
        if self.features is None:
            return list(range(len(self.schema)))
        return [self.schema.index_of(name) for name in self.features]

    def find_clusters_and_centers(self, records: Sequence[Mapping[str, Any]]
                                  ) -> List[Tuple[Dict[str, Any], List[Mapping[str, Any]]]]:
        """Cluster records.

        Returns:
            One (center_record, member_records) pair per cluster
        """
        if records is None:
            raise InputError("records", "must not be None")
        records = list(records)
        if not records:
            raise InputError("records", "must not be empty")
        check_n_clusters(self.n_clusters, len(records))

        vectors = self.adapter.to_vectors(records)
        engine = create_kmeans(vectors, self.n_clusters,
                               features=self._feature_indices(),
                               max_iter=self.max_iter,
                               random_state=self.random_state)
        result = engine.find_clusters_and_centers(vectors)

        return [
            (self.adapter.to_record(cluster.center, self.record_factory),
             [records[idx] for idx in cluster.member_indices])
            for cluster in result.clusters
        ]

    def find_clusters(self, records: Sequence[Mapping[str, Any]]) -> List[List[Mapping[str, Any]]]:
        """Cluster records and return the groups only."""
        return [members for _, members in self.find_clusters_and_centers(records)]
