"""
Core data structures for the generic K-means engine.

This module provides the immutable snapshots produced by the engine: one
AlgorithmState per iteration, and the final ClusteringResult partition.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple, Dict, Any, Iterator
import torch
from torch import Tensor


class ClusteringStatus(Enum):
    """Lifecycle of a clustering run."""

    SEEDING = 'seeding'
    ASSIGNING = 'assigning'
    RECOMPUTING = 'recomputing'
    CONVERGED = 'converged'
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (ClusteringStatus.CONVERGED, ClusteringStatus.EXHAUSTED,
                        ClusteringStatus.FAILED, ClusteringStatus.CANCELLED)


@dataclass(frozen=True)
class Cluster:
    """One center and the dataset elements assigned to it.

    The cluster is identified by its index (handle), not by the identity or
    value of its center tensor.
    """

    index: int
    center: Tensor
    members: Tuple[Tensor, ...]
    member_indices: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class AlgorithmState:
    """State of the engine after one assignment/recompute pass.

    Used for convergence checking and debugging.
    """
    iteration: int
    centers: Tuple[Tensor, ...]  # centers after recomputation
    labels: Tuple[int, ...]      # cluster handle per dataset element
    n_changed: int               # centers that moved in this pass
    objective_value: float

    @property
    def converged(self) -> bool:
        return self.n_changed == 0


class ClusteringResult(Mapping):
    """Final partition of a dataset, keyed by cluster handle.

    Covers every input element exactly once. Use ``items_by_center`` for the
    center -> members view.
    """

    def __init__(self,
                 clusters: List[Cluster],
                 status: ClusteringStatus,
                 n_iter: int,
                 objective: float,
                 metadata: Optional[Dict[str, Any]] = None):
        self._clusters = tuple(clusters)
        self.status = status
        self.n_iter = n_iter
        self.objective = objective
        self.metadata = dict(metadata or {})

    def __getitem__(self, index: int) -> Cluster:
        if not isinstance(index, int) or not 0 <= index < len(self._clusters):
            raise KeyError(index)
        return self._clusters[index]

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._clusters)))

    def __len__(self) -> int:
        return len(self._clusters)

    @property
    def clusters(self) -> Tuple[Cluster, ...]:
        return self._clusters

    @property
    def converged(self) -> bool:
        return self.status == ClusteringStatus.CONVERGED

    @property
    def centers(self) -> List[Tensor]:
        """Final centers in handle order."""
        return [cluster.center for cluster in self._clusters]

    @property
    def groups(self) -> List[List[Tensor]]:
        """Member lists in handle order, centers discarded."""
        return [list(cluster.members) for cluster in self._clusters]

    @property
    def labels(self) -> Tensor:
        """(n,) tensor with the cluster handle of every dataset element."""
        n_points = sum(len(cluster) for cluster in self._clusters)
        labels = torch.empty(n_points, dtype=torch.long)
        for cluster in self._clusters:
            for idx in cluster.member_indices:
                labels[idx] = cluster.index
        return labels

    def items_by_center(self) -> Iterator[Tuple[Tensor, List[Tensor]]]:
        """Yield (center, members) pairs."""
        for cluster in self._clusters:
            yield cluster.center, list(cluster.members)

    def __repr__(self) -> str:
        sizes = [len(cluster) for cluster in self._clusters]
        return (f"ClusteringResult(n_clusters={len(self)}, sizes={sizes}, "
                f"status={self.status.value}, n_iter={self.n_iter})")
