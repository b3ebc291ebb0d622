# tests/utils.py
"""
Small, reusable helpers used across the gkmeans test suite.

Functions:
- as_point_sets(groups): member groups as a set of frozensets of tuples.
- perm_invariant_accuracy(y_pred, y_true): best accuracy over label permutations.
- assert_partition(result, n_points, n_clusters): the partition law.
"""

from __future__ import annotations

import itertools
from typing import FrozenSet, Iterable, Sequence, Set, Tuple

import numpy as np
import torch


def as_point_sets(groups: Iterable[Sequence[torch.Tensor]]) -> Set[FrozenSet[Tuple[float, ...]]]:
    """Groups of vectors as a set of frozensets, ignoring order and centers."""
    return {
        frozenset(tuple(v.tolist()) for v in group)
        for group in groups
    }


def perm_invariant_accuracy(y_pred, y_true) -> float:
    """
    Best accuracy over all relabelings of y_pred.

    Brute force over permutations; tests keep K small.
    """
    y_pred = np.asarray(y_pred)
    y_true = np.asarray(y_true)
    labels = np.unique(np.concatenate([y_pred, y_true]))
    best = 0.0
    for perm in itertools.permutations(labels):
        mapping = dict(zip(labels, perm))
        mapped = np.array([mapping[v] for v in y_pred])
        best = max(best, float(np.mean(mapped == y_true)))
    return best


def assert_partition(result, n_points: int, n_clusters: int) -> None:
    """Every element appears exactly once across n_clusters non-empty groups."""
    assert len(result) == n_clusters
    seen = []
    for cluster in result.clusters:
        assert len(cluster.members) > 0, f"cluster {cluster.index} is empty"
        assert len(cluster.members) == len(cluster.member_indices)
        seen.extend(cluster.member_indices)
    assert sorted(seen) == list(range(n_points))
