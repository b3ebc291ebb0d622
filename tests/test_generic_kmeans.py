# tests/test_generic_kmeans.py
"""
GenericKMeans engine

Covers:
- Two well separated groups are recovered for every seed
- Partition law, determinism and the iteration budget
- Tie-break toward an identical center
- Fallback assignment for elements no center can reach
- Empty-cluster and duplicate-center failures
- Non-finite centroids
- Cooperative cancellation
- Preconditions
"""

from __future__ import annotations

import math

import pytest
import torch

from gkmeans.algorithms import GenericKMeans, create_kmeans
from gkmeans.base.interfaces import DissimilarityFunction, CentroidsCalculator
from gkmeans.base.data_structures import ClusteringStatus
from gkmeans.base.vectors import VectorEqualityComparer, ZeroVectorFactory
from gkmeans.base.exceptions import (
    ConfigurationError, InputError, StructuralError, EmptyClusterError,
    DuplicateCenterError, TooManyClustersError, NumericError, ClusteringCancelledError,
    ConvergenceWarning
)
from gkmeans.distances import NormalizedEuclideanDistance, EuclideanDistance
from gkmeans.initialization import KMeansPlusPlusSampler, PresetSampler
from gkmeans.updates import MeanCalculator
from gkmeans.utils.convergence import MaxIterations

from utils import as_point_sets, assert_partition


def _points(*rows):
    return [torch.tensor(row, dtype=torch.float64) for row in rows]


def _engine(dataset, sampler=None, dissimilarity=None, calculator=None, **kwargs):
    dissimilarity = dissimilarity or NormalizedEuclideanDistance(dataset, range(len(dataset[0])))
    return GenericKMeans(
        dissimilarity=dissimilarity,
        equality_comparer=VectorEqualityComparer(),
        centroids_calculator=calculator or MeanCalculator(),
        factory=ZeroVectorFactory(len(dataset[0])),
        sampler=sampler or KMeansPlusPlusSampler(dissimilarity),
        **kwargs
    )


class _GatedDistance(DissimilarityFunction):
    """1-D distance where 50 only reaches a fixed set of values."""

    REACHABLE = {1.0, 5.0, 101.0, 105.0}

    def compare(self, source, compare_to):
        a, b = float(source[0]), float(compare_to[0])
        if a == 50.0 or b == 50.0:
            other = b if a == 50.0 else a
            if other not in self.REACHABLE:
                return math.inf
        return abs(a - b)


class _Isolated(DissimilarityFunction):
    """1-D distance where 50 reaches nothing, not even itself."""

    def compare(self, source, compare_to):
        a, b = float(source[0]), float(compare_to[0])
        if a == 50.0 or b == 50.0:
            return math.inf
        return abs(a - b)


class _ConstantCalculator(CentroidsCalculator):
    """Every cluster proposes the origin."""

    def calculate(self, members, factory):
        return [factory.create()]


class _OriginFirstCalculator(CentroidsCalculator):
    """Proposes the origin, then the mean."""

    def calculate(self, members, factory):
        return [factory.create()] + MeanCalculator().calculate(members, factory)


@pytest.mark.parametrize("seed", range(20))
def test_two_groups_recovered_for_any_seed(two_groups, seed):
    engine = create_kmeans(two_groups, n_clusters=2, max_iter=10, random_state=seed)
    result = engine.find_clusters_and_centers(two_groups)

    assert as_point_sets(result.groups) == as_point_sets([two_groups[:3], two_groups[3:]])
    assert_partition(result, 6, 2)
    assert result.converged
    assert engine.status_ == ClusteringStatus.CONVERGED


def test_find_clusters_discards_centers(two_groups):
    engine = create_kmeans(two_groups, n_clusters=2, random_state=0)
    groups = engine.find_clusters(two_groups)
    assert len(groups) == 2
    assert sum(len(g) for g in groups) == 6


def test_members_are_the_callers_vectors(two_groups):
    snapshot = [v.clone() for v in two_groups]
    engine = create_kmeans(two_groups, n_clusters=2, random_state=3)
    result = engine.find_clusters_and_centers(two_groups)

    for cluster in result.clusters:
        for vector, idx in zip(cluster.members, cluster.member_indices):
            assert vector is two_groups[idx]
        assert all(cluster.center is not v for v in two_groups)
    for vector, original in zip(two_groups, snapshot):
        assert torch.equal(vector, original)


def test_centers_are_cluster_means(two_groups):
    engine = create_kmeans(two_groups, n_clusters=2, random_state=1)
    result = engine.find_clusters_and_centers(two_groups)

    for center, members in result.items_by_center():
        assert torch.allclose(center, torch.stack(members).mean(dim=0))


def test_partition_law_on_random_data(rng):
    X = torch.from_numpy(rng.normal(size=(60, 3)))
    dataset = list(X)
    for k in (2, 3):
        engine = _engine(dataset, n_clusters=k, random_state=k)
        result = engine.find_clusters_and_centers(dataset)
        assert_partition(result, 60, k)
        assert torch.equal(result.labels.bincount(minlength=k),
                           torch.tensor([len(c) for c in result.clusters]))


def test_same_seed_same_partition(rng):
    dataset = list(torch.from_numpy(rng.normal(size=(80, 2))))
    engine = _engine(dataset, n_clusters=3, random_state=11)

    first = engine.find_clusters_and_centers(dataset)
    second = engine.find_clusters_and_centers(dataset)
    other_engine = _engine(dataset, n_clusters=3, random_state=11)
    third = other_engine.find_clusters_and_centers(dataset)

    assert torch.equal(first.labels, second.labels)
    assert torch.equal(first.labels, third.labels)
    for a, b in zip(first.centers, third.centers):
        assert torch.equal(a, b)


def test_shared_generator_advances_between_runs(rng, generator):
    dataset = list(torch.from_numpy(rng.normal(size=(40, 2))))
    engine = _engine(dataset, n_clusters=3, random_state=generator)

    before = generator.get_state()
    engine.find_clusters_and_centers(dataset)
    assert engine.generator_ is generator
    assert not torch.equal(generator.get_state(), before)


@pytest.mark.parametrize("max_iter", [1, 2, 3])
def test_never_exceeds_iteration_budget(rng, max_iter):
    dataset = list(torch.from_numpy(rng.normal(size=(100, 2))))
    engine = _engine(dataset, n_clusters=3, max_iter=max_iter, random_state=0)
    result = engine.find_clusters_and_centers(dataset)

    assert len(engine.history_) <= max_iter
    assert engine.n_iter_ == result.n_iter == len(engine.history_)
    assert_partition(result, 100, 3)


def test_exhausted_budget_is_a_result(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]), n_clusters=2, max_iter=1)
    result = engine.find_clusters_and_centers(two_groups)

    assert result.status == ClusteringStatus.EXHAUSTED
    assert not result.converged
    assert result.n_iter == 1
    assert_partition(result, 6, 2)


def test_exhausted_budget_warns_when_verbose(two_groups, capsys):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]), n_clusters=2,
                     max_iter=1, verbose=1)
    with pytest.warns(ConvergenceWarning):
        engine.find_clusters_and_centers(two_groups)
    assert "Seeding 2 clusters" in capsys.readouterr().out


def test_history_snapshots(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]), n_clusters=2)
    engine.find_clusters_and_centers(two_groups)

    assert engine.history_[-1].converged
    assert engine.history_[0].n_changed == 2
    assert engine.history_[0].labels == (0, 0, 0, 1, 1, 1)
    objectives = [state.objective_value for state in engine.history_]
    assert all(math.isfinite(v) for v in objectives)


def test_tie_prefers_identical_center():
    dataset = _points((0, 0), (0, 1), (5, 0), (5, 1))
    # only feature 0 counts: (0, 0) and (0, 1) are at distance 0
    metric = NormalizedEuclideanDistance(dataset, [0])
    engine = _engine(dataset, sampler=PresetSampler([0, 1]), dissimilarity=metric,
                     n_clusters=2, max_iter=1)
    engine.find_clusters_and_centers(dataset)

    assert engine.history_[0].labels == (0, 1, 0, 0)


def test_fallback_uses_previous_members():
    dataset = _points((0,), (1,), (5,), (100,), (101,), (105,), (50,))
    engine = _engine(dataset, sampler=PresetSampler([0, 3]),
                     dissimilarity=_GatedDistance(), n_clusters=2, random_state=0)
    result = engine.find_clusters_and_centers(dataset)

    groups = as_point_sets(result.groups)
    assert frozenset({(0.0,), (1.0,), (5.0,), (50.0,)}) in groups
    assert result.converged


def test_fallback_random_when_nothing_reachable():
    dataset = _points((0,), (1,), (100,), (101,), (50,))
    labels = []
    for _ in range(2):
        engine = _engine(dataset, sampler=PresetSampler([0, 2]),
                         dissimilarity=_Isolated(), n_clusters=2,
                         max_iter=5, random_state=42)
        result = engine.find_clusters_and_centers(dataset)
        assert_partition(result, 5, 2)
        labels.append(result.labels)
    assert torch.equal(labels[0], labels[1])


def test_more_clusters_than_distinct_points():
    dataset = _points((0, 0), (0, 0), (5, 5))
    for seed in range(5):
        engine = create_kmeans(dataset, n_clusters=3, random_state=seed)
        with pytest.raises(StructuralError):
            engine.find_clusters_and_centers(dataset)
        assert engine.status_ == ClusteringStatus.FAILED


def test_empty_cluster_error_is_structural():
    dataset = _points((0, 0), (0, 0), (0, 0), (1, 1))
    engine = create_kmeans(dataset, n_clusters=3, random_state=0)
    with pytest.raises(EmptyClusterError):
        engine.find_clusters_and_centers(dataset)


def test_duplicate_center_collision(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]),
                     calculator=_ConstantCalculator(), n_clusters=2)
    with pytest.raises(DuplicateCenterError) as info:
        engine.find_clusters_and_centers(two_groups)
    assert isinstance(info.value, StructuralError)
    assert engine.result_ is None


def test_colliding_candidate_is_skipped(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]),
                     calculator=_OriginFirstCalculator(), n_clusters=2)
    result = engine.find_clusters_and_centers(two_groups)

    assert torch.equal(result[0].center, torch.zeros(2, dtype=torch.float64))
    assert torch.allclose(result[1].center, torch.tensor([31 / 3, 31 / 3], dtype=torch.float64))
    assert result.converged


def test_non_finite_centroid_is_numeric_error():
    dataset = _points((0, 0), (1, 1), (float('nan'), 0), (10, 10))
    engine = _engine(dataset, sampler=PresetSampler([0, 3]),
                     dissimilarity=EuclideanDistance(), n_clusters=2, random_state=0)
    with pytest.raises(NumericError):
        engine.find_clusters_and_centers(dataset)
    assert engine.status_ == ClusteringStatus.FAILED


def test_cancel_returns_last_partition(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 1]), n_clusters=2,
                     on_cancel='return')
    engine.should_stop = lambda: len(engine.history_) >= 1
    result = engine.find_clusters_and_centers(two_groups)

    assert result.status == ClusteringStatus.CANCELLED
    assert result.n_iter == 1
    assert_partition(result, 6, 2)


def test_cancel_raises_by_default(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 1]), n_clusters=2)
    engine.should_stop = lambda: len(engine.history_) >= 1
    with pytest.raises(ClusteringCancelledError):
        engine.find_clusters_and_centers(two_groups)
    assert engine.status_ == ClusteringStatus.CANCELLED


def test_cancel_before_first_pass_raises_even_when_returning(two_groups):
    engine = _engine(two_groups, n_clusters=2, on_cancel='return',
                     should_stop=lambda: True)
    with pytest.raises(ClusteringCancelledError):
        engine.find_clusters_and_centers(two_groups)


@pytest.mark.parametrize("params", [
    {"n_clusters": 1},
    {"max_iter": 0},
])
def test_invalid_configuration(two_groups, params):
    engine = _engine(two_groups, **params)
    with pytest.raises(ConfigurationError):
        engine.find_clusters_and_centers(two_groups)


def test_more_clusters_than_elements_is_structural(two_groups):
    engine = create_kmeans(two_groups, n_clusters=7)
    with pytest.raises(StructuralError) as info:
        engine.find_clusters_and_centers(two_groups)
    assert isinstance(info.value, TooManyClustersError)
    assert isinstance(info.value, ConfigurationError)


@pytest.mark.parametrize("dataset", [None, [], [[0.0, 0.0], [1.0]]])
def test_invalid_dataset(two_groups, dataset):
    engine = _engine(two_groups, n_clusters=2)
    with pytest.raises(InputError):
        engine.find_clusters_and_centers(dataset)


def test_configuration_checked_before_data():
    engine = _engine(_points((0, 0), (1, 1)), n_clusters=1)
    with pytest.raises(ConfigurationError):
        engine.find_clusters_and_centers(None)


def test_missing_components_rejected(two_groups):
    metric = NormalizedEuclideanDistance(two_groups, [0, 1])
    with pytest.raises(ConfigurationError):
        GenericKMeans(metric, None, MeanCalculator(), None, PresetSampler([0, 1]))
    with pytest.raises(ConfigurationError):
        GenericKMeans(metric, VectorEqualityComparer(), MeanCalculator(), None, None)
    with pytest.raises(ConfigurationError):
        _engine(two_groups, on_cancel='ignore')


def test_default_factory_is_inferred(two_groups):
    metric = NormalizedEuclideanDistance(two_groups, [0, 1])
    engine = GenericKMeans(metric, VectorEqualityComparer(), MeanCalculator(), None,
                           KMeansPlusPlusSampler(metric), random_state=0)
    result = engine.find_clusters_and_centers(two_groups)
    assert_partition(result, 6, 2)


def test_get_and_set_params(two_groups):
    engine = _engine(two_groups, n_clusters=2)
    engine.set_params(n_clusters=3, max_iter=7)
    params = engine.get_params()
    assert params["n_clusters"] == 3
    assert params["max_iter"] == 7
    with pytest.raises(ConfigurationError):
        engine.set_params(learning_rate=0.1)


def test_replaced_dissimilarity_drives_objective(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]), n_clusters=2)
    euclidean = EuclideanDistance()
    engine.set_params(dissimilarity=euclidean)
    result = engine.find_clusters_and_centers(two_groups)

    expected = sum(
        euclidean.compare(member, cluster.center)
        for cluster in result.clusters
        for member in cluster.members
    )
    assert result.objective == pytest.approx(expected)
    assert engine.history_[-1].objective_value == pytest.approx(expected)
    assert engine.objective.dissimilarity is euclidean


def test_replaced_comparer_and_criterion_are_used(two_groups):
    engine = _engine(two_groups, sampler=PresetSampler([0, 3]), n_clusters=2)
    comparer = VectorEqualityComparer()
    engine.set_params(equality_comparer=comparer)
    engine.find_clusters_and_centers(two_groups)
    assert engine.criterion_.equality_comparer is comparer

    engine.set_params(convergence_criterion=MaxIterations(), max_iter=3)
    result = engine.find_clusters_and_centers(two_groups)
    assert result.status == ClusteringStatus.EXHAUSTED
    assert result.n_iter == 3
