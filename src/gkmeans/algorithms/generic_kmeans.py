"""
Generic K-means (Lloyd's algorithm) over pluggable components.

The engine seeds K distinct centers with a sampler, then alternates
assignment (nearest center under the dissimilarity function) and
recomputation (centroid calculator) until no center changes or the
iteration budget runs out.
"""

from typing import Optional, List, Tuple, Callable, Sequence, Union
import math
import time
import warnings
import torch
from torch import Tensor

from ..base.clustering_base import BaseClusteringAlgorithm
from ..base.interfaces import (
    DissimilarityFunction, EqualityComparer, CentroidsCalculator,
    VectorFactory, Sampler, ConvergenceCriterion
)
from ..base.data_structures import (
    ClusteringStatus, Cluster, ClusteringResult, AlgorithmState
)
from ..base.exceptions import (
    ClusteringError, ConfigurationError, StructuralError, EmptyClusterError,
    DuplicateCenterError, ClusteringCancelledError, ConvergenceWarning
)
from ..base.vectors import ZeroVectorFactory
from ..utils.convergence import CenterStability
from ..utils.validation import validate_dataset, DatasetLike


class KMeansObjective:
    """K-means objective: sum of dissimilarities of members to their center."""

    def __init__(self, dissimilarity: DissimilarityFunction):
        self.dissimilarity = dissimilarity

    def compute(self, points: Tensor, centers: Sequence[Tensor],
                labels: Tensor) -> float:
        """Compute the within-cluster sum of dissimilarities."""
        total = 0.0
        for k, center in enumerate(centers):
            cluster_mask = (labels == k)
            if cluster_mask.any():
                distances = self.dissimilarity.compare_many(points[cluster_mask], center)
                total += distances.sum().item()
        return total

    @property
    def minimize(self) -> bool:
        return True


class GenericKMeans(BaseClusteringAlgorithm):
    """K-means clustering over injected strategy components.

    Parameters
    ----------
    dissimilarity : DissimilarityFunction
        Metric used to assign elements to centers
    equality_comparer : EqualityComparer
        Identity test used for tie-breaks, duplicate centers and convergence
    centroids_calculator : CentroidsCalculator
        Produces new center candidates from cluster members
    factory : VectorFactory, optional
        Source of zero vectors for the calculator. If None, a
        ZeroVectorFactory matching the dataset is created per run.
    sampler : Sampler
        Selects the initial distinct centers
    n_clusters : int, default=2
        Number of clusters (>= 2)
    max_iter : int, default=100
        Maximum assignment/recompute passes (>= 1)
    random_state : int or torch.Generator, optional
        Random source shared by the sampler and the fallback assignment
    verbose : int, default=0
        Verbosity level
    should_stop : callable, optional
        Zero-argument callable polled for cooperative cancellation
    on_cancel : {'raise', 'return'}, default='raise'
        On cancellation raise ClusteringCancelledError, or return the last
        completed partition
    cancel_check_interval : int, default=1024
        Elements between cancellation polls inside one assignment pass
    convergence_criterion : ConvergenceCriterion, optional
        Defaults to CenterStability over the equality comparer, rebuilt
        on every run
    dtype : torch.dtype, default=torch.float64
        Working dtype of the dataset vectors

    Attributes
    ----------
    result_ : ClusteringResult
        Partition from the last run
    status_ : ClusteringStatus
        Terminal state of the last run
    n_iter_ : int
        Number of completed passes
    history_ : list of AlgorithmState
        One immutable snapshot per pass
    """

    def __init__(self,
                 dissimilarity: DissimilarityFunction,
                 equality_comparer: EqualityComparer,
                 centroids_calculator: CentroidsCalculator,
                 factory: Optional[VectorFactory],
                 sampler: Sampler,
                 n_clusters: int = 2,
                 max_iter: int = 100,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 verbose: int = 0,
                 should_stop: Optional[Callable[[], bool]] = None,
                 on_cancel: str = 'raise',
                 cancel_check_interval: int = 1024,
                 convergence_criterion: Optional[ConvergenceCriterion] = None,
                 dtype: torch.dtype = torch.float64):
        super().__init__(
            n_clusters=n_clusters,
            max_iter=max_iter,
            verbose=verbose,
            random_state=random_state
        )
        for name, component in (('dissimilarity', dissimilarity),
                                ('equality_comparer', equality_comparer),
                                ('centroids_calculator', centroids_calculator),
                                ('sampler', sampler)):
            if component is None:
                raise ConfigurationError(name, f"must not be None to initialize {type(self).__name__}")
        if on_cancel not in ('raise', 'return'):
            raise ConfigurationError("on_cancel", "must be 'raise' or 'return'",
                                     f"got {on_cancel!r}")
        if cancel_check_interval < 1:
            raise ConfigurationError("cancel_check_interval", "must be at least 1",
                                     f"got {cancel_check_interval}")

        self.dissimilarity = dissimilarity
        self.equality_comparer = equality_comparer
        self.centroids_calculator = centroids_calculator
        self.factory = factory
        self.sampler = sampler
        self.should_stop = should_stop
        self.on_cancel = on_cancel
        self.cancel_check_interval = cancel_check_interval
        self.convergence_criterion = convergence_criterion
        self.dtype = dtype
        self.objective = KMeansObjective(dissimilarity)
        self.criterion_: Optional[ConvergenceCriterion] = None

        self.result_: Optional[ClusteringResult] = None

    def find_clusters(self, X: DatasetLike) -> List[List[Tensor]]:
        """Partition X and return the member groups, discarding centers."""
        return self.find_clusters_and_centers(X).groups

    def find_clusters_and_centers(self, X: DatasetLike) -> ClusteringResult:
        """Partition X with Lloyd's algorithm.

        Args:
            X: (n, d) tensor or array, or a sequence of (d,) vectors

        Returns:
            ClusteringResult mapping each cluster handle to its center and
            members

        Raises:
            ConfigurationError, InputError: Invalid configuration or data
            StructuralError: Empty cluster, colliding centers, or more
                clusters than elements
            NumericError: Non-finite centroid
            ClusteringCancelledError: Cancelled with on_cancel='raise'
        """
        self._check_params()
        vectors = validate_dataset(X, dtype=self.dtype)
        self._check_params(n_samples=len(vectors))

        generator = self._reset_run_state()
        self.result_ = None

        # Components may have been replaced through set_params
        self.objective = KMeansObjective(self.dissimilarity)
        self.criterion_ = self.convergence_criterion or CenterStability(self.equality_comparer)
        self.criterion_.reset()

        points = torch.stack(vectors)
        factory = self.factory or ZeroVectorFactory(points.shape[1], points.dtype)

        try:
            return self._run(vectors, points, factory, generator)
        except ClusteringCancelledError:
            self.status_ = ClusteringStatus.CANCELLED
            if self.on_cancel == 'return' and self.history_:
                self._log(1, f"Cancelled after {self.n_iter_} iterations")
                self.result_ = self._build_result(vectors, self.history_[-1],
                                                  ClusteringStatus.CANCELLED)
                self.fitted_ = True
                return self.result_
            raise
        except ClusteringError:
            self.status_ = ClusteringStatus.FAILED
            raise

    def _run(self, vectors: List[Tensor], points: Tensor, factory: VectorFactory,
             generator: torch.Generator) -> ClusteringResult:
        """Seed, then iterate assignment and recomputation."""
        start_time = time.time()

        self.status_ = ClusteringStatus.SEEDING
        self._log(1, f"Seeding {self.n_clusters} clusters...")
        centers = self._seed(vectors, generator)

        previous_labels: Optional[Tensor] = None
        converged = False

        for iteration in range(self.max_iter):
            iter_start_time = time.time()
            self._poll_cancel(iteration)

            self.status_ = ClusteringStatus.ASSIGNING
            labels = self._assign(vectors, points, centers, previous_labels, generator)

            self.status_ = ClusteringStatus.RECOMPUTING
            new_centers, n_changed = self._update_centers(vectors, centers, labels, factory)

            objective_value = self.objective.compute(points, new_centers, labels)
            state = AlgorithmState(
                iteration=iteration,
                centers=tuple(new_centers),
                labels=tuple(labels.tolist()),
                n_changed=n_changed,
                objective_value=objective_value
            )
            self.history_.append(state)
            self.n_iter_ = iteration + 1

            converged = self.criterion_.check({
                'iteration': iteration,
                'n_changed': n_changed,
                'centers': state.centers
            })

            iter_time = time.time() - iter_start_time
            if self.verbose >= 2 or (self.verbose >= 1 and iteration % 10 == 0):
                print(f"Iteration {iteration:3d}: objective = {objective_value:.6f} "
                      f"changed centers = {n_changed} ({iter_time:.3f}s)")

            centers = new_centers
            previous_labels = labels

            if converged:
                self._log(1, f"Converged at iteration {iteration}")
                break

        status = ClusteringStatus.CONVERGED if converged else ClusteringStatus.EXHAUSTED
        if not converged and self.verbose:
            warnings.warn(f"Failed to converge after {self.max_iter} iterations",
                          ConvergenceWarning)
        self._log(1, f"Total clustering time: {time.time() - start_time:.3f}s")

        self.status_ = status
        self.result_ = self._build_result(vectors, self.history_[-1], status)
        self.fitted_ = True
        return self.result_

    def _seed(self, vectors: List[Tensor], generator: torch.Generator) -> List[Tensor]:
        """Ask the sampler for n_clusters distinct initial centers."""
        indices = list(self.sampler.get_sample(vectors, self.n_clusters, generator))
        if len(indices) != self.n_clusters or len(set(indices)) != len(indices):
            raise StructuralError("sampler", "must return n_clusters distinct elements",
                                  f"got indices {indices}")
        for idx in indices:
            if not 0 <= idx < len(vectors):
                raise StructuralError("sampler", "returned an index outside the dataset",
                                      f"index {idx}")
        return [vectors[idx] for idx in indices]

    def _poll_cancel(self, iteration: int) -> None:
        if self.should_stop is not None and self.should_stop():
            raise ClusteringCancelledError("should_stop", "cancellation requested",
                                           f"at iteration {iteration}")

    def _assign(self, vectors: List[Tensor], points: Tensor, centers: List[Tensor],
                previous_labels: Optional[Tensor],
                generator: torch.Generator) -> Tensor:
        """Assign every element to a center.

        Primary rule: minimum finite dissimilarity. On an exact tie, a center
        equal to the element replaces the current best. Elements whose
        distances are all non-finite go through the fallback rule.

        Returns:
            (n,) long tensor of cluster handles
        """
        n_points = len(vectors)
        n_clusters = len(centers)

        # Compute distance matrix, polling every cancel_check_interval elements
        interval = self.cancel_check_interval
        scanned = 0
        distances = torch.empty(n_points, n_clusters, dtype=torch.float64)
        for k, center in enumerate(centers):
            distances[:, k] = self.dissimilarity.compare_many(points, center)
            if (scanned + n_points) // interval > scanned // interval:
                self._poll_cancel(len(self.history_))
            scanned += n_points

        finite = torch.isfinite(distances)
        masked = torch.where(finite, distances, torch.full_like(distances, float('inf')))
        min_distances, labels = masked.min(dim=1)
        # argmin keeps the first minimum; only ties need the equality check
        n_tied = (masked == min_distances.unsqueeze(1)).sum(dim=1)
        has_finite = finite.any(dim=1)

        special = torch.nonzero(~has_finite | (n_tied > 1)).flatten().tolist()
        previous_members = self._previous_members(previous_labels, n_clusters)

        for count, i in enumerate(special):
            if count and count % self.cancel_check_interval == 0:
                self._poll_cancel(len(self.history_))
            if has_finite[i]:
                labels[i] = self._break_tie(vectors[i], centers, masked[i],
                                            min_distances[i].item())
            else:
                labels[i] = self._fallback_center(vectors, i, previous_members, generator)

        return labels

    def _break_tie(self, instance: Tensor, centers: List[Tensor], row: Tensor,
                   min_distance: float) -> int:
        best = None
        for k, center in enumerate(centers):
            if row[k].item() != min_distance:
                continue
            if best is None or self.equality_comparer.equals(instance, center):
                best = k
        return best

    @staticmethod
    def _previous_members(previous_labels: Optional[Tensor],
                          n_clusters: int) -> Optional[List[List[int]]]:
        if previous_labels is None:
            return None
        members = [[] for _ in range(n_clusters)]
        for idx, label in enumerate(previous_labels.tolist()):
            members[label].append(idx)
        return members

    def _fallback_center(self, vectors: List[Tensor], i: int,
                         previous_members: Optional[List[List[int]]],
                         generator: torch.Generator) -> int:
        """Pick a center for an element no center can reach.

        Chooses the cluster whose previous-pass members have the lowest
        average finite dissimilarity to the element; uniform random when no
        cluster has a finite-distance member.
        """
        instance = vectors[i]
        best = None
        best_average = math.inf

        if previous_members is not None:
            for k, members in enumerate(previous_members):
                total = 0.0
                count = 0
                for m in members:
                    d = self.dissimilarity.compare(instance, vectors[m])
                    if math.isfinite(d):
                        total += d
                        count += 1
                if count > 0 and total / count < best_average:
                    best_average = total / count
                    best = k

        if best is None:
            best = torch.randint(self.n_clusters, (1,), generator=generator).item()
        return best

    def _update_centers(self, vectors: List[Tensor], centers: List[Tensor],
                        labels: Tensor, factory: VectorFactory) -> Tuple[List[Tensor], int]:
        """Recompute every center from its members.

        Returns:
            New centers in handle order and the number of centers that changed
        """
        groups: List[List[Tensor]] = [[] for _ in centers]
        for idx, label in enumerate(labels.tolist()):
            groups[label].append(vectors[idx])

        new_centers: List[Tensor] = []
        claimed = {}  # hash -> centers claimed this round
        n_changed = 0

        for k, members in enumerate(groups):
            if not members:
                raise EmptyClusterError(
                    "clusters", "every cluster needs at least one member after assignment",
                    f"cluster {k} is empty; verify the sampler and dissimilarity function")

            new_center = None
            for candidate in self.centroids_calculator.calculate(members, factory):
                bucket = claimed.setdefault(self.equality_comparer.hash(candidate), [])
                if not any(self.equality_comparer.equals(candidate, other) for other in bucket):
                    new_center = candidate
                    bucket.append(candidate)
                    break

            if new_center is None:
                raise DuplicateCenterError(
                    "centers", "two clusters cannot share a center",
                    f"cluster {k} collides with another cluster; n_clusters may exceed "
                    f"the number of distinct points")

            if not self.equality_comparer.equals(centers[k], new_center):
                n_changed += 1
            new_centers.append(new_center)

        return new_centers, n_changed

    def _build_result(self, vectors: List[Tensor], state: AlgorithmState,
                      status: ClusteringStatus) -> ClusteringResult:
        member_indices = [[] for _ in state.centers]
        for idx, label in enumerate(state.labels):
            member_indices[label].append(idx)

        clusters = [
            Cluster(
                index=k,
                center=center,
                members=tuple(vectors[idx] for idx in indices),
                member_indices=tuple(indices)
            )
            for k, (center, indices) in enumerate(zip(state.centers, member_indices))
        ]
        return ClusteringResult(
            clusters,
            status=status,
            n_iter=self.n_iter_,
            objective=state.objective_value
        )

    def get_params(self, deep: bool = True):
        params = super().get_params(deep)
        params.update({
            'dissimilarity': self.dissimilarity,
            'equality_comparer': self.equality_comparer,
            'centroids_calculator': self.centroids_calculator,
            'factory': self.factory,
            'sampler': self.sampler,
            'should_stop': self.should_stop,
            'on_cancel': self.on_cancel,
            'cancel_check_interval': self.cancel_check_interval,
            'convergence_criterion': self.convergence_criterion
        })
        return params
