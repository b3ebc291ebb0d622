"""
K-means++ seeding.

Selects initial cluster centers using the K-means++ algorithm, which chooses
centers that are far apart to improve convergence speed and quality.
"""

from typing import List, Optional, Sequence
import torch
from torch import Tensor

from ..base.interfaces import Sampler, DissimilarityFunction
from ..base.exceptions import ConfigurationError, InputError
from ..utils.validation import check_random_state, check_same_length


def _check_sample_request(population: Optional[Sequence[Tensor]],
                          sample_count: int) -> int:
    """Shared sampler preconditions. Returns the population size."""
    if population is None:
        raise InputError("population", "must not be None")
    if sample_count < 2:
        raise ConfigurationError("sample_count", "must be at least 2",
                                 f"got {sample_count}")
    n_points = len(population)
    if sample_count > n_points:
        raise ConfigurationError("sample_count", "cannot exceed the population size",
                                 f"{sample_count} > {n_points}")
    return n_points


def _uniform_choice(mask: Tensor, generator: torch.Generator) -> int:
    """Pick one index where mask is True, uniformly."""
    choices = torch.nonzero(mask).flatten()
    pick = torch.randint(len(choices), (1,), generator=generator).item()
    return int(choices[pick].item())


class KMeansPlusPlusSampler(Sampler):
    """K-means++ seeding for better starting positions.

    Algorithm:
    1. Choose the first center uniformly at random
    2. For each remaining center:
       - Fold the distance to the newest center into each element's
         minimum distance to the chosen centers
       - Choose the next center with probability proportional to the
         squared minimum distance
    """

    def __init__(self, dissimilarity: DissimilarityFunction):
        """
        Args:
            dissimilarity: Metric used to measure distance to chosen centers
        """
        if dissimilarity is None:
            raise ConfigurationError("dissimilarity", "must not be None")
        self.dissimilarity = dissimilarity

    def get_sample(self, population: Sequence[Tensor], sample_count: int,
                   generator: Optional[torch.Generator] = None) -> List[int]:
        """Select sample_count distinct elements with K-means++.

        Args:
            population: Sequence of (d,) vectors
            sample_count: Number of centers to select (>= 2)
            generator: Random source; a fresh unseeded one if None

        Returns:
            Indices of the chosen elements, in selection order
        """
        n_points = _check_sample_request(population, sample_count)
        check_same_length(population, name="population")
        if generator is None:
            generator = check_random_state(None)

        points = torch.stack(list(population))

        # Choose first center uniformly at random
        first_idx = torch.randint(n_points, (1,), generator=generator).item()
        selected = [first_idx]
        is_selected = torch.zeros(n_points, dtype=torch.bool)
        is_selected[first_idx] = True

        min_distances = torch.full((n_points,), float('inf'), dtype=torch.float64)

        for _ in range(1, sample_count):
            # Only the newest center needs comparing, earlier ones are folded in
            newest = points[selected[-1]]
            distances = self.dissimilarity.compare_many(points, newest).to(torch.float64)
            min_distances = torch.where(distances < min_distances, distances, min_distances)

            idx = self._draw(min_distances, is_selected, generator)
            is_selected[idx] = True
            selected.append(idx)

        return selected

    def _draw(self, min_distances: Tensor, is_selected: Tensor,
              generator: torch.Generator) -> int:
        """Draw one unselected index with probability ∝ squared distance."""
        available = ~is_selected
        weights = torch.where(available, min_distances * min_distances,
                              torch.zeros_like(min_distances))

        # Elements no center can reach are infinitely far: prefer them.
        unreachable = available & ~torch.isfinite(weights)
        if unreachable.any():
            return _uniform_choice(unreachable, generator)

        total = weights.sum()
        if total <= 0:
            # Every remaining element duplicates a chosen center
            return _uniform_choice(available, generator)

        cumulative = torch.cumsum(weights, dim=0) / total
        value = torch.rand(1, generator=generator, dtype=torch.float64)
        idx = int(torch.searchsorted(cumulative, value, right=True).item())

        return self._next_unselected(idx, is_selected)

    @staticmethod
    def _next_unselected(idx: int, is_selected: Tensor) -> int:
        """First unselected index at or after idx, never wrapping.

        Rounding can push the draw past the last cumulative value; in that
        case fall back to the nearest unselected index before idx.
        """
        n_points = is_selected.shape[0]
        for j in range(idx, n_points):
            if not is_selected[j]:
                return j
        for j in range(min(idx, n_points) - 1, -1, -1):
            if not is_selected[j]:
                return j
        raise ConfigurationError("sample_count", "cannot exceed the population size")
