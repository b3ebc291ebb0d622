"""
Seeding from caller-chosen elements.

Useful for warm starts or when you have good initial guesses.
"""

from typing import List, Optional, Sequence
import torch
from torch import Tensor

from ..base.interfaces import Sampler
from ..base.exceptions import ConfigurationError
from .kmeans_plusplus import _check_sample_request


class PresetSampler(Sampler):
    """Return a fixed list of population indices as the initial centers."""

    def __init__(self, indices: Sequence[int]):
        """
        Args:
            indices: Distinct positions in the population to use as centers
        """
        self.indices = [int(i) for i in indices]

    def get_sample(self, population: Sequence[Tensor], sample_count: int,
                   generator: Optional[torch.Generator] = None) -> List[int]:
        n_points = _check_sample_request(population, sample_count)

        if len(self.indices) != sample_count:
            raise ConfigurationError("indices", "must provide exactly sample_count centers",
                                     f"got {len(self.indices)}, sample_count={sample_count}")
        if len(set(self.indices)) != len(self.indices):
            raise ConfigurationError("indices", "must be pairwise distinct")
        for idx in self.indices:
            if not 0 <= idx < n_points:
                raise ConfigurationError("indices", "must lie within the population",
                                         f"index {idx}, population size {n_points}")

        return list(self.indices)
