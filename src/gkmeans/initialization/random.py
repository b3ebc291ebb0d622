"""
Random seeding strategy.

Selects random elements of the dataset as initial cluster centers.
"""

from typing import List, Optional, Sequence
import torch
from torch import Tensor

from ..base.interfaces import Sampler
from ..utils.validation import check_random_state
from .kmeans_plusplus import _check_sample_request


class RandomSampler(Sampler):
    """Random seeding by selecting elements of the population.

    Selects sample_count random elements (without replacement).
    """

    def get_sample(self, population: Sequence[Tensor], sample_count: int,
                   generator: Optional[torch.Generator] = None) -> List[int]:
        n_points = _check_sample_request(population, sample_count)
        if generator is None:
            generator = check_random_state(None)

        indices = torch.randperm(n_points, generator=generator)[:sample_count]
        return indices.tolist()
