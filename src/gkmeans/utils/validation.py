"""
Input validation utilities.

Provides functions for validating datasets and parameters before clustering.
Datasets are normalised into a list of 1-D tensors; vectors that already
have the working dtype are passed through untouched so that cluster members
are the caller's own objects.
"""

from typing import Optional, Union, Sequence, List
import torch
from torch import Tensor
import numpy as np

from ..base.exceptions import ConfigurationError, InputError, TooManyClustersError


DatasetLike = Union[Tensor, np.ndarray, Sequence[Tensor], Sequence[Sequence[float]]]


def _as_vector(item, dtype: torch.dtype, position: int) -> Tensor:
    if isinstance(item, Tensor):
        vector = item if item.dtype == dtype else item.to(dtype)
    elif isinstance(item, np.ndarray):
        vector = torch.from_numpy(item).to(dtype)
    else:
        try:
            vector = torch.tensor(item, dtype=dtype)
        except (TypeError, ValueError) as exc:
            raise InputError("dataset", "elements must be numeric vectors",
                             f"element {position}: {exc}") from exc

    if vector.dim() != 1:
        raise InputError("dataset", "elements must be 1-D vectors",
                         f"element {position} has {vector.dim()} dimensions")
    return vector


def validate_dataset(X: Optional[DatasetLike],
                     dtype: torch.dtype = torch.float64,
                     name: str = "dataset") -> List[Tensor]:
    """Validate input data and convert it to a list of vectors.

    Args:
        X: (n, d) tensor or array, or a sequence of vectors
        dtype: Working dtype of the vectors
        name: Parameter name reported in errors

    Returns:
        List of (d,) tensors

    Raises:
        InputError: If the dataset is None, empty, or has mixed lengths
    """
    if X is None:
        raise InputError(name, "must not be None")

    if isinstance(X, np.ndarray):
        X = torch.from_numpy(X)

    if isinstance(X, Tensor):
        if X.dim() != 2:
            raise InputError(name, "must be a 2D array of vectors",
                             f"got {X.dim()}D")
        X = X.to(dtype)
        vectors = list(X.unbind(0))
    else:
        vectors = [_as_vector(item, dtype, i) for i, item in enumerate(X)]

    if len(vectors) == 0:
        raise InputError(name, "must not be empty")

    check_same_length(vectors, name=name)
    return vectors


def check_same_length(vectors: Sequence[Tensor], length: Optional[int] = None,
                      name: str = "dataset") -> int:
    """Check that all vectors share one length.

    Returns:
        The common length
    """
    if length is None:
        length = vectors[0].shape[0]
    for i, vector in enumerate(vectors):
        if vector.shape[0] != length:
            raise InputError(name, "all vectors must share one length",
                             f"element {i} has length {vector.shape[0]}, "
                             f"expected {length}")
    return length


def check_n_clusters(n_clusters: int, n_samples: Optional[int] = None,
                     name: str = "n_clusters") -> None:
    """Validate number of clusters.

    Args:
        n_clusters: Number of clusters
        n_samples: Number of samples, if known

    Raises:
        ConfigurationError: If invalid
        TooManyClustersError: If n_clusters exceeds n_samples
    """
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, (int, np.integer)):
        raise ConfigurationError(name, "must be an integer",
                                 f"got {type(n_clusters).__name__}")

    if n_clusters < 2:
        raise ConfigurationError(name, "must be at least 2", f"got {n_clusters}")

    if n_samples is not None and n_clusters > n_samples:
        raise TooManyClustersError(name, "cannot exceed the number of samples",
                                 f"{n_clusters} > {n_samples}")


def check_max_iter(max_iter: int) -> None:
    """Validate the iteration budget."""
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)):
        raise ConfigurationError("max_iter", "must be an integer",
                                 f"got {type(max_iter).__name__}")
    if max_iter < 1:
        raise ConfigurationError("max_iter", "must be at least 1", f"got {max_iter}")


def check_random_state(random_state: Optional[Union[int, torch.Generator]]) -> torch.Generator:
    """Create generator from random state.

    Args:
        random_state: Seed, generator, or None for a non-deterministic seed

    Returns:
        Generator owned by the caller
    """
    if random_state is None:
        generator = torch.Generator()
        generator.seed()
        return generator
    elif isinstance(random_state, torch.Generator):
        return random_state
    elif isinstance(random_state, (int, np.integer)) and not isinstance(random_state, bool):
        generator = torch.Generator()
        generator.manual_seed(int(random_state))
        return generator
    else:
        raise ConfigurationError("random_state", "must be None, int or torch.Generator",
                                 f"got {type(random_state).__name__}")
