"""Utility functions for the K-means engine."""

from .convergence import (
    CenterStability,
    MaxIterations
)

from .validation import (
    validate_dataset,
    check_same_length,
    check_n_clusters,
    check_max_iter,
    check_random_state
)

__all__ = [
    # Convergence criteria
    'CenterStability',
    'MaxIterations',

    # Validation
    'validate_dataset',
    'check_same_length',
    'check_n_clusters',
    'check_max_iter',
    'check_random_state'
]
