"""
Base class for clustering algorithms built on the generic engine.

Holds the shared configuration (cluster count, iteration budget, verbosity,
random state), parameter validation and sklearn-style parameter access.
"""

from typing import Optional, Dict, Any, List, Union
import torch

from .data_structures import ClusteringStatus, AlgorithmState
from .exceptions import ConfigurationError
from ..utils.validation import check_n_clusters, check_max_iter, check_random_state


class BaseClusteringAlgorithm:
    """Base class implementing configuration and run bookkeeping.

    Subclasses implement the actual clustering loop.
    """

    def __init__(self,
                 n_clusters: int = 2,
                 max_iter: int = 100,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None):
        """
        Args:
            n_clusters: Number of clusters K (>= 2)
            max_iter: Maximum assignment/update passes (>= 1)
            verbose: Verbosity level (0=silent, 1=progress, 2=detailed)
            random_state: Seed or generator for reproducibility. An int
                re-seeds a fresh generator on every run; a generator is
                used as-is and advances between runs.
        """
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.verbose = verbose
        self.random_state = random_state

        # Run state
        self.generator_: Optional[torch.Generator] = None
        self.status_: Optional[ClusteringStatus] = None
        self.fitted_ = False
        self.n_iter_ = 0
        self.history_: List[AlgorithmState] = []

    def _check_params(self, n_samples: Optional[int] = None) -> None:
        """Validate configuration before a run."""
        check_n_clusters(self.n_clusters, n_samples)
        check_max_iter(self.max_iter)

    def _reset_run_state(self) -> torch.Generator:
        """Clear history and resolve the random source for a new run."""
        self.generator_ = check_random_state(self.random_state)
        self.status_ = None
        self.fitted_ = False
        self.n_iter_ = 0
        self.history_ = []
        return self.generator_

    def _log(self, level: int, message: str) -> None:
        if self.verbose >= level:
            print(message)

    @property
    def converged_(self) -> bool:
        return self.status_ == ClusteringStatus.CONVERGED

    def get_params(self, deep: bool = True) -> Dict[str, Any]:
        """Get parameters (sklearn compatibility)."""
        return {
            'n_clusters': self.n_clusters,
            'max_iter': self.max_iter,
            'verbose': self.verbose,
            'random_state': self.random_state
        }

    def set_params(self, **params) -> 'BaseClusteringAlgorithm':
        """Set parameters (sklearn compatibility)."""
        valid = self.get_params()
        for key, value in params.items():
            if key not in valid:
                raise ConfigurationError(key, f"is not a parameter of {type(self).__name__}")
            setattr(self, key, value)
        return self
