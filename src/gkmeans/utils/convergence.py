"""
Convergence criteria for the K-means engine.

Lloyd's algorithm has converged once a full pass leaves every center
unchanged. CenterStability checks that using the injected equality comparer.
"""

from typing import Dict, Any, Optional, Sequence
from torch import Tensor

from ..base.interfaces import ConvergenceCriterion, EqualityComparer
from ..base.vectors import VectorEqualityComparer


class CenterStability(ConvergenceCriterion):
    """Convergence once no center changes between consecutive passes."""

    def __init__(self, equality_comparer: Optional[EqualityComparer] = None,
                 patience: int = 1):
        """
        Args:
            equality_comparer: Identity test over centers
            patience: Number of stable passes required before convergence
        """
        super().__init__()
        self.equality_comparer = equality_comparer or VectorEqualityComparer()
        self.patience = patience
        self._prev_centers: Optional[Sequence[Tensor]] = None
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if centers have stabilized.

        Accepts either 'n_changed' (already counted by the engine) or
        'centers' (compared against the previous call).
        """
        if 'n_changed' in current_state:
            n_changed = current_state['n_changed']
        else:
            centers = current_state['centers']
            if self._prev_centers is None:
                self._prev_centers = list(centers)
                return False
            n_changed = sum(
                not self.equality_comparer.equals(old, new)
                for old, new in zip(self._prev_centers, centers)
            )
            self._prev_centers = list(centers)

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'n_changed': n_changed
        })

        if n_changed == 0:
            self._stable_count += 1
        else:
            self._stable_count = 0

        return self._stable_count >= self.patience

    def reset(self):
        super().reset()
        self._prev_centers = None
        self._stable_count = 0


class MaxIterations(ConvergenceCriterion):
    """Never converges - relies on max_iter in the engine."""

    def check(self, current_state: Dict[str, Any]) -> bool:
        self.history.append({
            'iteration': current_state.get('iteration', len(self.history))
        })
        return False
