"""
Model Capability Contract.

Any estimator plugged into the RANSAC engine derives from RansacModel and
provides the minimal sample size, a build step from a minimal sample, a
point-to-model distance and a refit step from a consensus set.
"""

import numpy as np
from abc import ABC, abstractmethod


class RansacModel(ABC):
    """
    Base class for models estimated by RANSAC.

    Instances are created fresh for every hypothesis and mutated in place by
    build() and fit().
    """

    @property
    @abstractmethod
    def required_samples(self) -> int:
        """Return number of samples required to estimate initial model parameters."""
        pass

    @abstractmethod
    def build(self, initial: np.ndarray) -> bool:
        """
        Build model from an initial inlier hypothesis.

        Degenerate input (e.g. collinear points for a plane) must be reported
        by returning False, not by raising.

        Args:
            initial: Array of shape (required_samples, D)

        Returns:
            True if all free parameters are set, False if the fit failed
        """
        pass

    @abstractmethod
    def distance_to(self, point: np.ndarray) -> float:
        """
        Determine distance of a query point to the model.

        Args:
            point: Array of shape (D,)

        Returns:
            Non-negative distance
        """
        pass

    @abstractmethod
    def fit(self, consensus_set: np.ndarray) -> None:
        """
        Re-fit model using the provided consensus set.

        Implementations that cannot refine the model leave their parameters
        unchanged.

        Args:
            consensus_set: Array of shape (M, D) with M >= required_samples
        """
        pass

    def distances(self, points: np.ndarray) -> np.ndarray:
        """
        Compute distances from every point to the model.

        Override with a vectorised version when one is available; the result
        must match distance_to() row by row.

        Args:
            points: Array of shape (N, D)

        Returns:
            Array of shape (N,) with distances
        """
        return np.fromiter(
            (self.distance_to(p) for p in points),
            dtype=float,
            count=len(points)
        )
