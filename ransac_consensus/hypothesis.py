"""
RANSAC hypothesis: one trial's model plus its current consensus membership.
"""

import numpy as np
from typing import Iterator

from .model import RansacModel


_EMPTY_IDS = np.empty(0, dtype=np.intp)
_EMPTY_IDS.flags.writeable = False


class Hypothesis:
    """
    A hypothesis of the RANSAC algorithm.

    Holds the model instance of one trial and the indices of the samples in
    its consensus set. The sample array is shared with the engine and only
    used to resolve indices into points.
    """

    def __init__(self, model: RansacModel, samples: np.ndarray):
        """
        Initialize hypothesis.

        Args:
            model: Freshly constructed model owned by this hypothesis
            samples: Read-only sample array of shape (N, D) owned by the engine
        """
        self._model = model
        self._samples = samples
        self._consensus_ids = _EMPTY_IDS

    @property
    def model(self) -> RansacModel:
        """Access the model."""
        return self._model

    @property
    def consensus_ids(self) -> np.ndarray:
        """Indices of consensus samples (sorted, unique, read-only)."""
        return self._consensus_ids

    @property
    def consensus_size(self) -> int:
        return len(self._consensus_ids)

    @property
    def sample_count(self) -> int:
        """Number of samples in the shared array."""
        return len(self._samples)

    @property
    def consensus_set(self) -> Iterator[np.ndarray]:
        """Lazily yield the consensus samples."""
        for i in self._consensus_ids:
            yield self._samples[i]

    @property
    def consensus_points(self) -> np.ndarray:
        """Consensus samples as an array of shape (M, D)."""
        return self._samples[self._consensus_ids]

    @property
    def outlier_ids(self) -> np.ndarray:
        """Indices of samples outside the consensus set."""
        mask = np.ones(self.sample_count, dtype=bool)
        mask[self._consensus_ids] = False
        return np.flatnonzero(mask)

    @property
    def inlier_ratio(self) -> float:
        return self.consensus_size / self.sample_count

    def clear_consensus(self):
        """Forget the current consensus membership."""
        self._consensus_ids = _EMPTY_IDS

    def evaluate(self, max_distance: float) -> int:
        """
        Determine the consensus set against the current model state.

        Membership from any previous evaluation is replaced, never merged.

        Args:
            max_distance: Maximum distance for a sample to qualify as inlier

        Returns:
            Size of the new consensus set
        """
        self.clear_consensus()
        distances = np.asarray(self._model.distances(self._samples), dtype=float)
        if distances.shape != (len(self._samples),):
            raise ValueError(
                f'Model returned distances of shape {distances.shape}, '
                f'expected ({len(self._samples)},)'
            )
        ids = np.flatnonzero(distances <= max_distance)
        ids.flags.writeable = False
        self._consensus_ids = ids
        return len(ids)

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}(model={self._model!r}, '
            f'consensus_size={self.consensus_size}/{len(self._samples)})'
        )
