"""
Utility functions for consuming RANSAC results.

The engine keeps every hypothesis that clears the acceptance threshold; the
helpers here rank them and extract inlier/outlier views for the caller.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .hypothesis import Hypothesis


@dataclass
class HypothesisSummary:
    """Flat view of one accepted hypothesis."""
    inlier_indices: np.ndarray  # Indices of inlier points
    outlier_indices: np.ndarray  # Indices of outlier points
    inlier_ratio: float  # Ratio of inliers to total points
    consensus_size: int  # Number of inliers


def rank_hypotheses(hypotheses: Iterable[Hypothesis]) -> List[Hypothesis]:
    """
    Sort hypotheses by consensus size, largest first.

    Ties keep trial order.

    Args:
        hypotheses: Accepted hypotheses of a run

    Returns:
        New list of hypotheses
    """
    return sorted(hypotheses, key=lambda h: h.consensus_size, reverse=True)


def best_hypothesis(hypotheses: Iterable[Hypothesis]) -> Optional[Hypothesis]:
    """Return the hypothesis with the largest consensus set, or None."""
    ranked = rank_hypotheses(hypotheses)
    return ranked[0] if ranked else None


def consensus_mask(hypothesis: Hypothesis) -> np.ndarray:
    """Boolean mask over the sample array marking the consensus set."""
    mask = np.zeros(hypothesis.sample_count, dtype=bool)
    mask[hypothesis.consensus_ids] = True
    return mask


def summarize(hypothesis: Hypothesis) -> HypothesisSummary:
    """
    Collect inlier/outlier indices and ratio of a hypothesis.

    Args:
        hypothesis: Hypothesis from a finished run

    Returns:
        HypothesisSummary
    """
    return HypothesisSummary(
        inlier_indices=hypothesis.consensus_ids,
        outlier_indices=hypothesis.outlier_ids,
        inlier_ratio=hypothesis.inlier_ratio,
        consensus_size=hypothesis.consensus_size
    )
