"""
RANSAC Consensus - model-agnostic Random Sample Consensus estimation.

This package provides a RANSAC engine that estimates the parameters of any
model implementing the RansacModel contract from samples with outliers.
"""

__version__ = '1.0.0'

from .model import RansacModel
from .hypothesis import Hypothesis
from .ransac_core import Ransac, RunStats, estimate
from .config import RansacParams, load_params
from .utils import rank_hypotheses, best_hypothesis, summarize

__all__ = [
    'RansacModel',
    'Hypothesis',
    'Ransac',
    'RunStats',
    'estimate',
    'RansacParams',
    'load_params',
    'rank_hypotheses',
    'best_hypothesis',
    'summarize',
]
