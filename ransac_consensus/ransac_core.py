"""
Core RANSAC engine.

This module implements "Random Sample Consensus" over any model that follows
the RansacModel contract:
- Ransac: hypothesis generation, consensus evaluation and refitting
- RunStats: bookkeeping of the last run
- estimate: one-call helper driven by RansacParams
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from numbers import Integral
from typing import Callable, Iterable, List, Optional, Tuple, Union

import numpy as np

from .config import RansacParams
from .hypothesis import Hypothesis
from .model import RansacModel


logger = logging.getLogger(__name__)

ModelFactory = Callable[[], RansacModel]
SeedLike = Union[None, int, np.random.Generator]


def _same_required(current: Optional[int], reported: Optional[int]) -> Optional[int]:
    """Return the run's minimal sample size, rejecting a change within one run."""
    if current is None or reported is None or current == reported:
        return reported if current is None else current
    raise ValueError(
        f'required_samples must stay constant within a run, got {current} and {reported}'
    )


@dataclass
class RunStats:
    """Counters describing one RANSAC run."""
    trials: int = 0  # Trials actually performed
    build_failures: int = 0  # Degenerate minimal samples
    refits: int = 0  # Hypotheses refit from their consensus set
    accepted: int = 0  # Hypotheses kept
    cancelled: bool = False  # Run stopped early by the cancel event
    required_samples: Optional[int] = None  # Minimal sample size reported by the models

    def merge(self, other: 'RunStats'):
        self.required_samples = _same_required(self.required_samples, other.required_samples)
        self.trials += other.trials
        self.build_failures += other.build_failures
        self.refits += other.refits
        self.accepted += other.accepted
        self.cancelled = self.cancelled or other.cancelled


class Ransac:
    """
    Estimate model parameters from samples with outliers.

    Every trial draws a minimal sample, builds a model from it, determines the
    consensus set, refits the model on that set and keeps the hypothesis if
    the consensus is large enough. Ranking the kept hypotheses is left to the
    caller (see utils.rank_hypotheses).
    """

    def __init__(
        self,
        samples: Union[np.ndarray, Iterable],
        model_factory: ModelFactory,
        random_seed: SeedLike = None
    ):
        """
        Initialize RANSAC.

        Args:
            samples: Points of shape (N, D), or (N,) for scalar samples; copied
            model_factory: Zero-argument callable returning a fresh model
            random_seed: Seed or Generator for reproducibility, None for OS entropy

        Raises:
            ValueError: If no samples are given or they are not a point array
            TypeError: If model_factory is not callable
        """
        if not isinstance(samples, np.ndarray):
            samples = list(samples)
        points = np.array(samples, dtype=float)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        if points.ndim != 2:
            raise ValueError(f'Samples must form an (N, D) array, got shape {points.shape}')
        if len(points) == 0:
            raise ValueError('RANSAC requires at least one sample')
        if not callable(model_factory):
            raise TypeError(f'model_factory must be callable, got {type(model_factory).__name__}')

        points.flags.writeable = False
        self._samples = points
        self._model_factory = model_factory
        self.rng = np.random.default_rng(random_seed)
        self._hyps: List[Hypothesis] = []
        self.last_run = RunStats()

    @property
    def samples(self) -> np.ndarray:
        """Read-only sample array shared by all hypotheses."""
        return self._samples

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def hypotheses(self) -> List[Hypothesis]:
        """Hypotheses accepted by the last run, in trial order."""
        return list(self._hyps)

    def run(
        self,
        max_hypotheses: int,
        max_distance: float,
        min_consensus_size: int,
        workers: int = 1,
        cancel_event: Optional[threading.Event] = None
    ) -> List[Hypothesis]:
        """
        Run RANSAC.

        Args:
            max_hypotheses: Number of hypotheses to generate
            max_distance: Maximum distance threshold to qualify sample as inlier
            min_consensus_size: Minimum consensus size for a hypothesis to be kept
            workers: Number of threads sharing the trials
            cancel_event: Optional event; once set, remaining trials are skipped

        Returns:
            Accepted hypotheses (also available via the hypotheses property)

        Raises:
            ValueError: On out-of-range arguments, a model requiring < 1 sample or
                models disagreeing on required_samples
            TypeError: If the model factory does not produce a RansacModel
        """
        self._check_run_args(max_hypotheses, max_distance, min_consensus_size, workers)
        self._hyps = []
        self.last_run = RunStats()

        workers = max(1, min(workers, max_hypotheses))
        logger.debug(
            f'Running {max_hypotheses} hypotheses over {self.sample_count} samples '
            f'(max_distance={max_distance}, min_consensus_size={min_consensus_size}, '
            f'workers={workers})'
        )

        if workers == 1:
            accepted, stats = self._run_trials(
                self.rng, max_hypotheses, max_distance, min_consensus_size, cancel_event
            )
        else:
            accepted, stats = self._run_parallel(
                max_hypotheses, max_distance, min_consensus_size, workers, cancel_event
            )

        self._hyps = accepted
        self.last_run = stats

        if stats.cancelled:
            logger.warning(f'RANSAC cancelled after {stats.trials}/{max_hypotheses} trials')
        logger.info(
            f'RANSAC accepted {stats.accepted}/{stats.trials} hypotheses '
            f'({stats.build_failures} degenerate builds, {stats.refits} refits)'
        )
        return self.hypotheses

    def _run_parallel(
        self,
        max_hypotheses: int,
        max_distance: float,
        min_consensus_size: int,
        workers: int,
        cancel_event: Optional[threading.Event]
    ) -> Tuple[List[Hypothesis], RunStats]:
        """Split trials into contiguous chunks, one independent generator per chunk."""
        base, extra = divmod(max_hypotheses, workers)
        chunk_sizes = [base + (1 if i < extra else 0) for i in range(workers)]
        rngs = self.rng.spawn(workers)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    self._run_trials, rng, size, max_distance, min_consensus_size, cancel_event
                )
                for rng, size in zip(rngs, chunk_sizes)
            ]
            results = [future.result() for future in futures]

        # Merge in chunk order so the result follows trial order
        accepted = []
        stats = RunStats()
        for chunk_accepted, chunk_stats in results:
            accepted.extend(chunk_accepted)
            stats.merge(chunk_stats)
        return accepted, stats

    def _run_trials(
        self,
        rng: np.random.Generator,
        n_trials: int,
        max_distance: float,
        min_consensus_size: int,
        cancel_event: Optional[threading.Event]
    ) -> Tuple[List[Hypothesis], RunStats]:
        """Perform n_trials trials sequentially with the given generator."""
        accepted = []
        stats = RunStats()

        for _ in range(n_trials):
            if cancel_event is not None and cancel_event.is_set():
                stats.cancelled = True
                break

            h = Hypothesis(self._new_model(), self._samples)
            required = h.model.required_samples
            if required < 1:
                raise ValueError(
                    f'{type(h.model).__name__}.required_samples must be >= 1, got {required}'
                )
            stats.required_samples = _same_required(stats.required_samples, required)

            if self._run_hypothesis(h, rng, required, max_distance, stats) >= min_consensus_size:
                accepted.append(h)

        stats.accepted = len(accepted)
        return accepted, stats

    def _run_hypothesis(
        self,
        h: Hypothesis,
        rng: np.random.Generator,
        required: int,
        max_distance: float,
        stats: RunStats
    ) -> int:
        """
        Deal with a single hypothesis.

        Args:
            h: Hypothesis holding a fresh model
            rng: Random source for the minimal sample
            required: Minimal sample size reported by the model
            max_distance: Maximum distance threshold to qualify sample as inlier
            stats: Counters updated in place

        Returns:
            Final consensus size (0 if the build failed)
        """
        model = h.model
        stats.trials += 1

        # Initial fit
        if not model.build(self._choose_random(rng, required)):
            stats.build_failures += 1
            return 0

        # Model parameters estimated, determine consensus set
        consensus_size = h.evaluate(max_distance)

        # Refit model using regression method and consensus set
        if consensus_size >= required:
            model.fit(h.consensus_points)
            stats.refits += 1
            consensus_size = h.evaluate(max_distance)

        return consensus_size

    def _choose_random(self, rng: np.random.Generator, count: int) -> np.ndarray:
        """Draw count samples uniformly with replacement."""
        ids = rng.integers(0, self.sample_count, size=count)
        return self._samples[ids]

    def _new_model(self) -> RansacModel:
        model = self._model_factory()
        if not isinstance(model, RansacModel):
            raise TypeError(
                f'model_factory must return a RansacModel, got {type(model).__name__}'
            )
        return model

    @staticmethod
    def _check_run_args(max_hypotheses, max_distance, min_consensus_size, workers):
        for name, value, lower in (
            ('max_hypotheses', max_hypotheses, 0),
            ('min_consensus_size', min_consensus_size, 1),
            ('workers', workers, 1),
        ):
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise ValueError(f'{name} must be an integer, got {value!r}')
            if value < lower:
                raise ValueError(f'{name} must be >= {lower}, got {value}')

        # Also rejects NaN
        if not max_distance >= 0:
            raise ValueError(f'max_distance must be >= 0, got {max_distance}')


def estimate(
    samples: Union[np.ndarray, Iterable],
    model_factory: ModelFactory,
    params: Optional[RansacParams] = None
) -> Ransac:
    """
    Build an engine from parameters and run it once.

    Args:
        samples: Points of shape (N, D)
        model_factory: Zero-argument callable returning a fresh model
        params: Run parameters, defaults to RansacParams()

    Returns:
        The engine after the run; see its hypotheses and last_run attributes
    """
    params = (params or RansacParams()).validate()
    logger.debug(f'Estimating with parameters {params.to_dict()}')
    engine = Ransac(samples, model_factory, random_seed=params.random_seed)
    engine.run(
        params.max_hypotheses,
        params.max_distance,
        params.resolve_min_consensus(engine.sample_count),
        workers=params.workers
    )
    return engine
