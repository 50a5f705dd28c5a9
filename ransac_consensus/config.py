"""
RANSAC run parameters.

Parameters can be built in code or loaded from a YAML file; the bundled
data/ransac_params.yaml holds the defaults.
"""

import math
import os
from dataclasses import dataclass, fields, asdict
from numbers import Integral, Real
from typing import Optional

import yaml


DEFAULT_SECTION = 'ransac'

# Expected type of each parameter; None is allowed where the default is None
_INTEGER_PARAMS = ('max_hypotheses', 'min_consensus_size', 'random_seed', 'workers')
_REAL_PARAMS = ('max_distance', 'min_consensus_ratio')


@dataclass
class RansacParams:
    """Parameters controlling one RANSAC run."""
    max_hypotheses: int = 1000  # Number of trials per run
    max_distance: float = 0.01  # Inlier distance threshold
    min_consensus_size: Optional[int] = None  # Absolute acceptance size, overrides ratio
    min_consensus_ratio: float = 0.3  # Acceptance size as a fraction of all samples
    random_seed: Optional[int] = None  # None seeds from OS entropy
    workers: int = 1  # Threads used for the trial loop

    def validate(self) -> 'RansacParams':
        """
        Check parameter types and ranges.

        Returns:
            self, to allow chaining

        Raises:
            ValueError: If any parameter has the wrong type or is out of range
        """
        self._check_types()
        if self.max_hypotheses < 0:
            raise ValueError(f'max_hypotheses must be >= 0, got {self.max_hypotheses}')
        if not self.max_distance >= 0:
            raise ValueError(f'max_distance must be >= 0, got {self.max_distance}')
        if self.min_consensus_size is not None and self.min_consensus_size < 1:
            raise ValueError(
                f'min_consensus_size must be >= 1, got {self.min_consensus_size}'
            )
        if not 0.0 < self.min_consensus_ratio <= 1.0:
            raise ValueError(
                f'min_consensus_ratio must be in (0, 1], got {self.min_consensus_ratio}'
            )
        if self.workers < 1:
            raise ValueError(f'workers must be >= 1, got {self.workers}')
        return self

    def _check_types(self):
        for name in _INTEGER_PARAMS + _REAL_PARAMS:
            value = getattr(self, name)
            if value is None and name in ('min_consensus_size', 'random_seed'):
                continue
            expected = Integral if name in _INTEGER_PARAMS else Real
            # bool is an Integral but never a meaningful parameter value
            if isinstance(value, bool) or not isinstance(value, expected):
                kind = 'an integer' if expected is Integral else 'a number'
                raise ValueError(f'{name} must be {kind}, got {value!r}')

    def resolve_min_consensus(self, sample_count: int) -> int:
        """
        Minimum consensus size for a run over sample_count samples.

        Args:
            sample_count: Number of samples in the run

        Returns:
            min_consensus_size if set, otherwise ceil(ratio * sample_count), at least 1
        """
        if self.min_consensus_size is not None:
            return self.min_consensus_size
        return max(1, math.ceil(self.min_consensus_ratio * sample_count))

    def to_dict(self) -> dict:
        return asdict(self)


def default_params_path() -> str:
    """Path of the YAML parameter file shipped with the package."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'ransac_params.yaml')


def params_from_dict(values: Optional[dict]) -> RansacParams:
    """
    Build parameters from a mapping, rejecting unknown keys.

    Args:
        values: Mapping of parameter names to values (None means defaults)

    Returns:
        Validated RansacParams
    """
    values = dict(values or {})
    known = {f.name for f in fields(RansacParams)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f'Unknown RANSAC parameters: {", ".join(unknown)}')
    return RansacParams(**values).validate()


def load_params(path: Optional[str] = None, section: str = DEFAULT_SECTION) -> RansacParams:
    """
    Load parameters from a YAML file.

    Args:
        path: YAML file path, defaults to the bundled parameter file
        section: Top-level key holding the parameters

    Returns:
        Validated RansacParams; defaults if the section is missing
    """
    if path is None:
        path = default_params_path()

    with open(path, 'r') as f:
        document = yaml.safe_load(f) or {}

    if not isinstance(document, dict):
        raise ValueError(f'{path}: expected a mapping at top level')

    values = document.get(section)
    if values is not None and not isinstance(values, dict):
        raise ValueError(f'{path}: section "{section}" must be a mapping')

    return params_from_dict(values)
