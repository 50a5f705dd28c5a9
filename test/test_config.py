"""
Unit tests for RANSAC parameters and logging setup.
"""

import pytest
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ransac_consensus import RansacParams, load_params
from ransac_consensus.config import default_params_path, params_from_dict
from ransac_consensus.logger import setup_logger


class TestRansacParams:
    """Tests for RansacParams."""

    def test_defaults(self):
        params = RansacParams()
        assert params.max_hypotheses == 1000
        assert params.max_distance == 0.01
        assert params.min_consensus_size is None
        assert params.min_consensus_ratio == 0.3
        assert params.random_seed is None
        assert params.workers == 1

    def test_resolve_from_ratio(self):
        params = RansacParams(min_consensus_ratio=0.25)
        assert params.resolve_min_consensus(100) == 25
        assert params.resolve_min_consensus(10) == 3
        assert params.resolve_min_consensus(1) == 1

    def test_explicit_size_wins(self):
        params = RansacParams(min_consensus_size=15, min_consensus_ratio=0.9)
        assert params.resolve_min_consensus(100) == 15

    @pytest.mark.parametrize('kwargs', [
        dict(max_hypotheses=-1),
        dict(max_distance=-0.5),
        dict(max_distance=float('nan')),
        dict(min_consensus_size=0),
        dict(min_consensus_ratio=0.0),
        dict(min_consensus_ratio=1.5),
        dict(workers=0),
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            RansacParams(**kwargs).validate()

    @pytest.mark.parametrize('kwargs', [
        dict(max_distance='1e-2'),
        dict(max_hypotheses=10.5),
        dict(workers=True),
        dict(min_consensus_size=2.0),
        dict(min_consensus_ratio=None),
        dict(random_seed='42'),
    ])
    def test_validate_rejects_wrong_types(self, kwargs):
        name = next(iter(kwargs))
        with pytest.raises(ValueError, match=name):
            RansacParams(**kwargs).validate()

    def test_integers_accepted_as_numbers(self):
        params = RansacParams(max_distance=1, min_consensus_ratio=1).validate()
        assert params.max_distance == 1

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match='max_iterations'):
            params_from_dict({'max_iterations': 10})


class TestLoadParams:
    """Tests for YAML parameter files."""

    def test_bundled_file_matches_defaults(self):
        assert os.path.isfile(default_params_path())
        assert load_params() == RansacParams()

    def test_custom_file(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text(
            'ransac:\n'
            '  max_hypotheses: 500\n'
            '  max_distance: 0.02\n'
            '  min_consensus_size: 15\n'
            '  random_seed: 42\n'
        )

        params = load_params(str(path))

        assert params.max_hypotheses == 500
        assert params.max_distance == 0.02
        assert params.min_consensus_size == 15
        assert params.random_seed == 42
        assert params.workers == 1

    def test_custom_section(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('laser_plane:\n  workers: 4\n')

        assert load_params(str(path), section='laser_plane').workers == 4
        assert load_params(str(path)) == RansacParams()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('')
        assert load_params(str(path)) == RansacParams()

    def test_invalid_values_in_file(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('ransac:\n  max_distance: -1.0\n')
        with pytest.raises(ValueError):
            load_params(str(path))

    @pytest.mark.parametrize('line, name', [
        ('max_distance: 1e-2', 'max_distance'),
        ('max_hypotheses: 10.5', 'max_hypotheses'),
    ])
    def test_wrongly_typed_values_in_file(self, tmp_path, line, name):
        """PyYAML reads 1e-2 as a string; it is reported as a bad value."""
        path = tmp_path / 'params.yaml'
        path.write_text(f'ransac:\n  {line}\n')
        with pytest.raises(ValueError, match=name):
            load_params(str(path))

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('ransac: 5\n')
        with pytest.raises(ValueError):
            load_params(str(path))


class TestSetupLogger:
    """Tests for logger configuration."""

    def test_console_only(self):
        logger = setup_logger('ransac_consensus.test_console', logging.DEBUG)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logger('ransac_consensus.test_repeat')
        logger = setup_logger('ransac_consensus.test_repeat')
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / 'logs' / 'run.log'
        logger = setup_logger('ransac_consensus.test_file', log_file=str(log_file))
        logger.info('plane fitted')

        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert 'plane fitted' in log_file.read_text()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
