"""
Laser plane estimation example.

Generates a synthetic scene of laser points on a tilted plane mixed with
background clutter, estimates the plane with RANSAC and prints the best fit.

Usage:
    python examples/laser_plane_example.py
    python examples/laser_plane_example.py --params my_params.yaml --noise 0.005
"""

import argparse
import logging
import os
import sys

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ransac_consensus import RansacModel, best_hypothesis, estimate, load_params, summarize
from ransac_consensus.logger import setup_logger


class ExplicitPlane(RansacModel):
    """
    Plane z = a*x + b*y + c.

    Suitable for laser planes that are never parallel to the z axis.
    """

    def __init__(self):
        self.coefficients = None  # [a, b, c]

    @property
    def required_samples(self) -> int:
        return 3

    def build(self, initial: np.ndarray) -> bool:
        A = np.column_stack([initial[:, 0], initial[:, 1], np.ones(len(initial))])
        # Near-singular systems mean collinear or repeated points
        if abs(np.linalg.det(A[:3])) < 1e-12:
            return False
        self.coefficients = np.linalg.solve(A[:3], initial[:3, 2])
        return True

    def distance_to(self, point: np.ndarray) -> float:
        a, b, c = self.coefficients
        return abs(a * point[0] + b * point[1] - point[2] + c) / np.sqrt(a * a + b * b + 1.0)

    def distances(self, points: np.ndarray) -> np.ndarray:
        a, b, c = self.coefficients
        residual = a * points[:, 0] + b * points[:, 1] - points[:, 2] + c
        return np.abs(residual) / np.sqrt(a * a + b * b + 1.0)

    def fit(self, consensus_set: np.ndarray) -> None:
        A = np.column_stack([consensus_set[:, 0], consensus_set[:, 1], np.ones(len(consensus_set))])
        solution, _, rank, _ = np.linalg.lstsq(A, consensus_set[:, 2], rcond=None)
        if rank == 3:
            self.coefficients = solution


def make_scene(rng, n_laser=400, n_clutter=600, noise=0.002):
    """Laser points on z = 0.2x - 0.1y + 0.5 plus clutter in [-1, 1]^3."""
    x = rng.uniform(-1, 1, n_laser)
    y = rng.uniform(-1, 1, n_laser)
    z = 0.2 * x - 0.1 * y + 0.5 + rng.normal(0, noise, n_laser)
    laser = np.column_stack([x, y, z])
    clutter = rng.uniform(-1, 1, (n_clutter, 3))
    return np.vstack([laser, clutter])


def main(argv=None):
    parser = argparse.ArgumentParser(description='Estimate a laser plane with RANSAC')
    parser.add_argument('--params', default=None, help='YAML parameter file')
    parser.add_argument('--noise', type=float, default=0.002, help='Laser point noise (sigma)')
    parser.add_argument('--seed', type=int, default=42, help='Scene seed')
    parser.add_argument('--log-file', default=None, help='Optional log file')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    logger = setup_logger(
        'ransac_consensus',
        logging.DEBUG if args.verbose else logging.INFO,
        args.log_file
    )

    params = load_params(args.params)
    points = make_scene(np.random.default_rng(args.seed), noise=args.noise)
    logger.info(f'Generated {len(points)} points')

    engine = estimate(points, ExplicitPlane, params)
    best = best_hypothesis(engine.hypotheses)
    if best is None:
        logger.warning('No plane found')
        return 1

    summary = summarize(best)
    a, b, c = best.model.coefficients
    logger.info(
        f'Plane z = {a:.4f}x + {b:.4f}y + {c:.4f}, '
        f'inliers={summary.consensus_size}/{len(points)} ({summary.inlier_ratio:.1%})'
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
