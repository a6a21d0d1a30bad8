"""Random point sub-sampling with a replayable seed."""
import numpy as np

from .types import PointCloud


class Sampler:
    """Caps a cloud at max_points by uniform selection without replacement.

    A new generator is seeded on every call, so the same cloud always
    yields the same subset.
    """

    def __init__(self, seed: int = 0):
        self.seed = seed

    def indices(self, num_points: int, max_points: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        return rng.permutation(num_points)[:min(num_points, max_points)]

    def sample(self, cloud: PointCloud, max_points: int) -> PointCloud:
        return cloud.select(self.indices(len(cloud), max_points))
