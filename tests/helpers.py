"""
Shared test helpers: a scripted inference engine and cloud builders.
"""

import numpy as np

from pillar_detection.engine import InferenceEngine
from pillar_detection.types import PointCloud, Sweep


class FakeEngine(InferenceEngine):
    """
    Inference engine that records its inputs and returns scripted outputs.

    :param detections: flat detection values returned by every infer() call
    :param labels:     labels returned by every infer() call
    :param device_ok:  value returned by select_device()
    """

    def __init__(self, detections=(), labels=(), device_ok=True):
        self.detections = list(detections)
        self.labels = list(labels)
        self.device_ok = device_ok
        self.calls = []
        self.devices = []

    def select_device(self, gpu_id):
        self.devices.append(gpu_id)
        return self.device_ok

    def infer(self, points_array, num_points):
        self.calls.append((np.array(points_array, copy=True), num_points))
        return self.detections, self.labels


def make_engine(engine_config):
    """Factory used by the replay tests through 'helpers:make_engine'."""
    engine = FakeEngine(detections=[0, 0, 0, 2, 4, 2, 0], labels=[1])
    engine.config = engine_config
    return engine


def make_cloud(xyz, intensities=None, beam_ids=None):
    """
    Build a PointCloud from a list of xyz rows.

    :param xyz:         (N, 3) coordinates
    :param intensities: (N,) intensities, defaults to zeros
    :param beam_ids:    optional (N,) beam indices
    """
    xyz = np.asarray(xyz, dtype=np.float32).reshape(-1, 3)
    if intensities is None:
        intensities = np.zeros(len(xyz), dtype=np.float32)
    return PointCloud(points=xyz, intensities=intensities, beam_ids=beam_ids)


def make_sweep(xyz, timestamp=0.0, pose=None, intensities=None):
    return Sweep(cloud=make_cloud(xyz, intensities), timestamp=timestamp,
                 sensor_to_world=np.eye(4) if pose is None else pose)


def random_cloud(n, seed=0, extent=20.0):
    rng = np.random.default_rng(seed)
    xyz = rng.uniform(-extent, extent, size=(n, 3))
    intensities = rng.uniform(0.0, 255.0, size=n)
    return make_cloud(xyz, intensities)
