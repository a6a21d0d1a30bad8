"""Offline replay of recorded sweeps through the detection pipeline.

Sweeps are read from .npz files holding:
    points     (N, 4) [x, y, z, intensity] or (N, 5) with a beam id column
    timestamp  scalar, seconds
    pose       (4, 4) sensor-to-world, or
    translation (3,) + quaternion (4,) [qx, qy, qz, qw]
"""
import glob
import importlib
import logging
import os

import numpy as np
from tqdm import tqdm

from .errors import PipelineError
from .transform import pose_from_quaternion
from .types import PointCloud, Sweep

logger = logging.getLogger(__name__)


def load_sweep_npz(path: str) -> Sweep:
    """Read one sweep from an .npz file."""
    with np.load(path) as data:
        cloud = PointCloud.from_array(data['points'])
        timestamp = float(data['timestamp'])
        if 'pose' in data:
            pose = np.asarray(data['pose'], dtype=np.float64).reshape(4, 4)
        elif 'translation' in data and 'quaternion' in data:
            pose = pose_from_quaternion(data['quaternion'], data['translation'])
        else:
            raise ValueError(f"{path}: missing 'pose' or "
                             f"'translation'/'quaternion'")
    return Sweep(cloud=cloud, timestamp=timestamp, sensor_to_world=pose)


def list_sweep_files(sweep_dir: str) -> list:
    """Sweep files in name order."""
    return sorted(glob.glob(os.path.join(sweep_dir, '*.npz')))


def load_engine(spec: str, engine_config):
    """Build an inference engine from a 'package.module:factory' string.

    The factory is called with the EngineConfig.
    """
    module_name, sep, attr = spec.partition(':')
    if not sep or not module_name or not attr:
        raise ValueError(
            f"engine must look like 'package.module:factory', got '{spec}'")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    return factory(engine_config)


def replay(detector, sweep_files: list, progress: bool = True):
    """Run every sweep file through `detector` in order.

    Sweeps that cannot be read or fail with a PipelineError are dropped
    and the replay goes on with the next one.

    Returns:
        Tuple of (frames, timings): frames is a list of
        (timestamp, objects) per processed sweep, timings a list of the
        per-stage timing dicts.
    """
    frames = []
    timings = []
    for path in tqdm(sweep_files, desc="Detecting", unit="sweep",
                     dynamic_ncols=True, disable=not progress):
        try:
            sweep = load_sweep_npz(path)
        except (OSError, ValueError, KeyError) as e:
            logger.error("Dropped unreadable sweep %s: %s",
                         os.path.basename(path), e)
            continue
        try:
            result = detector.detect(sweep)
        except PipelineError as e:
            logger.error("Dropped sweep %s (%s): %s",
                         os.path.basename(path), e.kind.value, e)
            continue
        frames.append((sweep.timestamp, result.objects))
        timings.append(result.timings)
    return frames, timings
