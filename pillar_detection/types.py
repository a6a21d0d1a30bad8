"""Data structures passed between the detection pipeline stages.

Point clouds are stored column-wise as NumPy arrays, one row per point.
"""
import numpy as np
from dataclasses import dataclass, field


def _empty_points():
    return np.zeros((0, 3), dtype=np.float32)


def _column(values, n: int, dtype, name: str) -> np.ndarray:
    """Per-point column of length n; None means all zeros."""
    if values is None:
        return np.zeros(n, dtype=dtype)
    values = np.asarray(values, dtype=dtype).reshape(-1)
    if len(values) != n:
        raise ValueError(f"{name} has {len(values)} values for {n} points")
    return values


@dataclass
class PointCloud:
    """Sensor-frame point cloud.

    time_offsets holds, per point, the current sweep timestamp minus the
    timestamp of the sweep the point was captured in (0 for native points).
    beam_ids is the sensor's native beam index and may be missing.
    """
    points: np.ndarray = field(default_factory=_empty_points)       # (N, 3)
    intensities: np.ndarray = None   # (N,)
    time_offsets: np.ndarray = None  # (N,)
    beam_ids: np.ndarray = None      # (N,)

    def __post_init__(self):
        if self.points is None:
            # Left for validate_sweep to reject
            return
        self.points = np.asarray(self.points, dtype=np.float32).reshape(-1, 3)
        n = len(self.points)
        self.intensities = _column(self.intensities, n, np.float32,
                                   "intensities")
        self.time_offsets = _column(self.time_offsets, n, np.float32,
                                    "time_offsets")
        if self.beam_ids is not None:
            self.beam_ids = _column(self.beam_ids, n, np.int32, "beam_ids")

    def __len__(self):
        return 0 if self.points is None else len(self.points)

    def select(self, indices: np.ndarray) -> 'PointCloud':
        """Return a new cloud holding the points at `indices` (index or mask)."""
        return PointCloud(
            points=self.points[indices],
            intensities=self.intensities[indices],
            time_offsets=self.time_offsets[indices],
            beam_ids=None if self.beam_ids is None else self.beam_ids[indices],
        )

    def copy(self) -> 'PointCloud':
        return PointCloud(
            points=self.points.copy(),
            intensities=self.intensities.copy(),
            time_offsets=self.time_offsets.copy(),
            beam_ids=None if self.beam_ids is None else self.beam_ids.copy(),
        )

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'PointCloud':
        """Build a cloud from an (N, 4) [x, y, z, intensity] or
        (N, 5) [x, y, z, intensity, beam_id] array."""
        array = np.asarray(array)
        if array.ndim != 2 or array.shape[1] not in (4, 5):
            raise ValueError(
                f"expected an (N, 4) or (N, 5) point array, got {array.shape}")
        beam_ids = array[:, 4] if array.shape[1] == 5 else None
        return cls(points=array[:, :3], intensities=array[:, 3],
                   beam_ids=beam_ids)


@dataclass
class Sweep:
    """One LiDAR sweep with the sensor pose at capture time."""
    cloud: PointCloud = None
    timestamp: float = 0.0
    sensor_to_world: np.ndarray = field(default_factory=lambda: np.eye(4))


@dataclass
class WorldCloud:
    """World-frame copy of a past sweep, kept by the fusion buffer."""
    points: np.ndarray = None       # (N, 3) float64
    intensities: np.ndarray = None  # (N,)
    timestamp: float = 0.0

    def __len__(self):
        return 0 if self.points is None else len(self.points)


@dataclass(frozen=True, eq=False)
class DetectedObject:
    """Oriented 3D box decoded from one detector output record.

    Corners are ordered with the x half-extent varying slowest and the
    z offset (bottom, top) varying fastest.
    """
    id: int
    center: np.ndarray          # (3,) box bottom center, sensor frame
    size: np.ndarray            # (3,) dx, dy, dz
    theta: float                # yaw in (-pi, pi]
    direction: np.ndarray       # (3,)
    corners: np.ndarray         # (8, 3) sensor frame
    corners_world: np.ndarray   # (8, 3) world frame
    sub_type: 'ObjectSubType'
    type: 'ObjectType'
    type_probs: np.ndarray      # (MAX_OBJECT_TYPE,)
    classifier: str = ""
    is_background: bool = False


@dataclass
class DetectionResult:
    """Output of one detect() call."""
    objects: list = field(default_factory=list)
    num_points: int = 0
    timings: dict = field(default_factory=dict)
    warnings: list = field(default_factory=list)
