"""Temporal fusion of past sweeps into the current sensor frame.

Past sweeps are stored in world coordinates. At fusion time they are
reprojected through the inverse of the current sensor pose, so the
detector sees every point expressed where the sensor is now, with each
point tagged by how old its sweep is.
"""
import logging
from collections import deque

import numpy as np

from .transform import invert_pose, transform_points
from .types import PointCloud, WorldCloud

logger = logging.getLogger(__name__)


class FusionBuffer:
    """Time- and count-bounded history of world-frame sweeps.

    One buffer belongs to one sensor. Per sweep, call evict_stale(), then
    fuse(), then commit() with the pre-fusion cloud.
    """

    def __init__(self, max_fused_frames: int = 5, max_fusion_age: float = 0.5):
        """
        Args:
            max_fused_frames: Frames fed to the detector, current one included.
                The buffer keeps at most max_fused_frames - 1 past sweeps.
            max_fusion_age: Oldest sweep age in seconds still fused.
        """
        self.max_fused_frames = max_fused_frames
        self.max_fusion_age = max_fusion_age
        self._clouds = deque()

    @property
    def enabled(self) -> bool:
        return self.max_fused_frames > 1

    @property
    def capacity(self) -> int:
        return max(0, self.max_fused_frames - 1)

    def __len__(self):
        return len(self._clouds)

    def __iter__(self):
        return iter(self._clouds)

    def reset(self):
        """Drop all history, e.g. after a sensor restart or a pose jump."""
        self._clouds.clear()

    def evict_stale(self, current_timestamp: float):
        """Drop entries from the front older than max_fusion_age."""
        while (self._clouds and
               current_timestamp - self._clouds[0].timestamp >
               self.max_fusion_age):
            dropped = self._clouds.popleft()
            logger.debug("Evicted stale sweep t=%.6f (age %.3fs)",
                         dropped.timestamp,
                         current_timestamp - dropped.timestamp)

    def fuse(self, cloud: PointCloud, sensor_to_world: np.ndarray,
             current_timestamp: float) -> PointCloud:
        """Append every buffered sweep, reprojected into the current frame.

        Sweeps are appended most recent first. `cloud` is not modified.

        Args:
            cloud: Current sensor-frame cloud.
            sensor_to_world: (4, 4) current sensor pose.
            current_timestamp: Current sweep timestamp.

        Returns:
            New cloud holding the current points followed by the past ones.
        """
        if not self._clouds:
            return cloud

        world_to_sensor = invert_pose(sensor_to_world)
        points = [cloud.points]
        intensities = [cloud.intensities]
        time_offsets = [cloud.time_offsets]
        beam_ids = [cloud.beam_ids] if cloud.beam_ids is not None else None

        for world_cloud in reversed(self._clouds):
            n = len(world_cloud)
            delta_t = current_timestamp - world_cloud.timestamp
            points.append(transform_points(
                world_to_sensor, world_cloud.points).astype(np.float32))
            intensities.append(world_cloud.intensities.astype(np.float32))
            time_offsets.append(np.full(n, delta_t, dtype=np.float32))
            if beam_ids is not None:
                # Fused points have no beam; -1 never matches a stride
                beam_ids.append(np.full(n, -1, dtype=np.int32))

        return PointCloud(
            points=np.concatenate(points),
            intensities=np.concatenate(intensities),
            time_offsets=np.concatenate(time_offsets),
            beam_ids=None if beam_ids is None else np.concatenate(beam_ids),
        )

    def commit(self, cloud: PointCloud, sensor_to_world: np.ndarray,
               current_timestamp: float):
        """Store the current (pre-fusion) cloud in world coordinates.

        Committing a fused cloud would fuse past points again on every
        later sweep.
        """
        world_cloud = WorldCloud(
            points=transform_points(sensor_to_world, cloud.points),
            intensities=cloud.intensities.astype(np.float64),
            timestamp=current_timestamp,
        )
        self._clouds.append(world_cloud)
        while len(self._clouds) > self.capacity:
            self._clouds.popleft()
