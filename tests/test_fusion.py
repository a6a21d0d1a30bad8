"""
Temporal fusion buffer: eviction rules, motion compensated reprojection
and commit semantics.
"""

import numpy as np
import pytest

from pillar_detection.fusion import FusionBuffer
from pillar_detection.transform import make_pose, pose_from_yaw
from helpers import make_cloud, random_cloud


def _step(buffer, cloud, pose, t):
    """One sweep through the buffer in pipeline order."""
    buffer.evict_stale(t)
    fused = buffer.fuse(cloud, pose, t)
    buffer.commit(cloud, pose, t)
    return fused


def test_disabled_for_single_frame():
    assert not FusionBuffer(max_fused_frames=1).enabled
    assert not FusionBuffer(max_fused_frames=0).enabled
    assert FusionBuffer(max_fused_frames=2).enabled


def test_empty_buffer_fuse_is_pass_through():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=1.0)
    cloud = random_cloud(10)
    assert buffer.fuse(cloud, np.eye(4), 0.0) is cloud


def test_age_eviction_scenario():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=0.5)
    cloud = make_cloud([[1.0, 0.0, 0.0]])

    _step(buffer, cloud, np.eye(4), 0.0)
    _step(buffer, cloud, np.eye(4), 0.2)
    assert [c.timestamp for c in buffer] == [0.0, 0.2]

    buffer.evict_stale(0.6)
    assert [c.timestamp for c in buffer] == [0.2]

    fused = buffer.fuse(cloud, np.eye(4), 0.6)
    assert len(fused) == 2
    assert fused.time_offsets[1] == pytest.approx(0.4, abs=1e-6)

    buffer.commit(cloud, np.eye(4), 0.6)
    assert [c.timestamp for c in buffer] == [0.2, 0.6]


def test_entry_exactly_at_max_age_is_kept():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=0.5)
    buffer.commit(make_cloud([[0, 0, 0]]), np.eye(4), 1.0)
    buffer.evict_stale(1.5)
    assert len(buffer) == 1


@pytest.mark.parametrize("max_frames", [2, 3, 5])
def test_count_bound_holds_for_any_commit_sequence(max_frames):
    buffer = FusionBuffer(max_fused_frames=max_frames, max_fusion_age=100.0)
    cloud = random_cloud(5)
    for k in range(12):
        _step(buffer, cloud, np.eye(4), 0.1 * k)
        assert len(buffer) <= max_frames - 1
    assert len(buffer) == max_frames - 1
    # Oldest entries were dropped first
    stamps = [c.timestamp for c in buffer]
    assert stamps == sorted(stamps)
    assert stamps[-1] == pytest.approx(1.1)


def test_age_bound_holds_after_every_sweep():
    buffer = FusionBuffer(max_fused_frames=10, max_fusion_age=0.25)
    cloud = random_cloud(3)
    for t in np.cumsum(np.random.default_rng(1).uniform(0.01, 0.2, 40)):
        _step(buffer, cloud, np.eye(4), float(t))
        assert all(t - c.timestamp <= 0.25 for c in buffer)


def test_reprojection_into_current_sensor_frame():
    buffer = FusionBuffer(max_fused_frames=2, max_fusion_age=1.0)
    # Sensor at x=1 sees a point 1 m ahead: world x=2
    _step(buffer, make_cloud([[1.0, 0.0, 0.0]], [7.0]),
          make_pose(trans=[1.0, 0.0, 0.0]), 0.0)

    # Sensor moved to x=2: the old point is now at the sensor origin
    current = make_cloud([[5.0, 5.0, 5.0]])
    fused = _step(buffer, current, make_pose(trans=[2.0, 0.0, 0.0]), 0.1)

    assert len(fused) == 2
    assert fused.points[0] == pytest.approx([5.0, 5.0, 5.0])
    assert fused.points[1] == pytest.approx([0.0, 0.0, 0.0], abs=1e-6)
    assert fused.intensities[1] == pytest.approx(7.0)
    assert fused.time_offsets[0] == 0.0
    assert fused.time_offsets[1] == pytest.approx(0.1)


def test_reprojection_with_rotation():
    buffer = FusionBuffer(max_fused_frames=2, max_fusion_age=1.0)
    buffer.commit(make_cloud([[1.0, 0.0, 0.0]]), np.eye(4), 0.0)

    # Sensor yawed +90 deg: world +x appears on the sensor's -y axis
    fused = buffer.fuse(make_cloud([[0, 0, 0]]), pose_from_yaw(np.pi / 2), 0.1)
    assert fused.points[1] == pytest.approx([0.0, -1.0, 0.0], abs=1e-6)


def test_fuse_appends_most_recent_first():
    buffer = FusionBuffer(max_fused_frames=4, max_fusion_age=1.0)
    buffer.commit(make_cloud([[0, 0, 0]], [1.0]), np.eye(4), 0.0)
    buffer.commit(make_cloud([[0, 0, 0]], [2.0]), np.eye(4), 0.1)
    buffer.commit(make_cloud([[0, 0, 0]], [3.0]), np.eye(4), 0.2)

    fused = buffer.fuse(make_cloud([[0, 0, 0]], [9.0]), np.eye(4), 0.3)
    assert fused.intensities.tolist() == [9.0, 3.0, 2.0, 1.0]
    assert fused.time_offsets == pytest.approx([0.0, 0.1, 0.2, 0.3], abs=1e-6)


def test_fuse_does_not_modify_current_cloud():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=1.0)
    buffer.commit(random_cloud(4), np.eye(4), 0.0)
    cloud = random_cloud(6, seed=2)
    fused = buffer.fuse(cloud, np.eye(4), 0.1)
    assert len(cloud) == 6
    assert len(fused) == 10


def test_commit_stores_pre_fusion_cloud():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=10.0)
    sizes = [4, 6, 8]
    for k, n in enumerate(sizes):
        _step(buffer, random_cloud(n, seed=k), np.eye(4), float(k))
    # Each entry is one sweep's own points, never a fused union
    assert [len(c) for c in buffer] == [6, 8]


def test_reset_clears_history():
    buffer = FusionBuffer(max_fused_frames=3, max_fusion_age=1.0)
    buffer.commit(random_cloud(4), np.eye(4), 0.0)
    buffer.reset()
    assert len(buffer) == 0


def test_independent_buffers_do_not_share_state():
    a = FusionBuffer(max_fused_frames=3, max_fusion_age=1.0)
    b = FusionBuffer(max_fused_frames=3, max_fusion_age=1.0)
    a.commit(random_cloud(4), np.eye(4), 0.0)
    assert len(a) == 1
    assert len(b) == 0
