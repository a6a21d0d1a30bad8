"""Rigid transforms as 4x4 homogeneous matrices."""
import numpy as np
from scipy.spatial.transform import Rotation


def make_pose(rot: np.ndarray = None, trans: np.ndarray = None) -> np.ndarray:
    """Build a (4, 4) pose from a (3, 3) rotation and (3,) translation."""
    pose = np.eye(4)
    if rot is not None:
        pose[:3, :3] = rot
    if trans is not None:
        pose[:3, 3] = np.asarray(trans, dtype=np.float64).reshape(3)
    return pose


def pose_from_quaternion(quat: np.ndarray, trans: np.ndarray) -> np.ndarray:
    """Pose from a [qx, qy, qz, qw] quaternion and a translation."""
    return make_pose(Rotation.from_quat(quat).as_matrix(), trans)


def pose_from_yaw(yaw: float, trans: np.ndarray = None) -> np.ndarray:
    """Pose rotating by `yaw` about +Z (roll = pitch = 0)."""
    return make_pose(Rotation.from_euler('z', yaw).as_matrix(), trans)


def invert_pose(pose: np.ndarray) -> np.ndarray:
    """Inverse of a rigid transform: [R^T, -R^T t]."""
    rot = pose[:3, :3]
    inv = np.eye(4)
    inv[:3, :3] = rot.T
    inv[:3, 3] = -rot.T @ pose[:3, 3]
    return inv


def transform_points(pose: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply `pose` to (N, 3) points, returning float64 (N, 3)."""
    points = np.asarray(points, dtype=np.float64)
    return points @ pose[:3, :3].T + pose[:3, 3]
