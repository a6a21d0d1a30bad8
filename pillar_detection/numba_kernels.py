"""Numba JIT-compiled kernels for the per-box decoding loops.

1. normalize_yaw — detector heading to platform heading in (-pi, pi]
2. box_corners_batch — 8 corners per oriented box in the sensor frame
"""
import math
import numpy as np
from numba import njit, prange


@njit(cache=True)
def normalize_yaw_jit(yaw_raw):
    """Rotate the detector heading by +pi/2, wrap with atan2 and negate.

    atan2 can return exactly pi, whose negation is mapped back to pi.
    """
    out = np.empty(yaw_raw.shape[0])
    for i in range(yaw_raw.shape[0]):
        shifted = yaw_raw[i] + math.pi / 2.0
        yaw = -math.atan2(math.sin(shifted), math.cos(shifted))
        if yaw <= -math.pi:
            yaw += 2.0 * math.pi
        out[i] = yaw
    return out


@njit(cache=True, parallel=True)
def box_corners_batch_jit(centers, sizes, yaws):
    """Corners of boxes rotated about +Z and translated to their centers.

    Args:
        centers: (M, 3) box bottom centers.
        sizes: (M, 3) extents (dx, dy, dz); dz is measured up from the
            bottom face.
        yaws: (M,) headings in radians.

    Returns:
        (M, 8, 3) corners. Index k = 4 * ix + 2 * iy + iz for
        vx = (dx/2, -dx/2)[ix], vy = (dy/2, -dy/2)[iy], vz = (0, dz)[iz].
    """
    m = centers.shape[0]
    corners = np.empty((m, 8, 3))
    for i in prange(m):
        cosa = math.cos(yaws[i])
        sina = math.sin(yaws[i])
        hx = sizes[i, 0] / 2.0
        hy = sizes[i, 1] / 2.0
        k = 0
        for ix in range(2):
            vx = hx if ix == 0 else -hx
            for iy in range(2):
                vy = hy if iy == 0 else -hy
                for iz in range(2):
                    vz = 0.0 if iz == 0 else sizes[i, 2]
                    corners[i, k, 0] = cosa * vx - sina * vy + centers[i, 0]
                    corners[i, k, 1] = sina * vx + cosa * vy + centers[i, 1]
                    corners[i, k, 2] = vz + centers[i, 2]
                    k += 1
    return corners


def warmup():
    """Trigger compilation so the first sweep does not pay for it."""
    normalize_yaw_jit(np.zeros(1))
    box_corners_batch_jit(np.zeros((1, 3)), np.ones((1, 3)), np.zeros(1))
