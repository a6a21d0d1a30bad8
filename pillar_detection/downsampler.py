"""Point reduction by beam striding and voxel grid filtering."""
import numpy as np

from .errors import InvalidDownsampleFactorError
from .types import PointCloud


def downsample_beams(cloud: PointCloud, factor: int) -> PointCloud:
    """Keep roughly one point in every `factor` along the beam ordering.

    Points are kept when their beam id is a multiple of `factor`. Clouds
    without beam ids fall back to every `factor`-th point in native order.

    Raises:
        InvalidDownsampleFactorError: factor < 1.
    """
    if factor < 1:
        raise InvalidDownsampleFactorError(
            f"Down sample beams factor must be >= 1, got {factor}")
    if factor == 1:
        return cloud
    if cloud.beam_ids is not None:
        mask = cloud.beam_ids % factor == 0
    else:
        mask = np.zeros(len(cloud), dtype=bool)
        mask[::factor] = True
    return cloud.select(mask)


def voxel_grid_downsample(cloud: PointCloud, voxel_size) -> PointCloud:
    """Downsample a point cloud using voxel grid filtering.

    Each occupied voxel is replaced by the centroid of its points, with
    the mean intensity of those points. Output order is not the input
    order. Points with NaN or Inf coordinates are discarded. Beam ids are
    dropped and time offsets reset to 0.

    Args:
        cloud: Input cloud.
        voxel_size: (sx, sy, sz) voxel edge lengths in meters.

    Returns:
        Downsampled cloud.
    """
    if len(cloud) == 0:
        return cloud.copy()

    # Remove NaN/Inf points
    finite_mask = np.all(np.isfinite(cloud.points), axis=1)
    if not np.any(finite_mask):
        return PointCloud()
    points = cloud.points[finite_mask].astype(np.float64)
    point_intensities = cloud.intensities[finite_mask].astype(np.float64)

    leaf = np.asarray(voxel_size, dtype=np.float64).reshape(3)

    # Quantize to voxel indices
    voxel_idx = np.floor(points / leaf).astype(np.int64)

    # Shift to non-negative and encode each 3D index as one linear key
    mins = voxel_idx.min(axis=0)
    shifted = voxel_idx - mins
    dims = shifted.max(axis=0) + 1
    linear = (shifted[:, 0] * dims[1] * dims[2] +
              shifted[:, 1] * dims[2] +
              shifted[:, 2])

    unique_keys, inverse = np.unique(linear, return_inverse=True)
    inverse = inverse.reshape(-1)
    n_voxels = len(unique_keys)
    counts = np.bincount(inverse, minlength=n_voxels).astype(np.float64)

    centroids = np.zeros((n_voxels, 3))
    for dim in range(3):
        centroids[:, dim] = np.bincount(
            inverse, weights=points[:, dim], minlength=n_voxels
        ) / counts
    intensities = np.bincount(
        inverse, weights=point_intensities, minlength=n_voxels
    ) / counts

    return PointCloud(points=centroids, intensities=intensities)


def downsample(cloud: PointCloud, config) -> PointCloud:
    """Apply the enabled downsampling stages from a DownsampleConfig.

    An invalid beam factor propagates as InvalidDownsampleFactorError before
    the voxel stage runs; callers that want to continue should call the
    stages individually, as the pipeline does.
    """
    if config.enable_beam_downsample:
        cloud = downsample_beams(cloud, config.beam_stride_factor)
    if config.enable_voxel_downsample:
        cloud = voxel_grid_downsample(cloud, config.voxel_size)
    return cloud
