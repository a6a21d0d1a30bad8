"""Flat feature layout handed to the inference engine.

Row i of the flat array is [x, y, z, intensity / normalizer, time_offset],
followed by zeros up to feature_width. The engine reads the array as
num_points consecutive rows, so the field order is part of the model
contract.
"""
import numpy as np

from .types import PointCloud

NUM_ENCODED_FIELDS = 5


def encode_features(cloud: PointCloud, feature_width: int = 5,
                    intensity_normalizer: float = 255.0) -> np.ndarray:
    """Pack a cloud into a flat float32 array of len(cloud) * feature_width."""
    if feature_width < NUM_ENCODED_FIELDS:
        raise ValueError(
            f"feature_width must be >= {NUM_ENCODED_FIELDS}, got {feature_width}")
    features = np.zeros((len(cloud), feature_width), dtype=np.float32)
    features[:, 0:3] = cloud.points
    features[:, 3] = cloud.intensities / np.float32(intensity_normalizer)
    features[:, 4] = cloud.time_offsets
    return features.reshape(-1)


def decode_features(array: np.ndarray, feature_width: int = 5,
                    intensity_normalizer: float = 255.0) -> PointCloud:
    """Inverse of encode_features, up to intensity rounding."""
    array = np.asarray(array, dtype=np.float32)
    if array.size % feature_width != 0:
        raise ValueError(
            f"array of {array.size} values is not a multiple of "
            f"feature_width {feature_width}")
    rows = array.reshape(-1, feature_width)
    return PointCloud(
        points=rows[:, 0:3],
        intensities=rows[:, 3] * np.float32(intensity_normalizer),
        time_offsets=rows[:, 4],
    )
