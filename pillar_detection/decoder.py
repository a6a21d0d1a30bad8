"""Decoding of the flat detector output into DetectedObjects.

Each detection record is (x, y, z, dy, dx, dz, yaw). The width and length
are stored in swapped positions relative to (dx, dy); the order follows
the engine's output layout and is kept as is.
"""
import numpy as np

from .classification import label_to_subtype, subtype_to_type, one_hot_probs
from .errors import MalformedDetectionsError
from .numba_kernels import normalize_yaw_jit, box_corners_batch_jit
from .transform import transform_points
from .types import DetectedObject

# Field offsets inside one detection record
X, Y, Z, DY, DX, DZ, YAW = range(7)


def check_detections(detections: np.ndarray, labels: np.ndarray,
                     box_feature_width: int = 7) -> int:
    """Return the number of boxes, or raise MalformedDetectionsError."""
    if detections.size % box_feature_width != 0:
        raise MalformedDetectionsError(
            f"{detections.size} detection values is not a multiple of "
            f"box_feature_width {box_feature_width}")
    num_objects = detections.size // box_feature_width
    if labels.size != num_objects:
        raise MalformedDetectionsError(
            f"{labels.size} labels for {num_objects} detection records")
    return num_objects


def normalize_yaw(yaw_raw) -> np.ndarray:
    """Convert detector headings to the platform convention in (-pi, pi]."""
    return normalize_yaw_jit(np.atleast_1d(np.asarray(yaw_raw, dtype=np.float64)))


def decode_detections(detections, labels, sensor_to_world: np.ndarray,
                      box_feature_width: int = 7,
                      classifier: str = "") -> list:
    """Turn the engine output into a fresh list of DetectedObjects.

    Args:
        detections: Flat float array, box_feature_width values per box.
        labels: One detector class index per box.
        sensor_to_world: (4, 4) pose of the sweep the boxes were found in.
        box_feature_width: Values per detection record (>= 7).
        classifier: Name recorded on each object as its classifier.

    Returns:
        List of DetectedObject with ids 0..M-1, in record order.

    Raises:
        MalformedDetectionsError: array lengths do not describe whole records.
    """
    detections = np.asarray(detections, dtype=np.float32).reshape(-1)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    num_objects = check_detections(detections, labels, box_feature_width)
    if num_objects == 0:
        return []

    records = detections.reshape(num_objects, box_feature_width).astype(np.float64)
    centers = np.ascontiguousarray(records[:, [X, Y, Z]])
    sizes = np.ascontiguousarray(records[:, [DX, DY, DZ]])
    yaws = normalize_yaw(records[:, YAW])

    corners = box_corners_batch_jit(centers, sizes, yaws)
    corners_world = transform_points(
        sensor_to_world, corners.reshape(-1, 3)).reshape(num_objects, 8, 3)

    objects = []
    for i in range(num_objects):
        yaw = float(yaws[i])
        sub_type = label_to_subtype(labels[i])
        obj_type = subtype_to_type(sub_type)
        objects.append(DetectedObject(
            id=i,
            center=_frozen(centers[i]),
            size=_frozen(sizes[i]),
            theta=yaw,
            direction=_frozen(np.array([np.cos(yaw), np.sin(yaw), 0.0])),
            corners=_frozen(corners[i]),
            corners_world=_frozen(corners_world[i]),
            sub_type=sub_type,
            type=obj_type,
            type_probs=_frozen(one_hot_probs(obj_type)),
            classifier=classifier,
        ))
    return objects


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array)
    array.flags.writeable = False
    return array
