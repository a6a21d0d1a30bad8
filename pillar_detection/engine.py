"""Boundary to the external inference engine.

The engine is a black box: it takes the flat point feature array and the
point count and returns a flat detection array plus one label per box.
Its internals, determinism and latency are not assumed here.
"""
import numpy as np

from .errors import DeviceUnavailableError


class InferenceEngine:
    """Interface an inference backend must provide."""

    def select_device(self, gpu_id: int) -> bool:
        """Bind the engine to a device. Return False if it is unavailable."""
        return True

    def infer(self, points_array: np.ndarray, num_points: int):
        """Run the detector.

        Args:
            points_array: (num_points * feature_width,) float32 features.
            num_points: Number of encoded points.

        Returns:
            Tuple of (detections, labels): a flat float sequence holding
            len(labels) * box_feature_width values, and an int sequence.
        """
        raise NotImplementedError


def select_device(engine: InferenceEngine, gpu_id: int):
    """Raises DeviceUnavailableError if the engine cannot use `gpu_id`."""
    if not engine.select_device(gpu_id):
        raise DeviceUnavailableError(f"Failed to set device to gpu {gpu_id}")


def run_inference(engine: InferenceEngine, points_array: np.ndarray,
                  num_points: int):
    """Call the engine and return its outputs as NumPy arrays.

    Returns:
        Tuple of (detections float32 (M * box_feature_width,),
                  labels int64 (M,)).
    """
    detections, labels = engine.infer(points_array, num_points)
    detections = np.asarray(detections, dtype=np.float32).reshape(-1)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    return detections, labels
