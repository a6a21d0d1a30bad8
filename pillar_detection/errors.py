"""Error taxonomy for the detection pipeline.

Fatal errors abort the current sweep and propagate out of detect().
Non-fatal ones are raised by individual stages, then logged and recorded
by the pipeline, which carries on with the stage skipped.
"""
from enum import Enum


class ErrorKind(Enum):
    NULL_INPUT = "null_input"
    EMPTY_CLOUD = "empty_cloud"
    INVALID_DOWNSAMPLE_FACTOR = "invalid_downsample_factor"
    DEVICE_UNAVAILABLE = "device_unavailable"
    MALFORMED_DETECTIONS = "malformed_detections"
    UNKNOWN_LABEL = "unknown_label"


class PipelineError(Exception):
    """Base class for pipeline failures. `kind` tells callers what failed."""
    kind = None
    fatal = True


class NullInputError(PipelineError):
    kind = ErrorKind.NULL_INPUT


class EmptyCloudError(PipelineError):
    kind = ErrorKind.EMPTY_CLOUD


class InvalidDownsampleFactorError(PipelineError):
    kind = ErrorKind.INVALID_DOWNSAMPLE_FACTOR
    fatal = False


class DeviceUnavailableError(PipelineError):
    kind = ErrorKind.DEVICE_UNAVAILABLE


class MalformedDetectionsError(PipelineError):
    kind = ErrorKind.MALFORMED_DETECTIONS
