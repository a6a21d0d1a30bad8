"""Input checks run before any pipeline stage."""
from .errors import NullInputError, EmptyCloudError


def validate_sweep(sweep):
    """Reject a sweep the pipeline cannot process.

    Raises:
        NullInputError: the sweep, its cloud or its point array is missing.
        EmptyCloudError: the cloud holds no points.
    """
    if sweep is None:
        raise NullInputError("Input null sweep.")
    if sweep.cloud is None or sweep.cloud.points is None:
        raise NullInputError("Input null sweep cloud.")
    if len(sweep.cloud) == 0:
        raise EmptyCloudError("Input none points.")
