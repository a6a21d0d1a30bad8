"""Per-sweep detection pipeline.

Validate -> downsample -> fuse -> sample -> encode -> infer -> decode.
The fusion buffer is the only state carried from one sweep to the next,
so one PointPillarsDetection instance serves exactly one sensor.
"""
import logging
import time

from .classification import is_known_label
from .config import DetectionConfig
from .decoder import decode_detections
from .downsampler import downsample_beams, voxel_grid_downsample
from .encoder import encode_features
from .engine import InferenceEngine, select_device, run_inference
from .errors import ErrorKind, InvalidDownsampleFactorError
from .fusion import FusionBuffer
from .sampler import Sampler
from .types import DetectionResult, PointCloud, Sweep
from .validation import validate_sweep

logger = logging.getLogger(__name__)

STAGES = ('downsample', 'fuse', 'shuffle', 'cloud_to_array', 'inference',
          'collect')


class _StageTimer:
    """Seconds elapsed since the previous toc()."""

    def __init__(self):
        self._last = time.perf_counter()

    def toc(self) -> float:
        now = time.perf_counter()
        elapsed = now - self._last
        self._last = now
        return elapsed


class PointPillarsDetection:
    """Runs one sensor's sweeps through preprocessing, the engine and decoding.

    Sweeps must be fed in capture order from a single thread.
    """

    def __init__(self, engine: InferenceEngine, config: DetectionConfig = None):
        self.engine = engine
        self.config = (config or DetectionConfig()).validate()

        fc = self.config.fusion
        self.fusion_buffer = FusionBuffer(
            max_fused_frames=fc.max_fused_frames,
            max_fusion_age=fc.max_fusion_age,
        )
        self.sampler = Sampler(seed=self.config.sampling.seed)

    @staticmethod
    def name() -> str:
        return "PointPillarsDetection"

    @property
    def fusion_enabled(self) -> bool:
        return self.config.fusion.enable_fusion and self.fusion_buffer.enabled

    def reset(self):
        """Forget all fused history."""
        self.fusion_buffer.reset()

    def detect(self, sweep: Sweep) -> DetectionResult:
        """Detect objects in one sweep.

        Raises:
            NullInputError, EmptyCloudError: the sweep cannot be processed.
            DeviceUnavailableError: the engine cannot bind its device.
            MalformedDetectionsError: the engine output is inconsistent.
        """
        validate_sweep(sweep)
        select_device(self.engine, self.config.engine.gpu_id)

        result = DetectionResult()
        timer = _StageTimer()

        cloud = self._downsample(sweep.cloud, result)
        result.timings['downsample'] = timer.toc()
        logger.info("num points before fusing: %d", len(cloud))

        # Native points are 0 s old; fused points get their sweep's age
        cloud = PointCloud(points=cloud.points, intensities=cloud.intensities,
                           beam_ids=cloud.beam_ids)
        if self.fusion_enabled:
            self.fusion_buffer.evict_stale(sweep.timestamp)
            fused = self.fusion_buffer.fuse(
                cloud, sweep.sensor_to_world, sweep.timestamp)
            self.fusion_buffer.commit(
                cloud, sweep.sensor_to_world, sweep.timestamp)
            cloud = fused
        logger.info("num points after fusing: %d", len(cloud))
        result.timings['fuse'] = timer.toc()

        sc = self.config.sampling
        if sc.enable_shuffle_sample:
            cloud = self.sampler.sample(cloud, sc.max_points)
        result.timings['shuffle'] = timer.toc()

        enc = self.config.encoding
        points_array = encode_features(
            cloud, enc.feature_width, enc.intensity_normalizer)
        result.num_points = len(cloud)
        result.timings['cloud_to_array'] = timer.toc()

        detections, labels = run_inference(
            self.engine, points_array, result.num_points)
        result.timings['inference'] = timer.toc()

        result.objects = decode_detections(
            detections, labels, sweep.sensor_to_world,
            box_feature_width=enc.box_feature_width,
            classifier=self.name(),
        )
        if any(not is_known_label(label) for label in labels):
            result.warnings.append(ErrorKind.UNKNOWN_LABEL)
        result.timings['collect'] = timer.toc()

        logger.info("PointPillars: %s", "\t".join(
            f"{stage}: {result.timings[stage]:.6f}" for stage in STAGES))
        return result

    def _downsample(self, cloud, result: DetectionResult):
        dc = self.config.downsample
        if dc.enable_beam_downsample:
            try:
                cloud = downsample_beams(cloud, dc.beam_stride_factor)
            except InvalidDownsampleFactorError as e:
                logger.warning("%s. Cancel down sampling.", e)
                result.warnings.append(e.kind)
        if dc.enable_voxel_downsample:
            cloud = voxel_grid_downsample(cloud, dc.voxel_size)
        return cloud
