"""Configuration loader for the detection pipeline.

Reads a YAML file with one section per pipeline stage (downsample, fusion,
sampling, encoding, engine). Missing sections and keys keep their defaults.
"""
import yaml
from dataclasses import dataclass, field

INT32_MAX = 2 ** 31 - 1


@dataclass
class DownsampleConfig:
    enable_beam_downsample: bool = False
    beam_stride_factor: int = 4
    enable_voxel_downsample: bool = False
    voxel_size_x: float = 0.01  # [m]
    voxel_size_y: float = 0.01  # [m]
    voxel_size_z: float = 0.01  # [m]

    @property
    def voxel_size(self):
        return (self.voxel_size_x, self.voxel_size_y, self.voxel_size_z)


@dataclass
class FusionConfig:
    enable_fusion: bool = False
    max_fused_frames: int = 5    # current sweep included
    max_fusion_age: float = 0.5  # [s]


@dataclass
class SamplingConfig:
    enable_shuffle_sample: bool = False
    max_points: int = INT32_MAX
    seed: int = 0


@dataclass
class EncodingConfig:
    """Layout shared with the inference engine. Changing it breaks the model."""
    feature_width: int = 5
    intensity_normalizer: float = 255.0
    box_feature_width: int = 7


@dataclass
class EngineConfig:
    """Options handed to the inference engine factory, not read by the core."""
    gpu_id: int = 0
    reproduce_result_mode: bool = False
    score_threshold: float = 0.5
    nms_overlap_threshold: float = 0.5
    pfe_onnx_file: str = ""
    rpn_onnx_file: str = ""


@dataclass
class DetectionConfig:
    """Full pipeline configuration."""
    downsample: DownsampleConfig = field(default_factory=DownsampleConfig)
    fusion: FusionConfig = field(default_factory=FusionConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)

    def validate(self):
        """Raise ValueError if a setting breaks the engine contract.

        The beam stride factor is checked per sweep instead, where a bad
        value only disables that stage.
        """
        enc = self.encoding
        if enc.feature_width < 5:
            raise ValueError(
                f"feature_width must be >= 5, got {enc.feature_width}")
        if enc.box_feature_width < 7:
            raise ValueError(
                f"box_feature_width must be >= 7, got {enc.box_feature_width}")
        if enc.intensity_normalizer == 0:
            raise ValueError("intensity_normalizer must be non-zero")
        if self.downsample.enable_voxel_downsample and \
                min(self.downsample.voxel_size) <= 0:
            raise ValueError(
                f"voxel sizes must be positive, got {self.downsample.voxel_size}")
        if self.sampling.max_points < 1:
            raise ValueError(
                f"max_points must be >= 1, got {self.sampling.max_points}")
        if self.fusion.max_fusion_age < 0:
            raise ValueError(
                f"max_fusion_age must be >= 0, got {self.fusion.max_fusion_age}")
        return self


def _update_section(section, values: dict):
    for key, value in values.items():
        if not hasattr(section, key):
            raise ValueError(
                f"unknown option '{key}' for {type(section).__name__}")
        default = getattr(section, key)
        # Keep numeric types stable when YAML writes 1 for 1.0
        if isinstance(default, float) and isinstance(value, int) \
                and not isinstance(value, bool):
            value = float(value)
        setattr(section, key, value)


def config_from_dict(cfg: dict) -> DetectionConfig:
    """Build a DetectionConfig from a nested dict (the parsed YAML layout)."""
    dc = DetectionConfig()
    cfg = cfg or {}
    _update_section(dc.downsample, cfg.get('downsample', {}) or {})
    _update_section(dc.fusion, cfg.get('fusion', {}) or {})
    _update_section(dc.sampling, cfg.get('sampling', {}) or {})
    _update_section(dc.encoding, cfg.get('encoding', {}) or {})
    _update_section(dc.engine, cfg.get('engine', {}) or {})
    return dc.validate()


def load_config(yaml_path: str) -> DetectionConfig:
    """Load and validate configuration from a YAML file.

    Example layout::

        downsample:
          enable_voxel_downsample: true
          voxel_size_x: 0.1
        fusion:
          enable_fusion: true
          max_fused_frames: 3
        engine:
          gpu_id: 0
    """
    with open(yaml_path, 'r') as f:
        cfg = yaml.safe_load(f)
    return config_from_dict(cfg)
