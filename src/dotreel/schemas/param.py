"""ParamConfig: Expert defaults for the dotreel pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from dotreel.schemas.base import DotreelBaseModel


def _require_dot_prefix(v: str) -> str:
    if not v.startswith("."):
        raise ValueError(f"extension must start with '.': {v!r}")
    return v


# =============================================================================
# Nested Configuration Models
# =============================================================================

class FramesConfig(DotreelBaseModel):
    """Frame filename convention written by the upstream program."""
    prefix: str = "frame_"
    suffix: str = Field(".dot", description="Graph description extension")
    raster_extension: str = Field(".png", description="Extension of rendered frames")

    @field_validator("suffix", "raster_extension")
    @classmethod
    def check_extension(cls, v):
        """Extensions must include the leading dot."""
        return _require_dot_prefix(v)


class RendererConfig(DotreelBaseModel):
    """Graphviz renderer configuration."""
    executable: str = "dot"
    format: str = Field("png", description="Graphviz -T output format")
    timeout_sec: Optional[float] = Field(60.0, gt=0)


class CompositorConfig(DotreelBaseModel):
    """ImageMagick compositor configuration."""
    executable: str = "magick"
    delay: int = Field(50, ge=1, description="Per-frame delay in centiseconds")
    loop: int = Field(0, ge=0, description="Loop count, 0 = forever")
    artifact_extension: str = ".gif"
    timeout_sec: Optional[float] = Field(300.0, gt=0)

    @field_validator("artifact_extension")
    @classmethod
    def check_extension(cls, v):
        """Extensions must include the leading dot."""
        return _require_dot_prefix(v)


class PresentationConfig(DotreelBaseModel):
    """Viewer settings."""
    enabled: bool = True
    viewer_path: Optional[str] = None


class UpstreamConfig(DotreelBaseModel):
    """Upstream generator invocation. No command means nothing to run."""
    command: Optional[list[str]] = None
    cwd: Optional[str] = None
    timeout_sec: Optional[float] = Field(None, gt=0)


class ConcurrencyConfig(DotreelBaseModel):
    """Worker pool sizes."""
    max_scenarios: int = Field(2, ge=1, le=32, description="Scenarios processed in parallel")
    max_renders: int = Field(4, ge=1, le=64, description="Frame renders in parallel per scenario")


class TrackerConfig(DotreelBaseModel):
    """Run tracker (only active when state_dir is set)."""
    enabled: bool = True
    db_filename: str = "dotreel_runs.db"


class LoggingConfig(DotreelBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(DotreelBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    output_root: str = "output"
    state_dir: Optional[str] = None
    frames: FramesConfig = Field(default_factory=FramesConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    compositor: CompositorConfig = Field(default_factory=CompositorConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    tracker: TrackerConfig = Field(default_factory=TrackerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
