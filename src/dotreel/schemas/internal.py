"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and has explicit values for everything processing code reads.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from dotreel.schemas.base import DotreelBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalFramesConfig(DotreelBaseModel):
    """Runtime frame naming."""
    prefix: str
    suffix: str
    raster_extension: str


class InternalRendererConfig(DotreelBaseModel):
    """Runtime renderer configuration."""
    executable: str
    format: str
    timeout_sec: Optional[float]


class InternalCompositorConfig(DotreelBaseModel):
    """Runtime compositor configuration."""
    executable: str
    delay: int = Field(ge=1)
    loop: int = Field(ge=0)
    artifact_extension: str
    timeout_sec: Optional[float]


class InternalPresentationConfig(DotreelBaseModel):
    """Runtime presentation configuration."""
    enabled: bool
    viewer_path: Optional[str]


class InternalUpstreamConfig(DotreelBaseModel):
    """Runtime upstream configuration."""
    command: Optional[list[str]]
    cwd: Optional[str]
    timeout_sec: Optional[float]


class InternalConcurrencyConfig(DotreelBaseModel):
    """Runtime worker pool sizes."""
    max_scenarios: int = Field(ge=1, le=32)
    max_renders: int = Field(ge=1, le=64)


class InternalTrackerConfig(DotreelBaseModel):
    """Runtime tracker configuration."""
    enabled: bool
    db_filename: str


class InternalLoggingConfig(DotreelBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(DotreelBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.delay = config.compositor.delay  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    output_root: str
    state_dir: Optional[str]
    frames: InternalFramesConfig
    renderer: InternalRendererConfig
    compositor: InternalCompositorConfig
    presentation: InternalPresentationConfig
    upstream: InternalUpstreamConfig
    concurrency: InternalConcurrencyConfig
    tracker: InternalTrackerConfig
    logging: InternalLoggingConfig
    run_id: Optional[str] = None

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
