"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with flat UPPERCASE aliases
(e.g. GIF_VIEWER_PATH -> presentation.viewer_path) as well as nested
sections for advanced users.

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional, Union
from pydantic import Field, field_validator
from dotreel.schemas.base import DotreelBaseModel


class UserFramesConfig(DotreelBaseModel):
    """User-facing frame naming config."""
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    raster_extension: Optional[str] = None


class UserRendererConfig(DotreelBaseModel):
    """User-facing renderer config."""
    executable: Optional[str] = None
    format: Optional[str] = None
    timeout_sec: Optional[float] = None

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        """Graphviz format names are lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserCompositorConfig(DotreelBaseModel):
    """User-facing compositor config."""
    executable: Optional[str] = None
    delay: Optional[int] = None
    loop: Optional[int] = None
    artifact_extension: Optional[str] = None
    timeout_sec: Optional[float] = None


class UserUpstreamConfig(DotreelBaseModel):
    """User-facing upstream config."""
    command: Optional[list[str]] = None
    cwd: Optional[str] = None
    timeout_sec: Optional[float] = None


class UserConfig(DotreelBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            OUTPUT_ROOT="output",
            GIF_VIEWER_PATH="/Applications/Lyn.app",
            UPSTREAM_COMMAND="cargo run",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Paths
    output_root: Optional[str] = Field(None, alias="OUTPUT_ROOT")
    state_dir: Optional[str] = Field(None, alias="STATE_DIR")

    # Presentation
    viewer_path: Optional[str] = Field(None, alias="GIF_VIEWER_PATH")
    present: Optional[bool] = Field(None, alias="PRESENT")

    # Animation
    frame_delay: Optional[int] = Field(None, alias="FRAME_DELAY")
    loop: Optional[int] = Field(None, alias="LOOP")
    frame_prefix: Optional[str] = Field(None, alias="FRAME_PREFIX")

    # Upstream program: "cargo run" or ["cargo", "run"]
    upstream_command: Optional[Union[str, list[str]]] = Field(None, alias="UPSTREAM_COMMAND")
    upstream_cwd: Optional[str] = Field(None, alias="UPSTREAM_CWD")

    # Workers
    max_scenarios: Optional[int] = Field(None, alias="MAX_SCENARIOS")
    max_renders: Optional[int] = Field(None, alias="MAX_RENDERS")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    frames: Optional[UserFramesConfig] = None
    renderer: Optional[UserRendererConfig] = None
    compositor: Optional[UserCompositorConfig] = None
    upstream: Optional[UserUpstreamConfig] = None

    model_config = DotreelBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("upstream_command", mode="before")
    @classmethod
    def split_command_string(cls, v):
        """Accept a shell-like string and split it on whitespace."""
        if isinstance(v, str):
            parts = v.split()
            return parts or None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.output_root is not None:
            overrides["output_root"] = str(self.output_root)
        if self.state_dir is not None:
            overrides["state_dir"] = str(self.state_dir)

        # Presentation section
        presentation = {}
        if self.viewer_path is not None:
            presentation["viewer_path"] = self.viewer_path
        if self.present is not None:
            presentation["enabled"] = self.present
        if presentation:
            overrides["presentation"] = presentation

        # Frames section
        frames = {}
        if self.frame_prefix is not None:
            frames["prefix"] = self.frame_prefix
        if self.frames is not None:
            frames.update(self.frames.model_dump(exclude_none=True))
        if frames:
            overrides["frames"] = frames

        # Renderer section
        if self.renderer is not None:
            renderer = self.renderer.model_dump(exclude_none=True)
            if renderer:
                overrides["renderer"] = renderer

        # Compositor section
        compositor = {}
        if self.frame_delay is not None:
            compositor["delay"] = self.frame_delay
        if self.loop is not None:
            compositor["loop"] = self.loop
        if self.compositor is not None:
            compositor.update(self.compositor.model_dump(exclude_none=True))
        if compositor:
            overrides["compositor"] = compositor

        # Upstream section
        upstream = {}
        if self.upstream_command is not None:
            upstream["command"] = list(self.upstream_command)
        if self.upstream_cwd is not None:
            upstream["cwd"] = self.upstream_cwd
        if self.upstream is not None:
            upstream.update(self.upstream.model_dump(exclude_none=True))
        if upstream:
            overrides["upstream"] = upstream

        # Concurrency section
        concurrency = {}
        if self.max_scenarios is not None:
            concurrency["max_scenarios"] = self.max_scenarios
        if self.max_renders is not None:
            concurrency["max_renders"] = self.max_renders
        if concurrency:
            overrides["concurrency"] = concurrency

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
