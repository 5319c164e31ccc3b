"""CLIConfig: Command-line operational overrides.

Minimal configuration for the parameters that commonly change between
runs: paths, viewer, frame delay, worker counts, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field
from dotreel.schemas.base import DotreelBaseModel


class CLIConfig(DotreelBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(output_root="/scratch/output", skip_upstream=True)
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    output_root: Optional[str] = None
    state_dir: Optional[str] = None
    viewer_path: Optional[str] = None
    delay: Optional[int] = Field(None, ge=1)
    max_scenarios: Optional[int] = Field(None, ge=1)
    max_renders: Optional[int] = Field(None, ge=1)
    skip_upstream: bool = False
    no_present: bool = False
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.output_root is not None:
            overrides["output_root"] = self.output_root
        if self.state_dir is not None:
            overrides["state_dir"] = self.state_dir

        presentation = {}
        if self.viewer_path is not None:
            presentation["viewer_path"] = self.viewer_path
        if self.no_present:
            presentation["enabled"] = False
        if presentation:
            overrides["presentation"] = presentation

        if self.delay is not None:
            overrides["compositor"] = {"delay": self.delay}

        concurrency = {}
        if self.max_scenarios is not None:
            concurrency["max_scenarios"] = self.max_scenarios
        if self.max_renders is not None:
            concurrency["max_renders"] = self.max_renders
        if concurrency:
            overrides["concurrency"] = concurrency

        # Dropping the command is how "skip" is expressed at runtime
        if self.skip_upstream:
            overrides["upstream"] = {"command": None}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
