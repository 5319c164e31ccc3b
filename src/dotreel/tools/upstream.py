"""Upstream generator runner.

Runs the program that writes the scenario directories (for the trust-flow
simulator this is ``cargo run`` at the project root). Its output is
streamed to the console rather than captured, since it can be long.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from dotreel.errors import UpstreamFailure
from dotreel.tools.base import run_tool

__all__ = ['UpstreamRunner']

logger = logging.getLogger(__name__)


class UpstreamRunner:
    """Runs the upstream generating program once per pipeline run.

    Parameters
    ----------
    command : sequence of str
        argv, e.g. ``["cargo", "run", "--release"]``.
    cwd : Path, optional
        Working directory (the upstream project root).
    timeout : float, optional
        Seconds before the run is abandoned.
    """

    def __init__(self, command: Sequence[str], cwd: Optional[Path] = None,
                 timeout: Optional[float] = None):
        if not command:
            raise ValueError("upstream command must not be empty")
        self.command = list(command)
        self.cwd = Path(cwd) if cwd is not None else None
        self.timeout = timeout

    @classmethod
    def from_config(cls, upstream_config) -> Optional["UpstreamRunner"]:
        """Runner for the configured command, or None when none is configured."""
        if not upstream_config.command:
            return None
        return cls(
            command=upstream_config.command,
            cwd=upstream_config.cwd,
            timeout=upstream_config.timeout_sec,
        )

    def run(self) -> None:
        """Run the program to completion.

        Raises
        ------
        UpstreamFailure
            Non-zero exit, missing executable, or timeout.
        """
        logger.info("Running upstream: %s (cwd=%s)", " ".join(self.command), self.cwd or ".")
        run_tool(self.command, UpstreamFailure, timeout=self.timeout,
                 cwd=self.cwd, capture=False)
        logger.info("✓ Upstream finished")
