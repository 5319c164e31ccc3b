"""Error taxonomy for the ``dotreel`` pipeline.

Two families:

- Fatal errors stop the whole run before or during setup:
  ConfigurationError, UpstreamFailure.
- Tool invocation errors are local to one frame or scenario:
  RenderFailure, AssemblyFailure, PresentationFailure.

Key distinction:
- ValidationError: bad config values (raised by Pydantic)
- ConfigurationError: the run cannot start (missing output root, config file)
- ToolInvocationError: an external binary did not do its job
- ContractViolation: pipeline bug (see dotreel.contracts)
"""

from pathlib import Path
from typing import Optional, Sequence

__all__ = [
    "DotreelError",
    "ConfigurationError",
    "DuplicateFrameError",
    "UpstreamFailure",
    "ToolInvocationError",
    "RenderFailure",
    "AssemblyFailure",
    "PresentationFailure",
]


class DotreelError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(DotreelError):
    """The run is misconfigured and cannot proceed (fatal)."""


class DuplicateFrameError(ConfigurationError):
    """Two frame files in one scenario parse to the same sequence index."""

    def __init__(self, index: int, first: Path, second: Path):
        self.index = index
        self.first = Path(first)
        self.second = Path(second)
        super().__init__(
            f"duplicate frame index {index}: {self.first.name} and {self.second.name}"
        )


class ToolInvocationError(DotreelError):
    """An external tool failed.

    Attributes
    ----------
    command : list of str
        The argv that was run (empty if the call never got that far).
    returncode : int or None
        Exit status, None when the process could not be started or timed out.
    stderr : str
        Tail of captured standard error.
    """

    def __init__(self, message: str, command: Optional[Sequence[str]] = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class UpstreamFailure(ToolInvocationError):
    """The upstream generating program failed (fatal)."""


class RenderFailure(ToolInvocationError):
    """Rendering one frame failed. Aborts the owning scenario only."""


class AssemblyFailure(ToolInvocationError):
    """Compositing a scenario's rasters failed. Aborts the owning scenario only."""


class PresentationFailure(ToolInvocationError):
    """The viewer could not be launched. Logged, never escalated."""
