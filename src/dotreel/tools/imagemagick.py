"""Assembly stage adapter: ImageMagick ``magick``."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from dotreel.errors import AssemblyFailure
from dotreel.tools.base import run_tool, is_available

__all__ = ['ImageMagickCompositor']

logger = logging.getLogger(__name__)


class ImageMagickCompositor:
    """Composites ordered rasters into one looping animation.

    Runs ``magick -delay <delay> -loop <loop> <input...> <output>``.
    ``delay`` is in centiseconds per frame; ``loop=0`` loops forever.
    Inputs are passed in the given order, which becomes frame order.
    """

    def __init__(self, executable: str = "magick", delay: int = 50, loop: int = 0,
                 timeout: Optional[float] = 300):
        self.executable = executable
        self.delay = delay
        self.loop = loop
        self.timeout = timeout

    @classmethod
    def from_config(cls, compositor_config) -> "ImageMagickCompositor":
        return cls(
            executable=compositor_config.executable,
            delay=compositor_config.delay,
            loop=compositor_config.loop,
            timeout=compositor_config.timeout_sec,
        )

    def command(self, inputs: Sequence[Path], output: Path) -> list[str]:
        cmd = [self.executable, "-delay", str(self.delay), "-loop", str(self.loop)]
        cmd.extend(str(path) for path in inputs)
        cmd.append(str(output))
        return cmd

    def is_available(self) -> bool:
        return is_available(self.executable)

    def composite(self, inputs: Sequence[Path], output: Path) -> None:
        """Write the animation for ``inputs`` to ``output``.

        Raises
        ------
        AssemblyFailure
            No inputs, or ``magick`` failed.
        """
        inputs = list(inputs)
        if not inputs:
            raise AssemblyFailure(f"No frames to composite into {output}")

        run_tool(self.command(inputs, output), AssemblyFailure, timeout=self.timeout)
        logger.debug("%s created from %d frame(s)", output, len(inputs))
