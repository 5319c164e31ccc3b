"""Render stage adapter: Graphviz ``dot``."""

import logging
from pathlib import Path
from typing import Optional

from dotreel.errors import RenderFailure
from dotreel.tools.base import run_tool, is_available

__all__ = ['GraphvizRenderer']

logger = logging.getLogger(__name__)


class GraphvizRenderer:
    """Renders one graph description to one raster with ``dot``.

    Runs ``dot -T<format> <source> -o <output>``. The output file is
    overwritten if it exists.

    Example usage::

        renderer = GraphvizRenderer()
        renderer.render(Path("output/a/frame_000.dot"), Path("output/a/frame_000.png"))
    """

    def __init__(self, executable: str = "dot", fmt: str = "png",
                 timeout: Optional[float] = 60):
        self.executable = executable
        self.fmt = fmt
        self.timeout = timeout

    @classmethod
    def from_config(cls, renderer_config) -> "GraphvizRenderer":
        return cls(
            executable=renderer_config.executable,
            fmt=renderer_config.format,
            timeout=renderer_config.timeout_sec,
        )

    def command(self, source: Path, output: Path) -> list[str]:
        return [self.executable, f"-T{self.fmt}", str(source), "-o", str(output)]

    def is_available(self) -> bool:
        return is_available(self.executable)

    def render(self, source: Path, output: Path) -> None:
        """Render ``source`` to ``output``.

        Raises
        ------
        RenderFailure
            Missing input file, or ``dot`` failed.
        """
        source = Path(source)
        if not source.is_file():
            raise RenderFailure(f"Frame source missing: {source}")

        run_tool(self.command(source, output), RenderFailure, timeout=self.timeout)
        logger.debug("%s created", output)
