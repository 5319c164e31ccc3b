"""Frame naming convention and ordering.

A frame file is ``<prefix><digits><suffix>`` inside a scenario directory,
e.g. ``frame_007.dot``. The digits are the frame's sequence index. Frames
are always ordered by that integer, never by the filename string, so
``frame_10.dot`` sorts after ``frame_9.dot`` whether or not the upstream
program pads its numbers.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotreel.errors import DuplicateFrameError

__all__ = [
    'FrameNaming',
    'Frame',
    'parse_frame_index',
    'raster_path_for',
    'collect_frames',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameNaming:
    """Filename convention shared by the locator and the render stage."""
    prefix: str = "frame_"
    suffix: str = ".dot"
    raster_extension: str = ".png"

    @classmethod
    def from_config(cls, frames_config) -> "FrameNaming":
        return cls(
            prefix=frames_config.prefix,
            suffix=frames_config.suffix,
            raster_extension=frames_config.raster_extension,
        )

    @property
    def pattern(self) -> re.Pattern:
        return re.compile(
            r"^" + re.escape(self.prefix) + r"([0-9]+)" + re.escape(self.suffix) + r"$"
        )


@dataclass(frozen=True)
class Frame:
    """One graph-description snapshot and its raster counterpart."""
    scenario: str
    index: int
    source: Path
    raster: Path


def parse_frame_index(filename: str, prefix: str = "frame_",
                      suffix: str = ".dot") -> Optional[int]:
    """Return the sequence index encoded in ``filename``, or None.

    Only the final path component is inspected. Non-matching names are not
    an error: scenario directories may hold rasters, artifacts, notes, etc.

    Examples
    --------
    >>> parse_frame_index("frame_007.dot")
    7
    >>> parse_frame_index("frame_7.png") is None
    True
    """
    name = Path(filename).name
    match = FrameNaming(prefix=prefix, suffix=suffix).pattern.match(name)
    if match is None:
        return None
    return int(match.group(1))


def raster_path_for(source: Path, raster_extension: str = ".png") -> Path:
    """Sibling raster path: same directory, same base name, new extension."""
    source = Path(source)
    return source.with_name(source.stem + raster_extension)


def collect_frames(directory: Path, scenario: str,
                   naming: FrameNaming = FrameNaming()) -> tuple[Frame, ...]:
    """Collect and numerically sort the frames found in ``directory``.

    Raises
    ------
    DuplicateFrameError
        If two files parse to the same index (``frame_1.dot``, ``frame_001.dot``).
    """
    pattern = naming.pattern
    by_index: dict[int, Path] = {}

    # sorted() only makes the duplicate message stable; order comes from the index
    for path in sorted(Path(directory).iterdir()):
        if not path.is_file():
            continue
        match = pattern.match(path.name)
        if match is None:
            continue
        index = int(match.group(1))
        if index in by_index:
            raise DuplicateFrameError(index, by_index[index], path)
        by_index[index] = path

    frames = tuple(
        Frame(
            scenario=scenario,
            index=index,
            source=path,
            raster=raster_path_for(path, naming.raster_extension),
        )
        for index, path in sorted(by_index.items())
    )
    logger.debug("Scenario %s: %d frame(s) in %s", scenario, len(frames), directory)
    return frames
