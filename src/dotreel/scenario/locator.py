"""Scenario discovery under the output root.

Every immediate subdirectory of the output root is a candidate scenario.
Candidates with at least one frame become Scenarios; the rest are recorded
as skipped with a reason.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotreel.errors import ConfigurationError, DuplicateFrameError
from dotreel.scenario.frames import Frame, FrameNaming, collect_frames

__all__ = ['Scenario', 'SkippedScenario', 'Discovery', 'ScenarioLocator']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    """One scenario directory and its ordered frames."""
    name: str
    directory: Path
    frames: tuple[Frame, ...]
    artifact_extension: str = ".gif"

    @property
    def artifact_path(self) -> Path:
        """``<directory>/<name><artifact_extension>``, overwritten on rerun."""
        return self.directory / f"{self.name}{self.artifact_extension}"

    @property
    def rasters(self) -> list[Path]:
        """Raster paths in frame index order (compositor input order)."""
        return [frame.raster for frame in self.frames]


@dataclass(frozen=True)
class SkippedScenario:
    name: str
    directory: Path
    reason: str


@dataclass
class Discovery:
    """Result of one discovery pass, in deterministic (name) order."""
    root: Path
    scenarios: list[Scenario] = field(default_factory=list)
    skipped: list[SkippedScenario] = field(default_factory=list)


class ScenarioLocator:
    """Finds scenarios under an output root.

    Parameters
    ----------
    naming : FrameNaming
        Frame filename convention.
    artifact_extension : str
        Extension of the per-scenario animated artifact.

    Example usage::

        locator = ScenarioLocator(FrameNaming())
        discovery = locator.discover(Path("output"))
        for scenario in discovery.scenarios:
            print(scenario.name, len(scenario.frames))
    """

    def __init__(self, naming: FrameNaming = FrameNaming(), artifact_extension: str = ".gif"):
        self.naming = naming
        self.artifact_extension = artifact_extension

    def discover(self, output_root) -> Discovery:
        """Enumerate scenario directories below ``output_root``.

        Raises
        ------
        ConfigurationError
            If ``output_root`` does not exist, is not a directory or
            cannot be listed.
        """
        root = Path(output_root)
        if not root.exists():
            raise ConfigurationError(f"Output root does not exist: {root}")
        if not root.is_dir():
            raise ConfigurationError(f"Output root is not a directory: {root}")

        try:
            # Sorted by name: listing order differs between filesystems
            candidates = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError as e:
            raise ConfigurationError(f"Cannot read output root {root}: {e}") from e

        discovery = Discovery(root=root)
        for directory in candidates:
            name = directory.name
            try:
                frames = collect_frames(directory, name, self.naming)
            except DuplicateFrameError as e:
                logger.warning("Skipping scenario %s: %s", name, e)
                discovery.skipped.append(SkippedScenario(name, directory, str(e)))
                continue
            except OSError as e:
                logger.warning("Skipping scenario %s: cannot read directory: %s", name, e)
                discovery.skipped.append(
                    SkippedScenario(name, directory, f"cannot read directory: {e}"))
                continue

            if not frames:
                logger.info("Skipping scenario %s: no frames", name)
                discovery.skipped.append(SkippedScenario(name, directory, "no frames"))
                continue

            discovery.scenarios.append(
                Scenario(
                    name=name,
                    directory=directory,
                    frames=frames,
                    artifact_extension=self.artifact_extension,
                )
            )

        logger.info("Discovered %d scenario(s), skipped %d under %s",
                    len(discovery.scenarios), len(discovery.skipped), root)
        return discovery
