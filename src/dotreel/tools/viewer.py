"""Presentation stage adapter: configured viewer or platform opener.

The launched process is never awaited; presentation is best effort and the
artifact on disk is the deliverable.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from dotreel.errors import PresentationFailure

__all__ = ['ViewerPresenter']

logger = logging.getLogger(__name__)


def _spawn(argv: list[str]) -> None:
    subprocess.Popen(
        argv,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


class ViewerPresenter:
    """Opens an artifact with the preferred viewer, else the platform default.

    Selection rule:

    - ``viewer_path`` set and present on disk:
        - macOS ``.app`` bundle: ``open -a <viewer> <artifact>``
        - anything else: ``<viewer> <artifact>``
    - otherwise:
        - macOS: ``open <artifact>``
        - Windows: ``os.startfile(<artifact>)``
        - other: ``xdg-open <artifact>``

    Parameters
    ----------
    viewer_path : str or Path, optional
        Preferred viewer location.
    platform : str, optional
        ``sys.platform`` value to select for (default: current platform).
    launcher : callable, optional
        Called with the argv to start the viewer without waiting.
        Defaults to a detached ``subprocess.Popen``.
    """

    def __init__(self, viewer_path=None, platform: Optional[str] = None,
                 launcher: Optional[Callable[[list[str]], None]] = None):
        self.viewer_path = Path(viewer_path).expanduser() if viewer_path else None
        self.platform = platform or sys.platform
        self.launcher = launcher or _spawn

    @classmethod
    def from_config(cls, presentation_config) -> "ViewerPresenter":
        return cls(viewer_path=presentation_config.viewer_path)

    def _viewer_exists(self) -> bool:
        return self.viewer_path is not None and self.viewer_path.exists()

    def command(self, artifact: Path) -> Optional[list[str]]:
        """argv for presenting ``artifact``; None means ``os.startfile``."""
        artifact = str(artifact)
        if self._viewer_exists():
            if self.platform == "darwin" and self.viewer_path.suffix == ".app":
                return ["open", "-a", str(self.viewer_path), artifact]
            return [str(self.viewer_path), artifact]

        if self.viewer_path is not None:
            logger.debug("Viewer %s not found, using platform opener", self.viewer_path)

        if self.platform == "darwin":
            return ["open", artifact]
        if self.platform.startswith("win"):
            return None
        return ["xdg-open", artifact]

    def present(self, artifact: Path) -> None:
        """Launch the viewer for ``artifact`` and return immediately.

        Raises
        ------
        PresentationFailure
            The viewer or opener could not be started.
        """
        argv = self.command(artifact)
        try:
            if argv is None:
                os.startfile(str(artifact))  # Windows only
            else:
                self.launcher(argv)
        except OSError as e:
            raise PresentationFailure(
                f"Could not open {artifact}: {e}", command=argv or []
            ) from e
        logger.info("Opened %s", artifact)
