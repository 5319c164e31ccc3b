"""Shared subprocess plumbing for the external tool adapters.

Every external invocation goes through ``run_tool`` so that failures are
reported the same way: the caller passes the ToolInvocationError subclass
for its stage and gets it back for non-zero exits, missing executables and
timeouts alike.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Type

from dotreel.errors import ToolInvocationError

__all__ = ['run_tool', 'is_available', 'STDERR_TAIL_CHARS']

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 2000


def _tail(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.strip()
    return text[-STDERR_TAIL_CHARS:]


def is_available(executable: str) -> bool:
    """True if ``executable`` is on PATH or is an existing file."""
    return shutil.which(executable) is not None or Path(executable).is_file()


def run_tool(command: Sequence[str], error_cls: Type[ToolInvocationError],
             timeout: Optional[float] = None, cwd: Optional[Path] = None,
             capture: bool = True) -> subprocess.CompletedProcess:
    """Run an external tool to completion.

    Parameters
    ----------
    command : sequence of str
        Full argv; ``command[0]`` is the executable.
    error_cls : type
        ToolInvocationError subclass raised on failure.
    timeout : float, optional
        Seconds before the child is killed. None waits forever.
    cwd : Path, optional
        Working directory of the child.
    capture : bool
        Capture stdout/stderr (default). The upstream runner streams instead.

    Returns
    -------
    subprocess.CompletedProcess

    Raises
    ------
    error_cls
        Non-zero exit, executable not found, or timeout.
    """
    argv = [str(part) for part in command]
    logger.debug("Running: %s", " ".join(argv))

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise error_cls(f"{argv[0]}: executable not found ({e})", command=argv) from e
    except subprocess.TimeoutExpired as e:
        # subprocess.run kills the child before re-raising
        raise error_cls(
            f"{argv[0]}: timed out after {timeout} s",
            command=argv,
            stderr=_tail(e.stderr if isinstance(e.stderr, str) else None),
        ) from e
    except OSError as e:
        raise error_cls(f"{argv[0]}: could not start ({e})", command=argv) from e

    if result.returncode != 0:
        stderr = _tail(result.stderr)
        raise error_cls(
            f"{argv[0]} exited with status {result.returncode}"
            + (f": {stderr.splitlines()[-1]}" if stderr else ""),
            command=argv,
            returncode=result.returncode,
            stderr=stderr,
        )
    return result
