"""Root-level pytest fixtures for dotreel test suite.

Provides shared configuration fixtures following Pydantic-based architecture,
scenario directory builders, and fake stage capabilities that stand in for
Graphviz, ImageMagick and the viewer.
"""

import threading
from pathlib import Path

import pytest

from dotreel.errors import RenderFailure, AssemblyFailure, PresentationFailure, UpstreamFailure
from dotreel.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs
    (field names or UPPERCASE aliases).

    Examples
    --------
    >>> def test_custom_delay(make_config):
    ...     config = make_config(FRAME_DELAY=20)
    ...     assert config.compositor.delay == 20
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig.model_validate(user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def output_root(tmp_path):
    """Empty output root; scenario directories go below it."""
    root = tmp_path / "output"
    root.mkdir()
    return root


@pytest.fixture
def make_scenario(output_root):
    """Factory writing ``<root>/<name>/frame_<i>.dot`` files.

    ``indices`` may hold ints or preformatted strings (``"007"``).
    Returns the scenario directory.
    """
    def _make(name, indices=(0, 1, 2), root=None):
        directory = Path(root or output_root) / name
        directory.mkdir(parents=True, exist_ok=True)
        for i in indices:
            (directory / f"frame_{i}.dot").write_text(f"digraph {{ n{i} }}\n")
        return directory

    return _make


# =============================================================================
# Fake stage capabilities
# =============================================================================

class FakeRenderer:
    """Writes a placeholder raster; fails for sources named in ``fail_on``.

    Entries are either a file name (``frame_1.dot``) or scenario-qualified
    (``B/frame_1.dot``).
    """

    executable = "fake-dot"

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []
        self._lock = threading.Lock()

    def is_available(self):
        return True

    def render(self, source, output):
        source, output = Path(source), Path(output)
        with self._lock:
            self.calls.append(source)
        if {source.name, f"{source.parent.name}/{source.name}"} & self.fail_on:
            raise RenderFailure(f"dot exited with status 1: syntax error in {source.name}",
                                returncode=1, stderr="syntax error")
        output.write_bytes(b"PNG:" + source.name.encode())


class FakeCompositor:
    """Writes the input raster names, one per line, as the "animation"."""

    executable = "fake-magick"

    def __init__(self, fail=False, write=True):
        self.fail = fail
        self.write = write
        self.calls = []

    def is_available(self):
        return True

    def composite(self, inputs, output):
        inputs = [Path(p) for p in inputs]
        self.calls.append((inputs, Path(output)))
        if self.fail:
            raise AssemblyFailure("magick exited with status 1", returncode=1)
        if self.write:
            Path(output).write_text("\n".join(p.name for p in inputs))


class FakePresenter:
    def __init__(self):
        self.presented = []

    def present(self, artifact):
        self.presented.append(Path(artifact))


class FailingPresenter:
    def present(self, artifact):
        raise PresentationFailure(f"Could not open {artifact}: no viewer")


class FakeUpstream:
    """Records runs; optionally runs a callback (e.g. to write scenarios) or fails."""

    def __init__(self, on_run=None, fail=False):
        self.on_run = on_run
        self.fail = fail
        self.runs = 0

    def run(self):
        self.runs += 1
        if self.fail:
            raise UpstreamFailure("cargo exited with status 101", returncode=101)
        if self.on_run is not None:
            self.on_run()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_compositor():
    return FakeCompositor()


@pytest.fixture
def fake_presenter():
    return FakePresenter()


@pytest.fixture
def fakes():
    """Access to the fake classes for tests that need custom instances."""
    class _Fakes:
        Renderer = FakeRenderer
        Compositor = FakeCompositor
        Presenter = FakePresenter
        FailingPresenter = FailingPresenter
        Upstream = FakeUpstream
    return _Fakes
