from pathlib import Path

import pytest

from dotreel.errors import ConfigurationError
from dotreel.scenario import ScenarioLocator, FrameNaming

pytestmark = pytest.mark.unit


def test_missing_root_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        ScenarioLocator().discover(tmp_path / "nope")


def test_root_is_a_file_raises(tmp_path):
    path = tmp_path / "output"
    path.write_text("not a dir")

    with pytest.raises(ConfigurationError, match="not a directory"):
        ScenarioLocator().discover(path)


def test_empty_root(output_root):
    discovery = ScenarioLocator().discover(output_root)

    assert discovery.scenarios == []
    assert discovery.skipped == []


def test_discovers_scenarios_in_name_order(output_root, make_scenario):
    make_scenario("zeta")
    make_scenario("alpha")
    make_scenario("mid")

    discovery = ScenarioLocator().discover(output_root)

    assert [s.name for s in discovery.scenarios] == ["alpha", "mid", "zeta"]


def test_skips_directories_without_frames(output_root, make_scenario):
    make_scenario("a")
    (output_root / "empty").mkdir()
    (output_root / "other").mkdir()
    (output_root / "other" / "readme.md").write_text("x")

    discovery = ScenarioLocator().discover(output_root)

    assert [s.name for s in discovery.scenarios] == ["a"]
    assert [s.name for s in discovery.skipped] == ["empty", "other"]
    assert all(s.reason == "no frames" for s in discovery.skipped)


def test_skips_scenario_with_duplicate_frames(output_root, make_scenario):
    make_scenario("dup", indices=("1", "01"))
    make_scenario("ok")

    discovery = ScenarioLocator().discover(output_root)

    assert [s.name for s in discovery.scenarios] == ["ok"]
    (skipped,) = discovery.skipped
    assert skipped.name == "dup"
    assert "duplicate frame index 1" in skipped.reason


def test_ignores_files_at_root(output_root, make_scenario):
    make_scenario("a")
    (output_root / "frame_0.dot").write_text("digraph {}")

    discovery = ScenarioLocator().discover(output_root)

    assert [s.name for s in discovery.scenarios] == ["a"]


def test_scenario_artifact_and_rasters(output_root, make_scenario):
    directory = make_scenario("trust", indices=(2, 0, 1))

    (scenario,) = ScenarioLocator().discover(output_root).scenarios

    assert scenario.directory == directory
    assert scenario.artifact_path == directory / "trust.gif"
    assert [p.name for p in scenario.rasters] == ["frame_0.png", "frame_1.png", "frame_2.png"]


def test_custom_naming_and_extension(output_root):
    directory = output_root / "s"
    directory.mkdir()
    (directory / "step-1.gv").write_text("digraph {}")

    locator = ScenarioLocator(FrameNaming(prefix="step-", suffix=".gv", raster_extension=".svg"),
                              artifact_extension=".webp")
    (scenario,) = locator.discover(output_root).scenarios

    assert scenario.frames[0].raster.name == "step-1.svg"
    assert scenario.artifact_path.name == "s.webp"


def test_unreadable_root_raises(output_root, monkeypatch):
    real_iterdir = Path.iterdir

    def iterdir(self):
        if self == output_root:
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    with pytest.raises(ConfigurationError, match="Cannot read output root"):
        ScenarioLocator().discover(output_root)


def test_unreadable_scenario_is_skipped(output_root, make_scenario, monkeypatch):
    make_scenario("good")
    locked = make_scenario("locked")
    real_iterdir = Path.iterdir

    def iterdir(self):
        if self == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    discovery = ScenarioLocator().discover(output_root)

    assert [s.name for s in discovery.scenarios] == ["good"]
    (skipped,) = discovery.skipped
    assert skipped.name == "locked"
    assert skipped.reason.startswith("cannot read directory")
