import queue

import pytest

from dotreel.pipeline.tracker import RunTracker
from dotreel.scenario import ScenarioLocator
from dotreel.schemas import ParamConfig, InternalConfig
from dotreel.schemas.resolve import resolve_config


@pytest.fixture
def tracker(tmp_path):
    db_path = tmp_path / "tracker.db"
    with RunTracker(db_path) as t:
        yield t


@pytest.fixture
def pipeline_config(output_root) -> InternalConfig:
    """InternalConfig for pipeline tests: no upstream, run ID set."""
    config = resolve_config(ParamConfig(), {"OUTPUT_ROOT": str(output_root)}, None)
    return config.model_copy(update={"run_id": "test-run"})


@pytest.fixture
def discover(output_root):
    """Discover the scenarios currently under the output root, by name."""
    def _discover():
        return {s.name: s for s in ScenarioLocator().discover(output_root).scenarios}
    return _discover


# made for processor tests
@pytest.fixture
def processor_queues():
    return queue.Queue(), queue.Queue()
