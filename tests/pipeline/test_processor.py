import threading
import time

import pytest

from dotreel.pipeline.outcome import ScenarioState
from dotreel.pipeline.processor import ScenarioProcessor
from dotreel.scenario import Scenario

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def _processor(processor_queues, renderer, compositor, presenter=None, **kwargs):
    in_q, out_q = processor_queues
    return ScenarioProcessor(in_q, renderer, compositor, presenter, out_q, **kwargs)


def test_full_success_is_presented(make_scenario, discover, processor_queues,
                                   fake_renderer, fake_compositor, fake_presenter):
    directory = make_scenario("a", indices=(0, 1, 2))
    proc = _processor(processor_queues, fake_renderer, fake_compositor, fake_presenter)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.PRESENTED
    assert outcome.frames_total == 3
    assert outcome.frames_rendered == 3
    assert outcome.artifact == directory / "a.gif"
    assert outcome.error is None
    assert (directory / "a.gif").read_text().splitlines() == [
        "frame_0.png", "frame_1.png", "frame_2.png"
    ]
    assert fake_presenter.presented == [directory / "a.gif"]


def test_rasters_written_next_to_sources(make_scenario, discover, processor_queues,
                                         fake_renderer, fake_compositor):
    directory = make_scenario("a", indices=(0, 1))
    proc = _processor(processor_queues, fake_renderer, fake_compositor)

    proc.process_scenario(discover()["a"])

    assert (directory / "frame_0.png").read_bytes() == b"PNG:frame_0.dot"
    assert (directory / "frame_1.png").exists()


def test_compositor_gets_numeric_order(make_scenario, discover, processor_queues,
                                       fake_renderer, fake_compositor):
    make_scenario("a", indices=(10, 9, 1))
    proc = _processor(processor_queues, fake_renderer, fake_compositor, max_renders=3)

    proc.process_scenario(discover()["a"])

    (inputs, output), = fake_compositor.calls
    assert [p.name for p in inputs] == ["frame_1.png", "frame_9.png", "frame_10.png"]
    assert output.name == "a.gif"


def test_without_presenter_ends_assembled(make_scenario, discover, processor_queues,
                                          fake_renderer, fake_compositor):
    make_scenario("a")
    proc = _processor(processor_queues, fake_renderer, fake_compositor, presenter=None)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLED
    assert outcome.error is None


def test_presentation_failure_keeps_artifact(make_scenario, discover, processor_queues,
                                             fake_renderer, fake_compositor, fakes):
    directory = make_scenario("a")
    proc = _processor(processor_queues, fake_renderer, fake_compositor, fakes.FailingPresenter())

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLED
    assert outcome.error.startswith("presentation:")
    assert (directory / "a.gif").exists()


def test_render_failure_skips_assembly(make_scenario, discover, processor_queues,
                                       fake_compositor, fake_presenter, fakes):
    directory = make_scenario("b", indices=(0, 1, 2))
    renderer = fakes.Renderer(fail_on={"frame_1.dot"})
    proc = _processor(processor_queues, renderer, fake_compositor, fake_presenter, max_renders=1)

    outcome = proc.process_scenario(discover()["b"])

    assert outcome.state == ScenarioState.RENDER_FAILED
    assert "frame 1 (frame_1.dot)" in outcome.error
    assert "syntax error" in outcome.error
    assert fake_compositor.calls == []
    assert fake_presenter.presented == []
    assert not (directory / "b.gif").exists()


def test_render_failure_stops_remaining_renders(make_scenario, discover, processor_queues,
                                                fake_compositor, fakes):
    make_scenario("b", indices=range(6))
    renderer = fakes.Renderer(fail_on={"frame_0.dot"})
    proc = _processor(processor_queues, renderer, fake_compositor, max_renders=1)

    outcome = proc.process_scenario(discover()["b"])

    assert outcome.state == ScenarioState.RENDER_FAILED
    # With a single render slot, frames after the failing one are never started
    assert [p.name for p in renderer.calls] == ["frame_0.dot"]
    assert outcome.frames_rendered == 0


def test_unexpected_renderer_error_is_contained(make_scenario, discover, processor_queues,
                                                fake_compositor):
    class ExplodingRenderer:
        def render(self, source, output):
            raise OSError("disk full")

    make_scenario("a", indices=(0,))
    proc = _processor(processor_queues, ExplodingRenderer(), fake_compositor)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.RENDER_FAILED
    assert "disk full" in outcome.error


def test_renderer_that_writes_nothing_violates_contract(make_scenario, discover, processor_queues,
                                                        fake_compositor):
    class SilentRenderer:
        def render(self, source, output):
            pass

    make_scenario("a", indices=(0, 1))
    proc = _processor(processor_queues, SilentRenderer(), fake_compositor)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.RENDER_FAILED
    assert outcome.error.startswith("Contract violation")
    assert fake_compositor.calls == []


def test_assembly_failure(make_scenario, discover, processor_queues, fake_renderer,
                          fake_presenter, fakes):
    make_scenario("a")
    proc = _processor(processor_queues, fake_renderer, fakes.Compositor(fail=True), fake_presenter)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLY_FAILED
    assert outcome.frames_rendered == 3
    assert "magick exited" in outcome.error
    assert fake_presenter.presented == []


def test_compositor_that_writes_nothing_violates_contract(make_scenario, discover, processor_queues,
                                                          fake_renderer, fakes):
    make_scenario("a")
    proc = _processor(processor_queues, fake_renderer, fakes.Compositor(write=False))

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLY_FAILED
    assert outcome.error.startswith("Contract violation")


def test_empty_scenario_is_skipped(output_root, processor_queues, fake_renderer, fake_compositor):
    empty = Scenario(name="empty", directory=output_root / "empty", frames=())
    proc = _processor(processor_queues, fake_renderer, fake_compositor)

    outcome = proc.process_scenario(empty)

    assert outcome.state == ScenarioState.SKIPPED
    assert fake_renderer.calls == []


def test_cancelled_before_start(make_scenario, discover, processor_queues,
                                fake_renderer, fake_compositor):
    make_scenario("a")
    cancel = threading.Event()
    cancel.set()
    proc = _processor(processor_queues, fake_renderer, fake_compositor, cancel_event=cancel)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.CANCELLED
    assert fake_renderer.calls == []


def test_cancel_during_render_stops_launching(make_scenario, discover, processor_queues,
                                              fake_compositor, fakes):
    make_scenario("a", indices=range(5))
    cancel = threading.Event()

    class CancellingRenderer(fakes.Renderer):
        def render(self, source, output):
            super().render(source, output)
            cancel.set()

    renderer = CancellingRenderer()
    proc = _processor(processor_queues, renderer, fake_compositor, max_renders=1,
                      cancel_event=cancel)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.CANCELLED
    assert len(renderer.calls) == 1
    assert fake_compositor.calls == []


def test_thread_loop_processes_until_sentinel(make_scenario, discover, processor_queues,
                                              fake_renderer, fake_compositor):
    make_scenario("a")
    make_scenario("b")
    in_q, out_q = processor_queues
    proc = ScenarioProcessor(in_q, fake_renderer, fake_compositor, output_queue=out_q)

    scenarios = discover()
    proc.start()
    in_q.put(scenarios["a"])
    in_q.put(scenarios["b"])
    in_q.put(None)
    proc.join(timeout=10)

    assert not proc.is_alive()
    results = {}
    while not out_q.empty():
        outcome = out_q.get()
        results[outcome.scenario] = outcome.state
    assert results == {"a": ScenarioState.ASSEMBLED, "b": ScenarioState.ASSEMBLED}


def test_stop_sets_shared_event(processor_queues, fake_renderer, fake_compositor):
    cancel = threading.Event()
    proc = _processor(processor_queues, fake_renderer, fake_compositor, cancel_event=cancel)

    assert not proc.stopped()
    proc.stop()

    assert cancel.is_set()
    assert proc.stopped()


def test_unexpected_presenter_error_keeps_artifact(make_scenario, discover, processor_queues,
                                                   fake_renderer, fake_compositor):
    class BrokenPresenter:
        def present(self, artifact):
            raise ValueError("embedded null byte")

    directory = make_scenario("a")
    proc = _processor(processor_queues, fake_renderer, fake_compositor, BrokenPresenter())

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLED
    assert outcome.error == "presentation: embedded null byte"
    assert outcome.artifact == directory / "a.gif"


def test_thread_loop_survives_unexpected_error(make_scenario, discover, processor_queues,
                                               fake_renderer, fake_compositor):
    make_scenario("a")
    make_scenario("b")
    in_q, out_q = processor_queues
    proc = ScenarioProcessor(in_q, fake_renderer, fake_compositor, output_queue=out_q)
    process = proc.process_scenario

    def flaky(scenario):
        if scenario.name == "a":
            raise RuntimeError("boom")
        return process(scenario)

    proc.process_scenario = flaky
    scenarios = discover()
    proc.start()
    in_q.put(scenarios["a"])
    in_q.put(scenarios["b"])
    in_q.put(None)
    proc.join(timeout=10)

    assert not proc.is_alive()
    results = {}
    while not out_q.empty():
        outcome = out_q.get()
        results[outcome.scenario] = outcome
    assert results["a"].state.is_failure
    assert "boom" in results["a"].error
    assert results["b"].state == ScenarioState.ASSEMBLED


def test_renders_bounded_and_finish_before_assembly(make_scenario, discover, processor_queues,
                                                    fakes):
    make_scenario("a", indices=range(8))
    lock = threading.Lock()
    state = {"active": 0, "peak": 0, "returned": 0}

    class SlowRenderer(fakes.Renderer):
        def render(self, source, output):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.05)
            super().render(source, output)
            with lock:
                state["active"] -= 1
                state["returned"] += 1

    class CheckingCompositor(fakes.Compositor):
        def composite(self, inputs, output):
            state["returned_at_composite"] = state["returned"]
            super().composite(inputs, output)

    proc = _processor(processor_queues, SlowRenderer(), CheckingCompositor(), max_renders=3)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLED
    assert 1 < state["peak"] <= 3
    assert state["returned_at_composite"] == 8


def test_stale_raster_does_not_satisfy_render(make_scenario, discover, processor_queues,
                                              fake_compositor):
    class SilentRenderer:
        def render(self, source, output):
            pass

    directory = make_scenario("a", indices=(0,))
    (directory / "frame_0.png").write_bytes(b"old")
    proc = _processor(processor_queues, SilentRenderer(), fake_compositor)

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.RENDER_FAILED
    assert outcome.error.startswith("Contract violation")


def test_stale_artifact_does_not_satisfy_assembly(make_scenario, discover, processor_queues,
                                                  fake_renderer, fakes):
    directory = make_scenario("a")
    (directory / "a.gif").write_text("old")
    proc = _processor(processor_queues, fake_renderer, fakes.Compositor(write=False))

    outcome = proc.process_scenario(discover()["a"])

    assert outcome.state == ScenarioState.ASSEMBLY_FAILED
    assert outcome.error.startswith("Contract violation")
