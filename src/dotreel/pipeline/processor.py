"""Scenario processing worker.

Takes one scenario at a time from a queue and drives it through the
render, assembly and presentation stages, producing a ScenarioOutcome.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from dotreel.contracts import (
    ContractViolation,
    assert_frames_ordered,
    assert_rasters_rendered,
    assert_artifact_written,
)
from dotreel.errors import RenderFailure, AssemblyFailure, PresentationFailure
from dotreel.pipeline.outcome import ScenarioOutcome, ScenarioState

__all__ = ['ScenarioProcessor']

logger = logging.getLogger(__name__)


class ScenarioProcessor(threading.Thread):
    """Processes scenarios through render, assembly and presentation.

    This worker thread receives Scenario objects from the input queue and
    puts one ScenarioOutcome per scenario on the output queue. ``None`` on
    the input queue ends the thread.

    **Stages:**

    1. **Render**: every frame's ``.dot`` file is rendered to its sibling
       raster, up to ``max_renders`` at a time. The first RenderFailure
       stops further renders of this scenario (renders already running are
       allowed to finish) and the scenario ends as RENDER_FAILED.

    2. **Assemble**: once *all* renders have finished (barrier), the rasters
       are composited in frame index order into ``<name>.gif``. A failure
       ends the scenario as ASSEMBLY_FAILED.

    3. **Present**: the artifact is handed to the presenter. Failures are
       logged and the scenario ends as ASSEMBLED; with no presenter it ends
       there as well. Otherwise it ends as PRESENTED.

    **Cancellation:**

    ``cancel_event`` is shared with the orchestrator. Once set, no new
    external tool is launched; scenarios that had not finished end as
    CANCELLED.

    Example usage (typically called by orchestrator)::

        worker = ScenarioProcessor(
            input_queue=scenario_queue,
            renderer=GraphvizRenderer(),
            compositor=ImageMagickCompositor(),
            presenter=ViewerPresenter(),
            output_queue=result_queue,
        )
        worker.start()
        scenario_queue.put(scenario)
        scenario_queue.put(None)
    """

    def __init__(self, input_queue: queue.Queue, renderer, compositor,
                 presenter=None,
                 output_queue: Optional[queue.Queue] = None,
                 max_renders: int = 4,
                 cancel_event: Optional[threading.Event] = None,
                 name: str = "ScenarioProcessor"):
        """Initialize processor.

        Parameters
        ----------
        input_queue : queue.Queue
            Scenarios to process. None signals shutdown.
        renderer : object
            Provides ``render(source, output)``; raises RenderFailure.
        compositor : object
            Provides ``composite(inputs, output)``; raises AssemblyFailure.
        presenter : object, optional
            Provides ``present(artifact)``; raises PresentationFailure.
            None disables presentation.
        output_queue : queue.Queue, optional
            Receives one ScenarioOutcome per processed scenario.
        max_renders : int
            Concurrent frame renders within one scenario.
        cancel_event : threading.Event, optional
            Shared cancellation flag.
        name : str
            Thread name for logging.
        """
        super().__init__(daemon=True, name=name)

        self.input_queue = input_queue
        self.output_queue = output_queue
        self.renderer = renderer
        self.compositor = compositor
        self.presenter = presenter
        self.max_renders = max(1, int(max_renders))
        self._cancel_event = cancel_event or threading.Event()

    def stop(self):
        """Signal processor to stop launching tools."""
        self._cancel_event.set()

    def stopped(self) -> bool:
        return self._cancel_event.is_set()

    def run(self):
        """Main thread loop."""
        logger.debug("%s started", self.name)
        while True:
            scenario = self.input_queue.get()
            try:
                if scenario is None:
                    break
                try:
                    outcome = self.process_scenario(scenario)
                except Exception as e:
                    logger.exception("Unexpected error processing scenario %s", scenario.name)
                    outcome = ScenarioOutcome(
                        scenario=scenario.name,
                        state=ScenarioState.ASSEMBLY_FAILED,
                        frames_total=len(scenario.frames),
                        error=f"unexpected error: {e}",
                    )
                if self.output_queue is not None:
                    self.output_queue.put(outcome)
            finally:
                self.input_queue.task_done()
        logger.debug("%s stopped", self.name)

    def process_scenario(self, scenario) -> ScenarioOutcome:
        """Process one scenario: render → assemble → present.

        Never raises for tool failures; the outcome carries the terminal
        state and error message.
        """
        outcome = ScenarioOutcome(
            scenario=scenario.name,
            state=ScenarioState.DISCOVERED,
            frames_total=len(scenario.frames),
        )

        if not scenario.frames:
            outcome.state = ScenarioState.SKIPPED
            outcome.error = "no frames"
            return outcome

        if self.stopped():
            return self._cancelled(outcome)

        logger.info("Creating GIF for scenario: %s (%d frames)",
                    scenario.name, len(scenario.frames))

        # Stage 1: Render
        outcome.state = ScenarioState.RENDERING
        if not self._render_stage(scenario, outcome):
            return outcome
        outcome.state = ScenarioState.RENDERED

        # Stage 2: Assemble
        if self.stopped():
            return self._cancelled(outcome)
        outcome.state = ScenarioState.ASSEMBLING
        if not self._assembly_stage(scenario, outcome):
            return outcome
        outcome.state = ScenarioState.ASSEMBLED
        outcome.artifact = scenario.artifact_path
        logger.info("GIF created: %s", scenario.artifact_path)

        # Stage 3: Present (best effort)
        if self.presenter is None or self.stopped():
            return outcome
        outcome.state = ScenarioState.PRESENTING
        try:
            self.presenter.present(scenario.artifact_path)
            outcome.state = ScenarioState.PRESENTED
        except PresentationFailure as e:
            logger.warning("Could not display %s: %s", scenario.artifact_path, e)
            outcome.state = ScenarioState.ASSEMBLED
            outcome.error = f"presentation: {e}"
        except Exception as e:
            logger.exception("Error presenting %s", scenario.artifact_path)
            outcome.state = ScenarioState.ASSEMBLED
            outcome.error = f"presentation: {e}"
        return outcome

    def _cancelled(self, outcome: ScenarioOutcome) -> ScenarioOutcome:
        logger.info("Scenario %s cancelled", outcome.scenario)
        outcome.state = ScenarioState.CANCELLED
        outcome.error = "cancelled"
        return outcome

    def _render_stage(self, scenario, outcome: ScenarioOutcome) -> bool:
        """Render all frames. Returns True when every raster is in place."""
        try:
            rendered, failure = self._render_frames(scenario)
            outcome.frames_rendered = rendered

            if failure is not None:
                logger.warning("Scenario %s: render failed: %s", scenario.name, failure)
                outcome.state = ScenarioState.RENDER_FAILED
                outcome.error = failure
                return False

            if rendered < len(scenario.frames):
                # Only cancellation leaves frames unrendered without a failure
                self._cancelled(outcome)
                return False

            assert_rasters_rendered(scenario.frames)
            return True

        except ContractViolation as e:
            logger.critical("Pipeline contract violated: %s", e)
            outcome.state = ScenarioState.RENDER_FAILED
            outcome.error = f"Contract violation: {e}"
            return False

        except Exception as e:
            logger.exception("Error rendering scenario %s", scenario.name)
            outcome.state = ScenarioState.RENDER_FAILED
            outcome.error = str(e)
            return False

    def _render_frames(self, scenario) -> tuple[int, Optional[str]]:
        """Run the renders; returns (frames rendered, first failure message)."""
        abort = threading.Event()

        def render_one(frame) -> bool:
            if abort.is_set() or self.stopped():
                return False
            try:
                # Stale raster from an earlier run
                frame.raster.unlink(missing_ok=True)
                self.renderer.render(frame.source, frame.raster)
            except Exception:
                # Queued frames must observe the abort before they start
                abort.set()
                raise
            logger.debug("%s created", frame.raster)
            return True

        rendered = 0
        failure = None
        workers = min(self.max_renders, len(scenario.frames))
        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix=f"render-{scenario.name}") as pool:
            futures = {pool.submit(render_one, frame): frame for frame in scenario.frames}
            for future in as_completed(futures):
                frame = futures[future]
                try:
                    if future.result():
                        rendered += 1
                except RenderFailure as e:
                    if failure is None:
                        failure = f"frame {frame.index} ({frame.source.name}): {e}"
        return rendered, failure

    def _assembly_stage(self, scenario, outcome: ScenarioOutcome) -> bool:
        """Composite the rasters. Returns True when the artifact was written."""
        try:
            assert_frames_ordered(scenario)
            # Stale artifact from an earlier run
            scenario.artifact_path.unlink(missing_ok=True)
            self.compositor.composite(scenario.rasters, scenario.artifact_path)
            assert_artifact_written(scenario.artifact_path)
            return True

        except AssemblyFailure as e:
            logger.warning("Scenario %s: assembly failed: %s", scenario.name, e)
            outcome.state = ScenarioState.ASSEMBLY_FAILED
            outcome.error = str(e)
            return False

        except ContractViolation as e:
            logger.critical("Pipeline contract violated: %s", e)
            outcome.state = ScenarioState.ASSEMBLY_FAILED
            outcome.error = f"Contract violation: {e}"
            return False

        except Exception as e:
            logger.exception("Error assembling scenario %s", scenario.name)
            outcome.state = ScenarioState.ASSEMBLY_FAILED
            outcome.error = str(e)
            return False
