"""Pipeline orchestration.

Runs the upstream generator, discovers scenarios, fans them out to a pool
of ScenarioProcessor threads and collects their outcomes into a summary.
"""

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Optional

from dotreel.errors import DotreelError
from dotreel.pipeline.outcome import RunSummary, ScenarioOutcome, ScenarioState
from dotreel.pipeline.processor import ScenarioProcessor
from dotreel.pipeline.tracker import RunTracker
from dotreel.scenario import FrameNaming, ScenarioLocator
from dotreel.schemas import InternalConfig
from dotreel.tools import (
    GraphvizRenderer,
    ImageMagickCompositor,
    ViewerPresenter,
    UpstreamRunner,
)

__all__ = ['PipelineOrchestrator']

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Drives one pipeline run from upstream generation to displayed GIFs.

    **Run sequence:**

    1. **Upstream**: run the configured generator (e.g. ``cargo run``).
       Failure raises UpstreamFailure and ends the run.

    2. **Discover**: find scenario directories under ``output_root``.
       A missing root raises ConfigurationError and ends the run. Scenarios
       without frames are recorded as SKIPPED.

    3. **Process**: ``concurrency.max_scenarios`` ScenarioProcessor threads
       take scenarios from a queue; each renders, assembles and presents
       its scenario independently. A failing scenario never stops the
       others.

    4. **Summarize**: every scenario's terminal state is logged and, when a
       state directory is configured, recorded by the RunTracker.

    **Failure policy:**

    Only upstream and discovery failures are fatal (raised from ``run()``).
    Per-scenario failures end up in the returned RunSummary.

    **Logging:**

    Console always; additionally ``<state_dir>/dotreel_<run_id>.log`` when a
    state directory is configured. Level from ``config.logging.level``.

    Example usage::

        from dotreel.schemas import ParamConfig, resolve_config

        config = resolve_config(ParamConfig(), {"OUTPUT_ROOT": "output"})
        summary = PipelineOrchestrator(config).run()
        print(summary.states())

    Collaborators can be replaced (tests pass fakes)::

        orch = PipelineOrchestrator(config, renderer=FakeRenderer(),
                                    compositor=FakeCompositor())
    """

    def __init__(self, config: InternalConfig, renderer=None, compositor=None,
                 presenter=None, upstream=None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Resolved runtime configuration.
        renderer, compositor, presenter : object, optional
            Stage capabilities. Default to Graphviz, ImageMagick and the
            viewer/platform opener built from config. The presenter is
            dropped when ``presentation.enabled`` is False.
        upstream : object, optional
            Provides ``run()``. Defaults to the configured upstream command,
            or nothing when no command is configured.
        """
        self.config = config

        self.renderer = renderer or GraphvizRenderer.from_config(config.renderer)
        self.compositor = compositor or ImageMagickCompositor.from_config(config.compositor)
        if config.presentation.enabled:
            self.presenter = presenter or ViewerPresenter.from_config(config.presentation)
        else:
            self.presenter = None
        self.upstream = upstream if upstream is not None else UpstreamRunner.from_config(config.upstream)

        self.locator = ScenarioLocator(
            FrameNaming.from_config(config.frames),
            artifact_extension=config.compositor.artifact_extension,
        )

        # Queues between the orchestrator and the workers
        self.scenario_queue = queue.Queue()
        self.result_queue = queue.Queue()
        self.workers: list[ScenarioProcessor] = []

        self.tracker: Optional[RunTracker] = None

        # Lifecycle state
        self._cancel = threading.Event()
        self._stop_event = False
        self._start_time = None
        self._handlers: list[logging.Handler] = []

    def _setup_logging(self):
        """Configure console (and file) logging and the run tracker.

        Only handlers installed by this orchestrator are replaced, so
        handlers added by the host application stay in place.
        """
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)
        self._teardown_logging()

        # Console handler
        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)
        self._handlers.append(ch)

        log_path = None
        if self.config.state_dir:
            state_dir = Path(self.config.state_dir)
            state_dir.mkdir(parents=True, exist_ok=True)
            log_path = state_dir / f"dotreel_{self.config.run_id or 'run'}.log"

            # File handler
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)
            self._handlers.append(fh)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

        if self.config.state_dir and self.config.tracker.enabled:
            tracker_path = Path(self.config.state_dir) / self.config.tracker.db_filename
            self.tracker = RunTracker(tracker_path)

    def _teardown_logging(self):
        root = logging.getLogger()
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.close()
        self._handlers = []

    def run(self) -> RunSummary:
        """Run the pipeline to completion and return the per-scenario summary.

        Blocking. Ctrl+C stops launching new tool invocations, lets the
        running ones finish, and re-raises KeyboardInterrupt.

        Raises
        ------
        UpstreamFailure
            The upstream generator failed.
        ConfigurationError
            The output root is missing or not a directory.
        KeyboardInterrupt
            User pressed Ctrl+C.
        """
        self._setup_logging()

        logger.info("=" * 60)
        logger.info("Starting dotreel pipeline (run %s)", self.config.run_id)
        logger.info("=" * 60)

        self._start_time = time.time()
        summary = RunSummary(run_id=self.config.run_id)
        aborted = True

        try:
            if self.upstream is not None:
                self.upstream.run()
            else:
                logger.info("No upstream command configured; using existing output")

            discovery = self.locator.discover(self.config.output_root)
            for skipped in discovery.skipped:
                summary.add(ScenarioOutcome(
                    scenario=skipped.name,
                    state=ScenarioState.SKIPPED,
                    error=skipped.reason,
                ))

            self._preflight()
            self._process_scenarios(discovery.scenarios, summary)
            aborted = False

        except DotreelError as e:
            logger.error("Run aborted: %s", e)
            raise

        except KeyboardInterrupt:
            logger.info("Shutdown signal received (Ctrl+C)")
            self.stop()
            raise

        except Exception:
            logger.exception("Run aborted by unexpected error")
            self.stop()
            raise

        finally:
            self._shutdown(summary, aborted=aborted)

        return summary

    def _preflight(self):
        """Warn early when an external tool is not installed."""
        for stage, tool in (("renderer", self.renderer), ("compositor", self.compositor)):
            check = getattr(tool, "is_available", None)
            if check is not None and not check():
                logger.warning("%s executable '%s' not found; that stage will fail",
                               stage, getattr(tool, "executable", tool))

    def _process_scenarios(self, scenarios, summary: RunSummary):
        """Fan scenarios out to the worker pool and collect outcomes."""
        if not scenarios:
            logger.info("No scenarios with frames to process")
            return

        num_workers = min(self.config.concurrency.max_scenarios, len(scenarios))
        logger.info("Processing %d scenario(s) with %d worker(s)", len(scenarios), num_workers)

        for i in range(num_workers):
            worker = ScenarioProcessor(
                input_queue=self.scenario_queue,
                renderer=self.renderer,
                compositor=self.compositor,
                presenter=self.presenter,
                output_queue=self.result_queue,
                max_renders=self.config.concurrency.max_renders,
                cancel_event=self._cancel,
                name=f"ScenarioProcessor-{i + 1}",
            )
            worker.start()
            self.workers.append(worker)

        for scenario in scenarios:
            self.scenario_queue.put(scenario)
        for _ in self.workers:
            self.scenario_queue.put(None)

        pending = {scenario.name for scenario in scenarios}
        while pending:
            try:
                outcome = self.result_queue.get(timeout=1.0)
            except queue.Empty:
                if not any(w.is_alive() for w in self.workers):
                    logger.error("All workers exited with %d scenario(s) outstanding", len(pending))
                    break
                continue
            pending.discard(outcome.scenario)
            summary.add(outcome)

        for name in sorted(pending):
            summary.add(ScenarioOutcome(scenario=name, state=ScenarioState.CANCELLED,
                                        error="worker exited"))

    def _join_workers(self, timeout: float = 10):
        for worker in self.workers:
            worker.join(timeout=timeout)
            if worker.is_alive():
                logger.warning("%s did not stop cleanly", worker.name)

    def _shutdown(self, summary: RunSummary, aborted: bool = False):
        """Join workers, record and log the summary, close resources."""
        self._join_workers()

        elapsed = time.time() - self._start_time if self._start_time else 0
        summary.elapsed_sec = elapsed

        if self.tracker:
            for outcome in summary.outcomes.values():
                self.tracker.record_outcome(summary.run_id or "run", outcome)

        logger.info("=" * 60)
        if not aborted:
            self._log_summary(summary)
        logger.info("Pipeline stopped. Runtime: %.1f seconds", elapsed)

        if self.tracker:
            stats = self.tracker.get_statistics(summary.run_id or "run")
            logger.info("Tracker: total=%d, succeeded=%d, failed=%d, skipped=%d",
                        stats.get('total', 0), stats.get('succeeded', 0),
                        stats.get('failed', 0), stats.get('skipped', 0))
            self.tracker.close()

        logger.info("=" * 60)
        self._teardown_logging()

    def _log_summary(self, summary: RunSummary):
        logger.info("Summary: %d succeeded, %d failed, %d skipped",
                    len(summary.succeeded), len(summary.failed), len(summary.skipped))
        for name in sorted(summary.outcomes):
            outcome = summary.outcomes[name]
            if outcome.state.is_failure:
                logger.warning("  %-30s %s: %s", name, outcome.state.value, outcome.error)
            else:
                logger.info("  %-30s %s", name, outcome.state.value)

    def stop(self):
        """Stop launching external tools. Safe to call multiple times.

        Tools already running finish (each is bounded by its timeout);
        scenarios that have not completed end as CANCELLED.
        """
        if self._stop_event:
            return

        self._stop_event = True
        logger.info("Stopping pipeline...")
        self._cancel.set()
