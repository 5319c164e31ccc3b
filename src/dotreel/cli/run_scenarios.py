"""Core dotreel pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import sys
import json
import argparse
import logging
from typing import Optional, Sequence

from pydantic import ValidationError

from dotreel.errors import ConfigurationError, UpstreamFailure
from dotreel.pipeline.orchestrator import PipelineOrchestrator
from dotreel.pipeline.outcome import RunSummary
from dotreel.schemas import init_runtime_config


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dotreel",
        description="Render per-scenario Graphviz frames into animated GIFs",
    )
    parser.add_argument("config", nargs="?", help="Path to user config file (optional)")
    parser.add_argument("--output-root", help="Directory holding the scenario directories")
    parser.add_argument("--state-dir", help="Directory for run logs, tracker DB and resolved config")
    parser.add_argument("--viewer", help="Preferred GIF viewer (path or macOS .app bundle)")
    parser.add_argument("--delay", type=int, help="Per-frame delay in centiseconds")
    parser.add_argument("--max-scenarios", type=int, help="Scenarios processed in parallel")
    parser.add_argument("--max-renders", type=int, help="Frame renders in parallel per scenario")
    parser.add_argument("--skip-upstream", action="store_true",
                        help="Do not run the upstream generator; use existing output")
    parser.add_argument("--no-present", action="store_true", help="Create GIFs without opening them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run_pipeline(args: argparse.Namespace) -> RunSummary:
    """Execute the dotreel pipeline.

    This is the core pipeline execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Prints a short banner
    3. Instantiates and runs the pipeline orchestrator
    4. Blocks until every scenario reached a terminal state

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line (see ``build_parser``).

    Returns
    -------
    RunSummary
        Terminal state of every scenario.

    Raises
    ------
    ConfigurationError
        Config file missing or invalid, or output root missing.
    ValidationError
        If configuration values fail validation.
    UpstreamFailure
        If the upstream generator failed.
    KeyboardInterrupt
        If user presses Ctrl+C (in-flight tools finish first).

    Examples
    --------
    Run against existing output::

        args = build_parser().parse_args(["--skip-upstream"])
        summary = run_pipeline(args)
    """
    config = init_runtime_config(args)

    # Print summary
    print(f"\n{'='*60}")
    print("dotreel: Graphviz frames to animated GIFs")
    print('='*60)
    print(f"Config:   {args.config or '(defaults)'}")
    print(f"Run:      {config.run_id}")
    print(f"Output:   {config.output_root}")
    print(f"Upstream: {' '.join(config.upstream.command) if config.upstream.command else '(skipped)'}")
    print(f"Viewer:   {config.presentation.viewer_path or '(platform default)'}"
          + ("" if config.presentation.enabled else " [disabled]"))
    print('='*60)

    if args.verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    orchestrator = PipelineOrchestrator(config)
    return orchestrator.run()


def print_summary(summary: RunSummary) -> None:
    print(f"\n{'='*60}")
    print(f"Run {summary.run_id}: {len(summary.succeeded)} succeeded, "
          f"{len(summary.failed)} failed, {len(summary.skipped)} skipped "
          f"({summary.elapsed_sec:.1f} s)")
    for name in sorted(summary.outcomes):
        outcome = summary.outcomes[name]
        line = f"  {name:<30} {outcome.state.value}"
        if outcome.artifact:
            line += f"  {outcome.artifact}"
        if outcome.error:
            line += f"  ({outcome.error})"
        print(line)
    print('='*60)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point. Returns the process exit code.

    0 when every scenario reached a terminal state (even failed ones),
    1 for configuration or upstream failures, 130 on Ctrl+C.
    """
    args = build_parser().parse_args(argv)

    try:
        summary = run_pipeline(args)
    except (ConfigurationError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except UpstreamFailure as e:
        print(f"Upstream failed: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    print_summary(summary)
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
