"""Pipeline modules.

- orchestrator: Main pipeline controller
- processor: Scenario processor thread
- tracker: SQLite-based run tracking
- outcome: Scenario states and run summary
"""

from dotreel.pipeline.orchestrator import PipelineOrchestrator
from dotreel.pipeline.processor import ScenarioProcessor
from dotreel.pipeline.tracker import RunTracker
from dotreel.pipeline.outcome import ScenarioState, ScenarioOutcome, RunSummary

__all__ = [
    "PipelineOrchestrator",
    "ScenarioProcessor",
    "RunTracker",
    "ScenarioState",
    "ScenarioOutcome",
    "RunSummary",
]
