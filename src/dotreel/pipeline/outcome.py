"""Per-scenario states and the run summary."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

__all__ = ['ScenarioState', 'ScenarioOutcome', 'RunSummary']


class ScenarioState(str, Enum):
    """Lifecycle of one scenario within a run.

    DISCOVERED -> RENDERING -> RENDERED -> ASSEMBLING -> ASSEMBLED
    -> PRESENTING -> PRESENTED, with RENDER_FAILED / ASSEMBLY_FAILED as
    failure exits. SKIPPED and CANCELLED never reach a tool.
    """
    DISCOVERED = "discovered"
    RENDERING = "rendering"
    RENDERED = "rendered"
    RENDER_FAILED = "render_failed"
    ASSEMBLING = "assembling"
    ASSEMBLED = "assembled"
    ASSEMBLY_FAILED = "assembly_failed"
    PRESENTING = "presenting"
    PRESENTED = "presented"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_success(self) -> bool:
        """The artifact was produced (whether or not it was displayed)."""
        return self in (ScenarioState.ASSEMBLED, ScenarioState.PRESENTED)

    @property
    def is_failure(self) -> bool:
        return self in (ScenarioState.RENDER_FAILED, ScenarioState.ASSEMBLY_FAILED,
                        ScenarioState.CANCELLED)


_TERMINAL = frozenset({
    ScenarioState.RENDER_FAILED,
    ScenarioState.ASSEMBLED,
    ScenarioState.ASSEMBLY_FAILED,
    ScenarioState.PRESENTED,
    ScenarioState.SKIPPED,
    ScenarioState.CANCELLED,
})


@dataclass
class ScenarioOutcome:
    """Where one scenario ended up."""
    scenario: str
    state: ScenarioState
    frames_total: int = 0
    frames_rendered: int = 0
    artifact: Optional[Path] = None
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Terminal state of every scenario seen in one run.

    Only reached when neither upstream nor discovery failed, so the
    process exit code is always 0; per-scenario failures are reported in
    ``failed`` instead.
    """
    run_id: Optional[str]
    outcomes: dict[str, ScenarioOutcome] = field(default_factory=dict)
    elapsed_sec: float = 0.0

    def add(self, outcome: ScenarioOutcome) -> None:
        self.outcomes[outcome.scenario] = outcome

    def states(self) -> dict[str, ScenarioState]:
        return {name: o.state for name, o in self.outcomes.items()}

    @property
    def succeeded(self) -> list[str]:
        return sorted(n for n, o in self.outcomes.items() if o.state.is_success)

    @property
    def failed(self) -> list[str]:
        return sorted(n for n, o in self.outcomes.items() if o.state.is_failure)

    @property
    def skipped(self) -> list[str]:
        return sorted(n for n, o in self.outcomes.items() if o.state == ScenarioState.SKIPPED)

    @property
    def exit_code(self) -> int:
        return 0
