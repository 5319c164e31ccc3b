"""SQLite-based run tracker.

Records the terminal state of every scenario in every run, so a scenario's
history (when it last produced a GIF, why it last failed) survives the
console output.
"""

import sqlite3
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, List

from dotreel.pipeline.outcome import ScenarioOutcome, ScenarioState

logger = logging.getLogger(__name__)


class RunTracker:
    """Tracks per-scenario outcomes across pipeline runs.

    **Database Schema:**

    SQLite table `scenario_runs` (one row per run and scenario):

    - run_id, scenario: composite primary key
    - state: terminal ScenarioState value
    - frames_total, frames_rendered
    - artifact_path, error_message
    - recorded_at: ISO timestamp (UTC)

    **Thread Safety:**

    All methods are thread-safe via internal locking; scenario workers may
    record outcomes concurrently.

    **Typical Usage:**

        tracker = RunTracker(db_path)
        tracker.record_outcome(run_id, outcome)
        stats = tracker.get_statistics(run_id)
        tracker.close()
    """

    def __init__(self, db_path: Path | str):
        """Initialize tracker.

        Parameters
        ----------
        db_path : Path or str
            Path to SQLite database file. Created if it doesn't exist.
            Typically: <state_dir>/dotreel_runs.db
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = None
        self._lock = threading.Lock()

        self._init_database()
        logger.info("Run tracker initialized: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        conn = self._get_connection()

        with self._lock:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS scenario_runs (
                    run_id TEXT NOT NULL,
                    scenario TEXT NOT NULL,
                    state TEXT NOT NULL,

                    frames_total INTEGER DEFAULT 0,
                    frames_rendered INTEGER DEFAULT 0,

                    artifact_path TEXT,
                    error_message TEXT,

                    recorded_at TEXT NOT NULL,
                    PRIMARY KEY (run_id, scenario)
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_scenario ON scenario_runs(scenario)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_state ON scenario_runs(state)")
            conn.commit()

    def record_outcome(self, run_id: str, outcome: ScenarioOutcome) -> None:
        """Store (or replace) the outcome of one scenario in one run.

        Parameters
        ----------
        run_id : str
            Run identifier.
        outcome : ScenarioOutcome
            Terminal outcome from the scenario processor.

        Raises
        ------
        ValueError
            If the outcome's state is not terminal.
        """
        state = ScenarioState(outcome.state)
        if not state.is_terminal:
            raise ValueError(f"Not a terminal state: {state.value}")

        conn = self._get_connection()
        with self._lock:
            conn.execute("""
                INSERT OR REPLACE INTO scenario_runs
                (run_id, scenario, state, frames_total, frames_rendered,
                 artifact_path, error_message, recorded_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                run_id,
                outcome.scenario,
                state.value,
                outcome.frames_total,
                outcome.frames_rendered,
                str(outcome.artifact) if outcome.artifact else None,
                outcome.error,
                datetime.now(timezone.utc).isoformat(),
            ))
            conn.commit()

        logger.debug("Recorded %s: %s (%s)", run_id, outcome.scenario, state.value)

    def get_run(self, run_id: str) -> List[Dict]:
        """All scenario rows of one run, ordered by scenario name."""
        conn = self._get_connection()
        with self._lock:
            cursor = conn.execute(
                "SELECT * FROM scenario_runs WHERE run_id = ? ORDER BY scenario",
                (run_id,),
            )
            return [dict(row) for row in cursor.fetchall()]

    def get_latest(self, scenario: str) -> Optional[Dict]:
        """Most recently recorded row for ``scenario``, or None."""
        conn = self._get_connection()
        with self._lock:
            cursor = conn.execute("""
                SELECT * FROM scenario_runs WHERE scenario = ?
                ORDER BY recorded_at DESC, rowid DESC LIMIT 1
            """, (scenario,))
            row = cursor.fetchone()
            return dict(row) if row else None

    def get_statistics(self, run_id: Optional[str] = None) -> Dict:
        """Summary counts, for one run or across all runs.

        Returns
        -------
        dict
            - `total`: scenarios recorded
            - `succeeded`: presented or assembled
            - `failed`: render_failed, assembly_failed or cancelled
            - `skipped`: scenarios without usable frames
            - `frames_rendered`: sum over scenarios
        """
        conn = self._get_connection()

        where_clause = "WHERE run_id = ?" if run_id else ""
        params = (run_id,) if run_id else ()

        with self._lock:
            cursor = conn.execute(f"""
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN state IN ('presented', 'assembled') THEN 1 ELSE 0 END) as succeeded,
                    SUM(CASE WHEN state IN ('render_failed', 'assembly_failed', 'cancelled')
                        THEN 1 ELSE 0 END) as failed,
                    SUM(CASE WHEN state = 'skipped' THEN 1 ELSE 0 END) as skipped,
                    SUM(frames_rendered) as frames_rendered
                FROM scenario_runs
                {where_clause}
            """, params)
            row = cursor.fetchone()
            stats = dict(row) if row else {}

        # SUM over zero rows is NULL
        return {k: (v or 0) for k, v in stats.items()}

    def close(self):
        """Close database connection. Safe to call multiple times."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
