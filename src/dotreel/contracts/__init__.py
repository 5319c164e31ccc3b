"""Pipeline contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when a stage does not produce its
promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- External tool failures are reported as ToolInvocationError
"""

from dotreel.contracts.failure import ContractViolation
from dotreel.contracts.base import require
from dotreel.contracts.frames import assert_frames_ordered
from dotreel.contracts.render import assert_rasters_rendered
from dotreel.contracts.assembly import assert_artifact_written

__all__ = [
    "ContractViolation",
    "require",
    "assert_frames_ordered",
    "assert_rasters_rendered",
    "assert_artifact_written",
]
