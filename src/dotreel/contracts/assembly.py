"""Assembly stage contract."""

from pathlib import Path

from dotreel.contracts.base import require


def assert_artifact_written(artifact: Path) -> None:
    """Enforce assembly stage contract: the artifact exists and is non-empty.

    Raises
    ------
    ContractViolation
        If the compositor reported success without writing the artifact.
    """
    artifact = Path(artifact)
    require(
        artifact.is_file(),
        f"Assembly contract violated: artifact not written: {artifact}"
    )
    require(
        artifact.stat().st_size > 0,
        f"Assembly contract violated: artifact is empty: {artifact}"
    )
