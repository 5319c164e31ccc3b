"""Render stage contract.

Enforces the guarantee that after a successful render stage every frame
of the scenario has its raster on disk.
"""

from dotreel.contracts.base import require


def assert_rasters_rendered(frames) -> None:
    """Enforce render stage contract.

    Parameters
    ----------
    frames : sequence of Frame
        Frames whose renders all reported success.

    Raises
    ------
    ContractViolation
        If any raster is missing.
    """
    missing = [frame.raster.name for frame in frames if not frame.raster.is_file()]
    require(
        not missing,
        f"Render contract violated: renderer reported success but rasters are missing: {missing}"
    )
