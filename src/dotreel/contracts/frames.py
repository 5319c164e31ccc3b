"""Frame ordering contract.

Enforces the guarantee that the compositor input is the scenario's frames
in strictly increasing numeric index order.
"""

from dotreel.contracts.base import require


def assert_frames_ordered(scenario) -> None:
    """Enforce frame ordering contract.

    Called right before the assembly stage builds the compositor input.

    Parameters
    ----------
    scenario : Scenario
        Scenario about to be assembled.

    Raises
    ------
    ContractViolation
        If the scenario is empty or indices are not strictly increasing.
    """
    frames = scenario.frames
    require(
        len(frames) > 0,
        f"Frame contract violated: scenario '{scenario.name}' has no frames"
    )

    indices = [frame.index for frame in frames]
    require(
        all(a < b for a, b in zip(indices, indices[1:])),
        f"Frame contract violated: scenario '{scenario.name}' frames out of order: {indices}"
    )

    for frame in frames:
        require(
            frame.raster.parent == scenario.directory,
            f"Frame contract violated: raster {frame.raster} outside {scenario.directory}"
        )
