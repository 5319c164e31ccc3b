"""Scenario modules.

- frames: Frame naming convention and numeric ordering
- locator: Scenario discovery under the output root
"""

from dotreel.scenario.frames import (
    Frame,
    FrameNaming,
    parse_frame_index,
    raster_path_for,
    collect_frames,
)
from dotreel.scenario.locator import Scenario, SkippedScenario, Discovery, ScenarioLocator

__all__ = [
    "Frame",
    "FrameNaming",
    "parse_frame_index",
    "raster_path_for",
    "collect_frames",
    "Scenario",
    "SkippedScenario",
    "Discovery",
    "ScenarioLocator",
]
