"""Pydantic configuration schemas for the dotreel pipeline.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
init_runtime_config : function
    Config file loading + resolution + run ID + persistence
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from dotreel.schemas.resolve import resolve_config
from dotreel.schemas.internal import InternalConfig
from dotreel.schemas.param import ParamConfig
from dotreel.schemas.user import UserConfig
from dotreel.schemas.cli import CLIConfig
from dotreel.schemas.initialization import init_runtime_config

__all__ = [
    'resolve_config',
    'init_runtime_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
