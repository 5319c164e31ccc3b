"""Complete runtime initialization for the dotreel pipeline.

This module handles ALL initialization responsibilities:
- Loading the optional user config file
- Configuration resolution (CLI > User > Param)
- Run ID generation
- Configuration persistence in the state directory
"""

import importlib.util
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotreel.errors import ConfigurationError
from dotreel.schemas.resolve import resolve_config
from dotreel.schemas.param import ParamConfig
from dotreel.schemas.user import UserConfig
from dotreel.schemas.cli import CLIConfig
from dotreel.schemas.internal import InternalConfig

logger = logging.getLogger(__name__)


def generate_run_id() -> str:
    """Sortable, unique run identifier: ``YYYYmmddTHHMMSSZ-<8 hex>``."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


def load_user_config_dict(config_path) -> dict:
    """Load user config dict from a Python file.

    The file must define a dict whose name starts with ``CONFIG``.

    Raises
    ------
    ConfigurationError
        If the file does not exist, cannot be loaded, or defines no CONFIG dict.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("dotreel_user_config", path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Could not load config module from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ConfigurationError(f"No CONFIG dict found in {path}")


def persist_runtime_config(config: InternalConfig) -> Optional[Path]:
    """Write the resolved config to ``<state_dir>/runtime_config_<run_id>.json``.

    Returns the written path, or None when no state directory is configured.
    """
    if config.state_dir is None:
        return None

    state_dir = Path(config.state_dir)
    state_dir.mkdir(parents=True, exist_ok=True)
    config_file = state_dir / f"runtime_config_{config.run_id}.json"

    config_dict = config.model_dump()
    config_dict["created_at"] = datetime.now(timezone.utc).isoformat()

    with open(config_file, 'w') as f:
        json.dump(config_dict, f, indent=2, default=str)

    logger.info("Runtime config saved: %s", config_file)
    return config_file


def init_runtime_config(args) -> InternalConfig:
    """Complete runtime initialization - single entry point for dotreel.

    1. Load the user config file if one was given
    2. Resolve configuration (CLI > User > Param)
    3. Attach a fresh run ID
    4. Persist the resolved configuration when a state dir is set

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line. Recognized attributes: config, output_root,
        state_dir, viewer, delay, max_scenarios, max_renders, skip_upstream,
        no_present, verbose. Missing attributes are treated as unset.

    Returns
    -------
    InternalConfig
        Fully validated configuration carrying its run_id.

    Examples
    --------
    >>> args = parser.parse_args()
    >>> config = init_runtime_config(args)
    >>> summary = PipelineOrchestrator(config).run()
    """
    param_cfg = ParamConfig()

    config_path = getattr(args, 'config', None)
    user_cfg = UserConfig.model_validate(load_user_config_dict(config_path)) if config_path else None

    cli_args = {
        k: v
        for k, v in {
            "output_root": getattr(args, 'output_root', None),
            "state_dir": getattr(args, 'state_dir', None),
            "viewer_path": getattr(args, 'viewer', None),
            "delay": getattr(args, 'delay', None),
            "max_scenarios": getattr(args, 'max_scenarios', None),
            "max_renders": getattr(args, 'max_renders', None),
            "skip_upstream": getattr(args, 'skip_upstream', False) or None,
            "no_present": getattr(args, 'no_present', False) or None,
            "log_level": "DEBUG" if getattr(args, 'verbose', False) else None,
        }.items()
        if v is not None
    }
    cli_cfg = CLIConfig.model_validate(cli_args)

    resolved = resolve_config(param_cfg, user_cfg, cli_cfg)
    config = resolved.model_copy(update={"run_id": generate_run_id()})

    persist_runtime_config(config)
    return config


__all__ = [
    'init_runtime_config',
    'load_user_config_dict',
    'persist_runtime_config',
    'generate_run_id',
]
