"""dotreel User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Advanced settings are in src/dotreel/schemas/param.py

Usage:
    python scripts/render_scenarios.py scripts/user_config.py
    python scripts/render_scenarios.py scripts/user_config.py --skip-upstream
    python scripts/render_scenarios.py scripts/user_config.py --viewer /usr/bin/eog
"""

CONFIG = {
    # ========================================================================
    # UPSTREAM GENERATOR
    # ========================================================================
    "UPSTREAM_COMMAND": "cargo run",  # Writes output/<scenario>/frame_N.dot
    "UPSTREAM_CWD": None,             # None = current directory

    # ========================================================================
    # PATHS
    # ========================================================================
    "OUTPUT_ROOT": "output",  # One subdirectory per scenario
    "STATE_DIR": None,        # Run logs + tracker DB; None keeps output/ clean

    # ========================================================================
    # ANIMATION
    # ========================================================================
    "FRAME_DELAY": 50,        # Centiseconds per frame
    "LOOP": 0,                # 0 = loop forever

    # ========================================================================
    # PRESENTATION
    # ========================================================================
    "GIF_VIEWER_PATH": "/Applications/Lyn.app",  # Falls back to platform opener if missing
    "PRESENT": True,

    # ========================================================================
    # WORKERS
    # ========================================================================
    "MAX_SCENARIOS": 2,
    "MAX_RENDERS": 4,

    "LOG_LEVEL": "INFO",
}
