#!/usr/bin/env python3
"""``dotreel`` scenario GIF pipeline runner.

Usage:
    python scripts/render_scenarios.py scripts/user_config.py
    python scripts/render_scenarios.py scripts/user_config.py --skip-upstream
    python scripts/render_scenarios.py --output-root output --no-present

Note: User config in scripts/user_config.py, expert defaults in
src/dotreel/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from dotreel.cli.run_scenarios import main


if __name__ == "__main__":
    sys.exit(main())
