"""``python -m dotreel`` entry point."""

import sys

from dotreel.cli.run_scenarios import main

if __name__ == "__main__":
    sys.exit(main())
