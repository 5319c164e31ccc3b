"""Command-line interface modules for dotreel pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from dotreel.cli.run_scenarios import run_pipeline, main

__all__ = ['run_pipeline', 'main']
