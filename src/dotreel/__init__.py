"""`dotreel` - turn per-step Graphviz snapshots into looping GIFs.

Subpackages:
- scenario: Frame naming and scenario discovery
- tools: Graphviz, ImageMagick, viewer and upstream process adapters
- pipeline: Orchestrator, scenario processor, run tracker
- schemas: Layered configuration
- contracts: Stage invariants
- cli: Command-line entry point
"""

__version__ = "0.1.0"
