"""cargo-bounds: find and verify the real version bounds of Cargo dependencies.

Two modes:
  - ``test``: pin sampled versions inside each declared bound and run the
    check command against each one
  - ``minimize``: binary-search the widest range that still passes

The manifest is rewritten for every trial and always restored, including
when the run is interrupted.
"""

__version__ = "0.2.0"
__description__ = "Find and verify the real version bounds of Cargo dependencies"

from cargobounds.core.orchestrator import BoundsOrchestrator
from cargobounds.cli.app import app as cli

__all__ = ["BoundsOrchestrator", "cli", "__version__"]
