"""Terminal display for trials and run summaries."""

from cargobounds.monitor.renderer import TrialRenderer

__all__ = ["TrialRenderer"]
