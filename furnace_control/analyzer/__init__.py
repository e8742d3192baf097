"""Furnace run analysis and visualization components."""

from furnace_control.analyzer.metrics import PerformanceMetrics
from furnace_control.analyzer.control_analysis import FurnaceLoopAnalyzer
from furnace_control.analyzer.plots import FurnacePlotter, LiveDisplay

__all__ = [
    "PerformanceMetrics",
    "FurnaceLoopAnalyzer",
    "FurnacePlotter",
    "LiveDisplay",
]
