"""Recording components for per-tick furnace data."""

from furnace_control.logging.csv_logger import CSVLogger, HistoryBuffer

__all__ = [
    "CSVLogger",
    "HistoryBuffer",
]
