"""
Per-tick data recording for the furnace simulation.

- CSVLogger: buffered CSV export, flushed on buffer size or time interval
- HistoryBuffer: bounded in-memory window of recent ticks (oldest evicted first)

Both are thread-safe so a display thread can read while the scheduler ticks.
"""

from typing import List, Dict, Any, Sequence
from pathlib import Path
import csv
import time
import threading
from collections import deque

import numpy as np


class CSVLogger:
    """
    CSV logger with buffering for per-tick simulation records.

    Example:
        >>> logger = CSVLogger("furnace.csv", columns=["time_step", "power"])
        >>> logger.log({"time_step": 1, "power": 100.0})
        >>> logger.close()
    """

    def __init__(
        self,
        file_path: str,
        columns: Sequence[str],
        buffer_size: int = 100,
        flush_interval: float = 1.0,
        append: bool = False
    ):
        """
        Initialize CSV logger.

        Args:
            file_path: Path to CSV file
            columns: Column names, written as header
            buffer_size: Number of rows to buffer before writing
            flush_interval: Maximum seconds between flushes
            append: If True, append to existing file
        """
        if not columns:
            raise ValueError("columns cannot be empty")
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if flush_interval <= 0:
            raise ValueError("flush_interval must be positive")

        self._file_path = Path(file_path)
        self._columns = list(columns)
        self._buffer_size = buffer_size
        self._flush_interval = flush_interval

        self._lock = threading.Lock()
        self._buffer: deque = deque()
        self._last_flush_time = time.time()
        self._total_rows = 0

        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        write_header = not append or not self._file_path.exists() \
            or self._file_path.stat().st_size == 0
        self._file = open(self._file_path, 'a' if append else 'w', newline='')
        self._writer = csv.DictWriter(self._file, fieldnames=self._columns)
        if write_header:
            self._writer.writeheader()

        self._closed = False

    def log(self, data: Dict[str, Any]) -> None:
        """
        Log a row of data.

        Args:
            data: Mapping of column names to values; missing columns are blank
        """
        if self._closed:
            raise RuntimeError("Logger is closed")

        row = {col: data.get(col, '') for col in self._columns}

        with self._lock:
            self._buffer.append(row)
            self._total_rows += 1
            should_flush = (
                len(self._buffer) >= self._buffer_size or
                time.time() - self._last_flush_time >= self._flush_interval
            )

        if should_flush:
            self.flush()

    def flush(self) -> None:
        """Flush buffer to disk."""
        with self._lock:
            if not self._buffer or self._closed:
                return

            rows_to_write = list(self._buffer)
            self._buffer.clear()
            self._last_flush_time = time.time()

            try:
                self._writer.writerows(rows_to_write)
                self._file.flush()
            except OSError as e:
                # Keep rows for the next attempt
                self._buffer.extendleft(reversed(rows_to_write))
                raise RuntimeError(f"Failed to write to CSV: {e}") from e

    def close(self) -> None:
        """Close logger and flush remaining data."""
        if self._closed:
            return

        self.flush()

        with self._lock:
            self._closed = True
            self._file.close()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def total_rows(self) -> int:
        """Get total number of logged rows."""
        return self._total_rows

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class HistoryBuffer:
    """
    Sliding window over the most recent tick records.

    Records are any objects exposing their fields as attributes and a
    ``to_dict()`` method. Once ``max_size`` is reached the oldest record is
    dropped for every new one (FIFO).
    """

    def __init__(self, max_size: int = 120):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self._max_size = max_size
        self._buffer: deque = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def append(self, record: Any) -> None:
        with self._lock:
            self._buffer.append(record)

    def get_all(self) -> List[Any]:
        """Get all records, oldest first."""
        with self._lock:
            return list(self._buffer)

    def get_last(self, n: int) -> List[Any]:
        """Get the last n records."""
        with self._lock:
            if n <= 0:
                return []
            return list(self._buffer)[-n:]

    def column(self, name: str) -> np.ndarray:
        """Values of one record field across the window, as a float array."""
        with self._lock:
            return np.array([getattr(r, name) for r in self._buffer], dtype=float)

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def is_full(self) -> bool:
        """Check if buffer is at max capacity."""
        return len(self._buffer) >= self._max_size

    def to_csv(self, file_path: str) -> None:
        """
        Export the window to a CSV file.

        Args:
            file_path: Output file path
        """
        rows = [r.to_dict() for r in self.get_all()]
        if not rows:
            return

        with open(file_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
