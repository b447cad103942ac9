"""Stage timing helpers for the detection pipeline."""

import time
from typing import Dict, Optional


class PerformanceTimer:
    """Context manager for timing one operation.

    When ``sink`` is given the duration (milliseconds) is stored in it under
    ``operation_name`` on exit.
    """

    def __init__(self, operation_name: str, sink: Optional[Dict[str, float]] = None):
        self.operation_name = operation_name
        self.sink = sink
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        if self.sink is not None:
            self.sink[self.operation_name] = self.duration_ms

    @property
    def duration_ms(self) -> float:
        """Get operation duration in milliseconds."""
        if self.end_time is None or self.start_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000.0


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - start) * 1000.0
