"""Trade ID generator.

IDs look like "T-1760745600123-000042": millisecond timestamp plus a per-generator
sequence, so they sort by creation order and stay unique within one process
even when several trades are produced on the same tick.
"""

import itertools
import time


class TradeIdGenerator:
    def __init__(self, prefix: str = "T", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"{self._prefix}-{int(time.time() * 1000)}-{next(self._counter):06d}"

    def __call__(self) -> str:
        return self.next_id()
