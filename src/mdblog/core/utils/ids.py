"""Injectable id sequences for generated DOM identifiers"""

import threading
from typing import Optional


# Width of the id range reserved for one post in a batch build.
IDS_PER_POST = 1000


class IdSequence:
    """Monotonically increasing integer ids, safe to share between threads.

    A bounded sequence raises OverflowError instead of handing out ``stop``.
    """

    def __init__(self, start: int = 0, stop: Optional[int] = None):
        self.start = start
        self.stop = stop
        self._next = start
        self._lock = threading.Lock()

    @classmethod
    def for_post(cls, position: int) -> "IdSequence":
        """Bounded sequence for the post at position in the build's discovery order."""
        start = position * IDS_PER_POST
        return cls(start=start, stop=start + IDS_PER_POST)

    def next(self) -> int:
        with self._lock:
            value = self._next
            if self.stop is not None and value >= self.stop:
                raise OverflowError(f"id range {self.start}-{self.stop - 1} exhausted")
            self._next += 1
            return value

    def peek(self) -> int:
        """Return the id the next call to next() will produce."""
        with self._lock:
            return self._next
