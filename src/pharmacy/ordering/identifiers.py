import threading
import time
from collections.abc import Callable


class OrderIdGenerator:
    """Issues ``<prefix>-<epoch ms>`` order ids, strictly increasing within the process.

    Two orders committed in the same millisecond get consecutive values
    instead of the same id.
    """

    def __init__(self, prefix: str = "PED", clock: Callable[[], float] = time.time) -> None:
        self.prefix = prefix
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last = max(now_ms, self._last + 1)
            value = self._last
        return f"{self.prefix}-{value}"
