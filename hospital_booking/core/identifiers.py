import threading
import time


class SequentialIdGenerator:
    """Timestamp-derived ids (``APT1718000000000``) that never repeat in-process.

    The numeric part is the current time in milliseconds, bumped by one
    whenever two ids are requested within the same millisecond.
    """

    def __init__(self, prefix: str, clock=time.time):
        self.prefix = prefix
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = int(self._clock() * 1000)
            self._last = max(candidate, self._last + 1)
            return f"{self.prefix}{self._last}"

    def observe(self, identifier: str) -> None:
        """Advance past an id loaded from storage so new ids stay unique."""
        suffix = identifier[len(self.prefix):]
        if identifier.startswith(self.prefix) and suffix.isdigit():
            with self._lock:
                self._last = max(self._last, int(suffix))


appointment_ids = SequentialIdGenerator("APT")
patient_ids = SequentialIdGenerator("PAT")
