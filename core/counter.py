"""Advisory count of in-flight upstream exchanges."""

from threading import Lock


class InFlightCounter:
    """Thread-safe counter used only to annotate log output."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        with self._lock:
            self._value -= 1
            return self._value
