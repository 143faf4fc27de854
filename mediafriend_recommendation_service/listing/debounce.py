"""Trailing-edge debounce for search input."""
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TrailingDebouncer(Generic[T]):
    """
    Fires the last pushed value once no new value arrived for ``wait_ms``.

    Intermediate values are replaced, never fired. The caller drives time by
    calling ``poll()`` from its event loop; ``flush()`` fires the pending
    value immediately (e.g. on Enter or when the view closes).
    """

    def __init__(
            self,
            wait_ms: int,
            on_fire: Callable[[T], None],
            clock: Callable[[], float] = time.monotonic
    ):
        self.wait = wait_ms / 1000.0
        self.on_fire = on_fire
        self.clock = clock
        self._value: Optional[T] = None
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def push(self, value: T) -> None:
        """Record a new value and restart the quiet period."""
        self._value = value
        self._deadline = self.clock() + self.wait

    def poll(self) -> bool:
        """Fire if the quiet period has elapsed. Returns True when fired."""
        if self._deadline is None or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Fire the pending value now, if any."""
        if self._deadline is None:
            return False
        value = self._value
        self._value = None
        self._deadline = None
        self.on_fire(value)
        return True

    def cancel(self) -> None:
        self._value = None
        self._deadline = None
