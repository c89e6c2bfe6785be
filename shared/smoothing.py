from collections import OrderedDict, deque
from typing import Deque, Sequence, Tuple

from shared.color_math import round_half_away
from shared.models import RGB


class SmoothingWindow:
    """Running average over the last `capacity` readings to damp sensor jitter."""

    def __init__(self, capacity: int = 5) -> None:
        if capacity < 1:
            raise ValueError("Smoothing window capacity must be at least 1")
        self._buffer: Deque[Tuple[float, float, float]] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._buffer.maxlen

    def __len__(self) -> int:
        return len(self._buffer)

    def contents(self) -> Tuple[Tuple[float, float, float], ...]:
        return tuple(self._buffer)

    def push(self, triple: Sequence[float]) -> RGB:
        """Adds a reading (the oldest falls out once full) and returns the channel means."""
        red, green, blue = triple
        self._buffer.append((red, green, blue))

        count = len(self._buffer)
        return (
            round_half_away(sum(t[0] for t in self._buffer) / count),
            round_half_away(sum(t[1] for t in self._buffer) / count),
            round_half_away(sum(t[2] for t in self._buffer) / count),
        )

    def reset(self) -> None:
        self._buffer.clear()


class WindowRegistry:
    """
    One SmoothingWindow per session key, created on first use.

    At most `max_sessions` windows are kept; the least recently used one is
    dropped to make room for a new session.
    """

    def __init__(self, capacity: int = 5, max_sessions: int = 1000) -> None:
        if capacity < 1:
            raise ValueError("Smoothing window capacity must be at least 1")
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.capacity = capacity
        self.max_sessions = max_sessions
        self._windows: "OrderedDict[str, SmoothingWindow]" = OrderedDict()

    def get(self, session: str) -> SmoothingWindow:
        window = self._windows.get(session)
        if window is None:
            window = SmoothingWindow(self.capacity)
            self._windows[session] = window
            while len(self._windows) > self.max_sessions:
                self._windows.popitem(last=False)
        else:
            self._windows.move_to_end(session)
        return window

    def reset(self, session: str) -> None:
        window = self._windows.get(session)
        if window is not None:
            window.reset()

    def discard(self, session: str) -> None:
        self._windows.pop(session, None)

    def __contains__(self, session: str) -> bool:
        return session in self._windows

    def __len__(self) -> int:
        return len(self._windows)
