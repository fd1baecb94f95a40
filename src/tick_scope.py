from __future__ import annotations

from typing import Any, List, TypeVar

T = TypeVar("T")


class TickScope:
    """
    Arena for one tick's temporaries (HSV frame, masks, contours, stencils).

    Everything handed to hold() is dropped when the scope exits, whichever
    way the tick ends. Use as a context manager:

        with TickScope() as scope:
            hsv = scope.hold(frame_to_hsv(frame))
    """

    def __init__(self) -> None:
        self._held: List[Any] = []
        self.peak: int = 0
        self.closed: bool = False

    def hold(self, obj: T) -> T:
        if self.closed:
            raise RuntimeError("TickScope already released")
        self._held.append(obj)
        self.peak = max(self.peak, len(self._held))
        return obj

    @property
    def live(self) -> int:
        return len(self._held)

    def release(self) -> None:
        self._held.clear()
        self.closed = True

    def __enter__(self) -> "TickScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
