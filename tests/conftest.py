"""Shared fixtures: a vision handle and synthetic RGBA frames drawn in HSV."""
import logging
from typing import Iterable, Optional, Tuple

import cv2
import numpy as np
import pytest

from config import DetectorConfig
from vision import init_vision

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

RED = (0, 200, 240)
BLUE = (110, 200, 240)
NEAR_WHITE = (0, 10, 250)

# (cx, cy, radius, hsv) in frame coordinates
Spot = Tuple[int, int, int, Tuple[int, int, int]]


def draw_hsv_frame(width: int, height: int, spots: Iterable[Spot], order: str = "RGBA") -> np.ndarray:
    hsv = np.zeros((height, width, 3), dtype=np.uint8)
    for cx, cy, r, color in spots:
        cv2.circle(hsv, (cx, cy), r, tuple(int(c) for c in color), -1)

    if order in ("RGB", "RGBA"):
        rgb = cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)
    else:
        rgb = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)
    if order.endswith("A"):
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=2)
    return rgb


@pytest.fixture
def cfg() -> DetectorConfig:
    return DetectorConfig()


@pytest.fixture
def vision(cfg):
    return init_vision(cfg)


@pytest.fixture
def make_frame():
    return draw_hsv_frame


class FakeSource:
    """In-memory FrameSource; None entries model ticks with no frame yet."""

    def __init__(self, frames, order: str = "RGBA", fail_on: Optional[int] = None) -> None:
        self.frames = list(frames)
        self.order = order
        self.fail_on = fail_on
        self.reads = 0
        self.released = 0
        self.exhausted = False

    @property
    def ready(self) -> bool:
        return not self.exhausted

    @property
    def size(self):
        for f in self.frames:
            if f is not None:
                return f.shape[1], f.shape[0]
        return 0, 0

    def read(self):
        self.reads += 1
        if self.fail_on is not None and self.reads == self.fail_on:
            raise IOError("device hiccup")
        if not self.frames:
            self.exhausted = True
            return None
        return self.frames.pop(0)

    def release(self) -> None:
        self.released += 1


@pytest.fixture
def fake_source_cls():
    return FakeSource


class FakeCap:
    """Stands in for cv2.VideoCapture."""

    def __init__(self, frames, size=(0, 0)):
        self.frames = list(frames)
        self.opened = True
        self.size = size

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def get(self, prop):
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return self.size[0]
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.size[1]
        return 0

    def release(self):
        self.opened = False


class FakeWriter:
    def __init__(self):
        self.frames = []
        self.released = False

    def write(self, frame):
        self.frames.append(frame)

    def release(self):
        self.released = True
