from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np

from vision import AcquisitionError

logger = logging.getLogger(__name__)


class WriterError(RuntimeError):
    """Output video could not be opened."""


class FrameSource(Protocol):
    order: str

    @property
    def ready(self) -> bool: ...

    @property
    def size(self) -> Tuple[int, int]: ...

    def read(self) -> Optional[np.ndarray]: ...

    def release(self) -> None: ...


class CaptureSource:
    """
    cv2.VideoCapture behind the FrameSource interface.

    read() returns None when no frame is available yet; a file source that
    runs out of frames sets `exhausted`.
    """
    order = "BGR"

    def __init__(self, cap: cv2.VideoCapture, name: str, live: bool) -> None:
        self.cap = cap
        self.name = name
        self.live = live
        self.exhausted = False

    @property
    def ready(self) -> bool:
        return self.cap is not None and self.cap.isOpened() and not self.exhausted

    @property
    def size(self) -> Tuple[int, int]:
        if self.cap is None:
            return 0, 0
        return get_frame_size(self.cap)

    def read(self) -> Optional[np.ndarray]:
        if not self.ready:
            return None
        ok, frame = self.cap.read()
        if not ok:
            if not self.live:
                self.exhausted = True
                logger.info("End of %s", self.name)
            return None
        return frame

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Released %s", self.name)


def open_camera(index: int, width: int = 1280, height: int = 720) -> CaptureSource:
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        raise AcquisitionError(f"Could not open camera {index}")
    # ideal size only; the driver may pick something else
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return CaptureSource(cap, f"camera {index}", live=True)


def open_video(path: str) -> CaptureSource:
    cap = cv2.VideoCapture(path)
    if not cap.isOpened():
        raise AcquisitionError(f"Could not open video: {path}")
    return CaptureSource(cap, path, live=False)


def open_source(spec: str, width: int = 1280, height: int = 720) -> CaptureSource:
    """Digits mean a camera index, anything else a file path."""
    if spec.isdigit():
        return open_camera(int(spec), width, height)
    return open_video(spec)


def get_fps(cap: cv2.VideoCapture, fps_fallback: float = 30.0) -> float:
    fps = cap.get(cv2.CAP_PROP_FPS)
    return fps if fps and fps > 1e-3 else fps_fallback


def get_frame_size(cap: cv2.VideoCapture) -> tuple[int, int]:
    w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    return w, h


def make_writer(path: str, fps: float, frame_size: tuple[int, int]) -> cv2.VideoWriter:
    """mp4v writer for the annotated stream; WriterError if it cannot be opened."""
    w, h = frame_size
    if w <= 0 or h <= 0:
        raise WriterError(f"Unknown frame size {w}x{h} for writer: {path}")
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"mp4v"), fps, (w, h))
    if not writer.isOpened():
        raise WriterError(f"Could not open video writer: {path}")
    logger.info("Writing %dx%d @ %.1f fps to %s", w, h, fps, path)
    return writer
