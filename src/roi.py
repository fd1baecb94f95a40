import math
from typing import Any, Tuple

import numpy as np

from vision import VisionHandle

# Conversion per declared channel order; alpha is dropped before converting.
_TO_HSV = {
    "RGBA": "COLOR_RGB2HSV",
    "RGB": "COLOR_RGB2HSV",
    "BGRA": "COLOR_BGR2HSV",
    "BGR": "COLOR_BGR2HSV",
}


def is_valid_frame(frame: Any) -> bool:
    if not isinstance(frame, np.ndarray):
        return False
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        return False
    if frame.dtype != np.uint8:
        return False
    h, w = frame.shape[:2]
    return h > 0 and w > 0


def frame_to_hsv(vision: VisionHandle, frame: np.ndarray, order: str = "RGBA") -> np.ndarray:
    try:
        code = getattr(vision.cv, _TO_HSV[order.upper()])
    except KeyError:
        raise ValueError(f"Unsupported channel order: {order}") from None

    rgb = frame[:, :, :3]
    if not rgb.flags["C_CONTIGUOUS"]:
        rgb = np.ascontiguousarray(rgb)
    return vision.cv.cvtColor(rgb, code)


def roi_offset(height: int, fraction: float) -> int:
    # epsilon keeps 2/3 of 720 at 480 instead of 479
    return int(math.floor(height * fraction + 1e-9))


def lower_third(hsv: np.ndarray, fraction: float = 2.0 / 3.0) -> Tuple[np.ndarray, int]:
    """Rows [floor(h*fraction), h), full width. Returns a view plus its y offset."""
    y0 = roi_offset(hsv.shape[0], fraction)
    return hsv[y0:, :], y0


def roi_to_frame(x_roi: float, y_roi: float, y_offset: int) -> Tuple[float, float]:
    return x_roi, y_roi + y_offset
