# color_classifier.py
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from config import DEFAULT_PALETTE, RGB, WHITE, PaletteCandidate
from tick_scope import TickScope
from vision import VisionHandle

HUE_PERIOD = 180  # OpenCV stores hue halved


def circular_hue_distance(a: float, b: float) -> float:
    """Distance on the 0-179 hue circle; always within [0, 90]."""
    diff = abs((a % HUE_PERIOD) - (b % HUE_PERIOD))
    return min(diff, HUE_PERIOD - diff)


def classify_hsv(
    h: float,
    s: float,
    v: float,
    palette: Sequence[PaletteCandidate] = DEFAULT_PALETTE,
    white_min_v: int = 220,
    white_max_s: int = 40,
    sat_floor: int = 80,
    sat_weight: float = 0.3,
) -> PaletteCandidate:
    """
    Snap a mean HSV sample to the nearest palette entry.

    Bright and washed out -> White, whatever the hue. Otherwise score each
    candidate by hue distance plus a penalty for weak saturation; lowest
    score wins and the first declared candidate wins ties.
    """
    if v >= white_min_v and s <= white_max_s:
        return WHITE
    if not palette:
        raise ValueError("palette must not be empty")

    penalty = max(0.0, sat_floor - s) * sat_weight
    best = palette[0]
    best_score = float("inf")
    for cand in palette:
        score = circular_hue_distance(h, cand.hue) + penalty
        if score < best_score:
            best_score = score
            best = cand
    return best


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (int(c) for c in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def sample_mean_hsv(
    vision: VisionHandle,
    roi_hsv: np.ndarray,
    cx: float,
    cy: float,
    radius: float,
    restrict: Optional[np.ndarray] = None,
    scope: Optional[TickScope] = None,
) -> Tuple[float, float, float]:
    """Mean (h, s, v) under a filled circle stencil, optionally ANDed with a mask."""
    cv = vision.cv
    stencil = np.zeros(roi_hsv.shape[:2], dtype=np.uint8)
    if scope is not None:
        scope.hold(stencil)
    cv.circle(stencil, (int(round(cx)), int(round(cy))), int(round(radius)), 255, -1)

    if restrict is not None:
        both = cv.bitwise_and(stencil, restrict)
        # fall back to the plain stencil if the mask misses it entirely
        if cv.countNonZero(both) > 0:
            stencil = both
            if scope is not None:
                scope.hold(stencil)

    h, s, v = cv.mean(roi_hsv, mask=stencil)[:3]
    return float(h), float(s), float(v)
