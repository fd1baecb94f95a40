from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from color_classifier import classify_hsv, rgb_to_hex, sample_mean_hsv
from config import RGB, WHITE, DetectorConfig
from roi import frame_to_hsv, is_valid_frame, lower_third, roi_to_frame
from tick_scope import TickScope
from vision import VisionHandle


@dataclass(frozen=True)
class Circle:
    x: float  # ROI-local
    y: float
    radius: float


class CircleSource(Enum):
    GLOW = "glow"
    CORE = "core"


@dataclass(frozen=True)
class Candidate:
    source: CircleSource
    circle: Circle

    @property
    def used_glow(self) -> bool:
        return self.source is CircleSource.GLOW


@dataclass(frozen=True)
class DetectionResult:
    x: float  # frame coords
    y: float
    radius: float
    color: str  # palette name, e.g. "Red" | "White"
    rgb: RGB
    used_glow: bool

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.rgb)


def make_masks(vision: VisionHandle, roi_hsv: np.ndarray, cfg: DetectorConfig) -> Tuple[np.ndarray, np.ndarray]:
    cv = vision.cv
    glow = cv.inRange(roi_hsv, np.array(cfg.glow_lo, np.uint8), np.array(cfg.glow_hi, np.uint8))
    core = cv.inRange(roi_hsv, np.array(cfg.core_lo, np.uint8), np.array(cfg.core_hi, np.uint8))
    return glow, core


def clean_mask(vision: VisionHandle, mask: np.ndarray) -> np.ndarray:
    # Opening drops specks smaller than the kernel; bigger blobs keep their shape
    return vision.cv.morphologyEx(mask, vision.cv.MORPH_OPEN, vision.kernel)


def find_circles(
    vision: VisionHandle,
    mask: np.ndarray,
    cfg: DetectorConfig,
    scope: Optional[TickScope] = None,
) -> List[Circle]:
    """Enclosing circle of every external contour that passes the radius bounds, in scan order."""
    cv = vision.cv
    contours, _ = cv.findContours(mask, cv.RETR_EXTERNAL, cv.CHAIN_APPROX_SIMPLE)
    if scope is not None:
        scope.hold(contours)

    circles: List[Circle] = []
    for c in contours:
        (x, y), r = cv.minEnclosingCircle(c)
        if r < cfg.min_radius or r > cfg.max_radius:
            continue
        circles.append(Circle(float(x), float(y), float(r)))
    return circles


def find_best_circle(
    vision: VisionHandle,
    mask: np.ndarray,
    cfg: DetectorConfig,
    scope: Optional[TickScope] = None,
) -> Optional[Circle]:
    best: Optional[Circle] = None
    for circle in find_circles(vision, mask, cfg, scope):
        # strict > keeps the first contour on ties
        if best is None or circle.radius > best.radius:
            best = circle
    return best


def select_candidate(glow: Optional[Circle], core: Optional[Circle]) -> Optional[Candidate]:
    if glow is not None:
        return Candidate(CircleSource.GLOW, glow)
    if core is not None:
        return Candidate(CircleSource.CORE, core)
    return None


def classify_candidate(
    vision: VisionHandle,
    cand: Candidate,
    roi_hsv: np.ndarray,
    glow_mask: np.ndarray,
    cfg: DetectorConfig,
    scope: Optional[TickScope] = None,
) -> Tuple[str, RGB]:
    if not cand.used_glow:
        return WHITE.name, WHITE.rgb

    c = cand.circle
    restrict = glow_mask if cfg.sample_within_glow else None
    h, s, v = sample_mean_hsv(vision, roi_hsv, c.x, c.y, c.radius, restrict=restrict, scope=scope)
    match = classify_hsv(
        h, s, v,
        palette=cfg.palette,
        white_min_v=cfg.white_min_v,
        white_max_s=cfg.white_max_s,
        sat_floor=cfg.sat_floor,
        sat_weight=cfg.sat_weight,
    )
    return match.name, match.rgb


def analyze_roi(
    vision: VisionHandle,
    roi_hsv: np.ndarray,
    cfg: DetectorConfig,
    scope: TickScope,
) -> Optional[Tuple[Candidate, str, RGB]]:
    """Masks -> cleanup -> circles -> selection -> color, all in ROI-local coords."""
    glow_raw, core_raw = scope.hold(make_masks(vision, roi_hsv, cfg))
    glow = scope.hold(clean_mask(vision, glow_raw))
    core = scope.hold(clean_mask(vision, core_raw))

    glow_best = find_best_circle(vision, glow, cfg, scope)
    # Core mask only matters when glow came up empty
    core_best = None if glow_best is not None else find_best_circle(vision, core, cfg, scope)

    cand = select_candidate(glow_best, core_best)
    if cand is None:
        return None

    name, rgb = classify_candidate(vision, cand, roi_hsv, glow, cfg, scope)
    return cand, name, rgb


def detect_light(
    vision: VisionHandle,
    frame: np.ndarray,
    cfg: DetectorConfig,
    order: str = "RGBA",
    scope: Optional[TickScope] = None,
) -> Optional[DetectionResult]:
    """
    Run the whole per-frame pipeline on one frame.

    Returns None for malformed frames and for frames with no accepted
    circle. Every temporary is held by `scope` (a fresh one if not given)
    and released before returning.
    """
    if not is_valid_frame(frame):
        return None

    own_scope = scope is None
    scope = scope if scope is not None else TickScope()
    try:
        hsv = scope.hold(frame_to_hsv(vision, frame, order))
        roi_hsv, y_offset = lower_third(hsv, cfg.roi_fraction)
        if roi_hsv.shape[0] == 0:
            return None

        found = analyze_roi(vision, roi_hsv, cfg, scope)
        if found is None:
            return None

        cand, name, rgb = found
        x, y = roi_to_frame(cand.circle.x, cand.circle.y, y_offset)
        return DetectionResult(
            x=x,
            y=y,
            radius=cand.circle.radius,
            color=name,
            rgb=rgb,
            used_glow=cand.used_glow,
        )
    finally:
        if own_scope:
            scope.release()
