from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from config import RGB, OverlayStyle
from detector import DetectionResult
from vision import VisionHandle


@dataclass(frozen=True)
class LabelPlacement:
    ring_x: int
    ring_y: int
    radius: int
    text_x: int
    text_y: int


def _bgra(rgb: RGB, alpha: int = 255) -> Tuple[int, int, int, int]:
    r, g, b = rgb
    return (int(b), int(g), int(r), int(alpha))


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def place_label(result: DetectionResult, width: int, height: int, style: OverlayStyle) -> LabelPlacement:
    cx = _clamp(int(round(result.x)), 0, width - 1)
    cy = _clamp(int(round(result.y)), 0, height - 1)
    r = int(round(result.radius))

    text_x = min(cx + r + style.label_margin, width - style.label_budget)
    text_x = max(0, text_x)
    text_y = max(cy - r, style.label_min_y)
    return LabelPlacement(cx, cy, r, text_x, text_y)


class Overlay:
    """Transparent BGRA drawing surface kept the same size as the video frame."""

    def __init__(self, vision: VisionHandle, width: int = 0, height: int = 0,
                 style: Optional[OverlayStyle] = None) -> None:
        self.vision = vision
        self.style = style or OverlayStyle()
        self.surface = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)

    @property
    def size(self) -> Tuple[int, int]:
        h, w = self.surface.shape[:2]
        return w, h

    def resize(self, width: int, height: int) -> bool:
        if (width, height) == self.size:
            return False
        self.surface = np.zeros((height, width, 4), dtype=np.uint8)
        return True

    def clear(self) -> None:
        self.surface[:] = 0

    def is_clear(self) -> bool:
        return not self.surface.any()

    def draw(self, result: Optional[DetectionResult]) -> Optional[LabelPlacement]:
        """Clear, then draw ring + label + swatch for `result` (if any)."""
        self.clear()
        if result is None:
            return None

        w, h = self.size
        if w == 0 or h == 0:
            return None

        cv = self.vision.cv
        st = self.style
        p = place_label(result, w, h, st)
        color = _bgra(result.rgb)

        cv.circle(self.surface, (p.ring_x, p.ring_y), p.radius, _bgra(st.ring_rgb), st.ring_thickness, cv.LINE_AA)

        # outline first, then fill, so the label reads on any background
        org = (p.text_x, p.text_y)
        font = cv.FONT_HERSHEY_SIMPLEX
        cv.putText(self.surface, result.color, org, font, st.font_scale,
                   _bgra(st.outline_rgb, st.outline_alpha), st.outline_thickness, cv.LINE_AA)
        cv.putText(self.surface, result.color, org, font, st.font_scale,
                   color, st.fill_thickness, cv.LINE_AA)

        swatch = (p.text_x - st.swatch_offset, p.text_y - st.swatch_radius)
        cv.circle(self.surface, swatch, st.swatch_radius, color, -1, cv.LINE_AA)
        return p

    def composite(self, frame_bgr: np.ndarray) -> np.ndarray:
        """Alpha-blend the overlay onto a copy of a BGR frame of the same size."""
        base = frame_bgr[:, :, :3].astype(np.float32)
        alpha = self.surface[:, :, 3:4].astype(np.float32) / 255.0
        top = self.surface[:, :, :3].astype(np.float32)
        out = base * (1.0 - alpha) + top * alpha
        return out.astype(np.uint8)
