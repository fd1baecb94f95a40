from dataclasses import dataclass, field
from typing import Optional, Tuple

HSV = Tuple[int, int, int]
RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class PaletteCandidate:
    name: str
    hue: int  # 0-179 (OpenCV half-range)
    rgb: RGB


WHITE = PaletteCandidate("White", 0, (255, 255, 255))

DEFAULT_PALETTE: Tuple[PaletteCandidate, ...] = (
    PaletteCandidate("Red", 0, (255, 0, 0)),
    PaletteCandidate("Orange", 15, (255, 140, 0)),
    PaletteCandidate("Green", 60, (0, 255, 0)),
    PaletteCandidate("Blue", 110, (0, 140, 255)),
)


@dataclass(frozen=True)
class DetectorConfig:
    # Fraction of frame height skipped from the top; the light sits below it.
    roi_fraction: float = 2.0 / 3.0

    # Broad "glow" mask: bright + saturated halo around the light
    glow_lo: HSV = (0, 80, 200)
    glow_hi: HSV = (180, 255, 255)

    # Narrow "core" mask: overexposed, nearly white center
    core_lo: HSV = (0, 0, 230)
    core_hi: HSV = (180, 40, 255)

    morph_kernel: int = 5  # elliptical, radius ~2

    min_radius: float = 2.0
    max_radius: float = 60.0

    # Mean color is taken under the circle stencil AND the glow mask
    sample_within_glow: bool = True

    # Classifier
    white_min_v: int = 220
    white_max_s: int = 40
    sat_floor: int = 80
    sat_weight: float = 0.3
    palette: Tuple[PaletteCandidate, ...] = DEFAULT_PALETTE


@dataclass(frozen=True)
class OverlayStyle:
    ring_rgb: RGB = (0x00, 0xFF, 0xB3)
    ring_thickness: int = 3

    font_scale: float = 0.6
    outline_thickness: int = 4
    fill_thickness: int = 1
    outline_rgb: RGB = (0, 0, 0)
    outline_alpha: int = 180  # ~0.7

    label_margin: int = 12
    label_budget: int = 160  # horizontal room kept for the label
    label_min_y: int = 28

    swatch_radius: int = 6
    swatch_offset: int = 12


@dataclass(frozen=True)
class Config:
    # Camera index ("0") or a video file path
    source: str = "0"
    output_path: Optional[str] = None
    show: bool = True

    fps_assumed: float = 30.0
    refresh_hz: float = 60.0
    frame_width: int = 1280
    frame_height: int = 720

    detector: DetectorConfig = field(default_factory=DetectorConfig)
    style: OverlayStyle = field(default_factory=OverlayStyle)
