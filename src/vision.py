from __future__ import annotations

import logging
from dataclasses import dataclass
from types import ModuleType

import numpy as np

from config import DetectorConfig

logger = logging.getLogger(__name__)


class AcquisitionError(RuntimeError):
    """Camera or vision library could not be brought up. Fatal to the loop."""


@dataclass(frozen=True)
class VisionHandle:
    """
    Capability object returned by init_vision().

    The pipeline only touches OpenCV through this handle, so callers decide
    when (and whether) the library is loaded.
    """
    cv: ModuleType
    kernel: np.ndarray  # morphology structuring element, built once
    version: str


def init_vision(cfg: DetectorConfig) -> VisionHandle:
    try:
        import cv2
    except ImportError as exc:
        raise AcquisitionError(f"OpenCV is not available: {exc}") from exc

    k = int(cfg.morph_kernel)
    if k < 1 or k % 2 == 0:
        raise ValueError(f"morph_kernel must be a positive odd size, got {k}")

    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (k, k))
    logger.info("OpenCV %s ready (kernel %dx%d)", cv2.__version__, k, k)
    return VisionHandle(cv=cv2, kernel=kernel, version=cv2.__version__)
