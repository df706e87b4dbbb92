"""
Page image model and basic image helpers.

Provides:
- PageImage, the immutable grayscale page handed between stages
- Grayscale conversion
- Region cropping
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True, eq=False)
class PageImage:
    """A single rasterized page in grayscale."""
    pixels: np.ndarray
    page_index: int
    source: str = ""

    def __post_init__(self):
        if self.pixels.ndim != 2:
            raise ValueError(
                f"PageImage expects a 2-D grayscale buffer, got shape {self.pixels.shape}"
            )
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}")
        if not self.source:
            object.__setattr__(self, "source", f"page-{self.page_index:04d}")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @classmethod
    def from_array(
        cls,
        image: np.ndarray,
        page_index: int,
        source: str = ""
    ) -> 'PageImage':
        """Build a page from a BGR, BGRA or grayscale array."""
        return cls(pixels=to_grayscale(image), page_index=page_index, source=source)


# ============================================================================
# Core Functions
# ============================================================================

def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale if it's color.

    Args:
        image: Input image (BGR or grayscale)

    Returns:
        Grayscale image
    """
    import cv2

    if len(image.shape) == 2:
        return image
    elif len(image.shape) == 3:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.shape[2] == 1:
            return image.squeeze(axis=2)

    raise ValueError(f"Unexpected image shape: {image.shape}")


def crop_region(
    image: np.ndarray,
    box: Tuple[int, int, int, int],
    padding: int = 0
) -> np.ndarray:
    """
    Crop an inclusive (min_x, max_x, min_y, max_y) box out of an image.

    Padding grows the box on every side and is clamped to the image.
    """
    min_x, max_x, min_y, max_y = box
    h, w = image.shape[:2]

    x1 = max(0, min_x - padding)
    y1 = max(0, min_y - padding)
    x2 = min(w, max_x + padding + 1)
    y2 = min(h, max_y + padding + 1)

    if x2 <= x1 or y2 <= y1:
        logger.debug(f"Empty crop box {box}, keeping full image")
        return image

    return image[y1:y2, x1:x2]


def blank_page(width: int, height: int, value: int = 255) -> np.ndarray:
    """Create a uniform grayscale page."""
    return np.full((height, width), value, dtype=np.uint8)


def describe(image: np.ndarray) -> Optional[str]:
    """Short shape/dtype summary for debug logs."""
    if image is None:
        return None
    return f"{image.shape[1]}x{image.shape[0]} {image.dtype}"
