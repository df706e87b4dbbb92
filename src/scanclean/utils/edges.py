"""
Edge-density page classification.

A page is worth sending to OCR when its Canny edge map has more set
pixels than a fixed threshold. Blank pages, scanner covers and
near-empty separators fall below it and are skipped.
"""

import logging
from typing import Optional, Tuple
import numpy as np

from .images import PageImage, to_grayscale

logger = logging.getLogger(__name__)


def detect_edges(
    gray: np.ndarray,
    low_threshold: float = 50.0,
    high_threshold: float = 100.0,
    blur_sigma: float = 1.4
) -> np.ndarray:
    """
    Compute a binary (0/255) Canny edge map.

    The image is smoothed with a Gaussian of ``blur_sigma`` before edge
    detection and the L2 gradient magnitude is used for hysteresis.

    Args:
        gray: Single channel uint8 image
        low_threshold: Lower hysteresis threshold
        high_threshold: Upper hysteresis threshold
        blur_sigma: Gaussian sigma, 0 disables smoothing

    Returns:
        uint8 edge map with the same shape as ``gray``
    """
    import cv2

    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    if blur_sigma > 0:
        gray = cv2.GaussianBlur(gray, (0, 0), blur_sigma)

    return cv2.Canny(gray, low_threshold, high_threshold, L2gradient=True)


def count_edges(edge_map: np.ndarray) -> int:
    """Number of set pixels in an edge map."""
    return int(np.count_nonzero(edge_map))


class EdgeClassifier:
    """
    Decides whether a page carries enough structure to OCR.

    Example:
        >>> classifier = EdgeClassifier()
        >>> edge_map = classifier.classify(page)
        >>> if edge_map is not None:
        ...     text = ocr(page)
    """

    def __init__(
        self,
        low_threshold: float = 50.0,
        high_threshold: float = 100.0,
        blur_sigma: float = 1.4,
        min_edge_count: int = 50_000
    ):
        self.low_threshold = low_threshold
        self.high_threshold = high_threshold
        self.blur_sigma = blur_sigma
        self.min_edge_count = min_edge_count

    @classmethod
    def from_config(cls, config) -> 'EdgeClassifier':
        return cls(
            low_threshold=config.low_threshold,
            high_threshold=config.high_threshold,
            blur_sigma=config.blur_sigma,
            min_edge_count=config.min_edge_count
        )

    def is_text_bearing(self, edge_count: int) -> bool:
        return edge_count > self.min_edge_count

    def edge_map(self, page: PageImage) -> np.ndarray:
        gray = to_grayscale(page.pixels)
        return detect_edges(
            gray,
            low_threshold=self.low_threshold,
            high_threshold=self.high_threshold,
            blur_sigma=self.blur_sigma
        )

    def classify(self, page: PageImage) -> Optional[np.ndarray]:
        """
        Return the page's edge map if it is text-bearing, otherwise None.
        """
        edges, _ = self.measure(page)
        return edges

    def measure(self, page: PageImage) -> Tuple[Optional[np.ndarray], int]:
        """Like classify, but also returns the edge count."""
        edges = self.edge_map(page)
        edge_count = count_edges(edges)

        logger.info(f"{page.source}: {edge_count}")

        if self.is_text_bearing(edge_count):
            return edges, edge_count
        return None, edge_count
