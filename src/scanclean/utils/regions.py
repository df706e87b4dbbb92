"""
Density clustering of edge points into text regions.

Provides:
- Edge point extraction from an edge map
- DBSCAN clustering (scikit-learn) of the points
- Per-cluster bounding boxes
- The text region used to crop a page before OCR
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box with inclusive pixel extents."""
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_tuple(self) -> Tuple[int, int, int, int]:
        return (self.min_x, self.max_x, self.min_y, self.max_y)

    @classmethod
    def from_points(cls, points: np.ndarray) -> 'BoundingBox':
        """Smallest box containing an (N, 2) array of (x, y) points."""
        xs = points[:, 0]
        ys = points[:, 1]
        return cls(int(xs.min()), int(xs.max()), int(ys.min()), int(ys.max()))

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min(self.min_x, other.min_x),
            max(self.max_x, other.max_x),
            min(self.min_y, other.min_y),
            max(self.max_y, other.max_y)
        )


@dataclass
class Cluster:
    """Edge points sharing a DBSCAN label."""
    label: int
    points: np.ndarray  # (N, 2) of (x, y)
    core_count: int
    bbox: BoundingBox

    @property
    def size(self) -> int:
        return int(len(self.points))

    def to_dict(self):
        return {
            "label": self.label,
            "size": self.size,
            "core_count": self.core_count,
            "bbox": self.bbox.to_tuple()
        }


# ============================================================================
# Clustering
# ============================================================================

def edge_points(edge_map: np.ndarray) -> np.ndarray:
    """
    Collect the (x, y) coordinates of set pixels, row by row.
    """
    ys, xs = np.nonzero(edge_map)
    return np.column_stack((xs, ys)).astype(np.int64)


class RegionClusterer:
    """
    Groups edge points into spatial clusters.

    Uses DBSCAN: a point with at least ``min_points`` points (itself
    included) within ``eps`` pixels is a core point; points reachable from
    a core point join its cluster; everything else is noise.
    """

    def __init__(self, eps: float = 10.0, min_points: int = 5):
        self.eps = eps
        self.min_points = min_points

    @classmethod
    def from_config(cls, config) -> 'RegionClusterer':
        return cls(eps=config.eps, min_points=config.min_points)

    def cluster_points(self, points: np.ndarray) -> List[Cluster]:
        """Cluster an (N, 2) array of points."""
        if len(points) == 0:
            return []

        from sklearn.cluster import DBSCAN

        model = DBSCAN(eps=self.eps, min_samples=self.min_points, metric="euclidean")
        labels = model.fit_predict(points.astype(np.float64))

        is_core = np.zeros(len(points), dtype=bool)
        is_core[model.core_sample_indices_] = True

        clusters = []
        for label in np.unique(labels):
            if label < 0:
                continue  # noise
            mask = labels == label
            members = points[mask]
            clusters.append(Cluster(
                label=int(label),
                points=members,
                core_count=int(is_core[mask].sum()),
                bbox=BoundingBox.from_points(members)
            ))

        noise = int((labels < 0).sum())
        logger.debug(f"DBSCAN: {len(clusters)} clusters, {noise} noise points")
        return clusters

    def cluster(self, edge_map: np.ndarray) -> List[Cluster]:
        """Cluster the set pixels of an edge map."""
        clusters = self.cluster_points(edge_points(edge_map))
        for c in clusters:
            logger.debug(
                f"Cluster {c.label}; Bounding box: x: {c.bbox.min_x} - {c.bbox.max_x}, "
                f"y: {c.bbox.min_y} - {c.bbox.max_y}"
            )
        return clusters


def text_region(clusters: List[Cluster]) -> Optional[BoundingBox]:
    """
    Box covering every cluster, or None when there are no clusters.
    """
    if not clusters:
        return None
    region = clusters[0].bbox
    for c in clusters[1:]:
        region = region.union(c.bbox)
    return region
