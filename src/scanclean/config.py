"""
Configuration and constants for the scan cleaning pipeline.

This module provides:
- Logging format shared by the CLI
- Edge detection and clustering parameters
- Rasterization, OCR and grammar correction settings
- Environment overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
logger = logging.getLogger("scanclean")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class EdgeConfig:
    """Edge-density page classification."""
    low_threshold: float = 50.0
    high_threshold: float = 100.0
    blur_sigma: float = 1.4  # Gaussian pre-blur, 0 disables
    min_edge_count: int = 50_000  # Page is text-bearing when count > this

    def __post_init__(self):
        if self.low_threshold < 0 or self.high_threshold < self.low_threshold:
            raise ValueError(
                f"Invalid Canny thresholds: low={self.low_threshold}, "
                f"high={self.high_threshold}"
            )
        if self.min_edge_count < 0:
            raise ValueError(f"min_edge_count must be >= 0, got {self.min_edge_count}")


@dataclass
class ClusterConfig:
    """Density clustering of edge points and optional cropping."""
    eps: float = 10.0  # Neighbourhood radius in pixels
    min_points: int = 5
    crop_to_text: bool = False
    crop_padding: int = 0

    def __post_init__(self):
        if self.eps <= 0:
            raise ValueError(f"eps must be > 0, got {self.eps}")
        if self.min_points < 1:
            raise ValueError(f"min_points must be >= 1, got {self.min_points}")
        if self.crop_padding < 0:
            raise ValueError(f"crop_padding must be >= 0, got {self.crop_padding}")


@dataclass
class RasterConfig:
    """PDF to page image conversion."""
    method: str = "pdf2image"  # pdf2image or pdfimages
    dpi: int = 300
    pdfimages_path: str = "pdfimages"

    def __post_init__(self):
        if self.method not in ("pdf2image", "pdfimages"):
            raise ValueError(
                f"method must be one of ('pdf2image', 'pdfimages'), got {self.method!r}"
            )


@dataclass
class OCRConfig:
    """OCR configuration."""
    engine: str = "tesseract"
    language: str = "eng"
    tesseract_config: str = "--psm 3"  # Fully automatic page segmentation


@dataclass
class CleaningConfig:
    """Optional stages of the text cleaner."""
    strip_chapter_headings: bool = False
    strip_non_alphabetic: bool = False


@dataclass
class CorrectionConfig:
    """Rule-based grammar correction."""
    enabled: bool = True
    language: str = "en"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    edges: EdgeConfig = field(default_factory=EdgeConfig)
    clusters: ClusterConfig = field(default_factory=ClusterConfig)
    raster: RasterConfig = field(default_factory=RasterConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    correction: CorrectionConfig = field(default_factory=CorrectionConfig)

    # Global settings
    max_workers: Optional[int] = None  # None = available CPUs
    work_dir: Optional[Path] = None  # None = <output>/pages
    debug_mode: bool = False

    def __post_init__(self):
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    workers = os.environ.get("SCANCLEAN_MAX_WORKERS")
    if workers:
        config.max_workers = int(workers)

    if os.environ.get("SCANCLEAN_CROP_TO_TEXT", "").lower() == "true":
        config.clusters.crop_to_text = True

    if os.environ.get("SCANCLEAN_OCR_LANG"):
        config.ocr.language = os.environ["SCANCLEAN_OCR_LANG"]

    if os.environ.get("SCANCLEAN_GRAMMAR_LANG"):
        config.correction.language = os.environ["SCANCLEAN_GRAMMAR_LANG"]

    if os.environ.get("SCANCLEAN_DEBUG", "").lower() == "true":
        config.debug_mode = True

    config.__post_init__()
    return config


def default_worker_count() -> int:
    """Number of workers used when max_workers is not set."""
    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:
        return os.cpu_count() or 1
