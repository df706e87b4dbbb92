"""
Utility modules for the scan cleaning pipeline.
"""

from .io import load_page, list_page_files, save_json, save_text, ensure_dir
from .images import PageImage, to_grayscale, crop_region
from .edges import EdgeClassifier, detect_edges, count_edges
from .regions import RegionClusterer, Cluster, BoundingBox, text_region
from .cleaner import TextCleaner, CleaningStage, build_stages
from .correction import CorrectionAdapter, Suggestion, apply_suggestions
from .rasterize import Pdf2ImageRasterizer, PdfImagesRasterizer
from .ocr_text import TesseractEngine
from .assembler import PageOrchestrator, DocumentPipeline, Document, PageResult

__all__ = [
    # IO
    "load_page", "list_page_files", "save_json", "save_text", "ensure_dir",
    # Images
    "PageImage", "to_grayscale", "crop_region",
    # Classification
    "EdgeClassifier", "detect_edges", "count_edges",
    # Regions
    "RegionClusterer", "Cluster", "BoundingBox", "text_region",
    # Cleaning
    "TextCleaner", "CleaningStage", "build_stages",
    # Correction
    "CorrectionAdapter", "Suggestion", "apply_suggestions",
    # External collaborators
    "Pdf2ImageRasterizer", "PdfImagesRasterizer", "TesseractEngine",
    # Assembly
    "PageOrchestrator", "DocumentPipeline", "Document", "PageResult",
]
