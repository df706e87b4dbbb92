"""
Document assembler module for the scan cleaning pipeline.

Provides:
- Document data model (PageResult, Document)
- PageOrchestrator, the parallel classify + OCR fan-out
- DocumentPipeline, which runs rasterize -> OCR -> clean -> correct and
  writes every intermediate text artifact
"""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..config import PipelineConfig, default_worker_count
from ..exceptions import PageDecodeError, ScanCleanError, RasterizationError, UnsupportedInputError
from .cleaner import TextCleaner
from .correction import CorrectionAdapter
from .edges import EdgeClassifier
from .images import PageImage, crop_region
from .io import (
    detect_input_type, ensure_dir, list_page_files, load_page, load_text,
    save_json, save_text,
)
from .regions import RegionClusterer, text_region

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PageResult:
    """OCR output for one text-bearing page."""
    page_index: int
    text: str
    edge_count: int = 0
    status: str = "success"  # success, ocr_failed, classification_failed
    crop_box: Optional[Tuple[int, int, int, int]] = None

    def to_dict(self) -> Dict:
        return {
            "page_index": self.page_index,
            "status": self.status,
            "edge_count": self.edge_count,
            "crop_box": self.crop_box,
            "chars": len(self.text)
        }


@dataclass
class Document:
    """OCR results of a document, ordered by page index."""
    pages: List[PageResult] = field(default_factory=list)
    total_pages: int = 0
    source_file: str = ""
    task_id: str = ""
    created_at: str = ""

    def __post_init__(self):
        self.pages = sorted(self.pages, key=lambda p: p.page_index)
        indices = self.page_indices
        if len(set(indices)) != len(indices):
            raise ValueError(f"Duplicate page indices in document: {indices}")
        if not self.task_id:
            self.task_id = str(uuid.uuid4())
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    @property
    def page_indices(self) -> List[int]:
        return [p.page_index for p in self.pages]

    @property
    def skipped_pages(self) -> List[int]:
        """Pages that were not text-bearing."""
        kept = set(self.page_indices)
        return [i for i in range(self.total_pages) if i not in kept]

    @property
    def text(self) -> str:
        # Page boundaries are not marked
        return "".join(p.text for p in self.pages)

    def to_dict(self) -> Dict:
        return {
            "task_id": self.task_id,
            "source_file": self.source_file,
            "created_at": self.created_at,
            "total_pages": self.total_pages,
            "skipped_pages": self.skipped_pages,
            "pages": [p.to_dict() for p in self.pages]
        }


@dataclass
class PipelineResult:
    """Texts and artifact paths produced by one pipeline run."""
    raw_text: str
    cleaned_text: str
    final_text: str
    artifacts: Dict[str, Path] = field(default_factory=dict)
    document: Optional[Document] = None
    processing_time_seconds: float = 0.0


# ============================================================================
# Page Orchestrator
# ============================================================================

class PageOrchestrator:
    """
    Classifies and OCRs pages concurrently, then restores page order.

    Each page is an independent task. Pages below the edge threshold are
    left out of the document; OCR errors become empty text for that page.
    An undecodable page aborts the whole batch.
    """

    def __init__(
        self,
        ocr_engine,
        classifier: Optional[EdgeClassifier] = None,
        clusterer: Optional[RegionClusterer] = None,
        language: str = "eng",
        crop_to_text: bool = False,
        crop_padding: int = 0,
        max_workers: Optional[int] = None
    ):
        self.ocr_engine = ocr_engine
        self.classifier = classifier or EdgeClassifier()
        self.clusterer = clusterer or RegionClusterer()
        self.language = language
        self.crop_to_text = crop_to_text
        self.crop_padding = crop_padding
        self.max_workers = max_workers or default_worker_count()

    @classmethod
    def from_config(cls, config: PipelineConfig, ocr_engine) -> 'PageOrchestrator':
        return cls(
            ocr_engine=ocr_engine,
            classifier=EdgeClassifier.from_config(config.edges),
            clusterer=RegionClusterer.from_config(config.clusters),
            language=config.ocr.language,
            crop_to_text=config.clusters.crop_to_text,
            crop_padding=config.clusters.crop_padding,
            max_workers=config.max_workers
        )

    def process(self, pages: Sequence[PageImage], source_file: str = "") -> Document:
        """OCR already decoded pages."""
        indices = [p.page_index for p in pages]
        if len(set(indices)) != len(indices):
            raise ValueError(f"Duplicate page indices: {indices}")

        jobs = [(p.page_index, self.process_page, p) for p in pages]
        results = self._run(jobs)
        total = max(indices) + 1 if indices else 0
        return Document(pages=results, total_pages=total, source_file=source_file)

    def process_paths(
        self,
        paths: Sequence[Union[str, Path]],
        source_file: str = ""
    ) -> Document:
        """Decode and OCR page files; page index is the position in ``paths``."""
        jobs = [(i, self._process_path, (path, i)) for i, path in enumerate(paths)]
        results = self._run(jobs)
        return Document(pages=results, total_pages=len(paths), source_file=source_file)

    def _process_path(self, job: Tuple[Union[str, Path], int]) -> Optional[PageResult]:
        path, index = job
        return self.process_page(load_page(path, index))

    def process_page(self, page: PageImage) -> Optional[PageResult]:
        """Classify and OCR one page; None if it is not text-bearing."""
        try:
            edges, edge_count = self.classifier.measure(page)
        except PageDecodeError:
            raise
        except Exception as e:
            logger.warning(f"Classification failed for {page.source}: {e}")
            return PageResult(page.page_index, "", status="classification_failed")

        if edges is None:
            return None

        region = page.pixels
        crop_box = None
        if self.crop_to_text:
            region, crop_box = self._crop(page, edges)

        try:
            text = self.ocr_engine.recognize(region, self.language)
        except Exception as e:
            logger.warning(f"OCR failed for {page.source}: {e}")
            return PageResult(
                page.page_index, "", edge_count=edge_count,
                status="ocr_failed", crop_box=crop_box
            )

        return PageResult(page.page_index, text or "", edge_count=edge_count, crop_box=crop_box)

    def _crop(self, page: PageImage, edges):
        try:
            box = text_region(self.clusterer.cluster(edges))
        except Exception as e:
            logger.warning(f"Clustering failed for {page.source}, using full page: {e}")
            return page.pixels, None

        if box is None:
            return page.pixels, None

        logger.debug(f"{page.source}: cropping to {box.to_tuple()}")
        return crop_region(page.pixels, box.to_tuple(), self.crop_padding), box.to_tuple()

    def _run(self, jobs: Sequence[Tuple[int, Callable, object]]) -> List[PageResult]:
        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_page = {
                executor.submit(fn, arg): index for index, fn, arg in jobs
            }
            try:
                for future in as_completed(future_to_page):
                    result = future.result()
                    if result is not None:
                        results.append(result)
            except Exception:
                for future in future_to_page:
                    future.cancel()
                raise

        results.sort(key=lambda r: r.page_index)
        return results


# ============================================================================
# Document Pipeline
# ============================================================================

class DocumentPipeline:
    """
    Runs the full scan-to-text pipeline.

    Coordinates:
    - Rasterization (PDF input only)
    - Page classification and OCR
    - Text cleaning
    - Grammar correction
    - Writing the raw, cleaned and final texts plus a page manifest
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        ocr_engine=None,
        rasterizer=None,
        correction_engine=None,
        cleaner: Optional[TextCleaner] = None
    ):
        self.config = config or PipelineConfig()

        # Initialize components lazily
        self._ocr_engine = ocr_engine
        self._rasterizer = rasterizer
        self._cleaner = cleaner
        self._corrector = CorrectionAdapter.from_config(
            self.config.correction, engine=correction_engine
        )

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            from .ocr_text import create_engine
            try:
                self._ocr_engine = create_engine(
                    self.config.ocr.engine,
                    language=self.config.ocr.language,
                    config=self.config.ocr.tesseract_config
                )
            except ImportError as e:
                raise ScanCleanError(str(e), stage="ocr")
        return self._ocr_engine

    @property
    def rasterizer(self):
        if self._rasterizer is None:
            from .rasterize import create_rasterizer
            self._rasterizer = create_rasterizer(self.config.raster)
        return self._rasterizer

    @property
    def cleaner(self) -> TextCleaner:
        if self._cleaner is None:
            self._cleaner = TextCleaner(config=self.config.cleaning)
        return self._cleaner

    @property
    def corrector(self) -> CorrectionAdapter:
        return self._corrector

    def artifact_paths(self, output_dir: Path, stem: str) -> Dict[str, Path]:
        return {
            "raw": output_dir / f"{stem}.ocr.txt",
            "cleaned": output_dir / f"{stem}.clean.txt",
            "final": output_dir / f"{stem}.txt",
            "manifest": output_dir / f"{stem}.pages.json",
        }

    def run(
        self,
        input_path: Union[str, Path],
        output_dir: Union[str, Path]
    ) -> PipelineResult:
        """
        Process a PDF, image, image folder or raw OCR text file.

        Args:
            input_path: Source document
            output_dir: Directory receiving the text artifacts

        Returns:
            PipelineResult with all three texts

        Raises:
            ScanCleanError: On any fatal stage failure
        """
        start_time = time.time()
        input_path = Path(input_path)
        output_dir = ensure_dir(output_dir)
        input_type = detect_input_type(input_path)
        logger.info(f"Input type detected: {input_type}")

        if input_type == "text":
            stem = input_path.stem
            if stem.endswith(".ocr"):
                stem = stem[:-len(".ocr")]
            paths = self.artifact_paths(output_dir, stem)
            if paths["final"].resolve() == input_path.resolve():
                raise ScanCleanError(
                    f"Output {paths['final']} would overwrite the input", stage="output"
                )
            result = self.finish(load_text(input_path), output_dir, stem)
            result.processing_time_seconds = time.time() - start_time
            return result

        page_files = self.collect_pages(input_path, input_type, output_dir)

        start = time.time()
        logger.info("OCRing pages...")
        orchestrator = PageOrchestrator.from_config(self.config, self.ocr_engine)
        document = orchestrator.process_paths(page_files, source_file=str(input_path))
        logger.info(
            f"Done OCRing pages in {time.time() - start:.2f}s "
            f"({len(document.pages)}/{document.total_pages} text-bearing)."
        )

        result = self.finish(document.text, output_dir, input_path.stem, document)
        result.processing_time_seconds = time.time() - start_time
        return result

    def collect_pages(
        self,
        input_path: Path,
        input_type: str,
        output_dir: Path
    ) -> List[Path]:
        """Page image files for the input, in page order."""
        if input_type == "pdf":
            pages_dir = Path(self.config.work_dir) if self.config.work_dir else output_dir / "pages"
            start = time.time()
            logger.info("Converting PDF to page images...")
            page_files = self.rasterizer.rasterize(input_path, pages_dir)
            logger.info(f"Done converting PDF in {time.time() - start:.2f}s.")
            if not page_files:
                raise RasterizationError(f"No page images produced from {input_path}")
        elif input_type == "image":
            page_files = [input_path]
        elif input_type == "image_folder":
            page_files = list_page_files(input_path)
        else:
            raise UnsupportedInputError(f"Unsupported input type for {input_path}")

        logger.info(f"Loaded {len(page_files)} page(s)")
        return page_files

    def finish(
        self,
        raw_text: str,
        output_dir: Path,
        stem: str,
        document: Optional[Document] = None
    ) -> PipelineResult:
        """Clean and correct raw OCR text, writing every stage's output."""
        paths = self.artifact_paths(output_dir, stem)
        artifacts = {}

        artifacts["raw"] = save_text(raw_text, paths["raw"])

        logger.info("Cleaning text...")
        cleaned = self.cleaner.clean(raw_text)
        logger.info("Done cleaning text.")
        artifacts["cleaned"] = save_text(cleaned, paths["cleaned"])

        start = time.time()
        logger.info("Applying grammar rules...")
        final = self.corrector.correct(cleaned)
        logger.info(f"Done applying grammar rules in {time.time() - start:.2f}s.")
        artifacts["final"] = save_text(final, paths["final"])

        if document is not None:
            artifacts["manifest"] = save_json(document.to_dict(), paths["manifest"])

        return PipelineResult(
            raw_text=raw_text,
            cleaned_text=cleaned,
            final_text=final,
            artifacts=artifacts,
            document=document
        )
