"""
PDF rasterization into page image files.

Two rasterizers share one interface, ``rasterize(pdf_path, output_dir)``,
returning the page files of this document in page order. Page images
left in ``output_dir`` by an earlier run are deleted first:

- Pdf2ImageRasterizer renders each page with poppler through pdf2image
  (one image per page, slower)
- PdfImagesRasterizer extracts the embedded scans with ``pdfimages``
  (fast, but some PDFs store several images per page)
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Union

from ..exceptions import RasterizationError
from .io import clear_page_files, ensure_dir, list_page_files

logger = logging.getLogger(__name__)


class Pdf2ImageRasterizer:
    """Render PDF pages to PNG with pdf2image (poppler backend)."""

    def __init__(self, dpi: int = 300, thread_count: int = 4):
        self.dpi = dpi
        self.thread_count = thread_count

    def rasterize(
        self,
        pdf_path: Union[str, Path],
        output_dir: Union[str, Path]
    ) -> List[Path]:
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise RasterizationError(f"PDF file not found: {pdf_path}")

        try:
            from pdf2image import convert_from_path
            from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError
        except ImportError:
            raise ImportError(
                "pdf2image is required. Install with: pip install pdf2image\n"
                "Also ensure poppler is installed on your system."
            )

        output_dir = ensure_dir(output_dir)
        clear_page_files(output_dir)
        logger.info(f"Converting PDF to images: {pdf_path} at {self.dpi} DPI")

        try:
            pil_images = convert_from_path(
                pdf_path,
                dpi=self.dpi,
                fmt='png',
                thread_count=self.thread_count
            )
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise RasterizationError(f"Failed to parse PDF: {e}")
        except Exception as e:
            if "poppler" in str(e).lower():
                raise RasterizationError(
                    "Poppler is not installed. Install with:\n"
                    "  macOS: brew install poppler\n"
                    "  Linux: sudo apt-get install poppler-utils"
                )
            raise RasterizationError(f"PDF conversion failed: {e}")

        page_files = []
        for i, pil_img in enumerate(pil_images):
            page_path = output_dir / f"page-{i:04d}.png"
            pil_img.save(page_path)
            page_files.append(page_path)

        logger.info(f"Converted {len(page_files)} pages from PDF")
        return page_files


class PdfImagesRasterizer:
    """Extract page scans with poppler's ``pdfimages`` tool."""

    def __init__(self, executable: str = "pdfimages", image_format: str = "png"):
        self.executable = executable
        self.image_format = image_format

    def command(self, pdf_path: Path, output_dir: Path) -> List[str]:
        cmd = [self.executable]
        if self.image_format:
            cmd.append(f"-{self.image_format}")
        cmd += [str(pdf_path), str(output_dir / "page")]
        return cmd

    def rasterize(
        self,
        pdf_path: Union[str, Path],
        output_dir: Union[str, Path]
    ) -> List[Path]:
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise RasterizationError(f"PDF file not found: {pdf_path}")

        output_dir = ensure_dir(output_dir)
        clear_page_files(output_dir)
        cmd = self.command(pdf_path, output_dir)
        logger.info(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise RasterizationError(f"Could not run {self.executable}: {e}")

        if result.returncode != 0:
            raise RasterizationError(
                f"{self.executable} exited with status {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        logger.info("PDF conversion successful.")
        return list_page_files(output_dir)


def create_rasterizer(config) -> Union[Pdf2ImageRasterizer, PdfImagesRasterizer]:
    """Build the rasterizer selected by a RasterConfig."""
    if config.method == "pdfimages":
        return PdfImagesRasterizer(executable=config.pdfimages_path)
    return Pdf2ImageRasterizer(dpi=config.dpi)
