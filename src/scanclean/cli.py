#!/usr/bin/env python
"""
Command-line interface for the Scan Cleaning Pipeline.

Usage:
    scanclean --input <pdf_image_folder_or_txt> --output <output_dir> [options]

Examples:
    # Process a PDF
    scanclean --input book.pdf --output ./output

    # Crop pages to their text region before OCR
    scanclean --input book.pdf --output ./output --crop --padding 8

    # Re-clean an earlier raw OCR dump without running OCR again
    scanclean --input output/book.ocr.txt --output ./output
"""

import sys
import argparse
import logging
import time
from pathlib import Path

from scanclean import __version__
from scanclean.config import LOG_FORMAT, get_config
from scanclean.exceptions import ScanCleanError

logger = logging.getLogger("scanclean")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Scan Cleaning Pipeline - Convert scanned documents to clean text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Process a PDF:
    scanclean --input book.pdf --output ./output

  Use pdfimages instead of rendering pages:
    scanclean --input book.pdf --output ./output --rasterizer pdfimages

  Skip grammar correction:
    scanclean --input ./scans --output ./output --no-correction
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF, image, folder of page images, or raw OCR .txt file"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated text files"
    )

    # Optional arguments
    parser.add_argument(
        "--rasterizer",
        choices=["pdf2image", "pdfimages"],
        default=None,
        help="PDF to image conversion method (default: pdf2image)"
    )

    parser.add_argument(
        "--dpi",
        type=int,
        default=None,
        help="DPI for pdf2image rendering (default: 300)"
    )

    parser.add_argument(
        "--work-dir",
        default=None,
        help="Directory for page images extracted from a PDF, emptied of images first "
             "(default: <output>/pages)"
    )

    parser.add_argument(
        "--workers", "-j",
        type=int,
        default=None,
        help="Number of pages processed in parallel (default: CPU count)"
    )

    parser.add_argument(
        "--min-edges",
        type=int,
        default=None,
        help="Pages need more edge pixels than this to be OCR'd (default: 50000)"
    )

    parser.add_argument(
        "--crop",
        action="store_true",
        help="Crop each page to its detected text region before OCR"
    )

    parser.add_argument(
        "--padding",
        type=int,
        default=0,
        help="Pixels of margin kept around the cropped text region (default: 0)"
    )

    parser.add_argument(
        "--ocr-lang",
        default=None,
        help="Tesseract language code (default: eng)"
    )

    parser.add_argument(
        "--grammar-lang",
        default=None,
        help="Grammar rule language code (default: en)"
    )

    parser.add_argument(
        "--no-correction",
        action="store_true",
        help="Disable rule-based grammar correction"
    )

    parser.add_argument(
        "--strip-non-alphabetic",
        action="store_true",
        help="Remove every character except letters, digits, whitespace and .,?!"
    )

    parser.add_argument(
        "--strip-chapters",
        action="store_true",
        help="Also remove 'CHAPTER <word>' running heads"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (re-raise errors with tracebacks)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_config(args):
    """Apply command-line overrides on top of the environment config."""
    config = get_config()

    if args.rasterizer:
        config.raster.method = args.rasterizer
    if args.dpi:
        config.raster.dpi = args.dpi
    if args.work_dir:
        config.work_dir = Path(args.work_dir)
    if args.workers:
        config.max_workers = args.workers
    if args.min_edges is not None:
        config.edges.min_edge_count = args.min_edges
    if args.crop:
        config.clusters.crop_to_text = True
    config.clusters.crop_padding = args.padding
    if args.ocr_lang:
        config.ocr.language = args.ocr_lang
    if args.grammar_lang:
        config.correction.language = args.grammar_lang
    if args.no_correction:
        config.correction.enabled = False
    if args.strip_non_alphabetic:
        config.cleaning.strip_non_alphabetic = True
    if args.strip_chapters:
        config.cleaning.strip_chapter_headings = True
    if args.debug:
        config.debug_mode = True

    # Re-run validation after overrides
    for section in (config.raster, config.edges, config.clusters, config):
        section.__post_init__()

    return config


def check_dependencies(needs_ocr: bool = True) -> bool:
    """Check if required dependencies are available."""
    missing = []
    optional_missing = []

    # Required
    try:
        import cv2
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import sklearn
    except ImportError:
        missing.append("scikit-learn")

    if needs_ocr:
        try:
            import pytesseract
            # Test if tesseract is actually installed
            try:
                pytesseract.get_tesseract_version()
            except Exception:
                missing.append("tesseract-ocr (system package)")
        except ImportError:
            missing.append("pytesseract")

    # PDF support
    try:
        import pdf2image
    except ImportError:
        optional_missing.append("pdf2image (for PDF support)")

    # Grammar correction
    try:
        import nlprule
    except ImportError:
        optional_missing.append("nlprule (for grammar correction)")

    # Report
    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    if optional_missing:
        logger.warning("Missing optional dependencies (some features may be limited):")
        for dep in optional_missing:
            logger.warning(f"  - {dep}")

    return True


def run_pipeline(args, config=None) -> int:
    """Run the scan cleaning pipeline."""
    from scanclean.utils.assembler import DocumentPipeline

    start_time = time.time()
    config = config or build_config(args)

    pipeline = DocumentPipeline(config=config)

    logger.info("Processing document...")
    try:
        result = pipeline.run(args.input, args.output)
    except ScanCleanError as e:
        logger.error(f"Processing failed at stage '{e.stage}': {e}")
        if config.debug_mode:
            raise
        return 1

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("SCAN CLEANING COMPLETE")
        print("=" * 60)
        print(f"Source: {args.input}")
        print(f"Output: {args.output}")
        if result.document is not None:
            doc = result.document
            print(f"Pages: {doc.total_pages} "
                  f"(text-bearing: {len(doc.pages)}, skipped: {len(doc.skipped_pages)})")
            failed = [p.page_index for p in doc.pages if p.status != "success"]
            if failed:
                print(f"Pages with OCR errors: {failed}")
        print(f"Processing time: {elapsed:.2f}s")
        print()
        print("Artifacts:")
        for name, path in result.artifacts.items():
            print(f"  {name}: {path}")
        print("=" * 60)

    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    # Check dependencies
    needs_ocr = not str(args.input).lower().endswith(".txt")
    if not check_dependencies(needs_ocr=needs_ocr):
        sys.exit(1)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    # Run pipeline
    try:
        exit_code = run_pipeline(args, config)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
