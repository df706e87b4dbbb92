"""
Exception classes for the scan cleaning pipeline.

All pipeline exceptions inherit from ScanCleanError, which records the
stage that failed so the CLI can report it.

Recoverable problems (OCR failure on one page, a grammar engine that
cannot be loaded) are logged and never raised as these exceptions.
"""

from typing import Optional


class ScanCleanError(Exception):
    """Base exception for fatal pipeline errors."""

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        if stage is not None:
            self.stage = stage
        super().__init__(f"[{self.stage}] {message}")


class RasterizationError(ScanCleanError):
    """Raised when the source document could not be turned into page images."""

    stage = "rasterize"


class PageDecodeError(ScanCleanError):
    """
    Raised when a page image cannot be decoded.

    Aborts the whole run, since the page order would otherwise shift.
    """

    stage = "classify"


class UnsupportedInputError(ScanCleanError):
    """Raised when the input path is not a PDF, image, image folder or text file."""

    stage = "input"
