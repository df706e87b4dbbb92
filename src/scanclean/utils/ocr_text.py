"""
Text OCR for page images.

Any object with ``recognize(image, language) -> str`` can be used as an
OCR engine by the page orchestrator. Errors raised by an engine are
caught per page and turned into empty text.
"""

import logging
from typing import Optional, Union
from pathlib import Path
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractEngine:
    """OCR using Tesseract."""

    def __init__(
        self,
        language: str = "eng",
        config: str = "--psm 3"
    ):
        try:
            import pytesseract
            self.pytesseract = pytesseract

            # Test that tesseract is installed
            pytesseract.get_tesseract_version()

        except Exception as e:
            raise ImportError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract: https://github.com/tesseract-ocr/tesseract"
            )

        self.language = language
        self.config = config

    def recognize(
        self,
        image: Union[np.ndarray, str, Path],
        language: Optional[str] = None
    ) -> str:
        """
        Recognize the text of a whole page or page region.

        Args:
            image: Grayscale/BGR array, or path to an image file
            language: Tesseract language code, defaults to the engine's

        Returns:
            Recognized text, lines separated by newlines
        """
        if isinstance(image, Path):
            image = str(image)
        elif isinstance(image, np.ndarray):
            logger.debug(f"Running tesseract on {image.shape[1]}x{image.shape[0]} image")

        return self.pytesseract.image_to_string(
            image,
            lang=language or self.language,
            config=self.config
        )


def create_engine(engine_name: str = "tesseract", language: str = "eng", config: str = "--psm 3"):
    """Create an OCR engine instance."""
    if engine_name == "tesseract":
        return TesseractEngine(language=language, config=config)
    raise ValueError(f"Unknown OCR engine: {engine_name}")
