"""
I/O utilities for the scan cleaning pipeline.

Handles:
- Page image discovery and decoding
- Text artifact reading/writing
- JSON serialization
- Directory management
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Union, Any
from dataclasses import asdict

import numpy as np

from ..exceptions import PageDecodeError
from .images import PageImage, describe

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.tiff', '.tif', '.bmp', '.ppm', '.pgm', '.pbm')
TEXT_EXTENSIONS = ('.txt',)

DIGIT_RUN_PATTERN = re.compile(r'(\d+)')


# ============================================================================
# Page Loading
# ============================================================================

def load_page(
    image_path: Union[str, Path],
    page_index: int
) -> PageImage:
    """
    Load a page image from file as grayscale.

    Args:
        image_path: Path to the image file
        page_index: 0-based position of the page in the document

    Returns:
        PageImage for the file

    Raises:
        PageDecodeError: If the file is missing or cannot be decoded
    """
    import cv2

    image_path = Path(image_path)
    if not image_path.exists():
        raise PageDecodeError(f"Image file not found: {image_path}")

    img = cv2.imread(str(image_path), cv2.IMREAD_GRAYSCALE)

    if img is None:
        raise PageDecodeError(f"Could not decode image: {image_path}")

    logger.debug(f"Loaded page {page_index}: {image_path}, {describe(img)}")
    return PageImage(pixels=img, page_index=page_index, source=str(image_path))


def page_sort_key(path: Path) -> tuple:
    """
    Sort key comparing digit runs in a file name as integers.

    "page-999.png" < "page-1000.png", whatever the zero padding.
    """
    return tuple(
        (0, int(part), part) if part.isdigit() else (1, 0, part)
        for part in DIGIT_RUN_PATTERN.split(path.name)
        if part
    )


def list_page_files(
    folder_path: Union[str, Path],
    extensions: tuple = IMAGE_EXTENSIONS
) -> List[Path]:
    """
    List page images in a folder, in page order.

    Numbers in the file names are compared numerically, so
    "page-1000.png" follows "page-999.png".
    """
    folder_path = Path(folder_path)
    if not folder_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {folder_path}")

    image_files = sorted(
        (
            f for f in folder_path.iterdir()
            if f.is_file() and f.suffix.lower() in extensions
        ),
        key=page_sort_key
    )

    logger.info(f"Found {len(image_files)} page images in {folder_path}")
    return image_files


def clear_page_files(
    folder_path: Union[str, Path],
    extensions: tuple = IMAGE_EXTENSIONS
) -> int:
    """
    Delete the page images left in a folder by an earlier run.

    Only files with an image extension are removed.

    Returns:
        Number of files deleted
    """
    folder_path = Path(folder_path)
    if not folder_path.is_dir():
        return 0

    removed = 0
    for f in folder_path.iterdir():
        if f.is_file() and f.suffix.lower() in extensions:
            f.unlink()
            removed += 1

    if removed:
        logger.info(f"Removed {removed} stale page images from {folder_path}")
    return removed


# ============================================================================
# Text Artifacts
# ============================================================================

def save_text(text: str, output_path: Union[str, Path]) -> Path:
    """Write a text artifact as UTF-8."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding='utf-8')
    logger.debug(f"Saved text: {output_path} ({len(text)} chars)")
    return output_path


def load_text(text_path: Union[str, Path]) -> str:
    """Read a UTF-8 text file."""
    text_path = Path(text_path)
    if not text_path.exists():
        raise FileNotFoundError(f"Text file not found: {text_path}")
    return text_path.read_text(encoding='utf-8')


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# File Type Detection
# ============================================================================

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of input file or directory.

    Args:
        input_path: Path to file or directory

    Returns:
        One of: 'pdf', 'image', 'image_folder', 'text', 'unknown'
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        has_images = any(
            f.suffix.lower() in IMAGE_EXTENSIONS
            for f in input_path.iterdir()
        )
        return 'image_folder' if has_images else 'unknown'

    if not input_path.exists():
        return 'unknown'

    suffix = input_path.suffix.lower()
    if suffix == '.pdf':
        return 'pdf'
    elif suffix in IMAGE_EXTENSIONS:
        return 'image'
    elif suffix in TEXT_EXTENSIONS:
        return 'text'

    return 'unknown'
