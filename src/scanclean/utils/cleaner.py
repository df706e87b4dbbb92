"""
Text cleaning for raw OCR output.

Provides:
- One pure function per cleaning stage
- CleaningStage, a named wrapper used to build ordered pipelines
- TextCleaner, which applies the stages in sequence

Stage order matters: hyphenated line breaks must be joined before single
newlines are turned into spaces, and line trimming must run before the
repetition pass so indentation does not count as a run.
"""

import logging
import re
from dataclasses import dataclass
from itertools import groupby
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


# ============================================================================
# Patterns
# ============================================================================

SCAN_ARTIFACT_PATTERN = re.compile(r'[\[?{}!\]]|\.\.\.|::')
PAGE_NUMBER_PATTERN = re.compile(r'\A\d+\s*|\s*\d+\Z')
SPLIT_WORD_PATTERN = re.compile(r'-\n')
PAGE_HEADER_PATTERN = re.compile(r'Page \d+')
CHAPTER_HEADER_PATTERN = re.compile(r'CHAPTER \w+|Page \d+')
SINGLE_NEWLINE_PATTERN = re.compile(r'(?<!\n)\n(?!\n)')
NON_ALPHABETIC_PATTERN = re.compile(r'[^a-zA-Z0-9\s.,?!]')

MIN_REPEAT_RUN = 4


# ============================================================================
# Stage Functions
# ============================================================================

def remove_scan_artifacts(text: str) -> str:
    """Strip bracket/brace/punctuation noise, ellipses and double colons."""
    return SCAN_ARTIFACT_PATTERN.sub('', text)


def remove_page_numbers(text: str) -> str:
    """
    Strip a page number at the very start or very end of the text.

    Example: "12\\nChapter text 13" -> "Chapter text"
    """
    return PAGE_NUMBER_PATTERN.sub('', text)


def combine_split_words(text: str) -> str:
    """
    Join words hyphenated across a line break.

    Example: "exam-\\nple" -> "example"
    """
    return SPLIT_WORD_PATTERN.sub('', text)


def remove_headers_and_footers(text: str) -> str:
    """Strip running "Page N" headers and footers."""
    return PAGE_HEADER_PATTERN.sub('', text)


def remove_headers_footers_and_chapters(text: str) -> str:
    """Strip "Page N" and "CHAPTER <word>" running heads."""
    return CHAPTER_HEADER_PATTERN.sub('', text)


def normalize_newlines_preserve_paragraphs(text: str) -> str:
    """
    Turn lone newlines into spaces, keep blank-line paragraph breaks.

    Example: "line one\\nline two" -> "line one line two"
    """
    return SINGLE_NEWLINE_PATTERN.sub(' ', text)


def trim_lines(text: str) -> str:
    """Strip whitespace around every line."""
    lines = text.split('\n')
    if lines and lines[-1] == '' and len(lines) > 1:
        # A trailing newline ends the last line, it does not start a new one
        lines.pop()
    return '\n'.join(line.strip() for line in lines)


def remove_non_alphabetic(text: str) -> str:
    """Keep only ASCII letters, digits, whitespace and . , ? !"""
    return NON_ALPHABETIC_PATTERN.sub('', text)


def remove_repetitive_patterns_preserving_paragraphs(text: str) -> str:
    """
    Drop runs of 4 or more identical characters (dot leaders, rules).

    Newlines are never dropped, whatever the run length.

    Example: "Contents----1" -> "Contents1"
    """
    parts = []
    for char, run in groupby(text):
        count = sum(1 for _ in run)
        if char == '\n' or count < MIN_REPEAT_RUN:
            parts.append(char * count)
    return ''.join(parts)


# ============================================================================
# Pipeline
# ============================================================================

@dataclass(frozen=True)
class CleaningStage:
    """A named text -> text transform."""
    name: str
    func: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.func(text)


def build_stages(config=None) -> List[CleaningStage]:
    """
    Build the ordered stage list.

    Args:
        config: Optional CleaningConfig toggling the chapter-heading and
            non-alphabetic stages

    Returns:
        Stages in application order
    """
    strip_chapters = bool(config and config.strip_chapter_headings)
    strip_non_alpha = bool(config and config.strip_non_alphabetic)

    stages = [
        CleaningStage("remove_scan_artifacts", remove_scan_artifacts),
        CleaningStage("remove_page_numbers", remove_page_numbers),
        CleaningStage("combine_split_words", combine_split_words),
    ]

    if strip_chapters:
        stages.append(CleaningStage(
            "remove_headers_and_footers", remove_headers_footers_and_chapters
        ))
    else:
        stages.append(CleaningStage(
            "remove_headers_and_footers", remove_headers_and_footers
        ))

    stages += [
        CleaningStage(
            "normalize_newlines_preserve_paragraphs",
            normalize_newlines_preserve_paragraphs
        ),
        CleaningStage("trim_lines", trim_lines),
    ]

    if strip_non_alpha:
        stages.append(CleaningStage("remove_non_alphabetic", remove_non_alphabetic))

    stages.append(CleaningStage(
        "remove_repetitive_patterns_preserving_paragraphs",
        remove_repetitive_patterns_preserving_paragraphs
    ))
    return stages


class TextCleaner:
    """
    Applies cleaning stages to OCR text in a fixed order.

    Example:
        >>> cleaner = TextCleaner()
        >>> cleaner.clean("Page 3\\nexam-\\nple text")
        'example text'
    """

    def __init__(
        self,
        stages: Optional[Sequence[CleaningStage]] = None,
        config=None
    ):
        self.stages = list(stages) if stages is not None else build_stages(config)

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def clean(self, text: str) -> str:
        for stage in self.stages:
            before = len(text)
            text = stage(text)
            logger.debug(f"{stage.name}: {before} -> {len(text)} chars")
        return text
