"""
Tests for the text cleaning module.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestScanArtifacts:
    """Test artifact removal."""

    def test_brackets_and_punctuation_removed(self):
        from scanclean.utils.cleaner import remove_scan_artifacts

        assert remove_scan_artifacts("Hello! [world]? {x}") == "Hello world x"

    def test_ellipsis_and_double_colon_removed(self):
        from scanclean.utils.cleaner import remove_scan_artifacts

        assert remove_scan_artifacts("wait...what::now") == "waitwhatnow"

    def test_single_colon_and_period_kept(self):
        from scanclean.utils.cleaner import remove_scan_artifacts

        assert remove_scan_artifacts("Note: the end.") == "Note: the end."


class TestPageNumbers:
    """Test page number removal at the edges of the text."""

    def test_leading_number(self):
        from scanclean.utils.cleaner import remove_page_numbers

        assert remove_page_numbers("42 Some text") == "Some text"

    def test_trailing_number(self):
        from scanclean.utils.cleaner import remove_page_numbers

        assert remove_page_numbers("Some text\n17") == "Some text"

    def test_both_edges(self):
        from scanclean.utils.cleaner import remove_page_numbers

        assert remove_page_numbers("12\nChapter text 13") == "Chapter text"

    def test_inner_numbers_kept(self):
        from scanclean.utils.cleaner import remove_page_numbers

        text = "In 1999 we\n12\nwrote more"
        assert remove_page_numbers(text) == text


class TestSplitWords:
    """Test joining of hyphenated line breaks."""

    def test_hyphen_newline_joined(self):
        from scanclean.utils.cleaner import combine_split_words

        assert combine_split_words("exam-\nple") == "example"

    def test_hyphen_without_newline_kept(self):
        from scanclean.utils.cleaner import combine_split_words

        assert combine_split_words("well-known") == "well-known"


class TestHeadersAndFooters:
    """Test running head removal."""

    def test_page_header_removed(self):
        from scanclean.utils.cleaner import remove_headers_and_footers

        assert remove_headers_and_footers("Page 12 text") == " text"

    def test_chapter_kept_by_default(self):
        from scanclean.utils.cleaner import remove_headers_and_footers

        assert remove_headers_and_footers("CHAPTER ONE\nText") == "CHAPTER ONE\nText"

    def test_chapter_variant(self):
        from scanclean.utils.cleaner import remove_headers_footers_and_chapters

        text = "CHAPTER ONE\nText\nPage 4"
        assert remove_headers_footers_and_chapters(text) == "\nText\n"


class TestNewlines:
    """Test newline normalization."""

    def test_paragraph_break_preserved(self):
        from scanclean.utils.cleaner import normalize_newlines_preserve_paragraphs

        text = "line one\n\nline two"
        assert normalize_newlines_preserve_paragraphs(text) == text

    def test_single_newline_becomes_space(self):
        from scanclean.utils.cleaner import normalize_newlines_preserve_paragraphs

        result = normalize_newlines_preserve_paragraphs("line one\nline two")
        assert result == "line one line two"

    def test_edge_newlines(self):
        from scanclean.utils.cleaner import normalize_newlines_preserve_paragraphs

        assert normalize_newlines_preserve_paragraphs("\na\n") == " a "


class TestTrimLines:
    """Test per-line whitespace trimming."""

    def test_lines_trimmed(self):
        from scanclean.utils.cleaner import trim_lines

        assert trim_lines("  a  \n b\t") == "a\nb"

    def test_trailing_newline_dropped(self):
        from scanclean.utils.cleaner import trim_lines

        assert trim_lines("a\nb\n") == "a\nb"

    def test_blank_lines_kept(self):
        from scanclean.utils.cleaner import trim_lines

        assert trim_lines("a\n\n  b") == "a\n\nb"

    def test_empty(self):
        from scanclean.utils.cleaner import trim_lines

        assert trim_lines("") == ""
        assert trim_lines("\n") == ""


class TestNonAlphabetic:
    """Test the optional non-alphabetic filter."""

    def test_filter(self):
        from scanclean.utils.cleaner import remove_non_alphabetic

        result = remove_non_alphabetic("Héllo, wörld! #1 (ok)?")
        assert result == "Hllo, wrld! 1 ok?"


class TestRepetitivePatterns:
    """Test repeated character run removal."""

    def test_four_hyphens_removed(self):
        from scanclean.utils.cleaner import remove_repetitive_patterns_preserving_paragraphs

        assert remove_repetitive_patterns_preserving_paragraphs("----") == ""

    def test_three_hyphens_kept(self):
        from scanclean.utils.cleaner import remove_repetitive_patterns_preserving_paragraphs

        assert remove_repetitive_patterns_preserving_paragraphs("---") == "---"

    def test_newline_runs_kept(self):
        from scanclean.utils.cleaner import remove_repetitive_patterns_preserving_paragraphs

        assert remove_repetitive_patterns_preserving_paragraphs("a\n\n\nb") == "a\n\n\nb"
        assert remove_repetitive_patterns_preserving_paragraphs("a\n\n\n\n\nb") == "a\n\n\n\n\nb"

    def test_run_inside_text(self):
        from scanclean.utils.cleaner import remove_repetitive_patterns_preserving_paragraphs

        assert remove_repetitive_patterns_preserving_paragraphs("Contents----1") == "Contents1"
        assert remove_repetitive_patterns_preserving_paragraphs("ab    cd") == "abcd"

    def test_empty(self):
        from scanclean.utils.cleaner import remove_repetitive_patterns_preserving_paragraphs

        assert remove_repetitive_patterns_preserving_paragraphs("") == ""


class TestTextCleaner:
    """Test the full cleaning pipeline."""

    @pytest.fixture
    def noisy_text(self):
        return (
            "7\nThe exam-\nple of a [scanned] page\nwith text.\n\n"
            "Page 3\nSecond para-\ngraph here.\n\nSigned ________ by me\n42"
        )

    def test_default_stage_order(self):
        from scanclean.utils.cleaner import TextCleaner

        assert TextCleaner().stage_names == [
            "remove_scan_artifacts",
            "remove_page_numbers",
            "combine_split_words",
            "remove_headers_and_footers",
            "normalize_newlines_preserve_paragraphs",
            "trim_lines",
            "remove_repetitive_patterns_preserving_paragraphs",
        ]

    def test_non_alphabetic_stage_position(self):
        from scanclean.config import CleaningConfig
        from scanclean.utils.cleaner import TextCleaner

        cleaner = TextCleaner(config=CleaningConfig(strip_non_alphabetic=True))
        names = cleaner.stage_names
        assert names.index("remove_non_alphabetic") == names.index("trim_lines") + 1
        assert names[-1] == "remove_repetitive_patterns_preserving_paragraphs"

    def test_chapter_variant_enabled(self):
        from scanclean.config import CleaningConfig
        from scanclean.utils.cleaner import TextCleaner

        cleaner = TextCleaner(config=CleaningConfig(strip_chapter_headings=True))
        assert cleaner.clean("CHAPTER ONE\nIt began.") == "It began."
        assert cleaner.clean("Intro\n\nCHAPTER ONE\n\nIt began.") == "Intro\n\n\n\nIt began."

    def test_hyphen_joined_before_newlines_normalized(self):
        from scanclean.utils.cleaner import TextCleaner

        assert TextCleaner().clean("exam-\nple") == "example"

    def test_noisy_text(self, noisy_text):
        from scanclean.utils.cleaner import TextCleaner

        cleaned = TextCleaner().clean(noisy_text)
        assert cleaned == (
            "The example of a scanned page with text.\n\n\n"
            "Second paragraph here.\n\nSigned  by me"
        )

    def test_idempotent(self, noisy_text):
        from scanclean.utils.cleaner import TextCleaner

        cleaner = TextCleaner()
        once = cleaner.clean(noisy_text)
        assert cleaner.clean(once) == once

    def test_clean_text_unchanged(self):
        from scanclean.utils.cleaner import TextCleaner

        text = "Hello world.\n\nSecond paragraph, with a comma."
        assert TextCleaner().clean(text) == text

    def test_custom_stages(self):
        from scanclean.utils.cleaner import TextCleaner, CleaningStage

        cleaner = TextCleaner(stages=[CleaningStage("upper", str.upper)])
        assert cleaner.stage_names == ["upper"]
        assert cleaner.clean("abc") == "ABC"

    def test_total_on_odd_input(self):
        from scanclean.utils.cleaner import TextCleaner

        for text in ["", "\n", "----", "!!!", "1", "\r\n\r\n", "\x00\x00\x00\x00"]:
            assert isinstance(TextCleaner().clean(text), str)
