"""
Rule-based grammar correction of cleaned text.

Provides:
- Suggestion, a span edit proposed by a rule engine
- apply_suggestions, which applies non-overlapping edits in one pass
- NlpruleEngine, the default engine (LanguageTool rules via nlprule)
- CorrectionAdapter, which never lets an engine failure abort the run
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Suggestion:
    """Replace text[start:end] with replacements[0]. Offsets are characters."""
    start: int
    end: int
    replacements: List[str] = field(default_factory=list)
    source: str = ""
    message: str = ""


def apply_suggestions(text: str, suggestions: Sequence[Suggestion]) -> str:
    """
    Apply suggestions to text in a single left-to-right pass.

    Suggestions are ordered by (start, end). One that overlaps an already
    applied suggestion is dropped, so the earliest span wins. Suggestions
    without replacements or with spans outside the text are ignored.
    """
    parts = []
    cursor = 0

    for s in sorted(suggestions, key=lambda s: (s.start, s.end)):
        if not s.replacements:
            continue
        if s.start < 0 or s.end > len(text) or s.start > s.end:
            logger.debug(f"Ignoring out-of-range suggestion {s.start}-{s.end}")
            continue
        if s.start < cursor:
            logger.debug(f"Dropping overlapping suggestion {s.start}-{s.end} ({s.source})")
            continue
        parts.append(text[cursor:s.start])
        parts.append(s.replacements[0])
        cursor = s.end

    parts.append(text[cursor:])
    return ''.join(parts)


# ============================================================================
# nlprule Engine
# ============================================================================

class NlpruleEngine:
    """Grammar and style suggestions from nlprule's LanguageTool rules."""

    def __init__(self, language: str = "en"):
        try:
            from nlprule import Tokenizer, Rules
        except ImportError:
            raise ImportError(
                "nlprule is required for grammar correction. "
                "Install with: pip install nlprule"
            )

        self.language = language
        # Downloads the binaries on first use, then loads from cache
        self.tokenizer = Tokenizer.load(language)
        self.rules = Rules.load(language, self.tokenizer)

    def suggest(self, text: str) -> List[Suggestion]:
        return [
            Suggestion(
                start=s.start,
                end=s.end,
                replacements=list(s.replacements),
                source=s.source,
                message=s.message
            )
            for s in self.rules.suggest(text)
        ]


# ============================================================================
# Correction Adapter
# ============================================================================

class CorrectionAdapter:
    """
    Runs text through a rule engine and applies its suggestions.

    The engine is created lazily, once per adapter. If it cannot be
    created or fails while suggesting, the text is returned unchanged.
    """

    def __init__(
        self,
        engine=None,
        language: str = "en",
        enabled: bool = True
    ):
        self.language = language
        self.enabled = enabled
        self._engine = engine
        self._engine_failed = False

    @classmethod
    def from_config(cls, config, engine=None) -> 'CorrectionAdapter':
        return cls(engine=engine, language=config.language, enabled=config.enabled)

    @property
    def engine(self):
        if self._engine is None and not self._engine_failed:
            try:
                self._engine = NlpruleEngine(language=self.language)
                logger.info(f"Loaded grammar rules for '{self.language}'")
            except Exception as e:
                logger.warning(f"Grammar correction unavailable: {e}")
                self._engine_failed = True
        return self._engine

    def suggest(self, text: str) -> Optional[List[Suggestion]]:
        engine = self.engine
        if engine is None:
            return None
        return engine.suggest(text)

    def correct(self, text: str) -> str:
        if not self.enabled or not text:
            return text

        try:
            suggestions = self.suggest(text)
        except Exception as e:
            logger.warning(f"Grammar correction failed, keeping cleaned text: {e}")
            return text

        if suggestions is None:
            return text

        logger.info(f"Applying {len(suggestions)} grammar suggestions")
        return apply_suggestions(text, suggestions)
