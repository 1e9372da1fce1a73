"""Keyword-based listing classifier.

Scans a free-text string (title, optionally followed by the external
category) against an ordered KeywordTable and returns the first category
with a matching keyword. There is no scoring across categories.

Example:
    classifier = KeywordClassifier()
    classifier.classify("Fender Stratocaster 2019, Sunburst")
    # "guitars-bass"
"""
import html
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from listing_categorizer.models.category import OTHER
from listing_categorizer.services.classification.keywords import (
    DEFAULT_KEYWORD_TABLE,
    KeywordTable,
)


@dataclass(frozen=True)
class KeywordMatch:
    """Category and the keyword that selected it."""
    category: str
    keyword: str


def decode_html_entities(text: str) -> str:
    """Decode HTML entities left in scraped titles (&amp;, &nbsp;, ...)."""
    return html.unescape(text).replace("\xa0", " ")


class KeywordClassifier:
    """Deterministic first-match keyword classifier.

    Keywords of three characters or fewer, and the table's short-keyword
    set, only match on word boundaries so "bas" never matches "basilika".
    Everything else is a case-insensitive substring match.

    Attributes:
        table: Keyword configuration (immutable, shared)
    """

    def __init__(self, table: KeywordTable = DEFAULT_KEYWORD_TABLE):
        self.table = table
        self._compiled: List[Tuple[str, List[Tuple[str, Optional[Pattern[str]]]]]] = [
            (category, [(kw, self._compile(kw)) for kw in keywords])
            for category, keywords in table.entries
        ]

    def _compile(self, keyword: str) -> Optional[Pattern[str]]:
        if not self.table.requires_word_boundary(keyword):
            return None
        return re.compile(rf"\b{re.escape(keyword)}\b")

    def match(self, text: Optional[str]) -> Optional[KeywordMatch]:
        """Return the first matching category and keyword, or None."""
        if not text or not text.strip():
            return None

        text_lower = decode_html_entities(text).lower()

        for category, keywords in self._compiled:
            for keyword, pattern in keywords:
                if pattern is not None:
                    if pattern.search(text_lower):
                        return KeywordMatch(category, keyword)
                elif keyword in text_lower:
                    return KeywordMatch(category, keyword)

        return None

    def classify(self, text: Optional[str]) -> str:
        """Classify text into a category id ("other" if nothing matches)."""
        result = self.match(text)
        return result.category if result else OTHER
