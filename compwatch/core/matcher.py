"""
Competitor Watcher Term Matcher
Finds whole-word glossary terms in plain text
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Mapping, Optional, Pattern, Tuple

from .glossary import GlossaryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TermMatch:
    """A single occurrence of a glossary term inside a text run"""
    term: str
    entry: GlossaryEntry
    start: int
    end: int
    text: str


@lru_cache(maxsize=64)
def _compile_terms(terms: Tuple[str, ...]) -> Optional[Pattern]:
    """Build one regex for all terms, longest first; ties keep glossary order"""
    ordered = sorted((term for term in terms if term), key=len, reverse=True)
    if not ordered:
        return None

    alternation = "|".join(re.escape(term) for term in ordered)
    # Not preceded or followed by a word character
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)", re.IGNORECASE)


class TermMatcher:
    """
    Case-insensitive whole-word matcher over a glossary mapping

    All terms go into one alternation, longest first, so a longer phrase
    ("market share") always wins over a term it contains ("market") and
    matches never overlap.
    """

    def find_matches(self, text: str, glossary: Mapping[str, GlossaryEntry]) -> List[TermMatch]:
        """
        Find every glossary term occurring in text as a whole word

        Args:
            text: Plain text fragment
            glossary: Lowercase term -> GlossaryEntry

        Returns:
            Non-overlapping matches, left to right
        """
        if not text or not text.strip() or not glossary:
            return []

        pattern = _compile_terms(tuple(glossary))
        if pattern is None:
            return []

        matches = []
        for match in pattern.finditer(text):
            matched = match.group(0)
            entry = glossary.get(matched.lower())
            if entry is None:
                # Case folding can differ from regex IGNORECASE (e.g. "ß")
                logger.debug(f"No entry for matched text '{matched}'")
                continue
            matches.append(TermMatch(
                term=entry.term,
                entry=entry,
                start=match.start(),
                end=match.end(),
                text=matched
            ))

        return matches
