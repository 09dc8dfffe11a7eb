"""
Competitor Watcher HTML Sanitizer
Makes AI-generated report HTML safe to insert into a page
"""

import logging
import re
from html import escape
from typing import List, Optional

import bleach
from bs4 import BeautifulSoup, Comment

from .config import SanitizerConfig

logger = logging.getLogger(__name__)

# Used only on the degraded text-only path
_BLOCK_PATTERN = re.compile(r'<(script|style|iframe|object|embed|template|noscript)\b.*?(</\1\s*>|$)',
                            re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r'<[!/?a-zA-Z][^>]*>?')
_COMMENT_PATTERN = re.compile(r'<!--.*?(-->|$)', re.DOTALL)


def strip_to_text(html: Optional[str]) -> str:
    """
    Reduce markup to escaped plain text

    Drops executable blocks with their content, removes every remaining tag
    and escapes what is left so nothing can be interpreted as markup.
    """
    if not html:
        return ""
    text = _COMMENT_PATTERN.sub('', html)
    text = _BLOCK_PATTERN.sub('', text)
    text = _TAG_PATTERN.sub('', text)
    return escape(text, quote=False)


class HTMLSanitizer:
    """
    Allowlist sanitizer for untrusted report HTML
    """

    def __init__(self, config: Optional[SanitizerConfig] = None):
        """
        Initialize sanitizer

        Args:
            config: Sanitizer allowlists (defaults used if None)
        """
        self.config = config or SanitizerConfig()
        self.tags = frozenset(self.config.allowed_tags)
        self.attributes = {tag: list(attrs) for tag, attrs in self.config.allowed_attributes.items()}
        self.protocols = frozenset(self.config.allowed_protocols)
        self.removed_tags = list(self.config.removed_tags)
        self.reserved_prefixes = tuple(self.config.reserved_class_prefixes)

    @staticmethod
    def _split_values(value) -> List[str]:
        """Multi-valued attribute as a list, whether bs4 parsed it or not"""
        if not value:
            return []
        if isinstance(value, str):
            return value.split()
        return list(value)

    def _drop_executable_blocks(self, html: str) -> str:
        """Remove script-like elements together with their content"""
        soup = BeautifulSoup(html, 'html.parser')
        for element in soup(self.removed_tags):
            # Nested inside an element removed earlier in this loop
            if element.decomposed:
                continue
            element.decompose()
        if self.config.strip_comments:
            for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
                comment.extract()
        return str(soup)

    def _clean(self, html: str) -> str:
        cleaned = bleach.clean(
            self._drop_executable_blocks(html),
            tags=self.tags,
            attributes=self.attributes,
            protocols=self.protocols,
            strip=True,
            strip_comments=self.config.strip_comments
        )

        # Images whose src was rejected carry nothing worth showing
        soup = BeautifulSoup(cleaned, 'html.parser')
        for img in soup.find_all('img'):
            if not img.get('src'):
                img.decompose()

        # Links opened in a new tab must not get a handle on the opener
        for link in soup.find_all('a', target=True):
            rel = self._split_values(link.get('rel'))
            for value in ('noopener', 'noreferrer'):
                if value not in rel:
                    rel.append(value)
            link['rel'] = rel

        # Annotation marker classes belong to the renderer, not to report content
        if self.reserved_prefixes:
            for tag in soup.find_all(class_=True):
                classes = [c for c in self._split_values(tag.get('class'))
                           if not c.startswith(self.reserved_prefixes)]
                if classes:
                    tag['class'] = classes
                else:
                    del tag['class']

        return str(soup)

    def sanitize(self, html: Optional[str]) -> str:
        """
        Sanitize untrusted HTML

        Args:
            html: Raw HTML, possibly from an AI completion

        Returns:
            HTML safe for direct insertion, or escaped text if cleaning failed
        """
        if not html:
            return ""

        try:
            return self._clean(html)
        except Exception as e:
            logger.warning(f"HTML sanitization failed, falling back to text only: {e}")
            return strip_to_text(html)
