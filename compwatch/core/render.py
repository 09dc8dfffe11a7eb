"""
Competitor Watcher Render Surface
Holds one report view: sanitizes new HTML and annotates it once per payload
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from .annotator import CONTAINER_CLASS, GlossaryAnnotator
from .sanitizer import HTMLSanitizer

logger = logging.getLogger(__name__)


class RenderSurface:
    """
    Container receiving report HTML for display

    An annotation pass runs only when the HTML payload changes. Changing the
    locale on its own is recorded but does not re-annotate; tooltips already
    rendered stay in their original language until new content arrives or
    refresh() is called.
    """

    def __init__(self, annotator: GlossaryAnnotator, sanitizer: Optional[HTMLSanitizer] = None,
                 locale: Optional[str] = None):
        self.annotator = annotator
        self.sanitizer = sanitizer or HTMLSanitizer()
        self._locale = annotator.store.normalize_locale(locale)
        self._html: Optional[str] = None
        self._output = ""
        self._term_count = 0
        self.annotation_passes = 0

    @property
    def html(self) -> Optional[str]:
        """Last payload received"""
        return self._html

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def output(self) -> str:
        """Serialized, display-ready content"""
        return self._output

    @property
    def term_count(self) -> int:
        """Terms annotated for the current payload"""
        return self._term_count

    def set_locale(self, locale: Optional[str]):
        """Record the display locale without re-annotating current content"""
        new_locale = self.annotator.store.normalize_locale(locale)
        if new_locale != self._locale:
            logger.debug(f"Locale changed {self._locale} -> {new_locale}; keeping current annotations")
        self._locale = new_locale

    def render(self, html: Optional[str], locale: Optional[str] = None) -> str:
        """
        Display a report payload

        Args:
            html: Untrusted report HTML
            locale: Display locale (keeps the current one if None)

        Returns:
            Safe HTML with glossary tooltips
        """
        if locale is not None:
            self.set_locale(locale)

        html = html or ""
        if html == self._html:
            return self._output

        self._html = html
        self._render_current()
        return self._output

    def refresh(self) -> str:
        """Re-render the current payload in the current locale"""
        if self._html is None:
            return self._output
        self._render_current()
        return self._output

    def _render_current(self):
        sanitized = self.sanitizer.sanitize(self._html)
        container = f'<div class="{CONTAINER_CLASS}">{sanitized}</div>'

        try:
            soup = BeautifulSoup(container, "html.parser")
            root = soup.div
            self.annotation_passes += 1
            self._term_count = self.annotator.annotate(root, self._locale)
            self._output = str(root)
        except Exception as e:
            # Annotation is an enhancement; the sanitized content still renders
            logger.warning(f"Glossary annotation failed, showing content without tooltips: {e}", exc_info=True)
            self._term_count = 0
            self._output = container
