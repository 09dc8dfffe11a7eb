"""
Competitor Watcher Glossary Annotator
Wraps glossary terms in rendered report HTML with hover/focus tooltips
"""

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .config import AnnotatorConfig
from .glossary import GlossaryStore
from .matcher import TermMatch, TermMatcher

logger = logging.getLogger(__name__)

CONTAINER_CLASS = "report-content"

# Lucide-style "info" circle
_ICON_PARTS = [
    ("circle", {"cx": "12", "cy": "12", "r": "10"}),
    ("line", {"x1": "12", "y1": "16", "x2": "12", "y2": "12"}),
    ("line", {"x1": "12", "y1": "8", "x2": "12.01", "y2": "8"}),
]


def glossary_css(term_class: str = "glossary-term") -> str:
    """Stylesheet keeping tooltips hidden until the term is hovered or focused"""
    return f"""
.{term_class} {{ position: relative; display: inline-flex; align-items: center; gap: 0.25rem; cursor: help; }}
.{term_class}-label {{ font-weight: 600; }}
.{term_class}-icon svg {{ width: 0.75rem; height: 0.75rem; }}
.{term_class}-tooltip {{
  display: none; position: absolute; left: 0; bottom: 100%; z-index: 9999;
  width: 20rem; margin-bottom: 0.5rem; padding: 1rem;
  background: #fff; border: 2px solid rgba(59, 130, 246, 0.3); border-radius: 0.5rem;
  box-shadow: 0 25px 50px -12px rgba(0, 0, 0, 0.25); font-size: 0.875rem;
}}
.{term_class}:hover .{term_class}-tooltip,
.{term_class}:focus-within .{term_class}-tooltip {{ display: block; }}
.{term_class}-full {{ display: block; font-weight: 700; margin-bottom: 0.5rem; }}
.{term_class}-definition {{ display: block; line-height: 1.6; }}
"""


GLOSSARY_CSS = glossary_css()


class GlossaryAnnotator:
    """
    Walks a render tree and annotates glossary terms in its text nodes

    The glossary store is injected; the annotator keeps no glossary state
    of its own.
    """

    def __init__(self, store: GlossaryStore, matcher: Optional[TermMatcher] = None,
                 config: Optional[AnnotatorConfig] = None):
        """
        Initialize annotator

        Args:
            store: Glossary store used to resolve the active locale
            matcher: Term matcher (a default one is created if None)
            config: Marker classes and excluded tags
        """
        self.store = store
        self.matcher = matcher or TermMatcher()
        self.config = config or AnnotatorConfig()
        self.excluded_tags = {tag.lower() for tag in self.config.excluded_tags}
        self._factory = BeautifulSoup("", "html.parser")

    @staticmethod
    def _classes(tag: Tag) -> List[str]:
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        return list(classes)

    def _has_class(self, tag: Tag, name: str) -> bool:
        return name in self._classes(tag)

    def _clear_markers(self, root: Tag):
        """Remove the processed marker from the root and all its descendants"""
        marker = self.config.processed_class
        for tag in [root] + root.find_all(class_=marker):
            classes = [c for c in self._classes(tag) if c != marker]
            if classes:
                tag["class"] = classes
            elif tag.has_attr("class"):
                del tag["class"]

    def _mark_processed(self, root: Tag):
        classes = self._classes(root)
        if self.config.processed_class not in classes:
            classes.append(self.config.processed_class)
        root["class"] = classes

    def _is_skipped(self, tag: Tag) -> bool:
        """Elements that are never descended into"""
        return (
            (tag.name or "").lower() in self.excluded_tags
            or self._has_class(tag, self.config.processed_class)
            or self._has_class(tag, self.config.term_class)
        )

    def _new_tag(self, name: str, attrs: Optional[dict] = None, text: Optional[str] = None) -> Tag:
        tag = self._factory.new_tag(name, attrs=attrs or {})
        if text is not None:
            tag.append(NavigableString(text))
        return tag

    def _build_icon(self) -> Tag:
        prefix = self.config.term_class
        sup = self._new_tag("sup", {"class": f"{prefix}-icon", "aria-hidden": "true"})
        svg = self._new_tag("svg", {
            "fill": "none",
            "stroke": "currentColor",
            "stroke-width": "2",
            "viewBox": "0 0 24 24",
        })
        for name, attrs in _ICON_PARTS:
            svg.append(self._new_tag(name, dict(attrs)))
        sup.append(svg)
        return sup

    def build_term_markup(self, match: TermMatch) -> Tag:
        """
        Build the annotated span for one matched term

        The label keeps the text exactly as it appeared in the report; the
        tooltip carries the entry's full form and definition.
        """
        prefix = self.config.term_class
        wrapper = self._new_tag("span", {
            "class": prefix,
            "tabindex": "0",
            "data-term": match.entry.term,
        })
        wrapper.append(self._new_tag("span", {"class": f"{prefix}-label"}, match.text))
        if self.config.show_icon:
            wrapper.append(self._build_icon())

        tooltip = self._new_tag("span", {"class": f"{prefix}-tooltip", "role": "tooltip"})
        tooltip.append(self._new_tag("span", {"class": f"{prefix}-full"}, match.entry.full))
        tooltip.append(self._new_tag("span", {"class": f"{prefix}-definition"}, match.entry.definition))
        wrapper.append(tooltip)
        return wrapper

    def _annotate_text(self, node: NavigableString, glossary) -> int:
        """Replace one text node with text runs and annotated spans"""
        text = str(node)
        matches = self.matcher.find_matches(text, glossary)
        if not matches:
            return 0

        pieces: List = []
        cursor = 0
        for match in matches:
            if match.start > cursor:
                pieces.append(NavigableString(text[cursor:match.start]))
            pieces.append(self.build_term_markup(match))
            cursor = match.end
        if cursor < len(text):
            pieces.append(NavigableString(text[cursor:]))

        node.replace_with(*pieces)
        return len(matches)

    def annotate(self, root: Tag, locale: Optional[str] = None) -> int:
        """
        Run one annotation pass over a render tree, in place

        Args:
            root: Container element owning the rendered report
            locale: Display locale selecting the glossary

        Returns:
            Number of terms annotated
        """
        glossary = self.store.get_glossary(locale)
        self._clear_markers(root)

        count = 0
        # Depth-first, pre-order, document order
        stack = [root]
        while stack:
            node = stack.pop()
            if isinstance(node, Tag):
                if self._is_skipped(node):
                    continue
                stack.extend(reversed(list(node.children)))
            elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
                count += self._annotate_text(node, glossary)

        self._mark_processed(root)
        logger.info(f"Annotated {count} glossary terms (locale={self.store.normalize_locale(locale)})")
        return count

    def annotate_html(self, html: str, locale: Optional[str] = None) -> str:
        """
        Annotate an HTML fragment and return it wrapped in its container

        Args:
            html: Already-sanitized HTML
            locale: Display locale

        Returns:
            Serialized container element
        """
        soup = BeautifulSoup(f'<div class="{CONTAINER_CLASS}">{html or ""}</div>', "html.parser")
        root = soup.div
        self.annotate(root, locale)
        return str(root)
