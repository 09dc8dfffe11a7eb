"""
Competitor Watcher report rendering
Safe display of AI-generated market reports with glossary tooltips
"""

from .core.annotator import GLOSSARY_CSS, GlossaryAnnotator
from .core.glossary import GlossaryEntry, GlossaryError, GlossaryStore
from .core.matcher import TermMatch, TermMatcher
from .core.render import RenderSurface
from .core.sanitizer import HTMLSanitizer, strip_to_text

__version__ = "1.0.0"

__all__ = [
    "GLOSSARY_CSS",
    "GlossaryAnnotator",
    "GlossaryEntry",
    "GlossaryError",
    "GlossaryStore",
    "HTMLSanitizer",
    "RenderSurface",
    "TermMatch",
    "TermMatcher",
    "strip_to_text",
]
