"""Shared fixtures: synthetic glossaries so tests do not depend on bundled data"""

import pytest
from bs4 import BeautifulSoup

from compwatch.core.annotator import CONTAINER_CLASS, GlossaryAnnotator
from compwatch.core.glossary import GlossaryStore
from compwatch.core.render import RenderSurface
from compwatch.core.sanitizer import HTMLSanitizer

SWOT_FULL_EN = "Strengths, Weaknesses, Opportunities, Threats"
SWOT_FULL_PT = "Forças, Fraquezas, Oportunidades, Ameaças"

EN_GLOSSARY = {
    "SWOT": {"full": SWOT_FULL_EN, "definition": "Strategic planning framework."},
    "ROI": {"full": "Return on Investment", "definition": "Profit relative to cost, tracked as a KPI."},
    "KPI": {"full": "Key Performance Indicator", "definition": "A measurable objective."},
    "cat": {"full": "Competitive Analysis Tool", "definition": "Internal tooling."},
    # Shorter term first on purpose: precedence must not depend on file order
    "Market": {"full": "Market", "definition": "Where buyers and sellers meet."},
    "Market Trends": {"full": "Market Trends", "definition": "Direction a market is moving in."},
}

PT_GLOSSARY = {
    "SWOT": {"full": SWOT_FULL_PT, "definition": "Ferramenta de planeamento estratégico."},
    "ROI": {"full": "Retorno sobre o Investimento", "definition": "Lucro face ao custo."},
}


@pytest.fixture
def store():
    return GlossaryStore({"en": EN_GLOSSARY, "pt": PT_GLOSSARY})


@pytest.fixture
def annotator(store):
    return GlossaryAnnotator(store)


@pytest.fixture
def sanitizer():
    return HTMLSanitizer()


@pytest.fixture
def surface(annotator, sanitizer):
    return RenderSurface(annotator, sanitizer, locale="en")


@pytest.fixture
def make_root():
    """Parse a fragment into a report container element"""
    def _make(html):
        soup = BeautifulSoup(f'<div class="{CONTAINER_CLASS}">{html}</div>', "html.parser")
        return soup.div
    return _make
