"""Tests for the render surface: sanitize, annotate once per payload"""

from unittest.mock import patch

from bs4 import BeautifulSoup

from compwatch.core.render import RenderSurface
from conftest import SWOT_FULL_EN, SWOT_FULL_PT

XSS_REPORT = """<div><h2>Safe Title</h2><img src="x" onerror="alert('XSS')"></div>"""
SWOT_REPORT = "<p>Our SWOT analysis shows...</p>"


def test_xss_scenario(surface):
    out = surface.render(XSS_REPORT)

    assert "Safe Title" in out
    assert "onerror" not in out
    assert "alert('XSS')" not in out


def test_swot_scenario(surface):
    out = surface.render(SWOT_REPORT, "en")
    wrapper = BeautifulSoup(out, "html.parser").find("span", class_="glossary-term")

    assert wrapper.find(class_="glossary-term-label").get_text() == "SWOT"
    assert wrapper.find(class_="glossary-term-full").get_text() == SWOT_FULL_EN
    assert wrapper.find(class_="glossary-term-definition").get_text() == "Strategic planning framework."
    assert surface.term_count == 1


def test_initial_state(surface):
    assert surface.html is None
    assert surface.output == ""
    assert surface.annotation_passes == 0


def test_locale_normalized(annotator):
    assert RenderSurface(annotator, locale="pt-PT").locale == "pt"
    assert RenderSurface(annotator, locale="it").locale == "en"


def test_same_payload_is_not_reannotated(surface):
    first = surface.render(SWOT_REPORT)
    second = surface.render(SWOT_REPORT)

    assert second == first
    assert surface.annotation_passes == 1


def test_locale_switch_alone_does_not_trigger_pass(surface):
    with patch.object(surface.annotator, "annotate", wraps=surface.annotator.annotate) as spy:
        surface.render(SWOT_REPORT)
        assert spy.call_count == 1

        surface.set_locale("pt")
        surface.render(SWOT_REPORT, "pt")

        assert spy.call_count == 1
        assert surface.locale == "pt"
        # Tooltips stay in the language they were rendered in
        assert SWOT_FULL_EN in surface.output
        assert SWOT_FULL_PT not in surface.output


def test_new_payload_uses_current_locale(surface):
    with patch.object(surface.annotator, "annotate", wraps=surface.annotator.annotate) as spy:
        surface.render(SWOT_REPORT)
        surface.set_locale("pt")
        surface.render("<p>Novo relatório SWOT</p>")

        assert spy.call_count == 2
        assert spy.call_args[0][1] == "pt"
    assert SWOT_FULL_PT in surface.output


def test_refresh_reannotates_in_current_locale(surface):
    surface.render(SWOT_REPORT)
    surface.set_locale("pt")

    out = surface.refresh()

    assert surface.annotation_passes == 2
    assert SWOT_FULL_PT in out
    assert SWOT_FULL_EN not in out


def test_refresh_without_content(surface):
    assert surface.refresh() == ""
    assert surface.annotation_passes == 0


def test_returning_to_earlier_payload_renders_again(surface):
    a = surface.render(SWOT_REPORT)
    surface.render("<p>ROI</p>")
    again = surface.render(SWOT_REPORT)

    assert again == a
    assert surface.annotation_passes == 3


def test_processed_marker_on_container(surface):
    root = BeautifulSoup(surface.render(SWOT_REPORT), "html.parser").div
    assert root["class"] == ["report-content", "glossary-processed"]


def test_empty_payload(surface):
    assert surface.render("") == '<div class="report-content glossary-processed"></div>'
    assert surface.render(None) == surface.output
    assert surface.annotation_passes == 1


def test_sanitized_before_annotation(surface):
    out = surface.render("<p>SWOT</p><script>var SWOT = 1</script>"
                         "<pre><code>ROI = gain / cost</code></pre>")

    assert "var SWOT" not in out
    assert "<pre><code>ROI = gain / cost</code></pre>" in out
    assert surface.term_count == 1


def test_annotation_failure_keeps_sanitized_content(surface, caplog):
    with patch.object(surface.annotator, "annotate", side_effect=RuntimeError("unexpected tree")):
        out = surface.render(XSS_REPORT + SWOT_REPORT)

    assert out.startswith('<div class="report-content">')
    assert "Safe Title" in out
    assert "Our SWOT analysis shows..." in out
    assert "onerror" not in out
    assert "glossary-term" not in out
    assert surface.term_count == 0
    assert "Glossary annotation failed" in caplog.text


def test_partial_annotation_is_discarded_on_failure(surface):
    def half_done(root, locale):
        root.append(BeautifulSoup('<span class="glossary-term">x</span>', "html.parser"))
        raise RuntimeError("matcher blew up")

    with patch.object(surface.annotator, "annotate", side_effect=half_done):
        out = surface.render(SWOT_REPORT)

    assert "glossary-term" not in out
    assert "Our SWOT analysis shows..." in out


def test_report_cannot_disable_annotation_with_marker_classes(surface):
    out = surface.render('<div class="glossary-processed"><p class="glossary-term">Our SWOT plan</p></div>')

    assert surface.term_count == 1
    assert SWOT_FULL_EN in out
