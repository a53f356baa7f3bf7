"""
Tests for the SearchResultParser and CitationListParser.
"""

import pytest

from scholar_papers.models import PaperRecord
from scholar_papers.parser import CitationListParser, SearchResultParser

QFT = "Quantum field theory and critical phenomena"
SOLIDS = "Quantum theory of solids"
AB_EFFECT = "Significance of electromagnetic potentials in the quantum theory"
EPR = "Can quantum-mechanical description of physical reality be considered complete?"
DIRAC = "The quantum theory of the electron"
ZUREK = "Decoherence, einselection, and the quantum origins of the classical"
NIELSEN = "Quantum computation and quantum information"


def titles(records):
    return [record.title for record in records]


class TestSearchResultParser:
    """Test cases for SearchResultParser using the saved results page"""

    def test_default_returns_first_five_in_page_order(self, sample_search_result_html):
        results = SearchResultParser().parse(sample_search_result_html)

        assert titles(results) == [QFT, SOLIDS, AB_EFFECT, EPR, DIRAC]
        assert all(isinstance(record, PaperRecord) for record in results)

    def test_first_record_fields(self, sample_search_result_html):
        record = SearchResultParser().parse(sample_search_result_html, max_count=1)[0]

        assert record.title == QFT
        assert record.authors == ["J Zinn-Justin"]
        assert record.cluster_id == "16499695044466828447"
        assert record.cited_by_count == 4821
        assert record.year == 1996
        assert record.venue is None
        assert record.article_url == "http://cds.cern.ch/record/2280881"
        assert "quantum theory" in record.snippet

    def test_citation_only_entry(self, sample_search_result_html):
        record = SearchResultParser().parse(sample_search_result_html)[1]

        assert record.title == SOLIDS
        assert record.authors == ["C Kittel", "CY Fong"]
        assert record.article_url is None
        assert record.snippet is None
        assert record.cluster_id == "8552492368061991976"
        assert record.cited_by_count == 4190
        assert record.year == 1963

    def test_marker_and_linked_author_names(self, sample_search_result_html):
        results = SearchResultParser().parse(sample_search_result_html, max_count=10)
        by_title = {record.title: record for record in results}

        ab = by_title[AB_EFFECT]
        assert ab.authors == ["Y Aharonov", "D Bohm"]
        assert ab.venue == "Physical Review"
        assert ab.year == 1959
        assert ab.cluster_id == "5545735591029960915"
        assert ab.cited_by_count == 6961

        epr = by_title[EPR]
        assert epr.authors == ["A Einstein", "B Podolsky", "N Rosen"]
        assert epr.cited_by_count == 21540

        dirac = by_title[DIRAC]
        assert dirac.venue == "Proceedings of the Royal Society of London"
        assert dirac.year == 1928

        nielsen = by_title[NIELSEN]
        assert nielsen.authors == ["MA Nielsen", "IL Chuang"]
        assert nielsen.year == 2010
        assert nielsen.cited_by_count == 51234

    def test_entry_without_cited_by_link(self, sample_search_result_html):
        results = SearchResultParser().parse(sample_search_result_html, max_count=10)
        zurek = next(record for record in results if record.title == ZUREK)

        assert zurek.cited_by_count == 0
        assert zurek.cluster_id == "5370532213407903070"

    def test_titleless_entry_is_skipped(self, sample_search_result_html):
        parser = SearchResultParser()
        results = parser.parse(sample_search_result_html, max_count=10)

        assert titles(results) == [QFT, SOLIDS, AB_EFFECT, EPR, DIRAC, ZUREK, NIELSEN]
        assert parser.dropped == 1
        assert "1111111111111111111" not in [record.cluster_id for record in results]

    @pytest.mark.parametrize("max_count, expected", [(0, 0), (1, 1), (3, 3), (7, 7), (10, 7), (-2, 0)])
    def test_max_count_bounds_result(self, sample_search_result_html, max_count, expected):
        results = SearchResultParser().parse(sample_search_result_html, max_count=max_count)
        assert len(results) == expected

    def test_phrase_filter_searches_whole_entry(self, sample_search_result_html):
        results = SearchResultParser().parse(sample_search_result_html, max_count=10, match_phrase="quantum theory")
        assert titles(results) == [QFT, SOLIDS, AB_EFFECT, DIRAC]

    def test_phrase_filter_title_only(self, sample_search_result_html):
        results = SearchResultParser().parse(
            sample_search_result_html, max_count=10, match_phrase="Quantum  Theory", title_only=True
        )
        assert titles(results) == [SOLIDS, AB_EFFECT, DIRAC]

    def test_words_filter(self, sample_search_result_html):
        parser = SearchResultParser()

        assert titles(parser.parse(sample_search_result_html, max_count=10, match_words="wave function")) == [EPR]
        assert parser.parse(sample_search_result_html, max_count=10, match_words="wave function", title_only=True) == []
        assert titles(parser.parse(sample_search_result_html, max_count=10, match_words="bohm aharonov")) == [AB_EFFECT]

    def test_filter_applies_before_truncation(self, sample_search_result_html):
        results = SearchResultParser().parse(sample_search_result_html, max_count=2, match_phrase="quantum theory")
        assert titles(results) == [QFT, SOLIDS]

    def test_no_match_returns_empty(self, sample_search_result_html):
        assert SearchResultParser().parse(sample_search_result_html, match_words="zzqxv") == []

    @pytest.mark.parametrize("html", ["", None, "<html><body></body></html>"])
    def test_empty_page(self, html):
        assert SearchResultParser().parse(html) == []

    def test_no_results_page(self, no_results_html):
        assert SearchResultParser().parse(no_results_html) == []

    def test_matches(self):
        assert SearchResultParser.matches("The Quantum Theory of the Electron", ["electron"], "quantum theory")
        assert not SearchResultParser.matches("The Quantum Theory of the Electron", ["proton"], "")
        assert not SearchResultParser.matches("Quantum field theory", [], "quantum theory")
        assert SearchResultParser.matches("anything", [], "")


class TestCitationListParser:
    """Test cases for CitationListParser using the saved citer-list page"""

    def test_parse_citers(self, sample_citations_html):
        results = CitationListParser().parse(sample_citations_html)

        assert titles(results) == [
            "Quantal phase factors accompanying adiabatic changes",
            "Multiferroics: a magnetic twist for ferroelectricity",
            "Quantum field theory",
        ]

    def test_citer_fields(self, sample_citations_html):
        berry, multiferroics, qft = CitationListParser().parse(sample_citations_html)

        assert berry.authors == ["MV Berry"]
        assert berry.year == 1984
        assert berry.venue == "Proceedings of the Royal Society of London. A"
        assert berry.cluster_id == "15570691018430890829"
        assert berry.cited_by_count == 7813

        assert multiferroics.authors == ["SW Cheong", "M Mostovoy"]
        assert multiferroics.venue == "Nature materials"
        assert multiferroics.cluster_id == "9328505180409005573"
        assert multiferroics.cited_by_count == 3232

        assert qft.authors == ["M Srednicki"]
        assert qft.year == 2007
        assert qft.venue is None
        assert qft.cited_by_count == 2911

    def test_parse_target(self, sample_citations_html):
        target = CitationListParser().parse_target(sample_citations_html)

        assert target.title == AB_EFFECT
        assert target.cluster_id == "5545735591029960915"

    def test_parse_target_missing_header(self, sample_search_result_html):
        assert CitationListParser().parse_target(sample_search_result_html) is None
        assert CitationListParser().parse_target("") is None

    @pytest.mark.parametrize("html", ["", None, "<html><body><div id='gs_res_ccl_mid'></div></body></html>"])
    def test_empty_page(self, html):
        assert CitationListParser().parse(html) == []

    def test_search_page_parses_as_citer_list(self, sample_search_result_html):
        # Both pages share the entry layout
        results = CitationListParser().parse(sample_search_result_html)
        assert len(results) == 7


RECAPTCHA_PAGE = """
<html><body><div id="gs_res_ccl_mid">
  <div class="gs_r gs_or gs_scl"><div class="gs_ri">
    <h3 class="gs_rt"><a href="https://www.science.org/doi/10.1126/science.1160379">reCAPTCHA: Human-based character recognition via web security measures</a></h3>
    <div class="gs_a">L Von Ahn, B Maurer, C McMillen&nbsp;- Science, 2008&nbsp;- science.org</div>
    <div class="gs_rs">Prove you're human: we show that the unusual traffic of CAPTCHA solving<br>can be put to work digitizing books.</div>
    <div class="gs_fl"><a href="/scholar?cites=6418131914138393880&amp;hl=en">Cited by 1732</a></div>
  </div></div>
</div></body></html>
"""


def test_results_page_about_captchas_is_parsed():
    results = SearchResultParser().parse(RECAPTCHA_PAGE, match_phrase="solving can be put")

    assert titles(results) == ["reCAPTCHA: Human-based character recognition via web security measures"]
    assert results[0].venue == "Science"
    assert results[0].cited_by_count == 1732
