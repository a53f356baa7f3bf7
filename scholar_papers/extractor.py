# extractor.py
"""
Field extraction for a single Google Scholar entry fragment.

Every field is read by an ordered tuple of rules. A rule takes the entry
fragment (a parsel Selector rooted at ``div.gs_ri``) and returns the field
value, or None when it does not apply; the first non-None value wins. When
Scholar changes one part of its layout, only the rule for that part needs
to change.

Byline split rule (``div.gs_a``, e.g. ``"A Einstein, B Podolsky - Physical
review, 1935 - APS"``):

* the author list is everything before the first dash surrounded by
  spaces; a hyphen inside a name such as ``Jean-Luc`` never splits, and a
  byline opening with a dash (``" - Nature, 1953 - nature.com"``) has no
  authors;
* author names are separated by commas; the first comma-separated piece
  containing a four-digit year is venue text, and the list stops there;
* ellipses (``…`` or ``...``) marking a truncated list are removed;
* the venue and year come from the segment between the first and second
  spaced dashes, the year being the last four-digit year in it.

Single-author bylines and names written with other separators may be
split wrongly; no attempt is made to guess beyond the rules above.
"""
import logging
import re
from typing import Callable, List, Optional, Sequence

from parsel import Selector
from yarl import URL

from scholar_papers.exceptions import ParsingException
from scholar_papers.models import PaperRecord
from scholar_papers.utils import normalize_whitespace

BYLINE_SEPARATOR_RE = re.compile(r"(?:^|\s)-(?:\s|$)")
YEAR_RE = re.compile(r"\b(1[89]\d{2}|20\d{2})\b")
ELLIPSIS_RE = re.compile(r"…|\.\.\.")
COUNT_RE = re.compile(r"\d[\d,]*")

Rule = Callable[[Selector], object]


# --- Pure helpers ---


def byline_text(fragment: Selector) -> str:
    return normalize_whitespace("".join(fragment.css("div.gs_a").xpath(".//text()").getall()))


def split_byline(byline: str) -> List[str]:
    """Splits a byline on its spaced dashes; a leading dash leaves an empty author segment."""
    return BYLINE_SEPARATOR_RE.split(byline.strip())


def split_authors(byline: str) -> List[str]:
    """Splits the author part of a byline into names (see the module docstring)."""
    authors_segment = split_byline(byline)[0]
    authors = []
    for piece in authors_segment.split(","):
        if YEAR_RE.search(piece):
            break
        name = ELLIPSIS_RE.sub("", piece).strip()
        if name:
            authors.append(name)
    return authors


def _venue_segment(byline: str) -> Optional[str]:
    parts = split_byline(byline)
    if len(parts) < 2:
        return None
    return parts[1].strip()


def parse_year(byline: str) -> Optional[int]:
    segment = _venue_segment(byline)
    if not segment:
        return None
    matches = YEAR_RE.findall(segment)
    return int(matches[-1]) if matches else None


def parse_venue(byline: str) -> Optional[str]:
    segment = _venue_segment(byline)
    if not segment:
        return None
    matches = list(YEAR_RE.finditer(segment))
    if matches:
        segment = segment[: matches[-1].start()]
    venue = segment.strip().rstrip(",").strip()
    venue = ELLIPSIS_RE.sub("", venue).strip()
    return venue or None


def parse_citation_count(text: Optional[str]) -> int:
    """Reads N from "Cited by N" (or any localized prefix); 0 when there is no number."""
    match = COUNT_RE.search(text or "")
    if not match:
        return 0
    return int(match.group(0).replace(",", ""))


def parse_cluster_id(href: Optional[str], params: Sequence[str] = ("cites", "cluster")) -> Optional[str]:
    """
    Returns the cluster ID carried in the ``cites`` or ``cluster`` query parameter of a link.

    Raises:
        ParsingException: If the parameter is present but not a number.
    """
    if not href:
        return None
    try:
        query = URL(href).query
    except ValueError as e:
        raise ParsingException(f"Unparseable link {href!r}: {e}") from e
    for name in params:
        value = query.get(name)
        if value is None:
            continue
        if not value.isdigit():
            raise ParsingException(f"Non-numeric {name} id in link {href!r}")
        return value
    return None


# --- Title rules ---


def title_from_link(fragment: Selector) -> Optional[str]:
    link = fragment.css("h3.gs_rt a")
    if not link:
        return None
    return normalize_whitespace("".join(link[0].xpath(".//text()").getall())) or None


def title_from_heading(fragment: Selector) -> Optional[str]:
    # [PDF], [CITATION] and [BOOK] markers sit in span children of the heading
    heading = fragment.css("h3.gs_rt")
    if not heading:
        return None
    parts = heading[0].xpath("./text() | ./*[not(self::span)]//text()").getall()
    return normalize_whitespace("".join(parts)) or None


# --- Byline rules ---


def authors_from_byline(fragment: Selector) -> Optional[List[str]]:
    byline = byline_text(fragment)
    if not byline:
        return None
    return split_authors(byline)


def year_from_byline(fragment: Selector) -> Optional[int]:
    return parse_year(byline_text(fragment))


def venue_from_byline(fragment: Selector) -> Optional[str]:
    return parse_venue(byline_text(fragment))


# --- Snippet, footer and link rules ---


def snippet_from_abstract(fragment: Selector) -> Optional[str]:
    snippet_tag = fragment.css("div.gs_rs")
    if not snippet_tag:
        return None
    # <br> breaks become spaces, inline markup such as <b> joins without one
    parts = [
        node.get() if isinstance(node.root, str) else " " for node in snippet_tag[0].xpath(".//text() | .//br")
    ]
    return normalize_whitespace("".join(parts)) or None


def _cited_by_link(fragment: Selector) -> Optional[Selector]:
    links = fragment.css("a[href*='cites=']")
    return links[0] if links else None


def cited_by_from_footer(fragment: Selector) -> Optional[int]:
    link = _cited_by_link(fragment)
    if link is None:
        return None
    return parse_citation_count("".join(link.xpath(".//text()").getall()))


def cluster_id_from_cited_by(fragment: Selector) -> Optional[str]:
    link = _cited_by_link(fragment)
    if link is None:
        return None
    return parse_cluster_id(link.attrib.get("href"), params=("cites",))


def cluster_id_from_versions(fragment: Selector) -> Optional[str]:
    for link in fragment.css("a[href*='cluster=']"):
        cluster_id = parse_cluster_id(link.attrib.get("href"), params=("cluster",))
        if cluster_id:
            return cluster_id
    return None


def article_url_from_link(fragment: Selector) -> Optional[str]:
    link = fragment.css("h3.gs_rt a")
    if not link:
        return None
    return link[0].attrib.get("href") or None


TITLE_RULES = (title_from_link, title_from_heading)
AUTHORS_RULES = (authors_from_byline,)
YEAR_RULES = (year_from_byline,)
VENUE_RULES = (venue_from_byline,)
SNIPPET_RULES = (snippet_from_abstract,)
CITED_BY_RULES = (cited_by_from_footer,)
CLUSTER_ID_RULES = (cluster_id_from_cited_by, cluster_id_from_versions)
ARTICLE_URL_RULES = (article_url_from_link,)


class RecordExtractor:
    """Builds a PaperRecord out of one entry fragment, or nothing when no title is found."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def apply_rules(self, rules: Sequence[Rule], fragment: Selector):
        for rule in rules:
            try:
                value = rule(fragment)
            except ParsingException as e:
                self.logger.debug(f"Rule {rule.__name__} failed: {e}")
                continue
            if value is not None:
                return value
        return None

    def extract(self, fragment: Selector) -> Optional[PaperRecord]:
        try:
            title = self.apply_rules(TITLE_RULES, fragment)
            if not title:
                return None
            return PaperRecord(
                title=title,
                authors=self.apply_rules(AUTHORS_RULES, fragment) or [],
                snippet=self.apply_rules(SNIPPET_RULES, fragment),
                cluster_id=self.apply_rules(CLUSTER_ID_RULES, fragment),
                cited_by_count=self.apply_rules(CITED_BY_RULES, fragment) or 0,
                article_url=self.apply_rules(ARTICLE_URL_RULES, fragment),
                year=self.apply_rules(YEAR_RULES, fragment),
                venue=self.apply_rules(VENUE_RULES, fragment),
            )
        except Exception as e:
            self.logger.warning(f"Dropping malformed entry: {type(e).__name__}: {e}")
            return None

    def entry_text(self, fragment: Selector) -> str:
        """Title, byline and snippet of the entry as one normalized string."""
        parts = [
            self.apply_rules(TITLE_RULES, fragment) or "",
            byline_text(fragment),
            self.apply_rules(SNIPPET_RULES, fragment) or "",
        ]
        return normalize_whitespace(" ".join(parts))
