# parser.py
import logging
from typing import Iterable, List, Optional, Tuple

from parsel import Selector

from scholar_papers.exceptions import ParsingException
from scholar_papers.extractor import RecordExtractor, parse_cluster_id
from scholar_papers.models import PaperRecord
from scholar_papers.utils import normalize_whitespace, select_entries

DEFAULT_MAX_COUNT = 5


class _EntryParser:
    def __init__(self, extractor: Optional[RecordExtractor] = None):
        self.logger = logging.getLogger(__name__)
        self.extractor = extractor or RecordExtractor()
        self.dropped = 0

    def parse_raw_items(self, html_content):
        if not html_content:
            return Selector(text="<html/>").css("div.gs_ri")
        return select_entries(Selector(text=html_content))

    def iter_records(self, html_content) -> Iterable[Tuple[PaperRecord, Selector]]:
        """Yields (record, fragment) pairs in document order, skipping entries without a title."""
        self.dropped = 0
        for fragment in self.parse_raw_items(html_content):
            record = self.extractor.extract(fragment)
            if record is None:
                self.dropped += 1
                continue
            yield record, fragment
        if self.dropped:
            self.logger.info(f"Skipped {self.dropped} entries without a usable title")


class SearchResultParser(_EntryParser):
    """Parses a Google Scholar search-results page into PaperRecords."""

    def parse(
        self,
        html_content: Optional[str],
        max_count: int = DEFAULT_MAX_COUNT,
        title_only: bool = False,
        match_words: Optional[str] = None,
        match_phrase: Optional[str] = None,
    ) -> List[PaperRecord]:
        """
        Extracts the records of a results page, filtered and truncated.

        Args:
            html_content (str): Raw HTML of the results page.
            max_count (int): Maximum number of records returned. Defaults to 5.
            title_only (bool): Match words/phrase against the title only. Defaults to False.
            match_words (str, optional): Whitespace-separated words that must all appear.
            match_phrase (str, optional): Phrase that must appear verbatim.

        Returns:
            List[PaperRecord]: Matching records in page order; empty when the page
            has no results or nothing matches.

        """
        limit = max(max_count, 0)
        words = [word.lower() for word in (match_words or "").split()]
        phrase = normalize_whitespace(match_phrase).lower()

        results = []
        for record, fragment in self.iter_records(html_content):
            if len(results) >= limit:
                break
            if words or phrase:
                text = record.title if title_only else self.extractor.entry_text(fragment)
                if not self.matches(text, words, phrase):
                    self.logger.debug(f"Filtered out: {record.title}")
                    continue
            results.append(record)
        return results

    @staticmethod
    def matches(text: str, words: List[str], phrase: str) -> bool:
        haystack = normalize_whitespace(text).lower()
        if phrase and phrase not in haystack:
            return False
        return all(word in haystack for word in words)


class CitationListParser(_EntryParser):
    """Parses a citer-list page (papers citing one cluster) into PaperRecords."""

    def parse(self, html_content: Optional[str]) -> List[PaperRecord]:
        return [record for record, _ in self.iter_records(html_content)]

    def parse_target(self, html_content: Optional[str]) -> Optional[PaperRecord]:
        """Returns the cited paper named in the page header, or None when the header is missing."""
        if not html_content:
            return None
        selector = Selector(text=html_content)
        header_link = selector.css("#gs_rt_hdr h2 a")
        if not header_link:
            return None
        title = normalize_whitespace("".join(header_link[0].xpath(".//text()").getall()))
        if not title:
            return None
        try:
            cluster_id = parse_cluster_id(header_link[0].attrib.get("href"))
        except ParsingException as e:
            self.logger.debug(f"Header link carries no usable cluster id: {e}")
            cluster_id = None
        return PaperRecord(title=title, cluster_id=cluster_id)
