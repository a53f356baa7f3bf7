# main.py
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from .config import Config, OutputFormat
from .data_handler import DataHandler
from .exceptions import CaptchaException, FetchException
from .fetcher import Fetcher
from .models import PageStatus, PaperRecord
from .parser import CitationListParser, SearchResultParser
from .query_builder import MAX_PAGE_RESULTS, QueryBuilder
from .utils import classify_page

EXIT_OK = 0
EXIT_FAILURE = 1

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scholar-papers", description="Scrape papers from Google Scholar search results and citer lists."
    )
    parser.add_argument("-c", "--count", type=int, default=5, help="Maximum number of search results (1-10, default 5).")
    parser.add_argument("-w", "--words", default=None, help="Search papers with these words.")
    parser.add_argument("-p", "--phrase", default=None, help="Search papers with this exact phrase.")
    parser.add_argument("-a", "--authors", default=None, help="Search papers with these authors.")
    parser.add_argument(
        "-t", "--title-only", action="store_true", help="Match words/phrase against paper titles only."
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--cluster-id", default=None, help="Look up the paper with this cluster ID.")
    source.add_argument(
        "--search-html", metavar="FILE", default=None, help="Scrape this HTML file as a search results page."
    )
    source.add_argument("--cite-html", metavar="FILE", default=None, help="Scrape this HTML file as a citers list page.")

    parser.add_argument("--json", action="store_true", help="Output in JSON format.")
    parser.add_argument("-o", "--output", default=None, help="Write results to this file (.csv for CSV, otherwise JSON).")
    parser.add_argument(
        "-r", "--recursive-depth", type=int, default=0, help="Follow each paper's citers this many levels deep."
    )
    parser.add_argument("--min-delay", type=float, default=2, help="Minimum delay between requests in seconds.")
    parser.add_argument("--max-delay", type=float, default=5, help="Maximum delay between requests in seconds.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose mode (DEBUG logging).")
    parser.add_argument(
        "--log_level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level."
    )
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace):
    """Rejects argument combinations argparse cannot express; exits with status 2 on error."""
    search_query = args.words or args.phrase or args.authors
    if not (search_query or args.cluster_id or args.search_html or args.cite_html):
        parser.error("a query (--words, --phrase or --authors), --cluster-id or an HTML file is required")
    if search_query and (args.cluster_id or args.cite_html):
        parser.error("search options cannot be combined with --cluster-id or --cite-html")
    if args.authors and args.search_html:
        parser.error("--authors cannot be combined with --search-html")
    if not 1 <= args.count <= MAX_PAGE_RESULTS:
        parser.error(f"--count must be between 1 and {MAX_PAGE_RESULTS}")
    if args.recursive_depth < 0:
        parser.error("--recursive-depth cannot be negative")
    if args.cluster_id is not None and not args.cluster_id.isdigit():
        parser.error("--cluster-id must be an integer")
    if args.min_delay < 0 or args.max_delay < args.min_delay:
        parser.error("delays must satisfy 0 <= --min-delay <= --max-delay")


def read_html(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def check_page(html_content: str, source: str) -> PageStatus:
    status = classify_page(html_content)
    if status is PageStatus.BLOCKED:
        raise CaptchaException(f"Block page returned for {source}")
    if status is PageStatus.NO_RESULTS:
        logger.info(f"No results on {source}")
    return status


async def crawl_citers(
    records: List[PaperRecord],
    depth: int,
    fetcher: Fetcher,
    query_builder: QueryBuilder,
    citation_parser: CitationListParser,
    config: Config,
):
    """Attaches the citer list of every record, following citers `depth` levels deep."""
    if depth <= 0:
        return
    for record in tqdm(records, desc=f"Fetching citers (depth {depth})", unit="paper", leave=False):
        if not record.cluster_id:
            logger.debug(f"No cluster ID for '{record.title}', skipping its citers")
            continue
        url = query_builder.build_citation_url(record.cluster_id, config.max_result_count)
        html_content = await fetcher.fetch_page(url)
        check_page(html_content, url)
        record.citers = citation_parser.parse(html_content)[: config.max_result_count]
        await crawl_citers(record.citers, depth - 1, fetcher, query_builder, citation_parser, config)


async def collect_records(
    args: argparse.Namespace, config: Config, fetcher: Fetcher, query_builder: QueryBuilder
) -> List[PaperRecord]:
    search_parser = SearchResultParser()
    citation_parser = CitationListParser()

    if args.cite_html:
        html_content = read_html(args.cite_html)
        check_page(html_content, args.cite_html)
        target = citation_parser.parse_target(html_content)
        if target:
            logger.info(f"Citers of '{target.title}' (cluster {target.cluster_id})")
        records = citation_parser.parse(html_content)
    elif args.cluster_id:
        url = query_builder.build_cluster_url(args.cluster_id)
        html_content = await fetcher.fetch_page(url)
        check_page(html_content, url)
        records = search_parser.parse(html_content, max_count=1)
    else:
        if args.search_html:
            html_content = read_html(args.search_html)
            source = args.search_html
        else:
            source = query_builder.build_search_url(
                words=args.words,
                phrase=args.phrase,
                authors=args.authors,
                title_only=args.title_only,
                count=config.max_result_count,
            )
            html_content = await fetcher.fetch_page(source)
        check_page(html_content, source)
        records = search_parser.parse(
            html_content,
            max_count=config.max_result_count,
            title_only=args.title_only,
            match_words=args.words,
            match_phrase=args.phrase,
        )

    await crawl_citers(records, config.recursive_depth, fetcher, query_builder, citation_parser, config)
    return records


def write_output(records: List[PaperRecord], config: Config, data_handler: DataHandler):
    if config.output:
        if config.output.lower().endswith(".csv"):
            data_handler.save_to_csv(records, config.output)
        else:
            data_handler.save_to_json(records, config.output)
        print(f"Saved {len(records)} results to {config.output}")
    elif config.output_format is OutputFormat.JSON:
        print(data_handler.to_json(records))
    elif records:
        print("Results:\n")
        print(data_handler.format_text(records))
    else:
        print("No results found.")


async def main(argv: Optional[List[str]] = None) -> int:
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)
    validate_args(arg_parser, args)
    config = Config.from_args(args)

    # --- Logging Configuration ---
    logging.basicConfig(
        format="%(asctime)s | %(levelname)s | %(filename)s:%(lineno)d | %(funcName)s | %(message)s",
        level=config.log_level,
    )

    fetcher = Fetcher(min_delay=config.min_delay, max_delay=config.max_delay)
    query_builder = QueryBuilder()
    data_handler = DataHandler()

    try:
        records = await collect_records(args, config, fetcher, query_builder)
        write_output(records, config, data_handler)
    except CaptchaException as e:
        logger.error(f"Blocked by Google Scholar: {e}")
        print("Request blocked by Google Scholar (CAPTCHA). Try again later.", file=sys.stderr)
        return EXIT_FAILURE
    except FetchException as e:
        logger.error(f"Fetch failed: {e}")
        print(f"Could not fetch results: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        logger.error(f"File error: {e}", exc_info=True)
        print(f"File error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        await fetcher.close()
        logger.debug(f"Requests: {fetcher.successful_requests} succeeded, {fetcher.failed_requests} failed")

    return EXIT_OK


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
