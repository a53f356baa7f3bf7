# utils.py
import random
import re
from typing import Optional

from fake_useragent import UserAgent
from parsel import Selector

from scholar_papers.models import PageStatus

ENTRY_SELECTORS = ("#gs_res_ccl_mid div.gs_ri", "div.gs_ri")


def get_random_delay(min_delay=2, max_delay=5):
    """
    Generates a random delay between min_delay and max_delay seconds.

    Used between requests so that consecutive queries to Google Scholar do
    not arrive back to back, which is what triggers its rate limiting.

    Args:
        min_delay (int, optional): Minimum delay in seconds. Defaults to 2.
        max_delay (int, optional): Maximum delay in seconds. Defaults to 5.

    Returns:
        float: A random delay value (in seconds) between min_delay and max_delay.

    """
    return random.uniform(min_delay, max_delay)


def get_random_user_agent():
    """
    Returns a random browser user agent string using the fake-useragent library.

    Returns:
        str: A random user agent string.

    """
    ua = UserAgent()
    return ua.random


def normalize_whitespace(text: Optional[str]) -> str:
    """Replaces non-breaking spaces and collapses runs of whitespace into one space."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.replace("\xa0", " ")).strip()


def select_entries(selector: Selector):
    """
    Returns the entry fragments (one per listed paper) of a results or citer page.

    The entries normally live under the ``#gs_res_ccl_mid`` container; when
    that id is missing, every ``div.gs_ri`` on the page is taken instead.
    """
    for css in ENTRY_SELECTORS:
        entries = selector.css(css)
        if entries:
            return entries
    return selector.css(ENTRY_SELECTORS[0])


def detect_captcha(html_content: Optional[str]) -> bool:
    """
    Detects CAPTCHA and "unusual traffic" indicators in HTML content.

    Args:
        html_content (Optional[str]): The HTML content (as a string) to analyze.

    Returns:
        bool: True if the page looks like a block page, False otherwise.

    """
    if not html_content:  # Handle None or empty string gracefully
        return False
    captcha_patterns = [
        r"prove\s+you'?re\s+human",
        r"not\s+a\s+robot",
        r"unusual\s+traffic",
        r"our\s+systems\s+have\s+detected",
        r"gs_captcha_ccl",
        r"/sorry/index",
        r"/sorry/image",  # Google's reCAPTCHA image URL
        r"recaptcha",
        r"<iframe\s+[^>]*src=['\"]https://www\.google\.com/recaptcha/api[2]?/",  # reCAPTCHA iframe
    ]
    for pattern in captcha_patterns:
        if re.search(pattern, html_content, re.IGNORECASE):
            return True
    return False


def classify_page(html_content: Optional[str]) -> PageStatus:
    """
    Decides whether a page is a genuine results page before it is parsed.

    A page with at least one entry block is a results page, whatever its
    text mentions. Only a page without entries is checked for CAPTCHA
    markers; one without either is a zero-result page.
    """
    if not html_content:
        return PageStatus.NO_RESULTS
    if select_entries(Selector(text=html_content)):
        return PageStatus.RESULTS
    if detect_captcha(html_content):
        return PageStatus.BLOCKED
    return PageStatus.NO_RESULTS
