# exceptions.py
class CaptchaException(Exception):
    """Raised when a CAPTCHA or "unusual traffic" page is detected.

    Indicates that Google Scholar has blocked the request. The page carries
    no results, so it must never reach the parsers; the caller reports the
    block to the user and backs off.
    """

    pass


class ParsingException(Exception):
    """Raised by a field rule when an entry fragment cannot be read.

    Always caught inside RecordExtractor, which drops the offending entry
    and keeps parsing the rest of the page.
    """

    pass


class FetchException(Exception):
    """Raised when a page could not be fetched after all retries."""

    pass


class InvalidQueryException(ValueError):
    """Raised when a query lacks search terms or carries a malformed cluster ID."""

    pass
