# fetcher.py
import asyncio
import logging
from typing import Optional

import aiohttp

from scholar_papers.exceptions import CaptchaException, FetchException
from scholar_papers.models import PageStatus
from scholar_papers.utils import classify_page, get_random_delay, get_random_user_agent


class Fetcher:
    def __init__(self, min_delay=2, max_delay=5, max_retries=3, timeout=10):
        """
        Initializes the Fetcher.

        Requests are sent one at a time, each preceded by a random delay, so
        that Google Scholar sees a slow, browser-like client.

        Args:
            min_delay (int): Minimum delay before a request in seconds. Defaults to 2.
            max_delay (int): Maximum delay before a request in seconds. Defaults to 5.
            max_retries (int): Maximum number of attempts for a failed request. Defaults to 3.
            timeout (int): Total timeout of one request in seconds. Defaults to 10.

        """
        self.logger = logging.getLogger(__name__)
        self.client: Optional[aiohttp.ClientSession] = None
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.max_retries = max_retries
        self.timeout = timeout
        self._lock = asyncio.Lock()
        # Statistics
        self.successful_requests = 0
        self.failed_requests = 0

    async def _create_client(self) -> aiohttp.ClientSession:
        """Creates an aiohttp ClientSession if it doesn't exist or is closed."""
        if self.client is None or self.client.closed:
            self.client = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self.client

    async def _get_delay(self) -> float:
        """Calculates a random delay before making a request."""
        return get_random_delay(self.min_delay, self.max_delay)

    async def fetch_page(self, url: str) -> str:
        """
        Fetches a page, retrying on network errors.

        Raises:
            CaptchaException: If Google Scholar answered with a block page.
            FetchException: If every attempt failed.

        """
        async with self._lock:  # one request in flight at a time
            return await self._fetch_page(url)

    async def _fetch_page(self, url: str) -> str:
        headers = {"User-Agent": get_random_user_agent()}
        await self._create_client()
        assert self.client is not None, "Client session must be initialized by _create_client"

        last_error: Optional[BaseException] = None
        for attempt in range(self.max_retries):
            try:
                await asyncio.sleep(await self._get_delay())
                async with self.client.get(url, headers=headers) as response:
                    response.raise_for_status()
                    html_content = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self.failed_requests += 1
                last_error = e
                self.logger.warning(f"Attempt {attempt + 1}/{self.max_retries} failed for {url}: {type(e).__name__}: {e}")
                continue

            if classify_page(html_content) is PageStatus.BLOCKED:
                self.failed_requests += 1
                self.logger.warning(f"CAPTCHA detected for {url}. HTML snippet: {html_content[:500]}...")
                raise CaptchaException(f"Request blocked by Google Scholar: {url}")

            self.successful_requests += 1
            self.logger.debug(f"Fetched {url} ({len(html_content)} characters)")
            return html_content

        self.logger.error(f"Failed to fetch {url} after {self.max_retries} attempts.")
        raise FetchException(f"Failed to fetch {url}: {last_error}")

    async def close(self):
        """Closes the aiohttp ClientSession."""
        if self.client and not self.client.closed:
            await self.client.close()
