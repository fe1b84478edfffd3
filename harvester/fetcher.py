"""
Remote page download with proxy fallbacks, or rendered through a headless browser.
"""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import quote
import httpx
from .errors import FetchError

logger = logging.getLogger("harvester")

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class PageFetcher:
    """Fetches HTML directly, then through each proxy template in turn.

    A proxy template is a URL containing ``{url}``, which is replaced by the
    percent-encoded target, e.g. ``https://api.allorigins.win/raw?url={url}``.
    """

    def __init__(
        self,
        proxies: Optional[List[str]] = None,
        timeout: float = 30.0,
        use_browser: bool = False,
        wait_for_selector: Optional[str] = None,
        scrolls: int = 3,
        scroll_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.proxies = proxies or []
        self.timeout = timeout
        self.use_browser = use_browser
        self.wait_for_selector = wait_for_selector
        self.scrolls = scrolls
        self.scroll_delay = scroll_delay
        self._transport = transport

    def candidate_urls(self, url: str) -> List[str]:
        """Direct URL first, then one URL per proxy template."""
        encoded = quote(url, safe='')
        return [url] + [template.replace('{url}', encoded) for template in self.proxies]

    async def fetch(self, url: str) -> str:
        """Return the HTML of `url` from the first attempt that succeeds."""
        if self.use_browser:
            return await self._fetch_with_browser(url)

        failures = []
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=HEADERS,
            transport=self._transport
        ) as client:
            for attempt_url in self.candidate_urls(url):
                try:
                    response = await client.get(attempt_url)
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    logger.warning("Fetch via %s failed: %s", attempt_url, e)
                    failures.append(f"{attempt_url}: {e}")
                    continue

                if not response.text.strip():
                    logger.warning("Fetch via %s returned an empty body", attempt_url)
                    failures.append(f"{attempt_url}: empty response")
                    continue

                logger.info("Fetched %s (%d chars)", attempt_url, len(response.text))
                return response.text

        raise FetchError(url, failures)

    async def _fetch_with_browser(self, url: str) -> str:
        """Render `url` in headless Chromium so lazy images get real sources."""
        from playwright.async_api import async_playwright

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True)
                try:
                    page = await browser.new_page()
                    try:
                        return await self._render(page, url)
                    finally:
                        await page.close()
                finally:
                    await browser.close()
        except Exception as e:
            raise FetchError(url, [f"browser: {e}"]) from e

    async def _render(self, page, url: str) -> str:
        timeout_ms = int(self.timeout * 1000)
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)

        if self.wait_for_selector:
            try:
                await page.wait_for_selector(self.wait_for_selector, timeout=timeout_ms)
            except Exception as e:
                logger.warning("Timeout waiting for selector %r: %s", self.wait_for_selector, e)

        # Scrolling to the bottom triggers lazy loaders.
        for _ in range(self.scrolls):
            await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
            await asyncio.sleep(self.scroll_delay)

        html = await page.content()
        logger.info("Rendered %s (%d chars)", url, len(html))
        return html
