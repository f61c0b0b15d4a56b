from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from playwright.async_api import Error as PlaywrightError, Page

from ..types import BROKEN_LINK_SENTINEL, LinkCheckResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINKS = 50
DEFAULT_PROBE_TIMEOUT_MS = 8_000

_EXTRACT_LINKS_JS = "anchors => anchors.map(a => a.href)"

_PROBE_JS = """
async ([url, timeoutMs, sentinel]) => {
    try {
        const response = await fetch(url, {
            method: 'HEAD',
            signal: AbortSignal.timeout(timeoutMs),
        });
        return response.status;
    } catch (error) {
        return sentinel;
    }
}
"""


def unique_http_links(hrefs: Iterable[object]) -> list[str]:
    """Absolute http(s) links in first-seen order, deduplicated by exact value."""

    seen: set[str] = set()
    links: list[str] = []
    for href in hrefs:
        if not isinstance(href, str) or not href:
            continue
        if not (href.startswith("http://") or href.startswith("https://")):
            continue
        if href in seen:
            continue
        seen.add(href)
        links.append(href)
    return links


async def extract_links(page: Page) -> list[str]:
    hrefs = await page.eval_on_selector_all("a", _EXTRACT_LINKS_JS)
    return unique_http_links(hrefs or [])


class LinkValidator:
    """Probes links from inside the page with bounded concurrency."""

    def __init__(
        self,
        probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
        concurrency: int = 5,
    ) -> None:
        self._probe_timeout_ms = probe_timeout_ms
        self._concurrency = max(1, concurrency)

    async def check_all(self, page: Page, links: Sequence[str], cap: int = DEFAULT_MAX_LINKS) -> list[LinkCheckResult]:
        selected = list(links[: max(cap, 0)])
        semaphore = asyncio.Semaphore(self._concurrency)

        async def probe_with_semaphore(url: str) -> LinkCheckResult:
            async with semaphore:
                return await self.check(page, url)

        # gather keeps input order regardless of completion order
        return list(await asyncio.gather(*(probe_with_semaphore(url) for url in selected)))

    async def check(self, page: Page, url: str) -> LinkCheckResult:
        try:
            status = await page.evaluate(_PROBE_JS, [url, self._probe_timeout_ms, BROKEN_LINK_SENTINEL])
        except PlaywrightError as exc:
            logger.error("Error checking link %s: %s", url, exc)
            status = BROKEN_LINK_SENTINEL
        if not isinstance(status, int):
            status = BROKEN_LINK_SENTINEL
        result = LinkCheckResult(url=url, status=status)
        if result.broken:
            logger.info("Found broken link %s (status %d)", url, status)
        return result
