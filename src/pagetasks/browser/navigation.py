from __future__ import annotations

import logging

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ..errors import NavigationTimeout

logger = logging.getLogger(__name__)

WAIT_UNTIL = "networkidle"


async def navigate(page: Page, url: str, timeout_ms: int) -> None:
    """Open ``url`` and wait for the network to go idle."""

    logger.debug("Navigating", extra={"url": url, "timeout_ms": timeout_ms})
    try:
        await page.goto(url, wait_until=WAIT_UNTIL, timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeout(url, timeout_ms) from exc
