from __future__ import annotations

import asyncio
import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    async_playwright,
)

from ..config import Settings
from ..errors import SessionLaunchError

logger = logging.getLogger(__name__)

LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@dataclass(slots=True)
class BrowserSession:
    """One browser process plus its single page, owned by one task."""

    page: Page
    browser: Browser | None = None
    context: BrowserContext | None = None
    driver: Any = None
    debugging_port: int | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_monotonic: float = field(default_factory=time.monotonic)
    closed: bool = False

    def age_s(self) -> float:
        return time.monotonic() - self.started_monotonic


class BrowserSessionManager:
    """Launches a fresh Chromium per task and guarantees its teardown."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.acquired = 0
        self.released = 0
        self._lock = asyncio.Lock()

    @property
    def active(self) -> int:
        return self.acquired - self.released

    async def acquire(self) -> BrowserSession:
        try:
            session = await self._launch()
        except SessionLaunchError:
            raise
        except Exception as exc:
            logger.exception("Browser launch failed")
            raise SessionLaunchError(f"Failed to launch browser: {exc}") from exc
        async with self._lock:
            self.acquired += 1
        logger.info(
            "Browser session acquired",
            extra={"session_id": session.session_id, "debugging_port": session.debugging_port},
        )
        return session

    async def release(self, session: BrowserSession | None) -> None:
        if session is None or session.closed:
            return
        session.closed = True
        try:
            await self._terminate(session)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to terminate browser session", extra={"session_id": session.session_id})
        async with self._lock:
            self.released += 1
        logger.info(
            "Browser session released",
            extra={"session_id": session.session_id, "age_s": round(session.age_s(), 3)},
        )

    async def _launch(self) -> BrowserSession:
        port = _free_port()
        driver = await async_playwright().start()
        browser: Browser | None = None
        try:
            browser = await driver.chromium.launch(
                headless=self._settings.headless,
                args=[*LAUNCH_ARGS, f"--remote-debugging-port={port}"],
            )
            context = await browser.new_context(
                viewport={"width": self._settings.viewport_width, "height": self._settings.viewport_height},
                bypass_csp=True,
            )
            page = await context.new_page()
        except PlaywrightError as exc:
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError:
                    logger.debug("Browser close after failed launch raised", exc_info=True)
            await driver.stop()
            raise SessionLaunchError(f"Failed to launch browser: {exc}") from exc

        return BrowserSession(
            page=page,
            browser=browser,
            context=context,
            driver=driver,
            debugging_port=port,
        )

    async def _terminate(self, session: BrowserSession) -> None:
        # The browser must go down even when the page is wedged.
        if session.context is not None:
            try:
                await session.context.close()
            except PlaywrightError:
                logger.warning("Browser context close failed", exc_info=True)
        try:
            if session.browser is not None:
                await session.browser.close()
        finally:
            if session.driver is not None:
                await session.driver.stop()
