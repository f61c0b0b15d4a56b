from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from playwright.async_api import ConsoleMessage, Page

logger = logging.getLogger(__name__)

UNCAUGHT_EXCEPTION = "Uncaught Exception"
CONSOLE_ERROR = "Console Error"


@dataclass(slots=True, eq=False)
class ErrorCollector:
    """Buffers page errors in arrival order, keeping at most ``capacity`` entries."""

    capacity: int = 10
    total: int = 0
    entries: list[dict[str, str]] = field(default_factory=list)

    def record(self, kind: str, message: str) -> None:
        self.total += 1
        if len(self.entries) < self.capacity:
            self.entries.append({"type": kind, "message": message})

    def on_page_error(self, error: Any) -> None:
        message = getattr(error, "message", None)
        self.record(UNCAUGHT_EXCEPTION, str(message if message is not None else error))

    def on_console(self, message: ConsoleMessage) -> None:
        if str(message.type).lower() == "error":
            self.record(CONSOLE_ERROR, message.text)

    @asynccontextmanager
    async def listening(self, page: Page) -> AsyncIterator["ErrorCollector"]:
        page.on("pageerror", self.on_page_error)
        page.on("console", self.on_console)
        try:
            yield self
        finally:
            page.remove_listener("pageerror", self.on_page_error)
            page.remove_listener("console", self.on_console)
            logger.debug("Error collector detached", extra={"captured": self.total})
