from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Any

from playwright.async_api import Page

from ..browser.navigation import navigate
from ..config import Settings
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy, artifact_path

logger = logging.getLogger(__name__)


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class SnapshotTask(TaskStrategy):
    kind = TaskKind.SNAPSHOT

    def navigation_timeout_ms(self, settings: Settings) -> int:
        return settings.snapshot_timeout_ms

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        await navigate(page, request.target_url, self.navigation_timeout_ms(context.settings))
        inner_text = await page.evaluate("() => document.body ? document.body.innerText : ''")
        screenshot = await page.screenshot(full_page=True)
        document = await page.pdf(format="A4", print_background=True)

        timestamp = context.clock()
        screenshot_path = artifact_path("snapshots", request, "screenshot", timestamp, "png")
        pdf_path = artifact_path("snapshots", request, "document", timestamp, "pdf")

        try:
            async with asyncio.TaskGroup() as uploads:
                screenshot_upload = uploads.create_task(context.store.put(screenshot_path, screenshot, "image/png"))
                pdf_upload = uploads.create_task(context.store.put(pdf_path, document, "application/pdf"))
        except ExceptionGroup as failures:
            logger.error("Snapshot upload failed", extra={"failures": len(failures.exceptions)})
            raise failures.exceptions[0] from failures
        screenshot_url, pdf_url = screenshot_upload.result(), pdf_upload.result()
        logger.info("Snapshot stored", extra={"screenshot_path": screenshot_path, "pdf_path": pdf_path})
        return {
            "screenshotUrl": screenshot_url,
            "pdfUrl": pdf_url,
            "contentHash": content_hash(inner_text or ""),
            "capturedAt": timestamp,
        }
