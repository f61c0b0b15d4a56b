from __future__ import annotations

from typing import Any

from playwright.async_api import Page

from ..browser.collector import ErrorCollector
from ..browser.navigation import navigate
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy

MAX_REPORTED_ERRORS = 10


class JsErrorsTask(TaskStrategy):
    kind = TaskKind.JS_ERRORS

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        collector = ErrorCollector(capacity=MAX_REPORTED_ERRORS)
        async with collector.listening(page):
            await navigate(page, request.target_url, self.navigation_timeout_ms(context.settings))
        return {"errorCount": collector.total, "errors": list(collector.entries)}
