from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page

from ..browser.links import LinkValidator, extract_links
from ..browser.navigation import navigate
from ..errors import InvalidRequest
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy

logger = logging.getLogger(__name__)


class BrokenLinksTask(TaskStrategy):
    kind = TaskKind.BROKEN_LINKS

    def prepare(self, request: TaskRequest) -> None:
        raw = request.params.get("maxLinks")
        if raw is None:
            return
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            raise InvalidRequest("'maxLinks' must be a positive integer.")

    @staticmethod
    def link_cap(request: TaskRequest, configured: int) -> int:
        requested = request.params.get("maxLinks")
        if isinstance(requested, int) and not isinstance(requested, bool) and requested > 0:
            return min(requested, configured)
        return configured

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        settings = context.settings
        await navigate(page, request.target_url, self.navigation_timeout_ms(settings))

        links = await extract_links(page)
        cap = self.link_cap(request, settings.max_links_to_check)
        logger.info("Found %d unique links. Checking up to %d...", len(links), cap)

        validator = LinkValidator(
            probe_timeout_ms=settings.link_check_timeout_ms,
            concurrency=settings.link_check_concurrency,
        )
        results = await validator.check_all(page, links, cap)
        broken = [result.as_dict() for result in results if result.broken]
        return {
            "checkedLinks": len(results),
            "totalLinksFound": len(links),
            "brokenLinkCount": len(broken),
            "brokenLinks": broken,
        }
