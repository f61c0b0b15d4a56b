from __future__ import annotations

import asyncio
import logging
from typing import Any

from playwright.async_api import Page

from ..browser.navigation import navigate
from ..browser.steps import StepExecutor
from ..errors import InvalidActionConfig
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy, artifact_path

logger = logging.getLogger(__name__)

INVALID_CONFIG_MESSAGE = "'actionConfig' is missing or invalid for scheduled-actions task."


def action_steps(request: TaskRequest) -> list[dict[str, Any]]:
    config = request.action_config
    if not isinstance(config, dict):
        raise InvalidActionConfig(INVALID_CONFIG_MESSAGE)
    steps = config.get("steps")
    if not isinstance(steps, list) or not steps:
        raise InvalidActionConfig(INVALID_CONFIG_MESSAGE)
    if not all(isinstance(step, dict) for step in steps):
        raise InvalidActionConfig(INVALID_CONFIG_MESSAGE)
    return steps


class ScheduledActionsTask(TaskStrategy):
    kind = TaskKind.SCHEDULED_ACTIONS

    def __init__(self, executor: StepExecutor | None = None) -> None:
        self._executor = executor or StepExecutor()

    def prepare(self, request: TaskRequest) -> None:
        action_steps(request)

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        steps = action_steps(request)
        settings = context.settings
        await navigate(page, request.target_url, self.navigation_timeout_ms(settings))

        for index, step in enumerate(steps):
            await self._executor.run(page, step, index)
            await asyncio.sleep(settings.step_settle_ms / 1000)

        await asyncio.sleep(settings.final_settle_ms / 1000)
        screenshot = await page.screenshot(full_page=True)
        path = artifact_path("monitors", request, "final-state", context.clock(), "png")
        url = await context.store.put(path, screenshot, "image/png")
        return {"stepsCompleted": len(steps), "finalScreenshotUrl": url}
