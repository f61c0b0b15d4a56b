from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ..errors import MalformedStep, SelectorTimeout, UnknownStepType
from ..types import ActionStep

logger = logging.getLogger(__name__)

INTERACTION_TIMEOUT_MS = 10_000
WAIT_FOR_SELECTOR_TIMEOUT_MS = 15_000


class StepExecutor:
    """Runs one scripted interaction step against a page."""

    def __init__(
        self,
        interaction_timeout_ms: int = INTERACTION_TIMEOUT_MS,
        wait_timeout_ms: int = WAIT_FOR_SELECTOR_TIMEOUT_MS,
    ) -> None:
        self._interaction_timeout_ms = interaction_timeout_ms
        self._wait_timeout_ms = wait_timeout_ms
        self._handlers: dict[str, Callable[[Page, ActionStep], Awaitable[None]]] = {
            "type": self.type_text,
            "click": self.click,
            "waitForSelector": self.wait_for_selector,
            "wait": self.wait,
        }

    @staticmethod
    def parse(raw: Mapping[str, Any] | ActionStep) -> ActionStep:
        if isinstance(raw, ActionStep):
            return raw
        kind = raw.get("type")
        if not isinstance(kind, str) or not kind:
            raise UnknownStepType(str(kind))
        return ActionStep.model_validate(raw)

    async def run(self, page: Page, step: Mapping[str, Any] | ActionStep, index: int = 0) -> None:
        action = self.parse(step)
        handler = self._handlers.get(action.type)
        if handler is None:
            raise UnknownStepType(action.type)
        logger.info("Executing step", extra={"step_index": index, "step_type": action.type})
        await handler(page, action)

    async def type_text(self, page: Page, step: ActionStep) -> None:
        selector = self._require_selector(step)
        if step.text is None:
            raise MalformedStep("type step requires 'text'")
        await self._await_selector(page, selector, self._interaction_timeout_ms)
        await page.type(selector, step.text)

    async def click(self, page: Page, step: ActionStep) -> None:
        selector = self._require_selector(step)
        await self._await_selector(page, selector, self._interaction_timeout_ms)
        await page.click(selector)

    async def wait_for_selector(self, page: Page, step: ActionStep) -> None:
        selector = self._require_selector(step)
        await self._await_selector(page, selector, self._wait_timeout_ms)

    async def wait(self, page: Page, step: ActionStep) -> None:
        try:
            duration_ms = step.duration_ms()
        except ValueError as exc:
            raise MalformedStep(f"wait step has non-numeric duration {step.duration!r}") from exc
        if duration_ms is None:
            raise MalformedStep("wait step requires 'duration'")
        await asyncio.sleep(max(duration_ms, 0) / 1000)

    @staticmethod
    def _require_selector(step: ActionStep) -> str:
        if not step.selector:
            raise MalformedStep(f"{step.type} step requires 'selector'")
        return step.selector

    @staticmethod
    async def _await_selector(page: Page, selector: str, timeout_ms: int) -> None:
        try:
            await page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise SelectorTimeout(selector, timeout_ms) from exc
