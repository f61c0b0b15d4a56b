from __future__ import annotations

from typing import Any

from playwright.async_api import Page

from ..browser.navigation import navigate
from ..errors import ConfigurationError, TaskExecutionError
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy

IMPACT_LEVELS = ("critical", "serious", "moderate", "minor")
TOP_VIOLATIONS = 3


def summarize_axe_results(results: dict[str, Any]) -> dict[str, Any]:
    violations = results.get("violations") or []
    passes = results.get("passes") or []
    counts = {level: 0 for level in IMPACT_LEVELS}
    for violation in violations:
        impact = violation.get("impact")
        if impact in counts:
            counts[impact] += 1
    top = [
        {
            "description": violation.get("help"),
            "help": violation.get("help"),
            "impact": violation.get("impact"),
        }
        for violation in violations[:TOP_VIOLATIONS]
    ]
    return {"violations": counts, "passes": len(passes), "topViolations": top}


class AccessibilityTask(TaskStrategy):
    kind = TaskKind.ACCESSIBILITY

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        if not context.axe_source:
            raise ConfigurationError("axe-core script is not loaded")
        await navigate(page, request.target_url, self.navigation_timeout_ms(context.settings))
        await page.evaluate(context.axe_source)
        results = await page.evaluate("async () => await axe.run()")
        if not isinstance(results, dict):
            raise TaskExecutionError("Accessibility engine returned no results")
        return summarize_axe_results(results)
