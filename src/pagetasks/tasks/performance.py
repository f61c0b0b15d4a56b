from __future__ import annotations

import logging
import math
from typing import Any

from playwright.async_api import Page

from ..errors import AuditCapabilityError
from ..types import TaskKind, TaskRequest
from .base import TaskContext, TaskStrategy

logger = logging.getLogger(__name__)

_METRICS = {
    "firstContentfulPaint": "first-contentful-paint",
    "largestContentfulPaint": "largest-contentful-paint",
    "totalBlockingTime": "total-blocking-time",
}


def score_percent(score: float) -> int:
    """0-1 score to a 0-100 integer, halves rounded up."""

    return int(math.floor(score * 100 + 0.5))


def summarize_report(report: dict[str, Any]) -> dict[str, Any]:
    categories = report.get("categories") or {}
    performance = categories.get("performance") or {}
    score = performance.get("score")
    if not isinstance(score, (int, float)):
        raise AuditCapabilityError("Performance audit returned no score")

    audits = report.get("audits") or {}
    payload: dict[str, Any] = {"score": score_percent(float(score))}
    for field_name, audit_id in _METRICS.items():
        audit = audits.get(audit_id)
        if not isinstance(audit, dict):
            raise AuditCapabilityError(f"Performance audit is missing '{audit_id}'")
        payload[field_name] = audit.get("displayValue")
    return payload


class PerformanceTask(TaskStrategy):
    kind = TaskKind.PERFORMANCE

    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        if context.auditor is None:
            raise AuditCapabilityError("No performance audit capability configured")
        port = context.session.debugging_port
        if port is None:
            raise AuditCapabilityError("Browser session exposes no debugging port")
        report = await context.auditor.audit(request.target_url, port, ["performance"])
        payload = summarize_report(report)
        logger.info("Performance audit complete", extra={"score": payload["score"]})
        return payload
