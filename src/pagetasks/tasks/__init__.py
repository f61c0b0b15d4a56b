from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..types import TaskKind
from .accessibility import AccessibilityTask
from .base import TaskContext, TaskStrategy
from .broken_links import BrokenLinksTask
from .js_errors import JsErrorsTask
from .performance import PerformanceTask
from .scheduled_actions import ScheduledActionsTask
from .snapshot import SnapshotTask


def default_registry() -> Mapping[TaskKind, TaskStrategy]:
    strategies: list[TaskStrategy] = [
        PerformanceTask(),
        AccessibilityTask(),
        JsErrorsTask(),
        BrokenLinksTask(),
        SnapshotTask(),
        ScheduledActionsTask(),
    ]
    return MappingProxyType({strategy.kind: strategy for strategy in strategies})


__all__ = [
    "AccessibilityTask",
    "BrokenLinksTask",
    "JsErrorsTask",
    "PerformanceTask",
    "ScheduledActionsTask",
    "SnapshotTask",
    "TaskContext",
    "TaskStrategy",
    "default_registry",
]
