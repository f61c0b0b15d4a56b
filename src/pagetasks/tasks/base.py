from __future__ import annotations

import abc
import time
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar

from playwright.async_api import Page

from ..audit.base import AuditCapability
from ..browser.session import BrowserSession
from ..config import Settings
from ..storage.base import ObjectStore
from ..types import TaskKind, TaskRequest


def epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class TaskContext:
    """Collaborators available to a strategy while it holds a session."""

    settings: Settings
    session: BrowserSession
    store: ObjectStore
    auditor: AuditCapability | None = None
    axe_source: str | None = None
    clock: Callable[[], int] = field(default=epoch_ms)


class TaskStrategy(abc.ABC):
    """Task-kind specific logic run against a live page."""

    kind: ClassVar[TaskKind]

    def navigation_timeout_ms(self, settings: Settings) -> int:
        return settings.navigation_timeout_ms

    def prepare(self, request: TaskRequest) -> None:
        """Validate task parameters before a browser session is opened."""

    @abc.abstractmethod
    async def run(self, page: Page, request: TaskRequest, context: TaskContext) -> dict[str, Any]:
        """Execute the task and return its result payload."""


def artifact_path(category: str, request: TaskRequest, stem: str, timestamp: int, extension: str) -> str:
    owner = request.owner_id or "unknown"
    monitor = request.monitor_id or "unknown"
    return f"{category}/{owner}/{monitor}/{stem}-{timestamp}.{extension}"
