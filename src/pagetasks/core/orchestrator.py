from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Mapping

from ..audit.base import AuditCapability
from ..browser.session import BrowserSession, BrowserSessionManager
from ..config import Settings
from ..errors import ConfigurationError, PageTaskError, TaskExecutionError, TaskTimeout, UnknownTask
from ..logging import reset_task_context, set_task_context
from ..storage.base import ObjectStore
from ..tasks import default_registry
from ..tasks.base import TaskContext, TaskStrategy, epoch_ms
from ..types import TaskKind, TaskRequest, TaskResult, validate_target_url

logger = logging.getLogger(__name__)


class TaskOrchestrator:
    """Entry point running one inspection task per request in its own browser session.

    Requests are validated before any browser is launched. Once a session is
    acquired it is released on every exit path, and every failure raised while
    the task runs is turned into an error ``TaskResult`` instead of propagating.
    """

    def __init__(
        self,
        settings: Settings,
        sessions: BrowserSessionManager,
        store: ObjectStore | None,
        auditor: AuditCapability | None = None,
        axe_source: str | None = None,
        registry: Mapping[TaskKind, TaskStrategy] | None = None,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        if store is None:
            raise ConfigurationError("Object storage is not configured; artifacts cannot be saved")
        self._settings = settings
        self._sessions = sessions
        self._store = store
        self._auditor = auditor
        self._axe_source = axe_source
        self._registry = registry if registry is not None else default_registry()
        self._clock = clock

    @property
    def sessions(self) -> BrowserSessionManager:
        return self._sessions

    def task_names(self) -> list[str]:
        return [kind.value for kind in self._registry]

    def resolve(self, task_name: str) -> TaskStrategy:
        try:
            kind = TaskKind(task_name)
        except ValueError:
            raise UnknownTask(task_name) from None
        strategy = self._registry.get(kind)
        if strategy is None:
            raise UnknownTask(task_name)
        return strategy

    def build_request(
        self,
        task_name: str,
        url: str | None,
        params: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
        owner_id: str | None = None,
        monitor_id: str | None = None,
    ) -> TaskRequest:
        target_url = validate_target_url(url)
        strategy = self.resolve(task_name)
        return TaskRequest(
            task_kind=strategy.kind,
            target_url=target_url,
            params=dict(params or {}),
            correlation_id=correlation_id,
            owner_id=owner_id,
            monitor_id=monitor_id,
        )

    async def submit(
        self,
        task_name: str,
        url: str | None,
        params: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
        owner_id: str | None = None,
        monitor_id: str | None = None,
    ) -> TaskResult:
        """Validate raw request fields and execute; always returns an envelope."""

        try:
            request = self.build_request(task_name, url, params, correlation_id, owner_id, monitor_id)
        except PageTaskError as exc:
            logger.warning(
                "Rejected task %r: %s",
                task_name,
                exc,
                extra={"code": exc.code, "correlation_id": correlation_id},
            )
            return TaskResult.failure(exc, task_name)
        return await self.execute(request)

    async def execute(self, request: TaskRequest) -> TaskResult:
        task_kind = request.task_kind.value
        token = set_task_context(
            task_kind=task_kind,
            target_url=request.target_url,
            correlation_id=request.correlation_id,
        )
        try:
            return await self._execute(request)
        finally:
            reset_task_context(token)

    async def _execute(self, request: TaskRequest) -> TaskResult:
        task_kind = request.task_kind.value
        started = time.monotonic()
        logger.info("Received task '%s' for URL: %s", task_kind, request.target_url)

        session: BrowserSession | None = None
        try:
            strategy = self.resolve(task_kind)
            strategy.prepare(request)
            session = await self._sessions.acquire()
            payload = await self._run(strategy, session, request)
            result = TaskResult.success(task_kind, payload)
        except PageTaskError as exc:
            logger.error("Error executing task '%s' for URL %s: %s", task_kind, request.target_url, exc)
            result = TaskResult.failure(exc, task_kind)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure in task '%s'", task_kind)
            error = TaskExecutionError(str(exc) or "An internal error occurred.")
            result = TaskResult.failure(error, task_kind)
        finally:
            await self._sessions.release(session)

        logger.info(
            "Task '%s' finished with status %s",
            task_kind,
            result.status,
            extra={
                "duration_ms": int((time.monotonic() - started) * 1000),
                "code": result.code,
                "session_opened": session is not None,
            },
        )
        return result

    async def _run(self, strategy: TaskStrategy, session: BrowserSession, request: TaskRequest) -> dict[str, Any]:
        context = TaskContext(
            settings=self._settings,
            session=session,
            store=self._store,
            auditor=self._auditor,
            axe_source=self._axe_source,
            clock=self._clock,
        )
        coro = strategy.run(session.page, request, context)
        ceiling = self._settings.task_timeout_s
        if not ceiling:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=ceiling)
        except asyncio.TimeoutError as exc:
            raise TaskTimeout(f"Task exceeded its {ceiling}s time limit") from exc
