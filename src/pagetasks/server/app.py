from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..audit import LighthouseAuditor, load_axe_source
from ..browser.session import BrowserSessionManager
from ..config import Settings
from ..core.orchestrator import TaskOrchestrator
from ..errors import InvalidRequest
from ..logging import setup_logging
from ..storage import MinioObjectStore
from ..types import TaskResult
from .schemas import TaskList, TaskPayload

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings) -> TaskOrchestrator:
    """Wire the production collaborators; any misconfiguration fails startup."""

    return TaskOrchestrator(
        settings=settings,
        sessions=BrowserSessionManager(settings),
        store=MinioObjectStore.from_settings(settings),
        auditor=LighthouseAuditor(settings.lighthouse_bin, timeout_s=settings.audit_timeout_s),
        axe_source=load_axe_source(settings.axe_script_path),
    )


def create_app(settings: Settings | None = None, orchestrator: TaskOrchestrator | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "orchestrator", None) is None:
            settings.ensure_directories()
            setup_logging(settings.log_level, settings.log_file())
            app.state.orchestrator = build_orchestrator(settings)
        logger.info("Page task service ready", extra={"env": settings.app_env, "port": settings.port})
        yield
        sessions = app.state.orchestrator.sessions
        logger.info(
            "Page task service stopping",
            extra={
                "sessions_acquired": sessions.acquired,
                "sessions_released": sessions.released,
                "sessions_active": sessions.active,
            },
        )

    app = FastAPI(
        title="Page Task Service",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "malformed body") if errors else "malformed body"
        error = InvalidRequest(f"Invalid request body: {detail}")
        logger.warning("Rejected request to %s: %s", request.url.path, detail)
        result = TaskResult.failure(error, request.path_params.get("task_name"))
        return JSONResponse(status_code=result.http_status, content=result.to_response())

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/v1/tasks", response_model=TaskList)
    async def list_tasks(orchestrator: TaskOrchestrator = Depends(get_orchestrator)) -> TaskList:
        return TaskList(tasks=orchestrator.task_names())

    @app.post("/api/v1/task/{task_name}")
    async def run_task(
        task_name: str,
        payload: TaskPayload | None = Body(default=None),
        x_correlation_id: str | None = Header(default=None),
        orchestrator: TaskOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        payload = payload or TaskPayload()
        result = await orchestrator.submit(
            task_name,
            payload.url,
            params=payload.params(),
            correlation_id=payload.correlation_id or x_correlation_id,
            owner_id=payload.user_id,
            monitor_id=payload.monitor_id,
        )
        return JSONResponse(status_code=result.http_status, content=result.to_response())

    return app


def get_orchestrator(request: Request) -> TaskOrchestrator:
    return request.app.state.orchestrator
