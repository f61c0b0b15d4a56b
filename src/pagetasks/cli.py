from __future__ import annotations

import asyncio
import sys
from typing import Optional

import orjson
import typer
import uvicorn

from .config import Settings
from .logging import setup_logging

app = typer.Typer(no_args_is_help=True)


def main() -> None:
    app()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to bind (defaults to HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to listen on (defaults to PORT)"),
) -> None:
    """Run the HTTP task service."""

    from .server.app import create_app

    settings = Settings.from_env()
    if host:
        settings.host = host
    if port:
        settings.port = port
    settings.ensure_directories()
    setup_logging(settings.log_level, settings.log_file())
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


@app.command()
def run(
    task: str = typer.Argument(..., help="Task name, e.g. accessibility or brokenLinks"),
    url: str = typer.Argument(..., help="Target page URL"),
    action_config: Optional[str] = typer.Option(None, help="JSON actionConfig for scheduled-actions"),
    monitor_id: Optional[str] = typer.Option(None, help="Monitor identifier used in artifact paths"),
    user_id: Optional[str] = typer.Option(None, help="Owner identifier used in artifact paths"),
    headful: bool = typer.Option(False, help="Run browser in headed mode"),
) -> None:
    """Execute a single task locally and print the result envelope."""

    from .server.app import build_orchestrator

    settings = Settings.from_env()
    settings.headless = not headful
    settings.ensure_directories()
    setup_logging(settings.log_level, settings.log_file())

    params = {}
    if action_config:
        try:
            params["actionConfig"] = orjson.loads(action_config)
        except orjson.JSONDecodeError as exc:
            raise typer.BadParameter(f"action-config is not valid JSON: {exc}") from exc

    orchestrator = build_orchestrator(settings)
    result = asyncio.run(
        orchestrator.submit(task, url, params=params, owner_id=user_id, monitor_id=monitor_id)
    )
    typer.echo(orjson.dumps(result.to_response(), option=orjson.OPT_INDENT_2).decode())
    if not result.ok:
        sys.exit(1)
