from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import orjson

from ..errors import AuditCapabilityError
from .base import AuditCapability

logger = logging.getLogger(__name__)


class LighthouseAuditor(AuditCapability):
    """Runs the Lighthouse CLI against an already running Chromium."""

    def __init__(self, binary: str = "lighthouse", timeout_s: float = 120) -> None:
        self._binary = binary
        self._timeout_s = timeout_s

    def command(self, target_url: str, port: int, categories: Sequence[str]) -> list[str]:
        return [
            self._binary,
            target_url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={','.join(categories)}",
            "--quiet",
        ]

    async def audit(self, target_url: str, port: int, categories: Sequence[str]) -> dict[str, Any]:
        cmd = self.command(target_url, port, categories)
        logger.info("Starting lighthouse audit", extra={"url": target_url, "port": port})
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise AuditCapabilityError(f"Unable to start lighthouse: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout_s)
        except asyncio.TimeoutError as exc:
            raise AuditCapabilityError(f"Lighthouse audit timed out after {self._timeout_s}s") from exc
        finally:
            # Also reached when the caller cancels the audit.
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-500:]
            raise AuditCapabilityError(f"Lighthouse exited with code {proc.returncode}: {tail}")

        try:
            report = orjson.loads(stdout)
        except orjson.JSONDecodeError as exc:
            raise AuditCapabilityError("Lighthouse produced invalid JSON output") from exc
        if not isinstance(report, dict):
            raise AuditCapabilityError("Lighthouse report is not an object")
        return report
