from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidRequest, PageTaskError

BROKEN_LINK_SENTINEL = 599


class TaskKind(str, Enum):
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    JS_ERRORS = "js-errors"
    BROKEN_LINKS = "brokenLinks"
    SNAPSHOT = "snapshot"
    SCHEDULED_ACTIONS = "scheduled-actions"

    @classmethod
    def names(cls) -> list[str]:
        return [kind.value for kind in cls]


def validate_target_url(url: str | None) -> str:
    if url is None or not str(url).strip():
        raise InvalidRequest("URL is a required parameter.")
    cleaned = str(url).strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidRequest("URL must be an absolute http(s) URL.")
    return cleaned


class TaskRequest(BaseModel):
    """A validated inspection request for one task kind."""

    task_kind: TaskKind
    target_url: str = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)
    correlation_id: str | None = None
    owner_id: str | None = None
    monitor_id: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def action_config(self) -> Any:
        return self.params.get("actionConfig")


class ActionStep(BaseModel):
    """Single scripted interaction; the type is checked when the step runs."""

    type: str
    selector: str | None = None
    text: str | None = None
    duration: int | float | str | None = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    def duration_ms(self) -> int | None:
        if self.duration is None:
            return None
        if isinstance(self.duration, (int, float)):
            return int(self.duration)
        return int(float(str(self.duration).strip()))


@dataclass(slots=True, frozen=True)
class LinkCheckResult:
    url: str
    status: int

    @property
    def broken(self) -> bool:
        return self.status >= 400

    def as_dict(self) -> dict[str, Any]:
        return {"url": self.url, "status": self.status}


ResultStatus = Literal["success", "error"]


class TaskResult(BaseModel):
    status: ResultStatus
    task_kind: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    message: str | None = None
    code: str | None = None
    http_status: int = 200

    @classmethod
    def success(cls, task_kind: str, payload: dict[str, Any]) -> "TaskResult":
        return cls(status="success", task_kind=task_kind, payload=payload)

    @classmethod
    def failure(cls, error: PageTaskError, task_kind: str | None = None) -> "TaskResult":
        return cls(
            status="error",
            task_kind=task_kind,
            message=error.message,
            code=error.code,
            http_status=error.http_status,
        )

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_response(self) -> dict[str, Any]:
        if self.ok:
            return {"status": "success", **self.payload}
        return {"status": "error", "message": self.message, "code": self.code}
