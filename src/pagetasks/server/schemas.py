from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskPayload(BaseModel):
    """Inbound body; every field is optional so validation happens in the orchestrator."""

    url: str | None = None
    action_config: Any = Field(default=None, alias="actionConfig")
    monitor_id: str | None = Field(default=None, alias="monitorId")
    user_id: str | None = Field(default=None, alias="userId")
    correlation_id: str | None = Field(default=None, alias="correlationId")
    max_links: Any = Field(default=None, alias="maxLinks")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.action_config is not None:
            params["actionConfig"] = self.action_config
        if self.max_links is not None:
            params["maxLinks"] = self.max_links
        return params


class TaskList(BaseModel):
    tasks: list[str]
