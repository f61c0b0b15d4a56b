from __future__ import annotations


class PageTaskError(Exception):
    """Base class for task service exceptions."""

    code: str = "task_error"
    http_status: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(PageTaskError):
    """Raised at startup when a required collaborator is not configured."""

    code = "configuration_error"


class InvalidRequest(PageTaskError):
    """Raised when a required request field is missing or malformed."""

    code = "invalid_request"
    http_status = 400


class UnknownTask(PageTaskError):
    """Raised when the requested task kind is not registered."""

    code = "unknown_task"
    http_status = 404

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Task '{name}' not found.")


class SessionLaunchError(PageTaskError):
    """Raised when the browser process cannot be started."""

    code = "session_launch_failed"


class NavigationTimeout(PageTaskError):
    """Raised when a page does not finish loading within its budget."""

    code = "navigation_timeout"

    def __init__(self, url: str, timeout_ms: int) -> None:
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"Navigation to {url} timed out after {timeout_ms}ms")


class StepError(PageTaskError):
    """Raised when a scripted interaction step fails."""

    code = "step_failed"


class SelectorTimeout(StepError):
    """Raised when a selector does not appear within the step deadline."""

    code = "selector_timeout"

    def __init__(self, selector: str, timeout_ms: int) -> None:
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms}ms waiting for selector {selector!r}")


class UnknownStepType(StepError):
    """Raised for a step whose type is not supported."""

    code = "unknown_step_type"

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown action type: {kind}")


class MalformedStep(StepError):
    """Raised when a known step type lacks a required field."""

    code = "malformed_step"


class InvalidActionConfig(PageTaskError):
    """Raised when scheduled actions are missing or not a step list."""

    code = "invalid_action_config"


class StorageWriteError(PageTaskError):
    """Raised when an artifact cannot be written to object storage."""

    code = "storage_write_failed"


class AuditCapabilityError(PageTaskError):
    """Raised when the external performance audit fails or returns no score."""

    code = "audit_failed"


class TaskTimeout(PageTaskError):
    """Raised when a task exceeds its overall wall-clock ceiling."""

    code = "task_timeout"


class TaskExecutionError(PageTaskError):
    """Raised for unexpected failures inside a task strategy."""

    code = "task_execution_failed"
