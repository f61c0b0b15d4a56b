from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from pagetasks.audit.base import AuditCapability
from pagetasks.browser.session import BrowserSession, BrowserSessionManager
from pagetasks.config import Settings
from pagetasks.core.orchestrator import TaskOrchestrator
from pagetasks.errors import SessionLaunchError, StorageWriteError
from pagetasks.storage.base import ObjectStore


@dataclass
class DummyConsoleMessage:
    type: str
    text: str


@dataclass
class DummyPageError:
    message: str


class DummyPage:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.url = "about:blank"
        self.hrefs: list[Any] = []
        self.link_status: dict[str, int] = {}
        self.link_errors: set[str] = set()
        self.missing_selectors: set[str] = set()
        self.inner_text = "Example Domain"
        self.axe_results: dict[str, Any] = {"violations": [], "passes": []}
        self.goto_timeout = False
        self.on_goto: Callable[["DummyPage"], None] | None = None
        self.listeners: dict[str, list[Callable[[Any], None]]] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def goto(self, url: str, wait_until: str, timeout: int) -> None:
        self.calls.append(("goto", (url,), {"wait_until": wait_until, "timeout": timeout}))
        if self.goto_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self.url = url
        if self.on_goto is not None:
            self.on_goto(self)

    async def wait_for_selector(self, selector: str, timeout: int) -> None:
        self.calls.append(("wait_for_selector", (selector,), {"timeout": timeout}))
        if selector in self.missing_selectors:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def type(self, selector: str, text: str) -> None:
        self.calls.append(("type", (selector, text), {}))

    async def click(self, selector: str) -> None:
        self.calls.append(("click", (selector,), {}))

    async def eval_on_selector_all(self, selector: str, script: str) -> list[Any]:
        self.calls.append(("eval_on_selector_all", (selector,), {}))
        return list(self.hrefs)

    async def add_script_tag(self, content: str) -> None:
        self.calls.append(("add_script_tag", (len(content),), {}))

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if isinstance(arg, list):
            url, _timeout_ms, sentinel = arg
            self.calls.append(("probe", (url,), {}))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(0)
                if url in self.link_errors:
                    raise PlaywrightError("Execution context was destroyed")
                return self.link_status.get(url, 200)
            finally:
                self.in_flight -= 1
        self.calls.append(("evaluate", (script,), {}))
        if "axe.run" in script:
            return self.axe_results
        if "innerText" in script:
            return self.inner_text
        return None

    async def screenshot(self, full_page: bool) -> bytes:
        self.calls.append(("screenshot", tuple(), {"full_page": full_page}))
        return b"\x89PNG-fake"

    async def pdf(self, format: str, print_background: bool) -> bytes:
        self.calls.append(("pdf", tuple(), {"format": format, "print_background": print_background}))
        return b"%PDF-fake"

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], None]) -> None:
        self.listeners.get(event, []).remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners.get(event, [])):
            handler(payload)

    def console(self, kind: str, text: str) -> None:
        self.emit("console", DummyConsoleMessage(type=kind, text=text))

    def raise_uncaught(self, message: str) -> None:
        self.emit("pageerror", DummyPageError(message=message))


@dataclass
class FakeStore(ObjectStore):
    fail: bool = False
    puts: list[tuple[str, bytes, str]] = field(default_factory=list)

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        await asyncio.sleep(0)
        if self.fail:
            raise StorageWriteError(f"Failed to upload {path}: bucket unavailable")
        self.puts.append((path, data, content_type))
        return f"https://files.test/{path}"


class FakeSessionManager(BrowserSessionManager):
    def __init__(self, settings: Settings, page: DummyPage | None = None) -> None:
        super().__init__(settings)
        self.page = page or DummyPage()
        self.launch_error: str | None = None
        self.terminate_error = False
        self.terminated: list[str] = []

    async def _launch(self) -> BrowserSession:
        if self.launch_error:
            raise SessionLaunchError(self.launch_error)
        return BrowserSession(page=self.page, debugging_port=9333)  # type: ignore[arg-type]

    async def _terminate(self, session: BrowserSession) -> None:
        self.terminated.append(session.session_id)
        if self.terminate_error:
            raise RuntimeError("browser already gone")


class StubAuditor(AuditCapability):
    def __init__(self, report: dict[str, Any]) -> None:
        self.report = report
        self.calls: list[tuple[str, int, list[str]]] = []

    async def audit(self, target_url: str, port: int, categories: list[str]) -> dict[str, Any]:
        self.calls.append((target_url, port, list(categories)))
        return self.report


class SteppingClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.value = start

    def __call__(self) -> int:
        self.value += 1000
        return self.value


LIGHTHOUSE_REPORT = {
    "categories": {"performance": {"score": 0.875}},
    "audits": {
        "first-contentful-paint": {"displayValue": "1.2 s"},
        "largest-contentful-paint": {"displayValue": "2.5 s"},
        "total-blocking-time": {"displayValue": "150 ms"},
    },
}


@pytest.fixture
def settings() -> Settings:
    return Settings(step_settle_ms=0, final_settle_ms=0, link_check_concurrency=5)


@pytest.fixture
def page() -> DummyPage:
    return DummyPage()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def sessions(settings: Settings, page: DummyPage) -> FakeSessionManager:
    return FakeSessionManager(settings, page)


@pytest.fixture
def auditor() -> StubAuditor:
    return StubAuditor(LIGHTHOUSE_REPORT)


@pytest.fixture
def orchestrator(
    settings: Settings,
    sessions: FakeSessionManager,
    store: FakeStore,
    auditor: StubAuditor,
) -> TaskOrchestrator:
    return TaskOrchestrator(
        settings=settings,
        sessions=sessions,
        store=store,
        auditor=auditor,
        axe_source="window.axe = {run: async () => ({violations: [], passes: []})};",
        clock=SteppingClock(),
    )
