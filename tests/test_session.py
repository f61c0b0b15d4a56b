from __future__ import annotations

from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError

from pagetasks.browser import session as session_module
from pagetasks.browser.session import LAUNCH_ARGS, BrowserSessionManager
from pagetasks.config import Settings
from pagetasks.errors import SessionLaunchError


class DummyContext:
    def __init__(self, close_error: Exception | None = None) -> None:
        self.close_error = close_error
        self.closed = False
        self.page = object()

    async def new_page(self) -> object:
        return self.page

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class DummyBrowser:
    def __init__(self, context: DummyContext, context_error: Exception | None = None) -> None:
        self.context = context
        self.context_error = context_error
        self.close_error: Exception | None = None
        self.context_kwargs: dict[str, Any] = {}
        self.closed = False

    async def new_context(self, **kwargs: Any) -> DummyContext:
        self.context_kwargs = kwargs
        if self.context_error is not None:
            raise self.context_error
        return self.context

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class DummyChromium:
    def __init__(self, browser: DummyBrowser) -> None:
        self.browser = browser
        self.launch_error: Exception | None = None
        self.launch_kwargs: dict[str, Any] = {}

    async def launch(self, **kwargs: Any) -> DummyBrowser:
        self.launch_kwargs = kwargs
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class DummyDriver:
    def __init__(self, chromium: DummyChromium) -> None:
        self.chromium = chromium
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class DummyPlaywright:
    def __init__(self, driver: DummyDriver) -> None:
        self.driver = driver

    async def start(self) -> DummyDriver:
        return self.driver


@pytest.fixture
def driver(monkeypatch: pytest.MonkeyPatch) -> DummyDriver:
    dummy = DummyDriver(DummyChromium(DummyBrowser(DummyContext())))
    monkeypatch.setattr(session_module, "async_playwright", lambda: DummyPlaywright(dummy))
    return dummy


@pytest.fixture
def manager() -> BrowserSessionManager:
    return BrowserSessionManager(Settings(headless=True))


@pytest.mark.asyncio
async def test_acquire_launches_isolated_browser(driver, manager) -> None:
    session = await manager.acquire()

    chromium = driver.chromium
    args = chromium.launch_kwargs["args"]
    assert chromium.launch_kwargs["headless"] is True
    assert list(LAUNCH_ARGS) == args[: len(LAUNCH_ARGS)]
    assert f"--remote-debugging-port={session.debugging_port}" in args
    assert chromium.browser.context_kwargs == {"viewport": {"width": 1280, "height": 800}, "bypass_csp": True}
    assert session.page is chromium.browser.context.page
    assert manager.active == 1


@pytest.mark.asyncio
async def test_release_closes_everything_once(driver, manager) -> None:
    session = await manager.acquire()

    await manager.release(session)
    await manager.release(session)

    browser = driver.chromium.browser
    assert browser.context.closed
    assert browser.closed
    assert driver.stopped
    assert manager.released == 1
    assert manager.active == 0


@pytest.mark.asyncio
async def test_launch_failure_stops_driver(driver, manager) -> None:
    driver.chromium.launch_error = PlaywrightError("Executable doesn't exist")

    with pytest.raises(SessionLaunchError, match="Executable doesn't exist"):
        await manager.acquire()

    assert driver.stopped
    assert manager.acquired == 0


@pytest.mark.asyncio
async def test_context_failure_closes_browser_and_driver(driver, manager) -> None:
    driver.chromium.browser.context_error = PlaywrightError("Target closed")

    with pytest.raises(SessionLaunchError):
        await manager.acquire()

    assert driver.chromium.browser.closed
    assert driver.stopped


@pytest.mark.asyncio
async def test_driver_stopped_when_browser_close_fails(driver, manager) -> None:
    session = await manager.acquire()
    browser = driver.chromium.browser
    browser.context.close_error = PlaywrightError("Target page, context or browser has been closed")
    browser.close_error = PlaywrightError("Browser has been closed")

    await manager.release(session)

    assert browser.closed
    assert driver.stopped
    assert manager.released == 1
