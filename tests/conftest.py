"""Shared test fixtures and configuration.

The fake browser objects implement the slice of the Playwright async API
that SessionManager and Session touch, so the whole load/parse/normalize
path runs without Chromium.
"""

import asyncio
from pathlib import Path
from typing import Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from event_pipeline.browser.session import SessionManager
from event_pipeline.config import PipelineSettings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeLocator:
    """Cookie banners are never visible on fake pages."""

    @property
    def first(self) -> "FakeLocator":
        return self

    async def is_visible(self, timeout: Optional[int] = None) -> bool:
        return False

    async def click(self, timeout: Optional[int] = None) -> None:
        return None


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.url = "about:blank"
        self.html = ""
        self.closed = False
        self.routes: list[str] = []
        self.evaluated: list[str] = []
        self.waits: list[int] = []

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None) -> None:
        # Let other sessions run, as a real navigation would
        await asyncio.sleep(0)
        error = self.browser.goto_errors.get(url)
        if error is not None:
            if self.browser.advance_url_on_error:
                self.url = url
                self.html = self.browser.pages.get(url, self.browser.html)
            raise error
        self.url = url
        self.html = self.browser.pages.get(url, self.browser.html)

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    async def evaluate(self, expression: str, arg=None):
        self.evaluated.append(expression)
        return None

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None):
        if not self.browser.selector_present:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return object()

    async def query_selector(self, selector: str):
        return object() if self.browser.selector_present else None

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator()

    async def content(self) -> str:
        return self.html

    async def title(self) -> str:
        return ""

    def is_closed(self) -> bool:
        return self.closed

    async def close(self) -> None:
        self.closed = True

    async def route(self, pattern: str, handler) -> None:
        self.routes.append(pattern)


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: dict):
        self.browser = browser
        self.options = options
        self.navigation_timeout: Optional[int] = None
        self.closed = False
        self.page: Optional[FakePage] = None

    def set_default_navigation_timeout(self, timeout: int) -> None:
        self.navigation_timeout = timeout

    async def new_page(self) -> FakePage:
        self.page = FakePage(self.browser)
        return self.page

    async def close(self) -> None:
        if self.browser.fail_context_close:
            raise RuntimeError("context already gone")
        if not self.closed:
            self.closed = True
            self.browser.open_contexts -= 1


class FakeBrowser:
    """Serves html (or per-URL pages) and can fail navigation per URL."""

    def __init__(
        self,
        html: str = "",
        pages: Optional[dict[str, str]] = None,
        goto_errors: Optional[dict[str, Exception]] = None,
        advance_url_on_error: bool = False,
        selector_present: bool = True,
    ):
        self.html = html
        self.pages = pages or {}
        self.goto_errors = goto_errors or {}
        self.advance_url_on_error = advance_url_on_error
        self.selector_present = selector_present
        self.fail_context_close = False
        self.connected = True
        self.closed = False
        self.contexts: list[FakeContext] = []
        self.open_contexts = 0
        self.peak_open_contexts = 0

    async def new_context(self, **options) -> FakeContext:
        context = FakeContext(self, options)
        self.contexts.append(context)
        self.open_contexts += 1
        self.peak_open_contexts = max(self.peak_open_contexts, self.open_contexts)
        return context

    def is_connected(self) -> bool:
        return self.connected

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> PipelineSettings:
    """Settings with no waiting and UTC dates."""
    return PipelineSettings(settle_ms=0, selector_timeout_ms=100, navigation_timeout_ms=1000)


@pytest.fixture
def make_manager(settings):
    """Build a SessionManager backed by a FakeBrowser."""

    def _make(**browser_options) -> tuple[SessionManager, FakeBrowser]:
        browser = FakeBrowser(**browser_options)

        async def factory(_settings):
            return browser

        return SessionManager(settings=settings, browser_factory=factory), browser

    return _make


@pytest.fixture
def load_fixture():
    """Read an HTML fixture from tests/fixtures."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load
