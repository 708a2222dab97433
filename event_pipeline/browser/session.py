"""Shared headless Chromium with one isolated context per extraction.

One browser process is launched lazily and reused. Every session gets its
own context (cookies, cache), a desktop user agent and request routing that
drops heavy assets and trackers before they hit the network.
"""

import asyncio
import random
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from rich.console import Console

from event_pipeline.config import PipelineSettings
from event_pipeline.errors import NavigationError, NavigationTimeout

console = Console()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
)

# Desktop Chrome user agents used when rotation is on
USER_AGENTS = [
    DEFAULT_USER_AGENT,
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
]

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Cache-Control": "max-age=0",
}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]

BLOCKED_RESOURCE_TYPES = {"image", "font", "media", "stylesheet"}
# Assets whose URL contains one of these are let through regardless of type
ESSENTIAL_URL_MARKERS = ("main", "core", "bundle")
# Always dropped
BLOCKED_URL_MARKERS = ("analytics", "tracking", "advertisement", "ad.", "/ads/")

# Cookie consent buttons, reject first
COOKIE_SELECTORS = [
    'button:has-text("Reject All")',
    'button:has-text("Reject all")',
    'button:has-text("Decline")',
    "#onetrust-reject-all-handler",
    ".cc-deny",
    'button:has-text("Accept All")',
    'button:has-text("Accept all")',
    'button:has-text("Accept")',
    'button:has-text("Got it")',
    "#onetrust-accept-btn-handler",
    ".cc-accept",
    '[aria-label="Close"]',
]

# Records layout size on every image so the serialized DOM keeps it
STAMP_IMAGE_SIZES = """() => {
    for (const img of document.querySelectorAll('img')) {
        img.setAttribute('data-rendered-width', String(img.width || img.naturalWidth || 0));
        img.setAttribute('data-rendered-height', String(img.height || img.naturalHeight || 0));
    }
}"""

BrowserFactory = Callable[[PipelineSettings], Awaitable[Any]]


def should_block_request(resource_type: str, url: str) -> bool:
    """Decide whether a request is aborted before it leaves the browser."""
    url = (url or "").lower()
    if resource_type in BLOCKED_RESOURCE_TYPES and not any(m in url for m in ESSENTIAL_URL_MARKERS):
        return True
    return any(marker in url for marker in BLOCKED_URL_MARKERS)


def pick_user_agent(rotate: bool) -> str:
    """Fixed user agent, or a random desktop one when rotating."""
    return random.choice(USER_AGENTS) if rotate else DEFAULT_USER_AGENT


async def handle_route(route) -> None:
    """Playwright route handler applying should_block_request."""
    request = route.request
    if should_block_request(request.resource_type, request.url):
        await route.abort()
    else:
        await route.continue_()


class Session:
    """A page inside its own browser context."""

    def __init__(self, context, page, settings: PipelineSettings):
        self.context = context
        self.page = page
        self.settings = settings
        self.closed = False

    async def navigate(self, url: str, wait_until: str = "domcontentloaded") -> None:
        """Load url, wrapping failures with the URL. Never swallows errors."""
        timeout = self.settings.navigation_timeout_ms
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(url, f"timed out after {timeout}ms") from e
        except PlaywrightError as e:
            message = str(e).splitlines()[0] if str(e) else type(e).__name__
            raise NavigationError(url, message) from e

    async def settle(self, ms: Optional[int] = None) -> None:
        """Give client-side rendering time to finish."""
        await self.page.wait_for_timeout(self.settings.settle_ms if ms is None else ms)

    async def scroll(self, offsets: Sequence[int] = (300,), pause_ms: int = 1000) -> None:
        """Scroll down in steps to trigger lazy-loaded sections."""
        for offset in offsets:
            try:
                await self.page.evaluate("(dy) => window.scrollBy(0, dy)", offset)
            except PlaywrightError as e:
                console.print(f"[dim]Scroll failed: {e}[/dim]")
                return
            await self.page.wait_for_timeout(pause_ms)

    async def wait_for_any(
        self,
        selectors: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> Optional[str]:
        """Wait until one of selectors is present; return the first present one.

        Returns None when none appears within the timeout.
        """
        if not selectors:
            return None
        timeout = self.settings.selector_timeout_ms if timeout_ms is None else timeout_ms
        try:
            await self.page.wait_for_selector(", ".join(selectors), timeout=timeout)
        except PlaywrightTimeoutError:
            return None
        except PlaywrightError as e:
            console.print(f"[dim]Selector wait failed: {e}[/dim]")
            return None

        for selector in selectors:
            try:
                if await self.page.query_selector(selector):
                    return selector
            except PlaywrightError:
                continue
        return None

    async def dismiss_cookie_banner(self) -> bool:
        """Try to dismiss cookie consent banners."""
        for selector in COOKIE_SELECTORS:
            try:
                button = self.page.locator(selector).first
                if await button.is_visible(timeout=500):
                    await button.click(timeout=2000)
                    await self.page.wait_for_timeout(500)
                    return True
            except PlaywrightError:
                continue
        return False

    async def content(self) -> str:
        """Serialized DOM, with rendered image sizes stamped on <img> tags."""
        try:
            await self.page.evaluate(STAMP_IMAGE_SIZES)
        except PlaywrightError as e:
            console.print(f"[dim]Could not record image sizes: {e}[/dim]")
        return await self.page.content()

    async def title(self) -> str:
        return await self.page.title()

    def is_usable(self) -> bool:
        """True when the page is open and has left about:blank."""
        if self.closed or self.page.is_closed():
            return False
        return (self.page.url or "about:blank") != "about:blank"

    async def close(self) -> None:
        """Close page and context. Failures are logged, never raised."""
        if self.closed:
            return
        self.closed = True
        try:
            if not self.page.is_closed():
                await self.page.close()
        except Exception as e:
            console.print(f"[yellow]Error closing page: {e}[/yellow]")
        try:
            await self.context.close()
        except Exception as e:
            console.print(f"[yellow]Error closing browser context: {e}[/yellow]")


class SessionManager:
    """Owns the shared browser and hands out isolated sessions."""

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        browser_factory: Optional[BrowserFactory] = None,
    ):
        self.settings = settings or PipelineSettings.from_env()
        self._browser_factory = browser_factory or self._launch_chromium
        self._browser = None
        self._playwright = None
        self._lock = asyncio.Lock()
        self._sessions: set[Session] = set()
        self.launch_count = 0

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    async def _launch_chromium(self, settings: PipelineSettings):
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)

    async def get_browser(self):
        """Return the shared browser, launching or relaunching it if needed."""
        async with self._lock:
            if self._browser is not None and not self._browser.is_connected():
                console.print("[yellow]Browser disconnected, relaunching[/yellow]")
                self._browser = None
            if self._browser is None:
                console.print(f"[cyan]Launching Chromium (headless={self.settings.headless})[/cyan]")
                self._browser = await self._browser_factory(self.settings)
                self.launch_count += 1
            return self._browser

    async def acquire_session(self) -> Session:
        """Open a new isolated context and page."""
        browser = await self.get_browser()
        context = await browser.new_context(
            user_agent=pick_user_agent(self.settings.rotate_user_agents),
            viewport=self.settings.viewport,
            locale="en-US",
            extra_http_headers=DEFAULT_HEADERS,
            ignore_https_errors=True,
        )
        try:
            context.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
            page = await context.new_page()
            await page.route("**/*", handle_route)
        except Exception:
            await context.close()
            raise

        session = Session(context, page, self.settings)
        self._sessions.add(session)
        return session

    async def release(self, session: Session) -> None:
        """Close a session. Safe to call more than once."""
        self._sessions.discard(session)
        await session.close()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Session]:
        """Acquire a session and always release it."""
        session = await self.acquire_session()
        try:
            yield session
        finally:
            await self.release(session)

    async def shutdown(self) -> None:
        """Close remaining sessions, the browser and Playwright."""
        for session in list(self._sessions):
            await self.release(session)

        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                console.print(f"[yellow]Error closing browser: {e}[/yellow]")
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                console.print(f"[yellow]Error stopping Playwright: {e}[/yellow]")
            self._playwright = None
