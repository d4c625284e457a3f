"""
Browser session - one headless Chromium process and one page.

Playwright errors are translated at this boundary: timeouts become
TemporaryFailure subclasses, other automation errors ProtocolFailure, and
exceptions thrown by page scripts PageScriptError. The original Playwright
error stays attached as ``__cause__``.
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from time import monotonic
from typing import Any

from playwright._impl._errors import TargetClosedError
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ankicard.shared.errors import (
    ExportTimeout,
    LaunchFailure,
    NavigationTimeout,
    PageScriptError,
    ProtocolFailure,
    SessionClosed,
    TemporaryFailure,
)
from ankicard.shared.logging import get_logger

from .schemas import LaunchOptions, NavigationOptions, PdfOptions

logger = get_logger(__name__)

# Messages of automation faults that are not exceptions thrown by the page script
CLOSED_TARGET_MARKERS = (
    "has been closed",
    "Target closed",
    "crashed",
)


@contextmanager
def _translate_errors(action: str, timeout_error: type[TemporaryFailure]) -> Iterator[None]:
    try:
        yield
    except PlaywrightTimeoutError as e:
        raise timeout_error(f"Browser {action} timed out: {e.message}") from e
    except PlaywrightError as e:
        raise ProtocolFailure(f"Browser {action} failed: {e.message}") from e


def _is_automation_fault(error: PlaywrightError) -> bool:
    if isinstance(error, TargetClosedError):
        return True
    return any(marker in error.message for marker in CLOSED_TARGET_MARKERS)


def _remaining(timeout: int, started: float) -> int:
    """Milliseconds left of ``timeout`` since ``started``; 0 stays unlimited."""
    if timeout == 0:
        return 0
    elapsed = int((monotonic() - started) * 1000)
    return max(timeout - elapsed, 1)


class BrowserSession:
    """A launched browser with a single page."""

    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._released = False

    @classmethod
    async def acquire(cls, options: LaunchOptions) -> "BrowserSession":
        """
        Launch Chromium and open a blank page.

        The caller owns the returned session and must call ``release()``.
        A failed launch cleans up after itself.

        Raises:
            LaunchFailure: The browser did not start within ``options.timeout``
            ProtocolFailure: The browser could not be started at all
        """
        logger.info(f"Launching browser ({options.executable_path or 'bundled Chromium'})")

        playwright = await async_playwright().start()
        browser = None
        try:
            with _translate_errors("launch", LaunchFailure):
                browser = await playwright.chromium.launch(
                    executable_path=options.executable_path,
                    args=list(options.args),
                    timeout=options.timeout,
                    headless=options.headless,
                )
                page = await browser.new_page()
        except BaseException:
            try:
                if browser is not None:
                    await browser.close()
            finally:
                await playwright.stop()
            raise

        return cls(playwright, browser, page)

    @property
    def released(self) -> bool:
        return self._released

    def _ensure_open(self) -> None:
        if self._released:
            raise SessionClosed("Browser session has already been released")

    async def navigate(self, url: str, options: NavigationOptions) -> None:
        """
        Open ``url`` and wait for both the load event and network idle.

        Both waits share one ``options.timeout`` budget.

        Raises:
            NavigationTimeout: The page was not ready within ``options.timeout``
        """
        self._ensure_open()
        logger.debug(f"Navigating to {url[:200]}")

        started = monotonic()
        with _translate_errors("navigation", NavigationTimeout):
            await self._page.goto(url, wait_until="load", timeout=options.timeout)
            await self._page.wait_for_load_state(
                "networkidle", timeout=_remaining(options.timeout, started)
            )

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Run a JavaScript function in the page with ``arg``.

        Raises:
            PageScriptError: The script threw
            ProtocolFailure: The page or browser went away while it ran
            ExportTimeout: The script did not finish in time
        """
        self._ensure_open()

        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightTimeoutError as e:
            raise ExportTimeout(f"Page script timed out: {e.message}") from e
        except PlaywrightError as e:
            if _is_automation_fault(e):
                raise ProtocolFailure(f"Browser page script failed: {e.message}") from e
            raise PageScriptError(f"Page script failed: {e.message}") from e

    async def add_style(self, css: str) -> None:
        """Append a ``<style>`` element with ``css`` to the document."""
        self._ensure_open()

        with _translate_errors("style injection", ExportTimeout):
            await self._page.add_style_tag(content=css)

    async def export_html(self) -> str:
        """Serialized HTML of the current document."""
        self._ensure_open()

        with _translate_errors("HTML export", ExportTimeout):
            return await self._page.content()

    async def export_pdf(self, options: PdfOptions) -> bytes:
        """
        Print the current document to PDF.

        Raises:
            ExportTimeout: Printing did not finish within ``options.timeout``
        """
        self._ensure_open()

        with _translate_errors("PDF export", ExportTimeout):
            self._page.set_default_timeout(options.timeout)
            return await self._page.pdf(**options.to_playwright())

    async def release(self) -> None:
        """Close the browser. Safe to call more than once."""
        if self._released:
            return
        self._released = True

        with _translate_errors("close", TemporaryFailure):
            try:
                await self._browser.close()
            finally:
                await self._playwright.stop()
        logger.debug("Browser closed")


SessionFactory = Callable[[LaunchOptions], Awaitable[BrowserSession]]


@asynccontextmanager
async def open_session(
    options: LaunchOptions,
    acquire: SessionFactory = BrowserSession.acquire,
) -> AsyncIterator[BrowserSession]:
    """
    Acquire a session for the duration of an ``async with`` block.

    The session is released on every exit path. When the block fails, an
    error from ``release()`` is logged and the block's own error is re-raised.
    """
    session = await acquire(options)
    try:
        yield session
    except BaseException:
        try:
            await session.release()
        except Exception as e:
            logger.warning(f"Browser release failed after an earlier error: {e}")
        raise
    await session.release()
