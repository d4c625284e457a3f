"""Tests for BrowserSession with a mocked Playwright."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright._impl._errors import TargetClosedError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ankicard.modules.render import (
    BrowserSession,
    LaunchOptions,
    NavigationOptions,
    PdfOptions,
    open_session,
)
from ankicard.modules.units import Margin
from ankicard.shared.errors import (
    ExportTimeout,
    LaunchFailure,
    NavigationTimeout,
    PageScriptError,
    ProtocolFailure,
    SessionClosed,
)


def make_playwright():
    """Mocked ``async_playwright()`` plus its playwright, browser and page."""
    page = MagicMock()
    for name in ("goto", "wait_for_load_state", "evaluate", "add_style_tag", "content", "pdf"):
        setattr(page, name, AsyncMock())
    page.content.return_value = "<html></html>"
    page.pdf.return_value = b"%PDF-1.4"

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)

    return manager, playwright, browser, page


@pytest.fixture
def mocked():
    manager, playwright, browser, page = make_playwright()
    with patch("ankicard.modules.render.session.async_playwright", return_value=manager):
        yield playwright, browser, page


def acquire(options: LaunchOptions | None = None) -> BrowserSession:
    return asyncio.run(BrowserSession.acquire(options or LaunchOptions()))


class TestAcquire:
    """Tests for BrowserSession.acquire."""

    def test_launch_options_are_passed(self, mocked) -> None:
        playwright, _, _ = mocked
        acquire(LaunchOptions(executable_path="/usr/bin/chromium", args=("--no-sandbox",), timeout=500))

        playwright.chromium.launch.assert_awaited_once_with(
            executable_path="/usr/bin/chromium",
            args=["--no-sandbox"],
            timeout=500,
            headless=True,
        )

    def test_launch_timeout(self, mocked) -> None:
        playwright, _, _ = mocked
        playwright.chromium.launch.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded")

        with pytest.raises(LaunchFailure) as exc:
            acquire()

        assert isinstance(exc.value.__cause__, PlaywrightTimeoutError)
        playwright.stop.assert_awaited_once()

    def test_launch_error(self, mocked) -> None:
        playwright, _, _ = mocked
        playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with pytest.raises(ProtocolFailure):
            acquire()

        playwright.stop.assert_awaited_once()

    def test_new_page_failure_closes_browser(self, mocked) -> None:
        playwright, browser, _ = mocked
        browser.new_page.side_effect = PlaywrightError("Target closed")

        with pytest.raises(ProtocolFailure):
            acquire()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()


class TestSessionOperations:
    """Tests for navigate, evaluate and export."""

    def test_navigate_waits_for_load_and_network_idle(self, mocked) -> None:
        _, _, page = mocked
        session = acquire()

        with patch("ankicard.modules.render.session.monotonic", side_effect=[10.0, 10.0]):
            asyncio.run(session.navigate("file:///index.html#csv=", NavigationOptions(timeout=1000)))

        page.goto.assert_awaited_once_with("file:///index.html#csv=", wait_until="load", timeout=1000)
        page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=1000)

    def test_network_idle_gets_remaining_time(self, mocked) -> None:
        _, _, page = mocked
        session = acquire()

        with patch("ankicard.modules.render.session.monotonic", side_effect=[10.0, 10.4]):
            asyncio.run(session.navigate("about:blank", NavigationOptions(timeout=1000)))

        page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=600)

    def test_network_idle_budget_never_reaches_zero(self, mocked) -> None:
        _, _, page = mocked
        session = acquire()

        with patch("ankicard.modules.render.session.monotonic", side_effect=[10.0, 12.0]):
            asyncio.run(session.navigate("about:blank", NavigationOptions(timeout=1000)))

        page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=1)

    def test_zero_timeout_stays_unlimited(self, mocked) -> None:
        _, _, page = mocked
        session = acquire()

        with patch("ankicard.modules.render.session.monotonic", side_effect=[10.0, 99.0]):
            asyncio.run(session.navigate("about:blank", NavigationOptions(timeout=0)))

        page.goto.assert_awaited_once_with("about:blank", wait_until="load", timeout=0)
        page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=0)

    def test_navigate_timeout(self, mocked) -> None:
        _, _, page = mocked
        page.goto.side_effect = PlaywrightTimeoutError("Navigation timeout of 1000 ms exceeded")
        session = acquire()

        with pytest.raises(NavigationTimeout):
            asyncio.run(session.navigate("about:blank", NavigationOptions(timeout=1000)))

    def test_navigate_protocol_error(self, mocked) -> None:
        _, _, page = mocked
        page.goto.side_effect = PlaywrightError("net::ERR_FILE_NOT_FOUND")
        session = acquire()

        with pytest.raises(ProtocolFailure):
            asyncio.run(session.navigate("file:///missing.html", NavigationOptions()))

    def test_evaluate_script_error(self, mocked) -> None:
        _, _, page = mocked
        page.evaluate.side_effect = PlaywrightError("ReferenceError: foo is not defined")
        session = acquire()

        with pytest.raises(PageScriptError):
            asyncio.run(session.evaluate("() => foo"))

    def test_evaluate_on_closed_target(self, mocked) -> None:
        _, _, page = mocked
        page.evaluate.side_effect = TargetClosedError()
        session = acquire()

        with pytest.raises(ProtocolFailure) as exc:
            asyncio.run(session.evaluate("() => document.title"))

        assert isinstance(exc.value.__cause__, TargetClosedError)

    @pytest.mark.parametrize("message", [
        "Target page, context or browser has been closed",
        "Page crashed",
    ])
    def test_evaluate_automation_fault_by_message(self, mocked, message: str) -> None:
        _, _, page = mocked
        page.evaluate.side_effect = PlaywrightError(message)
        session = acquire()

        with pytest.raises(ProtocolFailure):
            asyncio.run(session.evaluate("() => document.title"))

    def test_evaluate_timeout(self, mocked) -> None:
        _, _, page = mocked
        page.evaluate.side_effect = PlaywrightTimeoutError("Timeout 1000ms exceeded")
        session = acquire()

        with pytest.raises(ExportTimeout):
            asyncio.run(session.evaluate("() => new Promise(() => {})"))

    def test_export_pdf(self, mocked) -> None:
        _, _, page = mocked
        session = acquire()
        options = PdfOptions(width=297, height=210, margin=Margin(top=5), timeout=1234)

        result = asyncio.run(session.export_pdf(options))

        assert result == b"%PDF-1.4"
        page.set_default_timeout.assert_called_once_with(1234)
        kwargs = page.pdf.await_args.kwargs
        assert kwargs["width"] == "297mm"
        assert kwargs["height"] == "210mm"
        assert kwargs["margin"] == {"top": "5mm", "right": "0mm", "bottom": "0mm", "left": "0mm"}
        assert kwargs["print_background"] is True
        assert kwargs["display_header_footer"] is True

    def test_export_pdf_timeout(self, mocked) -> None:
        _, _, page = mocked
        page.pdf.side_effect = PlaywrightTimeoutError("Timeout exceeded")
        session = acquire()

        with pytest.raises(ExportTimeout):
            asyncio.run(session.export_pdf(PdfOptions(width=1, height=1)))

    def test_export_html(self, mocked) -> None:
        session = acquire()
        assert asyncio.run(session.export_html()) == "<html></html>"


class TestRelease:
    """Tests for release."""

    def test_release_is_idempotent(self, mocked) -> None:
        playwright, browser, _ = mocked
        session = acquire()

        asyncio.run(session.release())
        asyncio.run(session.release())

        assert session.released
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    def test_operations_after_release_fail(self, mocked) -> None:
        session = acquire()
        asyncio.run(session.release())

        with pytest.raises(SessionClosed):
            asyncio.run(session.export_html())

    def test_close_error_is_translated(self, mocked) -> None:
        playwright, browser, _ = mocked
        browser.close.side_effect = PlaywrightError("Connection closed")
        session = acquire()

        with pytest.raises(ProtocolFailure) as exc:
            asyncio.run(session.release())

        assert isinstance(exc.value.__cause__, PlaywrightError)
        playwright.stop.assert_awaited_once()


def fake_session() -> MagicMock:
    session = MagicMock()
    session.release = AsyncMock()
    return session


class TestOpenSession:
    """Tests for the open_session context manager."""

    def test_releases_after_block(self) -> None:
        session = fake_session()
        options = LaunchOptions(timeout=10)
        factory = AsyncMock(return_value=session)

        async def use() -> None:
            async with open_session(options, factory) as opened:
                assert opened is session
                session.release.assert_not_awaited()

        asyncio.run(use())

        factory.assert_awaited_once_with(options)
        session.release.assert_awaited_once()

    def test_block_error_wins_over_release_error(self) -> None:
        session = fake_session()
        session.release.side_effect = ProtocolFailure("Browser close failed")
        error = NavigationTimeout("Browser navigation timed out")

        async def use() -> None:
            async with open_session(LaunchOptions(), AsyncMock(return_value=session)):
                raise error

        with pytest.raises(NavigationTimeout) as exc:
            asyncio.run(use())

        assert exc.value is error
        session.release.assert_awaited_once()

    def test_release_error_propagates_after_success(self) -> None:
        session = fake_session()
        session.release.side_effect = ProtocolFailure("Browser close failed")

        async def use() -> None:
            async with open_session(LaunchOptions(), AsyncMock(return_value=session)):
                pass

        with pytest.raises(ProtocolFailure):
            asyncio.run(use())

    def test_acquire_failure_has_nothing_to_release(self) -> None:
        factory = AsyncMock(side_effect=LaunchFailure("Browser launch timed out"))

        async def use() -> None:
            async with open_session(LaunchOptions(), factory):
                raise AssertionError("block must not run")

        with pytest.raises(LaunchFailure):
            asyncio.run(use())


def test_pdf_size_has_no_exponent() -> None:
    options = PdfOptions(width=0.00001, height=210, margin=Margin(left=0.00002))
    kwargs = options.to_playwright()
    assert kwargs["width"] == "0.00001mm"
    assert kwargs["margin"]["left"] == "0.00002mm"
