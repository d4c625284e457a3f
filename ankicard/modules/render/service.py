"""
Render service - drive a browser session through navigate, mutate, export.
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from ankicard.modules.units.schemas import Margin, format_number
from ankicard.shared.logging import get_logger

from .mutations import PageMutation
from .schemas import LaunchOptions, NavigationOptions, PdfOptions
from .session import BrowserSession, SessionFactory, open_session

logger = get_logger(__name__)

T = TypeVar("T")


class RenderState(str, Enum):
    """Render pipeline states. CLOSED is the only terminal state."""
    IDLE = "idle"
    ACQUIRING = "acquiring"
    NAVIGATING = "navigating"
    MUTATING = "mutating"
    EXPORTING = "exporting"
    FAILED = "failed"
    CLOSED = "closed"


def page_margin_css(margin: Margin) -> str:
    """
    ``@page`` rule for the given margins.

    Zero sides are left out so the page keeps its own default for them.
    """
    rules = "".join(
        f"margin-{side}: {format_number(value)}mm;"
        for side, value in margin.sides().items()
        if value
    )
    return f"@page {{{rules}}}"


# =============================================================================
# SERVICE
# =============================================================================

class RenderService:
    """
    Render a URL to HTML or PDF in a fresh headless browser.

    One service instance performs one render. The browser is always closed
    before the result is returned or the error re-raised.
    """

    def __init__(self, acquire: SessionFactory = BrowserSession.acquire) -> None:
        self._acquire = acquire
        self.state = RenderState.IDLE
        self.transitions: list[RenderState] = [RenderState.IDLE]

    def _enter(self, state: RenderState) -> None:
        logger.debug(f"Render state: {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)

    async def _render(
        self,
        url: str,
        launch: LaunchOptions,
        navigation: NavigationOptions,
        mutation: PageMutation | None,
        export: Callable[[BrowserSession], Awaitable[T]],
    ) -> T:
        self._enter(RenderState.ACQUIRING)
        try:
            async with open_session(launch, self._acquire) as session:
                self._enter(RenderState.NAVIGATING)
                await session.navigate(url, navigation)

                self._enter(RenderState.MUTATING)
                if mutation is not None:
                    await mutation.apply(session)

                self._enter(RenderState.EXPORTING)
                result = await export(session)
        except BaseException:
            self._enter(RenderState.FAILED)
            self._enter(RenderState.CLOSED)
            raise

        self._enter(RenderState.CLOSED)
        return result

    async def render_html(
        self,
        url: str,
        launch: LaunchOptions,
        navigation: NavigationOptions,
        mutation: PageMutation | None = None,
    ) -> str:
        """
        Load ``url`` and return the document's HTML.

        Args:
            url: Page to load
            launch: Browser launch options
            navigation: Navigation timeout
            mutation: Optional changes to the document before export

        Returns:
            Serialized HTML
        """
        html = await self._render(
            url, launch, navigation, mutation, lambda session: session.export_html()
        )
        logger.info(f"Generated HTML: {len(html)} characters")
        return html

    async def render_pdf(
        self,
        url: str,
        launch: LaunchOptions,
        navigation: NavigationOptions,
        pdf: PdfOptions,
        mutation: PageMutation | None = None,
    ) -> bytes:
        """
        Load ``url`` and print it to PDF.

        Args:
            url: Page to load
            launch: Browser launch options
            navigation: Navigation timeout
            pdf: Page size, margins, scale, header and footer
            mutation: Optional changes to the document before export

        Returns:
            PDF bytes
        """
        async def export(session: BrowserSession) -> bytes:
            await session.add_style(page_margin_css(pdf.margin))
            return await session.export_pdf(pdf)

        logger.info(
            f"Rendering PDF: {format_number(pdf.width)}x{format_number(pdf.height)}mm, "
            f"scale {pdf.scale}"
        )
        pdf_bytes = await self._render(url, launch, navigation, mutation, export)
        logger.info(f"Generated PDF: {len(pdf_bytes)} bytes")
        return pdf_bytes
