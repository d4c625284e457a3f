"""
Render module schemas.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ankicard.modules.units.schemas import (
    Border,
    Dimension,
    FontSize,
    Margin,
    Matrix,
    format_number,
)


# =============================================================================
# TYPES
# =============================================================================

Reversal = Literal["horizontal", "vertical", "both", "none"]
Action = Literal["url", "browser", "html", "pdf"]

REVERSALS: tuple[str, ...] = ("horizontal", "vertical", "both", "none")
ACTIONS: tuple[str, ...] = ("url", "browser", "html", "pdf")


# =============================================================================
# BROWSER OPTIONS
# =============================================================================

class LaunchOptions(BaseModel):
    """How to start the browser process."""
    model_config = ConfigDict(frozen=True)

    executable_path: str | None = None
    args: tuple[str, ...] = ()
    timeout: int = Field(default=60000, ge=0, description="Milliseconds, 0 disables")
    headless: bool = True


class NavigationOptions(BaseModel):
    """How long to wait for the page to load and go network idle."""
    model_config = ConfigDict(frozen=True)

    timeout: int = Field(default=60000, ge=0, description="Milliseconds, 0 disables")


class PdfOptions(BaseModel):
    """Page setup for PDF export. Lengths in millimeters."""
    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0)
    height: float = Field(ge=0)
    margin: Margin = Field(default_factory=Margin)
    scale: float = Field(default=1, ge=0.1, le=2)
    print_background: bool = True
    display_header_footer: bool = True
    header_template: str = "<div></div>"
    footer_template: str = "<div></div>"
    timeout: int = Field(default=60000, ge=0)

    def to_playwright(self) -> dict[str, Any]:
        """Keyword arguments for ``Page.pdf``."""
        return {
            "width": f"{format_number(self.width)}mm",
            "height": f"{format_number(self.height)}mm",
            "margin": self.margin.css(),
            "scale": self.scale,
            "print_background": self.print_background,
            "display_header_footer": self.display_header_footer,
            "header_template": self.header_template,
            "footer_template": self.footer_template,
        }


# =============================================================================
# REQUEST / OUTCOME
# =============================================================================

class RenderRequest(BaseModel):
    """Validated options for one invocation."""
    model_config = ConfigDict(frozen=True)

    # Card table (sent to the page as query parameters)
    url: str
    csv: str = ""
    matrix: Matrix = Matrix(row=6, col=4)
    rev: Reversal = "horizontal"
    size: Dimension = Dimension(width=297, height=210)
    border: Border = Border(inner=0.3, outer=0)
    font_size: FontSize = FontSize(front=22, back=18)
    html: bool | None = None

    # PDF
    format: Dimension = Dimension(width=297, height=210)
    margin: Margin = Margin()
    scale: float = Field(default=1, ge=0.1, le=2)
    title: str | None = None
    header: str = "<div></div>"
    footer: str = "<div></div>"

    # Browser
    chrome_path: str | None = None
    chrome_args: tuple[str, ...] = ()
    timeout: int = Field(default=60000, ge=0)

    # Output
    action: Action = "pdf"
    output: str = "-"

    def launch_options(self) -> LaunchOptions:
        return LaunchOptions(
            executable_path=self.chrome_path,
            args=self.chrome_args,
            timeout=self.timeout,
        )

    def navigation_options(self) -> NavigationOptions:
        return NavigationOptions(timeout=self.timeout)

    def pdf_options(self) -> PdfOptions:
        return PdfOptions(
            width=self.format.width,
            height=self.format.height,
            margin=self.margin,
            scale=self.scale,
            header_template=self.header,
            footer_template=self.footer,
            timeout=self.timeout,
        )


class RenderOutcome(BaseModel):
    """Result of one invocation: PDF bytes, HTML/URL text, or nothing."""
    model_config = ConfigDict(frozen=True)

    content: bytes | str | None = None
    media_type: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.content is None
