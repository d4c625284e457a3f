"""
Page mutations applied after navigation and before export.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import BrowserSession

MUTATION_SCRIPT = """
({ title, selectors }) => {
    if (title !== null) {
        document.title = title;
    }
    if (selectors) {
        document.querySelectorAll(selectors).forEach((elem) => elem.remove());
    }
}
"""

CHROME_SELECTORS = "script, header, footer"


@dataclass(frozen=True)
class PageMutation:
    """
    Document changes to make before export.

    Attributes:
        title: New document title, or None to keep the page's own
        strip_selectors: CSS selector of elements to remove, or None
    """
    title: str | None = None
    strip_selectors: str | None = None

    async def apply(self, session: "BrowserSession") -> None:
        await session.evaluate(
            MUTATION_SCRIPT,
            {"title": self.title, "selectors": self.strip_selectors},
        )


def set_title(title: str | None) -> PageMutation:
    """Only set the document title (PDF export)."""
    return PageMutation(title=title)


def strip_chrome(title: str | None) -> PageMutation:
    """Set the title and drop scripts, header and footer (static HTML export)."""
    return PageMutation(title=title, strip_selectors=CHROME_SELECTORS)
