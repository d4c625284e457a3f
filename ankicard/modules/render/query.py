"""
Query parameters for the flashcard page.
"""

from pathlib import Path
from urllib.parse import urlencode, urlsplit

from ankicard.modules.units.schemas import format_number

from .schemas import RenderRequest


def path_to_url(path: str | Path) -> str:
    """
    File URL for a local template.

    The trailing ``#`` makes the page receive its parameters in the fragment.
    """
    return Path(path).resolve().as_uri() + "#"


def resolve_url(text: str) -> str:
    """
    Accept an absolute URL as is, anything else as a file path.

    Single letter schemes are Windows drive letters, not URLs.
    """
    scheme = urlsplit(text).scheme
    if len(scheme) > 1:
        return text
    return path_to_url(text)


def build_params(request: RenderRequest) -> list[tuple[str, str]]:
    """Page parameters in their fixed order."""
    params = [
        ("csv", request.csv),
        ("row", str(request.matrix.row)),
        ("col", str(request.matrix.col)),
        ("rev", request.rev),
        ("width", format_number(request.size.width)),
        ("height", format_number(request.size.height)),
        ("inner", format_number(request.border.inner)),
        ("outer", format_number(request.border.outer)),
        ("front_font_size", format_number(request.font_size.front)),
        ("back_font_size", format_number(request.font_size.back)),
    ]
    # The page checks for the key, not its value
    if request.html:
        params.append(("html", "1"))
    return params


def build_url(request: RenderRequest) -> str:
    """Append the form-encoded parameters to the request's base URL verbatim."""
    return request.url + urlencode(build_params(request))
