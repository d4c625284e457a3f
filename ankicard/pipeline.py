"""
Top-level pipeline: build the page URL, run the requested action, write output.
"""

import os
import sys
import tempfile
import webbrowser
from pathlib import Path
from typing import BinaryIO, TextIO

from ankicard.modules.render import (
    RenderOutcome,
    RenderRequest,
    RenderService,
    build_url,
    set_title,
    strip_chrome,
)
from ankicard.shared.logging import get_logger

logger = get_logger(__name__)

STDOUT = "-"


async def execute(request: RenderRequest, service: RenderService | None = None) -> RenderOutcome:
    """
    Perform the request's action.

    Args:
        request: Validated options
        service: Renderer to use (a fresh RenderService by default)

    Returns:
        The URL text (url), nothing (browser), HTML text (html) or PDF bytes (pdf)
    """
    url = build_url(request)
    logger.info(f"Action '{request.action}', URL length {len(url)}")

    if request.action == "url":
        return RenderOutcome(content=url, media_type="text/uri-list")

    if request.action == "browser":
        webbrowser.open(url)
        return RenderOutcome()

    service = service or RenderService()

    if request.action == "html":
        html = await service.render_html(
            url,
            request.launch_options(),
            request.navigation_options(),
            strip_chrome(request.title),
        )
        return RenderOutcome(content=html, media_type="text/html")

    pdf_bytes = await service.render_pdf(
        url,
        request.launch_options(),
        request.navigation_options(),
        request.pdf_options(),
        set_title(request.title),
    )
    return RenderOutcome(content=pdf_bytes, media_type="application/pdf")


def safe_write(path: Path, content: str | bytes) -> Path:
    """
    Atomic write to file.
    Writes to a temp file in the same directory, then renames.
    The directory must already exist.
    """
    is_text = isinstance(content, str)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".tmp_{path.name}_", text=is_text)

    try:
        if is_text:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)

        os.replace(tmp_path, path)

    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    return path


def write_outcome(
    outcome: RenderOutcome,
    output: str,
    stdout: TextIO | None = None,
) -> None:
    """
    Write the outcome to a file, or to standard output when ``output`` is ``-``.

    Empty outcomes (browser action) write nothing.
    """
    if outcome.is_empty:
        return

    if output != STDOUT:
        written = safe_write(Path(output), outcome.content)
        logger.info(f"Wrote {written}")
        return

    stdout = stdout or sys.stdout
    if isinstance(outcome.content, bytes):
        buffer: BinaryIO = getattr(stdout, "buffer", stdout)
        stdout.flush()
        buffer.write(outcome.content)
        buffer.flush()
    else:
        stdout.write(outcome.content)
        stdout.flush()
