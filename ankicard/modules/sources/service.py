"""
CSV sources - read and concatenate input files.

Sources are read concurrently and joined in the order given.
"""

import asyncio
import sys
from collections.abc import Sequence
from typing import TextIO

from ankicard.shared.logging import get_logger

logger = get_logger(__name__)

STDIN = "-"
SEPARATOR = "\r\n"


def _strip_line_end(text: str) -> str:
    """Remove a single trailing ``\\n`` or ``\\r\\n``."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def _read_source(source: str, first_stdin: bool, stdin: TextIO) -> str:
    if source != STDIN:
        with open(source, encoding="utf-8", newline="") as f:
            return f.read()
    if not first_stdin:
        # stdin was already consumed by an earlier "-"
        return ""
    return stdin.read()


async def concat_sources(sources: Sequence[str], stdin: TextIO | None = None) -> str:
    """
    Read CSV sources and join them with CRLF.

    Args:
        sources: File paths, or ``-`` for standard input. Only the first ``-``
            reads stdin; later ones contribute nothing.
        stdin: Stream to use for ``-`` (defaults to ``sys.stdin``)

    Returns:
        The concatenated CSV text
    """
    stdin = stdin if stdin is not None else sys.stdin
    sources = list(sources) or [STDIN]

    stdin_index = sources.index(STDIN) if STDIN in sources else -1
    contents = await asyncio.gather(*(
        asyncio.to_thread(_read_source, source, i == stdin_index, stdin)
        for i, source in enumerate(sources)
    ))

    result = ""
    for source, content in zip(sources, contents):
        if result and content:
            result += SEPARATOR
        result += _strip_line_end(content)
        logger.debug(f"Read {len(content)} characters from {source}")

    return result
