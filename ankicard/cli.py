"""
Command line interface.

Options are validated while parsing; a bad value ends the program with the
usage exit status before any browser is started. Render failures are written
to stderr with their traceback, whatever the log level, and mapped to an
exit status by category.
"""

import asyncio
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import click

from ankicard import __version__
from ankicard.config import get_settings
from ankicard.modules.render import RenderOutcome, RenderRequest, resolve_url
from ankicard.modules.render.query import path_to_url
from ankicard.modules.render.schemas import ACTIONS, REVERSALS
from ankicard.modules.sources import concat_sources
from ankicard.modules.units import (
    Border,
    FontSize,
    Unit,
    parse_matrix,
    parse_scale,
    parse_timeout,
    resolve_format,
    resolve_margin,
    resolve_pair,
)
from ankicard.pipeline import execute, write_outcome
from ankicard.shared.errors import ExitCode, ValidationError, classify_error
from ankicard.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)

PROG_NAME = "anki-card"


class ParsedOption(click.ParamType):
    """Click type backed by one of the units parsers."""

    def __init__(self, name: str, parser: Callable[[str], Any]):
        self.name = name
        self.parser = parser

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return self.parser(value)
        except ValidationError as e:
            self.fail(e.message, param, ctx)


BORDER = ParsedOption("border", lambda v: Border(**resolve_pair(v, ("inner", "outer"), Unit.MM)))
FONT_SIZE = ParsedOption("font-size", lambda v: FontSize(**resolve_pair(v, ("front", "back"), Unit.PT)))
MATRIX = ParsedOption("matrix", parse_matrix)
DIMENSION = ParsedOption("size", resolve_format)
MARGIN = ParsedOption("margin", resolve_margin)
SCALE = ParsedOption("scale", parse_scale)
TIMEOUT = ParsedOption("msec", parse_timeout)
URL = ParsedOption("url", resolve_url)


@dataclass(frozen=True)
class Invocation:
    """Parsed command line: CSV sources plus every other option."""
    sources: tuple[str, ...]
    options: dict[str, Any]


@click.command(
    name=PROG_NAME,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Generate a flashcard PDF from CSV.",
)
@click.argument("csvfile", nargs=-1)
# Card table
@click.option("-b", "--border", type=BORDER, default="0.3mm,0mm", show_default=True,
              help="Inner and outer border width of the card table.")
@click.option("-f", "--font-size", type=FONT_SIZE, default="22pt,18pt", show_default=True,
              help="Font size of the front and back of the cards.")
@click.option("-m", "--matrix", type=MATRIX, default="6,4", show_default=True,
              help="Rows and columns of the card table.")
@click.option("-r", "--rev", type=click.Choice(REVERSALS), default="horizontal", show_default=True,
              help="Direction in which back pages are reversed.")
@click.option("-s", "--size", type=DIMENSION, default="297mm,210mm", show_default=True,
              help="Width and height of the card table.")
@click.option("-u", "--url", type=URL, default=None,
              help="Page URL or file to render.  [default: bundled template]")
@click.option("--html/--no-html", default=None,
              help="Treat card text as HTML.")
# PDF
@click.option("-F", "--format", "page_format", type=DIMENSION, default="A4:L", show_default=True,
              help="Paper size name or page width and height.")
@click.option("-M", "--margin", type=MARGIN, default="0mm", show_default=True,
              help="Top, right, bottom and left page margins.")
@click.option("-S", "--scale", type=SCALE, default="1", show_default=True,
              help="Scale of the page rendering (0.1 to 2).")
@click.option("-T", "--title", default=None, help="Document title.")
@click.option("--header", default="<div></div>", show_default=True, help="Header template.")
@click.option("--footer", default="<div></div>", show_default=True, help="Footer template.")
# Browser
@click.option("-a", "--chrome-arg", "chrome_args", multiple=True,
              help="Argument for Chromium or Google Chrome (repeatable).")
@click.option("-p", "--chrome-path", default=None,
              help="Path to Chromium or Google Chrome.  [default: Playwright's Chromium]")
@click.option("-t", "--timeout", type=TIMEOUT, default=None,
              help="Timeout in milliseconds, 0 disables.  [default: 60000]")
# Output
@click.option("--action", type=click.Choice(ACTIONS), default="pdf", show_default=True,
              help="Output the URL, open it in a browser, or export HTML or PDF.")
@click.option("-o", "--output", default="-", show_default=True,
              help="Output file, '-' for standard output.")
@click.version_option(__version__, "-V", "--version", prog_name=PROG_NAME)
def cli(csvfile: tuple[str, ...], page_format: Any, **options: Any) -> Invocation:
    settings = get_settings()

    options["format"] = page_format
    if options["url"] is None:
        options["url"] = path_to_url(settings.template_path)
    if options["chrome_path"] is None:
        options["chrome_path"] = settings.chrome_path
    if options["timeout"] is None:
        options["timeout"] = settings.timeout_ms
    options["chrome_args"] = tuple(settings.chrome_args) + tuple(options["chrome_args"])

    return Invocation(sources=csvfile or ("-",), options=options)


async def produce(invocation: Invocation) -> RenderOutcome:
    """Read the CSV sources and run the requested action."""
    csv = await concat_sources(invocation.sources)
    request = RenderRequest(csv=csv, **invocation.options)
    return await execute(request)


def run(argv: Sequence[str] | None = None) -> int:
    """
    Run the command line program.

    Returns:
        Process exit status
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        args = list(argv) if argv is not None else None
        result = cli.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return ExitCode.USAGE

    # --help and --version
    if not isinstance(result, Invocation):
        return result or ExitCode.OK

    try:
        outcome = asyncio.run(produce(result))
        write_outcome(outcome, result.options["output"])
    except Exception as e:
        category = classify_error(e)
        logger.info(f"{PROG_NAME} failed ({category.value} failure)")
        click.echo(traceback.format_exc(), err=True, nl=False)
        return category.exit_code

    return ExitCode.OK
