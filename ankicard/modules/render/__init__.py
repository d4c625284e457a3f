"""Render module - load the flashcard page in Chromium and export it."""

from .mutations import PageMutation, set_title, strip_chrome
from .query import build_url, resolve_url
from .schemas import (
    LaunchOptions,
    NavigationOptions,
    PdfOptions,
    RenderOutcome,
    RenderRequest,
)
from .service import RenderService, RenderState
from .session import BrowserSession, open_session

__all__ = [
    "BrowserSession",
    "LaunchOptions",
    "NavigationOptions",
    "PageMutation",
    "PdfOptions",
    "RenderOutcome",
    "RenderRequest",
    "RenderService",
    "RenderState",
    "build_url",
    "open_session",
    "resolve_url",
    "set_title",
    "strip_chrome",
]
