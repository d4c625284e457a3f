"""Sources module - read CSV input files and stdin."""

from .service import concat_sources

__all__ = ["concat_sources"]
