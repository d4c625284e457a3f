"""Units module - parse and normalize size options."""

from .schemas import Border, Dimension, FontSize, Magnitude, Margin, Matrix, Unit
from .service import (
    convert_length,
    parse_magnitude,
    parse_matrix,
    parse_scale,
    parse_timeout,
    parse_values,
    resolve_format,
    resolve_margin,
    resolve_pair,
    to_unit,
)

__all__ = [
    "Border",
    "Dimension",
    "FontSize",
    "Magnitude",
    "Margin",
    "Matrix",
    "Unit",
    "convert_length",
    "parse_magnitude",
    "parse_matrix",
    "parse_scale",
    "parse_timeout",
    "parse_values",
    "resolve_format",
    "resolve_margin",
    "resolve_pair",
    "to_unit",
]
