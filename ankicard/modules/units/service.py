"""
Units service - parse and normalize size options.

Every parser takes the raw command line text and returns a validated value in
the option's canonical unit, or raises a ValidationError subclass.
"""

import re
from collections.abc import Sequence
from fractions import Fraction

from ankicard.shared.errors import (
    InvalidDimension,
    InvalidMagnitude,
    InvalidOption,
    TooManyValues,
)

from .papers import LANDSCAPE_SUFFIX, PAPER_SIZES
from .schemas import MM_PER_UNIT, Dimension, Magnitude, Margin, Matrix, Unit

MAGNITUDE_PATTERN = re.compile(
    r"((?:0|[1-9][0-9]*)(?:\.[0-9]+)?)(mm|cm|m|pc|pt|in|ft|px)?"
)
MATRIX_PATTERN = re.compile(r"([1-9][0-9]*)(?:,([1-9][0-9]*))?")
SCALE_PATTERN = re.compile(r"0\.[1-9][0-9]*|1(?:\.[0-9]+)?|2(?:\.0+)?")
TIMEOUT_PATTERN = re.compile(r"0|[1-9][0-9]*")


# =============================================================================
# SINGLE VALUES
# =============================================================================

def convert_length(value: float, from_unit: Unit, to_unit: Unit) -> float:
    """
    Convert a length between two units.

    Args:
        value: Length in ``from_unit``
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        Length in ``to_unit``
    """
    if from_unit == to_unit:
        return value
    return float(Fraction(value) * MM_PER_UNIT[from_unit] / MM_PER_UNIT[to_unit])


def parse_magnitude(token: str) -> Magnitude:
    """Parse ``<number>[<unit>]``, e.g. ``"2.5cm"`` or ``"5"``."""
    match = MAGNITUDE_PATTERN.fullmatch(token)
    if not match:
        raise InvalidMagnitude(token)

    number, unit = match.groups()
    return Magnitude(value=float(number), unit=Unit(unit) if unit else None)


def to_unit(token: str, unit: Unit = Unit.MM) -> float:
    """
    Parse a magnitude token and express it in ``unit``.

    A token without a unit is taken to be in ``unit`` already.
    """
    magnitude = parse_magnitude(token)
    if magnitude.unit is None:
        return magnitude.value
    return convert_length(magnitude.value, magnitude.unit, unit)


# =============================================================================
# LISTS
# =============================================================================

def parse_values(text: str, unit: Unit = Unit.MM, max_count: int | None = None) -> list[float]:
    """
    Parse comma separated magnitudes into ``unit``.

    Args:
        text: Raw option value, e.g. ``"10,20.5mm,3cm"``
        unit: Target unit
        max_count: Maximum number of values, or None for no limit

    Returns:
        The converted values in input order
    """
    values = [to_unit(item, unit) for item in text.split(",")]

    if max_count is not None and len(values) > max_count:
        raise TooManyValues(text, len(values), max_count)

    return values


def resolve_pair(text: str, fields: Sequence[str], unit: Unit = Unit.MM) -> dict[str, float]:
    """
    Parse one or two magnitudes onto two named fields.

    A single value is used for both fields: ``resolve_pair("5", ("a", "b"))``
    gives ``{"a": 5.0, "b": 5.0}``.
    """
    first, second = fields
    values = parse_values(text, unit, max_count=2)

    return {first: values[0], second: values[1] if len(values) > 1 else values[0]}


def resolve_margin(text: str) -> Margin:
    """
    Parse one to four margins (top, right, bottom, left) in millimeters.

    Missing sides are filled from sides already resolved: right and bottom
    from top, left from right (which itself may come from top).
    """
    values = parse_values(text, Unit.MM, max_count=4)
    top = values[0]
    right = values[1] if len(values) > 1 else top
    bottom = values[2] if len(values) > 2 else top
    left = values[3] if len(values) > 3 else right

    return Margin(top=top, right=right, bottom=bottom, left=left)


def resolve_format(text: str) -> Dimension:
    """
    Resolve a paper size name or explicit width/height to millimeters.

    ``"A4"`` is portrait (210x297), ``"A4:L"`` landscape (297x210). Names are
    case-sensitive. Anything else is read as one or two magnitudes defaulting
    to millimeters.
    """
    if text in PAPER_SIZES:
        width, height = PAPER_SIZES[text]
        return Dimension(width=width, height=height)

    if text.endswith(LANDSCAPE_SUFFIX):
        name = text[: -len(LANDSCAPE_SUFFIX)]
        if name in PAPER_SIZES:
            width, height = PAPER_SIZES[name]
            return Dimension(width=height, height=width)

    try:
        return Dimension(**resolve_pair(text, ("width", "height"), Unit.MM))
    except (InvalidMagnitude, TooManyValues) as e:
        raise InvalidDimension(text) from e


# =============================================================================
# SCALARS
# =============================================================================

def parse_matrix(text: str) -> Matrix:
    """Parse ``"rows[,cols]"``; a single number is used for both."""
    match = MATRIX_PATTERN.fullmatch(text)
    if not match:
        raise InvalidOption(
            f"Expected one or two comma separated positive integers, got {text!r}.",
            details={"value": text},
        )

    row, col = match.groups()
    return Matrix(row=int(row), col=int(col or row))


def parse_scale(text: str) -> float:
    """Parse a page scale between 0.1 and 2."""
    if not SCALE_PATTERN.fullmatch(text):
        raise InvalidOption(
            f"Expected a real number from 0.1 to 2, got {text!r}.",
            details={"value": text},
        )
    return float(text)


def parse_timeout(text: str) -> int:
    """Parse a non-negative integer number of milliseconds."""
    if not TIMEOUT_PATTERN.fullmatch(text):
        raise InvalidOption(
            f"Expected a non-negative integer (milliseconds), got {text!r}.",
            details={"value": text},
        )
    return int(text)
