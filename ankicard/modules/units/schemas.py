"""
Units module value objects.

All lengths are stored as plain floats in the canonical unit of the option
they belong to (millimeters, or points for font sizes).
"""

from decimal import Decimal
from enum import Enum
from fractions import Fraction

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# UNITS
# =============================================================================

class Unit(str, Enum):
    """CSS absolute length units accepted on the command line."""
    MM = "mm"
    CM = "cm"
    M = "m"
    PC = "pc"
    PT = "pt"
    IN = "in"
    FT = "ft"
    PX = "px"


# Exact millimeters per unit. 1in = 25.4mm, 1pt = 1/72in, 1pc = 12pt, 1px = 1/96in.
MM_PER_INCH = Fraction(254, 10)

MM_PER_UNIT: dict[Unit, Fraction] = {
    Unit.MM: Fraction(1),
    Unit.CM: Fraction(10),
    Unit.M: Fraction(1000),
    Unit.IN: MM_PER_INCH,
    Unit.FT: MM_PER_INCH * 12,
    Unit.PT: MM_PER_INCH / 72,
    Unit.PC: MM_PER_INCH / 6,
    Unit.PX: MM_PER_INCH / 96,
}


class Magnitude(BaseModel):
    """A non-negative number with an optional unit."""
    model_config = ConfigDict(frozen=True)

    value: float = Field(ge=0)
    unit: Unit | None = None


# =============================================================================
# RESOLVED OPTIONS
# =============================================================================

class Dimension(BaseModel):
    """Width and height in millimeters."""
    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0)
    height: float = Field(ge=0)


class Border(BaseModel):
    """Inner and outer card table border widths in millimeters."""
    model_config = ConfigDict(frozen=True)

    inner: float = Field(ge=0)
    outer: float = Field(ge=0)


class FontSize(BaseModel):
    """Front and back font sizes in points."""
    model_config = ConfigDict(frozen=True)

    front: float = Field(ge=0)
    back: float = Field(ge=0)


class Matrix(BaseModel):
    """Rows and columns of the card table."""
    model_config = ConfigDict(frozen=True)

    row: int = Field(ge=1)
    col: int = Field(ge=1)


class Margin(BaseModel):
    """Page margins in millimeters."""
    model_config = ConfigDict(frozen=True)

    top: float = Field(default=0, ge=0)
    right: float = Field(default=0, ge=0)
    bottom: float = Field(default=0, ge=0)
    left: float = Field(default=0, ge=0)

    def sides(self) -> dict[str, float]:
        """Sides in CSS order."""
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}

    def css(self) -> dict[str, str]:
        """Sides as CSS lengths, e.g. ``{"top": "5mm", ...}``."""
        return {side: f"{format_number(value)}mm" for side, value in self.sides().items()}


def format_number(value: float) -> str:
    """Plain decimal text for a number, without a trailing ``.0`` or an exponent."""
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")
