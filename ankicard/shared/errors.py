"""
Error hierarchy and exit-status classification.

Every error raised by anki-card carries a failure category. The command line
layer only reads that category to choose the process exit status; the
message and traceback are always reported unchanged.
"""

from enum import Enum, IntEnum
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ExitCode(IntEnum):
    """Process exit statuses (BSD sysexits.h values)."""
    OK = 0
    USAGE = 64
    SOFTWARE = 70
    TEMPFAIL = 75
    PROTOCOL = 76


class FailureCategory(str, Enum):
    """Classification of a failure that escaped the render pipeline."""
    TEMPORARY = "temporary"
    PROTOCOL = "protocol"
    SOFTWARE = "software"

    @property
    def exit_code(self) -> ExitCode:
        return {
            FailureCategory.TEMPORARY: ExitCode.TEMPFAIL,
            FailureCategory.PROTOCOL: ExitCode.PROTOCOL,
            FailureCategory.SOFTWARE: ExitCode.SOFTWARE,
        }[self]


class AnkiCardError(Exception):
    """Base error for anki-card."""

    code: str = "ANKI_CARD_ERROR"
    category: FailureCategory = FailureCategory.SOFTWARE

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable dict."""
        result: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationError(AnkiCardError):
    """Invalid command line value. Reported as a usage error."""
    code = "VALIDATION_ERROR"


class InvalidMagnitude(ValidationError):
    """A token is not a non-negative number with an optional known unit."""
    code = "INVALID_MAGNITUDE"

    def __init__(self, token: str):
        super().__init__(
            "Expected a non-negative real number with an optional unit; "
            "supported units are mm, cm, m, pc, pt, in, ft, px "
            f"(e.g. 2.5, 2.5cm), got {token!r}.",
            details={"token": token},
        )


class TooManyValues(ValidationError):
    """More comma separated values than the option accepts."""
    code = "TOO_MANY_VALUES"

    def __init__(self, value: str, count: int, limit: int):
        super().__init__(
            f"At most {limit} comma separated values are allowed "
            f"(e.g. 150, 150mm, 250,12cm), got {count} in {value!r}.",
            details={"value": value, "count": count, "limit": limit},
        )


class InvalidDimension(ValidationError):
    """Neither a paper size name nor a list of one or two magnitudes."""
    code = "INVALID_DIMENSION"

    def __init__(self, value: str):
        super().__init__(
            "Expected a paper size name or up to two comma separated "
            f"magnitudes (e.g. A4, A3:L, 150, 150mm, 250,12cm), got {value!r}.",
            details={"value": value},
        )


class InvalidOption(ValidationError):
    """A scalar option (matrix, scale, timeout) is malformed."""
    code = "INVALID_OPTION"


# =============================================================================
# RENDER PIPELINE
# =============================================================================

class TemporaryFailure(AnkiCardError):
    """The browser did not answer in time. Retrying may help."""
    code = "TEMPORARY_FAILURE"
    category = FailureCategory.TEMPORARY


class LaunchFailure(TemporaryFailure):
    """The browser process could not be started within the timeout."""
    code = "LAUNCH_FAILURE"


class NavigationTimeout(TemporaryFailure):
    """The page did not reach load and network idle within the timeout."""
    code = "NAVIGATION_TIMEOUT"


class ExportTimeout(TemporaryFailure):
    """The HTML or PDF export did not finish within the timeout."""
    code = "EXPORT_TIMEOUT"


class ProtocolFailure(AnkiCardError):
    """The browser automation protocol reported an error."""
    code = "PROTOCOL_FAILURE"
    category = FailureCategory.PROTOCOL


class SoftwareFailure(AnkiCardError):
    """Any other failure."""
    code = "SOFTWARE_FAILURE"


class PageScriptError(SoftwareFailure):
    """A script evaluated in the page threw."""
    code = "PAGE_SCRIPT_ERROR"


class SessionClosed(SoftwareFailure):
    """An operation was attempted on a released browser session."""
    code = "SESSION_CLOSED"


def classify_error(exc: BaseException) -> FailureCategory:
    """
    Map a failure from the render pipeline to a failure category.

    Errors raised by anki-card carry their own category. Playwright errors
    that were not translated are mapped by type. Anything else, including
    validation errors that reach this layer, is a software failure.
    """
    if isinstance(exc, AnkiCardError):
        return exc.category
    if isinstance(exc, PlaywrightTimeoutError):
        return FailureCategory.TEMPORARY
    if isinstance(exc, PlaywrightError):
        return FailureCategory.PROTOCOL
    return FailureCategory.SOFTWARE
