"""Exception types and error formatting."""

import traceback


class Scan2MeetError(ValueError):
    """Base class for errors raised by scan2meet."""


class ExtractionError(Scan2MeetError):
    """Raised when a card image cannot be turned into contact fields."""


class ResearchError(Scan2MeetError):
    """Raised when a research request fails."""


def format_error(err: BaseException | object) -> str:
    """Render an error message followed by its traceback, if it has one."""
    if isinstance(err, BaseException):
        message = str(err) or type(err).__name__
        if err.__traceback__ is not None:
            stack = "".join(traceback.format_tb(err.__traceback__)).rstrip()
            return f"{message}\nStack:\n{stack}"
        return message
    return str(err)
