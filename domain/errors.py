"""
Exception hierarchy for the recognition core.

Per-frame errors (InvalidFrame) are absorbed by the pipeline; lifecycle
misuse is reported through return values, not exceptions. Only StoreError
and InvalidSource reach the application.
"""


class SignKeyError(Exception):
    """Base class for all errors raised by this package."""


class InvalidFrame(SignKeyError, ValueError):
    """Malformed landmark input (wrong point count, bad coordinates)."""


class InvalidLabel(SignKeyError, ValueError):
    """A training label that is empty after normalisation."""


class InvalidSource(SignKeyError):
    """The object given to Session.start() is not a usable frame source."""


class StoreError(SignKeyError):
    """Loading from or saving to the persistent store failed."""
