"""Exception hierarchy for obj_mox."""

from __future__ import annotations


class ObjMoxError(Exception):
    """Base class for all obj_mox errors."""


class ConfigurationError(ObjMoxError):
    """Raised when a stub, matcher or verification mode is malformed."""


class MissingInvocationError(ConfigurationError):
    """Raised when ``when()`` is used without a preceding double call."""

    DEFAULT_MESSAGE = (
        "when() requires a call on a test double, e.g. "
        "mox.when(mock.pop(0)).then_return(1)"
    )


class ConfiguredError(ObjMoxError, RuntimeError):
    """Default error raised by ``then_raise()``/``do_raise()`` without arguments."""


class VerificationError(ObjMoxError, AssertionError):
    """Raised when recorded invocations do not satisfy a verification."""


class WantedButNotInvokedError(VerificationError):
    """A wanted call never happened."""


class TooFewInvocationsError(VerificationError):
    """A wanted call happened fewer times than required."""


class TooManyInvocationsError(VerificationError):
    """A wanted call happened more times than allowed."""


class InOrderVerificationError(VerificationError):
    """Calls happened, but not in the confirmed order."""


class NoInteractionsWantedError(VerificationError):
    """A double saw calls that should not have happened."""


class UnnecessaryStubbingError(VerificationError):
    """Strict stubbing found stubs that were never used."""


__all__ = [
    "ConfigurationError",
    "ConfiguredError",
    "InOrderVerificationError",
    "MissingInvocationError",
    "NoInteractionsWantedError",
    "ObjMoxError",
    "TooFewInvocationsError",
    "TooManyInvocationsError",
    "UnnecessaryStubbingError",
    "VerificationError",
    "WantedButNotInvokedError",
]
