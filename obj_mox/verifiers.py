"""Verification modes and helpers for :class:`ObjMox`."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t
from textwrap import indent

from .errors import (
    ConfigurationError,
    InOrderVerificationError,
    NoInteractionsWantedError,
    TooFewInvocationsError,
    TooManyInvocationsError,
    UnnecessaryStubbingError,
    VerificationError,
    WantedButNotInvokedError,
)

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .invocation import Invocation, InvocationMatcher
    from .test_doubles import TestDouble

logger = logging.getLogger(__name__)


def _check_count(count: int, mode: str) -> None:
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        msg = f"{mode}() requires a non-negative integer count, got {count!r}"
        raise ConfigurationError(msg)


@dc.dataclass(frozen=True, slots=True)
class Times:
    """Require exactly ``count`` matching calls."""

    count: int

    def __post_init__(self) -> None:
        """Validate the count."""
        _check_count(self.count, "times")

    @property
    def minimum(self) -> int:
        """Return the smallest acceptable number of calls."""
        return self.count

    @property
    def maximum(self) -> int | None:
        """Return the largest acceptable number of calls."""
        return self.count

    def describe(self) -> str:
        """Return a readable form of the constraint."""
        return "never" if self.count == 0 else f"exactly {self.count}"


@dc.dataclass(frozen=True, slots=True)
class AtLeast:
    """Require ``count`` or more matching calls."""

    count: int

    def __post_init__(self) -> None:
        """Validate the count."""
        _check_count(self.count, "at_least")

    @property
    def minimum(self) -> int:
        """Return the smallest acceptable number of calls."""
        return self.count

    @property
    def maximum(self) -> int | None:
        """Return ``None``: there is no upper bound."""
        return None

    def describe(self) -> str:
        """Return a readable form of the constraint."""
        return f"at least {self.count}"


@dc.dataclass(frozen=True, slots=True)
class AtMost:
    """Allow up to ``count`` matching calls."""

    count: int

    def __post_init__(self) -> None:
        """Validate the count."""
        _check_count(self.count, "at_most")

    @property
    def minimum(self) -> int:
        """Return ``0``: no call is required."""
        return 0

    @property
    def maximum(self) -> int | None:
        """Return the largest acceptable number of calls."""
        return self.count

    def describe(self) -> str:
        """Return a readable form of the constraint."""
        return f"at most {self.count}"


VerificationMode: t.TypeAlias = Times | AtLeast | AtMost


def times(count: int) -> Times:
    """Require exactly *count* calls."""
    return Times(count)


def never() -> Times:
    """Require no calls; an alias for ``times(0)``."""
    return Times(0)


def at_least(count: int) -> AtLeast:
    """Require *count* or more calls."""
    return AtLeast(count)


def at_least_once() -> AtLeast:
    """Require one or more calls."""
    return AtLeast(1)


def at_most(count: int) -> AtMost:
    """Allow up to *count* calls."""
    return AtMost(count)


# ----------------------------------------------------------------------
# Message formatting
# ----------------------------------------------------------------------
def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_invocations(invocations: t.Iterable[Invocation]) -> str:
    return _numbered([inv.describe() for inv in invocations])


def _closest_mismatch(
    matcher: InvocationMatcher, invocations: t.Sequence[Invocation]
) -> str:
    """Explain why the first call to the same method did not match."""
    for inv in invocations:
        if inv.method == matcher.method:
            return f"{inv.describe()}: {matcher.explain_mismatch(inv)}"
    return ""


def _count_error(mode: VerificationMode, actual: int) -> type[VerificationError]:
    if actual < mode.minimum:
        return WantedButNotInvokedError if actual == 0 else TooFewInvocationsError
    return TooManyInvocationsError


def _count_title(error: type[VerificationError]) -> str:
    return {
        WantedButNotInvokedError: "Wanted but not invoked.",
        TooFewInvocationsError: "Too few invocations.",
        TooManyInvocationsError: "Too many invocations.",
    }[error]


def satisfied(mode: VerificationMode, actual: int) -> bool:
    """Return ``True`` if *actual* calls meet *mode*."""
    if actual < mode.minimum:
        return False
    return mode.maximum is None or actual <= mode.maximum


# ----------------------------------------------------------------------
# Verifiers
# ----------------------------------------------------------------------
class CountVerifier:
    """Check that a call happened the required number of times."""

    def verify(
        self,
        double: TestDouble,
        matcher: InvocationMatcher,
        mode: VerificationMode,
    ) -> list[Invocation]:
        """Return matching invocations, raising if their count breaks *mode*."""
        recorded = list(double._mox_invocations)
        matching = [inv for inv in recorded if matcher.matches(inv)]
        actual = len(matching)
        if satisfied(mode, actual):
            return matching
        error = _count_error(mode, actual)
        msg = _format_sections(
            _count_title(error),
            [
                ("Wanted", matcher.describe(double._mox_name)),
                ("Expected calls", mode.describe()),
                ("Observed calls", str(actual)),
                ("Recorded invocations", _describe_invocations(recorded)),
                (
                    "Closest mismatch",
                    "" if matching else _closest_mismatch(matcher, recorded),
                ),
            ],
        )
        logger.debug("Verification failed: %s", msg)
        raise error(msg)


class OrderVerifier:
    """Confirm calls one by one against their global call order.

    Each confirmed call moves a marker forward; later verifications only
    consider invocations recorded after the marker.
    """

    def __init__(self, doubles: t.Sequence[TestDouble]) -> None:
        self._doubles = list(doubles)
        self._marker = 0
        self._last: Invocation | None = None

    def _observed(self) -> list[Invocation]:
        merged = [inv for dbl in self._doubles for inv in dbl._mox_invocations]
        return sorted(merged, key=lambda inv: inv.sequence)

    def _require_member(self, double: TestDouble) -> None:
        if not any(double is member for member in self._doubles):
            msg = f"{double!r} was not passed to in_order()"
            raise ConfigurationError(msg)

    def verify(
        self,
        double: TestDouble,
        matcher: InvocationMatcher,
        mode: VerificationMode,
    ) -> list[Invocation]:
        """Confirm *matcher* after the marker and return the confirmed calls."""
        self._require_member(double)
        later = [
            inv
            for inv in double._mox_invocations
            if inv.sequence > self._marker and matcher.matches(inv)
        ]
        # A single wanted call is satisfied by the first match; other modes
        # count every match after the marker.
        chunk = later[:1] if mode == Times(1) else later
        if satisfied(mode, len(chunk)):
            if chunk:
                self._marker = chunk[-1].sequence
                self._last = chunk[-1]
            return chunk
        raise self._failure(double, matcher, mode, len(chunk))

    def _failure(
        self,
        double: TestDouble,
        matcher: InvocationMatcher,
        mode: VerificationMode,
        actual: int,
    ) -> VerificationError:
        earlier = [
            inv
            for inv in double._mox_invocations
            if inv.sequence <= self._marker and matcher.matches(inv)
        ]
        if actual == 0 and earlier and mode.minimum > 0:
            error: type[VerificationError] = InOrderVerificationError
            title = "Verification in order failure."
        else:
            error = _count_error(mode, actual)
            title = _count_title(error)
        after = "(start)" if self._last is None else self._last.describe()
        msg = _format_sections(
            title,
            [
                ("Wanted", matcher.describe(double._mox_name)),
                ("Expected calls", mode.describe()),
                ("After", after),
                ("Observed calls after that point", str(actual)),
                ("Observed order", _describe_invocations(self._observed())),
            ],
        )
        logger.debug("In-order verification failed: %s", msg)
        return error(msg)

    def unverified_after_marker(self) -> list[Invocation]:
        """Return unconfirmed calls recorded after the marker."""
        return [
            inv
            for inv in self._observed()
            if inv.sequence > self._marker and not inv.verified
        ]


class InteractionVerifier:
    """Check for calls that should not have happened."""

    def verify_none(self, doubles: t.Iterable[TestDouble]) -> None:
        """Raise if any double recorded an invocation."""
        for double in doubles:
            if double._mox_invocations:
                msg = _format_sections(
                    "No interactions wanted.",
                    [
                        ("Double", repr(double)),
                        (
                            "Recorded invocations",
                            _describe_invocations(double._mox_invocations),
                        ),
                    ],
                )
                raise NoInteractionsWantedError(msg)

    def verify_all_verified(
        self, unverified: t.Sequence[Invocation], *, context: str
    ) -> None:
        """Raise if *unverified* is not empty."""
        if not unverified:
            return
        msg = _format_sections(
            "No more interactions wanted.",
            [
                ("Scope", context),
                ("Unverified invocations", _describe_invocations(unverified)),
            ],
        )
        raise NoInteractionsWantedError(msg)


class StubbingVerifier:
    """Report stubbings no call ever used."""

    def verify(self, doubles: t.Iterable[TestDouble]) -> None:
        """Raise if any stubbing on *doubles* is unused."""
        unused = [
            stubbing.describe(double._mox_name)
            for double in doubles
            for stubbing in double._mox_stubbings
            if not stubbing.used
        ]
        if not unused:
            return
        msg = _format_sections(
            "Unnecessary stubbings detected.",
            [
                ("Unused stubbings", _numbered(unused)),
                (
                    "Hint",
                    "remove them, or disable strict_stubs for this test",
                ),
            ],
        )
        raise UnnecessaryStubbingError(msg)


__all__ = [
    "AtLeast",
    "AtMost",
    "CountVerifier",
    "InteractionVerifier",
    "OrderVerifier",
    "StubbingVerifier",
    "Times",
    "VerificationMode",
    "at_least",
    "at_least_once",
    "at_most",
    "never",
    "satisfied",
    "times",
]
