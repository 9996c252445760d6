"""Argument matchers used when stubbing and verifying calls."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as t

from .errors import ConfigurationError


class ArgumentMatcher:
    """Base class for values that match call arguments by predicate.

    Any argument passed to a double that is an :class:`ArgumentMatcher` is
    kept as-is when a stub or verification is built from the call; every
    other argument is compared by equality through :class:`Eq`.
    """

    __slots__ = ()

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the matcher."""
        raise NotImplementedError


@dc.dataclass(frozen=True, slots=True)
class Any(ArgumentMatcher):
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


@dc.dataclass(frozen=True, slots=True)
class Eq(ArgumentMatcher):
    """Match values equal to ``expected``."""

    expected: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* equals ``expected``."""
        return bool(value == self.expected)


@dc.dataclass(frozen=True, slots=True)
class IsA(ArgumentMatcher):
    """Match instances of ``typ``.

    ``bool`` is rejected when ``typ`` is ``int`` so that ``IsA(int)`` reads
    the way ``anyInt()`` does in other mocking libraries.
    """

    typ: type

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        if self.typ is int and isinstance(value, bool):
            return False
        return isinstance(value, self.typ)


@dc.dataclass(frozen=True, slots=True)
class Between(ArgumentMatcher):
    """Match values in the inclusive range ``low``..``high``."""

    low: t.Any
    high: t.Any

    def __post_init__(self) -> None:
        """Reject inverted or incomparable ranges."""
        try:
            inverted = self.low > self.high
        except TypeError as exc:
            msg = f"Between() bounds {self.low!r} and {self.high!r} cannot be compared"
            raise ConfigurationError(msg) from exc
        if inverted:
            msg = f"Between() lower bound {self.low!r} exceeds upper {self.high!r}"
            raise ConfigurationError(msg)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* lies within the range."""
        try:
            return bool(self.low <= value <= self.high)  # type: ignore[operator]
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class Regex(ArgumentMatcher):
    """Match strings where ``pattern`` is found."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Compile the pattern once."""
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        if not isinstance(value, str):
            return False
        return bool(self._compiled.search(value))


@dc.dataclass(frozen=True, slots=True)
class Contains(ArgumentMatcher):
    """Match containers holding ``item``."""

    item: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class StartsWith(ArgumentMatcher):
    """Match strings beginning with ``prefix``."""

    prefix: str

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class Predicate(ArgumentMatcher):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))


@dc.dataclass(frozen=True, slots=True)
class Not(ArgumentMatcher):
    """Invert another matcher or an equality check."""

    matcher: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` when the wrapped matcher rejects *value*."""
        return not as_matcher(self.matcher)(value)


def as_matcher(value: object) -> ArgumentMatcher:
    """Return *value* unchanged if it is a matcher, else wrap it in :class:`Eq`."""
    if isinstance(value, ArgumentMatcher):
        return value
    return Eq(value)


__all__ = [
    "Any",
    "ArgumentMatcher",
    "Between",
    "Contains",
    "Eq",
    "IsA",
    "Not",
    "Predicate",
    "Regex",
    "StartsWith",
    "as_matcher",
]
