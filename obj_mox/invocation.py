"""Invocation records and the matchers built from them."""

from __future__ import annotations

import dataclasses as dc
import itertools
import typing as t

from .matchers import ArgumentMatcher, Eq, as_matcher

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .test_doubles import TestDouble

_REPR_FIELD_LIMIT: t.Final[int] = 80

# Shared across every controller so in-order checks can span doubles.
_SEQUENCE = itertools.count(1)


def next_sequence() -> int:
    """Return the next global invocation sequence index."""
    return next(_SEQUENCE)


def _shorten(text: str, limit: int = _REPR_FIELD_LIMIT) -> str:
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 1]}…"


def format_arguments(
    args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
) -> str:
    """Return ``args`` and ``kwargs`` rendered like a Python call."""
    parts = [_shorten(repr(arg)) for arg in args]
    parts.extend(
        f"{key}={_shorten(repr(value))}" for key, value in (kwargs or {}).items()
    )
    return ", ".join(parts)


@dc.dataclass(slots=True, eq=False)
class Invocation:
    """A single call recorded on a test double."""

    double: TestDouble
    method: str
    args: tuple[t.Any, ...]
    kwargs: dict[str, t.Any] = dc.field(default_factory=dict)
    sequence: int = dc.field(default_factory=next_sequence)
    verified: bool = False

    def describe(self) -> str:
        """Return ``name.method(args)`` for failure messages."""
        rendered = format_arguments(self.args, self.kwargs)
        return f"{self.double._mox_name}.{self.method}({rendered})"

    def __repr__(self) -> str:
        """Return a convenient debug representation."""
        return f"Invocation(#{self.sequence} {self.describe()})"


@dc.dataclass(slots=True)
class InvocationMatcher:
    """Match invocations by method name and per-argument matchers."""

    method: str
    args: tuple[ArgumentMatcher, ...] = ()
    kwargs: dict[str, ArgumentMatcher] = dc.field(default_factory=dict)

    @classmethod
    def from_call(
        cls, method: str, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> InvocationMatcher:
        """Build a matcher from call arguments, wrapping plain values in ``Eq``."""
        return cls(
            method,
            tuple(as_matcher(arg) for arg in args),
            {key: as_matcher(value) for key, value in kwargs.items()},
        )

    @classmethod
    def from_invocation(cls, invocation: Invocation) -> InvocationMatcher:
        """Build a matcher equivalent to *invocation*'s call."""
        return cls.from_call(invocation.method, invocation.args, invocation.kwargs)

    def matches(self, invocation: Invocation) -> bool:
        """Return ``True`` if *invocation* satisfies this matcher."""
        return (
            invocation.method == self.method
            and self._matches_args(invocation)
            and self._matches_kwargs(invocation)
        )

    def _matches_args(self, invocation: Invocation) -> bool:
        if len(invocation.args) != len(self.args):
            return False
        return all(
            matcher(arg)
            for arg, matcher in zip(invocation.args, self.args, strict=True)
        )

    def _matches_kwargs(self, invocation: Invocation) -> bool:
        if invocation.kwargs.keys() != self.kwargs.keys():
            return False
        return all(
            matcher(invocation.kwargs[key]) for key, matcher in self.kwargs.items()
        )

    def explain_mismatch(self, invocation: Invocation) -> str:
        """Return a short reason *invocation* does not match."""
        if invocation.method != self.method:
            return f"method {invocation.method!r} != {self.method!r}"
        if len(invocation.args) != len(self.args):
            return (
                f"expected {len(self.args)} positional args, "
                f"got {len(invocation.args)}"
            )
        for index, (arg, matcher) in enumerate(
            zip(invocation.args, self.args, strict=True)
        ):
            if not matcher(arg):
                return f"arg[{index}]={arg!r} failed {matcher!r}"
        if invocation.kwargs.keys() != self.kwargs.keys():
            return (
                f"keyword names {sorted(invocation.kwargs)} != {sorted(self.kwargs)}"
            )
        for key, matcher in self.kwargs.items():
            if not matcher(invocation.kwargs[key]):
                return f"{key}={invocation.kwargs[key]!r} failed {matcher!r}"
        return "matches"

    def describe(self, double_name: str) -> str:
        """Return ``name.method(matchers)`` for failure messages."""
        parts = [_describe_matcher(matcher) for matcher in self.args]
        parts.extend(
            f"{key}={_describe_matcher(value)}" for key, value in self.kwargs.items()
        )
        return f"{double_name}.{self.method}({', '.join(parts)})"


def _describe_matcher(matcher: ArgumentMatcher) -> str:
    if isinstance(matcher, Eq):
        return _shorten(repr(matcher.expected))
    return repr(matcher)


__all__ = [
    "Invocation",
    "InvocationMatcher",
    "format_arguments",
    "next_sequence",
]
