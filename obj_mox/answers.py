"""Behaviours a stub can apply when a matching call arrives."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .errors import ConfigurationError, ConfiguredError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .invocation import Invocation


class Answer(t.Protocol):
    """Callable computing the result of a stubbed call."""

    def __call__(self, invocation: Invocation) -> t.Any:
        """Return the value for *invocation* or raise."""
        ...


@dc.dataclass(frozen=True, slots=True)
class Returns:
    """Return ``value`` unchanged."""

    value: t.Any

    def __call__(self, invocation: Invocation) -> t.Any:
        """Return the configured value."""
        return self.value


@dc.dataclass(frozen=True, slots=True)
class Raises:
    """Raise ``error``; exception classes are instantiated per call."""

    error: BaseException | type[BaseException]

    def __post_init__(self) -> None:
        """Reject values that cannot be raised."""
        if isinstance(self.error, BaseException):
            return
        if isinstance(self.error, type) and issubclass(self.error, BaseException):
            return
        msg = f"Cannot raise {self.error!r}: not an exception class or instance"
        raise ConfigurationError(msg)

    def __call__(self, invocation: Invocation) -> t.NoReturn:
        """Raise the configured error."""
        if isinstance(self.error, type):
            raise self.error()
        raise self.error


@dc.dataclass(frozen=True, slots=True)
class Computes:
    """Compute the result with ``func(invocation)``."""

    func: t.Callable[[Invocation], t.Any]

    def __post_init__(self) -> None:
        """Reject non-callables early."""
        if not callable(self.func):
            msg = f"Answer {self.func!r} is not callable"
            raise ConfigurationError(msg)

    def __call__(self, invocation: Invocation) -> t.Any:
        """Delegate to the callback."""
        return self.func(invocation)


@dc.dataclass(frozen=True, slots=True)
class CallsRealMethod:
    """Run the operation on the spied instance."""

    def __call__(self, invocation: Invocation) -> t.Any:
        """Forward *invocation* to the double's real instance."""
        return invocation.double._mox_call_real(invocation)


def raises_default() -> Raises:
    """Return the answer used by ``then_raise()`` without arguments."""
    return Raises(ConfiguredError)


# Zero values for annotated return types.
_ZERO_VALUES: dict[t.Any, t.Callable[[], t.Any]] = {
    int: int,
    float: float,
    complex: complex,
    bool: bool,
    str: str,
    bytes: bytes,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}

# Protocol methods whose return type is fixed by the language.
_PROTOCOL_DEFAULTS: dict[str, t.Callable[[], t.Any]] = {
    "__len__": int,
    "__contains__": bool,
    "__iter__": lambda: iter(()),
}


def _return_annotation(spec: type | None, method: str) -> t.Any:
    if spec is None:
        return None
    func = getattr(spec, method, None)
    if func is None:
        return None
    try:
        hints = t.get_type_hints(func)
    except Exception:  # noqa: BLE001 - builtins and broken hints have none
        return None
    return hints.get("return")


def default_answer(spec: type | None, method: str) -> t.Any:
    """Return the zero value for *method* on *spec*.

    Builtin protocol methods get the value the language requires
    (``0`` for ``__len__``), annotated methods get the zero value of their
    return type when it is a builtin scalar or collection, and everything
    else returns ``None``.
    """
    factory = _PROTOCOL_DEFAULTS.get(method)
    if factory is not None:
        return factory()
    annotation = _return_annotation(spec, method)
    origin = t.get_origin(annotation) or annotation
    factory = _ZERO_VALUES.get(origin)
    if factory is not None:
        return factory()
    return None


__all__ = [
    "Answer",
    "CallsRealMethod",
    "Computes",
    "Raises",
    "Returns",
    "default_answer",
    "raises_default",
]
