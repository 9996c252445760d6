"""Stub configuration: the ``when(...)`` and ``do_*().when(double)`` paths."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .answers import CallsRealMethod, Computes, Raises, Returns, raises_default
from .errors import ConfigurationError
from .invocation import InvocationMatcher
from .test_doubles import (
    SUPPORTED_MAGIC_METHODS,
    DoubleKind,
    TestDouble,
    ensure_double,
)

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .answers import Answer
    from .controller import ObjMox
    from .invocation import Invocation


@dc.dataclass(slots=True)
class Stubbing:
    """Answers configured for calls matching ``matcher``.

    Answers are consumed in order, one per matching call; once exhausted the
    last answer repeats.
    """

    matcher: InvocationMatcher
    answers: list[Answer] = dc.field(default_factory=list)
    use_count: int = 0

    def answer(self, invocation: Invocation) -> t.Any:
        """Apply the next answer to *invocation*."""
        index = min(self.use_count, len(self.answers) - 1)
        self.use_count += 1
        return self.answers[index](invocation)

    @property
    def used(self) -> bool:
        """Return ``True`` once any call has matched this stubbing."""
        return self.use_count > 0

    def describe(self, double_name: str) -> str:
        """Return a readable description of the stubbed call."""
        return self.matcher.describe(double_name)


def _returns_all(values: tuple[t.Any, ...]) -> list[Answer]:
    if not values:
        msg = "then_return()/do_return() need at least one value"
        raise ConfigurationError(msg)
    return [Returns(value) for value in values]


def _raises_all(errors: tuple[t.Any, ...]) -> list[Answer]:
    if not errors:
        return [raises_default()]
    return [Raises(error) for error in errors]


def _require_spy(double: TestDouble) -> None:
    if double._mox_kind is not DoubleKind.SPY:
        msg = (
            f"Cannot call the real method on {double._mox_name!r}: "
            "only spies wrap a real instance"
        )
        raise ConfigurationError(msg)


class OngoingStubbing:
    """Builder returned by :meth:`ObjMox.when`.

    The first ``then_*`` call installs the stubbing; further calls append
    answers to it, so ``then_raise(E).then_return("a", "b")`` raises once and
    then returns ``"a"`` and ``"b"``.
    """

    def __init__(
        self, controller: ObjMox, double: TestDouble, matcher: InvocationMatcher
    ) -> None:
        self._controller = controller
        self._double = double
        self._matcher = matcher
        self._stubbing: Stubbing | None = None

    @property
    def finished(self) -> bool:
        """Return ``True`` once at least one answer was configured."""
        return self._stubbing is not None

    def _add(self, answers: list[Answer]) -> OngoingStubbing:
        if self._stubbing is None:
            self._stubbing = Stubbing(self._matcher)
            self._double._mox_add_stubbing(self._stubbing)
            self._controller._finish_stubbing(self)
        self._stubbing.answers.extend(answers)
        return self

    def then_return(self, *values: t.Any) -> OngoingStubbing:
        """Return *values* on successive calls, repeating the last one."""
        return self._add(_returns_all(values))

    def then_raise(self, *errors: t.Any) -> OngoingStubbing:
        """Raise *errors* on successive calls.

        Without arguments a :class:`~obj_mox.errors.ConfiguredError` is raised.
        """
        return self._add(_raises_all(errors))

    def then_answer(
        self, func: t.Callable[[Invocation], t.Any]
    ) -> OngoingStubbing:
        """Compute the result with ``func(invocation)``."""
        return self._add([Computes(func)])

    def then_call_real_method(self) -> OngoingStubbing:
        """Forward matching calls to the spied instance."""
        _require_spy(self._double)
        return self._add([CallsRealMethod()])


class CallCapture:
    """Proxy turning ``capture.op(*args)`` into ``on_call(name, args, kwargs)``.

    Item access is captured too, so ``capture[0]`` stands for
    ``__getitem__(0)``.
    """

    def __init__(
        self,
        double: TestDouble,
        on_call: t.Callable[[str, tuple[t.Any, ...], dict[str, t.Any]], t.Any],
    ) -> None:
        self._mox_double = double
        self._mox_on_call = on_call

    def __getattr__(self, name: str) -> t.Callable[..., t.Any]:
        """Return a callable capturing operation *name*."""
        if name.startswith(("_mox_", "__")) and name not in SUPPORTED_MAGIC_METHODS:
            raise AttributeError(name)
        self._mox_double._mox_check_attribute(name)

        def capture(*args: t.Any, **kwargs: t.Any) -> t.Any:
            return self._mox_on_call(name, args, kwargs)

        return capture

    def __getitem__(self, key: t.Any) -> t.Any:
        """Capture ``__getitem__(key)``."""
        return self.__getattr__("__getitem__")(key)

    def __setitem__(self, key: t.Any, value: t.Any) -> None:
        """Capture ``__setitem__(key, value)``."""
        self.__getattr__("__setitem__")(key, value)

    def __delitem__(self, key: t.Any) -> None:
        """Capture ``__delitem__(key)``."""
        self.__getattr__("__delitem__")(key)

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:
        """Capture ``__call__(*args, **kwargs)``."""
        return self.__getattr__("__call__")(*args, **kwargs)


class Stubber:
    """Answers waiting for a target, built by ``ObjMox.do_*``.

    ``stubber.when(double).op(*args)`` installs the stubbing without calling
    ``op``, which is the only safe way to stub a spy whose real method would
    fail or have side effects.
    """

    def __init__(self, answers: list[Answer], *, calls_real: bool = False) -> None:
        self._answers = answers
        self._calls_real = calls_real

    def do_return(self, *values: t.Any) -> Stubber:
        """Append return values."""
        self._answers.extend(_returns_all(values))
        return self

    def do_raise(self, *errors: t.Any) -> Stubber:
        """Append errors to raise."""
        self._answers.extend(_raises_all(errors))
        return self

    def do_answer(self, func: t.Callable[[Invocation], t.Any]) -> Stubber:
        """Append a callback answer."""
        self._answers.append(Computes(func))
        return self

    def do_nothing(self) -> Stubber:
        """Append an answer returning ``None``."""
        self._answers.append(Returns(None))
        return self

    def do_call_real_method(self) -> Stubber:
        """Append an answer forwarding to the spied instance."""
        self._answers.append(CallsRealMethod())
        self._calls_real = True
        return self

    def when(self, double: TestDouble) -> CallCapture:
        """Return a proxy whose next call names the operation to stub."""
        target = ensure_double(double, "when")
        if not self._answers:
            msg = "do_*() needs at least one answer before when()"
            raise ConfigurationError(msg)
        if self._calls_real:
            _require_spy(target)
        answers = list(self._answers)

        def install(
            method: str, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]
        ) -> None:
            matcher = InvocationMatcher.from_call(method, args, kwargs)
            target._mox_add_stubbing(Stubbing(matcher, answers))

        return CallCapture(target, install)


__all__ = ["CallCapture", "OngoingStubbing", "Stubber", "Stubbing"]
