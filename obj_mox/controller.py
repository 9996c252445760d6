"""ObjMox controller and related helpers."""

from __future__ import annotations

import logging
import types  # noqa: TC003
import typing as t
from collections import deque

from .errors import ConfigurationError, MissingInvocationError
from .invocation import Invocation, InvocationMatcher
from .stubbing import CallCapture, OngoingStubbing, Stubber
from .test_doubles import DoubleKind, TestDouble, double_class, ensure_double
from .verifiers import (
    CountVerifier,
    InteractionVerifier,
    OrderVerifier,
    StubbingVerifier,
    VerificationMode,
    times,
)

logger = logging.getLogger(__name__)


def _default_name(cls: type | None) -> str:
    """Return ``cls.__name__`` with a lower-case first letter."""
    if cls is None:
        return "mock"
    name = cls.__name__
    return name[:1].lower() + name[1:]


class ObjMox:
    """Central orchestrator creating, stubbing and verifying test doubles."""

    def __init__(
        self,
        *,
        strict_stubs: bool = False,
        max_journal_entries: int | None = None,
    ) -> None:
        """Create a new controller.

        Parameters
        ----------
        strict_stubs:
            When ``True``, leaving the ``with`` block (or the pytest fixture)
            calls :meth:`check_stubbings`, failing on stubs no call used.
        max_journal_entries:
            Maximum number of invocations retained in :attr:`journal`. When
            ``None`` the journal is unbounded. Per-double logs used by
            verification are never truncated.
        """
        if max_journal_entries is not None and max_journal_entries <= 0:
            msg = "max_journal_entries must be positive"
            raise ValueError(msg)

        self.strict_stubs = strict_stubs
        self.journal: deque[Invocation] = deque(maxlen=max_journal_entries)
        self._doubles: list[TestDouble] = []
        self._last_invocation: Invocation | None = None
        self._unfinished: OngoingStubbing | None = None
        self._pending_verification: CallCapture | None = None

    # ------------------------------------------------------------------
    # Double accessors
    # ------------------------------------------------------------------
    @property
    def doubles(self) -> list[TestDouble]:
        """Return every double created by this controller."""
        return list(self._doubles)

    @property
    def mocks(self) -> list[TestDouble]:
        """Return all mock doubles."""
        return [dbl for dbl in self._doubles if dbl._mox_kind is DoubleKind.MOCK]

    @property
    def spies(self) -> list[TestDouble]:
        """Return all spy doubles."""
        return [dbl for dbl in self._doubles if dbl._mox_kind is DoubleKind.SPY]

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> ObjMox:
        """Enter context."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Exit context, checking stubbings when strict and no error escaped."""
        if exc_type is None and self.strict_stubs:
            self.check_stubbings()

    # ------------------------------------------------------------------
    # Creating doubles
    # ------------------------------------------------------------------
    def mock(self, spec: object = None, *, name: str | None = None) -> TestDouble:
        """Create a mock of *spec* whose operations return zero values.

        *spec* may be a class, an instance (its type is used) or ``None`` for
        a double accepting any operation name.
        """
        spec_type = spec if spec is None or isinstance(spec, type) else type(spec)
        cls = double_class(spec_type)
        double = cls(
            self,
            name or _default_name(spec_type),
            DoubleKind.MOCK,
            spec=spec_type,
        )
        self._doubles.append(double)
        return double

    def spy(self, real: object, *, name: str | None = None) -> TestDouble:
        """Create a spy forwarding unstubbed calls to *real*."""
        if isinstance(real, TestDouble):
            msg = f"Cannot spy on another test double: {real!r}"
            raise ConfigurationError(msg)
        spec_type = type(real)
        cls = double_class(spec_type)
        double = cls(
            self,
            name or _default_name(spec_type),
            DoubleKind.SPY,
            spec=spec_type,
            real=real,
        )
        self._doubles.append(double)
        return double

    # ------------------------------------------------------------------
    # Stubbing
    # ------------------------------------------------------------------
    def when(self, call_result: object) -> OngoingStubbing:
        """Start stubbing the call that produced *call_result*.

        ``mox.when(mock.pop(0)).then_return("first")`` works because the
        double call runs first: this method picks up that invocation and
        removes it from the logs. On a spy the real method has already run
        by then; use :meth:`do_return` and friends to avoid that.
        """
        del call_result
        self._check_no_unfinished_stubbing()
        self._check_no_unfinished_verification()
        invocation = self._last_invocation
        if invocation is None:
            raise MissingInvocationError(MissingInvocationError.DEFAULT_MESSAGE)
        self._last_invocation = None
        self._forget(invocation)
        stubbing = OngoingStubbing(
            self, invocation.double, InvocationMatcher.from_invocation(invocation)
        )
        self._unfinished = stubbing
        return stubbing

    def do_return(self, *values: t.Any) -> Stubber:
        """Prepare return values for :meth:`Stubber.when`."""
        return Stubber([]).do_return(*values)

    def do_raise(self, *errors: t.Any) -> Stubber:
        """Prepare errors to raise for :meth:`Stubber.when`."""
        return Stubber([]).do_raise(*errors)

    def do_answer(self, func: t.Callable[[Invocation], t.Any]) -> Stubber:
        """Prepare a callback answer for :meth:`Stubber.when`."""
        return Stubber([]).do_answer(func)

    def do_nothing(self) -> Stubber:
        """Prepare an answer returning ``None``."""
        return Stubber([]).do_nothing()

    def do_call_real_method(self) -> Stubber:
        """Prepare an answer forwarding to the spied instance."""
        return Stubber([]).do_call_real_method()

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(
        self, double: TestDouble, mode: VerificationMode | None = None
    ) -> CallCapture:
        """Return a proxy verifying the call made on it against *double*'s log.

        ``mox.verify(mock, times(2)).append("x")`` raises a
        :class:`~obj_mox.errors.VerificationError` unless ``append("x")`` was
        called exactly twice. *mode* defaults to ``times(1)``.
        """
        self._start_verification()
        target = ensure_double(double, "verify")
        wanted = times(1) if mode is None else mode
        verifier = CountVerifier()

        def check(
            method: str, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]
        ) -> None:
            matcher = InvocationMatcher.from_call(method, args, kwargs)
            for inv in verifier.verify(target, matcher, wanted):
                inv.verified = True

        return self._capture_verification(target, check)

    def verify_no_interactions(self, *doubles: TestDouble) -> None:
        """Raise if any of *doubles* recorded a call."""
        self._start_verification()
        targets = [ensure_double(dbl, "verify_no_interactions") for dbl in doubles]
        InteractionVerifier().verify_none(targets)

    verify_zero_interactions = verify_no_interactions

    def verify_no_more_interactions(self, *doubles: TestDouble) -> None:
        """Raise if any of *doubles* has a call not covered by ``verify``."""
        self._start_verification()
        for dbl in doubles:
            target = ensure_double(dbl, "verify_no_more_interactions")
            unverified = [inv for inv in target._mox_invocations if not inv.verified]
            InteractionVerifier().verify_all_verified(
                unverified, context=repr(target)
            )

    def in_order(self, *doubles: TestDouble) -> InOrder:
        """Return a sequencer confirming calls on *doubles* in call order."""
        if not doubles:
            msg = "in_order() needs at least one test double"
            raise ConfigurationError(msg)
        targets = [ensure_double(dbl, "in_order") for dbl in doubles]
        return InOrder(self, targets)

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------
    def reset(self, *doubles: TestDouble) -> None:
        """Forget stubbings and invocations of *doubles* (all when omitted)."""
        for dbl in self._select(doubles, "reset"):
            self._drop_from_journal(dbl)
            dbl._mox_reset()
            logger.debug("Reset %r", dbl)

    def clear_invocations(self, *doubles: TestDouble) -> None:
        """Forget invocations of *doubles* while keeping their stubbings."""
        for dbl in self._select(doubles, "clear_invocations"):
            self._drop_from_journal(dbl)
            dbl._mox_reset(keep_stubbings=True)

    def unused_stubbings(self) -> list[str]:
        """Return descriptions of stubbings no call has used yet."""
        return [
            stubbing.describe(dbl._mox_name)
            for dbl in self._doubles
            for stubbing in dbl._mox_stubbings
            if not stubbing.used
        ]

    def check_stubbings(self) -> None:
        """Raise for unfinished or unused stubbings."""
        self._check_no_unfinished_stubbing()
        self._check_no_unfinished_verification()
        StubbingVerifier().verify(self._doubles)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _record(self, invocation: Invocation) -> None:
        """Log *invocation* before any behaviour is applied."""
        invocation.double._mox_invocations.append(invocation)
        self.journal.append(invocation)
        self._last_invocation = invocation

    def _forget(self, invocation: Invocation) -> None:
        """Remove an invocation that only served to configure a stub."""
        invocation.double._mox_invocations.remove(invocation)
        if invocation in self.journal:
            self.journal.remove(invocation)

    def _drop_from_journal(self, double: TestDouble) -> None:
        kept = [inv for inv in self.journal if inv.double is not double]
        self.journal.clear()
        self.journal.extend(kept)
        last = self._last_invocation
        if last is not None and last.double is double:
            self._last_invocation = None

    def _select(
        self, doubles: t.Sequence[TestDouble], action: str
    ) -> list[TestDouble]:
        if not doubles:
            return list(self._doubles)
        return [ensure_double(dbl, action) for dbl in doubles]

    def _finish_stubbing(self, stubbing: OngoingStubbing) -> None:
        if self._unfinished is stubbing:
            self._unfinished = None

    def _check_no_unfinished_stubbing(self) -> None:
        pending = self._unfinished
        if pending is None:
            return
        self._unfinished = None
        msg = (
            "Unfinished stubbing: when(...) was not followed by then_return(), "
            "then_raise(), then_answer() or then_call_real_method()"
        )
        raise ConfigurationError(msg)

    def _check_no_unfinished_verification(self) -> None:
        if self._pending_verification is None:
            return
        self._pending_verification = None
        msg = (
            "Unfinished verification: verify(...) was not followed by the call "
            "to check, e.g. mox.verify(mock).clear()"
        )
        raise ConfigurationError(msg)

    def _start_verification(self) -> None:
        """Reject dangling configuration and forget the last recorded call.

        A later ``when()`` must not pick up a call made before verifying.
        """
        self._check_no_unfinished_stubbing()
        self._check_no_unfinished_verification()
        self._last_invocation = None

    def _capture_verification(
        self,
        target: TestDouble,
        check: t.Callable[[str, tuple[t.Any, ...], dict[str, t.Any]], None],
    ) -> CallCapture:
        """Return a capture whose call runs *check*; pending until called."""

        def run(
            method: str, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]
        ) -> None:
            self._pending_verification = None
            check(method, args, kwargs)

        capture = CallCapture(target, run)
        self._pending_verification = capture
        return capture


class InOrder:
    """Sequencer returned by :meth:`ObjMox.in_order`."""

    def __init__(self, controller: ObjMox, doubles: list[TestDouble]) -> None:
        self._controller = controller
        self._verifier = OrderVerifier(doubles)

    def verify(
        self, double: TestDouble, mode: VerificationMode | None = None
    ) -> CallCapture:
        """Return a proxy confirming the next call after the last confirmed one."""
        self._controller._start_verification()
        target = ensure_double(double, "verify")
        wanted = times(1) if mode is None else mode

        def check(
            method: str, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]
        ) -> None:
            matcher = InvocationMatcher.from_call(method, args, kwargs)
            for inv in self._verifier.verify(target, matcher, wanted):
                inv.verified = True

        return self._controller._capture_verification(target, check)

    def verify_no_more_interactions(self) -> None:
        """Raise if unconfirmed calls follow the last confirmed one."""
        self._controller._start_verification()
        InteractionVerifier().verify_all_verified(
            self._verifier.unverified_after_marker(),
            context="after the last in-order verification",
        )


__all__ = ["InOrder", "ObjMox"]
