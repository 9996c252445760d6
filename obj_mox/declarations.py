"""Declarative doubles for class-based tests.

Class attributes declared as :class:`Mocked` or :class:`Spied` are replaced
with fresh doubles on the test instance by :func:`init_doubles`; the pytest
fixture does this before every test method::

    class TestInbox:
        messages = Mocked(list)

        def test_clear(self, obj_mox):
            self.messages.clear()
            obj_mox.verify(self.messages).clear()
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import ObjMox
    from .test_doubles import TestDouble

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class Mocked:
    """Declare a mock of ``spec`` as a class attribute."""

    spec: object = None
    name: str | None = None

    def create(self, mox: ObjMox, attr: str) -> TestDouble:
        """Return a new mock named after *attr* unless a name was given."""
        return mox.mock(self.spec, name=self.name or attr)


@dc.dataclass(frozen=True, slots=True)
class Spied:
    """Declare a spy over ``factory()`` as a class attribute.

    A factory rather than an instance keeps tests from sharing one real
    object.
    """

    factory: t.Callable[[], object]
    name: str | None = None

    def create(self, mox: ObjMox, attr: str) -> TestDouble:
        """Return a spy over a new real instance."""
        return mox.spy(self.factory(), name=self.name or attr)


def declared_doubles(cls: type) -> dict[str, Mocked | Spied]:
    """Return ``Mocked``/``Spied`` declarations on *cls* and its bases."""
    found: dict[str, Mocked | Spied] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if isinstance(value, Mocked | Spied):
                found[attr] = value
    return found


def init_doubles(target: object, mox: ObjMox) -> dict[str, TestDouble]:
    """Replace declared doubles on *target* with fresh ones from *mox*.

    Returns the created doubles keyed by attribute name.
    """
    created: dict[str, TestDouble] = {}
    for attr, declaration in declared_doubles(type(target)).items():
        double = declaration.create(mox, attr)
        setattr(target, attr, double)
        created[attr] = double
    if created:
        logger.debug(
            "Initialised doubles on %s: %s", type(target).__name__, sorted(created)
        )
    return created


__all__ = ["Mocked", "Spied", "declared_doubles", "init_doubles"]
