"""Tests for ``Mocked``/``Spied`` class attribute declarations."""

from __future__ import annotations

from obj_mox import DoubleKind, Mocked, ObjMox, Spied, init_doubles
from obj_mox.declarations import declared_doubles


class Base:
    items = Mocked(list)
    table = Spied(dict)


class Derived(Base):
    items = Mocked(list, name="renamed")
    handler = Mocked()
    plain = "kept"


def test_declared_doubles_walk_the_class_hierarchy() -> None:
    """Subclass declarations override those of their bases."""
    found = declared_doubles(Derived)
    assert sorted(found) == ["handler", "items", "table"]
    assert found["items"].name == "renamed"


def test_init_doubles_replaces_declarations() -> None:
    """Each declaration becomes a fresh double on the instance."""
    mox = ObjMox()
    target = Derived()
    created = init_doubles(target, mox)

    assert created["items"] is target.items
    assert target.items._mox_name == "renamed"
    assert target.handler._mox_name == "handler"
    assert target.table._mox_kind is DoubleKind.SPY
    assert target.plain == "kept"
    assert len(mox.doubles) == 3


def test_spied_factory_builds_a_new_instance_per_call() -> None:
    """Spies never share their real object between tests."""
    mox = ObjMox()
    first = Base()
    second = Base()
    init_doubles(first, mox)
    init_doubles(second, mox)
    first.table["k"] = "v"
    assert first.table._mox_real == {"k": "v"}
    assert second.table._mox_real == {}


def test_init_doubles_without_declarations() -> None:
    """Objects without declarations are left alone."""
    assert init_doubles(object(), ObjMox()) == {}
