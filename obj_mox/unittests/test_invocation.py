"""Unit tests for invocation records and matchers."""

from __future__ import annotations

import pytest

from obj_mox import ObjMox
from obj_mox.invocation import Invocation, InvocationMatcher, format_arguments
from obj_mox.matchers import Any, Eq, IsA


@pytest.fixture
def mox() -> ObjMox:
    """Return a fresh controller."""
    return ObjMox()


def test_sequences_increase_across_doubles(mox: ObjMox) -> None:
    """Invocations on different doubles share one increasing sequence."""
    first = mox.mock(list)
    second = mox.mock(dict)
    first.append("a")
    second.clear()
    first.append("b")

    sequences = [inv.sequence for inv in mox.journal]
    assert sequences == sorted(sequences)
    assert len(set(sequences)) == 3


def test_invocation_describe_and_repr(mox: ObjMox) -> None:
    """Invocations render like the call that produced them."""
    mock = mox.mock(list, name="items")
    mock.insert(0, "x")
    inv = mock._mox_invocations[0]

    assert inv.describe() == "items.insert(0, 'x')"
    assert repr(inv) == f"Invocation(#{inv.sequence} items.insert(0, 'x'))"


def test_format_arguments_shortens_long_values() -> None:
    """Long argument reprs are truncated."""
    rendered = format_arguments(("x" * 200,), {"key": 1})
    assert rendered.endswith("…, key=1")
    assert len(rendered) < 100


def test_matcher_from_call_wraps_plain_values() -> None:
    """Plain arguments are compared by equality; matchers are kept."""
    matcher = InvocationMatcher.from_call("get", (1, IsA(str)), {"default": None})
    assert matcher.args == (Eq(1), IsA(str))
    assert matcher.kwargs == {"default": Eq(None)}


def test_matcher_matches_positional_and_keyword_arguments(mox: ObjMox) -> None:
    """Name, positional and keyword arguments must all satisfy the matcher."""
    mock = mox.mock()
    mock.get(1, default="x")
    inv = mock._mox_invocations[0]

    assert InvocationMatcher.from_call("get", (1,), {"default": "x"}).matches(inv)
    assert InvocationMatcher.from_call("get", (Any(),), {"default": Any()}).matches(
        inv
    )
    assert not InvocationMatcher.from_call("get", (1,), {}).matches(inv)
    assert not InvocationMatcher.from_call("get", (2,), {"default": "x"}).matches(inv)
    assert not InvocationMatcher.from_call("put", (1,), {"default": "x"}).matches(inv)


@pytest.mark.parametrize(
    ("matcher", "reason"),
    [
        (InvocationMatcher.from_call("pop", (), {}), "method 'append' != 'pop'"),
        (
            InvocationMatcher.from_call("append", (), {}),
            "expected 0 positional args, got 1",
        ),
        (
            InvocationMatcher.from_call("append", ("y",), {}),
            "arg[0]='x' failed Eq(expected='y')",
        ),
        (
            InvocationMatcher.from_call("append", ("x",), {"flag": True}),
            "keyword names [] != ['flag']",
        ),
        (InvocationMatcher.from_call("append", ("x",), {}), "matches"),
    ],
)
def test_explain_mismatch(
    mox: ObjMox, matcher: InvocationMatcher, reason: str
) -> None:
    """Mismatch explanations name the first differing part of the call."""
    mock = mox.mock(list)
    mock.append("x")
    assert matcher.explain_mismatch(mock._mox_invocations[0]) == reason


def test_matcher_describe_prefers_bare_values() -> None:
    """Equality matchers are shown as their value, others by repr."""
    matcher = InvocationMatcher.from_call("pop", (IsA(int),), {"key": "k"})
    assert matcher.describe("items") == "items.pop(IsA(typ=<class 'int'>), key='k')"


def test_invocation_is_compared_by_identity(mox: ObjMox) -> None:
    """Two identical calls remain distinct records."""
    mock = mox.mock(list)
    mock.clear()
    mock.clear()
    first, second = mock._mox_invocations
    assert first != second
    assert isinstance(first, Invocation)
