"""Unit tests for the pytest plugin."""

from __future__ import annotations

import textwrap
import typing as t

import pytest

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from obj_mox.controller import ObjMox


# Load the plugin before option parsing so its CLI flags are known.
PLUGIN_ARGS: t.Final[tuple[str, ...]] = ("-p", "obj_mox.pytest_plugin")
MARK_OFF = "@pytest.mark.obj_mox(strict_stubs=False)"
MARK_ON = "@pytest.mark.obj_mox(strict_stubs=True)"

UNUSED_STUB_TEST = textwrap.dedent(
    """
    import pytest

    {decorator}
    def test_unused(obj_mox):
        items = obj_mox.mock(list)
        obj_mox.when(items.pop()).then_return("x")
    """
)


def test_fixture_basic(obj_mox: ObjMox) -> None:
    """Fixture yields a working controller."""
    items = obj_mox.mock(list)
    obj_mox.when(items.pop()).then_return("x")
    assert items.pop() == "x"
    obj_mox.verify(items).pop()


@pytest.mark.obj_mox(strict_stubs=False)
def test_marker_relaxes_strict_stubs(obj_mox: ObjMox) -> None:
    """The marker controls unused-stubbing detection."""
    assert obj_mox.strict_stubs is False


@pytest.mark.parametrize("obj_mox", [True, {"strict_stubs": True}], indirect=True)
def test_fixture_param_enables_strict_stubs(obj_mox: ObjMox) -> None:
    """Indirect params configure strict stubbing."""
    assert obj_mox.strict_stubs is True
    items = obj_mox.mock(list)
    obj_mox.when(items.pop()).then_return("x")
    items.pop()


@pytest.mark.parametrize(
    ("ini_setting", "cli_args", "decorator", "should_fail"),
    [
        (None, (), "", False),
        ("true", (), "", True),
        (None, ("--obj-mox-strict-stubs",), "", True),
        ("true", ("--no-obj-mox-strict-stubs",), "", False),
        (None, ("--obj-mox-strict-stubs",), MARK_OFF, False),
        ("false", (), MARK_ON, True),
    ],
    ids=["default", "ini", "cli", "cli-overrides-ini", "marker-off", "marker-on"],
)
def test_strict_stubs_configuration(
    pytester: pytest.Pytester,
    ini_setting: str | None,
    cli_args: tuple[str, ...],
    decorator: str,
    *,
    should_fail: bool,
) -> None:
    """Marker beats CLI, which beats the ini setting."""
    if ini_setting is not None:
        pytester.makeini(
            f"""
            [pytest]
            obj_mox_strict_stubs = {ini_setting}
            """
        )
    pytester.makepyfile(UNUSED_STUB_TEST.format(decorator=decorator))
    result = pytester.runpytest(*PLUGIN_ARGS, *cli_args)
    if should_fail:
        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(
            [
                "*UnnecessaryStubbingError: Unnecessary stubbings detected.*",
                "*1. list.pop()*",
            ]
        )
    else:
        result.assert_outcomes(passed=1)


def test_teardown_check_skipped_when_test_fails(pytester: pytest.Pytester) -> None:
    """A failing test body is not followed by a stubbing error."""
    pytester.makepyfile(
        """
        def test_fails(obj_mox):
            items = obj_mox.mock(list)
            obj_mox.when(items.pop()).then_return("x")
            obj_mox.verify(items).clear()
        """
    )
    result = pytester.runpytest(*PLUGIN_ARGS, "--obj-mox-strict-stubs")
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*WantedButNotInvokedError*"])
    assert "UnnecessaryStubbingError" not in result.stdout.str()


def test_class_declarations_are_initialised(pytester: pytest.Pytester) -> None:
    """Class-based tests get fresh declared doubles for every test."""
    pytester.makepyfile(
        """
        from obj_mox import Mocked

        class TestInbox:
            messages = Mocked(list)

            def test_first(self, obj_mox):
                self.messages.append("x")
                obj_mox.verify(self.messages).append("x")

            def test_second(self, obj_mox):
                obj_mox.verify_no_interactions(self.messages)
        """
    )
    result = pytester.runpytest(*PLUGIN_ARGS)
    result.assert_outcomes(passed=2)


def test_invalid_fixture_param(pytester: pytest.Pytester) -> None:
    """Unsupported params are reported as setup errors."""
    pytester.makepyfile(
        """
        import pytest

        @pytest.mark.parametrize("obj_mox", ["yes"], indirect=True)
        def test_param(obj_mox):
            pass
        """
    )
    result = pytester.runpytest(*PLUGIN_ARGS)
    result.assert_outcomes(errors=1)
    result.stdout.fnmatch_lines(["*obj_mox fixture param must be a bool*"])
