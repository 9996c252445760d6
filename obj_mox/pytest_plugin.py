"""Pytest plugin providing the ``obj_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .controller import ObjMox
from .declarations import init_doubles

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("obj_mox")
    group.addoption(
        "--obj-mox-strict-stubs",
        action="store_true",
        dest="obj_mox_strict_stubs",
        default=None,
        help=(
            "Fail tests that leave stubbings unused. Overrides the pytest.ini "
            "setting."
        ),
    )
    group.addoption(
        "--no-obj-mox-strict-stubs",
        action="store_false",
        dest="obj_mox_strict_stubs",
        default=None,
        help="Allow unused stubbings. Overrides the pytest.ini setting.",
    )
    parser.addini(
        "obj_mox_strict_stubs",
        "Fail tests whose obj_mox stubbings were never used.",
        type="bool",
        default=False,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "obj_mox(strict_stubs: bool = False): override unused-stubbing "
            "detection for a single test."
        ),
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase's report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _strict_stubs_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether unused stubbings should fail the test."""
    # Priority order: marker > fixture param > CLI option > INI setting
    marker = request.node.get_closest_marker("obj_mox")
    if marker is not None and "strict_stubs" in marker.kwargs:
        return bool(marker.kwargs["strict_stubs"])

    param = getattr(request, "param", None)
    if param is not None:
        return _param_strict_stubs(param)

    config = request.config
    cli_value = config.getoption("obj_mox_strict_stubs")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("obj_mox_strict_stubs"))


def _param_strict_stubs(param: object) -> bool:
    """Return the ``strict_stubs`` value carried by an indirect fixture param."""
    if isinstance(param, bool):
        return param
    if isinstance(param, dict):
        if "strict_stubs" in param:
            return bool(param["strict_stubs"])
        keys = list(param.keys())
        msg = (
            "obj_mox fixture param dict must contain 'strict_stubs' key, "
            f"got keys: {keys}"
        )
        raise TypeError(msg)
    msg = (
        "obj_mox fixture param must be a bool or dict with 'strict_stubs' key, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


@pytest.fixture
def obj_mox(request: pytest.FixtureRequest) -> t.Generator[ObjMox, None, None]:
    """Provide a fresh :class:`ObjMox` per test.

    Class-based tests get their ``Mocked``/``Spied`` attributes replaced
    with new doubles before the test body runs.
    """
    mox = ObjMox(strict_stubs=_strict_stubs_enabled(request))
    try:
        if request.instance is not None:
            init_doubles(request.instance, mox)
        yield mox
    except Exception:
        logger.exception("Error during obj_mox fixture setup or test execution")
        raise
    _check_stubbings_on_teardown(request.node, mox)


def _check_stubbings_on_teardown(item: pytest.Item, mox: ObjMox) -> None:
    """Fail the test for unused stubbings unless the body already failed."""
    if not mox.strict_stubs or _call_stage_failed(item):
        return
    try:
        mox.check_stubbings()
    except Exception as err:
        logger.exception("Error during obj_mox stubbing check")
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)


__all__ = ["obj_mox"]
