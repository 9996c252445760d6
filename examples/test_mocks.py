"""Example tests demonstrating mocks and verification."""

from __future__ import annotations

import typing as t

from obj_mox import Any, IsA, Mocked, never, times

from examples._shop import Checkout, PaymentGateway

pytest_plugins = ("obj_mox.pytest_plugin",)

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from obj_mox.controller import ObjMox


def test_mock_verifies_each_call(obj_mox: ObjMox) -> None:
    """Mocks record calls so tests can check them afterwards."""
    receipts = obj_mox.mock(list)
    receipts.append("x")
    receipts.clear()
    receipts.append("y")

    obj_mox.verify(receipts).append("x")
    obj_mox.verify(receipts).clear()
    obj_mox.verify(receipts).append("y")
    obj_mox.verify_no_more_interactions(receipts)


def test_checkout_charges_the_total(obj_mox: ObjMox) -> None:
    """The gateway is charged once with the basket total."""
    gateway = obj_mox.mock(PaymentGateway)
    receipts = obj_mox.mock(list)
    obj_mox.when(gateway.charge("acct-1", 30)).then_return("r-1")

    checkout = Checkout(gateway, receipts)

    assert checkout.pay("acct-1", [10, 20]) == "r-1"
    obj_mox.verify(gateway).charge("acct-1", IsA(int))
    obj_mox.verify(receipts).append("r-1")


def test_empty_basket_is_not_charged(obj_mox: ObjMox) -> None:
    """Nothing reaches the gateway for an empty basket."""
    gateway = obj_mox.mock(PaymentGateway)
    checkout = Checkout(gateway, [])

    assert checkout.pay("acct-1", []) is None
    obj_mox.verify(gateway, never()).charge(Any(), Any())
    obj_mox.verify_no_interactions(gateway)


class TestDeclaredDoubles:
    """Class attributes become fresh doubles for every test."""

    gateway = Mocked(PaymentGateway)

    def test_two_payments(self, obj_mox: ObjMox) -> None:
        """Each payment is charged separately."""
        checkout = Checkout(self.gateway, [])
        checkout.pay("acct-1", [5])
        checkout.pay("acct-1", [7])
        obj_mox.verify(self.gateway, times(2)).charge("acct-1", Any())

    def test_starts_untouched(self, obj_mox: ObjMox) -> None:
        """The double from the previous test is not reused."""
        obj_mox.verify_no_interactions(self.gateway)
