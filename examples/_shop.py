"""Small collaborators shared by the runnable examples."""

from __future__ import annotations


class PaymentGateway:
    """Remote payment service; never reached from the examples."""

    def charge(self, account: str, amount: int) -> str:
        msg = "the examples must not reach the payment service"
        raise RuntimeError(msg)

    def refund(self, receipt: str) -> bool:
        msg = "the examples must not reach the payment service"
        raise RuntimeError(msg)


class Checkout:
    """Charge a basket and keep the receipts."""

    def __init__(self, gateway: PaymentGateway, receipts: list[str]) -> None:
        self.gateway = gateway
        self.receipts = receipts

    def pay(self, account: str, prices: list[int]) -> str | None:
        total = sum(prices)
        if total == 0:
            return None
        receipt = self.gateway.charge(account, total)
        self.receipts.append(receipt)
        return receipt

    def cancel_last(self) -> bool:
        if not self.receipts:
            return False
        return self.gateway.refund(self.receipts.pop())
