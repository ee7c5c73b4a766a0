from abc import ABC, abstractmethod
from decimal import Decimal
import logging

from core_backend.exceptions import InsufficientInputError
from .models import PaymentTransaction
from .money import quantize, to_decimal

logger = logging.getLogger(__name__)


class PaymentStrategy(ABC):
    """
    The Abstract Base Class for a payment strategy.
    Defines the common interface for all payment methods.
    """

    method = None

    @abstractmethod
    def prepare(self, order, currency: str, tendered=None, reference: str = "") -> dict:
        """
        Validate the tender for ``order`` and return the extra fields for
        its PaymentTransaction.
        """

    def after_record(self, payment_transaction: PaymentTransaction):
        """Hook run after the transaction row exists (e.g. drawer bookkeeping)."""


class CashPaymentStrategy(PaymentStrategy):
    """Cash over the counter: needs enough tendered cash and goes into the drawer."""

    method = PaymentTransaction.PaymentMethod.CASH

    def prepare(self, order, currency, tendered=None, reference=""):
        if tendered is None:
            raise InsufficientInputError("Tendered amount is required for cash payments")
        tendered = quantize(currency, to_decimal(tendered, "tendered amount"))
        if tendered < order.total:
            raise InsufficientInputError(
                f"Tendered amount {tendered} is less than the order total {order.total}"
            )
        return {"tendered": tendered, "change": quantize(currency, tendered - order.total)}

    def after_record(self, payment_transaction):
        from accounting.services import AccountingService

        AccountingService.record_sale(payment_transaction)


class CardPaymentStrategy(PaymentStrategy):
    """Card swiped on the bank's machine; the slip reference is optional."""

    method = PaymentTransaction.PaymentMethod.CARD

    def prepare(self, order, currency, tendered=None, reference=""):
        return {"tendered": None, "change": Decimal("0.00"), "reference": reference or ""}


class RaastPaymentStrategy(PaymentStrategy):
    """Instant bank transfer; the transfer reference is required."""

    method = PaymentTransaction.PaymentMethod.RAAST

    def prepare(self, order, currency, tendered=None, reference=""):
        if not (reference or "").strip():
            raise InsufficientInputError("A Raast transaction reference is required")
        return {"tendered": None, "change": Decimal("0.00"), "reference": reference.strip()}
