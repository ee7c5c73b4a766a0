from core_backend.exceptions import InsufficientInputError
from .models import PaymentTransaction
from .strategies import (
    CardPaymentStrategy,
    CashPaymentStrategy,
    PaymentStrategy,
    RaastPaymentStrategy,
)


class PaymentStrategyFactory:
    """
    A factory for creating payment strategy instances.
    """

    @staticmethod
    def get_strategy(method: str) -> PaymentStrategy:
        """
        Returns an instance of the appropriate payment strategy based on the
        payment method string.
        """
        if method == PaymentTransaction.PaymentMethod.CASH:
            return CashPaymentStrategy()
        elif method == PaymentTransaction.PaymentMethod.CARD:
            return CardPaymentStrategy()
        elif method == PaymentTransaction.PaymentMethod.RAAST:
            return RaastPaymentStrategy()
        else:
            raise InsufficientInputError(f"Unknown payment method: {method}")
