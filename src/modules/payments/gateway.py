"""Payment gateway contract.

The order service depends exclusively on this interface (DIP); the
Paystack implementation lives in ``modules.payments.paystack``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from modules.payments.dtos import TransactionInitialization, TransactionVerification


class IPaymentGateway(ABC):
    @abstractmethod
    def initialize_transaction(
        self, email: str, amount: int, reference: str
    ) -> TransactionInitialization:
        """Open a hosted-payment session for *amount* minor units.

        Raises:
            PaymentGatewayError: transport failure or gateway refusal.
        """

    @abstractmethod
    def verify_transaction(self, reference: str) -> TransactionVerification:
        """Fetch the gateway's verdict on *reference*.

        A declined or unknown transaction is reported through
        ``success=False``, not raised.

        Raises:
            PaymentGatewayError: transport failure or unreadable answer.
        """

    def close(self) -> None:
        """Release pooled connections."""
