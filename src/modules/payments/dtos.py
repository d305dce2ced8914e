"""Gateway-neutral payment DTOs (Pydantic v2, immutable).

Amounts are integers in the currency's minor unit (kobo for NGN).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: Decimal) -> int:
    """``Decimal("5000.00")`` -> ``500000``."""
    return int((Decimal(amount) * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"))


class TransactionInitialization(BaseModel):
    """Hosted-payment session returned by ``initialize_transaction``."""

    model_config = ConfigDict(frozen=True)

    authorization_url: str
    reference: str
    access_code: Optional[str] = None


class TransactionVerification(BaseModel):
    """Gateway's view of a transaction, as returned by ``verify_transaction``."""

    model_config = ConfigDict(frozen=True)

    success: bool
    reference: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    provider_transaction_id: Optional[str] = None
    provider_status: Optional[str] = None
    message: str = ""
