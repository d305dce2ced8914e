"""Paystack implementation of ``IPaymentGateway``.

Talks to the Paystack REST API over a pooled ``requests.Session``:

- ``POST /transaction/initialize`` opens a hosted checkout; the order id is
  sent as the transaction ``reference`` so the redirect back to
  ``/orders/paystack/verify/<reference>/`` identifies the order.
- ``GET /transaction/verify/<reference>`` returns the transaction verdict
  and the amount Paystack actually collected (in kobo).

Every call is bounded by ``timeout``.  Nothing is retried: transport
failures surface as ``PaymentGatewayError`` and the client re-initiates.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
import structlog

from modules.payments.dtos import TransactionInitialization, TransactionVerification
from modules.payments.exceptions import PaymentGatewayError
from modules.payments.gateway import IPaymentGateway

logger = structlog.get_logger(__name__)

PAYSTACK_BASE_URL = "https://api.paystack.co"
SIGNATURE_HEADER = "X-Paystack-Signature"
SUCCESS_STATUS = "success"


class PaystackGateway(IPaymentGateway):
    def __init__(
        self,
        secret_key: str,
        base_url: str = PAYSTACK_BASE_URL,
        timeout: float = 10.0,
        callback_url: Optional[str] = None,
        currency: str = "NGN",
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._callback_url = callback_url
        self._currency = currency
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            }
        )

    # ------------------------------------------------------------------
    # IPaymentGateway
    # ------------------------------------------------------------------

    def initialize_transaction(
        self, email: str, amount: int, reference: str
    ) -> TransactionInitialization:
        payload: Dict[str, Any] = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "currency": self._currency,
        }
        if self._callback_url:
            payload["callback_url"] = self._callback_url

        log = logger.bind(reference=reference, amount=amount)
        body = self._request("POST", "/transaction/initialize", json=payload)

        data = body.get("data") or {}
        if not body.get("status") or not data.get("authorization_url"):
            message = body.get("message") or "unknown error"
            log.error("paystack.initialize_rejected", gateway_message=message)
            raise PaymentGatewayError(f"Paystack initialization failed: {message}")

        log.info("paystack.initialized")
        return TransactionInitialization(
            authorization_url=data["authorization_url"],
            reference=data.get("reference") or reference,
            access_code=data.get("access_code"),
        )

    def verify_transaction(self, reference: str) -> TransactionVerification:
        body = self._request("GET", f"/transaction/verify/{quote(reference, safe='')}")
        data = body.get("data") or {}
        message = body.get("message") or ""

        if not body.get("status") or not isinstance(data, dict):
            logger.info("paystack.verify_unsuccessful", reference=reference, gateway_message=message)
            return TransactionVerification(success=False, reference=reference, message=message)

        provider_status = data.get("status")
        amount = data.get("amount")
        provider_id = data.get("id")
        try:
            amount = int(amount) if amount is not None else None
        except (TypeError, ValueError) as exc:
            logger.error("paystack.invalid_amount", reference=reference, amount=repr(amount))
            raise PaymentGatewayError("Paystack returned an invalid amount.") from exc

        verification = TransactionVerification(
            success=provider_status == SUCCESS_STATUS,
            reference=data.get("reference") or reference,
            amount=amount,
            currency=data.get("currency"),
            provider_transaction_id=str(provider_id) if provider_id is not None else None,
            provider_status=provider_status,
            message=data.get("gateway_response") or message,
        )
        logger.info(
            "paystack.verified",
            reference=reference,
            provider_status=provider_status,
            amount=verification.amount,
        )
        return verification

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        """Send a request and return the decoded JSON envelope.

        4xx answers are returned to the caller (Paystack explains the
        refusal in ``message``); 5xx, transport errors and non-JSON bodies
        raise ``PaymentGatewayError``.
        """
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error("paystack.timeout", method=method, path=path, timeout=self._timeout)
            raise PaymentGatewayError("Payment gateway timed out.") from exc
        except requests.RequestException as exc:
            logger.error("paystack.unreachable", method=method, path=path, error=str(exc))
            raise PaymentGatewayError("Could not connect to Paystack.") from exc

        if response.status_code >= 500:
            logger.error("paystack.server_error", path=path, status_code=response.status_code)
            raise PaymentGatewayError(f"Paystack returned HTTP {response.status_code}.")

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("paystack.invalid_body", path=path, status_code=response.status_code)
            raise PaymentGatewayError("Paystack returned an unreadable response.") from exc

        if not isinstance(body, dict):
            raise PaymentGatewayError("Paystack returned an unexpected response.")
        return body


def verify_webhook_signature(body: bytes, signature: Optional[str], secret_key: str) -> bool:
    """Check ``X-Paystack-Signature`` (HMAC-SHA512 of the raw body)."""
    if not signature or not secret_key:
        return False
    expected = hmac.new(secret_key.encode(), body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)
