import atexit

from django.apps import AppConfig, apps
from django.conf import settings


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.payments"
    label = "payments"

    def ready(self) -> None:
        from modules.payments.paystack import PaystackGateway

        self.gateway = PaystackGateway(
            secret_key=settings.PAYSTACK_SECRET_KEY,
            base_url=settings.PAYSTACK_BASE_URL,
            timeout=settings.PAYSTACK_TIMEOUT,
            callback_url=settings.PAYSTACK_CALLBACK_URL or None,
            currency=settings.PAYMENT_CURRENCY,
        )
        atexit.register(self.gateway.close)


def get_payment_gateway():
    """Return the process-wide gateway created at startup."""
    return apps.get_app_config("payments").gateway
