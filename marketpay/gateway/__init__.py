"""Payment gateway factory.

get_gateway() returns the configured adapter (StripeGateway unless
PAYMENT_GATEWAY=fake); set_gateway() swaps it, mainly for tests.
"""

from marketpay.gateway.fake_adapter import FakeGateway
from marketpay.gateway.port import PaymentGateway
from marketpay.gateway.stripe_adapter import StripeGateway
from marketpay.utils.settings import get_settings

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.payment_gateway == "fake":
            _current_gateway = FakeGateway()
        else:
            _current_gateway = StripeGateway(
                api_key=settings.stripe_secret_key,
                webhook_secret=settings.stripe_webhook_secret,
            )
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
