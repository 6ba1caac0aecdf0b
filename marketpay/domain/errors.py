# marketpay/domain/errors.py
"""
Wyjatki domenowe. Kazdy niesie status HTTP, mapowanie robi handler w main.py.
"""


class MarketplaceError(Exception):
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    http_status = 400


class NotFound(MarketplaceError):
    http_status = 404


class NotASeller(NotFound):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} is not a seller (no connected account)")
        self.user_id = user_id


class Unauthorized(MarketplaceError):
    http_status = 403


class PreconditionFailed(MarketplaceError):
    http_status = 400


class SellerNotOnboarded(PreconditionFailed):
    def __init__(self, seller_id: str):
        super().__init__(
            f"Seller {seller_id} has not completed payment onboarding and cannot receive payments"
        )
        self.seller_id = seller_id


class PaymentNotSucceeded(PreconditionFailed):
    def __init__(self, payment_intent_id: str, status: str | None):
        super().__init__(f"Payment has not succeeded (status: {status})")
        self.payment_intent_id = payment_intent_id
        self.status = status


class UpstreamError(MarketplaceError):
    http_status = 500


class GatewayError(UpstreamError):
    pass


class AuthenticationError(MarketplaceError):
    http_status = 400


class ConfigurationError(RuntimeError):
    pass
