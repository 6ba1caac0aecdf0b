"""Stripe payment gateway adapter (stripe-python SDK)."""

import json

import stripe

from marketpay.domain.errors import AuthenticationError, GatewayError
from marketpay.gateway.port import (
    ConnectedAccount,
    PaymentGateway,
    PaymentIntentResult,
    TransferResult,
)
from marketpay.utils.logging import get_logger
from marketpay.utils.retry import gateway_retry

logger = get_logger(__name__)


def _gateway_error(exc: stripe.StripeError) -> GatewayError:
    message = getattr(exc, "user_message", None) or str(exc) or exc.__class__.__name__
    return GatewayError(message)


def _metadata(obj) -> dict:
    metadata = getattr(obj, "metadata", None)
    if not metadata:
        return {}
    if hasattr(metadata, "to_dict"):
        return dict(metadata.to_dict())
    return dict(metadata)


def _intent(obj) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=obj.id,
        client_secret=getattr(obj, "client_secret", None),
        status=obj.status,
        amount=obj.amount,
        metadata=_metadata(obj),
        latest_charge=getattr(obj, "latest_charge", None),
    )


def _account(obj) -> ConnectedAccount:
    requirements = getattr(obj, "requirements", None)

    def _req(name):
        if requirements is None:
            return None
        return getattr(requirements, name, None)

    return ConnectedAccount.from_payload(
        {
            "id": obj.id,
            "details_submitted": getattr(obj, "details_submitted", False),
            "payouts_enabled": getattr(obj, "payouts_enabled", False),
            "charges_enabled": getattr(obj, "charges_enabled", False),
            "requirements": {
                "disabled_reason": _req("disabled_reason"),
                "currently_due": _req("currently_due"),
                "eventually_due": _req("eventually_due"),
                "past_due": _req("past_due"),
                "pending_verification": _req("pending_verification"),
            },
        }
    )


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter.

    Creation calls for intents and accounts are not retried: they are
    ship-once side effects without an idempotency key. Reads and transfers
    (which always carry an idempotency key) retry on connection errors.
    """

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        stripe.api_key = api_key

    def create_payment_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            raise _gateway_error(e) from e
        return _intent(intent)

    @gateway_retry()
    def _retrieve_intent(self, payment_intent_id: str):
        return stripe.PaymentIntent.retrieve(payment_intent_id)

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentResult:
        try:
            return _intent(self._retrieve_intent(payment_intent_id))
        except stripe.StripeError as e:
            raise _gateway_error(e) from e

    def create_connected_account(self, email: str, user_id: str, business_name: str | None = None) -> ConnectedAccount:
        params = {
            "type": "express",
            "email": email,
            "capabilities": {
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            "metadata": {"userId": user_id},
        }
        if business_name:
            params["business_profile"] = {"name": business_name}
        try:
            account = stripe.Account.create(**params)
        except stripe.StripeError as e:
            raise _gateway_error(e) from e
        return _account(account)

    @gateway_retry()
    def _retrieve_account(self, account_id: str):
        return stripe.Account.retrieve(account_id)

    def retrieve_account(self, account_id: str) -> ConnectedAccount:
        try:
            return _account(self._retrieve_account(account_id))
        except stripe.StripeError as e:
            raise _gateway_error(e) from e

    def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        try:
            link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            raise _gateway_error(e) from e
        return link.url

    def create_login_link(self, account_id: str) -> str:
        try:
            link = stripe.Account.create_login_link(account_id)
        except stripe.StripeError as e:
            raise _gateway_error(e) from e
        return link.url

    @gateway_retry()
    def _create_transfer(self, idempotency_key: str, **params):
        return stripe.Transfer.create(idempotency_key=idempotency_key, **params)

    def create_transfer(
        self,
        amount: int,
        currency: str,
        destination: str,
        source_transaction: str | None,
        transfer_group: str | None,
        metadata: dict,
        idempotency_key: str,
    ) -> TransferResult:
        params = {
            "amount": amount,
            "currency": currency,
            "destination": destination,
            "metadata": metadata,
        }
        if source_transaction:
            params["source_transaction"] = source_transaction
        if transfer_group:
            params["transfer_group"] = transfer_group
        try:
            transfer = self._create_transfer(idempotency_key, **params)
        except stripe.StripeError as e:
            raise _gateway_error(e) from e
        return TransferResult(id=transfer.id, amount=transfer.amount, destination=destination)

    def construct_event(self, payload: bytes, signature: str) -> dict:
        if not signature:
            raise AuthenticationError("Webhook Error: missing Stripe-Signature header")
        try:
            text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        except UnicodeDecodeError as e:
            raise AuthenticationError("Webhook Error: payload is not valid UTF-8") from e
        try:
            stripe.WebhookSignature.verify_header(
                text,
                signature,
                self.webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise AuthenticationError(f"Webhook Error: {e}") from e
        try:
            return json.loads(text)
        except ValueError as e:
            raise AuthenticationError("Webhook Error: invalid payload") from e
