"""Configurable fake payment gateway for development and testing.

Keeps payment intents, accounts and transfers in memory and records every
call, so tests can assert on exactly what was sent to the gateway.
Webhook payloads are accepted only with the signature "test-signature".
"""

import json
from uuid import uuid4

from marketpay.domain.errors import AuthenticationError, GatewayError
from marketpay.gateway.port import (
    ConnectedAccount,
    PaymentGateway,
    PaymentIntentResult,
    TransferResult,
)

VALID_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntentResult] = {}
        self.accounts: dict[str, ConnectedAccount] = {}
        self.transfers: list[dict] = []
        self.calls: list[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str = "Your card was declined."
        self.failing_destinations: set[str] = set()
        self._transfers_by_key: dict[str, TransferResult] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Your card was declined.") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def fail_transfers_to(self, *account_ids: str) -> None:
        self.failing_destinations.update(account_ids)

    def calls_to(self, method: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method]

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

    # test helpers

    def set_intent_status(self, payment_intent_id: str, status: str) -> None:
        intent = self.intents[payment_intent_id]
        self.intents[payment_intent_id] = PaymentIntentResult(
            id=intent.id,
            client_secret=intent.client_secret,
            status=status,
            amount=intent.amount,
            metadata=intent.metadata,
            latest_charge=intent.latest_charge or f"ch_fake_{uuid4().hex[:12]}",
        )

    def set_account(self, account: ConnectedAccount) -> None:
        self.accounts[account.id] = account

    # PaymentGateway

    def create_payment_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntentResult:
        self._record("create_payment_intent", amount=amount, currency=currency, metadata=dict(metadata))
        intent_id = f"pi_fake_{uuid4().hex[:12]}"
        intent = PaymentIntentResult(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            status="requires_payment_method",
            amount=amount,
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentResult:
        self._record("retrieve_payment_intent", payment_intent_id=payment_intent_id)
        intent = self.intents.get(payment_intent_id)
        if intent is None:
            raise GatewayError(f"No such payment_intent: '{payment_intent_id}'")
        return intent

    def create_connected_account(self, email: str, user_id: str, business_name: str | None = None) -> ConnectedAccount:
        self._record("create_connected_account", email=email, user_id=user_id, business_name=business_name)
        account = ConnectedAccount(
            id=f"acct_fake_{uuid4().hex[:12]}",
            disabled_reason="requirements.past_due",
        )
        self.accounts[account.id] = account
        return account

    def retrieve_account(self, account_id: str) -> ConnectedAccount:
        self._record("retrieve_account", account_id=account_id)
        account = self.accounts.get(account_id)
        if account is None:
            raise GatewayError(f"No such account: '{account_id}'")
        return account

    def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        self._record("create_account_link", account_id=account_id, refresh_url=refresh_url, return_url=return_url)
        return f"https://connect.fake/setup/{account_id}/{uuid4().hex[:8]}"

    def create_login_link(self, account_id: str) -> str:
        self._record("create_login_link", account_id=account_id)
        return f"https://connect.fake/express/{account_id}"

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
        self._record(
            "create_transfer",
            amount=amount,
            currency=currency,
            destination=destination,
            source_transaction=source_transaction,
            transfer_group=transfer_group,
            metadata=dict(metadata),
            idempotency_key=idempotency_key,
        )
        if destination in self.failing_destinations:
            raise GatewayError(f"Transfer to {destination} failed: account cannot receive transfers")
        # the same idempotency key replays the original result, like Stripe
        if idempotency_key in self._transfers_by_key:
            return self._transfers_by_key[idempotency_key]
        result = TransferResult(id=f"tr_fake_{uuid4().hex[:12]}", amount=amount, destination=destination)
        self._transfers_by_key[idempotency_key] = result
        self.transfers.append({"id": result.id, "amount": amount, "destination": destination})
        return result

    def construct_event(self, payload: bytes, signature: str) -> dict:
        if signature != VALID_SIGNATURE:
            raise AuthenticationError("Webhook Error: No signatures found matching the expected signature for payload")
        try:
            return json.loads(payload)
        except ValueError as e:
            raise AuthenticationError("Webhook Error: invalid payload") from e
