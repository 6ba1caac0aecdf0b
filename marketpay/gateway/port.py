"""Payment gateway port (abstract interface).

Services talk to the gateway only through this contract, so the Stripe
adapter (production) and the fake adapter (dev/tests) are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntentResult:
    id: str
    client_secret: str | None
    status: str
    amount: int
    metadata: dict = field(default_factory=dict)
    latest_charge: str | None = None


@dataclass(frozen=True)
class ConnectedAccount:
    id: str
    details_submitted: bool = False
    payouts_enabled: bool = False
    charges_enabled: bool = False
    disabled_reason: str | None = None
    requirements: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict) -> "ConnectedAccount":
        """Build from a raw account object (webhook payload or API response)."""
        requirements = data.get("requirements") or {}
        return cls(
            id=data["id"],
            details_submitted=bool(data.get("details_submitted")),
            payouts_enabled=bool(data.get("payouts_enabled")),
            charges_enabled=bool(data.get("charges_enabled")),
            disabled_reason=requirements.get("disabled_reason"),
            requirements={
                "currently_due": list(requirements.get("currently_due") or []),
                "eventually_due": list(requirements.get("eventually_due") or []),
                "past_due": list(requirements.get("past_due") or []),
                "pending_verification": list(requirements.get("pending_verification") or []),
            },
        )


@dataclass(frozen=True)
class TransferResult:
    id: str
    amount: int
    destination: str


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(self, amount: int, currency: str, metadata: dict) -> PaymentIntentResult:
        ...

    @abstractmethod
    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentResult:
        ...

    @abstractmethod
    def create_connected_account(self, email: str, user_id: str, business_name: str | None = None) -> ConnectedAccount:
        """Create an Express account with card_payments and transfers requested."""
        ...

    @abstractmethod
    def retrieve_account(self, account_id: str) -> ConnectedAccount:
        ...

    @abstractmethod
    def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        """Return a one-time onboarding URL."""
        ...

    @abstractmethod
    def create_login_link(self, account_id: str) -> str:
        """Return an Express dashboard login URL."""
        ...

    @abstractmethod
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
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> dict:
        """Verify the signature and return the decoded event.

        Raises AuthenticationError when the signature does not match.
        """
        ...
