# marketpay/domain/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON po stronie frontu jest w camelCase, w pythonie snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreatePaymentIntentIn(CamelModel):
    cart_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)


class CreatePaymentIntentOut(CamelModel):
    client_secret: str
    is_marketplace: bool


class ConfirmPaymentIn(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)
    cart_id: str = Field(..., min_length=1)


class ConfirmPaymentOut(CamelModel):
    success: bool = True
    order_id: str


class CreateConnectedAccountIn(CamelModel):
    """Body z formularza onboardingu sprzedawcy."""

    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    seller_name: Optional[str] = Field(None, max_length=255)
    seller_type: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=50)
    seller_bio: Optional[str] = Field(None, max_length=5000)

    def profile(self) -> dict:
        return self.model_dump(exclude={"user_id", "email"})


class CreateConnectedAccountOut(CamelModel):
    url: str
    account_id: str
    exists: bool


class AccountRequirements(CamelModel):
    currently_due: List[str] = []
    eventually_due: List[str] = []
    past_due: List[str] = []
    pending_verification: List[str] = []


class AccountStatusOut(CamelModel):
    account_id: str
    status: str
    details_submitted: bool
    payouts_enabled: bool
    requirements_disabled_reason: Optional[str] = None
    requirements: AccountRequirements
    charges_enabled: bool


class LinkOut(CamelModel):
    url: str


class WebhookAck(CamelModel):
    received: bool = True


class ApiStatus(CamelModel):
    status: str
    timestamp: datetime
    version: str
