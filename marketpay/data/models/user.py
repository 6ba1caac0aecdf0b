from sqlalchemy import Column, String, Boolean, DateTime, Text

from marketpay.data.database import Base

STRIPE_PENDING = "pending"
STRIPE_ACTIVE = "active"
STRIPE_RESTRICTED = "restricted"


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)

    # merchant account (polaczone konto w bramce platnosci)
    stripe_account_id = Column(String(255), nullable=True, unique=True, index=True)
    stripe_status = Column(String(20), nullable=True)
    details_submitted = Column(Boolean, nullable=False, default=False)
    payouts_enabled = Column(Boolean, nullable=False, default=False)
    last_status_update = Column(DateTime(timezone=True), nullable=True)
    onboarding_completed_at = Column(DateTime(timezone=True), nullable=True)

    # profil sprzedawcy
    is_seller = Column(Boolean, nullable=False, default=False)
    seller_name = Column(String(255), nullable=True)
    seller_type = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    seller_bio = Column(Text, nullable=True)

    @property
    def fully_onboarded(self) -> bool:
        return bool(self.details_submitted and self.payouts_enabled)
