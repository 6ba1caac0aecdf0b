import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, Index, text

from marketpay.data.database import Base

TRANSFER_SUCCEEDED = "succeeded"
TRANSFER_FAILED = "failed"


class TransferModel(Base):
    """Ledger przelewow - tylko insert, jeden wiersz na kazde podejscie do przelewu."""

    __tablename__ = "transfers"
    __table_args__ = (
        # co najwyzej jeden udany przelew na pare (payment_intent_id, seller_id)
        Index(
            "uq_transfers_succeeded_pair",
            "payment_intent_id",
            "seller_id",
            unique=True,
            sqlite_where=text("status = 'succeeded'"),
            postgresql_where=text("status = 'succeeded'"),
        ),
    )

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    transfer_id = Column(String(255), nullable=True)  # id z bramki, brak przy bledzie
    seller_id = Column(String(128), nullable=False, index=True)
    payment_intent_id = Column(String(255), nullable=False, index=True)
    cart_id = Column(String(64), nullable=False)

    amount = Column(Integer, nullable=False)  # centy
    platform_fee = Column(Integer, nullable=False)  # centy
    status = Column(String(20), nullable=False)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
