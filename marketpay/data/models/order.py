import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, JSON

from marketpay.data.database import Base

ORDER_PAID = "paid"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    # jeden koszyk = max jedno zamowienie
    cart_id = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(128), nullable=False, index=True)

    items = Column(JSON, nullable=False, default=list)  # snapshot pozycji koszyka
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=ORDER_PAID)
    payment_intent_id = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
