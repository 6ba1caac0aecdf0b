#marketpay/data/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from marketpay.data.database import Base

CART_ACTIVE = "active"
CART_COMPLETED = "completed"


def _now():
    return datetime.now(timezone.utc)


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(128), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=CART_ACTIVE)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    order_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
    )
