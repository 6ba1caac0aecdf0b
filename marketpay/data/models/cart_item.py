import uuid

from sqlalchemy import Column, Integer, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from marketpay.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    cart_id = Column(String(64), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    tool_id = Column(String(64), nullable=False)
    # brak seller_id = sprzedaz platformy, bez podzialu
    seller_id = Column(String(128), nullable=True, index=True)

    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)

    cart = relationship("CartModel", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tool_id": self.tool_id,
            "seller_id": self.seller_id,
            "price": float(self.price),
            "quantity": self.quantity,
        }
