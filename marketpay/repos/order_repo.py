# marketpay/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session
from marketpay.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita, commit razem ze zmiana koszyka
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_by_cart(self, cart_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.cart_id == cart_id)
        ).scalar_one_or_none()
