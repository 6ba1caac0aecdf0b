# marketpay/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from marketpay.data.models.cart import CartModel, CART_COMPLETED
from marketpay.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: str) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_items(self, cart_id: str) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel).where(CartItemModel.cart_id == cart_id)
            ).scalars().all()
        )

    def complete_cart(self, cart_id: str, order_id: str) -> int:
        """
        Warunkowy update: UPDATE carts SET status='completed' ... WHERE id=:id AND status != 'completed'.
        Zwraca rowcount, 0 oznacza ze ktos inny juz zamknal koszyk.
        """
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.status != CART_COMPLETED)
            .values(status=CART_COMPLETED, order_id=order_id, total_amount=0)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_cart_items(self, cart_id: str) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
