# marketpay/services/order_service.py
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketpay.data.models.cart import CART_COMPLETED
from marketpay.data.models.order import OrderModel, ORDER_PAID
from marketpay.domain.errors import NotFound, PaymentNotSucceeded, PreconditionFailed, UpstreamError
from marketpay.gateway.port import PaymentGateway
from marketpay.repos.cart_repo import CartRepo
from marketpay.repos.order_repo import OrderRepo
from marketpay.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "succeeded"


class OrderService:
    """
    Finalizacja zamowienia po potwierdzeniu platnosci przez kupujacego.
    Idempotentne: drugie wywolanie dla tego samego koszyka zwraca istniejace orderId.
    """

    def __init__(self, db: Session, gateway: PaymentGateway):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.gateway = gateway

    def confirm_payment(self, payment_intent_id: str, cart_id: str) -> str:
        """
        1. Pobiera intent z bramki (nie ufamy klientowi), sprawdza status i cartId
        2. Laduje koszyk
        3. Tworzy zamowienie i zamyka koszyk warunkowym update
        4. Usuwa pozycje koszyka (best effort)
        """
        intent = self.gateway.retrieve_payment_intent(payment_intent_id)

        if intent.status != PAYMENT_SUCCEEDED:
            logger.warning(f"Payment {payment_intent_id} not succeeded", status=intent.status)
            raise PaymentNotSucceeded(payment_intent_id, intent.status)

        # intent musi byc wystawiony na ten koszyk
        intent_cart_id = (intent.metadata or {}).get("cartId")
        if intent_cart_id != cart_id:
            logger.warning(
                f"Payment {payment_intent_id} does not belong to cart {cart_id}",
                intent_cart_id=intent_cart_id,
            )
            raise PreconditionFailed("Payment does not belong to this cart")

        cart = self.carts.get_cart(cart_id)
        if not cart:
            raise NotFound("Cart not found")

        if cart.status == CART_COMPLETED and cart.order_id:
            logger.info(f"Cart {cart_id} already completed, returning order {cart.order_id}")
            return cart.order_id

        items = [i.to_dict() for i in self.carts.get_cart_items(cart_id)]

        try:
            order = self.orders.add_order(
                OrderModel(
                    cart_id=cart_id,
                    user_id=cart.user_id,
                    items=items,
                    total_amount=cart.total_amount,
                    status=ORDER_PAID,
                    payment_intent_id=payment_intent_id,
                )
            )
            rowcount = self.carts.complete_cart(cart_id, order.id)
        except IntegrityError:
            # rownolegle potwierdzenie zdazylo pierwsze (unique na cart_id)
            self.carts.rollback()
            return self._existing_order_id(cart_id)
        except SQLAlchemyError as e:
            self.carts.rollback()
            logger.error(f"Failed to create order for cart {cart_id}: {e}")
            raise UpstreamError(f"Failed to create order: {e}") from e

        if rowcount == 0:
            self.carts.rollback()
            return self._existing_order_id(cart_id)

        order_id = order.id
        try:
            self.carts.commit()
        except IntegrityError:
            self.carts.rollback()
            return self._existing_order_id(cart_id)
        except SQLAlchemyError as e:
            self.carts.rollback()
            logger.error(f"Failed to commit order for cart {cart_id}: {e}")
            raise UpstreamError(f"Failed to create order: {e}") from e

        logger.info(f"Order {order_id} created from cart {cart_id}", payment_intent_id=payment_intent_id)

        self._clear_cart_items(cart_id)
        return order_id

    def _existing_order_id(self, cart_id: str) -> str:
        self.db.expire_all()
        cart = self.carts.get_cart(cart_id)
        if cart and cart.order_id:
            logger.info(f"Cart {cart_id} completed concurrently, returning order {cart.order_id}")
            return cart.order_id
        order = self.orders.get_order_by_cart(cart_id)
        if order:
            return order.id
        raise UpstreamError(f"Cart {cart_id} could not be completed")

    def _clear_cart_items(self, cart_id: str) -> None:
        # status i zerowy total sa zrodlem prawdy, usuniecie pozycji to tylko sprzatanie
        try:
            deleted = self.carts.delete_cart_items(cart_id)
            self.carts.commit()
            logger.info(f"Removed {deleted} items from cart {cart_id}")
        except SQLAlchemyError as e:
            self.carts.rollback()
            logger.warning(f"Failed to clear items of cart {cart_id}: {e}")
