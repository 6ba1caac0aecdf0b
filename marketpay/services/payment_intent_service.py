# marketpay/services/payment_intent_service.py
from typing import Dict, Any

from sqlalchemy.orm import Session

from marketpay.data.models.cart import CART_COMPLETED
from marketpay.domain.errors import (
    GatewayError,
    NotFound,
    PreconditionFailed,
    SellerNotOnboarded,
    Unauthorized,
    UpstreamError,
)
from marketpay.domain.fees import PLATFORM_FEE_PERCENT, group_by_seller, to_minor_units
from marketpay.gateway.port import PaymentGateway
from marketpay.repos.cart_repo import CartRepo
from marketpay.repos.user_repo import UserRepo
from marketpay.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentIntentService:
    """
    Tworzy payment intent dla koszyka.
    Jesli choc jedna pozycja ma sprzedawce -> checkout marketplace,
    w przeciwnym razie zwykly intent z samym cartId/userId.
    """

    def __init__(self, db: Session, gateway: PaymentGateway, currency: str = "usd"):
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.gateway = gateway
        self.currency = currency

    def create_payment_intent(self, cart_id: str, user_id: str) -> Dict[str, Any]:
        cart = self.carts.get_cart(cart_id)

        if not cart:
            raise NotFound("Cart not found")

        if cart.user_id != user_id:
            raise Unauthorized("Unauthorized")

        if cart.status == CART_COMPLETED:
            raise PreconditionFailed("Cart has already been checked out")

        items = [i.to_dict() for i in self.carts.get_cart_items(cart_id)]
        by_seller = group_by_seller(items)
        amount = to_minor_units(cart.total_amount or 0)

        if by_seller:
            self._check_sellers(by_seller.keys())
            metadata = {
                "cartId": cart_id,
                "userId": user_id,
                "isMarketplace": "true",
                "itemCount": str(len(items)),
                "sellerCount": str(len(by_seller)),
                "platformFeePercent": str(PLATFORM_FEE_PERCENT),
            }
        else:
            metadata = {"cartId": cart_id, "userId": user_id}

        is_marketplace = bool(by_seller)
        logger.info(
            f"Creating {'marketplace' if is_marketplace else 'standard'} payment intent for cart {cart_id}",
            amount=amount,
            sellers=len(by_seller),
        )

        try:
            intent = self.gateway.create_payment_intent(
                amount=amount,
                currency=self.currency,
                metadata=metadata,
            )
        except GatewayError as e:
            logger.error(f"Error creating payment intent for cart {cart_id}: {e.message}")
            raise

        if not intent.client_secret:
            raise UpstreamError("Payment gateway returned no client secret")

        return {"client_secret": intent.client_secret, "is_marketplace": is_marketplace}

    def _check_sellers(self, seller_ids) -> None:
        # kazdy sprzedawca musi miec polaczone konto, inaczej nie da sie zrobic przelewu
        sellers = self.users.get_users(seller_ids)
        for seller_id in sorted(seller_ids):
            seller = sellers.get(seller_id)
            if seller is None or not seller.stripe_account_id:
                logger.warning(f"Seller {seller_id} not onboarded, refusing checkout")
                raise SellerNotOnboarded(seller_id)
