# marketpay/services/webhook_service.py
from typing import Dict, Any, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketpay.data.models.cart import CART_COMPLETED
from marketpay.data.models.transfer import TransferModel, TRANSFER_SUCCEEDED, TRANSFER_FAILED
from marketpay.domain.errors import GatewayError, UpstreamError
from marketpay.domain.fees import group_by_seller, seller_total, split_seller_total
from marketpay.gateway.port import ConnectedAccount, PaymentGateway
from marketpay.repos.cart_repo import CartRepo
from marketpay.repos.order_repo import OrderRepo
from marketpay.repos.transfer_repo import TransferRepo
from marketpay.repos.user_repo import UserRepo
from marketpay.services.account_service import derive_stripe_status
from marketpay.services.notification_service import NotificationService
from marketpay.utils.logging import get_logger

logger = get_logger(__name__)

ACCOUNT_UPDATED = "account.updated"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"


class WebhookService:
    """
    Obsluga zdarzen z bramki platnosci.

    Dostawa at-least-once i bez kolejnosci, wiec kazda obsluga jest idempotentna:
    - account.updated: last-write-wins na statusie konta, mail o zakonczonym
      onboardingu wysylany raz (onboarding_completed_at)
    - payment_intent.succeeded: przelew na sprzedawce tylko gdy w ledgerze nie ma
      udanego przelewu dla pary (payment_intent_id, seller_id)
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway,
        notifier: NotificationService | None = None,
        currency: str = "usd",
    ):
        self.db = db
        self.users = UserRepo(db)
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.transfers = TransferRepo(db)
        self.gateway = gateway
        self.notifier = notifier or NotificationService()
        self.currency = currency

    def handle(self, payload: bytes, signature: str) -> Dict[str, Any]:
        # jedyna bramka autentycznosci, przy bledzie AuthenticationError i zero efektow
        event = self.gateway.construct_event(payload, signature)
        return self.process_event(event)

    def process_event(self, event: dict) -> Dict[str, Any]:
        event_type = event.get("type")
        obj = (event.get("data") or {}).get("object") or {}
        logger.info(f"Webhook event {event.get('id')} received", event_type=event_type)

        try:
            if event_type == ACCOUNT_UPDATED:
                self.handle_account_updated(obj)
            elif event_type == PAYMENT_INTENT_SUCCEEDED:
                self.handle_payment_succeeded(obj)
            else:
                logger.info(f"Unhandled event type {event_type}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store failure while processing {event_type}: {e}")
            raise UpstreamError(f"Failed to process {event_type}: {e}") from e

        return {"received": True}

    # account.updated

    def handle_account_updated(self, obj: dict) -> None:
        account = ConnectedAccount.from_payload(obj)
        user = self.users.get_by_stripe_account(account.id)
        if not user:
            logger.warning(f"No user found for connected account {account.id}")
            return

        status = derive_stripe_status(account)
        self.users.update_merchant_status(
            user,
            stripe_status=status,
            details_submitted=account.details_submitted,
            payouts_enabled=account.payouts_enabled,
        )
        logger.info(
            f"Updated merchant account of user {user.id}",
            status=status,
            details_submitted=account.details_submitted,
            payouts_enabled=account.payouts_enabled,
        )

        if user.fully_onboarded and user.onboarding_completed_at is None:
            self._notify_onboarding_complete(user)

    def _notify_onboarding_complete(self, user) -> None:
        address = user.contact_email or user.email
        if not address:
            logger.warning(f"User {user.id} finished onboarding but has no email address")
            return
        try:
            self.notifier.send_seller_onboarding_complete_email(
                address,
                {"sellerName": user.seller_name, "stripeAccountId": user.stripe_account_id},
            )
        except Exception as e:
            # brak maila nie moze wywrocic webhooka
            logger.error(f"Failed to send onboarding complete email to {address}: {e}")
            return
        self.users.mark_onboarding_notified(user)

    # payment_intent.succeeded

    def handle_payment_succeeded(self, obj: dict) -> None:
        payment_intent_id = obj.get("id")
        metadata = obj.get("metadata") or {}
        cart_id = metadata.get("cartId")

        if not cart_id:
            logger.info(f"Payment {payment_intent_id} has no cartId, standard purchase, nothing to transfer")
            return

        items = self._paid_items(cart_id)
        if items is None:
            return

        by_seller = group_by_seller(items)
        if not by_seller:
            logger.info(f"Cart {cart_id} has no seller items, nothing to transfer")
            return

        source_charge = obj.get("latest_charge") or self._latest_charge(payment_intent_id)
        sellers = self.users.get_users(by_seller.keys())

        for seller_id, seller_items in by_seller.items():
            seller = sellers.get(seller_id)
            if seller is None or not seller.stripe_account_id:
                logger.warning(f"Seller {seller_id} has no connected account, skipping transfer", cart_id=cart_id)
                continue
            try:
                self._transfer_to_seller(
                    payment_intent_id=payment_intent_id,
                    cart_id=cart_id,
                    seller_id=seller_id,
                    destination=seller.stripe_account_id,
                    items=seller_items,
                    source_charge=source_charge,
                )
            except Exception as e:
                # izolacja bledow per sprzedawca
                self.db.rollback()
                logger.error(f"Transfer to seller {seller_id} for {payment_intent_id} failed: {e}")

    def _paid_items(self, cart_id: str) -> List[dict] | None:
        """
        Pozycje z koszyka, a jesli koszyk jest juz zamkniety przez confirm-payment,
        ze snapshotu w zamowieniu (pozycje koszyka moga byc juz usuniete).

        Zamowienie jest commitowane przed usunieciem pozycji, wiec pusta lista
        pozycji przy istniejacym zamowieniu oznacza wyscig z confirm-payment.
        """
        cart = self.carts.get_cart(cart_id)
        if not cart:
            logger.warning(f"Cart {cart_id} from payment metadata not found")
            return None

        if cart.status == CART_COMPLETED:
            order = self.orders.get_order(cart.order_id) if cart.order_id else None
            if order is None:
                order = self.orders.get_order_by_cart(cart_id)
            if order is not None:
                return list(order.items or [])

        items = [i.to_dict() for i in self.carts.get_cart_items(cart_id)]
        if items:
            return items

        # koszyk zamkniety miedzy odczytami, ponowny odczyt zamowienia
        self.db.expire_all()
        order = self.orders.get_order_by_cart(cart_id)
        if order is not None:
            logger.info(f"Cart {cart_id} completed concurrently, using order {order.id} snapshot")
            return list(order.items or [])
        return items

    def _latest_charge(self, payment_intent_id: str) -> str | None:
        try:
            return self.gateway.retrieve_payment_intent(payment_intent_id).latest_charge
        except GatewayError as e:
            logger.warning(f"Could not fetch charge for {payment_intent_id}: {e}")
            return None

    def _transfer_to_seller(
        self,
        payment_intent_id: str,
        cart_id: str,
        seller_id: str,
        destination: str,
        items: List[dict],
        source_charge: str | None,
    ) -> TransferModel | None:
        existing = self.transfers.get_succeeded(payment_intent_id, seller_id)
        if existing:
            logger.info(
                f"Transfer for seller {seller_id} on {payment_intent_id} already recorded, skipping",
                transfer_id=existing.transfer_id,
            )
            return None

        total = seller_total(items)
        seller_amount, platform_fee = split_seller_total(total)
        attempt = self.transfers.count_failed(payment_intent_id, seller_id)

        entry = TransferModel(
            seller_id=seller_id,
            payment_intent_id=payment_intent_id,
            cart_id=cart_id,
            amount=seller_amount,
            platform_fee=platform_fee,
        )
        try:
            result = self.gateway.create_transfer(
                amount=seller_amount,
                currency=self.currency,
                destination=destination,
                source_transaction=source_charge,
                transfer_group=cart_id,
                metadata={
                    "paymentIntentId": payment_intent_id,
                    "cartId": cart_id,
                    "sellerId": seller_id,
                    "platformFee": str(platform_fee),
                },
                idempotency_key=f"transfer-{payment_intent_id}-{seller_id}-{attempt}",
            )
        except GatewayError as e:
            entry.status = TRANSFER_FAILED
            entry.error = e.message
            self.transfers.append(entry)
            logger.error(f"Transfer to seller {seller_id} failed: {e.message}", amount=seller_amount)
            return entry

        entry.status = TRANSFER_SUCCEEDED
        entry.transfer_id = result.id
        try:
            self.transfers.append(entry)
        except IntegrityError:
            # rownolegla dostawa zapisala ten sam przelew (ten sam idempotency key)
            self.transfers.rollback()
            logger.info(
                f"Transfer {result.id} to seller {seller_id} already recorded by concurrent delivery",
                payment_intent_id=payment_intent_id,
            )
            return None
        logger.info(
            f"Transfer {result.id} to seller {seller_id} created",
            amount=seller_amount,
            platform_fee=platform_fee,
        )
        return entry
