# marketpay/api/routers/payments.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketpay.data.database import get_db
from marketpay.domain.schemas import (
    ConfirmPaymentIn,
    ConfirmPaymentOut,
    CreatePaymentIntentIn,
    CreatePaymentIntentOut,
)
from marketpay.gateway import get_gateway
from marketpay.services.order_service import OrderService
from marketpay.services.payment_intent_service import PaymentIntentService
from marketpay.utils.settings import get_settings

router = APIRouter(tags=["payments"])


def get_intent_service(db: Session):
    return PaymentIntentService(db, gateway=get_gateway(), currency=get_settings().currency)


def get_order_service(db: Session):
    return OrderService(db, gateway=get_gateway())


@router.post("/create-payment-intent", response_model=CreatePaymentIntentOut)
def create_payment_intent(payload: CreatePaymentIntentIn, db: Session = Depends(get_db)):
    svc = get_intent_service(db)
    return svc.create_payment_intent(payload.cart_id, payload.user_id)


@router.post("/confirm-payment", response_model=ConfirmPaymentOut)
def confirm_payment(payload: ConfirmPaymentIn, db: Session = Depends(get_db)):
    """
    Potwierdzenie platnosci po stronie kupujacego.
    Wielokrotne wywolanie zwraca to samo orderId.
    """
    svc = get_order_service(db)
    order_id = svc.confirm_payment(payload.payment_intent_id, payload.cart_id)
    return ConfirmPaymentOut(success=True, order_id=order_id)
