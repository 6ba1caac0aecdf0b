# marketpay/api/routers/webhooks.py
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from marketpay.data.database import get_db
from marketpay.domain.schemas import WebhookAck
from marketpay.gateway import get_gateway
from marketpay.services.webhook_service import WebhookService
from marketpay.utils.settings import get_settings

router = APIRouter(tags=["webhooks"])


def get_service(db: Session):
    return WebhookService(db, gateway=get_gateway(), currency=get_settings().currency)


@router.post("/stripe-webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(default="", alias="Stripe-Signature"),
    db: Session = Depends(get_db),
):
    """
    Podpis liczony jest z surowego body, dlatego nie parsujemy JSON-a przed weryfikacja.
    Nieznane typy zdarzen dostaja 200, inaczej bramka ponawia w nieskonczonosc.
    """
    payload = await request.body()
    svc = get_service(db)
    return await run_in_threadpool(svc.handle, payload, stripe_signature)
