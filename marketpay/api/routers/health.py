# marketpay/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

from marketpay.domain.schemas import ApiStatus

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


@router.get("/", response_model=ApiStatus)
def api_status():
    return ApiStatus(status="ok", timestamp=datetime.now(timezone.utc), version=VERSION)


@router.get("/health")
def health():
    return {"ok": True}
