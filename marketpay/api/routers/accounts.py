# marketpay/api/routers/accounts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketpay.data.database import get_db
from marketpay.domain.schemas import (
    AccountStatusOut,
    CreateConnectedAccountIn,
    CreateConnectedAccountOut,
    LinkOut,
)
from marketpay.gateway import get_gateway
from marketpay.services.account_service import AccountService
from marketpay.utils.settings import get_settings

router = APIRouter(tags=["accounts"])


def get_service(db: Session):
    return AccountService(db, gateway=get_gateway(), app_url=get_settings().app_url)


@router.post("/create-connected-account", response_model=CreateConnectedAccountOut)
def create_connected_account(payload: CreateConnectedAccountIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.create_connected_account(payload.user_id, payload.email, payload.profile())


@router.get("/get-account-status", response_model=AccountStatusOut)
def get_account_status(user_id: str = Query(..., alias="userId", min_length=1), db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.get_account_status(user_id)


@router.get("/refresh-account-link", response_model=LinkOut)
def refresh_account_link(user_id: str = Query(..., alias="userId", min_length=1), db: Session = Depends(get_db)):
    svc = get_service(db)
    return LinkOut(url=svc.refresh_account_link(user_id))


@router.get("/get-dashboard-link", response_model=LinkOut)
def get_dashboard_link(user_id: str = Query(..., alias="userId", min_length=1), db: Session = Depends(get_db)):
    svc = get_service(db)
    return LinkOut(url=svc.get_dashboard_link(user_id))
