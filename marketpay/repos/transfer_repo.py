# marketpay/repos/transfer_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from marketpay.data.models.transfer import TransferModel, TRANSFER_SUCCEEDED, TRANSFER_FAILED


class TransferRepo:
    """Append-only ledger, brak update/delete."""

    def __init__(self, db: Session):
        self.db = db

    def get_succeeded(self, payment_intent_id: str, seller_id: str) -> TransferModel | None:
        return self.db.execute(
            select(TransferModel)
            .where(
                TransferModel.payment_intent_id == payment_intent_id,
                TransferModel.seller_id == seller_id,
                TransferModel.status == TRANSFER_SUCCEEDED,
            )
            .limit(1)
        ).scalars().first()

    def count_failed(self, payment_intent_id: str, seller_id: str) -> int:
        return self.db.execute(
            select(func.count(TransferModel.id)).where(
                TransferModel.payment_intent_id == payment_intent_id,
                TransferModel.seller_id == seller_id,
                TransferModel.status == TRANSFER_FAILED,
            )
        ).scalar_one()

    def append(self, entry: TransferModel) -> TransferModel:
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def rollback(self):
        self.db.rollback()
