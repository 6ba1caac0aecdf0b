from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session
from marketpay.data.models.user import UserModel, STRIPE_PENDING


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_users(self, user_ids) -> dict[str, UserModel]:
        if not user_ids:
            return {}
        rows = self.db.execute(
            select(UserModel).where(UserModel.id.in_(list(user_ids)))
        ).scalars().all()
        return {u.id: u for u in rows}

    def get_by_stripe_account(self, account_id: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.stripe_account_id == account_id).limit(1)
        ).scalars().first()

    def attach_merchant_account(self, user: UserModel, account_id: str, profile: dict) -> UserModel:
        user.stripe_account_id = account_id
        user.stripe_status = STRIPE_PENDING
        user.details_submitted = False
        user.payouts_enabled = False
        user.last_status_update = datetime.now(timezone.utc)
        user.is_seller = True
        for field, value in profile.items():
            if value is not None:
                setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_merchant_status(
        self,
        user: UserModel,
        stripe_status: str,
        details_submitted: bool,
        payouts_enabled: bool,
    ) -> UserModel:
        # last-write-wins, oba zrodla (pull i webhook) pochodza z bramki
        user.stripe_status = stripe_status
        user.details_submitted = details_submitted
        user.payouts_enabled = payouts_enabled
        user.last_status_update = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)
        return user

    def mark_onboarding_notified(self, user: UserModel) -> UserModel:
        user.onboarding_completed_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)
        return user

    def rollback(self):
        self.db.rollback()
