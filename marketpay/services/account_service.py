# marketpay/services/account_service.py
from typing import Dict, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketpay.data.models.user import UserModel, STRIPE_ACTIVE, STRIPE_RESTRICTED
from marketpay.domain.errors import NotASeller, NotFound, UpstreamError
from marketpay.gateway.port import ConnectedAccount, PaymentGateway
from marketpay.repos.user_repo import UserRepo
from marketpay.utils.logging import get_logger

logger = get_logger(__name__)


def derive_stripe_status(account: ConnectedAccount) -> str:
    """Konto z disabled_reason jest ograniczone, w pozostalych przypadkach aktywne."""
    return STRIPE_RESTRICTED if account.disabled_reason else STRIPE_ACTIVE


class AccountService:
    """
    Polaczone konta sprzedawcow w bramce platnosci:
    zakladanie, status (pull), linki do onboardingu i dashboardu.
    """

    def __init__(self, db: Session, gateway: PaymentGateway, app_url: str):
        self.users = UserRepo(db)
        self.gateway = gateway
        self.app_url = app_url.rstrip("/")

    def create_connected_account(self, user_id: str, email: str, profile: dict) -> Dict[str, Any]:
        user = self.users.get_user(user_id)
        if not user:
            raise NotFound("User not found")

        # nigdy dwa konta dla jednego usera, dajemy nowy link do istniejacego
        if user.stripe_account_id:
            logger.info(f"User {user_id} already has account {user.stripe_account_id}, issuing new onboarding link")
            url = self._onboarding_link(user.stripe_account_id)
            return {"url": url, "account_id": user.stripe_account_id, "exists": True}

        account = self.gateway.create_connected_account(
            email=email,
            user_id=user_id,
            business_name=profile.get("seller_name"),
        )
        logger.info(f"Created connected account {account.id} for user {user_id}")

        if not user.email:
            profile = {**profile, "email": email}
        try:
            self.users.attach_merchant_account(user, account.id, profile)
        except SQLAlchemyError as e:
            # konto w bramce zostaje osierocone, bez rollbacku miedzy systemami
            self.users.rollback()
            logger.error(
                f"Failed to store connected account for user {user_id}, orphaned account {account.id}: {e}"
            )
            raise UpstreamError(f"Failed to store connected account: {e}") from e

        url = self._onboarding_link(account.id)
        return {"url": url, "account_id": account.id, "exists": False}

    def get_account_status(self, user_id: str) -> Dict[str, Any]:
        user = self._seller(user_id)
        account = self.gateway.retrieve_account(user.stripe_account_id)

        status = derive_stripe_status(account)
        try:
            self.users.update_merchant_status(
                user,
                stripe_status=status,
                details_submitted=account.details_submitted,
                payouts_enabled=account.payouts_enabled,
            )
        except SQLAlchemyError as e:
            self.users.rollback()
            # status z bramki i tak zwracamy, lokalny zapis nadrobi webhook
            logger.warning(f"Failed to refresh merchant account of user {user_id}: {e}")

        return {
            "account_id": account.id,
            "status": status,
            "details_submitted": account.details_submitted,
            "payouts_enabled": account.payouts_enabled,
            "requirements_disabled_reason": account.disabled_reason,
            "requirements": account.requirements,
            "charges_enabled": account.charges_enabled,
        }

    def refresh_account_link(self, user_id: str) -> str:
        user = self._seller(user_id)
        return self._onboarding_link(user.stripe_account_id)

    def get_dashboard_link(self, user_id: str) -> str:
        user = self._seller(user_id)
        return self.gateway.create_login_link(user.stripe_account_id)

    def _seller(self, user_id: str) -> UserModel:
        user = self.users.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        if not user.stripe_account_id:
            raise NotASeller(user_id)
        return user

    def _onboarding_link(self, account_id: str) -> str:
        return self.gateway.create_account_link(
            account_id=account_id,
            refresh_url=f"{self.app_url}/seller/onboarding/refresh",
            return_url=f"{self.app_url}/seller/onboarding/complete",
        )
