# marketpay/services/notification_service.py
from datetime import date

from marketpay.celery_worker import celery_app
from marketpay.services.email_client import EmailClient, TEMPLATE_IDS
from marketpay.utils.logging import get_logger
from marketpay.utils.settings import get_settings

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery, wysylka maila nie blokuje obslugi webhooka.
    """

    @staticmethod
    def send_seller_onboarding_complete_email(address: str, seller_details: dict):
        """
        Fire-and-forget. Bledy brokera leca wyzej, wolajacy loguje i idzie dalej.
        """
        send_seller_onboarding_complete_email_task.delay(address, seller_details)


def onboarding_complete_template_data(address: str, seller_details: dict, app_url: str) -> dict:
    return {
        "seller_name": seller_details.get("sellerName") or address.split("@")[0],
        "dashboard_url": f"{app_url}/seller/dashboard",
        "create_listing_url": f"{app_url}/seller/new-listing",
        "account_id": seller_details.get("stripeAccountId") or "",
        "setup_date": date.today().isoformat(),
    }


@celery_app.task(name="marketpay.services.notification_service.send_seller_onboarding_complete_email_task")
def send_seller_onboarding_complete_email_task(address: str, seller_details: dict):
    data = onboarding_complete_template_data(address, seller_details, get_settings().app_url)
    sent = EmailClient().send_template(address, TEMPLATE_IDS["SELLER_ONBOARDING_COMPLETE"], data)
    if not sent:
        logger.warning(f"[NOTIFICATION] Onboarding complete email to {address} not delivered")
    return {"to": address, "status": "sent" if sent else "failed"}
