# marketpay/services/email_client.py
import requests
from requests import RequestException

from marketpay.utils.logging import get_logger
from marketpay.utils.retry import http_retry
from marketpay.utils.settings import get_settings

logger = get_logger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"

# szablony dynamiczne w SendGrid
TEMPLATE_IDS = {
    "SELLER_ONBOARDING_COMPLETE": "d-5097bd5934584fec81c54fae039571cc",
}


class EmailClient:
    def __init__(
        self,
        api_key: str | None = None,
        sender: str | None = None,
        base_url: str = SENDGRID_URL,
        timeout: int = 5,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.sendgrid_api_key
        self.sender = sender or settings.email_from
        self.base_url = base_url
        self.timeout = timeout

    @http_retry()
    def _post(self, body: dict) -> int:
        resp = requests.post(
            self.base_url,
            json=body,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.status_code

    def send_template(self, to: str, template_id: str, data: dict) -> bool:
        if not self.api_key:
            logger.error("SENDGRID_API_KEY not configured, email not sent", to=to, template_id=template_id)
            return False
        if not to or "@" not in to:
            logger.error(f"Invalid recipient email address: {to!r}")
            return False

        body = {
            "from": {"email": self.sender},
            "personalizations": [{"to": [{"email": to}], "dynamic_template_data": data}],
            "template_id": template_id,
        }
        logger.info(f"Sending email to {to} using template {template_id}", data_keys=sorted(data))
        try:
            status = self._post(body)
        except RequestException as e:
            logger.error(f"SendGrid email error when sending to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}", status_code=status)
        return True
