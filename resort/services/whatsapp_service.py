import logging
import re

import requests

from resort.core.config import settings

logger = logging.getLogger(__name__)


class WhatsAppService:
    """GreenAPI client. Every send is best-effort: failures are logged and reported as False."""

    def __init__(self, enabled: bool, instance_id: str, api_token: str,
                 base_url: str = "https://api.green-api.com", timeout: float = 15):
        self.enabled = enabled
        self.instance_id = instance_id
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "WhatsAppService":
        return cls(
            enabled=settings.GREENAPI_ENABLED,
            instance_id=settings.GREENAPI_INSTANCE_ID,
            api_token=settings.GREENAPI_API_TOKEN,
            base_url=settings.GREENAPI_BASE_URL,
        )

    def is_enabled(self) -> bool:
        return bool(self.enabled and self.instance_id and self.api_token)

    def send_message(self, phone: str, message: str) -> bool:
        if not self.is_enabled():
            logger.info("WhatsApp disabled, skipping message to %s", phone)
            return False

        chat_id = re.sub(r"[^0-9]", "", phone) + "@c.us"
        url = f"{self.base_url}/waInstance{self.instance_id}/sendMessage/{self.api_token}"
        try:
            r = requests.post(url, json={"chatId": chat_id, "message": message}, timeout=self.timeout)
        except requests.RequestException:
            logger.exception("WhatsApp send to %s failed", phone)
            return False
        if r.status_code >= 400:
            logger.error("WhatsApp send to %s failed: %s %s", phone, r.status_code, r.text)
            return False
        try:
            message_id = (r.json() or {}).get("idMessage")
        except ValueError:
            message_id = None
        logger.info("WhatsApp message sent: %s", message_id)
        return True


def get_notifier() -> WhatsAppService:
    """FastAPI dependency; tests override it with a recorder."""
    return WhatsAppService.from_settings()
