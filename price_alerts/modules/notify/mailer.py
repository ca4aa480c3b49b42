import logging

import httpx

from price_alerts.core.config import settings


logger = logging.getLogger(__name__)


class ResendMailer:
    def __init__(self, api_key: str | None = None, sender: str | None = None, timeout: float | None = None):
        self.api_key = api_key or settings.RESEND_API_KEY
        self.sender = sender or settings.ALERTS_FROM_EMAIL
        self.timeout = timeout or settings.HTTP_TIMEOUT

    async def send_email(self, to: str, subject: str, body: str) -> bool:
        if not self.api_key:
            logger.error("Email provider not configured, dropping mail to %s", to)
            return False

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"from": self.sender, "to": [to], "subject": subject, "text": body}

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                response = await client.post(settings.RESEND_API_URL, headers=headers, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error sending email to %s: %s", to, e)
            return False

        logger.info("Email sent to %s", to)
        return True
