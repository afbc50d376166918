import logging
from typing import Optional

import httpx

from dailyquiz.core.config import Settings
from dailyquiz.core.errors import MessagingError

logger = logging.getLogger(__name__)


class ChatMessenger:
    """Client for the chat messaging provider that delivers login codes."""

    def __init__(self, base_url: str, send_path: str = "/api/send", instance_id: Optional[str] = None,
                 access_token: Optional[str] = None, timeout: float = 10.0,
                 client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.send_path = send_path
        self.instance_id = instance_id
        self.access_token = access_token
        self.client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatMessenger":
        token = settings.MESSAGING_ACCESS_TOKEN
        return cls(
            base_url=settings.MESSAGING_BASE_URL,
            send_path=settings.MESSAGING_SEND_PATH,
            instance_id=settings.MESSAGING_INSTANCE_ID,
            access_token=token.get_secret_value() if token else None,
            timeout=settings.MESSAGING_TIMEOUT,
        )

    def send(self, number: str, message: str) -> None:
        payload = {
            "number": number,
            "type": "text",
            "message": message,
            "instance_id": self.instance_id,
            "access_token": self.access_token,
        }
        try:
            r = self.client.post(f"{self.base_url}{self.send_path}", json=payload)
        except httpx.HTTPError as e:
            logger.error("Message dispatch to %s failed: %s", number, e)
            raise MessagingError("Failed to send message") from e
        if r.is_error:
            logger.error("Message dispatch to %s rejected (%s): %s", number, r.status_code, r.text)
            raise MessagingError("Failed to send message")

    def ping(self) -> int:
        try:
            return self.client.get(self.base_url).status_code
        except httpx.HTTPError as e:
            raise MessagingError(str(e)) from e

    def close(self) -> None:
        self.client.close()
