"""
SMS notifications

TwilioNotifier posts to the Twilio Messages REST endpoint with httpx.
GuestNotificationService texts a guest when a lookup found new photos.

Delivery is attempted once. Failures raise NotificationError; the guest
notification wrapper logs them so a lookup never fails because of SMS.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from photospotter.core.config import settings
from photospotter.core.exceptions import NotificationError

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"
SMS_TIMEOUT_SECONDS = 10.0


class Notifier(ABC):
    """Outbound text message channel."""

    @abstractmethod
    async def send(self, phone: str, message: str) -> None:
        """Send a message. Raises NotificationError on failure."""


class TwilioNotifier(Notifier):
    """Notifier backed by the Twilio REST API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize TwilioNotifier.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            from_number: Sending phone number
            http_client: Optional httpx AsyncClient (created per call if not provided)
        """
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.http_client = http_client

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"

    async def send(self, phone: str, message: str) -> None:
        client = self.http_client or httpx.AsyncClient()
        should_close_client = self.http_client is None

        try:
            response = await client.post(
                self.messages_url,
                data={"To": phone, "From": self.from_number, "Body": message},
                auth=(self.account_sid, self.auth_token),
                timeout=SMS_TIMEOUT_SECONDS,
            )
        except httpx.RequestError as e:
            logger.error(
                f"SMS request error: {e}",
                extra={"event_type": "sms_request_error", "error_type": type(e).__name__}
            )
            raise NotificationError(details={"error_type": type(e).__name__}) from e
        finally:
            if should_close_client:
                await client.aclose()

        if not 200 <= response.status_code < 300:
            logger.error(
                f"SMS rejected with status {response.status_code}",
                extra={
                    "event_type": "sms_rejected",
                    "status_code": response.status_code,
                    "response_body": response.text[:200],
                }
            )
            raise NotificationError(details={"status_code": response.status_code})

        logger.info("SMS sent", extra={"event_type": "sms_sent"})


class GuestNotificationService:
    """Texts guests about newly matched photos."""

    def __init__(self, notifier: Optional[Notifier], enabled: bool = True):
        self.notifier = notifier
        self.enabled = enabled and notifier is not None

    @staticmethod
    def build_message(guest_name: str, new_count: int) -> str:
        noun = "photo" if new_count == 1 else "photos"
        return f"Hi {guest_name}, we found {new_count} new {noun} of you. Open PhotoSpotter to see them."

    async def notify_new_matches(
        self,
        guest_id: str,
        guest_name: str,
        phone: str,
        new_count: int,
    ) -> bool:
        """
        Text a guest about new matches.

        Returns:
            True if a message was sent
        """
        if not self.enabled or new_count <= 0 or not phone:
            return False

        try:
            await self.notifier.send(phone, self.build_message(guest_name, new_count))
        except NotificationError as e:
            logger.warning(
                f"Guest notification failed: {e.message}",
                extra={"event_type": "guest_notification_failed", "guest_id": guest_id}
            )
            return False

        logger.info(
            "Guest notified of new matches",
            extra={"event_type": "guest_notified", "guest_id": guest_id, "new_count": new_count}
        )
        return True


# Global singleton instance
_guest_notification_service: Optional[GuestNotificationService] = None


def get_guest_notification_service() -> GuestNotificationService:
    """Get the global GuestNotificationService instance (FastAPI dependency)."""
    global _guest_notification_service

    if _guest_notification_service is None:
        notifier = None
        if settings.twilio_ready:
            notifier = TwilioNotifier(
                settings.TWILIO_ACCOUNT_SID,
                settings.TWILIO_AUTH_TOKEN,
                settings.TWILIO_PHONE_NUMBER,
            )
        _guest_notification_service = GuestNotificationService(
            notifier,
            enabled=settings.SMS_NOTIFICATIONS_ENABLED,
        )
        logger.info(
            "Global GuestNotificationService instance created",
            extra={
                "event_type": "notification_singleton_created",
                "enabled": _guest_notification_service.enabled,
            }
        )

    return _guest_notification_service
