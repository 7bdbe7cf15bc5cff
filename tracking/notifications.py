"""
Shipping-progress notifications through the notification service
"""

from datetime import datetime
from typing import Optional, Protocol
import httpx
from schemas.tracking import ShippingProgressNotification
from core.config import settings
from core.exceptions import NotificationError
from tracking.service_client import ServiceClient
import logging

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    """Delivers shipping-progress messages to buyers"""

    async def send_shipping_progress_notification(
        self,
        buyer_id: int,
        tracked_order_id: int,
        status_text: str,
        delivery_timestamp: datetime
    ) -> None:
        ...


class HTTPNotificationSender(ServiceClient):
    """Posts notifications to ``POST /notifications`` on the notification service"""

    service_name = "notification-service"

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        super().__init__(base_url or settings.NOTIFICATION_SERVICE_URL, transport=transport, **kwargs)

    async def send_shipping_progress_notification(
        self,
        buyer_id: int,
        tracked_order_id: int,
        status_text: str,
        delivery_timestamp: datetime
    ) -> None:
        notification = ShippingProgressNotification(
            recipient_id=buyer_id,
            tracked_order_id=tracked_order_id,
            shipping_state=status_text,
            delivery_date=delivery_timestamp
        )
        payload = notification.model_dump(mode="json")
        payload.update(
            title=notification.title,
            subtitle=notification.subtitle,
            content=notification.content
        )

        response = await self._request("POST", "/notifications", json=payload)

        if response.status_code >= 400:
            raise NotificationError(
                "Notification service rejected the notification",
                context={
                    "buyer_id": buyer_id,
                    "tracked_order_id": tracked_order_id,
                    "status_code": response.status_code,
                    "response_body": response.text[:500]
                }
            )

        logger.info(
            f"Sent {status_text} notification for tracked order {tracked_order_id} "
            f"to buyer {buyer_id}"
        )
