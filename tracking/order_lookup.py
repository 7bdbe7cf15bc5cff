"""
Buyer resolution through the order service
"""

from typing import Optional, Protocol
import httpx
from pydantic import ValidationError
from schemas.tracking import OrderInfo
from core.config import settings
from core.exceptions import OrderLookupError
from tracking.service_client import ServiceClient
import logging

logger = logging.getLogger(__name__)


class OrderLookup(Protocol):
    """Resolves the order (and so the buyer) behind a tracked order"""

    async def get_order_by_id(self, order_id: int) -> OrderInfo:
        ...


class HTTPOrderLookup(ServiceClient):
    """Order lookup backed by ``GET /orders/{order_id}`` on the order service"""

    service_name = "order-service"

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        super().__init__(base_url or settings.ORDER_SERVICE_URL, transport=transport, **kwargs)

    async def get_order_by_id(self, order_id: int) -> OrderInfo:
        """
        Fetch an order.

        Raises:
            OrderLookupError: unknown order, rejected request or malformed body
            ServiceUnavailableError: order service down after retries
        """
        response = await self._request("GET", f"/orders/{order_id}")

        if response.status_code == 404:
            raise OrderLookupError(
                f"No order with id: {order_id}",
                context={"order_id": order_id, "status_code": 404}
            )

        if response.status_code >= 400:
            raise OrderLookupError(
                "Order service rejected the lookup",
                context={
                    "order_id": order_id,
                    "status_code": response.status_code,
                    "response_body": response.text[:500]
                }
            )

        try:
            return OrderInfo(**response.json())
        except (ValueError, TypeError, ValidationError) as e:
            raise OrderLookupError(
                "Failed to parse order service response",
                context={"order_id": order_id, "response_body": response.text[:500]},
                original_exception=e
            )


