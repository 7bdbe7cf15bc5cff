"""
Shared HTTP plumbing for the order and notification services.

Requests are retried with exponential backoff on timeouts, connection errors
and 5xx responses. Any other non-2xx response is returned to the caller, which
decides how to map it onto its own exception.
"""

import httpx
import asyncio
from typing import Dict, Any, Optional
from core.config import settings
from core.exceptions import ServiceUnavailableError
import logging

logger = logging.getLogger(__name__)


class ServiceClient:
    """
    Minimal async client for an internal JSON service.

    Attributes:
        base_url: Root URL of the service
        api_key: Bearer token sent with every request (optional)
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts per request
        retry_delay: Initial retry delay in seconds, doubled on every attempt
        transport: Optional httpx transport (used to stub the network in tests)
    """

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.SERVICE_API_KEY
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.max_retries = max(1, max_retries if max_retries is not None else settings.HTTP_MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else settings.HTTP_RETRY_DELAY
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport
        )

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """
        Send a request with retry logic and exponential backoff.

        Returns:
            The first response that is not a 5xx

        Raises:
            ServiceUnavailableError: after max_retries timeouts, network errors
                or 5xx responses
        """
        last_exception: Optional[Exception] = None
        url = f"{self.base_url}{path}"

        async with self._client() as client:
            for attempt in range(self.max_retries):
                try:
                    logger.debug(
                        f"{self.service_name}: {method} {path} "
                        f"attempt {attempt + 1}/{self.max_retries}"
                    )
                    response = await client.request(method, path, json=json)

                    if response.status_code < 500:
                        return response

                    last_exception = None
                    logger.warning(
                        f"{self.service_name} returned {response.status_code} for {method} {path}"
                    )
                    if attempt == self.max_retries - 1:
                        raise ServiceUnavailableError(
                            f"{self.service_name} error after {self.max_retries} attempts",
                            context={
                                "url": url,
                                "status_code": response.status_code,
                                "response_body": response.text[:500]
                            },
                            retry_count=attempt + 1
                        )

                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    last_exception = e
                    logger.warning(f"{self.service_name} unreachable ({type(e).__name__}): {str(e)}")
                    if attempt == self.max_retries - 1:
                        raise ServiceUnavailableError(
                            f"{self.service_name} unreachable after {self.max_retries} attempts",
                            context={"url": url, "timeout": self.timeout},
                            original_exception=e,
                            retry_count=attempt + 1
                        )

                delay = self.retry_delay * (2 ** attempt)
                await asyncio.sleep(delay)

        raise ServiceUnavailableError(
            "Max retries exceeded",
            context={"url": url},
            original_exception=last_exception,
            retry_count=self.max_retries
        )
