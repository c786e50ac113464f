"""MultiSafepay API client."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from sardis_multisafepay.config import MultiSafepayConfig, load_config
from sardis_multisafepay.exceptions import ConfigurationError, RemoteFailure
from sardis_multisafepay.logging import mask_value
from sardis_multisafepay.models import (
    Environment,
    GatewayResult,
    PaymentOrder,
    RemoteOrderResponse,
)

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUSES = (401, 403)


def describe_failure(exc: BaseException) -> str:
    """Render an exception and its cause as one line for the audit log."""
    text = f"{type(exc).__name__}: {exc}"
    cause = exc.__cause__
    if cause is not None:
        text += f" (caused by {type(cause).__name__}: {cause})"
    return text


class MultiSafepayClient:
    """
    MultiSafepay JSON API client bound to one API key and base url.

    Every call returns a GatewayResult; transport errors, HTTP errors and
    malformed bodies become failed results instead of exceptions. Nothing is
    retried.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_base: str,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.api_base = api_base
        self._client = httpx.AsyncClient(
            base_url=api_base,
            headers={
                "api_key": api_key or "",
                "accept": "application/json",
            },
            timeout=timeout,
        )

    def __repr__(self) -> str:
        key = mask_value(self.api_key) if self.api_key else None
        return f"MultiSafepayClient(api_base={self.api_base!r}, api_key={key!r})"

    async def __aenter__(self) -> "MultiSafepayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request and return the ``data`` object of a successful body."""
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise RemoteFailure(f"MultiSafepay request {method} {path} failed") from e

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteFailure(
                f"MultiSafepay returned a non-JSON body (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise RemoteFailure(
                "MultiSafepay returned an unexpected body",
                status_code=response.status_code,
            )

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise ConfigurationError(
                body.get("error_info") or "MultiSafepay rejected the API key",
                status_code=response.status_code,
                psp_error_code=body.get("error_code"),
            )

        if response.is_error or not body.get("success"):
            raise RemoteFailure(
                body.get("error_info") or f"MultiSafepay returned HTTP {response.status_code}",
                status_code=response.status_code,
                psp_error_code=body.get("error_code"),
            )

        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteFailure(
                "MultiSafepay response has no order data",
                status_code=response.status_code,
            )
        return data

    async def create_order(self, order: PaymentOrder) -> GatewayResult:
        """Create a redirect order and return its payment url."""
        try:
            data = await self._request("POST", "orders", json=order.to_payload())
            response = RemoteOrderResponse.from_payload(data)
            if not response.payment_url:
                raise RemoteFailure("MultiSafepay response has no payment url")
        except RemoteFailure as e:
            logger.warning("Creating MultiSafepay order %s failed: %s", order.order_id, e)
            return GatewayResult.failure(describe_failure(e), e.message)

        logger.info("Created MultiSafepay order %s", order.order_id)
        return GatewayResult.success(response)

    async def get_order(self, order_id: str) -> GatewayResult:
        """Fetch the current state of an order."""
        try:
            data = await self._request("GET", f"orders/{quote(order_id, safe='')}")
            response = RemoteOrderResponse.from_payload(data)
            if not response.status:
                raise RemoteFailure("MultiSafepay response has no order status")
        except RemoteFailure as e:
            logger.warning("Retrieving MultiSafepay order %s failed: %s", order_id, e)
            return GatewayResult.failure(describe_failure(e), e.message)

        return GatewayResult.success(response)

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()


def new_client(
    api_key: Optional[str],
    environment: Environment,
    config: Optional[MultiSafepayConfig] = None,
) -> MultiSafepayClient:
    """Create a client for the endpoint that belongs to ``environment``.

    Live and acceptance talk to production; everything else to the test API.
    """
    config = config or load_config()
    if not api_key:
        logger.warning("Creating MultiSafepay client without an API key")
    return MultiSafepayClient(
        api_key=api_key,
        api_base=config.api_base_for(environment),
        timeout=config.request_timeout_seconds,
    )
