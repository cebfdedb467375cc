"""
Base payment client implementing shared concerns: http, logging, response mapping.

Concrete providers should subclass and implement provider-specific logic.
Requests are sent once; callers that need retries wrap the client.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional
from contextlib import asynccontextmanager

import httpx

from core.logging_config import get_logger
from application.dtos.payments import GatewayFailure, GatewayResponse, GatewaySuccess
from infrastructure.external.payments.exceptions import GatewayError, TransportError


logger = get_logger(__name__)


def parse_gateway_response(answer: Any) -> GatewayResponse:
    """Map a decoded JSON body onto the success/failure result types."""
    if not isinstance(answer, dict):
        return GatewayFailure(message="Unexpected response payload", code="invalid_response")
    if answer.get("status") == "error":
        message = answer.get("msg", answer.get("message"))
        return GatewayFailure(
            message=str(message) if message is not None else "",
            code=str(answer.get("code", "unknown")),
        )
    return GatewaySuccess(status=str(answer.get("status", "success")), payload=answer)


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        timeout: float = 45.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(self._timeout)

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeouts, transport=self._transport)
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
    ) -> GatewayResponse:
        """Send one request and decode its JSON body.

        Raises TransportError when no usable HTTP response was received.
        """
        try:
            async with self.client() as http:
                response = await http.request(method, url, params=params, data=data)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            self._log_error("paymentnepal_request_timeout", url=url, error=str(exc))
            raise TransportError(
                f"Request timeout after {self._timeout}s", provider=self.provider, timeout=True
            ) from exc
        except httpx.HTTPStatusError as exc:
            self._log_error("paymentnepal_request_failed", url=url, status_code=exc.response.status_code)
            raise TransportError(
                "Connection error to remote server",
                provider=self.provider,
                details={"status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            self._log_error("paymentnepal_request_failed", url=url, error=str(exc))
            raise TransportError("Connection error to remote server", provider=self.provider) from exc

        self._log("paymentnepal_request_sent", method=method, url=url, params=dict(params or data or {}))

        try:
            answer = response.json()
        except ValueError:
            self._log_error("paymentnepal_response_invalid", url=url, status_code=response.status_code)
            return GatewayFailure(message="Malformed JSON response", code="invalid_response")
        return parse_gateway_response(answer)

    def _unwrap(self, result: GatewayResponse) -> GatewaySuccess:
        if isinstance(result, GatewayFailure):
            self._log_error("paymentnepal_gateway_error", message=result.message, gateway_code=result.code)
            raise GatewayError(result.message, provider=self.provider, gateway_code=result.code)
        logger.debug("paymentnepal_response", provider=self.provider, payload=result.payload)
        return result

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )

    def _log_error(self, event: str, **kwargs) -> None:
        logger.error(event, provider=self.provider, **kwargs)
