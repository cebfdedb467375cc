"""
Paymentnepal REST adapter.

Every API call except pay types and card tokens is signed with
HMAC-SHA256 (see `signing.sign`); the signature travels as the last
`check` field. Pay types use the legacy MD5 checksum and card token
creation is unsigned.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Union

import httpx

from application.dtos.payments import GatewaySuccess, RecurrentParams, ServiceCredentials
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import GatewayError
from infrastructure.external.payments.signing import legacy_check, normalize_params, sign
from core.settings import payment_settings


API_VERSION = "2.0"


class PaymentnepalClient(BasePaymentClient):
    provider = "paymentnepal"

    def __init__(
        self,
        credentials: ServiceCredentials,
        *,
        base_url: Optional[str] = None,
        card_token_url: Optional[str] = None,
        card_token_test_url: Optional[str] = None,
        timeout: Optional[float] = None,
        skip_port: Optional[bool] = None,
        test_mode: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        cfg = payment_settings.paymentnepal
        super().__init__(timeout=cfg.timeout if timeout is None else timeout, transport=transport)
        self.credentials = credentials
        self.base_url = base_url or cfg.base_url
        self.card_token_url = card_token_url or cfg.card_token_url
        self.card_token_test_url = card_token_test_url or cfg.card_token_test_url
        self.skip_port = cfg.skip_port if skip_port is None else skip_port
        self.test_mode = cfg.test_mode if test_mode is None else test_mode

    @property
    def service_id(self) -> int:
        return self.credentials.service_id

    def _url(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path

    def _signed(self, method: str, url: str, fields: dict[str, Any]) -> dict[str, str]:
        params = normalize_params(fields)
        params["check"] = sign(method, url, params, self.credentials.secret, skip_port=self.skip_port)
        return params

    async def list_payment_types(self) -> list[Any]:
        """Payment methods available for the service."""
        params = {
            "service_id": str(self.service_id),
            "check": legacy_check(self.service_id, self.credentials.secret),
        }
        result = self._unwrap(await self._send("GET", self._url("alba/pay_types/"), params=params))
        return result.payload.get("types", [])

    def build_init_payment_fields(
        self,
        pay_type: str,
        cost: Union[Decimal, int, str],
        name: str,
        email: str,
        phone: str,
        order_id: Optional[Union[int, str]] = None,
        commission: str = "partner",
        card_token: Optional[str] = None,
        recurrent_params: Optional[RecurrentParams] = None,
    ) -> dict[str, Any]:
        """Unsigned fields of an init payment request."""
        fields: dict[str, Any] = {
            "cost": cost,
            "name": name,
            "email": email,
            "phone_number": phone,
            "background": "1",
            "commission": commission,
            "type": pay_type,
            "service_id": self.service_id,
            "version": API_VERSION,
        }
        if order_id is not None:
            fields["order_id"] = order_id
        if card_token is not None:
            fields["card_token"] = card_token
        if recurrent_params is not None:
            fields.update(recurrent_params.fields())
        return fields

    async def init_payment(
        self,
        pay_type: str,
        cost: Union[Decimal, int, str],
        name: str,
        email: str,
        phone: str,
        order_id: Optional[Union[int, str]] = None,
        commission: str = "partner",
        card_token: Optional[str] = None,
        recurrent_params: Optional[RecurrentParams] = None,
    ) -> GatewaySuccess:
        url = self._url("alba/input/")
        fields = self.build_init_payment_fields(
            pay_type, cost, name, email, phone,
            order_id=order_id,
            commission=commission,
            card_token=card_token,
            recurrent_params=recurrent_params,
        )
        data = self._signed("POST", url, fields)
        return self._unwrap(await self._send("POST", url, data=data))

    async def transaction_details(self, tid: Union[int, str]) -> GatewaySuccess:
        url = self._url("alba/details/")
        data = self._signed("POST", url, {"tid": tid, "version": API_VERSION})
        return self._unwrap(await self._send("POST", url, data=data))

    async def refund(
        self,
        tid: Union[int, str],
        amount: Optional[Union[Decimal, int, str]] = None,
        test: bool = False,
        reason: Optional[str] = None,
    ) -> GatewaySuccess:
        """Full refund when `amount` is omitted, partial otherwise."""
        url = self._url("alba/refund/")
        fields: dict[str, Any] = {"version": API_VERSION, "tid": tid}
        if amount is not None:
            fields["amount"] = amount
        if test:
            fields["test"] = "1"
        if reason is not None:
            fields["reason"] = reason
        data = self._signed("POST", url, fields)
        return self._unwrap(await self._send("POST", url, data=data))

    async def gate_details(self, gate: str) -> GatewaySuccess:
        url = self._url("alba/gate_details/")
        params = self._signed("GET", url, {"version": API_VERSION, "gate": gate, "service_id": self.service_id})
        return self._unwrap(await self._send("GET", url, params=params))

    async def create_card_token(
        self,
        card: str,
        exp_month: Union[int, str],
        exp_year: Union[int, str],
        cvc: str,
        test: Optional[bool] = None,
        card_holder: Optional[str] = None,
    ) -> str:
        """Tokenize a card; `test` defaults to the configured test mode."""
        # Token creation is not signed
        fields: dict[str, Any] = {
            "service_id": self.service_id,
            "card": card,
            "exp_month": str(exp_month).rjust(2, "0"),
            "exp_year": exp_year,
            "cvc": cvc,
        }
        if card_holder:
            fields["card_holder"] = card_holder
        use_test = self.test_mode if test is None else test
        base = self.card_token_test_url if use_test else self.card_token_url
        result = self._unwrap(await self._send("POST", base.rstrip("/") + "/create", data=normalize_params(fields)))
        token = result.payload.get("token")
        if not token:
            raise GatewayError("Token missing in response", provider=self.provider, gateway_code="invalid_response")
        return str(token)
