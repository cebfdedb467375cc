"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, Union, runtime_checkable

from application.dtos.payments import GatewaySuccess, RecurrentParams


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the Paymentnepal REST API.

    Implementations are async; every call is a single request/response.
    """

    provider: str

    async def list_payment_types(self) -> list[Any]: ...

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
    ) -> GatewaySuccess: ...

    async def transaction_details(self, tid: Union[int, str]) -> GatewaySuccess: ...

    async def refund(
        self,
        tid: Union[int, str],
        amount: Optional[Union[Decimal, int, str]] = None,
        test: bool = False,
        reason: Optional[str] = None,
    ) -> GatewaySuccess: ...

    async def gate_details(self, gate: str) -> GatewaySuccess: ...

    async def create_card_token(
        self,
        card: str,
        exp_month: Union[int, str],
        exp_year: Union[int, str],
        cvc: str,
        test: Optional[bool] = None,
        card_holder: Optional[str] = None,
    ) -> str: ...

    async def aclose(self) -> None: ...
