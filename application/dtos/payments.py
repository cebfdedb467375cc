"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from typing import Any, Literal, Mapping, Union
from pydantic import BaseModel, Field, ConfigDict


RECURRENT_FIRST = "first"
RECURRENT_NEXT = "next"
RECURRENT_BY_REQUEST = "byrequest"


class ServiceCredentials(BaseModel):
    """One configured gateway account."""

    service_id: int
    secret: str = Field(repr=False)

    model_config = ConfigDict(frozen=True)


class FirstPay(BaseModel):
    """Start a recurrent billing relationship; further charges are made on request."""

    kind: Literal["first"] = "first"
    callback_url: str
    comment: str

    model_config = ConfigDict(frozen=True)

    def fields(self) -> dict[str, Any]:
        return {
            "recurrent_type": RECURRENT_FIRST,
            "recurrent_comment": self.comment,
            "recurrent_url": self.callback_url,
            "recurrent_period": RECURRENT_BY_REQUEST,
        }


class NextPay(BaseModel):
    """Charge again against the order that opened the recurrent relationship."""

    kind: Literal["next"] = "next"
    order_id: Union[int, str]

    model_config = ConfigDict(frozen=True)

    def fields(self) -> dict[str, Any]:
        return {
            "recurrent_type": RECURRENT_NEXT,
            "recurrent_order_id": self.order_id,
        }


RecurrentParams = Union[FirstPay, NextPay]


class GatewaySuccess(BaseModel):
    status: str = "success"
    payload: dict[str, Any]


class GatewayFailure(BaseModel):
    message: str
    code: str = "unknown"


GatewayResponse = Union[GatewaySuccess, GatewayFailure]


# Raw fields of an inbound callback notification
CallbackPayload = Mapping[str, str]


class CallbackEvent(BaseModel):
    service_id: int
    command: str
    data: dict[str, str]
