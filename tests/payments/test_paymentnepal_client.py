from decimal import Decimal
from urllib.parse import parse_qsl

import httpx
import pytest

from application.dtos.payments import FirstPay, GatewayFailure, GatewaySuccess, NextPay
from infrastructure.external.payments.base import parse_gateway_response
from infrastructure.external.payments.exceptions import GatewayError, TransportError
from infrastructure.external.payments.paymentnepal_client import PaymentnepalClient
from infrastructure.external.payments.signing import legacy_check, sign
from shared.codes.payment_codes import PaymentCode


class Recorder:
    """MockTransport handler that records requests and replies with canned JSON."""

    def __init__(self, body=None, status_code: int = 200):
        self.body = {"status": "success"} if body is None else body
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def form(self) -> dict[str, str]:
        return dict(parse_qsl(self.last.content.decode(), keep_blank_values=True))


def make_client(credentials, handler, **kwargs) -> PaymentnepalClient:
    return PaymentnepalClient(credentials, transport=httpx.MockTransport(handler), **kwargs)


def assert_signed(method: str, url: str, fields: dict[str, str], secret: str = "s3cr3t"):
    unsigned = dict(fields)
    check = unsigned.pop("check")
    assert check == sign(method, url, unsigned, secret)


@pytest.mark.asyncio
async def test_list_payment_types_uses_legacy_check(credentials):
    rec = Recorder({"status": "success", "types": ["spg", "mc"]})
    async with make_client(credentials, rec) as client:
        types = await client.list_payment_types()
    assert types == ["spg", "mc"]
    assert rec.last.method == "GET"
    assert rec.last.url.path == "/alba/pay_types/"
    assert dict(rec.last.url.params) == {
        "service_id": "1",
        "check": legacy_check(1, "s3cr3t"),
    }


@pytest.mark.asyncio
async def test_init_payment_signs_fields(credentials):
    rec = Recorder({"status": "success", "tid": 100, "url": "https://pay.example/redirect"})
    async with make_client(credentials, rec) as client:
        result = await client.init_payment("spg", Decimal("10.50"), "Order 1", "a@b.c", "+9771234567", order_id="ord-1")
    assert isinstance(result, GatewaySuccess)
    assert result.payload["tid"] == 100
    form = rec.form()
    assert rec.last.method == "POST"
    assert str(rec.last.url) == "https://pay.paymentnepal.com/alba/input/"
    assert form["cost"] == "10.50"
    assert form["phone_number"] == "+9771234567"
    assert form["background"] == "1"
    assert form["commission"] == "partner"
    assert form["type"] == "spg"
    assert form["service_id"] == "1"
    assert form["version"] == "2.0"
    assert form["order_id"] == "ord-1"
    assert "card_token" not in form
    assert list(form)[-1] == "check"
    assert_signed("POST", "https://pay.paymentnepal.com/alba/input/", form)


@pytest.mark.asyncio
async def test_init_payment_with_next_pay(credentials):
    rec = Recorder()
    async with make_client(credentials, rec) as client:
        await client.init_payment("spg", 5, "Renewal", "a@b.c", "1", recurrent_params=NextPay(order_id=42))
    form = rec.form()
    assert form["recurrent_type"] == "next"
    assert form["recurrent_order_id"] == "42"
    assert "recurrent_comment" not in form
    assert "recurrent_url" not in form
    assert_signed("POST", "https://pay.paymentnepal.com/alba/input/", form)


def test_recurrent_params_fields():
    assert NextPay(order_id=42).fields() == {"recurrent_type": "next", "recurrent_order_id": 42}
    assert FirstPay(callback_url="https://shop/recurrent", comment="Monthly").fields() == {
        "recurrent_type": "first",
        "recurrent_comment": "Monthly",
        "recurrent_url": "https://shop/recurrent",
        "recurrent_period": "byrequest",
    }


def test_build_init_payment_fields_with_first_pay_and_card_token(credentials):
    client = PaymentnepalClient(credentials)
    fields = client.build_init_payment_fields(
        "spg", "1", "n", "e", "p",
        card_token="tok_1",
        recurrent_params=FirstPay(callback_url="https://shop/r", comment="c"),
    )
    assert fields["card_token"] == "tok_1"
    assert fields["recurrent_type"] == "first"
    assert "order_id" not in fields
    assert "check" not in fields


@pytest.mark.asyncio
async def test_transaction_details(credentials):
    rec = Recorder({"status": "success", "payment": {"status": "paid"}})
    async with make_client(credentials, rec) as client:
        result = await client.transaction_details(777)
    assert result.payload["payment"] == {"status": "paid"}
    form = rec.form()
    assert set(form) == {"tid", "version", "check"}
    assert_signed("POST", "https://pay.paymentnepal.com/alba/details/", form)


@pytest.mark.asyncio
async def test_refund_optional_fields(credentials):
    rec = Recorder()
    async with make_client(credentials, rec) as client:
        await client.refund(777)
        assert set(rec.form()) == {"version", "tid", "check"}

        await client.refund(777, amount=Decimal("0"), test=True, reason="")
    form = rec.form()
    assert form["amount"] == "0"
    assert form["test"] == "1"
    assert form["reason"] == ""
    assert_signed("POST", "https://pay.paymentnepal.com/alba/refund/", form)


@pytest.mark.asyncio
async def test_gate_details_sends_signed_query(credentials):
    rec = Recorder({"status": "success", "gate": "spg"})
    async with make_client(credentials, rec, base_url="https://pay.paymentnepal.com:8443/") as client:
        await client.gate_details("bank card")
    assert rec.last.method == "GET"
    params = dict(rec.last.url.params)
    assert params["gate"] == "bank card"
    assert params["check"] == "NMt1o8DED1g2tkDOi6hEMLixiAWK0Uflz7pSXoEGHU8="


@pytest.mark.asyncio
async def test_gate_details_skip_port(credentials):
    rec = Recorder()
    async with make_client(credentials, rec, base_url="https://pay.paymentnepal.com:8443/", skip_port=True) as client:
        await client.gate_details("bank card")
    assert dict(rec.last.url.params)["check"] == "ZFdrZmuAAwim+bDgqtK5BPFyYOasjRCNGXjjmjyEQhQ="


@pytest.mark.asyncio
async def test_create_card_token_is_unsigned(credentials):
    rec = Recorder({"status": "success", "token": "tok_abc"})
    async with make_client(credentials, rec) as client:
        token = await client.create_card_token("4111111111111111", 3, 2030, "123", test=True, card_holder="JOHN DOE")
    assert token == "tok_abc"
    assert str(rec.last.url) == "https://test.paymentnepal.com/cardtoken/create"
    assert rec.form() == {
        "service_id": "1",
        "card": "4111111111111111",
        "exp_month": "03",
        "exp_year": "2030",
        "cvc": "123",
        "card_holder": "JOHN DOE",
    }


@pytest.mark.asyncio
async def test_create_card_token_production_url(credentials):
    rec = Recorder({"status": "success", "token": "tok_live"})
    async with make_client(credentials, rec) as client:
        await client.create_card_token("4111111111111111", "12", "2030", "123", test=False)
    assert str(rec.last.url) == "https://secure.paymentnepal.com/cardtoken/create"
    assert "card_holder" not in rec.form()


@pytest.mark.asyncio
async def test_gateway_error_preserves_message_and_code(credentials):
    rec = Recorder({"status": "error", "msg": "Wrong signature", "code": "sign"})
    async with make_client(credentials, rec) as client:
        with pytest.raises(GatewayError) as exc_info:
            await client.transaction_details(1)
    assert exc_info.value.message == "Wrong signature"
    assert exc_info.value.gateway_code == "sign"
    assert exc_info.value.code == PaymentCode.PROVIDER_ERROR


@pytest.mark.asyncio
async def test_gateway_error_defaults(credentials):
    rec = Recorder({"status": "error", "message": "Service disabled"})
    async with make_client(credentials, rec) as client:
        with pytest.raises(GatewayError) as exc_info:
            await client.list_payment_types()
    assert exc_info.value.message == "Service disabled"
    assert exc_info.value.gateway_code == "unknown"


@pytest.mark.asyncio
async def test_invalid_json_is_gateway_error(credentials):
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with make_client(credentials, handler) as client:
        with pytest.raises(GatewayError) as exc_info:
            await client.gate_details("spg")
    assert exc_info.value.gateway_code == "invalid_response"


@pytest.mark.asyncio
async def test_http_error_status_is_transport_error(credentials):
    rec = Recorder({"detail": "oops"}, status_code=502)
    async with make_client(credentials, rec) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.transaction_details(1)
    assert exc_info.value.code == PaymentCode.TRANSPORT_ERROR
    assert exc_info.value.details["status_code"] == 502


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error(credentials):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(credentials, handler) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.refund(1)
    assert exc_info.value.message == "Connection error to remote server"


@pytest.mark.asyncio
async def test_timeout_is_transport_error(credentials):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with make_client(credentials, handler, timeout=0.5) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.init_payment("spg", 1, "n", "e", "p")
    assert exc_info.value.code == PaymentCode.TIMEOUT


def test_parse_gateway_response():
    assert parse_gateway_response({"status": "success", "a": 1}) == GatewaySuccess(
        status="success", payload={"status": "success", "a": 1}
    )
    assert parse_gateway_response({"status": "error", "msg": "m", "code": 7}) == GatewayFailure(message="m", code="7")
    assert parse_gateway_response(["x"]).code == "invalid_response"


def test_default_timeout_is_45_seconds(credentials):
    client = PaymentnepalClient(credentials)
    assert client.timeouts.read == 45.0


@pytest.mark.asyncio
async def test_gateway_factory_uses_configured_service():
    from application.ports.payment_gateway import PaymentGateway
    from infrastructure.external.payments import get_payment_gateway

    gw = get_payment_gateway()
    assert isinstance(gw, PaymentGateway)
    assert isinstance(gw, PaymentnepalClient)
    assert gw.service_id == 1
    with pytest.raises(ValueError):
        get_payment_gateway(404)
    await gw.aclose()
