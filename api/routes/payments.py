"""
Payments API routes.

Exposes the Paymentnepal callback endpoint. Keep this thin: verification and
dispatch live in the callback dispatcher.
"""
from __future__ import annotations

from urllib.parse import parse_qsl

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool

from core.response import success_response
from domain.common.exceptions import BusinessException
from core.logging_config import get_logger
from infrastructure.external.payments.callbacks import CallbackDispatcher
from shared.codes import BusinessCode


logger = get_logger(__name__)


def build_callback_router(dispatcher: CallbackDispatcher) -> APIRouter:
    router = APIRouter(prefix="/payments", tags=["Payments"])

    @router.post("/callbacks/paymentnepal")
    async def paymentnepal_callback(request: Request):
        # The gateway posts form-encoded fields
        raw_body = await request.body()
        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("callback_undecodable_body", size=len(raw_body))
            raise BusinessException(
                code=BusinessCode.PARAM_ERROR,
                message="Callback body is not valid UTF-8",
                error_type="InvalidPayload",
            ) from e
        payload = dict(parse_qsl(body, keep_blank_values=True))
        logger.info("callback_received", service_id=payload.get("service_id"), command=payload.get("command"))
        # Handlers are synchronous application code
        event = await run_in_threadpool(dispatcher.dispatch, payload)
        return success_response(
            data={"service_id": event.service_id, "command": event.command},
            message="Callback processed",
        )

    return router
