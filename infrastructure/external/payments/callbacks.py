"""
Paymentnepal callback verification and dispatch.

A callback moves through service lookup, signature check and dispatch by
``command``; the first failure raises and no handler runs.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from application.dtos.payments import CallbackEvent, CallbackPayload, ServiceCredentials
from application.ports.callback_handler import CallbackHandler
from core.logging_config import get_logger
from domain.common.exceptions import (
    MissingParameter,
    SignatureMismatch,
    UnknownCommand,
    UnknownService,
)
from infrastructure.external.payments.signing import verify_callback
from shared.codes.payment_codes import CALLBACK_COMMANDS


logger = get_logger(__name__)


class CallbackDispatcher:
    """Route verified callbacks to a `CallbackHandler`.

    The service registry is fixed at construction and only read afterwards,
    so one dispatcher can serve concurrent requests.
    """

    def __init__(self, services: Iterable[ServiceCredentials], handler: CallbackHandler) -> None:
        self._services: Mapping[str, ServiceCredentials] = MappingProxyType(
            {str(s.service_id): s for s in services}
        )
        self.handler = handler

    @property
    def services(self) -> Mapping[str, ServiceCredentials]:
        return self._services

    def resolve_service(self, payload: CallbackPayload) -> ServiceCredentials:
        service_id = payload.get("service_id")
        if service_id is None:
            raise MissingParameter("service_id")
        service = self._services.get(str(service_id))
        if service is None:
            logger.warning("callback_unknown_service", service_id=str(service_id))
            raise UnknownService(str(service_id))
        return service

    def dispatch(self, payload: CallbackPayload) -> CallbackEvent:
        service = self.resolve_service(payload)
        if not verify_callback(payload, service.secret):
            logger.warning("callback_sign_error", service_id=service.service_id)
            raise SignatureMismatch(str(service.service_id))

        command = payload.get("command")
        method_name = CALLBACK_COMMANDS.get(command) if isinstance(command, str) else None
        if method_name is None:
            logger.warning("callback_unknown_command", service_id=service.service_id, command=command)
            raise UnknownCommand(command)

        getattr(self.handler, method_name)(payload)
        logger.info(
            "callback_dispatched",
            service_id=service.service_id,
            command=command,
            tid=payload.get("tid"),
            order_id=payload.get("order_id"),
        )
        return CallbackEvent(
            service_id=service.service_id,
            command=command,
            data={k: str(v) for k, v in payload.items()},
        )
