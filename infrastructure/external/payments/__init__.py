"""
Factories for the Paymentnepal gateway client and callback dispatcher.
"""
from __future__ import annotations

from typing import Optional

from core.settings import payment_settings
from application.dtos.payments import ServiceCredentials
from application.ports.callback_handler import CallbackHandler
from application.ports.payment_gateway import PaymentGateway
from .callbacks import CallbackDispatcher


def get_service_credentials(service_id: Optional[int] = None) -> ServiceCredentials:
    services = payment_settings.paymentnepal.services
    if not services:
        raise RuntimeError("PAYMENTNEPAL__SERVICES not configured")
    if service_id is None:
        return services[0]
    for service in services:
        if service.service_id == service_id:
            return service
    raise ValueError(f"Unknown Paymentnepal service: {service_id}")


def get_payment_gateway(service_id: Optional[int] = None) -> PaymentGateway:
    from .paymentnepal_client import PaymentnepalClient
    return PaymentnepalClient(get_service_credentials(service_id))


def get_callback_dispatcher(handler: CallbackHandler) -> CallbackDispatcher:
    return CallbackDispatcher(payment_settings.paymentnepal.services, handler)
