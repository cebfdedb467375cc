"""
Exceptions for payment providers mapped to unified BusinessException variants.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class GatewayError(BusinessException):
    """The gateway answered with ``status == "error"``."""

    def __init__(self, message: str, *, provider: str, gateway_code: str = "unknown", details: Optional[dict] = None):
        full_details = {"provider": provider, "provider_code": gateway_code}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.PROVIDER_ERROR,
            message=message,
            error_type="GatewayError",
            details=full_details,
        )
        self.gateway_code = gateway_code


class TransportError(BusinessException):
    """The request never produced a usable HTTP response."""

    def __init__(self, message: str, *, provider: str, timeout: bool = False, details: Optional[dict] = None):
        full_details = {"provider": provider, "provider_code": "transport"}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.TIMEOUT if timeout else PaymentCode.TRANSPORT_ERROR,
            message=message,
            error_type="TransportError",
            details=full_details,
        )
