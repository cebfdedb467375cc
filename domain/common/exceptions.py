"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class MissingParameter(BusinessException):
    """A required callback field was not supplied."""

    def __init__(self, param: str):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message=f"Required param not found: {param}",
            error_type="MissingParameter",
            details={"param": param},
            field=param,
        )
        self.param = param


class UnknownService(BusinessException):
    def __init__(self, service_id: str):
        super().__init__(
            code=PaymentCode.UNKNOWN_SERVICE,
            message=f"Unknown service: {service_id}",
            error_type="UnknownService",
            details={"service_id": service_id},
            field="service_id",
        )
        self.service_id = service_id


class SignatureMismatch(BusinessException):
    def __init__(self, service_id: str):
        super().__init__(
            code=PaymentCode.SIGNATURE_ERROR,
            message="Sign error",
            error_type="SignatureMismatch",
            details={"service_id": service_id},
            field="check",
        )
        self.service_id = service_id


class UnknownCommand(BusinessException):
    def __init__(self, command: Optional[str]):
        super().__init__(
            code=PaymentCode.UNKNOWN_COMMAND,
            message=f"Unexpected callback type: {command}",
            error_type="UnknownCommand",
            details={"command": command},
            field="command",
        )
        self.command = command
