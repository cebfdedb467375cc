"""
自定义异常映射与全局异常处理器
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status as http_status

from .response import error_response
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


def business_code_to_http_status(code: int) -> int:
    """根据业务码映射HTTP状态码（默认400）。"""
    mapping = {
        BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
        BusinessCode.PARAM_MISSING: http_status.HTTP_400_BAD_REQUEST,
        PaymentCode.SIGNATURE_ERROR: http_status.HTTP_403_FORBIDDEN,
        PaymentCode.UNKNOWN_SERVICE: http_status.HTTP_400_BAD_REQUEST,
        PaymentCode.UNKNOWN_COMMAND: http_status.HTTP_400_BAD_REQUEST,
        PaymentCode.PROVIDER_ERROR: http_status.HTTP_502_BAD_GATEWAY,
        PaymentCode.TRANSPORT_ERROR: http_status.HTTP_502_BAD_GATEWAY,
        PaymentCode.TIMEOUT: http_status.HTTP_504_GATEWAY_TIMEOUT,
    }
    return mapping.get(code, http_status.HTTP_400_BAD_REQUEST)


def register_exception_handlers(app: FastAPI):
    """
    注册全局异常处理器

    Args:
        app: FastAPI应用实例
    """
    logger = get_logger(__name__)

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """处理业务异常"""
        logger.warning("business_exception", error_type=exc.error_type, code=int(exc.code), path=request.url.path)
        response = error_response(
            code=exc.code,
            message=exc.message,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
        )
        return JSONResponse(
            status_code=business_code_to_http_status(exc.code),
            content=response.model_dump(mode='json'),
        )
