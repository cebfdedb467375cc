"""
FastAPI应用主入口
"""
from typing import Optional

from fastapi import FastAPI

from api.routes.payments import build_callback_router
from application.ports.callback_handler import CallbackHandler, NoopCallbackHandler
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import get_logger
from infrastructure.external.payments import get_callback_dispatcher


logger = get_logger(__name__)


def create_app(handler: Optional[CallbackHandler] = None) -> FastAPI:
    """Build the callback receiving app around the embedding application's handler."""
    dispatcher = get_callback_dispatcher(handler or NoopCallbackHandler())
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, debug=settings.DEBUG)
    register_exception_handlers(app)
    app.include_router(build_callback_router(dispatcher), prefix="/api/v1")
    logger.info("app_created", services=sorted(dispatcher.services))
    return app
