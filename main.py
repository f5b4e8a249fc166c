"""Translation Gateway API 主入口."""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.errors import AuthError
from api.routes import router
from api.stream_emulator import StreamEmulator
from config.logging_config import get_logger, setup_logging
from config.settings import Settings, settings as default_settings
from models.models import ErrorEnvelope
from translator.base import TranslationPort
from translator.openai_translator import OpenAITranslator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    setup_logging(settings.log_level)
    owns_translator = getattr(app.state, "translator", None) is None
    if owns_translator:
        app.state.translator = OpenAITranslator.from_settings(settings)

    logger.info(f"Translation Gateway listening on {settings.host}:{settings.port}")
    if settings.token:
        logger.info("Access token is set.")
    if settings.dl_session:
        logger.info("Default dl_session is set.")

    yield

    if owns_translator:
        await app.state.translator.aclose()


async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorEnvelope(code=exc.status_code, message=exc.message).model_dump(),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 已知路径上的错误方法同样按未知路径处理
    status_code = 404 if exc.status_code == 405 else exc.status_code
    message = "Path not found" if status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(code=status_code, message=message).model_dump(),
        headers=None if exc.status_code == 405 else getattr(exc, "headers", None),
    )


def create_app(
    settings: Optional[Settings] = None,
    translator: Optional[TranslationPort] = None,
) -> FastAPI:
    """
    创建FastAPI应用实例.

    Args:
        settings: 只读配置, 默认使用环境变量构造的全局配置
        translator: 翻译后端, 默认在启动时根据配置创建 OpenAITranslator
    """
    settings = settings or default_settings
    app = FastAPI(
        lifespan=lifespan,
        title="Translation Gateway",
        description="多方言翻译网关API",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.translator = translator
    app.state.stream_emulator = StreamEmulator(delay=settings.stream_delay)

    # 添加CORS中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # 包含路由
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
