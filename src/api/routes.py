"""Translation Gateway API 路由."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from config.logging_config import get_logger
from models.models import (
    ChatCompletionRequest,
    Dialect,
    FreePayload,
    TranslationRequest,
    TranslationResult,
)
from translator.base import TranslationPort
from .auth import verify_token
from .errors import GatewayError, TransportFailure, UpstreamFailure
from .formatter import (
    format_chat,
    format_error,
    format_free,
    format_v2,
    new_completion_id,
)
from .normalizer import (
    normalize_chat,
    normalize_free,
    normalize_pro,
    normalize_v2,
    parse_body,
)
from .stream_emulator import StreamEmulator

logger = get_logger(__name__)

# 创建路由实例
router = APIRouter()

BANNER = (
    "Translation Gateway. Go to /translate, /v1/translate, /v2/translate "
    "or /v1/chat/completions with POST."
)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def run_translation(
    request: Request, translation_request: TranslationRequest
) -> TranslationResult:
    """调用翻译后端, 只返回成功结果.

    上游返回非 200 时抛出 UpstreamFailure (状态码透传),
    其他任何异常都转换为 TransportFailure, 只影响当前请求.
    """
    translator: TranslationPort = request.app.state.translator
    try:
        result = await translator.translate(translation_request)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception(f"Translation backend error for {request.url.path}: {e}")
        raise TransportFailure(f"Translation failed: {e}") from e
    if not result.ok:
        logger.warning(
            f"Upstream failure {result.status_code} for {request.url.path}: {result.message}"
        )
        raise UpstreamFailure(result.status_code, result.message)
    return result


@router.get("/")
async def root():
    """根路径，返回服务信息"""
    return {"code": 200, "message": BANNER}


@router.post("/translate")
async def translate_free(request: Request, auth_ok: bool = Depends(verify_token)):
    """free 方言: 不需要会话凭据."""
    settings = request.app.state.settings
    try:
        payload = parse_body(FreePayload, await request.body())
        translation_request = normalize_free(payload, settings)
        result = await run_translation(request, translation_request)
    except GatewayError as e:
        logger.warning(f"/translate failed: {e.status_code} {e.message}")
        return format_error(Dialect.FREE, e.status_code, e.message)
    return format_free(result)


@router.post("/v1/translate")
async def translate_pro(request: Request, auth_ok: bool = Depends(verify_token)):
    """pro 方言: 需要 dl_session, 优先取自 Cookie."""
    settings = request.app.state.settings
    try:
        payload = parse_body(FreePayload, await request.body())
        translation_request = normalize_pro(
            payload, request.headers.get("cookie"), settings
        )
        result = await run_translation(request, translation_request)
    except GatewayError as e:
        logger.warning(f"/v1/translate failed: {e.status_code} {e.message}")
        return format_error(Dialect.PRO, e.status_code, e.message)
    return format_free(result, Dialect.PRO)


@router.post("/v2/translate")
async def translate_v2(request: Request, auth_ok: bool = Depends(verify_token)):
    """v2 方言: 表单字段, 或 text 为字符串列表的 JSON."""
    settings = request.app.state.settings
    # 先读取原始 body, 之后解析表单时复用缓存
    body = await request.body()
    form = None
    if request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES):
        form = await request.form()
    try:
        translation_request = normalize_v2(form, body, settings)
        result = await run_translation(request, translation_request)
    except GatewayError as e:
        logger.warning(f"/v2/translate failed: {e.status_code} {e.message}")
        return format_error(Dialect.V2, e.status_code, e.message)
    return format_v2(result)


@router.post("/v1/chat/completions")
async def chat_completions(request: Request, auth_ok: bool = Depends(verify_token)):
    """
    OpenAI chat completions 兼容接口.

    模型名决定语言对, 最后一条消息以 "Translate to XX: ..." 开头时覆盖目标语言.
    stream 为 true 时返回 text/event-stream, 以 ``data: [DONE]`` 结束.
    """
    settings = request.app.state.settings
    try:
        req = parse_body(
            ChatCompletionRequest, await request.body(), "Invalid request format"
        )
        translation_request = normalize_chat(req, settings)
        result = await run_translation(request, translation_request)
    except GatewayError as e:
        logger.warning(f"/v1/chat/completions failed: {e.status_code} {e.message}")
        return format_error(Dialect.CHAT, e.status_code, e.message)

    if not req.stream:
        return format_chat(result, req.model, translation_request.text)

    emulator: StreamEmulator = request.app.state.stream_emulator
    return StreamingResponse(
        emulator.stream(
            result.data,
            req.model,
            new_completion_id(),
            is_disconnected=request.is_disconnected,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
