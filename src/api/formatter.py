"""把规范化翻译结果渲染成各方言的响应信封."""

import json
import time
import uuid
from typing import Any, Dict

from fastapi.responses import JSONResponse

from models.models import (
    ChatChoice,
    ChatChunkEnvelope,
    ChatCompletionMessage,
    ChatDelta,
    ChatEnvelope,
    ChatErrorDetail,
    ChatErrorEnvelope,
    ChatUsage,
    Dialect,
    ErrorEnvelope,
    FreeEnvelope,
    ProEnvelope,
    StreamChunk,
    TranslationResult,
    V2Envelope,
    V2ErrorEnvelope,
    V2Translation,
)

CHAT_ERROR_TYPES = {
    400: "invalid_request_error",
    401: "authentication_error",
    403: "permission_error",
    404: "not_found_error",
    429: "rate_limit_error",
}


def http_status(status_code: int) -> int:
    """Upstream status codes pass through unless they are not valid HTTP errors."""
    if 400 <= status_code <= 599:
        return status_code
    return 502


def error_body(dialect: str, status_code: int, message: str) -> Dict[str, Any]:
    if dialect == Dialect.V2:
        return V2ErrorEnvelope(message=message).model_dump()
    if dialect == Dialect.CHAT:
        detail = ChatErrorDetail(
            message=message,
            type=CHAT_ERROR_TYPES.get(status_code, "api_error"),
            code=status_code,
        )
        return ChatErrorEnvelope(error=detail).model_dump()
    return ErrorEnvelope(code=status_code, message=message).model_dump()


def format_error(dialect: str, status_code: int, message: str) -> JSONResponse:
    status = http_status(status_code)
    return JSONResponse(
        status_code=status, content=error_body(dialect, status, message)
    )


def format_free(result: TranslationResult, dialect: str = Dialect.FREE) -> JSONResponse:
    """free 与 pro 方言的成功响应字段相同."""
    if not result.ok:
        return format_error(dialect, result.status_code, result.message)
    envelope_cls = ProEnvelope if dialect == Dialect.PRO else FreeEnvelope
    envelope = envelope_cls(
        code=200,
        id=result.id,
        data=result.data,
        alternatives=result.alternatives,
        source_lang=result.source_lang,
        target_lang=result.target_lang,
        method=result.method,
    )
    return JSONResponse(status_code=200, content=envelope.model_dump())


def format_v2(result: TranslationResult) -> JSONResponse:
    if not result.ok:
        return format_error(Dialect.V2, result.status_code, result.message)
    envelope = V2Envelope(
        translations=[
            V2Translation(
                detected_source_language=result.source_lang, text=result.data
            )
        ]
    )
    return JSONResponse(status_code=200, content=envelope.model_dump())


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def format_chat(
    result: TranslationResult, model: str, prompt: str
) -> JSONResponse:
    """Render a non-streaming chat completion.

    Usage counts code points of the translated input and output, not
    sub-word tokens.
    """
    if not result.ok:
        return format_error(Dialect.CHAT, result.status_code, result.message)
    prompt_tokens = len(prompt)
    completion_tokens = len(result.data)
    envelope = ChatEnvelope(
        id=new_completion_id(),
        created=int(time.time()),
        model=model,
        choices=[
            ChatChoice(message=ChatCompletionMessage(content=result.data))
        ],
        usage=ChatUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )
    return JSONResponse(status_code=200, content=envelope.model_dump())


def format_chunk(completion_id: str, created: int, model: str, chunk: StreamChunk) -> str:
    """Frame one chunk as an SSE ``data:`` event."""
    envelope = ChatChunkEnvelope(
        id=completion_id, created=created, model=model, choices=[chunk]
    )
    payload = envelope.model_dump()
    # role/content 只在存在时输出, finish_reason 始终输出 (可能为 null)
    payload["choices"][0]["delta"] = chunk.delta.model_dump(exclude_none=True)
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def role_chunk() -> StreamChunk:
    return StreamChunk(delta=ChatDelta(role="assistant", content=""))


def content_chunk(content: str) -> StreamChunk:
    return StreamChunk(delta=ChatDelta(content=content))


def finish_chunk() -> StreamChunk:
    return StreamChunk(delta=ChatDelta(content=""), finish_reason="stop")


DONE_FRAME = "data: [DONE]\n\n"
