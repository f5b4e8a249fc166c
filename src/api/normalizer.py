"""各方言请求体到规范化翻译请求的转换.

这里的函数都是纯函数: 只依赖传入的请求数据与只读配置,
相同输入总是得到相等的 ``TranslationRequest``.
"""

from typing import Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData

from config.settings import Settings
from models.models import (
    ChatCompletionRequest,
    FreePayload,
    TranslationRequest,
    V2Payload,
)
from .errors import ValidationError

ALLOWED_TAG_HANDLING = ("html", "xml")
SESSION_COOKIE_PREFIX = "dl_session="
COMMAND_PREFIX = "Translate to "
DEFAULT_TARGET_LANG = "ZH"

# model -> (source_lang, target_lang), 源语言为空表示自动检测
MODEL_LANGUAGE_PAIRS = {
    "deepl-en-zh": ("EN", "ZH"),
    "deepl-zh-en": ("ZH", "EN"),
    "deepl-en-ja": ("EN", "JA"),
    "deepl-ja-en": ("JA", "EN"),
    "deepl-en-de": ("EN", "DE"),
    "deepl-de-en": ("DE", "EN"),
    "deepl-en-fr": ("EN", "FR"),
    "deepl-fr-en": ("FR", "EN"),
    "deepl-zh": ("", "ZH"),
    "deepl-en": ("", "EN"),
    "deepl-ja": ("", "JA"),
    "deepl-ko": ("", "KO"),
    "deepl-de": ("", "DE"),
    "deepl-fr": ("", "FR"),
    "deepl-es": ("", "ES"),
}

P = TypeVar("P", bound=BaseModel)


def parse_body(model: Type[P], body: bytes, message: str = "Invalid request body") -> P:
    """Parse a JSON request body into ``model``; an empty body counts as ``{}``."""
    try:
        return model.model_validate_json(body or b"{}")
    except PydanticValidationError as e:
        raise ValidationError(message) from e


def normalize_tag_handling(value: Optional[str]) -> str:
    if not value or value == "none":
        return "none"
    if value not in ALLOWED_TAG_HANDLING:
        raise ValidationError(
            "Invalid tag_handling value. Allowed values are 'html' and 'xml'."
        )
    return value


def _build_request(
    text: str,
    source_lang: str,
    target_lang: str,
    tag_handling: Optional[str],
    settings: Settings,
    credential: Optional[str] = None,
) -> TranslationRequest:
    tag = normalize_tag_handling(tag_handling)
    if not text:
        raise ValidationError("No text to translate")
    if not target_lang:
        raise ValidationError("target_lang is required")
    return TranslationRequest(
        source_lang=source_lang,
        target_lang=target_lang,
        text=text,
        tag_handling=tag,
        proxy=settings.proxy or None,
        credential=credential,
    )


def normalize_free(payload: FreePayload, settings: Settings) -> TranslationRequest:
    return _build_request(
        payload.text,
        payload.source_lang,
        payload.target_lang,
        payload.tag_handling,
        settings,
    )


def session_from_cookie(cookie: Optional[str]) -> str:
    """Return the ``dl_session`` value from a Cookie header, or an empty string."""
    if not cookie or SESSION_COOKIE_PREFIX not in cookie:
        return ""
    value = cookie.split(SESSION_COOKIE_PREFIX, 1)[1]
    return value.split(";", 1)[0].strip()


def resolve_session(cookie: Optional[str], settings: Settings) -> str:
    """Pick the pro session credential: the request cookie wins over the default.

    A credential containing ``.`` has the shape of a free-account token,
    which is only a heuristic for the account tier.
    """
    session = session_from_cookie(cookie) or settings.dl_session
    if not session:
        raise ValidationError("No dl_session Found", status_code=401)
    if "." in session:
        raise ValidationError(
            "Your account is not a Pro account. Please upgrade your account "
            "or switch to a different account.",
            status_code=401,
        )
    return session


def normalize_pro(
    payload: FreePayload, cookie: Optional[str], settings: Settings
) -> TranslationRequest:
    normalize_tag_handling(payload.tag_handling)
    session = resolve_session(cookie, settings)
    return _build_request(
        payload.text,
        payload.source_lang,
        payload.target_lang,
        payload.tag_handling,
        settings,
        credential=session,
    )


def normalize_v2(
    form: Optional[FormData], body: bytes, settings: Settings
) -> TranslationRequest:
    """Normalize a v2 request.

    Form fields are used when both ``text`` and ``target_lang`` are present,
    otherwise the body is parsed as JSON with ``text`` being a list of
    strings that is joined line by line. The source language is always
    detected.
    """
    text = "\n".join(form.getlist("text")) if form is not None else ""
    target_lang = form.get("target_lang", "") if form is not None else ""
    tag_handling = form.get("tag_handling", "") if form is not None else ""
    if not text or not target_lang:
        payload = parse_body(V2Payload, body)
        text = "\n".join(payload.text)
        target_lang = payload.target_lang
        tag_handling = payload.tag_handling
    return _build_request(text, "", target_lang, tag_handling, settings)


def languages_for_model(model: str) -> Tuple[str, str]:
    return MODEL_LANGUAGE_PAIRS.get(model.lower(), ("", DEFAULT_TARGET_LANG))


def parse_command(content: str) -> Optional[Tuple[str, str]]:
    """Parse ``Translate to <LANG>: <text>`` into ``(LANG, text)``."""
    if not content.startswith(COMMAND_PREFIX):
        return None
    head, sep, tail = content.partition(":")
    if not sep:
        return None
    return head[len(COMMAND_PREFIX):].strip(), tail.strip()


def normalize_chat(
    req: ChatCompletionRequest, settings: Settings
) -> TranslationRequest:
    if not req.messages:
        raise ValidationError("No messages provided")
    text = req.messages[-1].text
    source_lang, target_lang = languages_for_model(req.model)
    command = parse_command(text)
    if command is not None:
        target_lang, text = command
        source_lang = ""
    return _build_request(text, source_lang, target_lang, "", settings)
