"""API数据模型定义."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


TagHandling = Literal["none", "html", "xml"]


class Dialect:
    """对外暴露的接口方言常量."""

    FREE = "free"
    PRO = "pro"
    V2 = "v2"
    CHAT = "chat"


# ---------------------------------------------------------------------------
# 规范化的翻译请求与结果
# ---------------------------------------------------------------------------


class TranslationRequest(BaseModel):
    """规范化的翻译请求, 所有方言最终都转换为该结构."""

    model_config = ConfigDict(frozen=True)

    source_lang: str = ""  # 为空表示自动检测
    target_lang: str
    text: str
    tag_handling: TagHandling = "none"
    proxy: Optional[str] = None
    credential: Optional[str] = None


class TranslationResult(BaseModel):
    """翻译后端返回的规范化结果."""

    status_code: int
    message: str = ""
    id: int = 0
    data: str = ""
    alternatives: List[str] = Field(default_factory=list)
    source_lang: str = ""
    target_lang: str = ""
    method: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code == 200


# ---------------------------------------------------------------------------
# 各方言的请求体
# ---------------------------------------------------------------------------


class FreePayload(BaseModel):
    """/translate 与 /v1/translate 的请求体."""

    text: str = ""
    source_lang: str = ""
    target_lang: str = ""
    tag_handling: str = ""


class V2Payload(BaseModel):
    """/v2/translate 的 JSON 请求体."""

    text: List[str] = Field(default_factory=list)
    source_lang: str = ""
    target_lang: str = ""
    tag_handling: str = ""


class ChatContentPart(BaseModel):
    type: str = "text"
    text: Optional[str] = None


class ChatMessage(BaseModel):
    role: str  # "system" | "user" | "assistant" | "tool"
    # null for assistant tool-call turns, a list of parts for multimodal input
    content: Union[str, List[ChatContentPart], None] = ""

    @property
    def text(self) -> str:
        """Plain text of the message; list content keeps only its text parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part.text or "" for part in self.content if part.type == "text"
        )


class ChatCompletionRequest(BaseModel):
    model: str = ""
    messages: List[ChatMessage] = Field(default_factory=list)
    # Request OpenAI-compatible SSE streaming when true
    stream: Optional[bool] = False


# ---------------------------------------------------------------------------
# 响应信封
# ---------------------------------------------------------------------------


class ErrorEnvelope(BaseModel):
    """free / pro 方言的错误响应."""

    code: int
    message: str


class FreeEnvelope(BaseModel):
    """free / pro 方言的成功响应."""

    code: int
    id: int
    data: str
    alternatives: List[str]
    source_lang: str
    target_lang: str
    method: str


class ProEnvelope(FreeEnvelope):
    """pro 方言的成功响应, 字段与 free 方言一致."""


class V2Translation(BaseModel):
    detected_source_language: str
    text: str


class V2Envelope(BaseModel):
    translations: List[V2Translation]


class V2ErrorEnvelope(BaseModel):
    message: str


class ChatCompletionMessage(BaseModel):
    role: str = "assistant"
    content: str


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatCompletionMessage
    finish_reason: str = "stop"


class ChatUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatEnvelope(BaseModel):
    id: str
    object: str = "chat.completion"
    created: int
    model: str
    choices: List[ChatChoice]
    usage: ChatUsage


class ChatDelta(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class StreamChunk(BaseModel):
    """流式输出中的单个 choice."""

    index: int = 0
    delta: ChatDelta
    finish_reason: Optional[str] = None


class ChatChunkEnvelope(BaseModel):
    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: str
    choices: List[StreamChunk]


class ChatErrorDetail(BaseModel):
    message: str
    type: str
    code: int


class ChatErrorEnvelope(BaseModel):
    error: ChatErrorDetail
