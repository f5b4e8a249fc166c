"""AsyncOpenAI translation backend."""

import json
import random
from typing import Any, Dict, List, Optional

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from api.errors import TransportFailure
from config.logging_config import get_logger
from config.settings import Settings
from models.models import TranslationRequest, TranslationResult
from translator.base import TranslationPort

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a professional translator. Translate accurately and keep the "
    "original meaning. Reply with a JSON object only."
)

TAG_HANDLING_HINTS = {
    "html": "The text is HTML. Keep every tag and attribute unchanged and translate only the text content.",
    "xml": "The text is XML. Keep every tag and attribute unchanged and translate only the text content.",
}


class OpenAITranslator(TranslationPort):
    """AsyncOpenAI-based translation backend."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        max_alternatives: int = 3,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client = client
        self.model = model
        self.max_alternatives = max_alternatives
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAITranslator":
        # One client per process; the proxy is applied here and nowhere else.
        http_client = httpx.AsyncClient(
            proxy=settings.proxy or None,
            timeout=settings.request_timeout,
        )
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout,
            max_retries=0,
            http_client=http_client,
        )
        if settings.proxy:
            logger.info(f"Using upstream proxy {settings.proxy}")
        return cls(
            client=client,
            model=settings.openai_model,
            max_alternatives=settings.max_alternatives,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()

    def _build_prompt(self, request: TranslationRequest) -> str:
        source = request.source_lang or "the detected source language"
        lines = [
            f"Translate the following text from {source} to {request.target_lang}.",
            "Return a JSON object with these keys:",
            '- "text": the translation',
            f'- "alternatives": a list of at most {self.max_alternatives} other possible translations',
            '- "detected_source_lang": the ISO 639-1 code of the source language, upper case',
        ]
        hint = TAG_HANDLING_HINTS.get(request.tag_handling)
        if hint:
            lines.append(hint)
        lines.append("")
        lines.append(request.text)
        return "\n".join(lines)

    def _parse_reply(self, content: str) -> Dict[str, Any]:
        reply = json.loads(content)
        if not isinstance(reply, dict) or not isinstance(reply.get("text"), str):
            raise ValueError("reply has no 'text' field")
        return reply

    async def translate(self, request: TranslationRequest) -> TranslationResult:
        """Translate a single request.

        A session credential, when present, replaces the API key for this
        call and marks the result as served by the ``Pro`` method.
        """
        method = "Pro" if request.credential else "Free"
        client = self.client
        if request.credential:
            client = client.with_options(api_key=request.credential)
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_prompt(request)},
                ],
                response_format={"type": "json_object"},
            )
        except APIStatusError as e:
            logger.warning(f"Upstream rejected translation: {e.status_code} {e.message}")
            return TranslationResult(
                status_code=e.status_code, message=e.message, method=method
            )
        except APIConnectionError as e:
            logger.error(f"Translation backend unreachable: {e}")
            raise TransportFailure(f"Translation failed: {e}") from e
        except APIError as e:
            logger.error(f"Translation backend returned an unusable response: {e}")
            raise TransportFailure(f"Translation failed: {e}") from e

        if not response.choices:
            logger.error("Translation backend returned no choices")
            raise TransportFailure("Translation failed: backend returned no choices")
        content = response.choices[0].message.content or ""
        try:
            reply = self._parse_reply(content)
        except ValueError as e:
            logger.error(f"Malformed translation reply: {e}; content={content[:100]!r}")
            return TranslationResult(
                status_code=502,
                message="Upstream returned a malformed translation",
                method=method,
            )

        raw_alternatives = reply.get("alternatives")
        if not isinstance(raw_alternatives, list):
            raw_alternatives = []
        alternatives: List[str] = [
            alt for alt in raw_alternatives if isinstance(alt, str)
        ][: self.max_alternatives]
        detected = reply.get("detected_source_lang") or request.source_lang
        return TranslationResult(
            status_code=200,
            id=random.randint(8300000, 8399999) * 1000,
            data=reply["text"],
            alternatives=alternatives,
            source_lang=str(detected).upper(),
            target_lang=request.target_lang.upper(),
            method=method,
        )
