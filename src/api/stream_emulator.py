"""SSE 流式输出模拟器, 把完整的译文逐字符推送给客户端."""

import asyncio
import time
from enum import Enum
from typing import AsyncGenerator, Awaitable, Callable, Optional

from config.logging_config import get_logger
from .formatter import (
    DONE_FRAME,
    content_chunk,
    finish_chunk,
    format_chunk,
    role_chunk,
)

logger = get_logger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class StreamState(str, Enum):
    """流式输出状态."""

    ROLE_SENT = "role_sent"
    CONTENT_STREAMING = "content_streaming"
    DONE = "done"


class StreamEmulator:
    """逐个 Unicode 码点输出译文的流式模拟器.

    翻译后端一次性返回完整译文, 这里只负责按固定节奏分帧输出,
    ``delay`` 为 0 时不做任何等待.
    """

    def __init__(self, delay: float = 0.05):
        self.delay = delay

    async def _pause(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    async def stream(
        self,
        text: str,
        model: str,
        completion_id: str,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> AsyncGenerator[str, None]:
        """生成 SSE 帧.

        Args:
            text: 完整译文
            model: 回显给客户端的模型名
            completion_id: 本次补全的 id, 所有帧共用
            is_disconnected: 可选回调, 返回 True 时停止输出

        Yields:
            ``data: ...`` 帧, 以 ``data: [DONE]`` 结束
        """
        created = int(time.time())
        state = StreamState.ROLE_SENT
        yield format_chunk(completion_id, created, model, role_chunk())

        state = StreamState.CONTENT_STREAMING
        try:
            for char in text:
                if is_disconnected is not None and await is_disconnected():
                    logger.info(f"Client disconnected, stopping stream {completion_id}")
                    return
                yield format_chunk(completion_id, created, model, content_chunk(char))
                await self._pause()
        except asyncio.CancelledError:
            logger.info(f"Stream {completion_id} cancelled in state {state.value}")
            raise

        state = StreamState.DONE
        yield format_chunk(completion_id, created, model, finish_chunk())
        yield DONE_FRAME
        logger.debug(f"Stream {completion_id} finished in state {state.value}")
