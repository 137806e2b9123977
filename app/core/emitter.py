"""Turn a fragment stream into OpenAI chat-completion output.

Two consumers of the same ``iter_fragments`` producer:

* ``stream_completion`` - SSE frames, one chunk per fragment, then a stop
  chunk and the ``[DONE]`` sentinel.
* ``collect_completion`` - a single buffered ``ChatCompletionResponse``.
"""

import json
import logging
import time
import uuid
from typing import AsyncIterable, AsyncIterator, Optional

from app.core.errors import UpstreamStreamError
from app.schemas.chat import (
    AssistantMessage,
    ChatCompletionChunk,
    ChatCompletionResponse,
    ChoiceDelta,
    ChunkChoice,
    CompletionChoice,
)

logger = logging.getLogger(__name__)

DONE_SENTINEL = "data: [DONE]\n\n"


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def current_timestamp() -> int:
    return int(time.time())


def sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def make_chunk(
    completion_id: str,
    created: int,
    model: str,
    content: Optional[str] = None,
    finish_reason: Optional[str] = None,
) -> ChatCompletionChunk:
    return ChatCompletionChunk(
        id=completion_id,
        created=created,
        model=model,
        choices=[ChunkChoice(delta=ChoiceDelta(content=content), finish_reason=finish_reason)],
    )


async def stream_completion(
    fragments: AsyncIterable[str],
    completion_id: str,
    model: str,
) -> AsyncIterator[str]:
    created = current_timestamp()
    start = time.monotonic()
    total_chars = 0

    try:
        async for fragment in fragments:
            total_chars += len(fragment)
            chunk = make_chunk(completion_id, created, model, content=fragment)
            yield sse_event(chunk.model_dump())
    except UpstreamStreamError as e:
        logger.error(f"[stream] {completion_id} aborted: {e.message}")
        # Terminal frame: no stop chunk and no [DONE] after an error
        yield sse_event(e.to_dict())
        return

    final_chunk = make_chunk(completion_id, created, model, finish_reason="stop")
    yield sse_event(final_chunk.model_dump())
    yield DONE_SENTINEL

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(f"[stream] done: {total_chars} chars, {duration_ms}ms")


async def collect_completion(
    fragments: AsyncIterable[str],
    completion_id: str,
    model: str,
) -> ChatCompletionResponse:
    """Buffer every fragment and build one response.

    UpstreamStreamError propagates so that no partial content is returned.
    """
    parts = []
    async for fragment in fragments:
        parts.append(fragment)
    content = "".join(parts)

    return ChatCompletionResponse(
        id=completion_id,
        created=current_timestamp(),
        model=model,
        choices=[CompletionChoice(message=AssistantMessage(content=content))],
    )
