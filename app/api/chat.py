from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from app.schemas.chat import ChatCompletionRequest, ChatCompletionResponse
from app.api.deps import (
    ClientFactory,
    get_client_factory,
    get_model_router,
    require_bearer_token,
    require_notion_cookie,
)
from app.core.config import Settings, get_settings
from app.core.emitter import collect_completion, new_completion_id, stream_completion
from app.core.router import ModelRouter
from app.core.stream import iter_fragments
from app.core.transcript import build_request_body, build_transcript
from app.core.upstream import NotionClient
import logging
import time

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/chat/completions",
    response_model=ChatCompletionResponse,
    dependencies=[Depends(require_bearer_token), Depends(require_notion_cookie)],
)
async def create_chat_completion(
    payload: ChatCompletionRequest,
    settings: Settings = Depends(get_settings),
    model_router: ModelRouter = Depends(get_model_router),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    notion_model = model_router.select(payload.notion_model)
    logger.info(
        f"[request] model={notion_model} {'stream' if payload.stream else 'non-stream'} "
        f"messages={len(payload.messages)}"
    )

    transcript = build_transcript(payload.messages, notion_model)
    body = build_request_body(settings.notion_space_id, transcript)

    # Open upstream before answering so a non-2xx status can be mirrored
    # even in streaming mode. Raises UpstreamConnectionError / UpstreamAPIError.
    client = client_factory(settings)
    await client.open_stream(body)

    completion_id = new_completion_id()

    # --- STREAMING PATH ---
    if payload.stream:
        return StreamingResponse(
            _stream_and_close(client, completion_id, payload.model),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            background=BackgroundTask(client.aclose),
        )

    # --- NON-STREAMING PATH ---
    start = time.monotonic()
    try:
        response = await collect_completion(
            iter_fragments(client.aiter_bytes()), completion_id, payload.model
        )
    finally:
        await client.aclose()

    duration_ms = int((time.monotonic() - start) * 1000)
    content = response.choices[0].message.content
    logger.info(f"[non-stream] done: {len(content)} chars, {duration_ms}ms")
    return response


async def _stream_and_close(client: NotionClient, completion_id: str, model: str):
    # Closing here also runs when the client disconnects and the task is cancelled
    try:
        async for event in stream_completion(
            iter_fragments(client.aiter_bytes()), completion_id, model
        ):
            yield event
    finally:
        await client.aclose()
