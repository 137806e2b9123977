import json

import pytest

from app.core.emitter import DONE_SENTINEL, collect_completion, stream_completion
from app.core.errors import UpstreamStreamError


async def fragments(*texts, fail=False):
    for text in texts:
        yield text
    if fail:
        raise UpstreamStreamError("stream broke")


def parse(event: str):
    assert event.startswith("data: ") and event.endswith("\n\n")
    return json.loads(event[len("data: "):])


@pytest.mark.asyncio
async def test_streaming_emits_chunks_stop_and_done():
    events = [e async for e in stream_completion(fragments("Hello", " world"), "chatcmpl-1", "m")]

    assert len(events) == 4
    assert events[-1] == DONE_SENTINEL

    first, second, stop = (parse(e) for e in events[:3])
    assert first["choices"] == [{"index": 0, "delta": {"content": "Hello"}, "finish_reason": None}]
    assert second["choices"][0]["delta"] == {"content": " world"}
    assert stop["choices"] == [{"index": 0, "delta": {}, "finish_reason": "stop"}]
    for chunk in (first, second, stop):
        assert chunk["id"] == "chatcmpl-1"
        assert chunk["object"] == "chat.completion.chunk"
        assert chunk["model"] == "m"
    assert first["created"] == stop["created"]


@pytest.mark.asyncio
async def test_streaming_empty_upstream_still_terminates():
    events = [e async for e in stream_completion(fragments(), "chatcmpl-1", "m")]
    assert len(events) == 2
    assert parse(events[0])["choices"][0]["finish_reason"] == "stop"
    assert events[1] == DONE_SENTINEL


@pytest.mark.asyncio
async def test_streaming_error_frame_is_terminal():
    events = [e async for e in stream_completion(fragments("Hi", fail=True), "chatcmpl-1", "m")]

    assert len(events) == 2
    assert parse(events[0])["choices"][0]["delta"] == {"content": "Hi"}
    assert parse(events[1]) == {"error": {"message": "stream broke", "type": "server_error"}}


@pytest.mark.asyncio
async def test_streaming_keeps_non_ascii_text():
    events = [e async for e in stream_completion(fragments("你好"), "chatcmpl-1", "m")]
    assert "你好" in events[0]


@pytest.mark.asyncio
async def test_buffered_concatenates_fragments():
    response = await collect_completion(fragments("Hello", " world"), "chatcmpl-2", "m")

    assert response.id == "chatcmpl-2"
    assert response.object == "chat.completion"
    assert len(response.choices) == 1
    assert response.choices[0].message.role == "assistant"
    assert response.choices[0].message.content == "Hello world"
    assert response.choices[0].finish_reason == "stop"
    assert response.usage.total_tokens is None


@pytest.mark.asyncio
async def test_buffered_does_not_leak_partial_output():
    with pytest.raises(UpstreamStreamError):
        await collect_completion(fragments("Hel", fail=True), "chatcmpl-3", "m")
