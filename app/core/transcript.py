import uuid
from typing import List, Sequence

from app.schemas.chat import ChatMessage
from app.schemas.notion import NotionRequestBody, TranscriptConfigValue, TranscriptItem


def build_transcript(messages: Sequence[ChatMessage], notion_model: str) -> List[TranscriptItem]:
    """
    Convert OpenAI-style messages into a Notion transcript.

    The first item is always the config item selecting the backend model.
    Assistant turns are sent back as markdown-chat text; every other role
    (system included) becomes a user turn with Notion's nested [[text]] shape.
    """
    transcript = [
        TranscriptItem(type="config", value=TranscriptConfigValue(model=notion_model))
    ]
    for message in messages:
        if message.role == "assistant":
            transcript.append(TranscriptItem(type="markdown-chat", value=message.content))
        else:
            transcript.append(TranscriptItem(type="user", value=[[message.content]]))
    return transcript


def build_request_body(space_id: str, transcript: List[TranscriptItem]) -> NotionRequestBody:
    return NotionRequestBody(
        trace_id=str(uuid.uuid4()),
        space_id=space_id,
        transcript=transcript,
    )
