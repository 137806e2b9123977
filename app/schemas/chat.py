from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_serializer, field_validator

DEFAULT_MODEL = "notion-proxy"
DEFAULT_NOTION_MODEL = "anthropic-opus-4"


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    model: str = DEFAULT_MODEL
    stream: bool = False
    notion_model: str = DEFAULT_NOTION_MODEL

    @field_validator("model", "notion_model", mode="before")
    @classmethod
    def _blank_to_default(cls, value, info):
        # Clients send null or "" to mean "use the default"
        if value is None or value == "":
            return DEFAULT_MODEL if info.field_name == "model" else DEFAULT_NOTION_MODEL
        return value

    @field_validator("stream", mode="before")
    @classmethod
    def _null_stream(cls, value):
        return False if value is None else value


# --- Output models (OpenAI-compatible) ---

class ChoiceDelta(BaseModel):
    content: Optional[str] = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChoiceDelta
    finish_reason: Optional[str] = None

    @field_serializer("delta")
    def _compact_delta(self, delta: ChoiceDelta):
        # The closing chunk carries an empty delta: {}
        return delta.model_dump(exclude_none=True)


class ChatCompletionChunk(BaseModel):
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: List[ChunkChoice]


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class CompletionChoice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: str = "stop"


class Usage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[CompletionChoice]
    usage: Usage = Field(default_factory=Usage)


class Model(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str = "notion"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[Model]


class ErrorDetail(BaseModel):
    message: str
    type: str


class ErrorBody(BaseModel):
    error: ErrorDetail
