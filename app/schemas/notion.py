"""Wire models for the Notion runInferenceTranscript endpoint."""

from typing import Any, Dict, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptConfigValue(BaseModel):
    type: Literal["markdown-chat"] = "markdown-chat"
    model: str


class TranscriptItem(BaseModel):
    type: Literal["config", "user", "markdown-chat"]
    # config -> TranscriptConfigValue, user -> [[text]], markdown-chat -> text
    value: Union[TranscriptConfigValue, List[List[str]], str]


class DebugOverrides(_CamelModel):
    cached_inferences: Dict[str, Any] = Field(default_factory=dict)
    annotation_inferences: Dict[str, Any] = Field(default_factory=dict)
    emit_inferences: bool = False


class NotionRequestBody(_CamelModel):
    trace_id: str
    space_id: str
    transcript: List[TranscriptItem]
    create_thread: bool = True
    debug_overrides: DebugOverrides = Field(default_factory=DebugOverrides)
    generate_title: bool = False
    save_all_thread_operations: bool = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
