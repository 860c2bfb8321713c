from dataclasses import dataclass
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class ConversationTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Literal["user", "assistant"]
    content: str = ""
    has_image: bool = Field(False, alias="hasImage", description="Turn originally carried the screenshot")


class ChatRefinementRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(None, description="The new refinement instruction")
    conversation_history: List[ConversationTurn] = Field(default_factory=list, alias="conversationHistory")
    current_html: str = Field("", alias="currentHtml", description="Full HTML from the latest generation")


@dataclass(frozen=True)
class GenerationRequest:
    image_bytes: bytes
    image_mime_type: str
    user_prompt: Optional[str] = None
    include_javascript: bool = False
    make_interactive: bool = False


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    type: Literal["image"] = "image"
    data: str = Field(..., description="base64 data URI")


ContentPart = Union[TextPart, ImagePart]


class ModelMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: List[ContentPart]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.content if isinstance(p, TextPart))


class Diagnostics(BaseModel):
    has_script_tag: bool
    has_interactivity_keywords: bool
    length: int


class GenerationResult(BaseModel):
    text: str
    diagnostics: Diagnostics
    prompt_used: Optional[str] = None


class GenerateDebug(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt_used: str = Field(..., alias="promptUsed")
    response_length: int = Field(..., alias="responseLength")
    has_script: bool = Field(..., alias="hasScript")
    has_js_keywords: bool = Field(..., alias="hasJSKeywords")


class ChatDebug(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_length: int = Field(..., alias="messageLength")
    response_length: int = Field(..., alias="responseLength")
    has_script: bool = Field(..., alias="hasScript")
    has_js_keywords: bool = Field(..., alias="hasJSKeywords")
    conversation_length: int = Field(..., alias="conversationLength")


class GenerateResponse(BaseModel):
    success: bool = True
    text: str
    message: str = "HTML generated successfully!"
    debug: GenerateDebug


class ChatResponse(BaseModel):
    success: bool = True
    text: str
    message: str = "HTML updated successfully!"
    debug: ChatDebug


class ErrorResponse(BaseModel):
    error: str
