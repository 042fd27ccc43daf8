from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: str = Field("", description="Base64 image bytes, no data: URL prefix")
    mime_type: str = Field("", alias="mimeType", description="Declared MIME type, e.g. image/png")
    name: str = Field("", description="Original file name, informational only")


class ChatRequest(BaseModel):
    message: Optional[str] = Field(None, description="User's text for this turn")
    image: Optional[ImagePayload] = Field(None, description="At most one inline image")


class ChatReply(BaseModel):
    reply: str


class ChatTurn(BaseModel):
    role: Literal["user", "bot"]
    content: str
    image_url: Optional[str] = Field(None, description="Local preview reference of an attached image")
