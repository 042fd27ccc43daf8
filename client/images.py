from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Union

from pydantic import BaseModel

from relay.schemas import ImagePayload


class ImageAttachment(BaseModel):
    """An image picked in the composer, already encoded for sending."""

    data: str
    mime_type: str
    name: str
    preview_url: str

    def to_payload(self) -> ImagePayload:
        return ImagePayload(data=self.data, mime_type=self.mime_type, name=self.name)


def read_image(path: Union[str, Path]) -> ImageAttachment:
    file = Path(path).expanduser().resolve()
    mime_type, _ = mimetypes.guess_type(file.name)
    return ImageAttachment(
        data=base64.b64encode(file.read_bytes()).decode("ascii"),
        mime_type=mime_type or "",
        name=file.name,
        preview_url=file.as_uri(),
    )
