"""
botsuite/schemas/bot.py

Purpose: Bot pipeline data shapes

- Staged upload metadata
- Extraction result (text and/or inline image)
- Normalized bot reply returned to the browser
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, Dict


class StagedFile(BaseModel):
    """An uploaded file written to the scratch directory."""
    path: str
    filename: str
    content_type: Optional[str] = None
    size: int = 0


class InlineImage(BaseModel):
    mime_type: str
    data: str  # base64


class ExtractionResult(BaseModel):
    text: str = ""
    inline_image: Optional[InlineImage] = None


class BotReply(BaseModel):
    """
    Normalized bot response.

    `image` is a data URL ready for an <img> tag; `fileUrl` is the public
    object-store URL of the uploaded file when one can be built.
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    image: Optional[str] = None
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    raw: Dict[str, Any] = Field(default_factory=dict)
