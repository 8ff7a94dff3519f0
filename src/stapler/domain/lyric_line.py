"""Pydantic model for the demo list item."""

from pydantic import BaseModel, Field


class LyricLine(BaseModel):
    """A single line of lyrics served by the demo API."""

    index: int = Field(ge=0, description="Zero-based position in the song")
    text: str = Field(description="Line content")
