"""Poem and bookmark Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from .base import CamelModel


class PoemOut(CamelModel):
    id: int
    title: str
    author: str
    content: str
    description: str | None = None
    year: str | None = None
    category: str | None = None
    image_url: str
    thumbnail_url: str | None = None
    audio_url: str | None = None
    is_premium: bool = False
    is_premium_locked: bool = False
    created_at: datetime | None = None


class PoemCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    description: str | None = None
    year: str | None = Field(None, max_length=16)
    category: str | None = Field(None, max_length=128)
    image_url: str = Field(min_length=1)
    thumbnail_url: str | None = None
    audio_url: str | None = None
    is_premium: bool = False


class PoemUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    author: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    description: str | None = None
    year: str | None = Field(None, max_length=16)
    category: str | None = Field(None, max_length=128)
    image_url: str | None = Field(None, min_length=1)
    thumbnail_url: str | None = None
    audio_url: str | None = None
    is_premium: bool | None = None

    @field_validator("title", "author", "content", "image_url", "is_premium")
    @classmethod
    def _reject_null(cls, v):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if v is None:
            raise ValueError("may not be null")
        return v


class MassAddMetadata(CamelModel):
    title: str = Field(min_length=1, max_length=240)
    author: str = Field(min_length=1, max_length=255)
    image_url: str = Field(min_length=1)
    description: str | None = None
    year: str | None = Field(None, max_length=16)
    category: str | None = Field(None, max_length=128)
    audio_url: str | None = None
    is_premium: bool = False


class MassAddRequest(CamelModel):
    # Items are validated one by one so a single bad entry does not reject the batch
    poems: list[str | None] = Field(min_length=1)
    metadata: MassAddMetadata


class MassAddFailure(CamelModel):
    index: int
    error: str


class MassAddResult(CamelModel):
    message: str
    success_count: int
    failed_count: int
    successful_poem_ids: list[int]
    failed_poems: list[MassAddFailure]


class BookmarkRequest(CamelModel):
    poem_id: int


class BookmarkOut(CamelModel):
    id: int
    user_id: int
    poem_id: int
    is_bookmarked: bool
