import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "TikTok Video"
DEFAULT_DISPLAY_NAME = "TikTok User"
DEFAULT_HANDLE = "tiktok_user"
DEFAULT_AVATAR_URL = "https://www.tiktok.com/favicon.ico"
DEFAULT_TRACK_TITLE = "Original Sound"
DEFAULT_TRACK_AUTHOR = "Unknown"


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str = DEFAULT_DISPLAY_NAME
    handle: str = DEFAULT_HANDLE
    avatar_url: str = DEFAULT_AVATAR_URL


class Track(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_TRACK_TITLE
    author: str = DEFAULT_TRACK_AUTHOR
    url: str = ""


class CanonicalVideoRecord(BaseModel):
    """Video metadata after normalization, identical whatever shape upstream sent"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = DEFAULT_TITLE
    cover_url: str = ""
    play_url: str
    watermarked_play_url: str
    duration_seconds: float = Field(default=0, ge=0)
    author: Author = Field(default_factory=Author)
    track: Track = Field(default_factory=Track)

    @field_validator("play_url")
    @classmethod
    def validate_play_url(cls, v):
        if not v.strip():
            raise ValueError("play_url must be a non-empty string")
        return v


class HistoryEntry(BaseModel):
    """A past retrieval, as shown in the recent downloads list"""
    id: str
    source_url: str
    title: str = DEFAULT_TITLE
    cover_url: str = ""
    author_handle: str = DEFAULT_HANDLE
    captured_at_epoch_ms: int

    @classmethod
    def from_record(
        cls,
        record: CanonicalVideoRecord,
        source_url: str,
        captured_at_epoch_ms: Optional[int] = None
    ) -> "HistoryEntry":
        if captured_at_epoch_ms is None:
            captured_at_epoch_ms = int(time.time() * 1000)

        return cls(
            id=record.id,
            source_url=source_url,
            title=record.title,
            cover_url=record.cover_url,
            author_handle=record.author.handle,
            captured_at_epoch_ms=captured_at_epoch_ms,
        )
