from typing import List, Literal

from pydantic import BaseModel

from toksave.models.record import CanonicalVideoRecord, HistoryEntry


class DownloadLink(BaseModel):
    """Direct link to an upstream-hosted asset"""
    kind: Literal["no_watermark", "watermarked", "audio"]
    url: str
    filename: str


class RetrieveResponse(BaseModel):
    """Retrieval response"""
    video: CanonicalVideoRecord
    downloads: List[DownloadLink] = []


class HistoryResponse(BaseModel):
    items: List[HistoryEntry]


class ValidationResponse(BaseModel):
    url: str
    supported: bool
