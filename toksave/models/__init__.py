from .record import Author, CanonicalVideoRecord, HistoryEntry, Track
from .request import RetrieveRequest
from .response import DownloadLink, HistoryResponse, RetrieveResponse, ValidationResponse

__all__ = [
    "Author",
    "CanonicalVideoRecord",
    "DownloadLink",
    "HistoryEntry",
    "HistoryResponse",
    "RetrieveRequest",
    "RetrieveResponse",
    "Track",
    "ValidationResponse",
]
