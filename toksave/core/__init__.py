from .errors import (
    InvalidUrl,
    MissingPlayUrl,
    NetworkError,
    NormalizationError,
    RetrievalError,
    TransportError,
    UnrecognizedShape,
    UpstreamReportedError,
)
from .validator import is_supported_url

__all__ = [
    "InvalidUrl",
    "MissingPlayUrl",
    "NetworkError",
    "NormalizationError",
    "RetrievalError",
    "TransportError",
    "UnrecognizedShape",
    "UpstreamReportedError",
    "is_supported_url",
]
