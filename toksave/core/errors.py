from typing import Any, Dict


class RetrievalError(Exception):
    """Base for every failure a retrieval can end with"""
    code = "retrieval_error"
    message_key = "error.video_unavailable"
    retryable = False

    def message_args(self) -> Dict[str, Any]:
        return {}


class InvalidUrl(RetrievalError):
    code = "invalid_url"
    message_key = "error.invalid_url"

    def __init__(self, url: str):
        super().__init__(f"Unsupported URL: {url!r}")
        self.url = url


class TransportError(RetrievalError):
    """Upstream answered with a non-success status"""
    code = "transport_error"
    message_key = "error.transport"
    retryable = True

    def __init__(self, status_code: int):
        super().__init__(f"Upstream returned HTTP {status_code}")
        self.status_code = status_code

    def message_args(self) -> Dict[str, Any]:
        return {"status_code": self.status_code}


class NetworkError(RetrievalError):
    """Request did not complete or the body was not JSON"""
    code = "network_error"
    message_key = "error.network"
    retryable = True

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NormalizationError(RetrievalError):
    code = "normalization_error"


class MissingPlayUrl(NormalizationError):
    code = "missing_play_url"

    def __init__(self):
        super().__init__("No playable URL in upstream payload")


class UpstreamReportedError(NormalizationError):
    code = "upstream_reported_error"
    message_key = "error.upstream_reported"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def message_args(self) -> Dict[str, Any]:
        return {"message": self.message}


class UnrecognizedShape(NormalizationError):
    code = "unrecognized_shape"

    def __init__(self):
        super().__init__("Upstream payload has no recognizable video data")
