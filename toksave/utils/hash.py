import hashlib


def stable_token(*parts: str, length: int = 16) -> str:
    """Deterministic short token for the given parts"""
    joined = "\x1f".join(parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:length]
