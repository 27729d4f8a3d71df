from .filename import download_filename, sanitize_filename
from .hash import stable_token

__all__ = ["download_filename", "sanitize_filename", "stable_token"]
