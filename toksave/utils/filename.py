import re
import unicodedata

FILENAME_PREFIX = "tiktok"


def sanitize_filename(name: str, max_length: int = 120) -> str:
    """Make a filename safe for the download attribute on every platform"""
    name = unicodedata.normalize("NFKC", name)
    name = re.sub(r'[\\/:*?"<>|\s]+', '_', name)
    name = name.strip("._")
    return name[:max_length] or FILENAME_PREFIX


def download_filename(video_id: str, variant: str, ext: str) -> str:
    """tiktok_<id>_<variant>.<ext>, e.g. tiktok_7301_no_wm.mp4"""
    stem = sanitize_filename(f"{FILENAME_PREFIX}_{video_id}_{variant}")
    return f"{stem}.{ext}"
