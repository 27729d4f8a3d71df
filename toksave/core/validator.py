import re

# Recognized subdomains; vm/vt serve shortened share links
SUPPORTED_SUBDOMAINS = ("www", "vm", "vt", "v", "m")

SUPPORTED_URL_RE = re.compile(
    r"^(https?://)?((" + "|".join(SUPPORTED_SUBDOMAINS) + r")\.)?tiktok\.com/.*$",
    re.IGNORECASE,
)


def is_supported_url(url: str) -> bool:
    """
    Check whether a string plausibly references a TikTok video.
    Purely syntactic: no network access and no normalization.
    """
    if not isinstance(url, str):
        return False

    clean_url = url.strip()
    if not clean_url:
        return False

    return SUPPORTED_URL_RE.match(clean_url) is not None
