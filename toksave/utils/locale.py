from typing import Optional
from urllib.parse import urlparse
from toksave.config.settings import config

def get_locale(accept_language: Optional[str] = None) -> str:
    """Pick the first supported locale from an Accept-Language header"""
    if not accept_language:
        return config.i18n.default_locale

    for lang in accept_language.split(","):
        locale = lang.strip().split(";")[0].split("-")[0].lower()
        if locale in config.i18n.supported_locales:
            return locale

    return config.i18n.default_locale

def safe_url_for_log(url: str) -> str:
    """URL without query or fragment, share links carry tracking parameters"""
    try:
        parsed = urlparse(url.strip())
    except (AttributeError, ValueError):
        return "invalid_url"

    if not parsed.netloc:
        # Scheme-less share link, e.g. vm.tiktok.com/ZMabc123/
        return url.strip().split("?")[0]

    base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    if parsed.query:
        return f"{base_url}?..."
    return base_url
