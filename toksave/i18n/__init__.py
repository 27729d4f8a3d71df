import json
import logging
import os
from typing import Any, Dict, Optional

from toksave.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")
FALLBACK_LOCALE = "en"


class I18n:
    """
    User-facing message catalogs, one <locale>.json per language.
    Keys are dotted paths ("error.invalid_url"); a key missing from the
    requested catalog is looked up in the default one, then returned as is.
    """

    def __init__(self, locales_dir: str = LOCALES_DIR, default_locale: Optional[str] = None):
        self.catalogs: Dict[str, Dict[str, Any]] = {}
        self.default_locale = default_locale or config.i18n.default_locale
        self.load_catalogs(locales_dir)

    def load_catalogs(self, locales_dir: str) -> None:
        if not os.path.isdir(locales_dir):
            logger.warning(f"No message catalogs at {locales_dir}")
            return

        for filename in sorted(os.listdir(locales_dir)):
            locale_code, ext = os.path.splitext(filename)
            if ext != ".json":
                continue
            path = os.path.join(locales_dir, filename)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    self.catalogs[locale_code] = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Skipping catalog {path}: {e}")

    def resolve_locale(self, locale: Optional[str]) -> Optional[str]:
        for candidate in (locale, self.default_locale, FALLBACK_LOCALE):
            if candidate and candidate in self.catalogs:
                return candidate
        return None

    def lookup(self, key: str, locale: str) -> Optional[str]:
        node: Any = self.catalogs.get(locale, {})
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """Translated message for key, formatted with kwargs"""
        resolved = self.resolve_locale(locale)
        if resolved is None:
            return key

        template = self.lookup(key, resolved)
        if template is None and resolved != self.default_locale:
            template = self.lookup(key, self.default_locale)
        if template is None:
            return key

        try:
            return template.format(**kwargs)
        except (KeyError, IndexError):
            return template


i18n = I18n()
