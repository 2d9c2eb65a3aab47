"""
Localization lookup: (language, key, params) -> text.

Missing translations fall back to the default language, then to the key
itself, so a gap in a catalog never breaks a reply.
"""
import logging
from typing import Any, Dict, List, Optional

from config.settings import settings
from services.locales import CATALOGS, LANGUAGE_NAMES

logger = logging.getLogger(__name__)


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


class LocalizationService:
    def __init__(
        self,
        catalogs: Optional[Dict[str, Dict[str, str]]] = None,
        default_language: Optional[str] = None,
    ):
        self.catalogs = catalogs or CATALOGS
        self.default_language = default_language or settings.DEFAULT_LANGUAGE

    def supported_languages(self) -> List[str]:
        return list(self.catalogs)

    def is_supported(self, code: Optional[str]) -> bool:
        return bool(code) and code in self.catalogs

    def normalize(self, code: Optional[str]) -> str:
        """Map a Telegram language_code ("en-US", "uk") onto a supported language."""
        base = (code or "").split("-")[0].lower()
        return base if self.is_supported(base) else self.default_language

    def language_name(self, code: str) -> str:
        return LANGUAGE_NAMES.get(code, code)

    def t(self, language: str, key: str, **params: Any) -> str:
        template = self.catalogs.get(language, {}).get(key)
        if template is None:
            template = self.catalogs.get(self.default_language, {}).get(key)
        if template is None:
            logger.debug("Missing translation key %s", key)
            return key
        return template.format_map(_KeepMissing(params))
