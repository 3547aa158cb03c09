"""
Voice Studio i18n Module
========================

User-facing messages in English and Vietnamese.

Usage:
    from voice_studio.i18n import t, set_language

    print(t("errors.busy"))
    print(t("errors.quota_exceeded", limit=50000))

    # Change language ("vi-VN" and "vi" are both accepted)
    set_language("vi")
"""

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from ..exceptions import VoiceStudioError

LOCALES_PATH = Path(__file__).parent / "locales"
FALLBACK_LANGUAGE = "en"


class I18nLoader:
    def __init__(
        self, locales_path: Optional[Path] = None, default_domain: str = "studio", default_language: str = "vi"
    ) -> None:
        self.locales_path = locales_path or LOCALES_PATH
        self.default_domain = default_domain
        self._cache: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self._lang = default_language

    def set_language(self, lang: str) -> None:
        self._lang = str(lang)[:2].lower()

    def get_language(self) -> str:
        return str(os.environ.get("VOICE_STUDIO_LANG", self._lang))[:2].lower()

    def _load_domain(self, domain: str, lang: str) -> dict[str, Any]:
        key = f"{lang}:{domain}"
        with self._lock:
            if key not in self._cache:
                path = self.locales_path / lang / f"{domain}.json"
                self._cache[key] = json.loads(path.read_text(encoding="utf-8")) if path.exists() else {}
            return self._cache[key]

    def _lookup(self, key: str, domain: str, lang: str) -> Optional[str]:
        val: Any = self._load_domain(domain, lang)
        for part in key.split("."):
            val = val.get(part) if isinstance(val, dict) else None
        return val if isinstance(val, str) else None

    def t(self, key: str, domain: Optional[str] = None, lang: Optional[str] = None, **kw: Any) -> str:
        domain = domain or self.default_domain
        lang = (lang or self.get_language())[:2].lower()
        val = self._lookup(key, domain, lang)
        if val is None and lang != FALLBACK_LANGUAGE:
            val = self._lookup(key, domain, FALLBACK_LANGUAGE)
        if val is None:
            return key
        try:
            return val.format(**kw) if kw else val
        except (KeyError, IndexError):
            return val


_loader = I18nLoader()

t = _loader.t
set_language = _loader.set_language
get_language = _loader.get_language


def describe_error(error: VoiceStudioError, lang: Optional[str] = None) -> str:
    """Localized message for a studio error, falling back to its own text."""
    params: Dict[str, Any] = {"message": error.message}
    params.update({name: getattr(error, name) for name in ("limit", "used", "requested") if hasattr(error, name)})
    key = error.i18n_key or f"errors.{error.code}"
    text = t(key, lang=lang, **params)
    return error.message if text == key else text


__all__ = [
    "t",
    "set_language",
    "get_language",
    "describe_error",
    "I18nLoader",
]
