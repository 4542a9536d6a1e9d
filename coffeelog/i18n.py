"""
Localization for Coffee Log.

Translation tables are nested JSON objects stored as translations/{language}.json
and looked up with dotted keys ("notifications.notFound").

Rules:
- A language whose table cannot be loaded falls back to English.
- A missing key returns the key itself; lookups never raise and never return blank.
- With no tables at all, every lookup returns the raw key.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from coffeelog.paths import get_translations_dir

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ('en', 'sv', 'nl', 'fr')
FALLBACK_LANGUAGE = 'en'

# Display info for the language selector
LANGUAGE_OPTIONS = {
    'en': ('🇬🇧', 'English'),
    'sv': ('🇸🇪', 'Svenska'),
    'nl': ('🇳🇱', 'Nederlands'),
    'fr': ('🇫🇷', 'Français'),
}

_cache: Dict[tuple, Dict[str, Any]] = {}


def _read_table(language: str, translations_dir: Path) -> Dict[str, Any]:
    path = translations_dir / f"{language}.json"
    with open(path, 'r', encoding='utf-8') as f:
        table = json.load(f)
    if not isinstance(table, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return table


def load_translations(language: str, translations_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the translation table for a language, falling back to English.

    Returns an empty table if even the fallback cannot be loaded.
    """
    translations_dir = Path(translations_dir) if translations_dir else get_translations_dir()
    cache_key = (language, str(translations_dir))
    if cache_key in _cache:
        return _cache[cache_key]

    try:
        table = _read_table(language, translations_dir)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load translations for {language}: {e}")
        if language == FALLBACK_LANGUAGE:
            return {}
        return load_translations(FALLBACK_LANGUAGE, translations_dir)

    _cache[cache_key] = table
    return table


def clear_cache() -> None:
    _cache.clear()


def lookup(translations: Optional[Dict[str, Any]], key: str) -> str:
    """Resolve a dotted key in a nested table; return the key when not found."""
    value: Any = translations or {}
    for part in key.split('.'):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return key
    if not isinstance(value, str) or not value:
        return key
    return value


class Translator:
    """Callable key -> string lookup for one active language."""

    def __init__(self, language: str = FALLBACK_LANGUAGE, translations_dir: Optional[Path] = None):
        self._translations_dir = translations_dir
        self._language = FALLBACK_LANGUAGE
        self._translations: Dict[str, Any] = {}
        self.set_language(language)

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            logger.warning(f"Unsupported language '{language}', using {FALLBACK_LANGUAGE}")
            language = FALLBACK_LANGUAGE
        self._language = language
        self._translations = load_translations(language, self._translations_dir)

    def t(self, key: str) -> str:
        return lookup(self._translations, key)

    __call__ = t
