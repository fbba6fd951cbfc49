import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locals"
SUPPORTED_LANGS = ["en", "ar", "ckb"]


class _Params(dict):
    # leave unknown {placeholders} untouched
    def __missing__(self, key):
        return "{" + key + "}"


class Translator:
    """Key based message lookup over app/locals/<lang>.json, falling back to English and then to the key."""

    _cache: Dict[str, Dict[str, str]] = {}

    def __init__(self, default_lang: str = "en"):
        self.default_lang = default_lang
        self.supported_langs = SUPPORTED_LANGS
        if not Translator._cache:
            Translator._cache = self.load_translations()
        self.translations = Translator._cache

    def load_translations(self) -> Dict[str, Dict[str, str]]:
        translations = {}
        for lang in self.supported_langs:
            file = LOCALES_DIR / f"{lang}.json"
            try:
                content = file.read_text(encoding="utf-8").strip()
            except OSError as e:
                logger.warning(f"Failed to read translation file '{file}': {e}")
                continue
            if not content:
                logger.warning(f"Translation file '{file}' is empty.")
                continue
            try:
                translations[lang] = json.loads(content)
            except ValueError as e:
                logger.warning(f"Invalid JSON in translation file '{file}': {e}")
        return translations

    def resolve_lang(self, lang: Optional[str] = None) -> str:
        return lang if lang in self.supported_langs else self.default_lang

    def t(self, key: str, lang: Optional[str] = None, **params) -> str:
        lang = self.resolve_lang(lang)
        message = (
            self.translations.get(lang, {}).get(key)
            or self.translations.get(self.default_lang, {}).get(key)
            or key
        )
        if params:
            message = message.format_map(_Params(params))
        return message
