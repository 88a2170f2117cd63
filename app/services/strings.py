from __future__ import annotations

import logging
from typing import Mapping, Protocol

logger = logging.getLogger(__name__)

DEFAULT_LANG = "en"

LANGUAGE_PACKS: dict[str, dict[str, str]] = {
    "en": {
        "pluginname": "Assessment type",
        "assesstype": "Assessment type",
        "formative": "Formative",
        "summative": "Summative",
        "dummy": "Dummy",
        "locked": "Locked",
    },
    "fr": {
        "pluginname": "Type d'évaluation",
        "assesstype": "Type d'évaluation",
        "formative": "Formative",
        "summative": "Sommative",
        "dummy": "Fictive",
        "locked": "Verrouillé",
    },
}


class Translator(Protocol):
    def resolve(self, key: str) -> str:
        ...


class LanguageStringTranslator:
    """Resolve string keys against one of the bundled language packs."""

    def __init__(
        self,
        lang: str = DEFAULT_LANG,
        packs: Mapping[str, Mapping[str, str]] = LANGUAGE_PACKS,
    ) -> None:
        if lang not in packs:
            logger.warning("Unknown language %r, falling back to %r", lang, DEFAULT_LANG)
            lang = DEFAULT_LANG
        self.lang = lang
        self._strings = packs[lang]
        self._fallback = packs.get(DEFAULT_LANG, {})

    def resolve(self, key: str) -> str:
        if key in self._strings:
            return self._strings[key]
        if key in self._fallback:
            return self._fallback[key]
        logger.warning("Missing language string %r (lang=%s)", key, self.lang)
        return f"[[{key}]]"
