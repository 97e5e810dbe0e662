"""Localized message lookup."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "ar")
RTL_LANGUAGES = frozenset({"ar"})

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def load_catalogs(languages: tuple[str, ...] = SUPPORTED_LANGUAGES) -> dict[str, dict]:
    """Load the packaged locale catalogs."""
    catalogs: dict[str, dict] = {}
    locale_dir = Path(__file__).resolve().parents[1] / "locales"
    for language in languages:
        raw = (locale_dir / f"{language}.json").read_text(encoding="utf-8")
        catalogs[language] = json.loads(raw)
    return catalogs


@dataclass
class TranslationService:
    """Dotted-key lookup with fallback to a default language."""

    catalogs: dict[str, dict]
    default_language: str = "ar"
    fallback_language: str = "en"
    _warned: set[tuple[str, str]] = field(default_factory=set, repr=False)

    def resolve_language(self, requested: str | None) -> str:
        """Return a supported language code for a request.

        Accepts a bare code or an Accept-Language value; entries are tried
        in order of their ``q`` weight.
        """
        for code in _ranked_languages(requested or ""):
            if code in self.catalogs:
                return code
        return self.default_language

    def direction(self, language: str) -> str:
        """Return the text direction for a language."""
        return "rtl" if language in RTL_LANGUAGES else "ltr"

    def catalog(self, language: str) -> dict:
        """Return the full message tree for a language."""
        return self.catalogs.get(language, self.catalogs[self.fallback_language])

    def translate(
        self,
        key: str,
        language: str,
        values: dict[str, object] | None = None,
    ) -> str:
        """Look up a message, falling back to the default language, then the key."""
        message = _lookup(self.catalogs.get(language, {}), key)
        if message is None:
            message = _lookup(self.catalogs.get(self.fallback_language, {}), key)
            if message is None:
                self._warn_missing(key, language)
                return key
        if values:
            message = _PLACEHOLDER.sub(
                lambda match: str(values.get(match.group(1), match.group(0))),
                message,
            )
        return message

    def translator(self, language: str) -> "Translator":
        """Return a translator bound to one language."""
        return Translator(service=self, language=self.resolve_language(language))

    def _warn_missing(self, key: str, language: str) -> None:
        if (key, language) in self._warned:
            return
        self._warned.add((key, language))
        logger.warning(
            "Missing translation", extra={"key": key, "language": language}
        )


@dataclass(frozen=True)
class Translator:
    """Translation lookups for a single request language."""

    service: TranslationService
    language: str

    @property
    def direction(self) -> str:
        return self.service.direction(self.language)

    def t(self, key: str, **values: object) -> str:
        return self.service.translate(key, self.language, values or None)


def _lookup(tree: dict, key: str) -> str | None:
    node: object = tree
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    if not isinstance(node, str) or not node:
        return None
    return node


def _ranked_languages(header: str) -> list[str]:
    ranked: list[tuple[float, str]] = []
    for entry in header.split(","):
        code, _, params = entry.partition(";")
        code = code.strip().lower().split("-")[0]
        if not code:
            continue
        weight = 1.0
        for param in params.split(";"):
            name, _, value = param.partition("=")
            if name.strip() == "q":
                try:
                    weight = float(value)
                except ValueError:
                    weight = 0.0
        ranked.append((weight, code))
    ranked.sort(key=lambda item: item[0], reverse=True)
    return [code for weight, code in ranked if weight > 0]
