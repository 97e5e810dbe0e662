"""Tests for translation lookups."""

from nutrisnap.services.translation import TranslationService, load_catalogs


def _service() -> TranslationService:
    return TranslationService(
        catalogs={
            "en": {
                "greeting": {"hello": "Hello, {{name}}!"},
                "only_en": {"title": "English only"},
            },
            "ar": {"greeting": {"hello": "مرحبا {{name}}!"}},
        },
        default_language="ar",
        fallback_language="en",
    )


def test_translate_uses_active_language() -> None:
    service = _service()

    assert service.translate("greeting.hello", "ar", {"name": "Lina"}) == "مرحبا Lina!"


def test_translate_falls_back_to_default_language() -> None:
    service = _service()

    assert service.translate("only_en.title", "ar") == "English only"


def test_translate_returns_key_when_missing_everywhere() -> None:
    service = _service()

    assert service.translate("missing.key", "ar") == "missing.key"
    assert service.translate("greeting", "en") == "greeting"


def test_translate_leaves_unknown_placeholders() -> None:
    service = _service()

    assert service.translate("greeting.hello", "en") == "Hello, {{name}}!"


def test_resolve_language_and_direction() -> None:
    service = _service()

    assert service.resolve_language("en-US,en;q=0.9") == "en"
    assert service.resolve_language("fr") == "ar"
    assert service.resolve_language(None) == "ar"
    assert service.direction("ar") == "rtl"
    assert service.direction("en") == "ltr"


def test_resolve_language_ranks_accept_language_entries() -> None:
    service = _service()

    assert service.resolve_language("fr-CA,fr;q=0.9,en;q=0.8") == "en"
    assert service.resolve_language("en;q=0.2, ar-EG;q=0.7") == "ar"
    assert service.resolve_language("en;q=0") == "ar"
    assert service.resolve_language("en;q=oops") == "ar"


def test_translator_binds_language() -> None:
    translator = _service().translator("en")

    assert translator.language == "en"
    assert translator.direction == "ltr"
    assert translator.t("greeting.hello", name="Sam") == "Hello, Sam!"


def test_packaged_catalogs_share_keys() -> None:
    catalogs = load_catalogs()

    def keys(tree: dict, prefix: str = "") -> set[str]:
        found: set[str] = set()
        for key, value in tree.items():
            path = f"{prefix}{key}"
            if isinstance(value, dict):
                found |= keys(value, f"{path}.")
            else:
                found.add(path)
        return found

    assert keys(catalogs["en"]) == keys(catalogs["ar"])
