"""Generate per-language resource modules and sparse per-dialect overrides.

Every batch (one language or one dialect) runs inside one translator session
so the HTTP session is released on every exit path. A failure for one entry
is logged and replaced by ``TRANSLATION_ERROR``; the batch carries on.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from babel import Locale, UnknownLocaleError

from .resources import (
    DEFAULT_TEMPLATE_MODULE,
    ResourceEntry,
    ResourceMap,
    diff_translations,
    write_translation_file,
)
from .translation_client import TranslationSession, Translator
from .utils.logging import translate_logger

LOG = translate_logger.getChild("orchestrator")

TRANSLATION_ERROR = "<translation error>"

DEFAULT_LANGUAGES = ("fr", "de")
DEFAULT_DIALECTS: Dict[str, List[str]] = {
    "fr": ["fr-FR", "fr-CA"],
    "de": ["de-AT", "de-CH"],
}


def language_label(code: str) -> str:
    """English display name for a language/dialect code (``fr-CA`` -> ``French (Canada)``)."""
    try:
        label = Locale.parse(code, sep="-").get_display_name("en")
    except (UnknownLocaleError, ValueError, TypeError):
        return code
    return label or code


def resolve_dialects(languages: Iterable[str], overrides: Optional[Sequence[str]] = None) -> Dict[str, List[str]]:
    """Group explicit dialect overrides by language, else fall back to the built-in defaults."""
    if overrides:
        grouped: Dict[str, List[str]] = {}
        for code in (c.strip() for c in overrides):
            if "-" not in code:
                continue
            grouped.setdefault(code.split("-", 1)[0], []).append(code)
        return grouped
    return {lang: list(DEFAULT_DIALECTS.get(lang, [])) for lang in languages}


class TranslationOrchestrator:
    def __init__(
        self,
        translator: Translator,
        i18n_folder: Path,
        *,
        template_module: str = DEFAULT_TEMPLATE_MODULE,
        dry_run: bool = False,
    ) -> None:
        self.translator = translator
        self.i18n_folder = i18n_folder
        self.template_module = template_module
        self.dry_run = dry_run

    def translate_entries(self, source: ResourceMap, label: str, session: TranslationSession) -> ResourceMap:
        target: ResourceMap = {}
        for key, entry in source.items():
            target[key] = ResourceEntry(self._translate(session, entry.value, label), entry.is_template)
        return target

    def translate_batch(self, source: ResourceMap, label: str) -> ResourceMap:
        with self.translator.session() as session:
            return self.translate_entries(source, label, session)

    def translate_language(self, base: ResourceMap, language: str, dialects: Sequence[str] = ()) -> Dict[str, ResourceMap]:
        """Write ``<language>.js`` and one override module per dialect; returns what was produced."""
        LOG.info("Translating %d entries to %s", len(base), language)
        language_map = self.translate_batch(base, language_label(language))
        self._write(language_map, language)
        produced = {language: language_map}
        for dialect in dialects:
            LOG.info("Translating %d entries to %s", len(base), dialect)
            dialect_map = self.translate_batch(base, language_label(dialect))
            overrides = diff_translations(language_map, dialect_map)
            self._write(overrides, dialect)
            produced[dialect] = overrides
        return produced

    def translate_all(self, base: ResourceMap, languages: Iterable[str], dialects_by_language: Dict[str, List[str]]) -> None:
        for language in (lang.strip() for lang in languages):
            if not language:
                continue
            self.translate_language(base, language, dialects_by_language.get(language, []))

    def _translate(self, session: TranslationSession, value: str, label: str) -> str:
        try:
            return session.translate(label, value)
        except Exception as e:
            LOG.error("Failed to translate '%s' to %s: %s", value, label, e)
            return TRANSLATION_ERROR

    def _write(self, entries: ResourceMap, stem: str) -> None:
        write_translation_file(self.i18n_folder, entries, stem, self.template_module, dry_run=self.dry_run)
