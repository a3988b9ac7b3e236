#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
translate_devui.py — externalize Dev UI text and create translations.

Key points
- Scans ``deployment/src/main/resources/dev-ui/**/*.js`` of an extension (``i18n/`` excluded).
- Wraps user-visible literals in ``msg('…', { id: '<artifactId>-<text>' })`` and
  template literals in ``msg(str`…`)``; adds the localization import and
  ``updateWhenLocaleChanges(this)`` where needed. Re-running is a no-op.
- Writes ``i18n/en.js`` (existing entries are kept as curated), then one module
  per language and a sparse override module per dialect via an OpenAI-compatible API.
- Supports atomic writes, unified-diff dry-run, optional backups and ignore globs.

Usage Examples
--------------

1. Preview source changes without writing anything:
   python3 -m devui_translate /path/to/extension --dry-run --diff --skip-translation

2. Extract and translate to French and German with default dialects:
   OPENAI_API_KEY=sk-... python3 -m devui_translate /path/to/extension -l fr,de

3. Custom dialects:
   python3 -m devui_translate /path/to/extension -l fr,es -d fr-CA,es-MX
"""

from __future__ import annotations

import argparse
import datetime
import logging
import pathlib
import sys
from typing import Callable, List, Optional, Tuple

from devui_translate.descriptor import add_description_entry, read_descriptor, resolve_namespace
from devui_translate.errors import ConfigError, DevUITranslateError
from devui_translate.literals import extract_template_strings, extract_user_strings, unescape_quote
from devui_translate.orchestrator import DEFAULT_LANGUAGES, TranslationOrchestrator, resolve_dialects
from devui_translate.resources import (
	ResourceEntry,
	ResourceMap,
	merge_existing,
	merge_translations,
	read_translations,
	write_translation_file,
)
from devui_translate.rewriter import apply_localization
from devui_translate.translation_client import OpenAITranslator, TranslationError, Translator
from devui_translate.utils.config import TranslateSettings, load_settings
from devui_translate.utils.fileio import atomic_write, discover_sources, read_text, unified_diff, write_backup
from devui_translate.utils.logging import configure_level, temporarily, translate_logger

logger = translate_logger.getChild("cli")

DEV_UI_DIR = pathlib.Path("deployment") / "src" / "main" / "resources" / "dev-ui"
I18N_DIR = "i18n"
BASE_LOCALE = "en"


# ── Per-file processing ───────────────────────────────────────────────────────

def localize_content(
	content: str,
	namespace: str,
	module: str = "localization",
	hooks_only_when_used: bool = False,
) -> Tuple[str, ResourceMap]:
	"""Rewrite one file's content; returns (updated content, its base-locale entries)."""
	used_keys: set = set()
	user_strings = extract_user_strings(content, namespace, used_keys)
	templates = extract_template_strings(content, namespace, used_keys)
	updated = apply_localization(
		content, user_strings, templates, module=module, hooks_only_when_used=hooks_only_when_used
	)

	translations: ResourceMap = {
		key: ResourceEntry(unescape_quote(unescape_quote(literal, "'"), '"'), False)
		for literal, key in user_strings.items()
	}
	for template in templates:
		translations[template.key] = ResourceEntry(unescape_quote(template.numbered, "`"), True)
	return updated, translations


def process_file(
	p: pathlib.Path,
	namespace: str,
	module: str = "localization",
	dry: bool = False,
	backup: bool = False,
	emit_diff: bool = False,
	hooks_only_when_used: bool = False,
) -> Tuple[ResourceMap, Optional[str]]:
	text = read_text(p)
	new_text, translations = localize_content(text, namespace, module, hooks_only_when_used)
	if new_text == text:
		return translations, None
	if dry:
		logger.info("Would update %s with localization hooks", p.name)
		return translations, unified_diff(text, new_text, p) if emit_diff else None
	if backup:
		write_backup(p, text)
	atomic_write(p, new_text)
	logger.info("Updated %s with localization hooks", p.name)
	return translations, None


# ── Interactive inputs ────────────────────────────────────────────────────────

def split_csv(value: Optional[str]) -> List[str]:
	if not value:
		return []
	return [token.strip() for token in value.split(",") if token.strip()]


def ensure_user_inputs(args: argparse.Namespace, prompt: Callable[[str], str] = input) -> argparse.Namespace:
	"""Ask for whatever the command line left out."""
	if not args.extension_root:
		answer = (prompt("Enter path to the Quarkus extension root: ") or "").strip()
		if not answer:
			raise ConfigError("A path to the Quarkus extension root is required.")
		args.extension_root = answer
	if args.languages is None:
		args.languages = prompt("Enter comma separated base languages (e.g. fr,de) [default: fr,de]: ") or ""
	if args.dialects is None:
		args.dialects = prompt("Enter optional comma separated dialects (press Enter for defaults): ") or ""
	return args


# ── Pipeline ──────────────────────────────────────────────────────────────────

def build_translator(settings: TranslateSettings) -> OpenAITranslator:
	return OpenAITranslator(
		api_key=settings.openai_api_key,
		base_url=settings.openai_base_url,
		model=settings.model,
		timeout_seconds=settings.timeout_seconds,
		temperature=settings.temperature,
	)


def extract_base_translations(
	dev_ui_root: pathlib.Path,
	namespace: str,
	settings: TranslateSettings,
	dry: bool = False,
	backup: bool = False,
	emit_diff: bool = False,
	hooks_only_when_used: bool = False,
) -> Tuple[ResourceMap, List[str]]:
	per_file: List[ResourceMap] = []
	diffs: List[str] = []
	for p in discover_sources(dev_ui_root, exclude_dirs=(I18N_DIR,), ignore_globs=settings.ignore):
		translations, diff = process_file(
			p,
			namespace,
			module=settings.localization_module,
			dry=dry,
			backup=backup,
			emit_diff=emit_diff,
			hooks_only_when_used=hooks_only_when_used,
		)
		per_file.append(translations)
		if diff:
			diffs.append(diff)
	return merge_translations(per_file), diffs


def run(args: argparse.Namespace, translator: Optional[Translator] = None) -> int:
	try:
		args = ensure_user_inputs(args)
		base = pathlib.Path(args.extension_root).expanduser().resolve()
		settings = load_settings(base, pathlib.Path(args.config) if args.config else None)
		settings = settings.with_overrides(
			openai_api_key=args.openai_api_key,
			openai_base_url=args.base_url,
			model=args.model,
			languages=split_csv(args.languages),
			dialects=split_csv(args.dialects),
			ignore=args.ignore,
		)
	except ConfigError as e:
		logger.error("%s", e)
		return 2
	if not getattr(args, "verbose", False):
		configure_level(settings.log_level)

	dev_ui_root = base / DEV_UI_DIR
	if not dev_ui_root.is_dir():
		logger.error("No Dev UI resources found at %s", dev_ui_root)
		return 1

	languages = settings.languages or list(DEFAULT_LANGUAGES)
	descriptor = read_descriptor(base)
	namespace = resolve_namespace(descriptor)

	try:
		extracted, diffs = extract_base_translations(
			dev_ui_root,
			namespace,
			settings,
			dry=args.dry_run,
			backup=args.backup,
			emit_diff=args.diff,
			hooks_only_when_used=args.hooks_only_when_used,
		)
		add_description_entry(extracted, namespace, descriptor)

		i18n_folder = dev_ui_root / I18N_DIR
		if not args.dry_run:
			i18n_folder.mkdir(parents=True, exist_ok=True)
		english = merge_existing(read_translations(i18n_folder / f"{BASE_LOCALE}.js"), extracted)
		write_translation_file(i18n_folder, english, BASE_LOCALE, settings.template_module, dry_run=args.dry_run)

		if args.diff and diffs:
			sys.stdout.write("\n".join(diffs))

		if args.skip_translation:
			logger.info("Skipping translation (%d base entries)", len(english))
			return 0

		translator = translator or build_translator(settings)
		if isinstance(translator, OpenAITranslator) and not translator.api_key:
			logger.error("OpenAI API key is not configured. Set --openai-api-key or OPENAI_API_KEY.")
			return 1

		orchestrator = TranslationOrchestrator(
			translator, i18n_folder, template_module=settings.template_module, dry_run=args.dry_run
		)
		orchestrator.translate_all(english, languages, resolve_dialects(languages, settings.dialects))
	except OSError as e:
		logger.error("I/O failure: %s", e)
		return 2
	except (DevUITranslateError, TranslationError) as e:
		logger.error("%s", e)
		return 2

	print(f"Translation complete at {datetime.datetime.now().isoformat(timespec='seconds')}")
	return 0


def build_arg_parser() -> argparse.ArgumentParser:
	ap = argparse.ArgumentParser(
		prog="devui-translate",
		description="Externalize Dev UI text and create translations",
	)
	ap.add_argument("extension_root", nargs="?", help="Path to the Quarkus extension root")
	ap.add_argument("-l", "--languages", help="Comma separated base languages to generate (e.g. fr,de)")
	ap.add_argument("-d", "--dialects", help="Optional comma separated dialects (e.g. fr-CA,de-AT). Defaults are added for known languages")
	ap.add_argument("--openai-api-key", help="OpenAI API key (or set OPENAI_API_KEY)")
	ap.add_argument("--base-url", help="OpenAI-compatible API base URL (default https://api.openai.com/v1)")
	ap.add_argument("--model", help="Chat model used for translation")
	ap.add_argument("--config", help="Path to a devui-translate.json settings file")
	ap.add_argument("--dry-run", action="store_true", help="Report only; no writes")
	ap.add_argument("--diff", action="store_true", help="Print unified diff for source changes (with --dry-run)")
	ap.add_argument("--backup", action="store_true", help="Write .bak backups of rewritten sources")
	ap.add_argument("--ignore", action="append", default=[], help="Glob patterns (relative to dev-ui) to exclude (repeatable)")
	ap.add_argument("--skip-translation", action="store_true", help="Only extract and write en.js")
	ap.add_argument("--hooks-only-when-used", action="store_true", help="Add the localization import and locale subscription only to files calling msg()")
	ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
	return ap


def main(argv: Optional[List[str]] = None) -> int:
	args = build_arg_parser().parse_args(argv)
	if args.verbose:
		with temporarily(logging.DEBUG):
			return run(args)
	return run(args)


if __name__ == "__main__":
	sys.exit(main())
