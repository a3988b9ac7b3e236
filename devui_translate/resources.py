# -*- coding: utf-8 -*-
"""
resources.py — read, merge, diff and write ``i18n/<locale>.js`` resource modules.

A resource module looks like::

	import { str } from '@lit/localize';

	export const templates = {
	    'ext-hello_world': 'Hello world',
	    'ext-hello_you_have_items': str`Hello ${0}, you have ${1} items`,
	};

In memory, template values use the numbered form (``{0}``); on disk they are
written as ``${0}`` inside a ``str`` tagged template.
"""

from __future__ import annotations

import dataclasses
import pathlib
import re
from typing import Dict, Iterable, Optional

from .literals import PLACEHOLDER_RE, escape_literal_indices, escape_quote, unescape_quote
from .utils.fileio import atomic_write, read_text
from .utils.logging import translate_logger

logger = translate_logger.getChild("resources")

RESOURCE_SUFFIX = ".js"
DEFAULT_TEMPLATE_MODULE = "@lit/localize"
TEMPLATE_TAG = "str"
ENTRY_INDENT = "    "

PLAIN_ENTRY_RE = re.compile(r"""['"]([^'"]+)['"]\s*:\s*(['"])((?:\\.|(?!\2).)*?)\2""")
TEMPLATE_ENTRY_RE = re.compile(r"""['"]([^'"]+)['"]\s*:\s*str\s*`((?:\\.|[^`\\])*)`""", re.S)
NUMBERED_RE = re.compile(r"\{\{(\d+)\}\}|\{(\d+)\}")
INDEX_PLACEHOLDER_RE = re.compile(r"^\s*(\d+)\s*$")


@dataclasses.dataclass(frozen=True)
class ResourceEntry:
	value: str
	is_template: bool = False


ResourceMap = Dict[str, ResourceEntry]


# ── Placeholder forms ─────────────────────────────────────────────────────────

def tagged_to_numbered(body: str) -> str:
	"""``${1} of ${0}`` -> ``{1} of {0}``; non-numeric expressions get positional indices."""
	index = 0

	def repl(m: re.Match) -> str:
		nonlocal index
		numeric = INDEX_PLACEHOLDER_RE.match(m.group(1))
		out = "{%s}" % (numeric.group(1) if numeric else index)
		index += 1
		return out

	return PLACEHOLDER_RE.sub(repl, escape_literal_indices(body))


def numbered_to_tagged(value: str) -> str:
	"""``{0}`` -> ``${0}``; escaped ``{{3}}`` text goes back to ``{3}``."""

	def repl(m: re.Match) -> str:
		if m.group(1) is not None:
			return "{%s}" % m.group(1)
		return "${%s}" % m.group(2)

	return NUMBERED_RE.sub(repl, value)


# ── Parse ─────────────────────────────────────────────────────────────────────

def parse_translations(content: str) -> ResourceMap:
	"""Scan plain and ``str``-tagged entries; a key present in both shapes ends up templated."""
	translations: ResourceMap = {}
	for m in PLAIN_ENTRY_RE.finditer(content):
		translations[m.group(1)] = ResourceEntry(unescape_quote(m.group(3), m.group(2)), False)
	for m in TEMPLATE_ENTRY_RE.finditer(content):
		translations[m.group(1)] = ResourceEntry(tagged_to_numbered(unescape_quote(m.group(2), "`")), True)
	return translations


def read_translations(path: pathlib.Path) -> ResourceMap:
	if not path.exists():
		return {}
	translations = parse_translations(read_text(path))
	logger.debug("Read %d entries from %s", len(translations), path)
	return translations


# ── Merge / diff ──────────────────────────────────────────────────────────────

def merge_translations(maps: Iterable[ResourceMap]) -> ResourceMap:
	"""Combine per-file maps; the first map to define a key keeps it."""
	merged: ResourceMap = {}
	for translations in maps:
		for key, entry in translations.items():
			merged.setdefault(key, entry)
	return merged


def merge_existing(existing: ResourceMap, extracted: ResourceMap) -> ResourceMap:
	"""Previously written entries win over re-extracted ones; new keys are added."""
	merged: ResourceMap = dict(extracted)
	merged.update(existing)
	return merged


def diff_translations(base: ResourceMap, variant: ResourceMap) -> ResourceMap:
	"""Entries of ``variant`` missing from ``base`` or different from it."""
	return {key: entry for key, entry in variant.items() if base.get(key) != entry}


# ── Serialize / write ─────────────────────────────────────────────────────────

def format_value(entry: ResourceEntry) -> str:
	if entry.is_template:
		return f"{TEMPLATE_TAG}`{escape_quote(numbered_to_tagged(entry.value), '`')}`"
	return "'" + escape_quote(entry.value, "'") + "'"


def serialize_translations(entries: ResourceMap, template_module: str = DEFAULT_TEMPLATE_MODULE) -> str:
	"""Render a resource module; an empty map renders as the empty string."""
	if not entries:
		return ""
	lines = []
	if any(entry.is_template for entry in entries.values()):
		lines.append(f"import {{ {TEMPLATE_TAG} }} from '{template_module}';")
		lines.append("")
	lines.append("export const templates = {")
	for key in sorted(entries):
		lines.append(f"{ENTRY_INDENT}'{key}': {format_value(entries[key])},")
	lines.append("};")
	return "\n".join(lines) + "\n"


def write_translation_file(
	folder: pathlib.Path,
	entries: ResourceMap,
	stem: str,
	template_module: str = DEFAULT_TEMPLATE_MODULE,
	dry_run: bool = False,
) -> Optional[pathlib.Path]:
	"""Write ``<folder>/<stem>.js``; nothing is written for an empty map."""
	if not entries:
		logger.info("No entries for %s; skipping", stem)
		return None
	target = folder / f"{stem}{RESOURCE_SUFFIX}"
	if dry_run:
		logger.info("Would write %s (%d entries)", target.name, len(entries))
		return target
	atomic_write(target, serialize_translations(entries, template_module))
	logger.info("Written %s", target.name)
	return target
