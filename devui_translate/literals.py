# -*- coding: utf-8 -*-
"""
literals.py — find user-visible text in Dev UI JavaScript sources.

Key points
- Pattern scanning, not parsing: quoted strings and backtick templates are found
  with regular expressions and filtered by heuristics.
- Literals that look like code (identifiers, paths, URLs, scoped packages) and
  literals on import lines are never candidates.
- Literals already wrapped in ``msg(...)``, or within a few characters of a
  ``msg(`` call, are skipped so re-runs are no-ops.
- Keys are ``<namespace>-<sanitized text>`` with ``_1``, ``_2`` … on collisions.
- Template placeholders get two parallel forms: ``{0}`` for resource files and
  ``${placeholder0}`` for generated code, numbered by the same scan.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Dict, Iterator, List, MutableSet, Tuple

# ── Patterns ──────────────────────────────────────────────────────────────────
STRING_LITERAL_RE = re.compile(r"""(['"])((?:\\.|(?!\1).)*?)\1""")
TEMPLATE_LITERAL_RE = re.compile(r"`((?:\\.|[^`\\])*)`", re.S)
PLACEHOLDER_RE = re.compile(r"\$\{([^}]*)\}")
ALREADY_WRAPPED_RE = re.compile(r"\bmsg\s*\(\s*(?:str\s*)?$")
MSG_MARKER_RE = re.compile(r"""\bmsg\s*\(\s*(?:str\s*)?[`'"]""")
LITERAL_INDEX_RE = re.compile(r"\{(\d+)\}")
CODE_TOKEN_RE = re.compile(r"^[A-Za-z0-9_./@:-]+$")
KEY_UNSAFE_RE = re.compile(r"[^a-z0-9]+")
TAG_CHAR_RE = re.compile(r"[\w$]")

MIN_LENGTH = 3
MAX_LENGTH = 120
MARKER_WINDOW = 8
WRAP_PREFIX_WINDOW = 16


@dataclasses.dataclass(frozen=True)
class SourceSpan:
	text: str
	kind: str  # "'", '"' or "`"
	start: int
	end: int
	line: str


@dataclasses.dataclass(frozen=True)
class TemplateLocalization:
	literal: str  # original template including backticks
	numbered: str
	code_template: str
	key: str
	indent: str
	expressions: Tuple[str, ...] = ()


# ── Line helpers ──────────────────────────────────────────────────────────────

def line_bounds(content: str, index: int) -> Tuple[int, int]:
	start = content.rfind("\n", 0, index) + 1
	end = content.find("\n", index)
	if end < 0:
		end = len(content)
	return start, end


def line_at(content: str, index: int) -> str:
	start, end = line_bounds(content, index)
	return content[start:end]


def is_import_line(start_index: int, content: str) -> bool:
	return line_at(content, start_index).lstrip().startswith("import ")


def determine_indent(content: str, start_index: int) -> str:
	"""Leading whitespace of the line holding ``start_index`` (up to that index)."""
	cursor, _ = line_bounds(content, start_index)
	indent = []
	while cursor < start_index and content[cursor].isspace():
		indent.append(content[cursor])
		cursor += 1
	return "".join(indent)


def is_already_wrapped(content: str, start_index: int) -> bool:
	"""True when the literal opening at ``start_index`` is the first argument of ``msg(``."""
	return bool(ALREADY_WRAPPED_RE.search(content[max(0, start_index - WRAP_PREFIX_WINDOW):start_index]))


def near_msg_marker(content: str, start_index: int, length: int) -> bool:
	"""A localization call within ``MARKER_WINDOW`` characters on either side of the literal."""
	window = content[max(0, start_index - MARKER_WINDOW):start_index + length + MARKER_WINDOW]
	return bool(MSG_MARKER_RE.search(window))


# ── Classification ────────────────────────────────────────────────────────────

def looks_like_code_token(text: str) -> bool:
	"""Bare identifiers, dotted names, paths and scoped packages."""
	return not re.search(r"\s", text) and bool(CODE_TOKEN_RE.match(text))


def is_user_visible_candidate(literal: str, start_index: int, content: str) -> bool:
	"""Decide whether ``literal`` (found at ``start_index``) is translatable UI text."""
	trimmed = literal.strip()
	if len(trimmed) < MIN_LENGTH or len(trimmed) > MAX_LENGTH:
		return False
	if not any(ch.isalpha() for ch in trimmed):
		return False
	if looks_like_code_token(trimmed):
		return False
	if trimmed.startswith("http") or trimmed.startswith("@"):
		return False
	if is_import_line(start_index, content):
		return False
	if is_already_wrapped(content, start_index):
		return False
	return not near_msg_marker(content, start_index, len(trimmed))


# ── Keys ──────────────────────────────────────────────────────────────────────

def sanitize_key_text(literal: str) -> str:
	sanitized = KEY_UNSAFE_RE.sub("_", literal.lower()).strip("_")
	return sanitized or "text"


def build_key(namespace: str, literal: str, used_keys: MutableSet[str]) -> str:
	"""Derive a unique resource key and record it in ``used_keys``."""
	sanitized = sanitize_key_text(literal)
	candidate = f"{namespace}-{sanitized}"
	counter = 1
	while candidate in used_keys:
		candidate = f"{namespace}-{sanitized}_{counter}"
		counter += 1
	used_keys.add(candidate)
	return candidate


# ── Template placeholders ─────────────────────────────────────────────────────

def _replace_placeholders(template: str, fmt: str) -> str:
	index = 0

	def repl(m: re.Match) -> str:
		nonlocal index
		out = fmt.format(index=index)
		index += 1
		return out

	return PLACEHOLDER_RE.sub(repl, template)


def escape_literal_indices(template: str) -> str:
	"""Double the braces of ``{N}`` in template text so it cannot pass for a placeholder index."""
	parts: List[str] = []
	last = 0
	for m in PLACEHOLDER_RE.finditer(template):
		parts.append(LITERAL_INDEX_RE.sub(r"{{\1}}", template[last:m.start()]))
		parts.append(m.group(0))
		last = m.end()
	parts.append(LITERAL_INDEX_RE.sub(r"{{\1}}", template[last:]))
	return "".join(parts)


def number_placeholders(template: str) -> str:
	"""``Hello ${name}`` -> ``Hello {0}`` (resource-file form); literal ``{3}`` text becomes ``{{3}}``."""
	return _replace_placeholders(escape_literal_indices(template), "{{{index}}}")


def name_placeholders(template: str) -> str:
	"""``Hello ${name}`` -> ``Hello ${placeholder0}`` (generated-code form)."""
	return _replace_placeholders(template, "${{placeholder{index}}}")


def placeholder_expressions(template: str) -> Tuple[str, ...]:
	return tuple(m.group(1).strip() for m in PLACEHOLDER_RE.finditer(template))


def strip_placeholders(template: str) -> str:
	return PLACEHOLDER_RE.sub(" ", template).strip()


def has_placeholders(template: str) -> bool:
	return "${" in template


# ── Escaping ──────────────────────────────────────────────────────────────────

def escape_quote(value: str, quote: str) -> str:
	"""Escape every ``quote`` not already escaped by an odd run of backslashes."""

	def repl(m: re.Match) -> str:
		slashes = m.group(1)
		return slashes + ("\\" if len(slashes) % 2 == 0 else "") + quote

	return re.sub(r"(\\*)" + re.escape(quote), repl, value)


def unescape_quote(value: str, quote: str) -> str:
	"""Inverse of ``escape_quote``: drop the backslash escaping each ``quote``."""

	def repl(m: re.Match) -> str:
		slashes = m.group(1)
		return (slashes[:-1] if len(slashes) % 2 else slashes) + quote

	return re.sub(r"(\\*)" + re.escape(quote), repl, value)


# ── Scanning ──────────────────────────────────────────────────────────────────

def is_tagged_template(content: str, backtick_index: int) -> bool:
	"""``html`...```, ``css`...``` and friends: an identifier right before the backtick."""
	return backtick_index > 0 and bool(TAG_CHAR_RE.match(content[backtick_index - 1]))


def template_text_regions(content: str) -> List[Tuple[int, int]]:
	"""Absolute ranges of template literal text, excluding ``${...}`` expressions."""
	regions: List[Tuple[int, int]] = []
	for m in TEMPLATE_LITERAL_RE.finditer(content):
		body_start = m.start(1)
		body = m.group(1)
		last = 0
		for p in PLACEHOLDER_RE.finditer(body):
			regions.append((body_start + last, body_start + p.start()))
			last = p.end()
		regions.append((body_start + last, body_start + len(body)))
	return regions


def in_regions(index: int, regions: List[Tuple[int, int]]) -> bool:
	return any(start <= index < end for start, end in regions)


def scan_string_literals(content: str) -> Iterator[SourceSpan]:
	regions = template_text_regions(content)
	for m in STRING_LITERAL_RE.finditer(content):
		if in_regions(m.start(), regions):
			continue
		yield SourceSpan(m.group(2), m.group(1), m.start(), m.end(), line_at(content, m.start()))


def scan_template_literals(content: str) -> Iterator[SourceSpan]:
	for m in TEMPLATE_LITERAL_RE.finditer(content):
		if is_tagged_template(content, m.start()):
			continue
		yield SourceSpan(m.group(1), "`", m.start(), m.end(), line_at(content, m.start()))


# ── Extraction ────────────────────────────────────────────────────────────────

def extract_user_strings(content: str, namespace: str, used_keys: MutableSet[str]) -> Dict[str, str]:
	"""Map each distinct translatable quoted literal to its key, in order of first appearance."""
	entries: Dict[str, str] = {}
	for span in scan_string_literals(content):
		if span.text in entries:
			continue
		if not is_user_visible_candidate(span.text, span.start, content):
			continue
		entries[span.text] = build_key(namespace, span.text, used_keys)
	return entries


def build_template_localization(span: SourceSpan, content: str, key: str) -> TemplateLocalization:
	return TemplateLocalization(
		literal=f"`{span.text}`",
		numbered=number_placeholders(span.text),
		code_template=name_placeholders(span.text),
		key=key,
		indent=determine_indent(content, span.start),
		expressions=placeholder_expressions(span.text),
	)


def extract_template_strings(content: str, namespace: str, used_keys: MutableSet[str]) -> List[TemplateLocalization]:
	"""Interpolating, untagged template literals whose text part is translatable."""
	templates: List[TemplateLocalization] = []
	seen = set()
	for span in scan_template_literals(content):
		if not has_placeholders(span.text) or span.text in seen:
			continue
		candidate = strip_placeholders(span.text)
		if not is_user_visible_candidate(candidate, span.start, content):
			continue
		seen.add(span.text)
		key = build_key(namespace, candidate, used_keys)
		templates.append(build_template_localization(span, content, key))
	return templates
