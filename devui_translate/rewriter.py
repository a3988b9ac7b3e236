# -*- coding: utf-8 -*-
"""
rewriter.py — route discovered literals through ``msg(...)`` lookups.

Safety measures
- Only literals that are still bare are replaced; a literal sitting next to an
  existing ``msg(`` marker, on an import line or inside template text is left alone.
- Templates are rewritten before plain literals, so strings inside placeholder
  expressions are wrapped once those expressions are hoisted into ``const``s.
- The localization import is ensured after the rewrite (optionally only in
  files that call ``msg(``); an existing import from the same module is
  updated in place, never duplicated.
- ``updateWhenLocaleChanges(this)`` is inserted once, after ``super(...)`` when
  the constructor starts with it.
- Running the rewrite on its own output changes nothing.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .literals import (
	TemplateLocalization,
	escape_quote,
	in_regions,
	is_already_wrapped,
	is_import_line,
	is_tagged_template,
	template_text_regions,
)
from .utils.logging import translate_logger

logger = translate_logger.getChild("rewriter")

NEWLINE = "\n"
INDENT_STEP = "    "

MSG_FUNC = "msg"
TEMPLATE_TAG = "str"
SUBSCRIBE_FUNC = "updateWhenLocaleChanges"
DEFAULT_LOCALIZATION_MODULE = "localization"

MSG_CALL_RE = re.compile(r"\bmsg\s*\(")
TAGGED_CALL_RE = re.compile(r"\bmsg\s*\(\s*str\s*`")
SUBSCRIPTION_RE = re.compile(r"\bupdateWhenLocaleChanges\s*\(\s*this\s*\)")
CONSTRUCTOR_RE = re.compile(r"constructor\s*\([^)]*\)\s*\{")
SUPER_CALL_RE = re.compile(r"\s*super\s*\(")
STATEMENT_END_RE = re.compile(r"[ \t]*;?")
IMPORT_NAMES_RE = re.compile(r"\{([^}]*)\}")


def _module_import_re(module: str) -> re.Pattern:
	return re.compile(r"""from\s+['"]""" + re.escape(module) + r"""['"]""")


# ── Literal replacement ───────────────────────────────────────────────────────

def wrap_literal(literal: str, quote: str, key: str) -> str:
	return f"{MSG_FUNC}({quote}{literal}{quote}, {{ id: '{key}' }})"


def wrap_template(template: TemplateLocalization) -> str:
	"""Self-invoking wrapper binding each placeholder expression, then ``msg(str`...`)``."""
	indent = template.indent
	lines = ["(() => {"]
	for index, expression in enumerate(template.expressions):
		lines.append(f"{indent}{INDENT_STEP}const placeholder{index} = {expression};")
	code = escape_quote(template.code_template, "`")
	lines.append(f"{indent}{INDENT_STEP}return {MSG_FUNC}({TEMPLATE_TAG}`{code}`, {{ id: '{template.key}' }});")
	lines.append(f"{indent}}})()")
	return NEWLINE.join(lines)


def replace_template(content: str, template: TemplateLocalization, first_only: bool = False) -> Tuple[str, int]:
	"""Replace bare occurrences of ``template.literal``; returns (content, count)."""
	replacement = wrap_template(template)
	parts: List[str] = []
	last = 0
	count = 0
	pos = content.find(template.literal)
	while pos >= 0:
		if not is_tagged_template(content, pos) and not is_already_wrapped(content, pos):
			parts.append(content[last:pos])
			parts.append(replacement)
			last = pos + len(template.literal)
			count += 1
			if first_only:
				break
		pos = content.find(template.literal, pos + len(template.literal))
	parts.append(content[last:])
	return "".join(parts), count


def replace_literal(content: str, literal: str, key: str, first_only: bool = False) -> Tuple[str, int]:
	"""Wrap bare quoted occurrences of ``literal`` (either quote style); returns (content, count)."""
	pattern = re.compile(r"""(['"])""" + re.escape(literal) + r"\1")
	regions = template_text_regions(content)
	parts: List[str] = []
	last = 0
	count = 0
	for m in pattern.finditer(content):
		if is_import_line(m.start(), content) or in_regions(m.start(), regions):
			continue
		if is_already_wrapped(content, m.start()):
			continue
		parts.append(content[last:m.start()])
		parts.append(wrap_literal(literal, m.group(1), key))
		last = m.end()
		count += 1
		if first_only:
			break
	parts.append(content[last:])
	return "".join(parts), count


# ── Import fix-up ─────────────────────────────────────────────────────────────

def build_import_line(names: Iterable[str], module: str) -> str:
	return f"import {{ {', '.join(names)} }} from '{module}';"


def _required_names(needs_template_support: bool) -> List[str]:
	if needs_template_support:
		return [MSG_FUNC, TEMPLATE_TAG, SUBSCRIBE_FUNC]
	return [MSG_FUNC, SUBSCRIBE_FUNC]


def _last_import_index(lines: List[str]) -> int:
	"""Index of the last line of the last top-level import (multi-line aware), or -1."""
	last_import_idx = -1
	in_multiline_import = False
	for i, line in enumerate(lines):
		stripped = line.strip()
		if in_multiline_import:
			if "}" in stripped:
				in_multiline_import = False
				last_import_idx = i
			continue
		if line.startswith("import "):
			if "{" in stripped and "}" not in stripped:
				in_multiline_import = True
			else:
				last_import_idx = i
	return last_import_idx


def _import_statement_start(lines: List[str], end_idx: int) -> int:
	"""Walk back from the ``from '...'`` line to the line opening the import."""
	for i in range(end_idx, -1, -1):
		if lines[i].lstrip().startswith("import"):
			return i
		if i < end_idx and ";" in lines[i]:
			break
	return end_idx


def ensure_localization_import(
	content: str,
	needs_template_support: bool,
	module: str = DEFAULT_LOCALIZATION_MODULE,
) -> str:
	lines = content.split(NEWLINE)
	module_re = _module_import_re(module)
	for i, line in enumerate(lines):
		if not module_re.search(line):
			continue
		start = _import_statement_start(lines, i)
		statement = NEWLINE.join(lines[start:i + 1])
		existing: List[str] = []
		names_match = IMPORT_NAMES_RE.search(statement)
		if names_match:
			existing = [n.strip() for n in names_match.group(1).split(",") if n.strip()]
		required = _required_names(needs_template_support or TEMPLATE_TAG in existing)
		names = required + [n for n in existing if n not in required]
		import_line = build_import_line(names, module)
		if statement == import_line:
			return content
		lines[start:i + 1] = [import_line]
		return NEWLINE.join(lines)

	import_line = build_import_line(_required_names(needs_template_support), module)
	lines.insert(_last_import_index(lines) + 1, import_line)
	return NEWLINE.join(lines)


# ── Locale-change subscription ────────────────────────────────────────────────

def _leading_super_end(content: str, pos: int) -> Optional[int]:
	"""End of a ``super(...)`` call starting at ``pos`` (nested parentheses and ``;`` included), else None."""
	m = SUPER_CALL_RE.match(content, pos)
	if not m:
		return None
	depth = 1
	cursor = m.end()
	while cursor < len(content) and depth:
		if content[cursor] == "(":
			depth += 1
		elif content[cursor] == ")":
			depth -= 1
		cursor += 1
	if depth:
		return None
	return STATEMENT_END_RE.match(content, cursor).end()


def ensure_locale_updates(content: str) -> str:
	if SUBSCRIPTION_RE.search(content):
		return content
	m = CONSTRUCTOR_RE.search(content)
	if not m:
		logger.debug("No constructor found; skipping %s(this)", SUBSCRIBE_FUNC)
		return content
	insert_pos = m.end()
	super_end = _leading_super_end(content, insert_pos)
	if super_end is not None:
		insert_pos = super_end
	line_start = content.rfind(NEWLINE, 0, m.start()) + 1
	base_indent = content[line_start:m.start()]
	if base_indent.strip():
		base_indent = ""
	statement = f"{NEWLINE}{base_indent}{INDENT_STEP}{SUBSCRIBE_FUNC}(this);"
	return content[:insert_pos] + statement + content[insert_pos:]


# ── Entry point ───────────────────────────────────────────────────────────────

def apply_localization(
	content: str,
	replacements: Dict[str, str],
	templates: List[TemplateLocalization],
	*,
	module: str = DEFAULT_LOCALIZATION_MODULE,
	first_only: bool = False,
	hooks_only_when_used: bool = False,
) -> str:
	"""Rewrite ``content`` so discovered literals go through ``msg(...)``.

	``replacements`` maps literal text to key; ``templates`` come from
	``extract_template_strings``. Literals no longer present are skipped.
	The localization import and the locale-change subscription are then
	ensured; with ``hooks_only_when_used`` only in files that call ``msg(``.
	"""
	updated = content
	uses_templates = False
	for template in templates:
		updated, count = replace_template(updated, template, first_only)
		if count:
			uses_templates = True
		else:
			logger.debug("Template %s not found verbatim; skipped", template.key)

	for literal, key in replacements.items():
		updated, count = replace_literal(updated, literal, key, first_only)
		if not count:
			logger.debug("Literal %s not found verbatim; skipped", key)

	if hooks_only_when_used and not MSG_CALL_RE.search(updated):
		return updated

	needs_template_support = uses_templates or bool(TAGGED_CALL_RE.search(updated))
	updated = ensure_localization_import(updated, needs_template_support, module)
	updated = ensure_locale_updates(updated)
	return updated
