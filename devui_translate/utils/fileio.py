# -*- coding: utf-8 -*-
"""File-system helpers: atomic writes, backups, diffs and source discovery."""

from __future__ import annotations

import difflib
import fnmatch
import hashlib
import os
import pathlib
import tempfile
from typing import Iterable, List, Optional

from devui_translate.errors import ResourceIOError
from .logging import translate_logger as logger

NEWLINE = "\n"


def read_text(path: pathlib.Path) -> str:
	try:
		return path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as e:
		raise ResourceIOError(f"Failed to read {path}: {e}", str(path)) from e


def atomic_write(path: pathlib.Path, data: str) -> None:
	"""Atomically write ``data`` to ``path``.

	This function writes to a temporary file in the same directory, fsyncs,
	then replaces the target. If the target exists, its permissions are
	preserved when possible.
	"""
	tmp_dir = path.parent
	try:
		tmp_dir.mkdir(parents=True, exist_ok=True)
	except OSError as e:
		raise ResourceIOError(f"Failed to create {tmp_dir}: {e}", str(tmp_dir)) from e

	orig_mode = None
	try:
		orig_mode = path.stat().st_mode & 0o777
	except OSError:
		orig_mode = None

	tmp_name = None
	try:
		with tempfile.NamedTemporaryFile("w", delete=False, dir=tmp_dir, encoding="utf-8", newline=NEWLINE) as tf:
			tmp_name = tf.name
			tf.write(data)
			tf.flush()
			os.fsync(tf.fileno())
		os.replace(tmp_name, str(path))
		tmp_name = None
	except OSError as e:
		raise ResourceIOError(f"Failed to write {path}: {e}", str(path)) from e
	finally:
		if tmp_name is not None and os.path.exists(tmp_name):
			os.unlink(tmp_name)

	if orig_mode is not None:
		try:
			os.chmod(str(path), orig_mode)
		except OSError:
			logger.debug("Failed to chmod %s", path)


def write_backup(path: pathlib.Path, text: str) -> pathlib.Path:
	"""Write ``<name>.<sha1[:8]>.bak`` next to ``path`` holding ``text``."""
	backup_name = f"{path.name}.{hashlib.sha1(text.encode('utf-8')).hexdigest()[:8]}.bak"
	backup_path = path.with_name(backup_name)
	atomic_write(backup_path, text)
	return backup_path


def unified_diff(a: str, b: str, path: pathlib.Path) -> str:
	return "".join(
		difflib.unified_diff(
			a.splitlines(keepends=True),
			b.splitlines(keepends=True),
			fromfile=f"a/{path}",
			tofile=f"b/{path}",
		)
	)


def is_ignored(base: pathlib.Path, path: pathlib.Path, ignore_globs: List[str]) -> bool:
	try:
		rel = str(path.relative_to(base)).replace("\\", "/")
	except ValueError:
		return True
	return any(fnmatch.fnmatch(rel, pat) for pat in ignore_globs)


def discover_sources(
	base: pathlib.Path,
	suffix: str = ".js",
	exclude_dirs: Iterable[str] = ("i18n",),
	ignore_globs: Optional[List[str]] = None,
) -> List[pathlib.Path]:
	"""Regular files below ``base`` with ``suffix``, sorted, minus excluded dirs and ignore globs."""
	excluded = set(exclude_dirs)
	ignore_globs = ignore_globs or []
	found = []
	for p in base.rglob(f"*{suffix}"):
		if not p.is_file():
			continue
		rel_parts = p.relative_to(base).parts[:-1]
		if excluded.intersection(rel_parts):
			continue
		if is_ignored(base, p, ignore_globs):
			continue
		found.append(p)
	return sorted(found)
