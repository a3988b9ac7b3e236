# -*- coding: utf-8 -*-
"""
Test suite for resources.py

Parsing, merge precedence, sparse dialect diffs and module rendering.
"""
from __future__ import annotations

import pathlib
import tempfile
import unittest

from devui_translate.resources import (
    ResourceEntry,
    diff_translations,
    format_value,
    merge_existing,
    merge_translations,
    parse_translations,
    read_translations,
    serialize_translations,
    tagged_to_numbered,
    write_translation_file,
)

RESOURCE = (
    "import { str } from '@lit/localize';\n"
    "\n"
    "export const templates = {\n"
    "    'ext-hello': 'Hello there',\n"
    "    'ext-items': str`You have ${0} of ${1}`,\n"
    "};\n"
)


class TestParse(unittest.TestCase):
    """Reading resource modules."""

    def test_parse_plain_and_templated(self):
        parsed = parse_translations(RESOURCE)
        self.assertEqual(
            parsed,
            {
                "ext-hello": ResourceEntry("Hello there", False),
                "ext-items": ResourceEntry("You have {0} of {1}", True),
            },
        )

    def test_serialize_reproduces_parsed_module(self):
        self.assertEqual(serialize_translations(parse_translations(RESOURCE)), RESOURCE)

    def test_reordered_placeholders_kept(self):
        self.assertEqual(tagged_to_numbered("${1} of ${0}"), "{1} of {0}")

    def test_named_placeholders_numbered_by_position(self):
        self.assertEqual(tagged_to_numbered("${a} and ${b}"), "{0} and {1}")

    def test_quotes_and_literal_braces_survive_rewrite(self):
        """Writing then reading a module gives back the same values."""
        entries = {
            "ext-dont": ResourceEntry("Don't do that", False),
            "ext-say": ResourceEntry('She said "hi"', False),
            "ext-step": ResourceEntry("Use `x` at step {{3}} of {0}", True),
        }
        self.assertEqual(parse_translations(serialize_translations(entries)), entries)

    def test_literal_braces_written_unchanged(self):
        rendered = format_value(ResourceEntry("Step {{3}} of {0}", True))
        self.assertEqual(rendered, "str`Step {3} of ${0}`")
        self.assertEqual(tagged_to_numbered("Step {3} of ${0}"), "Step {{3}} of {0}")

    def test_escaped_quote_read_unescaped(self):
        parsed = parse_translations("export const templates = {\n    'k': 'It\\'s here',\n};\n")
        self.assertEqual(parsed, {"k": ResourceEntry("It's here", False)})

    def test_missing_file_reads_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(read_translations(pathlib.Path(tmp) / "fr.js"), {})


class TestMerge(unittest.TestCase):
    """Merge precedence and dialect diffs."""

    def test_first_file_wins(self):
        merged = merge_translations(
            [
                {"k": ResourceEntry("from first")},
                {"k": ResourceEntry("from second"), "j": ResourceEntry("only second")},
            ]
        )
        self.assertEqual(merged, {"k": ResourceEntry("from first"), "j": ResourceEntry("only second")})

    def test_existing_entries_win(self):
        existing = {"k": ResourceEntry("Curated text")}
        extracted = {"k": ResourceEntry("Extracted text"), "n": ResourceEntry("New text")}
        self.assertEqual(
            merge_existing(existing, extracted),
            {"k": ResourceEntry("Curated text"), "n": ResourceEntry("New text")},
        )

    def test_diff_is_sparse(self):
        base = {"a": ResourceEntry("Bonjour"), "b": ResourceEntry("Voiture")}
        variant = {"a": ResourceEntry("Bonjour"), "b": ResourceEntry("Char"), "c": ResourceEntry("Nouveau")}
        self.assertEqual(diff_translations(base, variant), {"b": ResourceEntry("Char"), "c": ResourceEntry("Nouveau")})

    def test_identical_maps_diff_empty(self):
        base = {"a": ResourceEntry("Bonjour")}
        self.assertEqual(diff_translations(base, dict(base)), {})


class TestSerialize(unittest.TestCase):
    """Rendering and writing modules."""

    def test_empty_renders_empty(self):
        self.assertEqual(serialize_translations({}), "")

    def test_plain_only_has_no_import(self):
        rendered = serialize_translations({"b": ResourceEntry("Beta"), "a": ResourceEntry("Alpha")})
        self.assertEqual(rendered, "export const templates = {\n    'a': 'Alpha',\n    'b': 'Beta',\n};\n")

    def test_quotes_escaped(self):
        self.assertEqual(format_value(ResourceEntry("It's fine")), "'It\\'s fine'")
        self.assertEqual(format_value(ResourceEntry("Use `x` for {0}", True)), "str`Use \\`x\\` for ${0}`")

    def test_custom_template_module(self):
        rendered = serialize_translations({"a": ResourceEntry("{0}", True)}, template_module="lit-localize")
        self.assertTrue(rendered.startswith("import { str } from 'lit-localize';\n"))

    def test_write_skips_empty_map(self):
        with tempfile.TemporaryDirectory() as tmp:
            folder = pathlib.Path(tmp)
            self.assertIsNone(write_translation_file(folder, {}, "fr-CA"))
            self.assertFalse((folder / "fr-CA.js").exists())

    def test_write_and_dry_run(self):
        with tempfile.TemporaryDirectory() as tmp:
            folder = pathlib.Path(tmp)
            entries = {"a": ResourceEntry("Alpha")}
            target = write_translation_file(folder, entries, "fr", dry_run=True)
            self.assertEqual(target, folder / "fr.js")
            self.assertFalse(target.exists())
            write_translation_file(folder, entries, "fr")
            self.assertEqual(read_translations(folder / "fr.js"), entries)


if __name__ == "__main__":
    unittest.main()
