# -*- coding: utf-8 -*-
"""
Test suite for rewriter.py

Covers literal/template wrapping, the localization import fix-up, the
locale-change subscription and idempotence of the whole rewrite.
"""
from __future__ import annotations

import textwrap
import unittest

from devui_translate.literals import extract_template_strings, extract_user_strings
from devui_translate.rewriter import (
    apply_localization,
    ensure_locale_updates,
    ensure_localization_import,
    replace_literal,
    wrap_literal,
)

COMPONENT = textwrap.dedent(
    """\
    import { LitElement, html } from 'lit';

    export class QwcDemo extends LitElement {
        constructor() {
            super();
            this.title = 'Welcome to the demo';
        }

        render() {
            const count = this.items.length;
            const summary = `You have ${count} items`;
            return html`<h1>${this.title}</h1><p>${summary}</p>`;
        }
    }
    """
)


def localize(content: str, namespace: str = "qwc") -> str:
    used = set()
    strings = extract_user_strings(content, namespace, used)
    templates = extract_template_strings(content, namespace, used)
    return apply_localization(content, strings, templates)


class TestReplaceLiteral(unittest.TestCase):
    """Plain literal wrapping."""

    def test_wrap_literal_keeps_quote_style(self):
        self.assertEqual(
            wrap_literal("Hello world", '"', "ext-hello_world"),
            "msg(\"Hello world\", { id: 'ext-hello_world' })",
        )

    def test_all_occurrences_rewritten(self):
        content = "a = 'Hello world';\nb = \"Hello world\";\n"
        updated, count = replace_literal(content, "Hello world", "ext-hello_world")
        self.assertEqual(count, 2)
        self.assertEqual(
            updated,
            "a = msg('Hello world', { id: 'ext-hello_world' });\n"
            "b = msg(\"Hello world\", { id: 'ext-hello_world' });\n",
        )

    def test_first_only(self):
        content = "a = 'Hello world';\nb = 'Hello world';\n"
        updated, count = replace_literal(content, "Hello world", "ext-hello_world", first_only=True)
        self.assertEqual(count, 1)
        self.assertIn("b = 'Hello world';", updated)

    def test_wrapped_and_import_occurrences_untouched(self):
        content = "import x from 'Hello world';\na = msg('Hello world', { id: 'k' });\n"
        updated, count = replace_literal(content, "Hello world", "ext-hello_world")
        self.assertEqual(count, 0)
        self.assertEqual(updated, content)


class TestImportFixup(unittest.TestCase):
    """The ``localization`` import line."""

    def test_inserted_after_last_import(self):
        content = "import { LitElement } from 'lit';\nimport {\n    foo,\n} from 'bar';\n\nconst a = 1;\n"
        updated = ensure_localization_import(content, needs_template_support=False)
        self.assertEqual(
            updated,
            "import { LitElement } from 'lit';\nimport {\n    foo,\n} from 'bar';\n"
            "import { msg, updateWhenLocaleChanges } from 'localization';\n\nconst a = 1;\n",
        )

    def test_inserted_at_top_without_imports(self):
        updated = ensure_localization_import("const a = 1;\n", needs_template_support=True)
        self.assertTrue(updated.startswith("import { msg, str, updateWhenLocaleChanges } from 'localization';\nconst a"))

    def test_existing_import_extended(self):
        content = "import { msg } from 'localization';\n"
        updated = ensure_localization_import(content, needs_template_support=False)
        self.assertEqual(updated, "import { msg, updateWhenLocaleChanges } from 'localization';\n")

    def test_existing_names_kept(self):
        content = "import { msg, configureLocalization } from 'localization';\n"
        updated = ensure_localization_import(content, needs_template_support=True)
        self.assertEqual(
            updated,
            "import { msg, str, updateWhenLocaleChanges, configureLocalization } from 'localization';\n",
        )

    def test_template_support_never_removed(self):
        content = "import { msg, str, updateWhenLocaleChanges } from 'localization';\n"
        self.assertEqual(ensure_localization_import(content, needs_template_support=False), content)

    def test_multiline_import_replaced_in_place(self):
        content = "import {\n    msg,\n} from 'localization';\nconst a = 1;\n"
        updated = ensure_localization_import(content, needs_template_support=False)
        self.assertEqual(updated, "import { msg, updateWhenLocaleChanges } from 'localization';\nconst a = 1;\n")


class TestLocaleUpdates(unittest.TestCase):
    """``updateWhenLocaleChanges(this)`` insertion."""

    def test_inserted_after_super(self):
        content = "class A extends B {\n    constructor() {\n        super();\n        this.x = 1;\n    }\n}\n"
        self.assertEqual(
            ensure_locale_updates(content),
            "class A extends B {\n    constructor() {\n        super();\n"
            "        updateWhenLocaleChanges(this);\n        this.x = 1;\n    }\n}\n",
        )

    def test_inserted_at_constructor_start_without_super(self):
        content = "class A {\n    constructor() {\n        this.x = 1;\n    }\n}\n"
        self.assertEqual(
            ensure_locale_updates(content),
            "class A {\n    constructor() {\n        updateWhenLocaleChanges(this);\n        this.x = 1;\n    }\n}\n",
        )

    def test_no_constructor_unchanged(self):
        content = "export function f() { return 1; }\n"
        self.assertEqual(ensure_locale_updates(content), content)

    def test_inserted_after_super_with_nested_call(self):
        """Arguments of ``super(...)`` may themselves contain calls."""
        content = "class A extends B {\n    constructor(p) {\n        super(fix(p), { a: g() });\n        this.x = 1;\n    }\n}\n"
        self.assertEqual(
            ensure_locale_updates(content),
            "class A extends B {\n    constructor(p) {\n        super(fix(p), { a: g() });\n"
            "        updateWhenLocaleChanges(this);\n        this.x = 1;\n    }\n}\n",
        )

    def test_inserted_after_multiline_super(self):
        content = "class A extends B {\n    constructor() {\n        super(\n            fix(1),\n        );\n    }\n}\n"
        self.assertEqual(
            ensure_locale_updates(content),
            "class A extends B {\n    constructor() {\n        super(\n            fix(1),\n        );\n"
            "        updateWhenLocaleChanges(this);\n    }\n}\n",
        )

    def test_existing_subscription_unchanged(self):
        content = "class A {\n    constructor() {\n        updateWhenLocaleChanges(this);\n    }\n}\n"
        self.assertEqual(ensure_locale_updates(content), content)


class TestApplyLocalization(unittest.TestCase):
    """End-to-end rewrite of one component."""

    def test_component_rewrite(self):
        updated = localize(COMPONENT)
        self.assertIn("import { msg, str, updateWhenLocaleChanges } from 'localization';", updated)
        self.assertIn("        super();\n        updateWhenLocaleChanges(this);\n", updated)
        self.assertIn("this.title = msg('Welcome to the demo', { id: 'qwc-welcome_to_the_demo' });", updated)
        self.assertIn(
            "const summary = (() => {\n"
            "            const placeholder0 = count;\n"
            "            return msg(str`You have ${placeholder0} items`, { id: 'qwc-you_have_items' });\n"
            "        })();\n",
            updated,
        )
        self.assertIn("return html`<h1>${this.title}</h1><p>${summary}</p>`;", updated)
        self.assertTrue(updated.endswith("}\n"))

    def test_rewrite_is_idempotent(self):
        once = localize(COMPONENT)
        self.assertEqual(localize(once), once)

    def test_duplicate_literal_rewrite_is_idempotent(self):
        content = "class A {\n    constructor() {\n        this.a = 'Save changes';\n        this.b = 'Save changes';\n    }\n}\n"
        once = localize(content, "ext")
        self.assertEqual(once.count("msg('Save changes', { id: 'ext-save_changes' })"), 2)
        self.assertEqual(localize(once, "ext"), once)

    def test_hooks_added_to_file_without_text(self):
        """Import and subscription are ensured even when nothing was wrapped."""
        content = "import { html } from 'lit';\nclass A {\n    constructor() {\n        this.x = 1;\n    }\n}\n"
        self.assertEqual(
            localize(content),
            "import { html } from 'lit';\nimport { msg, updateWhenLocaleChanges } from 'localization';\n"
            "class A {\n    constructor() {\n        updateWhenLocaleChanges(this);\n        this.x = 1;\n    }\n}\n",
        )

    def test_hooks_only_when_used_leaves_file_without_text_unchanged(self):
        content = "import { html } from 'lit';\nexport const x = html`<div></div>`;\n"
        self.assertEqual(apply_localization(content, {}, [], hooks_only_when_used=True), content)

    def test_hooks_only_when_used_still_fixes_files_calling_msg(self):
        content = "class A {\n    constructor() {\n        this.t = 'Save changes';\n    }\n}\n"
        updated = apply_localization(content, {"Save changes": "ext-save_changes"}, [], hooks_only_when_used=True)
        self.assertTrue(updated.startswith("import { msg, updateWhenLocaleChanges } from 'localization';\n"))
        self.assertIn("updateWhenLocaleChanges(this);", updated)

    def test_tagged_template_survives_import_fixup(self):
        """A file already using ``msg(str`...`)`` keeps ``str`` in its import."""
        content = (
            "import { msg, updateWhenLocaleChanges } from 'localization';\n"
            "class A {\n    constructor() {\n        updateWhenLocaleChanges(this);\n"
            "        this.t = msg(str`Hi ${placeholder0}`, { id: 'ext-hi' });\n    }\n}\n"
        )
        updated = localize(content, "ext")
        self.assertTrue(updated.startswith("import { msg, str, updateWhenLocaleChanges } from 'localization';\n"))


if __name__ == "__main__":
    unittest.main()
