"""Tests for certportal.services.templates: closed template set, persisted choice, rendering."""

import unittest
from datetime import date

from certportal.core.errors import ValidationError
from certportal.models import TemplateSetting
from certportal.schemas.records import RecordData
from certportal.services import templates
from tests.support import make_session_factory

ALICE = RecordData(name="Alice", certificate="ML", college="MIT", link="http://x")


class TestActiveTemplate(unittest.TestCase):
    """get_active/set_active persist the singleton setting with upsert semantics."""

    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)

    def test_defaults_to_classic_when_unset(self) -> None:
        self.assertEqual(templates.get_active(self.db), "classic")

    def test_ensure_default_creates_once(self) -> None:
        templates.ensure_default(self.db)
        templates.set_active(self.db, "modern")
        templates.ensure_default(self.db)
        self.assertEqual(self.db.query(TemplateSetting).count(), 1)
        self.assertEqual(templates.get_active(self.db), "modern")

    def test_set_then_get(self) -> None:
        self.assertEqual(templates.set_active(self.db, "classic"), "classic")
        self.assertEqual(templates.get_active(self.db), "classic")
        templates.set_active(self.db, "modern")
        self.assertEqual(templates.get_active(self.db), "modern")
        self.assertEqual(self.db.query(TemplateSetting).count(), 1)

    def test_set_updates_timestamp(self) -> None:
        templates.set_active(self.db, "classic")
        first = self.db.query(TemplateSetting).one().updated_at
        templates.set_active(self.db, "modern")
        second = self.db.query(TemplateSetting).one().updated_at
        self.assertGreaterEqual(second, first)

    def test_invalid_name_leaves_setting_unchanged(self) -> None:
        templates.set_active(self.db, "modern")
        for bogus in ("bogus", "", None, "Modern"):
            with self.assertRaises(ValidationError):
                templates.set_active(self.db, bogus)
        self.assertEqual(templates.get_active(self.db), "modern")


class TestRender(unittest.TestCase):
    """render is a pure function of record, template name and issue date."""

    def test_both_templates_contain_record_fields_and_differ(self) -> None:
        issued = date(2026, 10, 18)
        classic = templates.render(ALICE, "classic", issued_on=issued)
        modern = templates.render(ALICE, "modern", issued_on=issued)
        for document in (classic, modern):
            self.assertIn("Alice", document)
            self.assertIn("ML", document)
            self.assertIn("October 18, 2026", document)
        self.assertNotEqual(classic, modern)
        self.assertIn("template-classic", classic)
        self.assertIn("template-modern", modern)

    def test_deterministic_for_fixed_date(self) -> None:
        issued = date(2026, 1, 5)
        self.assertEqual(
            templates.render(ALICE, "modern", issued_on=issued),
            templates.render(ALICE, "modern", issued_on=issued),
        )

    def test_record_values_are_escaped(self) -> None:
        record = RecordData(name="<script>alert(1)</script>", certificate="A & B")
        document = templates.render(record, "classic", issued_on=date(2026, 1, 1))
        self.assertNotIn("<script>alert(1)</script>", document)
        self.assertIn("&lt;script&gt;", document)
        self.assertIn("A &amp; B", document)

    def test_auto_print_hook_is_optional(self) -> None:
        issued = date(2026, 1, 1)
        self.assertNotIn("window.print()", templates.render(ALICE, "classic", issued_on=issued))
        self.assertIn(
            "window.print()",
            templates.render(ALICE, "classic", issued_on=issued, auto_print=True),
        )

    def test_missing_fields_render_empty(self) -> None:
        document = templates.render(RecordData(name="Dana"), "modern", issued_on=date(2026, 1, 1))
        self.assertIn("Dana", document)
        self.assertNotIn("None", document)

    def test_unknown_template_is_a_contract_violation(self) -> None:
        with self.assertRaises(KeyError):
            templates.render(ALICE, "bogus")

    def test_format_issue_date(self) -> None:
        self.assertEqual(templates.format_issue_date(date(2027, 7, 4)), "July 4, 2027")


if __name__ == "__main__":
    unittest.main()
