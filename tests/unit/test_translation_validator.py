import unittest

from translation_sync.exceptions import DocumentTooDeepError
from translation_sync.findings import FindingKind
from translation_sync.translatability import ExemptionPolicy
from translation_sync.translation_validator import (
    audit_lang_records,
    audit_tree,
    check_encoding_and_mojibake,
    check_key_coverage,
    check_line_parity,
    check_placeholder_parity,
    find_mojibake_lines,
    find_untranslated_records,
    find_untranslated_tree,
    is_redundant,
    is_size_suspicious,
    iter_string_leaves,
    size_ratio
)


class TestTranslationValidator(unittest.TestCase):
    def test_check_key_coverage(self):
        base_keys = {'title', 'body', 'footer'}
        target_keys = {'title', 'footer', 'stale'}

        missing, extra = check_key_coverage(base_keys, target_keys)

        self.assertEqual(missing, {'body'})
        self.assertEqual(extra, {'stale'})

    def test_check_key_coverage_no_diff(self):
        missing, extra = check_key_coverage({'1', '2'}, {'1', '2'})

        self.assertEqual(missing, set())
        self.assertEqual(extra, set())

    def test_placeholder_parity_success(self):
        self.assertTrue(check_placeholder_parity("Hello %s, welcome to %s.", "Ola %s, bem-vindo a %s."))

    def test_placeholder_parity_missing_placeholder(self):
        self.assertFalse(check_placeholder_parity("Hello %s, you have %d items", "Ola, voce tem %d itens"))

    def test_placeholder_parity_reordered_placeholders(self):
        # Word order changes between languages, so only the multiset counts.
        self.assertTrue(check_placeholder_parity("Hello %s, you have %d items", "%d itens, Ola %s"))

    def test_placeholder_parity_different_placeholders(self):
        self.assertFalse(check_placeholder_parity("You have %d items", "Voce tem %i itens"))

    def test_placeholder_parity_repeated_placeholders(self):
        self.assertFalse(check_placeholder_parity("%s and %s", "%s e"))
        self.assertTrue(check_placeholder_parity("%s and %s", "%s e %s"))

    def test_placeholder_parity_ignores_literal_percent(self):
        self.assertTrue(check_placeholder_parity("50%% off", "50% de desconto"))

    def test_encoding_and_mojibake_success(self):
        self.assertEqual(check_encoding_and_mojibake("1 verfügbar#\n2 Espada de aço#\n"), [])

    def test_mojibake_detection(self):
        # "verfÃ¼gbar" is what "verfügbar" becomes after a latin-1 round trip.
        content = "1 verfÃ¼gbar#\n2 Ã¤Ã¶Ã¼#\n3 replacement char \uFFFD#"

        findings = check_encoding_and_mojibake(content)

        self.assertEqual(len(findings), 2)
        self.assertTrue(all(f.kind == FindingKind.ENCODING for f in findings))
        self.assertTrue(all(f.location == 'FILE_ENCODING' for f in findings))
        self.assertTrue(any("Potential mojibake detected" in f.reason for f in findings))
        self.assertTrue(any("replacement character" in f.reason for f in findings))

    def test_find_mojibake_lines(self):
        lines = find_mojibake_lines("ok\n  verfÃ¼gbar  \nfine")
        self.assertEqual(lines, [(2, "verfÃ¼gbar")])


class TestAuditTree(unittest.TestCase):

    def test_clean_translation_has_no_findings(self):
        reference = {"id": "ITEM_001", "label": "Sword"}
        translated = {"id": "ITEM_001", "label": "Espada"}

        self.assertEqual(audit_tree(reference, translated), [])

    def test_findings_in_walk_order(self):
        reference = {
            "title": "Hello %s",
            "icon": "images/a.png",
            "items": [{"name": "Sword"}],
        }
        translated = {"title": "Ola", "items": [{"name": ""}]}

        findings = audit_tree(reference, translated)

        self.assertEqual(
            [(f.kind, f.location) for f in findings],
            [
                (FindingKind.PLACEHOLDER_MISMATCH, "title"),
                (FindingKind.MISSING_KEY, "icon"),
                (FindingKind.EMPTY_TRANSLATION, "items[0]->name"),
            ]
        )
        self.assertEqual(
            findings[0].reason,
            "Placeholder mismatch (translated:  vs reference: %s)"
        )

    def test_technical_leaves_are_not_checked(self):
        reference = {"slot": "Main hand %s", "code": "ITEM_LONGSWORD_01"}
        translated = {"slot": "Mao", "code": "outro"}

        self.assertEqual(audit_tree(reference, translated), [])

    def test_non_string_translation_is_structural(self):
        findings = audit_tree({"label": "Sword"}, {"label": 5})

        self.assertEqual(len(findings), 1)
        self.assertEqual(findings[0].kind, FindingKind.STRUCTURAL_DIVERGENCE)
        self.assertTrue(findings[0].kind.is_technical)

    def test_shorter_highlight_arrays_are_not_missing_keys(self):
        reference = {"page": {"text": "one two three", "word_highlights": [0, 1, 2]}}
        translated = {"page": {"text": "um dois", "word_highlights": [0, 1]}}

        self.assertEqual(audit_tree(reference, translated), [])

    def test_any_path_naming_the_highlight_field_is_exempt(self):
        reference = {"page": {"word_highlights_alt": [0, 1, 2], "title": "Title"}}
        translated = {"page": {"word_highlights_alt": [0]}}

        findings = audit_tree(reference, translated)

        self.assertEqual([(f.kind, f.location) for f in findings], [(FindingKind.MISSING_KEY, "page->title")])

    def test_inputs_are_not_modified(self):
        reference = {"a": ["Hello %s"]}
        translated = {"a": ["%d"]}

        audit_tree(reference, translated)

        self.assertEqual(reference, {"a": ["Hello %s"]})
        self.assertEqual(translated, {"a": ["%d"]})

    def test_max_depth_is_enforced(self):
        reference = current = {}
        for _ in range(5):
            current["child"] = {}
            current = current["child"]

        with self.assertRaises(DocumentTooDeepError):
            audit_tree(reference, reference, ExemptionPolicy(max_depth=2))


class TestAuditLangRecords(unittest.TestCase):

    def test_missing_ids_are_tallied(self):
        reference = {'1': 'One', '2': 'Two', '3': 'Three', '4': 'Four', '5': 'Five'}
        translated = {'1': 'Um', '2': 'Dois', '3': 'Tres', '4': 'Quatro'}

        result = audit_lang_records(reference, translated)

        self.assertEqual(result.missing_ids, ['5'])
        self.assertEqual(result.structural_divergences, 1)
        self.assertEqual(result.findings, [])

    def test_coverage_lists_missing_and_extra_ids_in_file_order(self):
        reference = {'3': 'Three', '1': 'One', '2': 'Two'}
        translated = {'9': 'Nove', '1': 'Um', '7': 'Sete'}

        result = audit_lang_records(reference, translated)

        self.assertEqual(result.missing_ids, ['3', '2'])
        self.assertEqual(result.extra_ids, ['9', '7'])
        self.assertEqual(result.structural_divergences, 2)
        self.assertEqual(result.findings, [])

    def test_record_findings_use_id_locations(self):
        reference = {'1': 'Hello %s', '2': 'Bye'}
        translated = {'1': 'Ola', '2': ' '}

        result = audit_lang_records(reference, translated)

        self.assertEqual(
            [(f.kind, f.location) for f in result.findings],
            [(FindingKind.PLACEHOLDER_MISMATCH, 'ID 1'), (FindingKind.EMPTY_TRANSLATION, 'ID 2')]
        )


class TestLineParity(unittest.TestCase):

    def test_equal_counts(self):
        self.assertIsNone(check_line_parity("a\nb", "x\r\ny", is_tree=False))

    def test_differing_counts(self):
        finding = check_line_parity("a\nb\nc", "a\nb", is_tree=False)

        self.assertEqual(finding.kind, FindingKind.STRUCTURAL_DIVERGENCE)
        self.assertEqual(finding.location, 'FILE_STRUCTURE')
        self.assertEqual(finding.reference_value, 'LINES: 3')
        self.assertEqual(finding.translated_value, 'LINES: 2')

    def test_trees_with_highlights_are_exempt(self):
        translated = '{\n  "word_highlights": [0]\n}'
        self.assertIsNone(check_line_parity("{\n}", translated, is_tree=True))
        self.assertIsNotNone(check_line_parity("{\n}", translated, is_tree=False))


class TestUntranslatedAndSize(unittest.TestCase):

    def test_untranslated_tree_leaves(self):
        reference = {"a": "Open the door", "b": "ITEM_LONGSWORD_01", "c": "Close"}
        translated = {"a": "Open the door", "b": "ITEM_LONGSWORD_01", "c": "Fechar"}

        findings = find_untranslated_tree(reference, translated)

        self.assertEqual([f.location for f in findings], ["a"])
        self.assertEqual(findings[0].kind, FindingKind.UNTRANSLATED)

    def test_untranslated_records(self):
        reference = {'1': 'Open the door', '2': '###', '3': 'Close'}
        translated = {'1': 'Open the door', '2': '###', '3': 'Fechar'}

        findings = find_untranslated_records(reference, translated)

        self.assertEqual([f.location for f in findings], ['ID 1'])

    def test_iter_string_leaves(self):
        leaves = list(iter_string_leaves({"a": ["x", {"b": "y"}], "n": 1}, {"a": ["X"]}))

        self.assertEqual(leaves, [(("a", 0), "x", "X"), (("a", 1, "b"), "y", None)])

    def test_iter_string_leaves_enforces_max_depth(self):
        tree = {"a": {"b": {"c": "deep"}}}

        self.assertEqual(len(list(iter_string_leaves(tree, max_depth=2))), 1)
        with self.assertRaises(DocumentTooDeepError):
            list(iter_string_leaves(tree, max_depth=1))

    def test_size_ratio(self):
        self.assertEqual(size_ratio(100, 50), 0.5)
        self.assertEqual(size_ratio(0, 50), 1.0)
        self.assertTrue(is_size_suspicious(0.5))
        self.assertTrue(is_size_suspicious(3.0))
        self.assertFalse(is_size_suspicious(1.2))

    def test_is_redundant(self):
        self.assertTrue(is_redundant("a\r\nb\n", "a\nb"))
        self.assertFalse(is_redundant("a\nb", "a\nc"))


if __name__ == '__main__':
    unittest.main()
