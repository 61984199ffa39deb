import copy
import unittest

from translation_sync.exceptions import DocumentParseError, DocumentTooDeepError
from translation_sync.findings import FindingKind
from translation_sync.translatability import ExemptionPolicy
from translation_sync.tree_synchronizer import ABSENT, TreeSynchronizer, align_tree, sync_tree


def shape(value):
    """Structure of a tree with leaves blanked out."""
    if isinstance(value, dict):
        return {key: shape(child) for key, child in value.items()}
    if isinstance(value, list):
        return [shape(child) for child in value]
    return None


class TestTreeSynchronizer(unittest.TestCase):

    def test_translated_leaves_are_kept_and_missing_keys_added(self):
        reference = {"id": "ITEM_001", "label": "Sword"}
        translated = {"label": "Espada"}

        self.assertEqual(sync_tree(reference, translated), {"id": "ITEM_001", "label": "Espada"})

    def test_reference_key_order_and_extra_keys_dropped(self):
        reference = {"a": "Alpha", "b": "Beta"}
        translated = {"extra": "Sobra", "b": "Beta traduzido", "a": "Alfa"}

        result = sync_tree(reference, translated)

        self.assertEqual(list(result), ["a", "b"])
        self.assertEqual(result, {"a": "Alfa", "b": "Beta traduzido"})

    def test_technical_keys_keep_the_reference_value(self):
        reference = {"icon": "images/sword.png", "slot": "Main hand", "name": "Sword"}
        translated = {"icon": "imagens/espada.png", "slot": "Mao principal", "name": "Espada"}

        result = sync_tree(reference, translated)

        self.assertEqual(result, {"icon": "images/sword.png", "slot": "Main hand", "name": "Espada"})

    def test_technical_key_applies_to_array_elements(self):
        reference = {"action": ["Open the door", "Close it"]}
        translated = {"action": ["Abrir a porta", "Fechar"]}

        self.assertEqual(sync_tree(reference, translated), reference)

    def test_placeholders_are_realigned(self):
        reference = {"msg": "Hello %s, you have %d items"}
        translated = {"msg": "%d itens, Ola %s"}

        self.assertEqual(sync_tree(reference, translated), {"msg": "%s itens, Ola %d"})

    def test_placeholder_count_mismatch_is_reported_not_raised(self):
        synchronizer = TreeSynchronizer()
        reference = {"msg": "Hello %s, you have %d items"}
        translated = {"msg": "Ola %s"}

        result = synchronizer.sync(reference, translated)

        self.assertEqual(result, {"msg": "Ola %s"})
        self.assertEqual(len(synchronizer.findings), 1)
        finding = synchronizer.findings[0]
        self.assertEqual(finding.kind, FindingKind.PLACEHOLDER_MISMATCH)
        self.assertEqual(finding.location, "msg")

    def test_shape_mismatch_falls_back_to_reference(self):
        reference = {"menu": {"title": "Menu", "items": ["Start", "Quit"]}}
        translated = {"menu": "not an object"}

        self.assertEqual(sync_tree(reference, translated), reference)

    def test_non_string_translation_falls_back_to_reference(self):
        self.assertEqual(sync_tree({"label": "Sword"}, {"label": 12}), {"label": "Sword"})

    def test_shorter_translated_array_is_padded_from_reference(self):
        reference = {"lines": ["First line", "Second line", "Third line"]}
        translated = {"lines": ["Primeira linha"]}

        result = sync_tree(reference, translated)

        self.assertEqual(result["lines"], ["Primeira linha", "Second line", "Third line"])

    def test_numeric_arrays_are_kept_from_translation(self):
        reference = {"text": "one two three", "word_highlights": [0, 2]}
        translated = {"text": "um dois tres quatro", "word_highlights": [0, 3]}

        result = sync_tree(reference, translated)

        self.assertEqual(result["word_highlights"], [0, 3])

    def test_highlights_are_repaired_after_sync(self):
        reference = {"page": {"text": "one two three four five six", "word_highlights": [0, 2, 5]}}
        translated = {"page": {"text": "um dois"}}

        result = sync_tree(reference, translated)

        self.assertEqual(result["page"]["text"], "um dois")
        self.assertEqual(result["page"]["word_highlights"], [0, 1])

    def test_booleans_are_not_numeric_arrays(self):
        reference = {"flags": [True, False]}
        translated = {"flags": [False]}

        self.assertEqual(sync_tree(reference, translated), {"flags": [True, False]})

    def test_other_leaves_come_from_reference(self):
        reference = {"count": 3, "enabled": True, "extra": None}
        translated = {"count": 5, "enabled": False, "extra": "x"}

        self.assertEqual(sync_tree(reference, translated), reference)

    def test_inputs_are_not_modified(self):
        reference = {"page": {"text": "one two three", "word_highlights": [0, 2], "title": "Hi %s"}}
        translated = {"page": {"text": "um", "word_highlights": [0, 2], "title": "%s oi"}}
        reference_before = copy.deepcopy(reference)
        translated_before = copy.deepcopy(translated)

        sync_tree(reference, translated)

        self.assertEqual(reference, reference_before)
        self.assertEqual(translated, translated_before)

    def test_result_has_reference_shape(self):
        reference = {"a": [{"b": "Bee", "c": ["x y", {"d": "Dee"}]}], "e": {"f": 1}}
        for translated in (ABSENT, None, "text", [], {"a": "oops"}, {"a": [{"c": [1]}], "z": 2}):
            with self.subTest(translated=translated):
                self.assertEqual(shape(sync_tree(reference, translated)), shape(reference))

    def test_max_depth_is_enforced(self):
        reference = current = {}
        for _ in range(10):
            current["child"] = {}
            current = current["child"]

        with self.assertRaises(DocumentTooDeepError):
            TreeSynchronizer(ExemptionPolicy(max_depth=5)).sync(reference, {})
        self.assertTrue(issubclass(DocumentTooDeepError, DocumentParseError))


class TestAlignTree(unittest.TestCase):

    def test_aligns_common_strings_in_place(self):
        reference = {"a": "Hello %s, %d", "list": ["%s of %d"], "only_ref": "%s"}
        translated = {"a": "%d, Ola %s", "list": ["%d de %s"], "only_tr": "%d"}

        changed = align_tree(reference, translated)

        self.assertEqual(changed, 2)
        self.assertEqual(translated, {"a": "%s, Ola %d", "list": ["%s de %d"], "only_tr": "%d"})


if __name__ == '__main__':
    unittest.main()
