import logging
from typing import Any, List, Optional

from translation_sync import placeholder_scanner
from translation_sync.exceptions import DocumentTooDeepError
from translation_sync.findings import Finding, FindingKind, Path, format_path
from translation_sync.highlight_repair import repair_highlights
from translation_sync.translatability import DEFAULT_POLICY, ExemptionPolicy

logger = logging.getLogger("translation_sync")

# Stands in for a translated node that does not exist or has the wrong shape.
ABSENT = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TreeSynchronizer:
    """
    Rebuild a translated tree on the structure of its reference tree.

    The reference decides the shape: its keys, key order and array lengths.
    Translated strings are kept wherever they exist, with their placeholders
    re-stitched to the reference's order. Placeholder count mismatches do not
    stop the merge; they are collected in ``findings``.
    """

    def __init__(self, policy: ExemptionPolicy = DEFAULT_POLICY):
        self.policy = policy
        self.findings: List[Finding] = []

    def sync(self, reference: Any, translated: Any = ABSENT) -> Any:
        """
        Produce a new translated tree shaped like ``reference``.

        Args:
            reference: The decoded reference tree. It is never modified.
            translated: The decoded translated tree, or ``ABSENT``.

        Returns:
            The synchronized tree, with word highlights repaired.

        Raises:
            DocumentTooDeepError: If the reference nests deeper than the
                policy's ``max_depth``.
        """
        self.findings = []
        synced = self._sync_node(reference, translated, None, ())
        repaired = repair_highlights(
            synced,
            self.policy.highlight_text_field,
            self.policy.highlight_indices_field,
            self.policy.max_depth
        )
        if repaired:
            logger.debug("Repaired %d word highlight array(s).", repaired)
        return synced

    def _sync_node(self, reference: Any, translated: Any, key: Optional[str], path: Path) -> Any:
        if len(path) > self.policy.max_depth:
            raise DocumentTooDeepError(
                f"Nesting deeper than {self.policy.max_depth} levels at '{format_path(path)}'"
            )

        if isinstance(reference, str):
            return self._sync_string(reference, translated, key, path)

        if isinstance(reference, list):
            if reference and _is_number(reference[0]) and isinstance(translated, list):
                # Derived data such as repaired word highlights; the translation owns it.
                return list(translated)
            translated_items = translated if isinstance(translated, list) else []
            return [
                self._sync_node(
                    item,
                    translated_items[index] if index < len(translated_items) else ABSENT,
                    key,
                    path + (index,)
                )
                for index, item in enumerate(reference)
            ]

        if isinstance(reference, dict):
            translated_map = translated if isinstance(translated, dict) else {}
            return {
                child_key: self._sync_node(
                    child_value,
                    translated_map.get(child_key, ABSENT),
                    child_key,
                    path + (child_key,)
                )
                for child_key, child_value in reference.items()
            }

        return reference

    def _sync_string(self, reference: str, translated: Any, key: Optional[str], path: Path) -> str:
        if key in self.policy.technical_keys:
            return reference
        if not isinstance(translated, str) or translated == reference:
            return reference

        if not placeholder_scanner.counts_match(translated, reference):
            self.findings.append(Finding(
                kind=FindingKind.PLACEHOLDER_MISMATCH,
                location=format_path(path),
                reference_value=reference,
                translated_value=translated,
                reason=(f"Placeholder count differs (translated: {len(placeholder_scanner.extract(translated))}"
                        f" vs reference: {len(placeholder_scanner.extract(reference))}); left unaligned")
            ))
            return translated
        return placeholder_scanner.align_to(translated, reference)


def sync_tree(reference: Any, translated: Any = ABSENT, policy: ExemptionPolicy = DEFAULT_POLICY) -> Any:
    """Convenience wrapper returning only the synchronized tree."""
    return TreeSynchronizer(policy).sync(reference, translated)


def align_tree(reference: Any, translated: Any, policy: ExemptionPolicy = DEFAULT_POLICY) -> int:
    """
    Align placeholders in place over the nodes both trees share.

    No key is added or removed. Translated strings whose token count matches
    the reference are re-stitched in the reference's token order.

    Returns:
        The number of translated strings that changed.
    """
    return _align_node(reference, translated, 0, policy)


def _align_node(reference: Any, translated: Any, depth: int, policy: ExemptionPolicy) -> int:
    if depth > policy.max_depth:
        raise DocumentTooDeepError(f"Nesting deeper than {policy.max_depth} levels")

    if isinstance(reference, dict) and isinstance(translated, dict):
        keys = [key for key in reference if key in translated]
    elif isinstance(reference, list) and isinstance(translated, list):
        keys = range(min(len(reference), len(translated)))
    else:
        return 0

    changed = 0
    for key in keys:
        reference_value = reference[key]
        translated_value = translated[key]
        if isinstance(reference_value, str) and isinstance(translated_value, str):
            aligned = placeholder_scanner.align_to(translated_value, reference_value)
            if aligned != translated_value:
                translated[key] = aligned
                changed += 1
        else:
            changed += _align_node(reference_value, translated_value, depth + 1, policy)
    return changed
