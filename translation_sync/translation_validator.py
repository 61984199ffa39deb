import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from translation_sync import placeholder_scanner
from translation_sync.exceptions import DocumentTooDeepError
from translation_sync.findings import Finding, FindingKind, Path, format_path
from translation_sync.translatability import (
    DEFAULT_POLICY,
    ExemptionPolicy,
    is_technical,
    is_translatable
)

# 'Ã' followed by a continuation-range character: UTF-8 text decoded as latin-1/cp1252.
MOJIBAKE_PATTERN = re.compile(r'\u00c3[\u0080-\u00bf]')
REPLACEMENT_CHARACTER = '\ufffd'

MIN_SIZE_RATIO = 0.8
MAX_SIZE_RATIO = 2.5

_MISSING = object()


@dataclass
class AuditResult:
    """Findings of a line-record audit plus the ids the two files do not share."""
    findings: List[Finding] = field(default_factory=list)
    missing_ids: List[str] = field(default_factory=list)
    extra_ids: List[str] = field(default_factory=list)

    @property
    def structural_divergences(self) -> int:
        return len(self.missing_ids)


def check_key_coverage(base_keys: Set[str], target_keys: Set[str]) -> Tuple[Set[str], Set[str]]:
    """
    Compares the keys of a translated document against its reference.

    Args:
        base_keys: Keys (or record ids) from the reference document.
        target_keys: Keys (or record ids) from the translated document.

    Returns:
        A tuple containing two sets:
        - missing_keys: Keys present in the reference but missing from the translation.
        - extra_keys: Keys present in the translation but absent from the reference.
    """
    missing_keys = base_keys - target_keys
    extra_keys = target_keys - base_keys
    return missing_keys, extra_keys


def check_placeholder_parity(base_string: str, target_string: str) -> bool:
    """
    Checks if the multiset of printf placeholders is identical between two strings.
    Reordering is allowed, since word order changes between languages.

    Args:
        base_string: The reference string.
        target_string: The translated string.

    Returns:
        True if both strings carry the same placeholders, False otherwise.
    """
    return placeholder_scanner.signature(base_string) == placeholder_scanner.signature(target_string)


def _child(container: Any, key: Any) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    if isinstance(container, list) and isinstance(key, int) and key < len(container):
        return container[key]
    return _MISSING


def _children(node: Any) -> Iterator[Tuple[Any, Any]]:
    if isinstance(node, dict):
        return iter(node.items())
    if isinstance(node, list):
        return enumerate(node)
    return iter(())


def _check_leaf(location: str, reference: str, translated: Any) -> List[Finding]:
    if not isinstance(translated, str):
        return [Finding(
            FindingKind.STRUCTURAL_DIVERGENCE, location, reference, translated,
            f"Expected a string, found {type(translated).__name__}"
        )]

    findings = []
    if not translated.strip() and reference.strip():
        findings.append(Finding(FindingKind.EMPTY_TRANSLATION, location, reference, translated,
                                "Empty translation"))
    if not check_placeholder_parity(reference, translated):
        translated_signature = placeholder_scanner.signature(translated)
        reference_signature = placeholder_scanner.signature(reference)
        findings.append(Finding(
            FindingKind.PLACEHOLDER_MISMATCH, location, reference, translated,
            f"Placeholder mismatch (translated: {translated_signature} vs reference: {reference_signature})"
        ))
    return findings


def audit_tree(reference: Any, translated: Any, policy: ExemptionPolicy = DEFAULT_POLICY) -> List[Finding]:
    """
    Compare a translated tree against its reference without modifying either.

    Args:
        reference: The decoded reference tree.
        translated: The decoded translated tree.
        policy: Exemption policy deciding which leaves are technical.

    Returns:
        The findings in reference walk order.

    Raises:
        DocumentTooDeepError: If the reference nests deeper than ``policy.max_depth``.
    """
    findings: List[Finding] = []
    _audit_node(reference, translated, (), policy, findings)
    return findings


def _audit_node(reference: Any, translated: Any, path: Path, policy: ExemptionPolicy,
                findings: List[Finding]) -> None:
    if len(path) > policy.max_depth:
        raise DocumentTooDeepError(f"Nesting deeper than {policy.max_depth} levels at '{format_path(path)}'")

    for key, reference_value in _children(reference):
        child_path = path + (key,)
        translated_value = _child(translated, key)

        if translated_value is _MISSING:
            # Paths under a highlight field are repaired per language and may be shorter.
            if policy.highlight_indices_field in format_path(path):
                continue
            findings.append(Finding(FindingKind.MISSING_KEY, format_path(child_path), reference_value, None,
                                    "Key missing in translation"))
        elif isinstance(reference_value, str):
            if is_technical(child_path, reference_value, policy):
                continue
            findings.extend(_check_leaf(format_path(child_path), reference_value, translated_value))
        elif isinstance(reference_value, (dict, list)):
            _audit_node(reference_value, translated_value, child_path, policy, findings)


def audit_lang_records(reference: Dict[str, str], translated: Dict[str, str]) -> AuditResult:
    """
    Compare two line-record sets by id.

    Ids absent from the translation are tallied in ``missing_ids`` rather than
    reported one finding per entry; ids only the translation carries go to
    ``extra_ids``. Both keep their file order.
    """
    missing, extra = check_key_coverage(set(reference), set(translated))
    result = AuditResult(
        missing_ids=[record_id for record_id in reference if record_id in missing],
        extra_ids=[record_id for record_id in translated if record_id in extra],
    )
    for record_id, reference_text in reference.items():
        if record_id not in missing:
            result.findings.extend(_check_leaf(f"ID {record_id}", reference_text, translated[record_id]))
    return result


def count_lines(raw: str) -> int:
    return len(raw.replace('\r\n', '\n').split('\n'))


def check_line_parity(
        reference_raw: str,
        translated_raw: str,
        is_tree: bool,
        policy: ExemptionPolicy = DEFAULT_POLICY
) -> Optional[Finding]:
    """
    Checks that a translated file has as many physical lines as its reference.

    Tree documents holding word highlight data are exempt, since repaired
    highlight arrays may serialize to a different number of lines.

    Returns:
        A finding when the counts differ and no exemption applies, else None.
    """
    reference_lines = count_lines(reference_raw)
    translated_lines = count_lines(translated_raw)
    if reference_lines == translated_lines:
        return None
    if is_tree and policy.highlight_indices_field in translated_raw:
        return None
    return Finding(
        FindingKind.STRUCTURAL_DIVERGENCE, 'FILE_STRUCTURE',
        f"LINES: {reference_lines}", f"LINES: {translated_lines}",
        "Line count differs from the reference"
    )


def check_encoding_and_mojibake(content: str) -> List[Finding]:
    """
    Checks decoded file content for common mojibake patterns.

    Args:
        content: The decoded file content.

    Returns:
        A list of encoding findings. An empty list means the content looks valid.
    """
    findings = []

    # 'Ã¡', 'Ã©', 'Ãª' and friends are what UTF-8 looks like after a latin-1 round trip.
    if MOJIBAKE_PATTERN.search(content):
        findings.append(Finding(
            FindingKind.ENCODING, 'FILE_ENCODING', None, None,
            "Potential mojibake detected. Found patterns like 'Ã¡', 'Ã©', etc."
        ))

    if REPLACEMENT_CHARACTER in content:
        findings.append(Finding(
            FindingKind.ENCODING, 'FILE_ENCODING', None, None,
            "Contains the Unicode replacement character (U+FFFD), indicating a previous encoding/decoding error."
        ))

    return findings


def find_mojibake_lines(content: str) -> List[Tuple[int, str]]:
    """Return ``(line_number, stripped_line)`` for every line with mojibake."""
    return [
        (number, line.strip())
        for number, line in enumerate(content.split('\n'), 1)
        if MOJIBAKE_PATTERN.search(line)
    ]


def iter_string_leaves(reference: Any, translated: Any = None, path: Path = (),
                       max_depth: int = DEFAULT_POLICY.max_depth) -> Iterator[Tuple[Path, str, Any]]:
    """
    Yield ``(path, reference_string, translated_value)`` for every string leaf.

    ``translated_value`` is None where the translated tree has no such node.

    Raises:
        DocumentTooDeepError: If the reference nests deeper than ``max_depth``.
    """
    if isinstance(reference, str):
        yield path, reference, translated
        return
    if isinstance(reference, (dict, list)) and len(path) > max_depth:
        raise DocumentTooDeepError(f"Nesting deeper than {max_depth} levels at '{format_path(path)}'")
    for key, reference_value in _children(reference):
        translated_value = _child(translated, key)
        yield from iter_string_leaves(
            reference_value,
            None if translated_value is _MISSING else translated_value,
            path + (key,),
            max_depth
        )


def find_untranslated_tree(reference: Any, translated: Any,
                           policy: ExemptionPolicy = DEFAULT_POLICY) -> List[Finding]:
    """Translatable reference strings whose translation is still identical."""
    return [
        Finding(FindingKind.UNTRANSLATED, format_path(path), text, translated_value,
                "Identical to the reference")
        for path, text, translated_value in iter_string_leaves(reference, translated, max_depth=policy.max_depth)
        if is_translatable(text, policy) and text == translated_value
    ]


def find_untranslated_records(reference: Dict[str, str], translated: Dict[str, str],
                              policy: ExemptionPolicy = DEFAULT_POLICY) -> List[Finding]:
    return [
        Finding(FindingKind.UNTRANSLATED, f"ID {record_id}", text, translated.get(record_id),
                "Identical to the reference")
        for record_id, text in reference.items()
        if is_translatable(text, policy) and text == translated.get(record_id)
    ]


def size_ratio(reference_size: int, translated_size: int) -> float:
    return translated_size / reference_size if reference_size > 0 else 1.0


def is_size_suspicious(ratio: float) -> bool:
    return ratio < MIN_SIZE_RATIO or ratio > MAX_SIZE_RATIO


def is_redundant(reference_raw: str, translated_raw: str) -> bool:
    """True when the translated file is the reference file, byte for byte modulo line endings."""
    return reference_raw.replace('\r\n', '\n').strip() == translated_raw.replace('\r\n', '\n').strip()
