"""Decide which leaf values are human-facing prose and which are technical."""
import re
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, List, Optional, Tuple, Union

from translation_sync.exceptions import DocumentTooDeepError

DEFAULT_TECHNICAL_KEYS = frozenset({
    'img', 'icon', 'path', 'glyph', 'slot', 'internal_name', 'item_id', 'direction', 'action'
})
DEFAULT_SENTINELS = frozenset({'null', 'DEPRECATED'})
DEFAULT_IGNORED_FILES = frozenset({'ignored_books.json', 'compiled_books.json'})

LONG_TEXT_THRESHOLD = 100
CONSTANT_MIN_LENGTH = 10

_ASCII_LETTER = re.compile(r'[a-zA-Z]')
_CONSTANT_IDENTIFIER = re.compile(r'^[A-Z0-9_]+$')
_NUMERIC_OR_SYMBOLS = re.compile(r'^[0-9\s.,%+\-!:?#$()\[\]{}]+$')
_HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{3,6}$')

PathSegment = Union[str, int]


@dataclass(frozen=True)
class ExemptionPolicy:
    """Configurable exemption rules shared by the synchronizer and the auditor."""
    technical_keys: FrozenSet[str] = DEFAULT_TECHNICAL_KEYS
    sentinels: FrozenSet[str] = DEFAULT_SENTINELS
    ignored_files: FrozenSet[str] = DEFAULT_IGNORED_FILES
    highlight_text_field: str = 'text'
    highlight_indices_field: str = 'word_highlights'
    max_depth: int = 200

    @classmethod
    def from_config(cls, section: Optional[dict]) -> 'ExemptionPolicy':
        """Build a policy from the ``exemptions`` section of config.yaml."""
        section = section or {}
        defaults = cls()
        return cls(
            technical_keys=frozenset(section.get('technical_keys', defaults.technical_keys)),
            sentinels=frozenset(section.get('sentinels', defaults.sentinels)),
            ignored_files=frozenset(section.get('ignored_files', defaults.ignored_files)),
            highlight_text_field=section.get('highlight_text_field', defaults.highlight_text_field),
            highlight_indices_field=section.get('highlight_indices_field', defaults.highlight_indices_field),
            max_depth=int(section.get('max_depth', defaults.max_depth)),
        )


DEFAULT_POLICY = ExemptionPolicy()


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    matches: Callable[[str], bool]
    verdict: bool


# Evaluated in order on the trimmed text; the first matching rule decides.
TRANSLATABILITY_RULES: List[ClassificationRule] = [
    ClassificationRule('long_text', lambda s: len(s) > LONG_TEXT_THRESHOLD, True),
    ClassificationRule('sentence', lambda s: ' ' in s and bool(_ASCII_LETTER.search(s)), True),
    ClassificationRule('file_path', lambda s: ('/' in s or '\\' in s) and ' ' not in s, False),
    ClassificationRule(
        'constant_identifier',
        lambda s: bool(_CONSTANT_IDENTIFIER.match(s)) and len(s) > CONSTANT_MIN_LENGTH,
        False
    ),
    ClassificationRule('numeric_or_symbols', lambda s: bool(_NUMERIC_OR_SYMBOLS.match(s)), False),
    ClassificationRule('hex_color', lambda s: bool(_HEX_COLOR.match(s)), False),
]


def classify(value: Any, policy: ExemptionPolicy = DEFAULT_POLICY) -> Tuple[bool, str]:
    """
    Classify a leaf value and report which rule decided it.

    Args:
        value: Any decoded leaf value.
        policy: The exemption policy providing the sentinel values.

    Returns:
        A ``(translatable, rule_name)`` tuple.
    """
    if not isinstance(value, str):
        return False, 'not_a_string'
    trimmed = value.strip()
    if not trimmed or trimmed in policy.sentinels:
        return False, 'empty_or_sentinel'

    for rule in TRANSLATABILITY_RULES:
        if rule.matches(trimmed):
            return rule.verdict, rule.name

    return bool(_ASCII_LETTER.search(trimmed)), 'has_letter'


def is_translatable(value: Any, policy: ExemptionPolicy = DEFAULT_POLICY) -> bool:
    translatable, _rule = classify(value, policy)
    return translatable


def last_key(key_or_path: Union[str, Tuple[PathSegment, ...]]) -> Optional[str]:
    """Return the key itself, or the last string segment of a path."""
    if isinstance(key_or_path, str):
        return key_or_path
    for segment in reversed(key_or_path):
        if isinstance(segment, str):
            return segment
    return None


def is_technical(
        key_or_path: Union[str, Tuple[PathSegment, ...]],
        value: Any,
        policy: ExemptionPolicy = DEFAULT_POLICY
) -> bool:
    """
    Check whether a leaf is exempt from translation and placeholder checks.

    Args:
        key_or_path: The object key holding the value, or the full path to it.
        value: The leaf value.
        policy: The exemption policy.

    Returns:
        True for non-strings, values under a technical key, and values that
        are not translatable prose.
    """
    if not isinstance(value, str):
        return True
    if last_key(key_or_path) in policy.technical_keys:
        return True
    return not is_translatable(value, policy)


def has_translatable_content(value: Any, policy: ExemptionPolicy = DEFAULT_POLICY, _depth: int = 0) -> bool:
    """
    True if any string leaf of a decoded tree is translatable.

    Raises:
        DocumentTooDeepError: If containers nest deeper than ``policy.max_depth``.
    """
    if isinstance(value, str):
        return is_translatable(value, policy)
    if isinstance(value, (list, dict)) and _depth > policy.max_depth:
        raise DocumentTooDeepError(f"Nesting deeper than {policy.max_depth} levels")
    if isinstance(value, list):
        return any(has_translatable_content(item, policy, _depth + 1) for item in value)
    if isinstance(value, dict):
        return any(has_translatable_content(item, policy, _depth + 1) for item in value.values())
    return False


_RECORD_PIECE = re.compile(r'^\s*\d+\s+(.*)$', re.DOTALL)


def has_translatable_records(raw: str, policy: ExemptionPolicy = DEFAULT_POLICY) -> bool:
    """True if a line-record or plain text file holds any translatable text."""
    for piece in raw.split('#'):
        match = _RECORD_PIECE.match(piece)
        if match and is_translatable(match.group(1), policy):
            return True
    return is_translatable(raw, policy)
