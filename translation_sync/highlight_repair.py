import math
from typing import Any, List

from translation_sync.exceptions import DocumentTooDeepError
from translation_sync.translatability import DEFAULT_POLICY


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def repair_indices(text: str, indices: List[Any]) -> List[int]:
    """
    Clamp word-position indices to the words actually present in ``text``.

    Each index is capped at the last word position, negative results are
    dropped, and the remainder is deduplicated and sorted. A text without
    words yields an empty list.

    Args:
        text: The (possibly translated) text the indices point into.
        indices: The word positions to repair.

    Returns:
        A strictly increasing list of valid word positions.
    """
    word_count = len(text.split())
    clamped = {min(int(index), word_count - 1) for index in indices if _is_number(index)}
    return sorted(index for index in clamped if index >= 0)


def repair_highlights(
        node: Any,
        text_field: str = DEFAULT_POLICY.highlight_text_field,
        indices_field: str = DEFAULT_POLICY.highlight_indices_field,
        max_depth: int = DEFAULT_POLICY.max_depth,
        _depth: int = 0
) -> int:
    """
    Repair every text/indices pair in a tree, in place.

    Args:
        node: The decoded tree.
        text_field: Name of the field holding the prose.
        indices_field: Name of the field holding the word positions.
        max_depth: Deepest container level visited before giving up.

    Returns:
        The number of index arrays that changed.

    Raises:
        DocumentTooDeepError: If containers nest deeper than ``max_depth``.
    """
    if isinstance(node, (dict, list)) and _depth > max_depth:
        raise DocumentTooDeepError(f"Nesting deeper than {max_depth} levels")

    changed = 0
    if isinstance(node, dict):
        text = node.get(text_field)
        indices = node.get(indices_field)
        if isinstance(text, str) and isinstance(indices, list):
            repaired = repair_indices(text, indices)
            if repaired != indices:
                node[indices_field] = repaired
                changed += 1
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return 0

    for child in children:
        changed += repair_highlights(child, text_field, indices_field, max_depth, _depth + 1)
    return changed
