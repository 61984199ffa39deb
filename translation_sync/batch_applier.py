import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional

from translation_sync.document_io import (
    DEFAULT_INDENT,
    dump_tree,
    load_document,
    parse_tree,
    write_text
)
from translation_sync.exceptions import DocumentParseError
from translation_sync.findings import PATH_SEPARATOR, Path, parse_path
from translation_sync.lang_file_parser import update_lang_entry
from translation_sync.translatability import DEFAULT_POLICY

logger = logging.getLogger("translation_sync")

ENTRY_START = '---ENTRY START---'
ENTRY_END = '---ENTRY END---'


@dataclass
class BatchEntry:
    file: str
    text: str
    path: Optional[str] = None
    record_id: Optional[str] = None


def parse_batch(content: str, text_label: str = 'PT-BR') -> List[BatchEntry]:
    """
    Parse a batch of reviewed translations.

    Each entry sits between ``---ENTRY START---`` and ``---ENTRY END---`` and
    holds ``FILE:``, optionally ``PATH:`` or ``ID:``, and a ``<text_label>:``
    block that runs until the end marker and may span several lines.

    Args:
        content: The batch file content.
        text_label: Label of the translated text block.

    Returns:
        The entries that name a file and carry a non-empty text.
    """
    marker = f'{text_label}:'
    entries = []
    for chunk in content.split(ENTRY_START):
        if not chunk.strip():
            continue
        file = path = record_id = None
        text = ''
        for line in chunk.splitlines():
            line = line.strip()
            if line.startswith('FILE:'):
                file = line[len('FILE:'):].strip()
            elif line.startswith('PATH:'):
                path = line[len('PATH:'):].strip()
            elif line.startswith('ID:'):
                record_id = line[len('ID:'):].strip()
            elif line.startswith(marker):
                start = chunk.index(marker) + len(marker)
                end = chunk.find(ENTRY_END)
                text = (chunk[start:end] if end != -1 else chunk[start:]).strip()
                break
        if file and text:
            entries.append(BatchEntry(file=file, text=text, path=path or None, record_id=record_id or None))
    return entries


def _empty_container_for(segment: Any) -> Any:
    return [] if isinstance(segment, int) else {}


def set_path_value(tree: Any, path: Path, value: Any) -> Any:
    """
    Set ``value`` at ``path``, creating intermediate objects and arrays.

    Arrays are padded with None up to the requested index. A non-container
    root is replaced by a fresh container.

    Returns:
        The (possibly new) root.
    """
    if not path:
        return value
    if not isinstance(tree, (dict, list)) or isinstance(tree, list) != isinstance(path[0], int):
        tree = _empty_container_for(path[0])

    current = tree
    for segment, next_segment in zip(path, path[1:]):
        child = _get(current, segment)
        if not isinstance(child, (dict, list)) or isinstance(child, list) != isinstance(next_segment, int):
            child = _empty_container_for(next_segment)
            _put(current, segment, child)
        current = child
    _put(current, path[-1], value)
    return tree


def _get(container: Any, segment: Any) -> Any:
    if isinstance(container, list):
        return container[segment] if segment < len(container) else None
    return container.get(segment)


def _put(container: Any, segment: Any, value: Any) -> None:
    if isinstance(container, list):
        while len(container) <= segment:
            container.append(None)
        container[segment] = value
    else:
        container[segment] = value


def resolve_path(text: str, *trees: Any) -> Path:
    """
    Read a batch ``PATH`` against the trees it targets.

    A path with ``->`` is read as rendered. Without one it names a top-level
    key when any of ``trees`` holds that exact key, and is otherwise read in
    the older dotted notation.
    """
    if PATH_SEPARATOR in text or any(isinstance(tree, dict) and text in tree for tree in trees):
        return parse_path(text)
    return parse_path(text, legacy_dots=True)


def apply_entry(entry: BatchEntry, translated_root: str, reference_root: str, dry_run: bool = False,
                max_depth: int = DEFAULT_POLICY.max_depth) -> bool:
    """
    Apply one batch entry to the translated tree on disk.

    Returns:
        True if the entry was applied (or would be, in dry-run mode).
    """
    target_path = os.path.join(translated_root, entry.file)
    if not os.path.exists(target_path):
        logger.warning("Batch entry for '%s' skipped: file not found in translated folder.", entry.file)
        return False

    try:
        document = load_document(target_path, entry.file)
        tree = parse_tree(document, max_depth) if entry.path else None
    except DocumentParseError as e:
        logger.error("Batch entry for '%s' skipped: %s", entry.file, e)
        return False

    if entry.path:
        indent = DEFAULT_INDENT
        reference_tree = None
        reference_path = os.path.join(reference_root, entry.file)
        if os.path.exists(reference_path):
            try:
                reference = load_document(reference_path, entry.file)
                # Keep the reference file's indentation, like the normalize pass does.
                indent = reference.indent
                reference_tree = parse_tree(reference, max_depth)
            except DocumentParseError as e:
                logger.warning("Reference for '%s' not usable, resolving the path on the translation only: %s",
                               entry.file, e)

        tree = set_path_value(tree, resolve_path(entry.path, tree, reference_tree), entry.text)
        new_content = dump_tree(tree, indent)
        summary = f"JSON: {entry.file} -> {entry.path}"
    elif entry.record_id:
        new_content = update_lang_entry(document.raw, entry.record_id, entry.text)
        summary = f"TXT: {entry.file} -> ID {entry.record_id}"
    else:
        new_content = entry.text
        summary = f"FILE: {entry.file} (full replacement)"

    if dry_run:
        logger.info("[Dry Run] Would apply %s", summary)
    else:
        write_text(target_path, new_content, document.line_ending)
        logger.info("Applied %s", summary)
    return True


def apply_batch(content: str, translated_root: str, reference_root: str,
                text_label: str = 'PT-BR', dry_run: bool = False,
                max_depth: int = DEFAULT_POLICY.max_depth) -> int:
    """Apply every entry of a batch; returns the number of entries applied."""
    applied = 0
    for entry in parse_batch(content, text_label):
        if apply_entry(entry, translated_root, reference_root, dry_run, max_depth):
            applied += 1
    return applied
