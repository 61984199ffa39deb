"""Loading and writing language documents with their on-disk conventions."""
import json
import os
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from translation_sync.exceptions import DocumentEncodingError, DocumentParseError, DocumentTooDeepError
from translation_sync.translatability import DEFAULT_POLICY

KIND_TREE = 'tree'
KIND_RECORDS = 'records'
KIND_TEXT = 'text'

DEFAULT_INDENT = 2

_LEADING_INDENT = re.compile(r'^[ \t]+', re.MULTILINE)


@dataclass
class Document:
    """A decoded language file: raw text plus the conventions to write it back with."""
    relative_path: str
    raw: str
    kind: str
    indent: Union[int, str] = DEFAULT_INDENT
    line_ending: str = '\n'


def detect_kind(relative_path: str) -> str:
    name = os.path.basename(relative_path).lower()
    if name.endswith('.json'):
        return KIND_TREE
    if name.endswith('en.txt'):
        return KIND_RECORDS
    return KIND_TEXT


def detect_indent(raw: str) -> Union[int, str]:
    """Return the first leading whitespace run of the text, or the default width."""
    match = _LEADING_INDENT.search(raw)
    return match.group(0) if match else DEFAULT_INDENT


def detect_line_ending(raw: str) -> str:
    return '\r\n' if '\r\n' in raw else '\n'


def load_document(file_path: str, relative_path: str) -> Document:
    """
    Read a language file from disk.

    Args:
        file_path: Absolute path of the file.
        relative_path: Path relative to its language root, used in findings.

    Returns:
        The document with LF line endings in ``raw``.

    Raises:
        DocumentEncodingError: If the file is not valid UTF-8.
    """
    try:
        with open(file_path, 'r', encoding='utf-8', newline='') as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise DocumentEncodingError(f"File '{relative_path}' is not a valid UTF-8 file: {e}") from e

    return Document(
        relative_path=relative_path,
        raw=content.replace('\r\n', '\n'),
        kind=detect_kind(relative_path),
        indent=detect_indent(content),
        line_ending=detect_line_ending(content),
    )


def parse_tree(document: Document, max_depth: int = DEFAULT_POLICY.max_depth) -> Any:
    """
    Decode a tree document.

    Raises:
        DocumentParseError: If the content is not valid JSON.
        DocumentTooDeepError: If containers nest deeper than ``max_depth``.
    """
    try:
        tree = json.loads(document.raw)
    except json.JSONDecodeError as e:
        raise DocumentParseError(f"Invalid JSON in '{document.relative_path}': {e}") from e
    except RecursionError as e:
        raise DocumentTooDeepError(f"Nesting too deep to decode in '{document.relative_path}'") from e
    check_depth(tree, max_depth, document.relative_path)
    return tree


def check_depth(tree: Any, max_depth: int, relative_path: str = '') -> None:
    """Raise DocumentTooDeepError if a container sits more than ``max_depth`` keys below the root."""
    pending = [(tree, 0)]
    while pending:
        node, depth = pending.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        if depth > max_depth:
            raise DocumentTooDeepError(f"Nesting deeper than {max_depth} levels in '{relative_path}'")
        pending.extend((child, depth + 1) for child in children)


def dump_tree(value: Any, indent: Union[int, str] = DEFAULT_INDENT) -> str:
    return json.dumps(value, ensure_ascii=False, indent=indent)


def write_text(file_path: str, content: str, line_ending: str = '\n') -> None:
    """Write LF-normalized content with the given line ending."""
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if line_ending != '\n':
        content = content.replace('\r\n', '\n').replace('\n', line_ending)
    with open(file_path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)


def iter_language_files(root: str, extensions: Optional[Iterable[str]] = None,
                        ignored: Iterable[str] = ()) -> List[str]:
    """
    List files below ``root`` with one of the given extensions.

    Args:
        root: Directory to walk.
        extensions: Extensions including the dot, e.g. ``.json``; None lists every file.
        ignored: File names to skip wherever they appear.

    Returns:
        Sorted paths relative to ``root``, with forward slashes.
    """
    if not os.path.isdir(root):
        return []
    extensions = {ext.lower() for ext in extensions} if extensions is not None else None
    ignored = set(ignored)
    results = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if filename in ignored:
                continue
            if extensions is None or os.path.splitext(filename)[1].lower() in extensions:
                relative = os.path.relpath(os.path.join(dirpath, filename), root)
                results.append(relative.replace(os.sep, '/'))
    return sorted(results)
