"""Finding records and the path notation used to label them."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

PATH_SEPARATOR = '->'

PathSegment = Union[str, int]
Path = Tuple[PathSegment, ...]

_INDEXED_SEGMENT = re.compile(r'^(.*?)((?:\[\d+\])+)$')
_INDEX = re.compile(r'\[(\d+)\]')


class FindingKind(Enum):
    MISSING_KEY = 'missing_key'
    EMPTY_TRANSLATION = 'empty_translation'
    PLACEHOLDER_MISMATCH = 'placeholder_mismatch'
    STRUCTURAL_DIVERGENCE = 'structural_divergence'
    ENCODING = 'encoding'
    PARSE_FAILURE = 'parse_failure'
    UNTRANSLATED = 'untranslated'

    @property
    def is_technical(self) -> bool:
        """Technical findings break the files; the others are formatting issues."""
        return self in _TECHNICAL_KINDS


_TECHNICAL_KINDS = frozenset({
    FindingKind.MISSING_KEY,
    FindingKind.STRUCTURAL_DIVERGENCE,
    FindingKind.ENCODING,
    FindingKind.PARSE_FAILURE,
})


@dataclass(frozen=True)
class Finding:
    kind: FindingKind
    location: str
    reference_value: Any = None
    translated_value: Any = None
    reason: str = ''
    file: Optional[str] = None

    def in_file(self, file: str) -> 'Finding':
        """Return a copy of this finding labelled with a file name."""
        return Finding(self.kind, self.location, self.reference_value,
                       self.translated_value, self.reason, file)


def format_path(path: Path) -> str:
    """
    Render a path as ``key->key[0][1]->key``.

    Index segments are attached to the preceding key; a leading index is
    rendered on its own (``[0]->name``).
    """
    rendered: List[str] = []
    for segment in path:
        if isinstance(segment, int):
            if rendered:
                rendered[-1] += f'[{segment}]'
            else:
                rendered.append(f'[{segment}]')
        else:
            rendered.append(segment)
    return PATH_SEPARATOR.join(rendered)


def parse_path(text: str, legacy_dots: bool = False) -> Path:
    """
    Read a rendered path back into segments.

    Only ``->`` separates keys, so a key may itself contain dots. With
    ``legacy_dots`` a path without any ``->`` is split on ``.`` instead,
    which is how older batch files wrote their paths.
    """
    separator = '.' if legacy_dots and PATH_SEPARATOR not in text else PATH_SEPARATOR
    segments: List[PathSegment] = []
    for part in text.split(separator):
        part = part.strip()
        match = _INDEXED_SEGMENT.match(part)
        if match:
            if match.group(1):
                segments.append(match.group(1))
            segments.extend(int(index) for index in _INDEX.findall(match.group(2)))
        else:
            segments.append(part)
    return tuple(segments)
