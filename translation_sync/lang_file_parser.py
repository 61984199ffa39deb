import re
from typing import Dict, Tuple

# A record starts at the beginning of the text or of a line: "<id> <text>#".
RECORD_REGEX = re.compile(r'^(\d+)\s+(.*?)#', re.MULTILINE | re.DOTALL)


def parse_lang_file(content: str) -> Dict[str, str]:
    """
    Parse a line-record language file.

    Args:
        content (str): The raw file content.

    Returns:
        Dict[str, str]: The record texts keyed by their id, in file order.
            A repeated id keeps its first position and its last text.
    """
    records: Dict[str, str] = {}
    for match in RECORD_REGEX.finditer(content):
        records[match.group(1)] = match.group(2).strip()
    return records


def _collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def _sorted_ids(records: Dict[str, str]):
    return sorted(records.keys(), key=int)


def serialize_lang_file(records: Dict[str, str]) -> str:
    """
    Serialize records one entry per physical line, in ascending id order.

    Args:
        records (Dict[str, str]): The record texts keyed by id.

    Returns:
        str: The file content, every line in the form ``id text#``.
    """
    lines = []
    for record_id in _sorted_ids(records):
        lines.append(f"{record_id} {_collapse_whitespace(records[record_id])}#\n")
    return ''.join(lines)


def normalize_lang_records(
        reference: Dict[str, str],
        translated: Dict[str, str]
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Rebuild both record sets on the reference ids.

    Ids missing from the translated set take the reference text; ids only
    present in the translated set are dropped.
    """
    new_reference = {}
    new_translated = {}
    for record_id in _sorted_ids(reference):
        reference_text = _collapse_whitespace(reference[record_id])
        new_reference[record_id] = reference_text
        new_translated[record_id] = _collapse_whitespace(translated.get(record_id) or reference_text)
    return new_reference, new_translated


def update_lang_entry(content: str, record_id: str, text: str) -> str:
    """
    Replace the text of one record, or append the record if it is absent.

    Args:
        content: The raw file content.
        record_id: The numeric id of the record.
        text: The new text.

    Returns:
        The updated content.
    """
    entry_regex = re.compile(r'(^|\r?\n)' + re.escape(record_id) + r'\s+.*?#', re.DOTALL)
    if entry_regex.search(content):
        return entry_regex.sub(lambda m: f"{m.group(1)}{record_id} {text}#", content, count=1)
    return content.rstrip() + f"\n\n{record_id} {text}#\n"
