"""Markdown renderings of findings and string listings."""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from translation_sync.findings import Finding

CHECKED_PREFIX = '- [x] '


def _escape_cell(value: Any) -> str:
    return str(value).replace('|', '\\|').replace('\n', ' ')


def _timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')


def _display(value: Any) -> str:
    return '' if value is None else str(value)


def render_issues_report(findings: Iterable[Finding], reference_label: str = 'EN',
                         translated_label: str = 'PT-BR') -> str:
    """Render findings as review entries, one block per finding."""
    blocks = []
    for finding in findings:
        blocks.append(
            "---ENTRY START---\n"
            f"FILE: {_display(finding.file)}\n"
            f"PATH: {finding.location}\n"
            f"{reference_label}:\n{_display(finding.reference_value)}\n"
            f"{translated_label} (Error):\n{_display(finding.translated_value)}\n"
            f"(Reason: {finding.reason})\n"
            "---ENTRY END---\n"
        )
    return '\n'.join(blocks)


def render_untranslated_report(findings_by_file: Dict[str, List[Finding]],
                               now: Optional[datetime] = None) -> str:
    total = sum(len(findings) for findings in findings_by_file.values())
    lines = [
        '# Untranslated Strings Report',
        f'Date: {_timestamp(now)}',
        f'Total: {total}',
        '',
    ]
    for file, findings in findings_by_file.items():
        if not findings:
            continue
        lines.append(f'## File: {file} ({len(findings)} pending)')
        lines.append('| Path/ID | Original Text |')
        lines.append('|---|---|')
        for finding in findings:
            lines.append(f'| {finding.location} | {_escape_cell(finding.reference_value)} |')
        lines.append('')
    return '\n'.join(lines) + '\n'


def render_comparison(entries_by_file: Dict[str, List[Tuple[str, str, str]]],
                      reference_label: str = 'EN', translated_label: str = 'PT-BR') -> str:
    """
    Render the side-by-side review document.

    Args:
        entries_by_file: For each file, ``(location, reference, translated)`` rows.
            A location starting with ``ID `` is written as an ``ID:`` line; an
            empty location marks a whole-file entry.
    """
    lines = [
        '# Translation Comparison (Manual Review)',
        '',
        f'Instructions: remove the entries that are CORRECT. Keep only those whose '
        f'{translated_label} field needs a fix.',
        '',
    ]
    for file, entries in entries_by_file.items():
        if not entries:
            continue
        lines.append(f'## FILE: {file}')
        lines.append('')
        for location, reference, translated in entries:
            lines.append('---ENTRY---')
            lines.append(f'FILE: {file}')
            if not location:
                lines.append(f'{reference_label}:\n{reference}')
                lines.append(f'{translated_label}:\n{translated}')
            else:
                if location.startswith('ID '):
                    lines.append(f'ID: {location[3:]}')
                else:
                    lines.append(f'PATH: {location}')
                lines.append(f'{reference_label}: {reference}')
                lines.append(f'{translated_label}: {translated}')
            lines.append('')
        lines.append('---')
        lines.append('')
    return '\n'.join(lines) + '\n'


def render_check_report(sections: Sequence[Tuple[str, str, List[Tuple[Any, ...]]]],
                        now: Optional[datetime] = None) -> str:
    """
    Render the listing of translatable strings per file.

    Args:
        sections: ``(file, kind, rows)`` where kind is ``tree`` (rows of
            ``(line, path, value)``), ``records`` (rows of ``(id, value)``),
            ``text`` (a single row holding the raw text) or ``error``
            (a single row holding the message).
    """
    lines = [
        '# Check Report',
        '',
        f'Date: {_timestamp(now)}',
        '',
        '> [!CAUTION]',
        '> Read the context before translating. Do NOT translate technical fields such as IDs,',
        '> system categories, equipment slots or fixed stat values.',
        '> If a field looks like an internal configuration key, keep the original value.',
        '',
    ]
    for file, kind, rows in sections:
        lines.append(f'## File: {file}')
        lines.append('')
        if kind == 'tree':
            lines.append('| Line | Path | Value |')
            lines.append('|------|------|-------|')
            for line_number, path, value in rows:
                lines.append(f'| {line_number} | {path} | {_escape_cell(value)} |')
        elif kind == 'records':
            lines.append('| ID | Value |')
            lines.append('|----|-------|')
            for record_id, value in rows:
                lines.append(f'| {record_id} | {_escape_cell(value)} |')
        elif kind == 'text':
            lines.append('```text')
            lines.append(rows[0][0] if rows else '')
            lines.append('```')
        else:
            lines.append(f'ERROR: {rows[0][0] if rows else "unknown error"}')
        lines.append('')
        lines.append('---')
        lines.append('')
    return '\n'.join(lines) + '\n'


def render_no_changes(no_translatable: List[str], redundant: List[str], purge_command: str) -> str:
    lines = [
        '# Files for Manual Validation (NoChanges)',
        '',
        'These files were detected as possibly unnecessary.',
        f'**Instruction:** mark with `[x]` the files to remove from both language folders and run `{purge_command}`.',
        '',
        '## No Translatable Text (suggestion: remove)',
    ]
    lines.extend(f'- [ ] {file}' for file in no_translatable)
    lines.append('')
    lines.append('## Identical to the Reference')
    lines.extend(f'- [ ] {file}' for file in redundant)
    return '\n'.join(lines) + '\n'


def parse_checked_items(content: str) -> List[str]:
    """Return the files ticked with ``[x]`` in a NoChanges checklist."""
    return [
        line[len(CHECKED_PREFIX):].strip()
        for line in content.splitlines()
        if line.startswith(CHECKED_PREFIX)
    ]


def render_size_table(rows: Iterable[Tuple[str, int, int, float]]) -> str:
    lines = ['| File | Reference | Translated | % |', '|---|---|---|---|']
    for file, reference_size, translated_size, ratio in rows:
        lines.append(f'| {file} | {reference_size} | {translated_size} | {ratio * 100:.1f}% |')
    return '\n'.join(lines)
