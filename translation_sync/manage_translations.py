import argparse
import json
import logging
import os
import re
import shutil
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
from tqdm import tqdm

from translation_sync.app_config import AppConfig, load_app_config
from translation_sync.batch_applier import apply_batch
from translation_sync.document_io import (
    KIND_RECORDS,
    KIND_TREE,
    Document,
    dump_tree,
    iter_language_files,
    load_document,
    parse_tree,
    write_text
)
from translation_sync.exceptions import DocumentEncodingError, DocumentParseError
from translation_sync.findings import Finding, FindingKind, format_path
from translation_sync.lang_file_parser import normalize_lang_records, parse_lang_file, serialize_lang_file
from translation_sync.reports import (
    parse_checked_items,
    render_check_report,
    render_comparison,
    render_issues_report,
    render_no_changes,
    render_size_table,
    render_untranslated_report
)
from translation_sync.translatability import (
    has_translatable_content,
    has_translatable_records,
    is_technical,
    is_translatable
)
from translation_sync.translation_validator import (
    audit_lang_records,
    audit_tree,
    check_encoding_and_mojibake,
    check_line_parity,
    find_mojibake_lines,
    find_untranslated_records,
    find_untranslated_tree,
    is_redundant,
    is_size_suspicious,
    iter_string_leaves,
    size_ratio
)
from translation_sync.tree_synchronizer import TreeSynchronizer, align_tree

logger = logging.getLogger("translation_sync")

# The manifest written by `identify` must be a plain list of relative paths.
RELEVANT_FILES_SCHEMA = {
    "type": "array",
    "items": {"type": "string"}
}

ISSUES_REPORT = 'IssuesHighLevel.md'
UNTRANSLATED_REPORT = 'untranslated_report.md'
COMPARISON_REPORT = 'Compared.md'
CHECK_REPORT = 'Check.md'
NO_CHANGES_REPORT = 'NoChanges.md'

# Everything `clean` looks at; files with other extensions are left alone.
CLEANABLE_EXTENSIONS = ['.txt', '.json', '.ttf', '.png', '.vox', '.ogg', '.ogv', '.bak', '.zip']
UPDATE_EXTENSIONS = ['.txt', '.json', '.ttf']


@dataclass
class VerifyReport:
    """Outcome of `verify`: per-entry findings plus the tally of record ids missing from translations."""
    findings: List[Finding] = field(default_factory=list)
    missing_records: int = 0

    @property
    def technical_issues(self) -> int:
        return sum(1 for finding in self.findings if finding.kind.is_technical) + self.missing_records

    @property
    def format_issues(self) -> int:
        return sum(1 for finding in self.findings if not finding.kind.is_technical)


def _report_path(config: AppConfig, name: str) -> str:
    return os.path.join(config.report_dir, name)


def _write_report(config: AppConfig, name: str, content: str) -> str:
    report_path = _report_path(config, name)
    write_text(report_path, content)
    return report_path


def load_relevant_files(manifest_path: str) -> Optional[List[str]]:
    """
    Load the relevant files manifest written by `identify`.

    Returns:
        The listed paths, or None when the manifest is absent or invalid.
    """
    if not os.path.exists(manifest_path):
        return None
    try:
        with open(manifest_path, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
        jsonschema.validate(instance=manifest, schema=RELEVANT_FILES_SCHEMA)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring manifest '%s': invalid JSON (%s)", manifest_path, e)
        return None
    except jsonschema.ValidationError as e:
        logger.warning("Ignoring manifest '%s': %s", manifest_path, e.message)
        return None
    return manifest


def get_files(config: AppConfig) -> List[str]:
    """Reference files to process: the manifest if there is one, else every language file."""
    relevant_files = load_relevant_files(config.relevant_files_manifest)
    if relevant_files is not None:
        return relevant_files
    return iter_language_files(config.reference_dir, config.file_extensions, config.policy.ignored_files)


def _load_pair(config: AppConfig, relative_path: str) -> Tuple[Document, Document]:
    reference = load_document(os.path.join(config.reference_dir, relative_path), relative_path)
    translated = load_document(os.path.join(config.translated_dir, relative_path), relative_path)
    return reference, translated


def _parse_pair(config: AppConfig, reference: Document, translated: Document) -> Tuple[Any, Any]:
    return parse_tree(reference, config.policy.max_depth), parse_tree(translated, config.policy.max_depth)


# --- identify ---

def identify(config: AppConfig) -> List[str]:
    """Write the manifest of reference files that hold translatable text."""
    logger.info("Identifying relevant files...")
    files = iter_language_files(config.reference_dir, config.file_extensions, config.policy.ignored_files)
    relevant_files = []
    for relative_path in tqdm(files, desc="Identifying", unit="file"):
        try:
            document = load_document(os.path.join(config.reference_dir, relative_path), relative_path)
            if document.kind == KIND_TREE:
                relevant = has_translatable_content(parse_tree(document, config.policy.max_depth), config.policy)
            else:
                relevant = has_translatable_records(document.raw, config.policy)
        except DocumentParseError as e:
            logger.warning("Skipping '%s': %s", relative_path, e)
            continue
        if relevant:
            relevant_files.append(relative_path)

    write_text(config.relevant_files_manifest, json.dumps(relevant_files, indent=2))
    logger.info(f"{len(relevant_files)} relevant file(s) written to '{config.relevant_files_manifest}'.")
    return relevant_files


# --- verify ---

def verify_document(reference: Document, translated: Document, config: AppConfig) -> VerifyReport:
    """Run every check on one reference/translated pair. Nothing is modified."""
    report = VerifyReport()
    relative_path = reference.relative_path
    findings: List[Finding] = []

    line_finding = check_line_parity(reference.raw, translated.raw, reference.kind == KIND_TREE, config.policy)
    if line_finding:
        logger.info("[LINES] %s: %s vs %s", relative_path, line_finding.translated_value,
                    line_finding.reference_value)
        findings.append(line_finding)

    encoding_findings = check_encoding_and_mojibake(translated.raw)
    if encoding_findings:
        logger.info("[ENCODING] %s: mojibake detected.", relative_path)
        findings.extend(encoding_findings)

    if reference.kind == KIND_TREE:
        try:
            findings.extend(audit_tree(*_parse_pair(config, reference, translated), config.policy))
        except DocumentParseError as e:
            logger.error("[PARSE] %s", e)
            findings.append(Finding(FindingKind.PARSE_FAILURE, 'FILE_STRUCTURE', reason=str(e)))
    elif reference.kind == KIND_RECORDS:
        result = audit_lang_records(parse_lang_file(reference.raw), parse_lang_file(translated.raw))
        for record_id in result.missing_ids:
            logger.info("[MISSING ID] %s -> ID %s", relative_path, record_id)
        for record_id in result.extra_ids:
            logger.info("[EXTRA ID] %s -> ID %s", relative_path, record_id)
        report.missing_records = result.structural_divergences
        findings.extend(result.findings)

    for finding in findings:
        if finding.kind == FindingKind.MISSING_KEY:
            logger.info("[MISSING KEY] %s -> %s", relative_path, finding.location)
    report.findings = [finding.in_file(relative_path) for finding in findings]
    return report


def verify(config: AppConfig) -> VerifyReport:
    logger.info("Starting final audit...")
    report = VerifyReport()
    for relative_path in tqdm(get_files(config), desc="Verifying", unit="file"):
        translated_path = os.path.join(config.translated_dir, relative_path)
        if not os.path.exists(translated_path):
            logger.info("[MISSING FILE] %s", relative_path)
            report.findings.append(Finding(
                FindingKind.STRUCTURAL_DIVERGENCE, 'FILE_SYSTEM', 'PRESENT', 'MISSING',
                "File missing in the translated folder", relative_path
            ))
            continue
        try:
            reference, translated = _load_pair(config, relative_path)
        except DocumentEncodingError as e:
            logger.info("[ENCODING] %s", e)
            report.findings.append(Finding(FindingKind.ENCODING, 'FILE_ENCODING', reason=str(e),
                                           file=relative_path))
            continue

        document_report = verify_document(reference, translated, config)
        report.findings.extend(document_report.findings)
        report.missing_records += document_report.missing_records

    report_path = _write_report(
        config, ISSUES_REPORT,
        render_issues_report(report.findings, config.reference_dir_name, config.translated_dir_name)
    )
    logger.info("Audit finished. Detailed report: %s", report_path)
    logger.info(f"Technical: {report.technical_issues} | Formatting: {report.format_issues}")
    return report


# --- normalize ---

def normalize_documents(reference: Document, translated: Document,
                        synchronizer: TreeSynchronizer) -> Tuple[str, str]:
    """
    Rebuild both documents in their canonical form.

    Trees are re-serialized with the reference's indentation, the translated
    tree synchronized onto the reference structure. Line-record files are
    rewritten one record per line on the reference ids. Plain text is left as is.

    Raises:
        DocumentParseError: If either document cannot be decoded.
    """
    if reference.kind == KIND_TREE:
        reference_tree = parse_tree(reference, synchronizer.policy.max_depth)
        translated_tree = parse_tree(translated, synchronizer.policy.max_depth)
        synced = synchronizer.sync(reference_tree, translated_tree)
        return dump_tree(reference_tree, reference.indent), dump_tree(synced, reference.indent)

    if reference.kind == KIND_RECORDS:
        reference_records, translated_records = normalize_lang_records(
            parse_lang_file(reference.raw), parse_lang_file(translated.raw)
        )
        logger.info(f"Normalizing records (one entry per line): {reference.relative_path} "
                    f"({len(reference_records)} entries)")
        return serialize_lang_file(reference_records), serialize_lang_file(translated_records)

    return reference.raw, translated.raw


def normalize(config: AppConfig) -> List[Finding]:
    logger.info("Normalizing and formatting files (%s and %s)...",
                config.reference_dir_name, config.translated_dir_name)
    files = iter_language_files(config.reference_dir, config.file_extensions, config.policy.ignored_files)
    synchronizer = TreeSynchronizer(config.policy)
    findings: List[Finding] = []

    for relative_path in tqdm(files, desc="Normalizing", unit="file"):
        reference_path = os.path.join(config.reference_dir, relative_path)
        translated_path = os.path.join(config.translated_dir, relative_path)

        if not os.path.exists(translated_path):
            if config.dry_run:
                logger.info(f"[Dry Run] Would create initial translated file '{relative_path}'.")
            else:
                logger.info(f"Creating initial translated file: {relative_path}")
                os.makedirs(os.path.dirname(translated_path), exist_ok=True)
                shutil.copyfile(reference_path, translated_path)
            continue

        try:
            reference, translated = _load_pair(config, relative_path)
            new_reference, new_translated = normalize_documents(reference, translated, synchronizer)
        except DocumentParseError as e:
            logger.warning("[PARSE] %s: %s. Skipping structural synchronization.", relative_path, e)
            findings.append(Finding(FindingKind.PARSE_FAILURE, 'FILE_STRUCTURE', reason=str(e), file=relative_path))
            continue

        findings.extend(finding.in_file(relative_path) for finding in synchronizer.findings)

        if config.dry_run:
            logger.info(f"[Dry Run] Would rewrite '{relative_path}' in both language folders.")
            continue
        write_text(reference_path, new_reference, reference.line_ending)
        write_text(translated_path, new_translated, translated.line_ending)

    for finding in findings:
        if finding.kind == FindingKind.PLACEHOLDER_MISMATCH:
            logger.warning("[PLACEHOLDERS] %s -> %s: %s", finding.file, finding.location, finding.reason)
    return findings


# --- align ---

def align(config: AppConfig) -> int:
    logger.info("Aligning placeholders...")
    changed_total = 0
    for relative_path in get_files(config):
        translated_path = os.path.join(config.translated_dir, relative_path)
        if not relative_path.endswith('.json') or not os.path.exists(translated_path):
            continue
        try:
            reference, translated = _load_pair(config, relative_path)
            reference_tree, translated_tree = _parse_pair(config, reference, translated)
            changed = align_tree(reference_tree, translated_tree, config.policy)
        except DocumentParseError as e:
            logger.warning("Skipping '%s': %s", relative_path, e)
            continue
        if not changed:
            continue
        changed_total += changed
        if config.dry_run:
            logger.info(f"[Dry Run] Would align {changed} string(s) in '{relative_path}'.")
        else:
            write_text(translated_path, dump_tree(translated_tree, translated.indent), translated.line_ending)
            logger.info(f"Aligned {changed} string(s) in '{relative_path}'.")
    return changed_total


# --- untranslated ---

def find_untranslated(config: AppConfig) -> Dict[str, List[Finding]]:
    logger.info("Looking for untranslated strings in relevant files...")
    findings_by_file: Dict[str, List[Finding]] = {}
    for relative_path in get_files(config):
        if not os.path.exists(os.path.join(config.translated_dir, relative_path)):
            continue
        try:
            reference, translated = _load_pair(config, relative_path)
            if reference.kind == KIND_TREE:
                findings = find_untranslated_tree(*_parse_pair(config, reference, translated), config.policy)
            elif reference.kind == KIND_RECORDS:
                findings = find_untranslated_records(
                    parse_lang_file(reference.raw), parse_lang_file(translated.raw), config.policy
                )
            else:
                continue
        except DocumentParseError as e:
            logger.warning("Skipping '%s': %s", relative_path, e)
            continue
        if findings:
            findings_by_file[relative_path] = [finding.in_file(relative_path) for finding in findings]

    report_path = _write_report(config, UNTRANSLATED_REPORT, render_untranslated_report(findings_by_file))
    total = sum(len(findings) for findings in findings_by_file.values())
    logger.info(f"Report written: {report_path} ({total} pending string(s))")
    return findings_by_file


# --- mojibake / size ---

def find_mojibake(config: AppConfig) -> int:
    logger.info("Looking for mojibake in translated files...")
    count = 0
    for relative_path in get_files(config):
        translated_path = os.path.join(config.translated_dir, relative_path)
        if not os.path.exists(translated_path):
            continue
        try:
            document = load_document(translated_path, relative_path)
        except DocumentEncodingError as e:
            logger.warning("%s", e)
            continue
        for line_number, line in find_mojibake_lines(document.raw):
            logger.info("%s L%d: %s", relative_path, line_number, line)
            count += 1
    logger.info("Total: %d", count)
    return count


def check_sizes(config: AppConfig) -> List[Tuple[str, int, int, float]]:
    logger.info("Validating file sizes...")
    rows = []
    for relative_path in get_files(config):
        reference_path = os.path.join(config.reference_dir, relative_path)
        translated_path = os.path.join(config.translated_dir, relative_path)
        if not (os.path.exists(reference_path) and os.path.exists(translated_path)):
            continue
        reference_size = os.path.getsize(reference_path)
        translated_size = os.path.getsize(translated_path)
        ratio = size_ratio(reference_size, translated_size)
        if is_size_suspicious(ratio):
            rows.append((relative_path, reference_size, translated_size, ratio))
    logger.info("Files with a suspicious size ratio:\n%s", render_size_table(rows))
    return rows


# --- clean / purge ---

def _remove(file_path: str, reason: str, config: AppConfig) -> None:
    if config.dry_run:
        logger.info(f"[Dry Run] Would remove ({reason}): {file_path}")
    else:
        os.remove(file_path)
        logger.info(f"Removed ({reason}): {file_path}")


def clean(config: AppConfig) -> int:
    """Remove disallowed files and translated orphans, then write the NoChanges checklist."""
    logger.info("Removing disallowed files and looking for redundancies...")
    allowed = {ext.lower() for ext in config.allowed_extensions}
    removed = 0

    for root, is_translated in ((config.reference_dir, False), (config.translated_dir, True)):
        for relative_path in iter_language_files(root, CLEANABLE_EXTENSIONS, config.policy.ignored_files):
            file_path = os.path.join(root, relative_path)
            extension = os.path.splitext(relative_path)[1].lower()
            if extension not in allowed:
                _remove(file_path, "invalid extension", config)
                removed += 1
            elif is_translated and extension in ('.txt', '.json') and \
                    not os.path.exists(os.path.join(config.reference_dir, relative_path)):
                _remove(file_path, "orphan", config)
                removed += 1

    logger.info("File cleanup finished. %d file(s) removed.", removed)
    check_redundancy(config)
    return removed


def check_redundancy(config: AppConfig) -> Tuple[List[str], List[str]]:
    logger.info("Analyzing files for %s...", NO_CHANGES_REPORT)
    no_translatable: List[str] = []
    redundant: List[str] = []

    for relative_path in iter_language_files(config.reference_dir, config.file_extensions,
                                             config.policy.ignored_files):
        try:
            reference = load_document(os.path.join(config.reference_dir, relative_path), relative_path)
            if reference.kind == KIND_TREE:
                has_text = has_translatable_content(parse_tree(reference, config.policy.max_depth), config.policy)
            else:
                has_text = has_translatable_records(reference.raw, config.policy)
        except DocumentParseError as e:
            logger.warning("Skipping '%s': %s", relative_path, e)
            continue

        translated_path = os.path.join(config.translated_dir, relative_path)
        if not has_text:
            no_translatable.append(relative_path)
        elif os.path.exists(translated_path):
            try:
                translated = load_document(translated_path, relative_path)
            except DocumentEncodingError as e:
                logger.warning("%s", e)
                continue
            if is_redundant(reference.raw, translated.raw):
                redundant.append(relative_path)

    purge_command = f"manage-translations --version {config.version} purge"
    _write_report(config, NO_CHANGES_REPORT, render_no_changes(no_translatable, redundant, purge_command))
    logger.info(f"{NO_CHANGES_REPORT} written with {len(no_translatable) + len(redundant)} suggestion(s).")
    return no_translatable, redundant


def purge(config: AppConfig) -> int:
    report_path = _report_path(config, NO_CHANGES_REPORT)
    if not os.path.exists(report_path):
        logger.error("%s not found. Run clean first.", NO_CHANGES_REPORT)
        return 0

    with open(report_path, 'r', encoding='utf-8') as f:
        checked = parse_checked_items(f.read())

    removed = 0
    for relative_path in checked:
        file_removed = False
        for root in (config.reference_dir, config.translated_dir):
            file_path = os.path.join(root, relative_path)
            if os.path.exists(file_path):
                _remove(file_path, "purged", config)
                file_removed = True
        if file_removed:
            removed += 1
    logger.info("Purge finished. %d file(s) removed from both language folders.", removed)
    return removed


# --- compare / check ---

def compare(config: AppConfig) -> str:
    logger.info("Generating %s for in-depth review...", COMPARISON_REPORT)
    entries_by_file: Dict[str, List[Tuple[str, str, str]]] = {}

    for relative_path in iter_language_files(config.reference_dir, config.file_extensions,
                                             config.policy.ignored_files):
        if not os.path.exists(os.path.join(config.translated_dir, relative_path)):
            continue
        try:
            reference, translated = _load_pair(config, relative_path)
            entries = []
            if reference.kind == KIND_TREE:
                reference_tree, translated_tree = _parse_pair(config, reference, translated)
                for path, text, translated_value in iter_string_leaves(reference_tree, translated_tree,
                                                                       max_depth=config.policy.max_depth):
                    if is_translatable(text, config.policy):
                        shown = translated_value if translated_value is not None else '(MISSING/INVALID)'
                        entries.append((format_path(path), text, str(shown)))
            elif reference.kind == KIND_RECORDS:
                translated_records = parse_lang_file(translated.raw)
                for record_id, text in parse_lang_file(reference.raw).items():
                    if is_translatable(text, config.policy):
                        entries.append((f"ID {record_id}", text, translated_records.get(record_id) or '(MISSING)'))
            else:
                entries.append(('', reference.raw, translated.raw))
        except DocumentParseError as e:
            logger.warning("Skipping '%s': %s", relative_path, e)
            continue
        entries_by_file[relative_path] = entries

    report_path = _write_report(
        config, COMPARISON_REPORT,
        render_comparison(entries_by_file, config.reference_dir_name, config.translated_dir_name)
    )
    logger.info("%s generated.", report_path)
    return report_path


def _tree_rows(tree, raw: str, config: AppConfig) -> List[Tuple[int, str, str]]:
    lines = raw.split('\n')
    rows = []
    for path, text, _ in iter_string_leaves(tree, max_depth=config.policy.max_depth):
        if is_technical(path, text, config.policy):
            continue
        needle = json.dumps(text, ensure_ascii=False)
        line_number = next((number for number, line in enumerate(lines, 1) if needle in line), 0)
        rows.append((line_number, format_path(path), text))
    return rows


def check(config: AppConfig, paths: List[str]) -> Optional[str]:
    """List the translatable strings of the given files or folders in Check.md."""
    all_files: List[Tuple[str, str]] = []
    for path in paths:
        if not os.path.exists(path):
            logger.warning("Path not found: %s", path)
            continue
        if os.path.isdir(path):
            for relative_path in iter_language_files(path, ['.json', '.txt'], config.policy.ignored_files):
                all_files.append((os.path.join(path, relative_path), relative_path))
        else:
            all_files.append((path, os.path.basename(path)))

    if not all_files:
        logger.error("No valid file to process.")
        return None

    sections = []
    for file_path, relative_path in all_files:
        logger.info("Processing %s...", file_path)
        try:
            document = load_document(file_path, relative_path)
            if document.kind == KIND_TREE:
                tree = parse_tree(document, config.policy.max_depth)
                sections.append((file_path, 'tree', _tree_rows(tree, document.raw, config)))
            elif document.kind == KIND_RECORDS:
                rows = [(record_id, text) for record_id, text in parse_lang_file(document.raw).items()
                        if is_translatable(text, config.policy)]
                sections.append((file_path, 'records', rows))
            else:
                sections.append((file_path, 'text', [(document.raw,)]))
        except DocumentParseError as e:
            sections.append((file_path, 'error', [(str(e),)]))

    report_path = _write_report(config, CHECK_REPORT, render_check_report(sections))
    logger.info("%s generated with %d file(s).", report_path, len(all_files))
    return report_path


# --- apply / update ---

def apply(config: AppConfig) -> int:
    if not os.path.exists(config.batch_file):
        logger.error("Batch file '%s' not found.", config.batch_file)
        return 0
    with open(config.batch_file, 'r', encoding='utf-8') as f:
        content = f.read()

    applied = apply_batch(content, config.translated_dir, config.reference_dir,
                          config.translated_dir_name, config.dry_run, config.policy.max_depth)
    if config.dry_run:
        logger.info("[Dry Run] %d entr(ies) would be applied; batch file left untouched.", applied)
    else:
        write_text(config.batch_file, '')
        logger.info("Batch applied (%d entr(ies)) and '%s' emptied.", applied, config.batch_file)
    return applied


def _natural_key(name: str):
    return [int(part) if part.isdigit() else part for part in re.split(r'(\d+)', name)]


def update(config: AppConfig) -> int:
    """Refresh the newest version's reference files from the game installation."""
    if not config.game_root:
        logger.error("No game_root configured (config.yaml or TRANSLATION_GAME_ROOT).")
        return 0
    versions_root = os.path.dirname(os.path.dirname(config.reference_dir))
    if not os.path.isdir(versions_root):
        logger.error("Versions folder '%s' not found.", versions_root)
        return 0

    versions = sorted(
        (name for name in os.listdir(versions_root) if os.path.isdir(os.path.join(versions_root, name))),
        key=_natural_key,
        reverse=True
    )
    if not versions:
        logger.error("No version folder found in '%s'.", versions_root)
        return 0

    latest_version = versions[0]
    reference_dir = os.path.join(versions_root, latest_version, config.reference_dir_name)
    if not os.path.isdir(reference_dir):
        logger.error("Reference folder not found for version %s: %s", latest_version, reference_dir)
        return 0

    logger.info("Using latest version: %s", latest_version)
    files = iter_language_files(reference_dir, UPDATE_EXTENSIONS, config.policy.ignored_files)
    copied = 0
    for relative_path in tqdm(files, desc="Updating", unit="file"):
        source_path = os.path.join(config.game_root, relative_path)
        destination_path = os.path.join(reference_dir, relative_path)
        if not os.path.exists(source_path):
            logger.warning("Source not found: %s", source_path)
            continue
        if config.dry_run:
            logger.info(f"[Dry Run] Would copy '{source_path}' to '{destination_path}'.")
        else:
            shutil.copy2(source_path, destination_path)
            logger.info("Copied: %s", relative_path)
        copied += 1
    logger.info("Update finished: %d file(s) copied.", copied)
    return copied


# --- CLI ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='manage-translations',
        description='Keep a translated language folder in sync with its reference folder.'
    )
    parser.add_argument('--version', dest='version', default=None,
                        help='Version folder under the versions root (or TRANSLATION_VERSION).')
    parser.add_argument('--dry-run', action='store_true', help='Report what would change without writing.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('identify', help="Scan the reference folder and write the relevant files manifest.")
    subparsers.add_parser('update', help="Copy the newest version's reference files from the game folder.")
    subparsers.add_parser('verify', help=f"Audit keys, placeholders, encoding and line parity ({ISSUES_REPORT}).")
    subparsers.add_parser('normalize', help="Synchronize structure and rewrite files in canonical form.")
    subparsers.add_parser('align', help="Realign placeholders of translated JSON strings.")
    subparsers.add_parser('apply', help="Apply the reviewed translations from the batch file.")
    subparsers.add_parser('untranslated', help=f"List strings identical to the reference ({UNTRANSLATED_REPORT}).")
    subparsers.add_parser('mojibake', help="Print translated lines with mojibake.")
    subparsers.add_parser('size', help="List files whose translated size ratio looks wrong.")
    subparsers.add_parser('clean', help=f"Remove invalid files and write {NO_CHANGES_REPORT}.")
    subparsers.add_parser('purge', help=f"Delete the files ticked in {NO_CHANGES_REPORT}.")
    subparsers.add_parser('compare', help=f"Write {COMPARISON_REPORT} for manual review.")
    check_parser = subparsers.add_parser('check', help=f"List translatable strings of files or folders ({CHECK_REPORT}).")
    check_parser.add_argument('paths', nargs='+')
    subparsers.add_parser('lint', help="clean followed by normalize.")
    return parser


def run_command(config: AppConfig, command: str, paths: Optional[List[str]] = None) -> None:
    if command == 'identify':
        identify(config)
    elif command == 'update':
        update(config)
    elif command == 'verify':
        verify(config)
    elif command == 'normalize':
        normalize(config)
    elif command == 'align':
        align(config)
    elif command == 'apply':
        apply(config)
    elif command == 'untranslated':
        find_untranslated(config)
    elif command == 'mojibake':
        find_mojibake(config)
    elif command == 'size':
        check_sizes(config)
    elif command == 'clean':
        clean(config)
    elif command == 'purge':
        purge(config)
    elif command == 'compare':
        compare(config)
    elif command == 'check':
        check(config, paths or [])
    elif command == 'lint':
        logger.info("Starting full synchronization and cleanup (lint) for version %s...", config.version)
        clean(config)
        normalize(config)
        logger.info("Lint finished.")
    else:
        raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_app_config(args.version)
    if args.dry_run:
        config.dry_run = True
    run_command(config, args.command, getattr(args, 'paths', None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
