import json
import os

import pytest

from translation_sync.app_config import AppConfig
from translation_sync.translatability import ExemptionPolicy


def write_file(path, content, newline='\n'):
    """Write text content, creating parent folders."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content.replace('\n', newline))


def read_file(path):
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


@pytest.fixture
def workspace(tmp_path):
    """
    Function-scoped fixture laying out Versions/1.0/EN and Versions/1.0/PT-BR
    in a temporary workspace.
    """
    reference_dir = tmp_path / 'Versions' / '1.0' / 'EN'
    translated_dir = tmp_path / 'Versions' / '1.0' / 'PT-BR'
    reference_dir.mkdir(parents=True)
    translated_dir.mkdir(parents=True)
    return {
        "root": str(tmp_path),
        "reference_dir": str(reference_dir),
        "translated_dir": str(translated_dir),
    }


@pytest.fixture
def app_config(workspace):
    """An AppConfig pointing at the temporary workspace, built without touching config files."""
    root = workspace["root"]
    return AppConfig(
        workspace_root=root,
        version="1.0",
        reference_dir=workspace["reference_dir"],
        translated_dir=workspace["translated_dir"],
        reference_dir_name="EN",
        translated_dir_name="PT-BR",
        batch_file=os.path.join(root, 'translated_batch.txt'),
        relevant_files_manifest=os.path.join(root, 'relevant_files.json'),
        report_dir=root,
        game_root=None,
        file_extensions=['.txt', '.json'],
        allowed_extensions=['.txt', '.ttf', '.json'],
        dry_run=False,
        policy=ExemptionPolicy()
    )


@pytest.fixture
def write_pair(workspace):
    """Write the same relative file into both language folders."""
    def _write_pair(relative_path, reference, translated, newline='\n'):
        if not isinstance(reference, str):
            reference = json.dumps(reference, ensure_ascii=False, indent=2)
        if translated is not None and not isinstance(translated, str):
            translated = json.dumps(translated, ensure_ascii=False, indent=2)
        write_file(os.path.join(workspace["reference_dir"], relative_path), reference, newline)
        if translated is not None:
            write_file(os.path.join(workspace["translated_dir"], relative_path), translated, newline)
    return _write_pair
