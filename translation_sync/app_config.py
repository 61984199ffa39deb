"""Application configuration module for the translation sync tool."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from translation_sync.logging_config import setup_logger
from translation_sync.translatability import ExemptionPolicy

TRUTHY_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Core paths
    workspace_root: str
    version: str
    reference_dir: str
    translated_dir: str
    reference_dir_name: str
    translated_dir_name: str

    # Working files
    batch_file: str
    relevant_files_manifest: str
    report_dir: str
    game_root: Optional[str]

    # File selection
    file_extensions: List[str]
    allowed_extensions: List[str]

    # Processing settings
    dry_run: bool
    policy: ExemptionPolicy


def _compute_workspace_root() -> str:
    """The workspace is the current directory unless TRANSLATION_WORKSPACE says otherwise."""
    return os.path.abspath(os.environ.get('TRANSLATION_WORKSPACE', os.getcwd()))


def _load_dotenv_files(workspace_root: str) -> None:
    """Load .env files from the workspace root or its docker directory."""
    dotenv_path_root = os.path.join(workspace_root, '.env')
    dotenv_path_docker_dir = os.path.join(workspace_root, 'docker', '.env')

    if os.path.exists(dotenv_path_root):
        load_dotenv(dotenv_path_root)
    elif os.path.exists(dotenv_path_docker_dir):
        load_dotenv(dotenv_path_docker_dir)


def _load_yaml_config(workspace_root: str) -> Dict[str, Any]:
    """Load the YAML configuration file, falling back to defaults on any problem."""
    # SYNC_CONFIG_FILE (possibly from .env) overrides the default location.
    default_config_path = os.path.join(workspace_root, 'config.yaml')
    config_file = os.environ.get('SYNC_CONFIG_FILE', default_config_path)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    config = {}
    try:
        if not os.path.exists(config_file):
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
            print(f"Tip: Create a config.yaml file in '{workspace_root}' or set SYNC_CONFIG_FILE environment variable.",
                  file=sys.stderr)
            return config

        if not os.access(config_file, os.R_OK):
            print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _setup_logger_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging', {}) or {}
    log_level_str = log_config.get('log_level', 'INFO').upper()
    log_file_path = log_config.get('log_file_path', 'logs/translation_sync.log')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def _log_dotenv_status(logger: logging.Logger, workspace_root: str) -> None:
    """Log the status of .env file loading."""
    dotenv_path_root = os.path.join(workspace_root, '.env')
    dotenv_path_docker_dir = os.path.join(workspace_root, 'docker', '.env')

    if os.path.exists(dotenv_path_root):
        logger.info("Loaded environment variables from: %s", dotenv_path_root)
    elif os.path.exists(dotenv_path_docker_dir):
        logger.info("Loaded environment variables from: %s", dotenv_path_docker_dir)
    else:
        logger.debug("No .env file found in '%s' or its docker/ folder.", workspace_root)


def _resolve_version(version: Optional[str], config: Dict[str, Any], logger: logging.Logger) -> str:
    """Pick the version from the command line, the environment, or the config file."""
    resolved = version or os.environ.get('TRANSLATION_VERSION') or config.get('version')
    if not resolved:
        logger.critical("CRITICAL: no version given.")
        logger.critical("Pass --version <version>, set TRANSLATION_VERSION, or add 'version' to config.yaml.")
        sys.exit(1)
    return str(resolved)


def _resolve_path(workspace_root: str, path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(workspace_root, path)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY_VALUES


def load_app_config(version: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML file and environment variables.

    Args:
        version: Version folder to work on; overrides TRANSLATION_VERSION and config.yaml.

    Returns:
        AppConfig: The loaded application configuration.
    """
    workspace_root = _compute_workspace_root()

    _load_dotenv_files(workspace_root)

    config = _load_yaml_config(workspace_root)

    logger = _setup_logger_from_config(config)

    _log_dotenv_status(logger, workspace_root)

    resolved_version = _resolve_version(version, config, logger)

    versions_root = _resolve_path(workspace_root, config.get('versions_root', 'Versions'))
    reference_dir_name = config.get('reference_dir_name', 'EN')
    translated_dir_name = config.get('translated_dir_name', 'PT-BR')
    version_dir = os.path.join(versions_root, resolved_version)

    policy = ExemptionPolicy.from_config(config.get('exemptions'))
    dry_run = _env_flag('TRANSLATION_DRY_RUN', bool(config.get('dry_run', False)))
    game_root = os.environ.get('TRANSLATION_GAME_ROOT', config.get('game_root'))

    logger.debug("Working on version %s in '%s'", resolved_version, version_dir)

    return AppConfig(
        workspace_root=workspace_root,
        version=resolved_version,
        reference_dir=os.path.join(version_dir, reference_dir_name),
        translated_dir=os.path.join(version_dir, translated_dir_name),
        reference_dir_name=reference_dir_name,
        translated_dir_name=translated_dir_name,
        batch_file=_resolve_path(workspace_root, config.get('batch_file', 'translated_batch.txt')),
        relevant_files_manifest=_resolve_path(
            workspace_root, config.get('relevant_files_manifest', 'relevant_files.json')
        ),
        report_dir=_resolve_path(workspace_root, config.get('report_dir', '.')),
        game_root=game_root,
        file_extensions=config.get('file_extensions', ['.txt', '.json']),
        allowed_extensions=config.get('allowed_extensions', ['.txt', '.ttf', '.json']),
        dry_run=dry_run,
        policy=policy
    )
