"""Configuration loading: vault registry and search tool settings."""

import logging
from pathlib import Path
import yaml

from markdown_vault.constants import (
    CONFIG_PATH,
    DEFAULT_SEARCH_EXECUTABLE,
    DEFAULT_SEARCH_TIMEOUT_SECONDS,
    LOG_LEVEL,
)
from markdown_vault.data_models import SearchSettings, VaultConfiguration, VaultMetadata

logger = logging.getLogger(__name__)


def _load_vaults(vaults_section: object) -> dict[str, VaultMetadata]:
    if vaults_section is None:
        return {}
    if not isinstance(vaults_section, dict):
        raise ValueError("Vault configuration 'vaults' must be a mapping of names to settings")

    processed: dict[str, VaultMetadata] = {}
    for name, entry in vaults_section.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Vault '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Vault '{name}' is missing a valid 'path' string")

        resolved_path = Path(raw_path).expanduser()
        try:
            resolved_path = resolved_path.resolve(strict=False)
        except (OSError, RuntimeError):
            # resolve can fail on an inaccessible filesystem; keep the expanded path
            pass

        processed[str(name)] = VaultMetadata(name=str(name), path=resolved_path)
    return processed


def _load_search_settings(search_section: object) -> SearchSettings:
    if search_section is None:
        return SearchSettings()
    if not isinstance(search_section, dict):
        raise ValueError("Vault configuration 'search' must be a mapping")

    executable = search_section.get("executable", DEFAULT_SEARCH_EXECUTABLE)
    if not isinstance(executable, str) or not executable.strip():
        raise ValueError("Search 'executable' must be a non-empty string")

    timeout = search_section.get("timeout_seconds", DEFAULT_SEARCH_TIMEOUT_SECONDS)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("Search 'timeout_seconds' must be a positive number")

    enabled = search_section.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ValueError("Search 'enabled' must be true or false")

    return SearchSettings(executable=executable.strip(), timeout_seconds=float(timeout), enabled=enabled)


def load_configuration(config_path: Path = CONFIG_PATH) -> VaultConfiguration:
    """Load and validate the configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``vaults.yaml``
        in the project root.

    Returns:
        A :class:`VaultConfiguration`. When the file does not exist the registry is
        empty and the search settings use their defaults.

    Raises:
        ValueError: If the file exists but does not provide the expected structure
            (non-mapping sections, invalid vault entries, unknown default, etc.).
    """
    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return VaultConfiguration()

    try:
        raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Configuration file {config_path} is not valid YAML: {exc}") from exc
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")

    vaults = _load_vaults(raw_config.get("vaults"))

    default_vault = raw_config.get("default")
    if default_vault is not None and (not isinstance(default_vault, str) or default_vault not in vaults):
        raise ValueError("Configuration 'default' must name a vault present in the 'vaults' mapping")

    log_level = raw_config.get("log_level", LOG_LEVEL)
    if not isinstance(log_level, str) or logging.getLevelName(log_level.upper()) == f"Level {log_level.upper()}":
        raise ValueError(f"Configuration 'log_level' is not a logging level: {log_level!r}")

    return VaultConfiguration(
        default_vault=default_vault,
        vaults=vaults,
        search=_load_search_settings(raw_config.get("search")),
        log_level=log_level.upper(),
    )


# Module-level singleton - loaded once at import time
CONFIGURATION = load_configuration()
