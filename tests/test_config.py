"""Tests for configuration loading and default vault resolution."""

from pathlib import Path

import pytest

from markdown_vault.config import load_configuration
from markdown_vault.constants import DEFAULT_SEARCH_EXECUTABLE, DEFAULT_SEARCH_TIMEOUT_SECONDS
from markdown_vault.data_models import SearchSettings, VaultConfiguration, VaultMetadata
from markdown_vault.errors import InvalidInputError


def _write_config(tmp_path, text):
    config_path = tmp_path / "vaults.yaml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_missing_file_uses_defaults(tmp_path):
    configuration = load_configuration(tmp_path / "missing.yaml")
    assert configuration.vaults == {}
    assert configuration.default_vault is None
    assert configuration.search == SearchSettings()
    assert configuration.search.executable == DEFAULT_SEARCH_EXECUTABLE
    assert configuration.search.timeout_seconds == DEFAULT_SEARCH_TIMEOUT_SECONDS
    assert configuration.log_level == "INFO"


def test_full_configuration(tmp_path):
    vault_dir = tmp_path / "Notes"
    vault_dir.mkdir()
    config_path = _write_config(
        tmp_path,
        f"""
default: personal
log_level: debug
vaults:
  personal:
    path: {vault_dir}
  work:
    path: {tmp_path / "missing"}
search:
  executable: /usr/local/bin/rg
  timeout_seconds: 2
  enabled: false
""",
    )

    configuration = load_configuration(config_path)

    assert configuration.default_vault == "personal"
    assert configuration.log_level == "DEBUG"
    assert configuration.get("personal").path == vault_dir.resolve()
    assert configuration.get("work").path == (tmp_path / "missing").resolve()
    assert configuration.search == SearchSettings("/usr/local/bin/rg", 2.0, False)


def test_empty_file_uses_defaults(tmp_path):
    configuration = load_configuration(_write_config(tmp_path, ""))
    assert configuration.vaults == {}
    assert configuration.search.enabled


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "vaults: [a, b]\n",
        "vaults:\n  personal: /not/a/mapping\n",
        "vaults:\n  personal:\n    note: no path\n",
        "default: missing\nvaults: {}\n",
        "search: fast\n",
        "search:\n  executable: ''\n",
        "search:\n  timeout_seconds: 0\n",
        "search:\n  timeout_seconds: true\n",
        "search:\n  enabled: sometimes\n",
        "log_level: chatty\n",
        "vaults: {unclosed\n",
    ],
)
def test_invalid_configuration_raises_value_error(tmp_path, text):
    with pytest.raises(ValueError):
        load_configuration(_write_config(tmp_path, text))


class TestVaultConfiguration:
    """Default vault resolution used by the MCP tools."""

    def _configuration(self, tmp_path, default="personal"):
        metadata = VaultMetadata(name="personal", path=tmp_path)
        return VaultConfiguration(default_vault=default, vaults={"personal": metadata})

    def test_explicit_root_wins(self, tmp_path):
        configuration = self._configuration(tmp_path)
        assert configuration.resolve_root("/elsewhere") == "/elsewhere"

    def test_default_vault_is_used_when_root_omitted(self, tmp_path):
        configuration = self._configuration(tmp_path)
        assert configuration.resolve_root(None) == str(tmp_path)

    def test_missing_default_is_invalid_input(self, tmp_path):
        configuration = self._configuration(tmp_path, default=None)
        with pytest.raises(InvalidInputError, match="no default vault"):
            configuration.resolve_root(None)

    def test_unknown_vault_name(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown vault"):
            self._configuration(tmp_path).get("work")


def test_example_configuration_is_valid():
    example = Path(__file__).resolve().parent.parent / "vaults.example.yaml"
    if not example.exists():
        pytest.skip("example configuration not present")
    configuration = load_configuration(example)
    assert configuration.default_vault in configuration.vaults
