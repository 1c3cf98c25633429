"""Data models for vault configuration and note store results."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from markdown_vault.constants import DEFAULT_SEARCH_EXECUTABLE, DEFAULT_SEARCH_TIMEOUT_SECONDS, LOG_LEVEL
from markdown_vault.errors import InvalidInputError

# Generic frontmatter value: null, bool, int, float, text, list or string-keyed map.
FrontmatterValue = Union[None, bool, int, float, str, list["FrontmatterValue"], dict[str, "FrontmatterValue"]]


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing a configured vault."""

    name: str
    path: Path


@dataclass(frozen=True)
class SearchSettings:
    """How the backlink engine invokes the external search tool."""

    executable: str = DEFAULT_SEARCH_EXECUTABLE
    timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS
    enabled: bool = True


class VaultConfiguration:
    """Holds vault metadata, search settings and default resolution helpers.

    Loaded once at module initialization from vaults.yaml. A missing file
    yields an empty registry with default search settings.
    """

    def __init__(
        self,
        default_vault: Optional[str] = None,
        vaults: Optional[dict[str, VaultMetadata]] = None,
        search: Optional[SearchSettings] = None,
        log_level: str = LOG_LEVEL,
    ) -> None:
        self.default_vault = default_vault
        self.vaults = vaults or {}
        self.search = search or SearchSettings()
        self.log_level = log_level

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Raises:
            ValueError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            raise ValueError(f"Unknown vault '{name}'") from exc

    def resolve_root(self, vault_root: Optional[str]) -> str:
        """Return ``vault_root`` or, when omitted, the default vault's path.

        Raises:
            InvalidInputError: If no root was given and no default vault is configured.
        """
        if vault_root:
            return vault_root
        if not self.default_vault:
            raise InvalidInputError(
                "No vault_root was provided and no default vault is configured in vaults.yaml."
            )
        return str(self.get(self.default_vault).path)


@dataclass(frozen=True)
class NoteEntry:
    """A note discovered in the vault."""

    title: str
    absolute_path: str
    relative_path: str

    def as_payload(self) -> dict[str, str]:
        return {
            "title": self.title,
            "absolute_path": self.absolute_path,
            "relative_path": self.relative_path,
        }


@dataclass(frozen=True)
class Backlink:
    """A note that links to the queried note."""

    relative_path: str
    title: str

    def as_payload(self) -> dict[str, str]:
        return {"title": self.title, "relative_path": self.relative_path}


@dataclass
class ScanResult:
    """Markdown files found under a vault root.

    ``skipped`` counts directories that could not be listed; their contents are
    missing from ``notes``.
    """

    notes: list[tuple[str, str]] = field(default_factory=list)
    skipped: int = 0

    @property
    def degraded(self) -> bool:
        return self.skipped > 0


@dataclass
class BacklinkResult:
    """Backlinks found by one search strategy.

    ``skipped`` counts candidate files that could not be read or mapped back to
    a vault-relative path.
    """

    backlinks: list[Backlink] = field(default_factory=list)
    strategy: str = ""
    skipped: int = 0

    @property
    def degraded(self) -> bool:
        return self.skipped > 0

    def as_payload(self) -> list[dict[str, str]]:
        return [backlink.as_payload() for backlink in self.backlinks]
