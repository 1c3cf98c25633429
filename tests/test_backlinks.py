"""
Test suite for backlink discovery: link variants, both search strategies,
fallback between them and the public get_backlinks operation.
"""

import shutil
import subprocess

import pytest

from markdown_vault.core import backlink_operations
from markdown_vault.core.backlink_operations import (
    LinkSearchStrategy,
    RipgrepSearch,
    ScanSearch,
    default_strategies,
    escape_link_text,
    find_backlinks,
    get_backlinks,
    link_variants,
)
from markdown_vault.data_models import SearchSettings
from markdown_vault.errors import InvalidInputError

HAS_RIPGREP = shutil.which("rg") is not None
requires_ripgrep = pytest.mark.skipif(not HAS_RIPGREP, reason="ripgrep (rg) is not installed")

MISSING_EXECUTABLE = "markdown-vault-missing-search-binary"


def _write(vault, relative, content):
    path = vault / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def simple_vault(tmp_path):
    """Two notes: A links to B."""
    vault_path = tmp_path / "simple"
    vault_path.mkdir()
    _write(vault_path, "A.md", "---\ntitle: Alpha\n---\nHello [[B]]")
    _write(vault_path, "B.md", "---\ntitle: Beta\n---\nWorld")
    return vault_path


@pytest.fixture
def test_vault(tmp_path):
    """Create a vault exercising every supported link spelling."""
    vault_path = tmp_path / "test_vault"
    vault_path.mkdir()

    _write(vault_path, "folder/B.md", "---\ntitle: Bee\n---\nLinks to itself: [[B]]")

    # Each spelling of the target
    _write(vault_path, "full.md", "See [[folder/B.md]].")
    _write(vault_path, "no-ext.md", "---\ntitle: No Extension\n---\nSee [[folder/B]].")
    _write(vault_path, "filename.md", "See [[B.md]].")
    _write(vault_path, "bare.md", "See [[B]].")

    # Aliases, with and without whitespace before the pipe, across lines
    _write(vault_path, "alias.md", "See [[B|see also]].")
    _write(vault_path, "spaced-alias.md", "See [[folder/B | the bee]].")
    _write(vault_path, "multiline-alias.md", "See [[B|see\nalso]].")
    _write(vault_path, "empty-alias.md", "See [[B|]].")

    # One note, many links
    _write(vault_path, "many.md", "[[B]] and [[B.md]] and [[folder/B|x]]")

    # Near misses
    _write(vault_path, "case.md", "See [[b]] and [[FOLDER/B]].")
    _write(vault_path, "prefix.md", "See [[Bravo]] and [[AB]] and [[B#Heading]].")
    _write(vault_path, "single.md", "See [B] and [[B] and B.md.")
    _write(vault_path, "other-ext.txt", "See [[B]].")
    _write(vault_path, "upper.MD", "See [[B]].")

    # Hidden folders are part of the vault
    _write(vault_path, ".archive/old.md", "See [[B]].")
    return vault_path


EXPECTED_FOLDER_B_BACKLINKS = [
    ".archive/old.md",
    "alias.md",
    "bare.md",
    "empty-alias.md",
    "filename.md",
    "full.md",
    "many.md",
    "multiline-alias.md",
    "no-ext.md",
    "spaced-alias.md",
]


@pytest.fixture(
    params=[
        pytest.param("scan", id="scan"),
        pytest.param("ripgrep", id="ripgrep", marks=requires_ripgrep),
    ]
)
def strategy(request):
    if request.param == "ripgrep":
        return RipgrepSearch()
    return ScanSearch()


def _paths(result):
    return [backlink.relative_path for backlink in result.backlinks]


class TestLinkVariants:
    """Spellings under which a note can be linked."""

    def test_nested_note(self):
        assert link_variants("folder/B.md") == ["folder/B.md", "folder/B", "B.md", "B"]

    def test_top_level_note(self):
        assert link_variants("B.md") == ["B.md", "B"]

    def test_nested_path_without_extension(self):
        assert link_variants("folder/B") == ["folder/B", "B"]

    def test_bare_name(self):
        assert link_variants("B") == ["B"]

    def test_deeply_nested_note(self):
        assert link_variants("a/b/C.md") == ["a/b/C.md", "a/b/C", "C.md", "C"]

    def test_empty_path_has_no_variants(self):
        assert link_variants("") == []

    def test_escape_link_text_escapes_metacharacters(self):
        assert escape_link_text("C++ (draft) [v1].md") == r"C\+\+ \(draft\) \[v1\]\.md"

    def test_escape_link_text_keeps_plain_text(self):
        assert escape_link_text("Daily Notes/2025 Oct") == r"Daily Notes/2025 Oct"


class TestSearchStrategies:
    """Both strategies share the same link semantics."""

    def test_strategies_satisfy_protocol(self, strategy):
        assert isinstance(strategy, LinkSearchStrategy)

    def test_simple_backlink(self, simple_vault, strategy):
        result = find_backlinks("B.md", simple_vault, strategies=[strategy])
        assert result.as_payload() == [{"title": "Alpha", "relative_path": "A.md"}]
        assert result.strategy == strategy.name

    def test_note_without_backlinks(self, simple_vault, strategy):
        result = find_backlinks("A.md", simple_vault, strategies=[strategy])
        assert result.backlinks == []

    def test_every_link_spelling_is_found_once(self, test_vault, strategy):
        result = find_backlinks("folder/B.md", test_vault, strategies=[strategy])
        assert _paths(result) == EXPECTED_FOLDER_B_BACKLINKS

    def test_target_never_links_to_itself(self, test_vault, strategy):
        result = find_backlinks("folder/B.md", test_vault, strategies=[strategy])
        assert "folder/B.md" not in _paths(result)

    def test_titles_come_from_linking_notes(self, test_vault, strategy):
        result = find_backlinks("folder/B.md", test_vault, strategies=[strategy])
        titles = {backlink.relative_path: backlink.title for backlink in result.backlinks}
        assert titles["no-ext.md"] == "No Extension"
        assert titles["bare.md"] == "bare"

    def test_case_sensitive_matching(self, test_vault, strategy):
        result = find_backlinks("folder/B.md", test_vault, strategies=[strategy])
        assert "case.md" not in _paths(result)

    def test_special_characters_in_target(self, tmp_path, strategy):
        _write(tmp_path, "notes/C++ (draft).md", "target")
        _write(tmp_path, "linker.md", "See [[C++ (draft)]] and [[C++ (draft).md|alias]].")
        _write(tmp_path, "decoy.md", "See [[CCC (draft)]] and [[C+ (draft)]].")

        result = find_backlinks("notes/C++ (draft).md", tmp_path, strategies=[strategy])
        assert _paths(result) == ["linker.md"]

    def test_links_inside_code_blocks_count(self, simple_vault, strategy):
        _write(simple_vault, "code.md", "```\n[[B]]\n```")
        result = find_backlinks("B.md", simple_vault, strategies=[strategy])
        assert _paths(result) == ["A.md", "code.md"]

    def test_invalid_utf8_alias_is_matched(self, simple_vault, strategy):
        (simple_vault / "Latin.md").write_bytes(b"[[B|caf\xe9]]")
        (simple_vault / "Spaced.md").write_bytes(b"[[B \xa0|x]]")
        result = find_backlinks("B.md", simple_vault, strategies=[strategy])
        assert _paths(result) == ["A.md", "Latin.md"]

    def test_file_named_only_extension_is_not_a_note(self, simple_vault, strategy):
        _write(simple_vault, ".md", "[[B]]")
        _write(simple_vault, "folder/.md", "[[B]]")
        result = find_backlinks("B.md", simple_vault, strategies=[strategy])
        assert _paths(result) == ["A.md"]

    @pytest.mark.parametrize(
        "target, expected",
        [
            ("folder/B.md", ["bare-link.md", "path-link.md"]),
            ("folder/B", ["bare-link.md", "path-link.md"]),
            ("B", ["bare-link.md"]),
        ],
    )
    def test_targets_with_and_without_folder_or_extension(self, tmp_path, strategy, target, expected):
        _write(tmp_path, "folder/B.md", "target")
        _write(tmp_path, "path-link.md", "See [[folder/B]].")
        _write(tmp_path, "bare-link.md", "See [[B|bee]].")

        result = find_backlinks(target, tmp_path, strategies=[strategy])
        assert _paths(result) == expected


@requires_ripgrep
def test_ripgrep_and_scan_agree(test_vault):
    """Both strategies return the same backlinks for every note in the vault."""
    _write(test_vault, "A.md", "[[bare]] [[alias|x]] [[folder/B]]")
    _write(test_vault, "nested/deeper/C.md", "[[A]] [[many.md]] [[nested/deeper/C]]")
    (test_vault / "latin1.md").write_bytes(b"caf\xe9 [[A]]")
    (test_vault / "latin1-alias.md").write_bytes(b"[[B|caf\xe9]] [[alias \xa0|x]]")
    _write(test_vault, ".md", "[[A]] [[B]]")
    _write(test_vault, "folder/.md", "[[folder/B]]")

    targets = [
        "A.md",
        "bare.md",
        "alias.md",
        "many.md",
        "folder/B.md",
        "folder/B",
        "B",
        "nested/deeper/C.md",
    ]
    for target in targets:
        fast = find_backlinks(target, test_vault, strategies=[RipgrepSearch()])
        fallback = find_backlinks(target, test_vault, strategies=[ScanSearch()])
        assert fast.as_payload() == fallback.as_payload(), target


class TestFallback:
    """Falling back from ripgrep to the in-process scan."""

    def test_missing_executable_falls_back_to_scan(self, simple_vault):
        strategies = default_strategies(SearchSettings(executable=MISSING_EXECUTABLE))
        result = find_backlinks("B.md", simple_vault, strategies=strategies)
        assert result.strategy == "scan"
        assert _paths(result) == ["A.md"]

    def test_timeout_falls_back_to_scan(self, simple_vault, monkeypatch):
        def timeout(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs.get("timeout"))

        monkeypatch.setattr(backlink_operations.subprocess, "run", timeout)
        result = find_backlinks("B.md", simple_vault, strategies=[RipgrepSearch(), ScanSearch()])
        assert result.strategy == "scan"
        assert _paths(result) == ["A.md"]

    def test_no_matches_from_ripgrep_is_final(self, simple_vault, monkeypatch):
        def no_matches(command, **kwargs):
            return subprocess.CompletedProcess(command, 1, b"", b"")

        monkeypatch.setattr(backlink_operations.subprocess, "run", no_matches)
        result = find_backlinks("B.md", simple_vault, strategies=[RipgrepSearch(), ScanSearch()])
        assert result.strategy == "ripgrep"
        assert result.backlinks == []

    def test_ripgrep_output_is_used_despite_errors(self, simple_vault, monkeypatch):
        stdout = b"".join(
            [
                bytes(simple_vault / "A.md") + b"\0",
                bytes(simple_vault / "B.md") + b"\0",
                bytes(simple_vault / "Vanished.md") + b"\0",
            ]
        )

        def partial(command, **kwargs):
            return subprocess.CompletedProcess(command, 2, stdout, b"permission denied")

        monkeypatch.setattr(backlink_operations.subprocess, "run", partial)
        result = find_backlinks("B.md", simple_vault, strategies=[RipgrepSearch()])
        assert result.as_payload() == [{"title": "Alpha", "relative_path": "A.md"}]
        assert result.skipped == 2
        assert result.degraded

    def test_ripgrep_output_skips_files_named_only_extension(self, simple_vault, monkeypatch):
        _write(simple_vault, ".md", "[[B]]")
        stdout = bytes(simple_vault / ".md") + b"\0" + bytes(simple_vault / "A.md") + b"\0"

        def matches(command, **kwargs):
            return subprocess.CompletedProcess(command, 0, stdout, b"")

        monkeypatch.setattr(backlink_operations.subprocess, "run", matches)
        assert RipgrepSearch().matching_files("unused", simple_vault) == [simple_vault / "A.md"]

    def test_ripgrep_command_line(self, simple_vault, monkeypatch):
        calls = []

        def record(command, **kwargs):
            calls.append((command, kwargs))
            return subprocess.CompletedProcess(command, 1, b"", b"")

        monkeypatch.setattr(backlink_operations.subprocess, "run", record)
        RipgrepSearch("rg", 2.5).search(["B.md", "B"], "B.md", simple_vault)

        assert len(calls) == 2
        command, kwargs = calls[1]
        assert command[0] == "rg"
        assert "--files-with-matches" in command
        assert "--multiline" in command
        assert command[command.index("-e") + 1] == r"\[\[B(?:(?-u:\s)*\|(?-u:[^\]])*)?\]\]"
        assert command[-1] == str(simple_vault)
        assert kwargs["timeout"] == 2.5

    def test_settings_select_default_strategies(self, simple_vault):
        result = find_backlinks(
            "B.md", simple_vault, settings=SearchSettings(executable=MISSING_EXECUTABLE)
        )
        assert result.strategy == "scan"
        assert _paths(result) == ["A.md"]

    def test_disabled_search_tool_uses_scan_only(self):
        strategies = default_strategies(SearchSettings(enabled=False))
        assert [strategy.name for strategy in strategies] == ["scan"]

    def test_default_strategies_prefer_ripgrep(self):
        strategies = default_strategies(SearchSettings(executable="rg", timeout_seconds=3))
        assert [strategy.name for strategy in strategies] == ["ripgrep", "scan"]
        assert strategies[0].timeout_seconds == 3

    def test_no_strategy_available_returns_empty_result(self, simple_vault):
        result = find_backlinks(
            "B.md", simple_vault, strategies=[RipgrepSearch(MISSING_EXECUTABLE)]
        )
        assert result.backlinks == []
        assert result.strategy == ""


class TestGetBacklinks:
    """Public backlink operation."""

    def test_concrete_scenario(self, simple_vault):
        assert get_backlinks("B.md", str(simple_vault)) == [
            {"title": "Alpha", "relative_path": "A.md"}
        ]

    def test_empty_relative_path_is_rejected(self, simple_vault):
        with pytest.raises(InvalidInputError, match="Relative path is empty"):
            get_backlinks("", simple_vault)

    def test_empty_vault_root_is_rejected(self):
        with pytest.raises(InvalidInputError, match="Vault directory is empty"):
            get_backlinks("B.md", "")

    def test_missing_vault_root_is_rejected(self, tmp_path):
        with pytest.raises(InvalidInputError, match="does not exist"):
            get_backlinks("B.md", tmp_path / "missing")

    def test_invalid_input_is_rejected_before_searching(self, tmp_path, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("search must not run")

        monkeypatch.setattr(backlink_operations, "find_backlinks", fail)
        with pytest.raises(InvalidInputError):
            get_backlinks("B.md", tmp_path / "missing")
        with pytest.raises(InvalidInputError):
            get_backlinks("   ", tmp_path)
