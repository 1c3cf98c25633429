"""Exception types raised by the note store."""


class VaultError(Exception):
    """Base class for note store failures."""


class InvalidInputError(VaultError, ValueError):
    """A required path or vault argument is missing or unusable."""


class NoteNotFoundError(VaultError, FileNotFoundError):
    """A note reference does not resolve to an existing file."""


class NoteIOError(VaultError, OSError):
    """Reading or writing a resolved note failed."""


class SearchToolUnavailable(VaultError):
    """The external search tool could not be run.

    Raised inside the backlink engine only; it selects the in-process scan and
    never reaches callers of the public operations.
    """
