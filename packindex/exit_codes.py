"""
Standard exit codes and error types for packindex commands.

Following Unix/POSIX conventions for command-line tools. Every failure
raised by the store, the archive reader or the history squasher is a
CommandError carrying the exit code the CLI terminates with.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
STORE_STATE_ERROR = 64   # Store missing or already present
NOT_FOUND = 65           # Source archive or entry does not exist
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Clone failed
DATA_ERROR = 70          # Archive or metadata format error
VCS_ERROR = 72           # Git plumbing failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Store state

class NotInitialized(CommandError):
    """Raised when an operation needs a store that has not been cloned yet."""
    def __init__(self, path: Optional[str] = None):
        message = "Indexer has not yet been initialized."
        if path:
            message += f" Run 'packindex init' to create {path}."
        super().__init__(message, STORE_STATE_ERROR)
        self.path = path


class AlreadyInitialized(CommandError):
    """Raised by init when the store path already exists."""
    def __init__(self, path: str):
        super().__init__(f"Indexer is already initialized at {path}", STORE_STATE_ERROR)
        self.path = path


class CloneFailed(CommandError):
    """Raised when the fork cannot be cloned."""
    def __init__(self, url: str, reason: str = ""):
        message = f"Unable to clone your repository from {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message, NETWORK_ERROR)
        self.url = url


class SourceNotFound(CommandError):
    """Raised when the package archive to export does not exist."""
    def __init__(self, path: str):
        super().__init__(f"Path not found: {path}", NOT_FOUND)
        self.path = path


class EntryNotFound(CommandError):
    """Raised when no entry directory has the requested name."""
    def __init__(self, name: str):
        super().__init__(f"Cannot remove {name}: does not exist", NOT_FOUND)
        self.name = name


class InvalidEntryName(CommandError):
    """Raised when a package id cannot name a directory inside the store."""
    def __init__(self, name: str):
        super().__init__(f"[metadata].id: '{name}' is not a valid entry name", DATA_ERROR)
        self.name = name


# Archive and metadata

class ArchiveUnreadable(CommandError):
    """Raised when the package cannot be opened as a zip archive."""
    def __init__(self, path: str, reason: str = ""):
        message = f"Unable to read package {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message, DATA_ERROR)
        self.path = path


class MetadataMissing(CommandError):
    """Raised when the archive has no metadata member."""
    def __init__(self, path: str, member: str):
        super().__init__(f"Package {path} does not contain {member}", DATA_ERROR)
        self.path = path
        self.member = member


class MetadataMalformed(CommandError):
    """Raised when the metadata member is not a JSON object."""
    def __init__(self, member: str, reason: str = ""):
        message = f"[{member}]: Unable to parse"
        if reason:
            message += f": {reason}"
        super().__init__(message, DATA_ERROR)
        self.member = member


class FieldMissing(CommandError):
    """Raised when a required metadata field is absent."""
    def __init__(self, field: str):
        super().__init__(f"[metadata]: Missing key '{field}'", DATA_ERROR)
        self.field = field


class FieldTypeMismatch(CommandError):
    """Raised when a required metadata field is not a string."""
    def __init__(self, field: str, expected: str = "string"):
        super().__init__(f"[metadata].{field}: Expected {expected}", DATA_ERROR)
        self.field = field


class InvalidVersion(CommandError):
    """Raised when no major version can be derived from a version string."""
    def __init__(self, version: str):
        super().__init__(
            f"[metadata].version: Cannot derive a major version from '{version}'",
            DATA_ERROR,
        )
        self.version = version


# Version control

class DetachedState(CommandError):
    """Raised when the store's HEAD is not a named branch."""
    def __init__(self, path: str):
        super().__init__(f"Broken repository at {path}, detached HEAD", VCS_ERROR)
        self.path = path


class VcsOperationFailed(CommandError):
    """
    Raised when a git step of a squash or store operation fails.

    needs_inspection is set when the failure happened after the index was
    reset, so the working tree may hold staged but uncommitted changes.
    """
    def __init__(self, step: str, reason: str = "", needs_inspection: bool = False):
        message = f"Unable to {step}"
        if reason:
            message += f": {reason}"
        if needs_inspection:
            message += " (the store may hold staged but uncommitted changes; inspect it manually)"
        super().__init__(message, VCS_ERROR)
        self.step = step
        self.needs_inspection = needs_inspection
