"""Error types shared across devguard."""


class DevguardError(Exception):
    """Base class for all devguard errors."""


class ConfigError(DevguardError):
    """Config file is missing, unreadable, unparsable or invalid."""


class ScanError(DevguardError):
    """Repository root cannot be scanned."""


class CheckFailure(DevguardError):
    """A single check or provider failed; recovered as a Warning issue."""


class GitError(DevguardError):
    """A git command failed or timed out."""
