"""devguard - audit a repository for common footguns and gate CI on a health score."""

__version__ = "0.1.0"
