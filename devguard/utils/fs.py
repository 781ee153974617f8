"""Filesystem helpers shared by checks and providers."""

from pathlib import Path

BINARY_SNIFF_BYTES = 8192


def relative_path(repo_root: Path, path: Path) -> str:
    """Get a forward-slash path relative to the repository root."""
    try:
        rel = path.relative_to(repo_root)
    except ValueError:
        rel = path
    return rel.as_posix()


def is_likely_binary(data: bytes) -> bool:
    """Treat content with a NUL byte in the first 8 KiB as binary."""
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def line_number(content: str, index: int) -> int:
    """Get the 1-based line number of a character offset."""
    return content.count("\n", 0, index) + 1


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")
