"""Dotenv parsing on top of python-dotenv, keeping line numbers."""

import io
from dataclasses import dataclass
from typing import List

from dotenv.parser import parse_stream


@dataclass(frozen=True)
class DotenvEntry:
    """One KEY=value assignment from a dotenv file."""
    key: str
    value: str
    line: int


def parse_dotenv(content: str) -> List[DotenvEntry]:
    """Parse dotenv content into entries.

    Comments, blank lines, malformed lines and bare keys without ``=`` are
    skipped. Quotes around values are removed.

    Args:
        content: Dotenv file content

    Returns:
        Entries in file order
    """
    entries = []
    for binding in parse_stream(io.StringIO(content)):
        if binding.error or not binding.key or binding.value is None:
            continue
        entries.append(DotenvEntry(
            key=binding.key,
            value=binding.value,
            line=binding.original.line,
        ))
    return entries
