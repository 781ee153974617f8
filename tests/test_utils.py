"""Tests for utility helpers."""

from pathlib import Path

from devguard.utils.envfile import parse_dotenv
from devguard.utils.fs import is_likely_binary, line_number, relative_path


class TestParseDotenv:
    """Tests for parse_dotenv."""

    def test_entries_keep_line_numbers(self):
        """Test keys, unquoted values and 1-based lines."""
        content = "# comment\n\nexport API_URL=https://example.com\nNAME=\"quoted value\"\nEMPTY=\n"

        entries = parse_dotenv(content)

        assert [(e.key, e.value, e.line) for e in entries] == [
            ("API_URL", "https://example.com", 3),
            ("NAME", "quoted value", 4),
            ("EMPTY", "", 5),
        ]

    def test_bare_keys_are_skipped(self):
        """Test that lines without '=' are not entries."""
        assert [e.key for e in parse_dotenv("JUST_A_KEY\nREAL=1\n")] == ["REAL"]


class TestFsHelpers:
    """Tests for filesystem helpers."""

    def test_relative_path(self):
        """Test forward-slash relative paths."""
        root = Path("/repo")

        assert relative_path(root, root / "src" / "app.ts") == "src/app.ts"
        assert relative_path(root, Path("/elsewhere/file")) == "/elsewhere/file"

    def test_is_likely_binary(self):
        """Test NUL detection in the sniffed prefix only."""
        assert is_likely_binary(b"abc\x00def")
        assert not is_likely_binary(b"plain text")
        assert not is_likely_binary(b"a" * 8192 + b"\x00")

    def test_line_number(self):
        """Test 1-based line numbers from offsets."""
        content = "one\ntwo\nthree"

        assert line_number(content, 0) == 1
        assert line_number(content, content.index("two")) == 2
        assert line_number(content, content.index("three")) == 3
