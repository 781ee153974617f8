"""Command-line interface for devguard."""
