"""Utility helpers for filesystem, dotenv and git access."""
