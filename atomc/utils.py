"""Shared error type and file loading."""

from __future__ import annotations

from pathlib import Path


class AtomCError(Exception):
    """A fatal error found while processing an AtomC program."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def load_file(file_name: str | Path) -> str:
    """Return the whole content of a text file."""
    try:
        data = Path(file_name).read_bytes()
    except OSError as exc:
        raise AtomCError(f"imposibil de deschis {file_name}") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AtomCError(
            f"nu s-a putut citi tot continutul fisierului {file_name}"
        ) from exc