"""
import_engine.csv_parser - Low-level reading of PAT tester exports.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG) and strict UTF-8 decoding
  • Line splitting, blank-line skipping
  • Tokenising one line on commas outside double quotes

The export is not a header-and-columns CSV: every line is a run of
KEY,value pairs, so csv.DictReader does not apply here.
"""

from __future__ import annotations

from typing import Iterator

from import_engine.errors import UnreadableFileError


def iter_lines(raw: str | bytes) -> Iterator[tuple[int, str]]:
    """Yield (line number, stripped line) for every non-blank line."""
    text = _decode(raw)
    for line_no, line in enumerate(text.splitlines(), start=1):
        trimmed = line.strip()
        if trimmed:
            yield line_no, trimmed


def split_line(line: str) -> list[str]:
    """
    Split one line into tokens.

    Commas inside double quotes do not split; the quote characters
    themselves are dropped.  Tokens are not trimmed.  An empty line
    gives a single empty token.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    tokens.append("".join(current))
    return tokens


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        # Strip UTF-8 BOM
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnreadableFileError(f"Could not read the PAT export file: {exc}") from exc
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw
