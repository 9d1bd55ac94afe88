"""Display-width measurement and terminal styling of rendered rows.

Width math treats East Asian wide characters as two cells and combining
marks as zero so column alignment matches what a terminal draws.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence

from pygments import format as pygments_format
from pygments.formatters import TerminalFormatter
from pygments.token import Comment, Keyword, Name, String, Text

from .model.types import Highlight

STYLE_TOKENS: dict[str, object] = {
    "dir": Keyword,
    "file": Text,
    "link": Name.Attribute,
    "socket": String,
    "comment": Comment,
    "type": Name.Builtin,
    "permissions": Name.Constant,
    "size": Name.Variable,
    "mtime": Comment.Preproc,
    "error": Name.Exception,
}


def char_display_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return terminal column width of plain ``text``."""
    return sum(char_display_width(ch) for ch in text)


def rpad(text: str, width: int | None) -> str:
    """Pad ``text`` with spaces to ``width`` display columns (``None`` = no pad)."""
    if width is None:
        return text
    missing = width - display_width(text)
    return text + " " * missing if missing > 0 else text


def lpad(text: str, width: int) -> str:
    missing = width - display_width(text)
    return " " * missing + text if missing > 0 else text


def styled_tokens(line: str, highlights: Sequence[Highlight]) -> list[tuple[object, str]]:
    """Split ``line`` into pygments ``(token, text)`` pairs from style highlights.

    Highlight columns are character offsets into ``line``; unstyled gaps are
    emitted as ``Text``.
    """
    tokens: list[tuple[object, str]] = []
    pos = 0
    for hl in sorted(highlights, key=lambda item: item.col_start):
        start = max(pos, min(hl.col_start, len(line)))
        end = max(start, min(hl.col_end, len(line)))
        if start > pos:
            tokens.append((Text, line[pos:start]))
        if end > start:
            tokens.append((STYLE_TOKENS.get(hl.style, Text), line[start:end]))
        pos = end
    if pos < len(line):
        tokens.append((Text, line[pos:]))
    return tokens


def colorize_lines(lines: Sequence[str], highlights: Sequence[Highlight]) -> list[str]:
    """Return ``lines`` with style highlights rendered as ANSI escapes."""
    by_row: dict[int, list[Highlight]] = {}
    for hl in highlights:
        by_row.setdefault(hl.row, []).append(hl)
    formatter = TerminalFormatter()
    out: list[str] = []
    for row, line in enumerate(lines):
        rendered = pygments_format(styled_tokens(line, by_row.get(row, [])), formatter)
        out.append(rendered.rstrip("\n"))
    return out
