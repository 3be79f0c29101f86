"""Comment and string masking for PHP source.

Structural parsing and token counting run over a *masked* copy of the file
in which the contents of comments and string literals are blanked out. The
masked text has exactly the same length and line breaks as the original, so
offsets and line numbers computed on it are valid for the raw text.
"""

import re
from bisect import bisect_right
from dataclasses import dataclass, field

_HEREDOC_START = re.compile(r"<<<[ \t]*(['\"]?)([A-Za-z_]\w*)\1\r?\n")


@dataclass(frozen=True)
class DocComment:
    start: int
    end: int  # offset just past the closing */
    text: str

    @property
    def summary(self) -> str:
        """First prose line of the comment, without tags."""
        for line in self.text.splitlines():
            cleaned = line.strip().lstrip("/").lstrip("*").strip()
            if cleaned.endswith("*/"):
                cleaned = cleaned[:-2].strip()
            if cleaned and not cleaned.startswith("@"):
                return cleaned
        return ""


@dataclass
class MaskedSource:
    original: str
    masked: str
    doc_comments: list[DocComment] = field(default_factory=list)


class LineIndex:
    """Offset -> 1-based line number lookups."""

    def __init__(self, text: str):
        self._starts = [0]
        for match in re.finditer("\n", text):
            self._starts.append(match.end())

    def line_at(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def __len__(self) -> int:
        return len(self._starts)


def _blank(chars: list[str], start: int, end: int) -> None:
    for i in range(start, end):
        if chars[i] != "\n":
            chars[i] = " "


def _string_end(text: str, start: int, quote: str) -> int:
    """Offset of the closing quote of a string starting at ``start``."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i
        i += 1
    return n - 1


def mask_source(text: str) -> MaskedSource:
    """Blank out comments and string contents, collecting doc comments."""
    chars = list(text)
    docs: list[DocComment] = []
    n = len(text)
    i = 0

    while i < n:
        ch = text[i]

        if ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            if text.startswith("/**", i) and not text.startswith("/**/", i):
                docs.append(DocComment(start=i, end=end, text=text[i:end]))
            _blank(chars, i, end)
            i = end
            continue

        if (ch == "/" and text.startswith("//", i)) or (ch == "#" and not text.startswith("#[", i)):
            end = text.find("\n", i)
            end = n if end == -1 else end
            _blank(chars, i, end)
            i = end
            continue

        if ch in ("'", '"', "`"):
            end = _string_end(text, i, ch)
            _blank(chars, i + 1, end)
            i = end + 1
            continue

        if ch == "<" and text.startswith("<<<", i):
            match = _HEREDOC_START.match(text, i)
            if match:
                label = match.group(2)
                closing = re.compile(rf"^[ \t]*{re.escape(label)}\b", re.MULTILINE)
                close_match = closing.search(text, match.end())
                end = close_match.start() if close_match else n
                _blank(chars, match.end(), end)
                i = close_match.end() if close_match else n
                continue

        i += 1

    return MaskedSource(original=text, masked="".join(chars), doc_comments=docs)


def match_brace(masked: str, open_offset: int) -> int:
    """Offset of the brace closing the one at ``open_offset``, or -1."""
    depth = 0
    for i in range(open_offset, len(masked)):
        ch = masked[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def match_paren(masked: str, open_offset: int) -> int:
    """Offset of the parenthesis closing the one at ``open_offset``, or -1."""
    depth = 0
    for i in range(open_offset, len(masked)):
        ch = masked[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def top_level_view(masked: str, start: int, end: int) -> str:
    """Text of ``masked[start:end]`` with everything nested in braces blanked.

    Used to look at the members of a class body without descending into
    method bodies. Offsets in the returned string are relative to ``start``.
    """
    chars = list(masked[start:end])
    depth = 0
    for i, ch in enumerate(chars):
        if ch == "{":
            depth += 1
            chars[i] = " "
        elif ch == "}":
            if depth > 0:
                chars[i] = " "
            depth -= 1
        elif depth > 0 and ch != "\n":
            chars[i] = " "
    return "".join(chars)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, so line numbers agree with offset-based lookups."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
