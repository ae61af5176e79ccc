"""
Source model and lexical scanning primitives shared by the analyzers and the
porting passes.

BASIC has no escape sequences inside string literals, so a literal runs from
one double quote to the next one or to the end of the line. A comment starts
at an apostrophe outside a string, or at a REM statement.
"""

import bisect
import re
from dataclasses import dataclass, field
from typing import Callable, List, Pattern, Tuple, Union

CODE = "code"
STRING = "string"
COMMENT = "comment"

_REM = re.compile(r"REM(?![\w$.])", re.IGNORECASE)
_STATEMENT_PREFIX = re.compile(r"\s*(\d+\s*)?")

Segment = Tuple[str, int, str]


def _at_statement_start(line: str, pos: int) -> bool:
    prefix = line[:pos]
    if _STATEMENT_PREFIX.fullmatch(prefix):
        return True
    return prefix.rstrip().endswith(":")


def segments(line: str) -> List[Segment]:
    """Split a physical line into (kind, start, text) runs of code, string and comment."""
    out: List[Segment] = []
    start = 0
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if i > start:
                out.append((CODE, start, line[start:i]))
            close = line.find('"', i + 1)
            end = n if close == -1 else close + 1
            out.append((STRING, i, line[i:end]))
            i = start = end
            continue
        if ch == "'" or (ch in "Rr" and _REM.match(line, i) and _at_statement_start(line, i)):
            if i > start:
                out.append((CODE, start, line[start:i]))
            out.append((COMMENT, i, line[i:]))
            return out
        i += 1
    if start < n:
        out.append((CODE, start, line[start:]))
    return out


def code_part(line: str) -> str:
    """The line up to its comment, strings included."""
    for kind, start, _ in segments(line):
        if kind == COMMENT:
            return line[:start]
    return line


def comment_part(line: str) -> str:
    for kind, _, text in segments(line):
        if kind == COMMENT:
            return text
    return ""


def mask_line(line: str, keep_strings: bool = False) -> str:
    """Blank out comments (and strings) with spaces so columns stay aligned."""
    parts = []
    for kind, _, text in segments(line):
        if kind == CODE or (kind == STRING and keep_strings):
            parts.append(text)
        else:
            parts.append(" " * len(text))
    return "".join(parts)


def is_comment(line: str) -> bool:
    """True if the whole line is a comment (or REM statement)."""
    for kind, _, text in segments(line):
        if kind == CODE and not text.strip():
            continue
        return kind == COMMENT
    return False


def is_blank_or_comment(line: str) -> bool:
    return not line.strip() or is_comment(line)


def sub_code(
    pattern: Pattern,
    repl: Union[str, Callable],
    line: str,
) -> Tuple[str, int]:
    """re.subn applied to the code runs of a line only; strings and comments are kept."""
    total = 0
    parts = []
    for kind, _, text in segments(line):
        if kind == CODE:
            text, n = pattern.subn(repl, text)
            total += n
        parts.append(text)
    return "".join(parts), total


def split_statements(line: str) -> List[Tuple[int, str]]:
    """Colon-separated statements of the code part, as (start column, text)."""
    masked = mask_line(line, keep_strings=False)
    out = []
    start = 0
    for i, ch in enumerate(masked):
        if ch == ":":
            out.append((start, line[start:i]))
            start = i + 1
    code_end = len(code_part(line))
    if start < code_end:
        out.append((start, line[start:code_end]))
    return [(s, t) for s, t in out if t.strip()]


def split_top_level(text: str, sep: str = ",") -> List[Tuple[int, str]]:
    """Split on sep outside parentheses and string literals, as (offset, part)."""
    out = []
    depth = 0
    start = 0
    in_string = False
    for i, ch in enumerate(text):
        if ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            out.append((start, text[start:i]))
            start = i + 1
    out.append((start, text[start:]))
    return out


def indentation(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


@dataclass(frozen=True)
class SourceDocument:
    """Immutable source text with a 1-based line index.

    CRLF input is normalised to LF internally; ``render`` restores the
    original newline convention.
    """
    text: str
    newline: str = "\n"
    lines: Tuple[str, ...] = field(init=False, repr=False, compare=False)
    _starts: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        text = self.text
        if "\r\n" in text:
            text = text.replace("\r\n", "\n")
            object.__setattr__(self, "text", text)
            object.__setattr__(self, "newline", "\r\n")
        lines = tuple(text.split("\n"))
        starts = []
        offset = 0
        for ln in lines:
            starts.append(offset)
            offset += len(ln) + 1
        object.__setattr__(self, "lines", lines)
        object.__setattr__(self, "_starts", tuple(starts))

    @classmethod
    def from_lines(cls, lines: List[str], newline: str = "\n") -> "SourceDocument":
        doc = cls("\n".join(lines))
        if newline != "\n":
            object.__setattr__(doc, "newline", newline)
        return doc

    def replace_text(self, text: str) -> "SourceDocument":
        """A new document with the same newline convention."""
        return SourceDocument.from_lines(text.split("\n"), self.newline)

    def with_lines(self, lines: List[str]) -> "SourceDocument":
        return SourceDocument.from_lines(list(lines), self.newline)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line(self, number: int) -> str:
        """Line by 1-based number."""
        return self.lines[number - 1]

    def offset_of(self, line: int, column: int) -> int:
        """Character offset of a 1-based (line, column)."""
        return self._starts[line - 1] + column - 1

    def position(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of a character offset."""
        idx = bisect.bisect_right(self._starts, offset) - 1
        idx = max(idx, 0)
        return idx + 1, offset - self._starts[idx] + 1

    def render(self) -> str:
        return self.text.replace("\n", self.newline) if self.newline != "\n" else self.text
