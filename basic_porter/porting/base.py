"""
Base class and shared helpers for porting passes.
"""

import re
from typing import List, Optional

from ..options import DialectOptions
from ..source import SourceDocument, code_part, comment_part, indentation, mask_line
from ..tables import KeywordTables
from .log import PortingLog

# Identifier or keyword token, sigils included; never after a member-access dot.
TOKEN_RE = re.compile(r"(?<![\w$.])([A-Za-z_][A-Za-z0-9_]*)([%&!#$~]*)")

_GRAPHICS_SCREEN_RE = re.compile(r"^\s*(?:\d+\s+)?SCREEN\s+(?!0\b)[^\s(]", re.IGNORECASE)
_TEXT_SCREEN_RE = re.compile(r"SCREEN\s*(?:0\b|\()", re.IGNORECASE)
_LINE_INPUT_RE = re.compile(r"\bLINE\s+INPUT\b", re.IGNORECASE)


class PortingPass:
    """One rewrite step: (document, log, options) -> document.

    Subclasses implement ``transform`` over a list of lines and return the
    new lines; a pass that changes nothing returns the input document.
    """

    name = ""

    def __init__(self, tables: KeywordTables):
        self.tables = tables

    def run(
        self,
        document: SourceDocument,
        log: PortingLog,
        options: DialectOptions,
    ) -> SourceDocument:
        lines = list(document.lines)
        new_lines = self.transform(list(lines), log, options)
        if new_lines is None or new_lines == lines:
            return document
        return document.with_lines(new_lines)

    def transform(
        self,
        lines: List[str],
        log: PortingLog,
        options: DialectOptions,
    ) -> Optional[List[str]]:
        raise NotImplementedError

    def record(self, log: PortingLog, description: str):
        log.record(self.name, description)


def uses_graphics(lines: List[str], tables: KeywordTables) -> bool:
    """True if any code token is a graphics keyword (SCREEN 0 and LINE INPUT excluded)."""
    for line in lines:
        masked = _LINE_INPUT_RE.sub(" ", mask_line(line))
        for m in TOKEN_RE.finditer(masked):
            word = m.group(1).upper()
            if word not in tables.graphics_keywords:
                continue
            if word == "SCREEN" and _TEXT_SCREEN_RE.match(masked, m.start()):
                continue
            return True
    return False


def is_graphics_screen_statement(stmt: str) -> bool:
    return bool(_GRAPHICS_SCREEN_RE.match(stmt))


def rebuild_line(line: str, new_code: str) -> str:
    """Replace the code part of a line, keeping its trailing comment."""
    comment = comment_part(line)
    if not comment:
        return new_code
    if not new_code.strip():
        return indentation(line) + comment
    return new_code.rstrip() + " " + comment


def strip_code(line: str) -> str:
    """Code part without surrounding whitespace."""
    return code_part(line).strip()
