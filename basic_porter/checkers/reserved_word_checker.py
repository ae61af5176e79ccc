"""
Reserved-word collision checks for user identifiers: declared names, and
names a program introduces implicitly by assigning or reading into them.
"""

import re
from typing import Iterator, Tuple

from ..checker_base import BaseChecker
from ..issue import Severity
from ..source import split_statements, split_top_level
from ..tables import KeywordTables

_NAME = r"[A-Za-z_][\w.]*[%&!#$~]*"

_DECLARE_RE = re.compile(
    r"^\s*(?:\d+\s+)?(DIM|REDIM|STATIC|COMMON|SHARED)\b"
    r"(?:\s+_?PRESERVE\b)?(?:\s+SHARED\b)?(?:\s*/\w*/)?",
    re.IGNORECASE,
)
_CONST_RE = re.compile(r"^\s*(?:\d+\s+)?CONST\b", re.IGNORECASE)
_PROC_RE = re.compile(
    rf"^\s*(?:\d+\s+)?(SUB|FUNCTION)\s+({_NAME})\s*(?:\((.*)\))?",
    re.IGNORECASE,
)
_FOR_RE = re.compile(rf"^\s*(?:\d+\s+)?FOR\s+({_NAME})\s*=", re.IGNORECASE)
_TYPE_START_RE = re.compile(r"^\s*TYPE\s+\w+\s*$", re.IGNORECASE)
_TYPE_END_RE = re.compile(r"^\s*END\s+TYPE\b", re.IGNORECASE)
_FIELD_RE = re.compile(rf"^\s*({_NAME})\s+AS\b", re.IGNORECASE)
_AS_FIRST_RE = re.compile(
    r"^\s*AS\s+(?:_UNSIGNED\s+)?\w+(?:\s*\*\s*\d+)?\s+",
    re.IGNORECASE,
)
_LEADING_NAME_RE = re.compile(rf"^\s*(?:BYVAL\s+)?({_NAME})", re.IGNORECASE)
_ASSIGN_RE = re.compile(rf"^(\s*(?:\d+\s+)?(?:LET\s+)?)({_NAME})\s*=", re.IGNORECASE)
_INPUT_RE = re.compile(r"^\s*(?:\d+\s+)?(?:LINE\s+INPUT|INPUT|READ)\b", re.IGNORECASE)
_INPUT_PREFIX_RE = re.compile(r"\s*(?:#\s*[^,]*,|;)?\s*(?:[;,])?")

# Statements written as assignments.
_ASSIGNMENT_STATEMENTS = frozenset({"DATE$", "TIME$"})


class ReservedWordChecker(BaseChecker):
    """Flags variables, constants, procedures, parameters, loop counters and
    TYPE fields whose names are QB64-PE reserved words. Undeclared variables
    are checked where they first appear."""

    def __init__(self, tables: KeywordTables):
        super().__init__()
        self.tables = tables

    def _run_checks(self):
        in_type = False
        implicit_seen = set()
        for index, line in enumerate(self.masked_lines):
            if _TYPE_START_RE.match(line):
                in_type = True
                continue
            if _TYPE_END_RE.match(line):
                in_type = False
                continue
            for start, stmt in split_statements(line):
                declared = list(self._declared_names(stmt, in_type))
                for offset, name, kind in declared:
                    self._check_name(index + 1, start + offset + 1, name, kind)
                if declared or in_type:
                    continue
                # first use only; later assignments to the same name add nothing
                for offset, name in self._implicit_names(stmt):
                    if name.upper() in implicit_seen:
                        continue
                    implicit_seen.add(name.upper())
                    self._check_name(index + 1, start + offset + 1, name, "variable")

    def _declared_names(self, stmt: str, in_type: bool) -> Iterator[Tuple[int, str, str]]:
        if in_type:
            yield from self._names_in_list(stmt, 0, "TYPE field", in_type=True)
            return

        m = _DECLARE_RE.match(stmt)
        if m:
            yield from self._names_in_list(stmt[m.end():], m.end(), "variable")
            return

        m = _CONST_RE.match(stmt)
        if m:
            yield from self._names_in_list(stmt[m.end():], m.end(), "constant")
            return

        m = _PROC_RE.match(stmt)
        if m:
            kind = m.group(1).lower()
            yield m.start(2), m.group(2), kind
            if m.group(3) is not None:
                yield from self._names_in_list(m.group(3), m.start(3), "parameter")
            return

        m = _FOR_RE.match(stmt)
        if m:
            yield m.start(1), m.group(1), "loop counter"

    def _implicit_names(self, stmt: str) -> Iterator[Tuple[int, str]]:
        """Targets of INPUT, LINE INPUT and READ, or of a plain assignment."""
        m = _INPUT_RE.match(stmt)
        if m:
            prefix = _INPUT_PREFIX_RE.match(stmt, m.end())
            for offset, name, _ in self._names_in_list(stmt[prefix.end():], prefix.end(), "variable"):
                yield offset, name
            return

        m = _ASSIGN_RE.match(stmt)
        if m and m.group(2).upper() not in _ASSIGNMENT_STATEMENTS:
            yield m.start(2), m.group(2)

    def _names_in_list(
        self, text: str, base: int, kind: str, in_type: bool = False,
    ) -> Iterator[Tuple[int, str, str]]:
        as_first = _AS_FIRST_RE.match(text)
        if as_first:
            # QB64 style: DIM AS INTEGER a, b
            base += as_first.end()
            text = text[as_first.end():]
        for offset, part in split_top_level(text):
            if in_type and not as_first:
                m = _FIELD_RE.match(part)
            else:
                m = _LEADING_NAME_RE.match(part)
            if m:
                yield base + offset + m.start(1), m.group(1), kind

    def _check_name(self, line_num: int, col: int, name: str, kind: str):
        if "." in name or not self.tables.is_reserved_word(name):
            return
        alternatives = tuple(self.tables.reserved_word_alternatives(name))
        self._add_issue(
            Severity.ERROR,
            line_num,
            col,
            name,
            f"'{name}' is a QB64-PE reserved word and cannot be used as a {kind} name",
            f"Rename it, for example: {', '.join(alternatives)}",
            "reserved-word",
            alternatives=alternatives,
        )
