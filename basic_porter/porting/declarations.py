"""
Declaration passes: forward declarations, DIM sigils and TYPE blocks.
"""

import re
from typing import List, Optional, Tuple

from ..source import code_part, comment_part, indentation, split_statements, split_top_level
from .base import PortingPass, strip_code

_DECLARE_RE = re.compile(r"^(?:\d+\s+)?DECLARE\s+(SUB|FUNCTION)\b", re.IGNORECASE)

_DIM_RE = re.compile(
    r"^\s*(?:\d+\s+)?(DIM|REDIM|STATIC|COMMON|SHARED)\b"
    r"(?:\s+_?PRESERVE\b)?(?:\s+SHARED\b)?(?:\s*/\w*/)?",
    re.IGNORECASE,
)
_DECLARATOR_RE = re.compile(r"^(\s*)([A-Za-z_]\w*)(~?(?:&&|##|%%|%&|[%&!#$]))")
_AS_TYPE_RE = re.compile(
    r"^\s+AS\s+((?:_UNSIGNED\s+)?_?[A-Za-z]\w*)(\s*\*\s*\w+)?",
    re.IGNORECASE,
)

SIGIL_TYPES = {
    "%": "INTEGER",
    "&": "LONG",
    "!": "SINGLE",
    "#": "DOUBLE",
    "$": "STRING",
    "&&": "_INTEGER64",
    "##": "_FLOAT",
    "%%": "_BYTE",
    "%&": "_OFFSET",
    "~%": "_UNSIGNED INTEGER",
    "~&": "_UNSIGNED LONG",
    "~&&": "_UNSIGNED _INTEGER64",
    "~%%": "_UNSIGNED _BYTE",
    "~%&": "_UNSIGNED _OFFSET",
}

_TYPE_START_RE = re.compile(r"^\s*TYPE\s+([A-Za-z_]\w*)\s*$", re.IGNORECASE)
_TYPE_END_RE = re.compile(r"^\s*END\s+TYPE\b", re.IGNORECASE)
_FIELD_RE = re.compile(
    r"^\s*([A-Za-z_]\w*)([%&!#$~]*)\s+AS\s+(.+?)\s*$",
    re.IGNORECASE,
)


class ForwardDeclarationPass(PortingPass):
    """QB64-PE does not need DECLARE SUB/FUNCTION; DECLARE LIBRARY stays."""

    name = "forward-declarations"

    def transform(self, lines, log, options):
        kept = []
        removed = []
        for line in lines:
            code = strip_code(line)
            if _DECLARE_RE.match(code):
                removed.append(code)
                continue
            kept.append(line)
        if removed:
            self.record(
                log,
                f"Removed {len(removed)} forward declaration(s): {', '.join(removed)}",
            )
        return kept


def _matching_paren(text: str, start: int) -> int:
    """Index just past the parenthesis group opening at start, or -1."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def _normalise_type(type_name: str) -> str:
    return " ".join(type_name.upper().split())


class DimSigilPass(PortingPass):
    """Drops a type sigil that repeats the declarator's AS clause."""

    name = "dim-sigils"

    def transform(self, lines, log, options):
        out = []
        removed = 0
        for number, line in enumerate(lines, 1):
            edits = []
            for start, stmt in split_statements(line):
                m = _DIM_RE.match(stmt)
                if not m:
                    continue
                body_start = start + m.end()
                for offset, part in split_top_level(stmt[m.end():]):
                    edit = self._sigil_edit(part, number, log)
                    if edit:
                        edits.append((body_start + offset + edit[0], body_start + offset + edit[1]))
            for s, e in sorted(edits, reverse=True):
                line = line[:s] + line[e:]
            removed += len(edits)
            out.append(line)
        if removed:
            self.record(log, f"Removed {removed} redundant type sigil(s) from declarations")
        return out

    def _sigil_edit(self, part: str, number: int, log) -> Optional[Tuple[int, int]]:
        m = _DECLARATOR_RE.match(part)
        if not m:
            return None
        rest_at = m.end()
        if part[rest_at:].lstrip().startswith("("):
            paren = part.index("(", rest_at)
            close = _matching_paren(part, paren)
            if close < 0:
                return None
            rest_at = close
        as_m = _AS_TYPE_RE.match(part[rest_at:])
        if not as_m:
            return None
        sigil = m.group(3)
        declared = _normalise_type(as_m.group(1))
        expected = SIGIL_TYPES.get(sigil)
        name = m.group(2) + sigil
        if expected == declared:
            bare = m.group(2)
            if self.tables.is_qb64_keyword(bare) or self.tables.is_reserved_word(bare):
                log.warn(
                    f"Line {number}: {name} would become the keyword {bare.upper()} without "
                    "its sigil, declaration left unchanged"
                )
                return None
            return m.start(3), m.end(3)
        log.warn(
            f"Line {number}: {name} is declared AS {as_m.group(1)}; the sigil and type "
            "disagree, declaration left unchanged"
        )
        return None


class TypeDeclarationPass(PortingPass):
    """Splits, de-sigils and normalizes TYPE ... END TYPE fields."""

    name = "type-declarations"

    def transform(self, lines, log, options):
        out: List[str] = []
        changed = 0
        type_name = None
        for line in lines:
            code = code_part(line)
            if type_name is None:
                m = _TYPE_START_RE.match(code)
                if m:
                    type_name = m.group(1)
                out.append(line)
                continue
            if _TYPE_END_RE.match(code):
                type_name = None
                out.append(line)
                continue

            new_lines = self._fields(line, type_name, log)
            if new_lines != [line]:
                changed += 1
            out.extend(new_lines)
        if changed:
            self.record(log, f"Modernized {changed} TYPE field declaration line(s)")
        return out

    def _fields(self, line: str, type_name: str, log) -> List[str]:
        statements = split_statements(line)
        if not statements:
            return [line]
        indent = indentation(line)
        fields = []
        for _, stmt in statements:
            m = _FIELD_RE.match(stmt)
            if not m:
                # QB64 "AS type name, ..." fields and anything else stay as written.
                return [line]
            name, sigil, type_text = m.groups()
            type_text = " ".join(type_text.split())
            type_text = re.sub(r"\s*\*\s*", " * ", type_text)
            if _normalise_type(type_text) == "STRING":
                log.warn(
                    f"TYPE {type_name} field {name}: variable-length STRING changes the record "
                    "layout; use STRING * n for fixed-size records"
                )
            if sigil and (self.tables.is_qb64_keyword(name) or self.tables.is_reserved_word(name)):
                log.warn(
                    f"TYPE {type_name} field {name}{sigil} would become the keyword "
                    f"{name.upper()} without its sigil; sigil kept"
                )
                fields.append(f"{indent}{name}{sigil} As {type_text}")
                continue
            fields.append(f"{indent}{name} As {type_text}")
        comment = comment_part(line)
        if comment:
            fields[-1] = f"{fields[-1]} {comment}"
        return fields
