"""
Final review of the ported text. Never changes the source; only warns about
constructs left in place that QB64-PE may handle differently.
"""

import re

from ..source import is_blank_or_comment, mask_line, split_statements, split_top_level
from .base import PortingPass, strip_code

_LINE_NO_RE = re.compile(r"^\s*\d+\s+")
_IF_RE = re.compile(r"^IF\b", re.IGNORECASE)
_DIM_RE = re.compile(r"^(?:DIM|REDIM)\b(?:\s+_?PRESERVE\b)?(?:\s+SHARED\b)?", re.IGNORECASE)
_ARRAY_DECLARATOR_RE = re.compile(r"^\s*[A-Za-z_]\w*[%&!#$~]*\s*\(")
_FUNCTION_AS_RE = re.compile(
    r"^(?:STATIC\s+)?FUNCTION\s+[A-Za-z_]\w*\s*(?:\([^)]*\))?\s+AS\s+\w+",
    re.IGNORECASE,
)
_PROC_START_RE = re.compile(r"^(?:\d+\s+)?(?:STATIC\s+)?(?:SUB|FUNCTION)\s+[A-Za-z_]", re.IGNORECASE)
_PROC_END_RE = re.compile(r"^(?:\d+\s+)?END\s+(?:SUB|FUNCTION)\b", re.IGNORECASE)
_MODULE_LEVEL_OK_RE = re.compile(
    r"^(?:\d+\s*$|DATA\b|DECLARE\b|DEFINT\b|DEFLNG\b|DEFSNG\b|DEFDBL\b|DEFSTR\b|\$|[A-Za-z_]\w*:$)",
    re.IGNORECASE,
)


def _statements(line):
    masked = mask_line(line)
    out = []
    for start, stmt in split_statements(line):
        text = masked[start:start + len(stmt)]
        if not out:
            text = _LINE_NO_RE.sub("", text)
        out.append(text.strip())
    return out


class CompatibilityReviewPass(PortingPass):
    """Warns about multi-statement IF lines, array lists, AS return types and
    main-module code placed after a procedure."""

    name = "compatibility-review"

    def transform(self, lines, log, options):
        chained = []
        multi_array = 0
        function_as = 0
        in_procedure = False
        seen_procedure = False
        late_code_line = None

        for index, line in enumerate(lines):
            statements = _statements(line)
            ifs = sum(1 for s in statements if _IF_RE.match(s))
            if ifs > 1 or (ifs and len(statements) > 2):
                chained.append(index + 1)

            for stmt in statements:
                m = _DIM_RE.match(stmt)
                if m:
                    arrays = [
                        part for _, part in split_top_level(stmt[m.end():])
                        if _ARRAY_DECLARATOR_RE.match(part)
                    ]
                    if len(arrays) > 1:
                        multi_array += 1
                if _FUNCTION_AS_RE.match(stmt):
                    function_as += 1

            code = strip_code(line)
            if _PROC_START_RE.match(code):
                in_procedure = True
                continue
            if _PROC_END_RE.match(code):
                in_procedure = False
                seen_procedure = True
                continue
            if (
                late_code_line is None
                and seen_procedure
                and not in_procedure
                and not is_blank_or_comment(line)
                and not _MODULE_LEVEL_OK_RE.match(code)
            ):
                late_code_line = index + 1

        if chained:
            log.warn(
                f"Multi-statement lines detected at line(s) {', '.join(map(str, chained))} "
                "- consider splitting for better QB64PE compatibility"
            )
        if multi_array:
            log.warn(
                f"{multi_array} multi-array declaration(s) found - consider declaring arrays "
                "separately for better QB64PE compatibility"
            )
        if function_as:
            log.warn(
                f"{function_as} function(s) using AS clause for return type - QB64PE requires "
                "a type sigil on the function name (%, &, !, #, $)"
            )
        if late_code_line is not None:
            log.warn(
                f"Line {late_code_line}: main module code follows a SUB/FUNCTION block; "
                "QB64PE expects all procedures after the main module"
            )
        return lines
