"""
DEF FN to FUNCTION conversion.

Single-line definitions become FUNCTION blocks appended after the main
module; statements after the definition on the same line stay where they
were. Multi-line DEF ... END DEF blocks keep their body and only have the
header and footer keywords rewritten.
"""

import re
from typing import List, Optional, Set

from ..source import CODE, code_part, comment_part, mask_line, segments, split_statements
from .base import TOKEN_RE, PortingPass, rebuild_line

_SINGLE_RE = re.compile(
    r"^(?P<indent>\s*)(?P<lineno>\d+\s+)?DEF\s+(?P<fn>FN)\s*(?P<name>[A-Za-z_]\w*[%&!#$]?)\s*"
    r"(?:\((?P<params>[^)]*)\))?\s*=\s*(?P<expr>.+?)\s*$",
    re.IGNORECASE,
)
_MULTI_RE = re.compile(
    r"^(?P<indent>\s*)(?P<lineno>\d+\s+)?DEF\s+(?P<fn>FN)\s*(?P<name>[A-Za-z_]\w*[%&!#$]?)\s*"
    r"(?:\((?P<params>[^)]*)\))?\s*$",
    re.IGNORECASE,
)
_DEF_FN_RE = re.compile(r"^\s*(?:\d+\s+)?DEF\s+FN", re.IGNORECASE)
_EXIT_DEF_RE = re.compile(r"\bEXIT\s+DEF\b", re.IGNORECASE)
_END_DEF_RE = re.compile(r"^(\s*)END\s+DEF\b", re.IGNORECASE)
_SPACED_CALL_RE = re.compile(r"(?<![\w$.])(FN)\s+([A-Za-z_]\w*)", re.IGNORECASE)
_LOCAL_DECL_RE = re.compile(r"^\s*(?:DIM|STATIC)\s+(.*)$", re.IGNORECASE)
_PARAM_NAME_RE = re.compile(r"^\s*(?:BYVAL\s+)?([A-Za-z_]\w*[%&!#$]?)", re.IGNORECASE)


def _base_name(name: str) -> str:
    return name.rstrip("%&!#$").upper()


def _param_names(params: Optional[str]) -> Set[str]:
    names = set()
    for part in (params or "").split(","):
        m = _PARAM_NAME_RE.match(part)
        if m:
            names.add(_base_name(m.group(1)))
    return names


class DefFnPass(PortingPass):
    """Converts DEF FN definitions to FUNCTION procedures."""

    name = "def-fn"

    def transform(self, lines, log, options):
        out: List[str] = []
        generated: List[List[str]] = []
        converted_single = []
        converted_multi = []
        in_multi: Optional[dict] = None

        for number, line in enumerate(lines, 1):
            code = code_part(line)
            if in_multi is not None:
                m = _END_DEF_RE.match(code)
                if m:
                    out.append(rebuild_line(line, _END_DEF_RE.sub(r"\1End Function", code, count=1)))
                    self._warn_free_variables(log, in_multi["name"], in_multi["params"], in_multi["body"])
                    in_multi = None
                    continue
                new_code = _EXIT_DEF_RE.sub("Exit Function", code)
                out.append(rebuild_line(line, new_code) if new_code != code else line)
                in_multi["body"].append(code)
                continue

            statements = split_statements(line)
            for _, later in statements[1:]:
                if _DEF_FN_RE.match(later):
                    log.warn(
                        f"Line {number}: DEF FN follows another statement on the line; "
                        f"left unchanged: {later.strip()}"
                    )
            if not statements or not _DEF_FN_RE.match(statements[0][1]):
                out.append(line)
                continue
            start, first = statements[0]
            # ": stmt ..." after the definition stays in the main module
            tail = code[start + len(first):]
            rest = tail.strip().lstrip(":").strip()

            m = _SINGLE_RE.match(first)
            if m:
                name = m.group("fn") + m.group("name")
                params = m.group("params")
                block = self._function_block(name, params, m.group("expr"))
                comment = comment_part(line)
                if comment:
                    block[0] = f"{block[0]} {comment}"
                generated.append(block)
                converted_single.append(name)
                self._warn_free_variables(log, name, _param_names(params), [m.group("expr")])
                kept = " ".join(p for p in ((m.group("lineno") or "").strip(), rest) if p)
                if kept:
                    out.append(m.group("indent") + kept)
                continue

            m = _MULTI_RE.match(first)
            if m:
                name = m.group("fn") + m.group("name")
                params = m.group("params")
                header = f"{m.group('indent')}{(m.group('lineno') or '')}Function {name}"
                if params is not None:
                    header += f"({params.strip()})"
                out.append(rebuild_line(line, header + tail.rstrip()))
                converted_multi.append(name)
                in_multi = {
                    "name": name,
                    "params": _param_names(params),
                    "body": [rest] if rest else [],
                }
                continue

            log.warn(
                f"Line {number}: DEF FN definition is malformed, no rewrite attempted: "
                f"{first.strip()}"
            )
            out.append(line)

        if in_multi is not None:
            log.error(f"DEF {in_multi['name']} has no matching END DEF")

        if generated:
            while out and not out[-1].strip():
                out.pop()
            for block in generated:
                out.append("")
                out.extend(block)
            self.record(
                log,
                f"Converted {len(converted_single)} DEF FN statement(s) to proper functions: "
                f"{', '.join(converted_single)}",
            )
        if converted_multi:
            self.record(
                log,
                f"Converted {len(converted_multi)} multi-line DEF FN block(s) to FUNCTION: "
                f"{', '.join(converted_multi)}",
            )

        return self._join_spaced_calls(out, log)

    @staticmethod
    def _function_block(name: str, params: Optional[str], expr: str) -> List[str]:
        header = f"Function {name}"
        if params is not None:
            header += f"({params.strip()})"
        return [header, f"    {name} = {expr}", "End Function"]

    def _join_spaced_calls(self, lines: List[str], log) -> List[str]:
        """FN X(...) -> FNX(...), once per call site."""
        count = 0

        def repl(m):
            nonlocal count
            if self.tables.is_reserved_word(m.group(2)):
                return m.group(0)
            count += 1
            return m.group(1) + m.group(2)

        out = []
        for line in lines:
            parts = []
            for kind, _, text in segments(line):
                if kind == CODE:
                    text = _SPACED_CALL_RE.sub(repl, text)
                parts.append(text)
            out.append("".join(parts))
        if count:
            self.record(log, f"Joined {count} spaced FN call(s) into function names")
        return out

    def _warn_free_variables(self, log, name: str, params: Set[str], body: List[str]):
        known = set(params) | {_base_name(name)}
        free = []
        for code in body:
            masked = mask_line(code)
            local = _LOCAL_DECL_RE.match(masked)
            if local:
                for part in local.group(1).split(","):
                    pm = _PARAM_NAME_RE.match(part)
                    if pm:
                        known.add(_base_name(pm.group(1)))
                continue
            for m in TOKEN_RE.finditer(masked):
                token = m.group(0)
                base = _base_name(token)
                if (
                    base in known
                    or base.startswith("FN")
                    or self.tables.is_reserved_word(token)
                    or self.tables.is_qb64_keyword(m.group(1))
                ):
                    continue
                if token not in free:
                    free.append(token)
                    known.add(base)
        if free:
            log.warn(
                f"{name} uses module-level variable(s) {', '.join(free)}; FUNCTION locals "
                "are not shared, declare them with DIM SHARED"
            )
