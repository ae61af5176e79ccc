"""
Token and pattern substitution passes. None of them depends on the output of
another, so their relative order does not matter.
"""

import re

from ..source import code_part, mask_line, split_statements, sub_code
from .base import PortingPass, rebuild_line

_PUT_GET_RE = re.compile(
    r"(?<![\w$.])(PUT|GET)"
    r"(\s*(?:STEP\s*)?\([^)]*\)(?:\s*-\s*(?:STEP\s*)?\([^)]*\))?\s*,\s*)"
    r"([A-Za-z_]\w*[%&!#$]?)(?![\w%&!#$])(?!\s*\()",
    re.IGNORECASE,
)

_STRING_FUNCTION_RE = re.compile(r"(?<![\w$.])([A-Za-z_]\w*\$)", re.IGNORECASE)
_SIGILLESS_STRING_FUNCTIONS = (
    "LEFT", "RIGHT", "MID", "LTRIM", "RTRIM", "UCASE", "LCASE",
    "STR", "CHR", "SPACE", "STRING", "HEX", "OCT",
)
_SIGILLESS_RE = re.compile(
    r"(?<![\w$.])(" + "|".join(_SIGILLESS_STRING_FUNCTIONS) + r")(?![\w%&!#$~])(?=\s*\()",
    re.IGNORECASE,
)
_TRIM_RE = re.compile(r"(?<![\w$.])TRIM(\$?)(?=\s*\()", re.IGNORECASE)
_USER_TRIM_RE = re.compile(r"^\s*FUNCTION\s+TRIM\$?(?![\w$])", re.IGNORECASE)

_PI_RE = re.compile(
    r"(?<![\w$.])([A-Za-z_]\w*[#!]?)(\s*=\s*)"
    r"(?:4\s*\*\s*ATN\s*\(\s*1[#!]?\s*\)|ATN\s*\(\s*1[#!]?\s*\)\s*\*\s*4)"
    r"(?=\s*(?::|$))",
    re.IGNORECASE,
)

_END_RE = re.compile(r"^(\s*(?:\d+\s+)?)END\s*$", re.IGNORECASE)

_REST_RE = re.compile(r"^(\s*(?:\d+\s+)?)REST(?![\w%&!#$])\s+(?!=)(\S.*?)\s*$", re.IGNORECASE)
_SUB_REST_RE = re.compile(r"^\s*SUB\s+REST\b", re.IGNORECASE)
_TIMER_DIFF_RE = re.compile(r"(?<![\w$.])TIMER\s*-\s*[A-Za-z_]", re.IGNORECASE)
_FOR_RE = re.compile(r"^\s*(?:\d+\s+)?FOR\s+[A-Za-z_]\w*[%&!#]?\s*=.+\bTO\b[^:]+$", re.IGNORECASE)
_EMPTY_FOR_RE = re.compile(
    r"^\s*(?:\d+\s+)?FOR\s+[A-Za-z_]\w*[%&!#]?\s*=.+\bTO\b[^:]+:\s*NEXT\b[\w\s%&!#]*$",
    re.IGNORECASE,
)
_NEXT_RE = re.compile(r"^\s*(?:\d+\s+)?NEXT\b[\w\s%&!#]*$", re.IGNORECASE)


class ArraySyntaxPass(PortingPass):
    """Graphics PUT/GET take the array with empty parentheses in QB64."""

    name = "array-syntax"

    def transform(self, lines, log, options):
        out = []
        total = 0
        for line in lines:
            line, n = sub_code(_PUT_GET_RE, r"\1\2\3()", line)
            total += n
            out.append(line)
        if total:
            self.record(log, f"Added () to {total} array argument(s) of graphics PUT/GET")
        return out


class StringFunctionPass(PortingPass):
    """Canonical casing for string functions and the `$` that QB64 requires."""

    name = "string-functions"

    def transform(self, lines, log, options):
        profile = self.tables.dialect(options.source_dialect.value)
        add_sigils = bool(profile and profile.sigilless_string_functions)
        user_trim = any(_USER_TRIM_RE.match(code_part(line)) for line in lines)
        functions = self.tables.categories.get("functions", frozenset())
        cased = 0
        sigils = 0

        def case(m):
            nonlocal cased
            word = m.group(1)
            if word.upper() not in functions:
                return word
            canonical = self.tables.canonical_case(word)
            if canonical != word:
                cased += 1
            return canonical

        def add_sigil(m):
            nonlocal sigils
            sigils += 1
            return self.tables.canonical_case(m.group(1) + "$")

        def trim(m):
            nonlocal sigils
            if user_trim or (not m.group(1) and not add_sigils):
                return m.group(0)
            sigils += 1
            return self.tables.canonical_case("_TRIM$")

        out = []
        for line in lines:
            line, _ = sub_code(_STRING_FUNCTION_RE, case, line)
            if add_sigils:
                line, _ = sub_code(_SIGILLESS_RE, add_sigil, line)
            line, _ = sub_code(_TRIM_RE, trim, line)
            out.append(line)
        if cased:
            self.record(log, f"Converted {cased} string function(s) to proper casing")
        if sigils:
            self.record(log, f"Rewrote {sigils} string function call(s) to their QB64 $ form")
        return out


class MathConstantPass(PortingPass):
    """v = 4 * ATN(1) -> v = _Pi"""

    name = "math-constants"

    def transform(self, lines, log, options):
        pi = self.tables.canonical_case("_PI") or "_Pi"
        out = []
        total = 0
        for line in lines:
            line, n = sub_code(_PI_RE, lambda m: f"{m.group(1)}{m.group(2)}{pi}", line)
            total += n
            out.append(line)
        if total:
            self.record(log, f"Converted {total} manual pi calculation(s) to the built-in {pi} constant")
        return out


class ExitStatementPass(PortingPass):
    """A bare END closes the QB64 window at once; System 0 exits cleanly."""

    name = "exit-statements"

    def transform(self, lines, log, options):
        out = []
        total = 0
        for line in lines:
            m = _END_RE.match(code_part(line))
            if m:
                line = rebuild_line(line, f"{m.group(1)}System 0")
                total += 1
            out.append(line)
        if total:
            self.record(log, f"Converted {total} END statement(s) to System 0")
        return out


class TimingPass(PortingPass):
    name = "timing"

    def transform(self, lines, log, options):
        delay = self.tables.canonical_case("_DELAY") or "_Delay"
        out = []
        converted = 0
        for line in lines:
            edits = []
            for start, stmt in split_statements(line):
                m = _REST_RE.match(stmt)
                if m:
                    edits.append((start, start + len(stmt), f"{m.group(1)}{delay} {m.group(2)}"))
            for s, e, text in reversed(edits):
                line = line[:s] + text + line[e:]
            converted += len(edits)
            out.append(line)

        if converted:
            self.record(log, f"Converted {converted} Rest call(s) to {delay}")
            if any(_SUB_REST_RE.match(code_part(line)) for line in out):
                log.warn(f"SUB Rest is still defined but no longer called; {delay} replaced its calls")

        masked = [mask_line(line) for line in out]
        if any(_TIMER_DIFF_RE.search(text) for text in masked):
            log.warn("Consider using Timer(.001) for more precise timing in QB64PE")
        if options.optimize_performance:
            self._warn_busy_waits(masked, log)
        return out

    @staticmethod
    def _warn_busy_waits(masked, log):
        for index, text in enumerate(masked):
            if _EMPTY_FOR_RE.match(text):
                line_number = index + 1
            elif _FOR_RE.match(text):
                following = next(
                    (t for t in masked[index + 1:] if t.strip()), "",
                )
                if not _NEXT_RE.match(following):
                    continue
                line_number = index + 1
            else:
                continue
            log.warn(
                f"Line {line_number}: empty FOR ... NEXT delay loop runs at CPU speed in QB64PE; "
                "use _Delay or _Limit instead"
            )
