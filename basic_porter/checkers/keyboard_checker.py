"""
Keyboard-buffer safety checks.

_KEYDOWN reports key state without consuming the keystroke, so the character
stays in the keyboard buffer and is later returned by INKEY$ or _KEYHIT.
CTRL and ALT combinations put ASCII control codes (CTRL+A=1 ... CTRL+Z=26,
CTRL+3=27) into that buffer. Every poll therefore needs a drain such as
DO WHILE _KEYHIT: LOOP in the same control region.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..checker_base import BaseChecker
from ..issue import KeyboardBufferIssue, KeyboardBufferSafetyResult, KeyUsage, RiskLevel
from ..source import SourceDocument, mask_line, split_statements

ESC_CODE = 27
CTRL_CODES = (100305, 100306)
ALT_CODES = (100307, 100308)
SHIFT_CODES = (100303, 100304)

# Character codes that are also common named keys (Backspace, Tab, LF, Enter).
NAMED_KEY_CODES = (8, 9, 10, 13)

EXIT_LOOKBACK_LINES = 10

RISK_TABLE: Dict[str, RiskLevel] = {
    "unpaired-poll": RiskLevel.HIGH,
    "modifier-capture": RiskLevel.MEDIUM,
    "exit-after-poll": RiskLevel.MEDIUM,
    "competing-handlers": RiskLevel.MEDIUM,
    "control-code-compare": RiskLevel.LOW,
}

DRAIN_IDIOM = "DO WHILE _KEYHIT: LOOP"

BEST_PRACTICES = (
    "Use 'DO WHILE _KEYHIT: LOOP' to drain the keyboard buffer after _KEYDOWN() checks",
    "Place buffer drains BEFORE INKEY$ when CTRL/ALT/SHIFT modifiers are detected",
    "CTRL+number keys produce specific ASCII values: CTRL+3=27(ESC), CTRL+2=0",
    "Multiple handlers can process the same keystroke if buffer isn't properly consumed",
    "_KEYDOWN() detects key state but doesn't consume characters from the buffer",
)

_KEYDOWN_RE = re.compile(r"(?<![\w$])_KEYDOWN\s*\(\s*([^)]*?)\s*\)", re.IGNORECASE)
_INKEY_RE = re.compile(r"(?<![\w$])INKEY\$", re.IGNORECASE)
_KEYHIT_RE = re.compile(r"(?<![\w$])_KEYHIT\b", re.IGNORECASE)
_EXIT_RE = re.compile(r"\bEXIT\s+(SUB|FUNCTION)\b", re.IGNORECASE)
_DRAIN_RE = re.compile(
    r"\bDO\s+WHILE\s+_KEYHIT\b[^:]*:\s*LOOP\b"
    r"|\bDO\s+UNTIL\s+_KEYHIT\s*=\s*0\s*:\s*LOOP\b"
    r"|\bDO\s*:\s*LOOP\s+(?:WHILE\s+_KEYHIT\b|UNTIL\s+_KEYHIT\s*=\s*0)"
    r"|\bWHILE\s+_KEYHIT\b[^:]*:\s*WEND\b"
    r"|\b(?:DO\s+)?WHILE\s+INKEY\$\s*<>\s*\"\"\s*:\s*(?:WEND|LOOP)\b"
    r"|(?<![\w$])_KEYCLEAR\b",
    re.IGNORECASE,
)
_CHR_RE = re.compile(r"(?<![\w$])CHR\$\s*\(\s*(\d+)\s*\)", re.IGNORECASE)
_COMPARE_STMT_RE = re.compile(r"^\s*(?:\d+\s+)?(IF|ELSEIF|CASE|DO|LOOP|WHILE)\b", re.IGNORECASE)

_OPEN_LOOP_RE = re.compile(r"^\s*(?:\d+\s+)?(DO|WHILE|FOR)\b", re.IGNORECASE)
_CLOSE_LOOP_RE = re.compile(r"^\s*(?:\d+\s+)?(LOOP|WEND|NEXT)\b", re.IGNORECASE)
_OPEN_PROC_RE = re.compile(r"^\s*(?:\d+\s+)?(SUB|FUNCTION)\s+\w", re.IGNORECASE)
_CLOSE_PROC_RE = re.compile(r"^\s*END\s+(SUB|FUNCTION)\b", re.IGNORECASE)


@dataclass(frozen=True)
class _Site:
    line: int
    column: int
    region: int
    text: str


def _code_value(arg: str) -> Optional[int]:
    arg = arg.strip()
    try:
        if arg.upper().startswith("&H"):
            return int(arg[2:], 16)
        return int(arg)
    except ValueError:
        return None


class KeyboardBufferChecker(BaseChecker):
    """Finds keyboard polls and reads that can leak or double-handle keystrokes."""

    def __init__(self):
        super().__init__()
        self._parents: Dict[int, Optional[int]] = {}
        self.usages: List[KeyUsage] = []

    def analyze(self, document: SourceDocument) -> KeyboardBufferSafetyResult:
        issues = self.check(document)
        issues.sort(key=lambda i: (i.line, i.column))
        return KeyboardBufferSafetyResult(
            issues=tuple(issues),
            usages=tuple(self.usages),
            suggestions=tuple(self._suggestions(issues)),
            best_practices=BEST_PRACTICES,
        )

    def _run_checks(self):
        self.usages = []
        self._parents = {0: None}
        polls, reads, drains, exits, modifier_regions, compares = self._scan()

        for poll in polls:
            if not self._paired(poll, drains):
                self._report_unpaired(poll)

        for read in reads:
            if read.text != "INKEY$" or read.region not in modifier_regions:
                continue
            drained = any(
                self._covers(d.region, read.region) and (d.line, d.column) < (read.line, read.column)
                for d in drains
            )
            if not drained:
                self._add_risk(
                    read, "modifier-capture",
                    "INKEY$ may capture control characters from CTRL/ALT+key combinations",
                    f"Add '{DRAIN_IDIOM}' before INKEY$ when modifier keys are in use",
                )

        seen_regions = set()
        for read in reads:
            if read.region in seen_regions:
                self._add_risk(
                    read, "competing-handlers",
                    f"Another {read.text} read in the same block can consume the keystroke "
                    "meant for an earlier handler",
                    "Read the key once per iteration into a variable and dispatch on it",
                )
            seen_regions.add(read.region)

        for exit_site in exits:
            recent = [
                p for p in polls
                if exit_site.line - EXIT_LOOKBACK_LINES <= p.line < exit_site.line
                or (p.line == exit_site.line and p.column < exit_site.column)
            ]
            if not recent:
                continue
            last = max(recent, key=lambda p: (p.line, p.column))
            drained = any(
                (last.line, last.column) <= (d.line, d.column) < (exit_site.line, exit_site.column)
                for d in drains
            )
            if not drained:
                self._add_risk(
                    exit_site, "exit-after-poll",
                    "EXIT after _KEYDOWN() check without buffer drain may leave control "
                    "characters in buffer",
                    f"Add '{DRAIN_IDIOM}' before EXIT to consume any buffered control characters",
                )

        for site, code in compares:
            self._add_risk(
                site, "control-code-compare",
                f"CHR$({code}) is also produced by CTRL+{chr(ord('A') + code - 1)}, so this "
                "comparison can be triggered by a modifier combination",
                "Check _KEYDOWN for the modifier or drain the buffer before comparing "
                "against control characters",
            )

    def _scan(self):
        polls: List[_Site] = []
        reads: List[_Site] = []
        drains: List[_Site] = []
        exits: List[_Site] = []
        compares: List[Tuple[_Site, int]] = []
        modifier_regions = set()

        stack = [0]
        next_region = 1

        for index, line in enumerate(self.lines):
            line_num = index + 1
            masked = self.masked_lines[index]
            if not masked.strip():
                continue
            with_strings = mask_line(line, keep_strings=True)

            # Region each statement starts in, before its own open/close applies.
            statements = []
            for start, stmt in split_statements(masked):
                region = stack[-1]
                statements.append((start, start + len(stmt), region, stmt))
                if _OPEN_PROC_RE.match(stmt):
                    self._parents[next_region] = None
                    stack.append(next_region)
                    next_region += 1
                elif _OPEN_LOOP_RE.match(stmt):
                    self._parents[next_region] = stack[-1]
                    stack.append(next_region)
                    next_region += 1
                elif (_CLOSE_LOOP_RE.match(stmt) or _CLOSE_PROC_RE.match(stmt)) and len(stack) > 1:
                    stack.pop()

            def region_at(col: int) -> int:
                for s, e, region, _ in statements:
                    if s <= col <= e:
                        return region
                return statements[-1][2] if statements else stack[-1]

            drain_spans = []
            for m in _DRAIN_RE.finditer(with_strings):
                drain_spans.append(m.span())
                drains.append(_Site(line_num, m.start() + 1, region_at(m.start()), m.group(0)))
                self.usages.append(KeyUsage("drain", line_num, m.start() + 1))

            def in_drain(pos: int) -> bool:
                return any(s <= pos < e for s, e in drain_spans)

            for m in _KEYDOWN_RE.finditer(masked):
                site = _Site(line_num, m.start() + 1, region_at(m.start()), m.group(0))
                polls.append(site)
                self.usages.append(KeyUsage("keydown", line_num, m.start() + 1))
                code = _code_value(m.group(1))
                for kind, codes in (("ctrl", CTRL_CODES), ("alt", ALT_CODES), ("shift", SHIFT_CODES)):
                    if code in codes:
                        self.usages.append(KeyUsage(kind, line_num, m.start() + 1))
                        if kind in ("ctrl", "alt"):
                            modifier_regions.add(site.region)

            for regex, kind, label in ((_INKEY_RE, "inkey", "INKEY$"), (_KEYHIT_RE, "keyhit", "_KEYHIT")):
                for m in regex.finditer(masked):
                    if in_drain(m.start()):
                        continue
                    reads.append(_Site(line_num, m.start() + 1, region_at(m.start()), label))
                    self.usages.append(KeyUsage(kind, line_num, m.start() + 1))

            for m in _EXIT_RE.finditer(masked):
                exits.append(_Site(line_num, m.start() + 1, region_at(m.start()), m.group(0)))

            for start, _, region, stmt in statements:
                if not _COMPARE_STMT_RE.match(stmt):
                    continue
                for m in _CHR_RE.finditer(stmt):
                    code = int(m.group(1))
                    if 1 <= code <= 26 and code not in NAMED_KEY_CODES:
                        site = _Site(line_num, start + m.start() + 1, region, m.group(0))
                        compares.append((site, code))

        reads.sort(key=lambda s: (s.line, s.column))
        return polls, reads, drains, exits, modifier_regions, compares

    def _covers(self, drain_region: int, region: Optional[int]) -> bool:
        """True if region is drain_region or nested inside it."""
        while region is not None:
            if region == drain_region:
                return True
            region = self._parents.get(region)
        return False

    def _paired(self, poll: _Site, drains: List[_Site]) -> bool:
        return any(self._covers(d.region, poll.region) for d in drains)

    def _report_unpaired(self, poll: _Site):
        code = _code_value(_KEYDOWN_RE.match(poll.text).group(1))
        if code == ESC_CODE:
            pattern = "_KEYDOWN(27)"
            message = ("ESC key detection without keyboard buffer drain may cause "
                       "control character leakage")
            suggestion = (f"Add '{DRAIN_IDIOM}' after handling ESC to prevent ASCII 27 "
                          "from leaking to INKEY$")
        elif code in CTRL_CODES:
            pattern = "_KEYDOWN(CTRL)"
            message = ("CTRL+key combinations can produce ASCII control characters (0-31) "
                       "that leak to INKEY$")
            suggestion = (f"Add '{DRAIN_IDIOM}' to drain buffer when CTRL is held, "
                          "before checking INKEY$")
        else:
            pattern = poll.text
            message = ("_KEYDOWN() poll without a keyboard buffer drain in the same block "
                       "leaves the keystroke in the buffer")
            suggestion = f"Add '{DRAIN_IDIOM}' in the same loop or procedure as the poll"
        self.issues.append(
            KeyboardBufferIssue(
                line=poll.line,
                column=poll.column,
                pattern=pattern,
                message=message,
                suggestion=suggestion,
                category="unpaired-poll",
                risk_level=RISK_TABLE["unpaired-poll"],
            )
        )

    def _add_risk(self, site: _Site, category: str, message: str, suggestion: str):
        self.issues.append(
            KeyboardBufferIssue(
                line=site.line,
                column=site.column,
                pattern=site.text,
                message=message,
                suggestion=suggestion,
                category=category,
                risk_level=RISK_TABLE[category],
            )
        )

    def _suggestions(self, issues: List[KeyboardBufferIssue]) -> List[str]:
        kinds = {u.kind for u in self.usages}
        out = []
        if "keydown" in kinds and "inkey" in kinds and "drain" not in kinds:
            out.append(
                "Your code uses both _KEYDOWN() and INKEY$ but has no keyboard buffer drains. "
                f"Consider adding '{DRAIN_IDIOM}' at strategic points."
            )
        if "ctrl" in kinds:
            out.append(
                "CTRL+key combinations produce ASCII control characters (CTRL+A=1, CTRL+B=2, "
                "..., CTRL+Z=26). CTRL+2=0, CTRL+3=27(ESC), CTRL+6=30. These may trigger "
                "unintended handlers."
            )
        if not issues and "drain" in kinds:
            out.append(
                "Good practice: Your code includes keyboard buffer drains which help prevent "
                "control character leakage."
            )
        return out
