"""
Rule-table driven compatibility checks.
"""

from typing import List, Tuple

from ..checker_base import BaseChecker
from ..source import mask_line
from ..tables import SCOPE_LINE, SCOPE_STRINGS, RuleSet


class PatternChecker(BaseChecker):
    """Applies every rule of a RuleSet to every physical line."""

    def __init__(self, rules: RuleSet):
        super().__init__()
        self.rules = rules

    def _text_for_scope(self, index: int, scope: str) -> str:
        line = self.lines[index]
        if scope == SCOPE_LINE:
            return line
        if scope == SCOPE_STRINGS:
            return mask_line(line, keep_strings=True)
        return self.masked_lines[index]

    def _run_checks(self):
        for index, line in enumerate(self.lines):
            if not line.strip():
                continue
            # Spans accepted so far on this line; an earlier rule wins an overlap.
            taken: List[Tuple[int, int]] = []
            for rule in self.rules:
                text = self._text_for_scope(index, rule.scope)
                for m in rule.pattern.finditer(text):
                    start, end = m.span()
                    if start == end:
                        continue
                    if any(start < e and s < end for s, e in taken):
                        continue
                    taken.append((start, end))
                    self._add_issue(
                        rule.severity,
                        index + 1,
                        start + 1,
                        line[start:end].strip(),
                        rule.message,
                        rule.suggestion,
                        rule.category,
                        examples=rule.examples,
                    )
