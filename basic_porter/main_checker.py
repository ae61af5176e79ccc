"""
Main checker class that coordinates all checkers.
"""

import logging
from typing import List

from .checkers import KeyboardBufferChecker, PatternChecker, ReservedWordChecker
from .issue import CompatibilityIssue, KeyboardBufferSafetyResult
from .source import SourceDocument
from .tables import KeywordTables, PatternRule, RuleSet

logger = logging.getLogger(__name__)


class CompatibilityAnalyzer:
    """Scans BASIC source for QB64-PE compatibility issues.

    The analyzer holds only the injected, immutable tables, so one instance
    can serve any number of concurrent callers. Source text is never
    modified.
    """

    def __init__(self, rules: RuleSet, tables: KeywordTables):
        self.rules = rules
        self.tables = tables

    def analyze(self, source_text: str) -> List[CompatibilityIssue]:
        """Located issues, sorted by (line, column).

        The sort is stable: for equal positions, pattern-rule issues keep
        table order and precede reserved-word issues.
        """
        document = SourceDocument(source_text)
        issues: List[CompatibilityIssue] = []
        for checker in (PatternChecker(self.rules), ReservedWordChecker(self.tables)):
            issues.extend(checker.check(document))
        issues.sort(key=lambda i: (i.line, i.column))
        logger.debug("Analyzed %d lines: %d issue(s)", document.line_count, len(issues))
        return issues

    def check_keyboard_safety(self, source_text: str) -> KeyboardBufferSafetyResult:
        """Keyboard-buffer hazards with their risk levels and a usage summary."""
        document = SourceDocument(source_text)
        result = KeyboardBufferChecker().analyze(document)
        logger.debug("Keyboard safety: %d issue(s)", len(result.issues))
        return result

    def search_rules(self, query: str) -> List[PatternRule]:
        """Rules whose name, category, message or suggestion mention query."""
        return self.rules.search(query)

    def best_practices(self) -> List[str]:
        return list(self.rules.best_practices)
