"""
Base checker class for QB64-PE compatibility issues.
"""

from typing import List, Optional, Tuple

from .issue import CompatibilityIssue, RuleExample, Severity
from .source import SourceDocument, is_comment, mask_line


class BaseChecker:
    """Base class for all checkers."""

    def __init__(self):
        self.issues: List = []
        self.document: Optional[SourceDocument] = None
        self.lines: Tuple[str, ...] = ()
        self._masked: Optional[List[str]] = None

    def check(self, document: SourceDocument) -> List:
        """Run checks on the given document."""
        self.document = document
        self.lines = document.lines
        self.issues = []
        self._masked = None
        self._run_checks()
        return self.issues

    def _run_checks(self):
        """Override in subclasses to implement specific checks."""
        pass

    @property
    def masked_lines(self) -> List[str]:
        """Lines with string literals and comments blanked, columns preserved."""
        if self._masked is None:
            self._masked = [mask_line(line) for line in self.lines]
        return self._masked

    def _add_issue(
        self,
        severity: Severity,
        line_num: int,
        col: int,
        pattern: str,
        message: str,
        suggestion: str,
        category: str,
        examples: Optional[RuleExample] = None,
        alternatives: Tuple[str, ...] = (),
    ):
        """Add an issue to the list."""
        self.issues.append(
            CompatibilityIssue(
                line=line_num,
                column=col,
                pattern=pattern,
                message=message,
                severity=severity,
                category=category,
                suggestion=suggestion,
                examples=examples,
                alternatives=alternatives,
            )
        )

    def _is_comment(self, line: str) -> bool:
        """Check if line is a comment."""
        return is_comment(line)
