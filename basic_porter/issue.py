"""
Issue and result data models for the BASIC porting toolkit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Severity(Enum):
    """Compatibility issue severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RiskLevel(Enum):
    """Keyboard-buffer risk levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CompatibilityLevel(Enum):
    """Overall verdict of a porting run."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RuleExample:
    """Incorrect/correct snippet pair attached to a rule."""
    incorrect: str
    correct: str


@dataclass(frozen=True)
class CompatibilityIssue:
    """A located compatibility problem found by the analyzer."""
    line: int
    column: int
    pattern: str
    message: str
    severity: Severity
    category: str
    suggestion: str
    examples: Optional[RuleExample] = None
    alternatives: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "line": self.line,
            "column": self.column,
            "pattern": self.pattern,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category,
            "suggestion": self.suggestion,
            "alternatives": list(self.alternatives),
        }
        if self.examples is not None:
            data["examples"] = {
                "incorrect": self.examples.incorrect,
                "correct": self.examples.correct,
            }
        return data


@dataclass(frozen=True)
class TransformationRecord:
    """One applied rewrite; list order is pass execution order."""
    pass_name: str
    description: str


@dataclass
class PortingResult:
    """Outcome of one pipeline run. Owned by the caller."""
    original_code: str
    ported_code: str
    transformations: List[TransformationRecord]
    warnings: List[str]
    errors: List[str]
    compatibility_level: CompatibilityLevel
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_code": self.original_code,
            "ported_code": self.ported_code,
            "transformations": [
                {"pass_name": t.pass_name, "description": t.description}
                for t in self.transformations
            ],
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "compatibility_level": self.compatibility_level.value,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class KeyUsage:
    """A keyboard-handling site: kind is keydown, inkey, keyhit, drain, ctrl, alt or shift."""
    kind: str
    line: int
    column: int


@dataclass(frozen=True)
class KeyboardBufferIssue:
    """A keyboard-buffer hazard with its risk tier."""
    line: int
    column: int
    pattern: str
    message: str
    suggestion: str
    category: str
    risk_level: RiskLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "column": self.column,
            "pattern": self.pattern,
            "message": self.message,
            "suggestion": self.suggestion,
            "category": self.category,
            "risk_level": self.risk_level.value,
        }


_RISK_ORDER = (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)


@dataclass(frozen=True)
class KeyboardBufferSafetyResult:
    """Keyboard analysis result.

    ``summary`` is derived on every access from ``issues`` and ``usages``;
    there is no stored tally that could drift from them.
    """
    issues: Tuple[KeyboardBufferIssue, ...]
    usages: Tuple[KeyUsage, ...]
    suggestions: Tuple[str, ...] = ()
    best_practices: Tuple[str, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    @property
    def risk_level(self) -> Optional[RiskLevel]:
        """Highest risk among the issues, or None when there are none."""
        for level in _RISK_ORDER:
            if any(i.risk_level == level for i in self.issues):
                return level
        return None

    def _count_usages(self, kind: str) -> int:
        return sum(1 for u in self.usages if u.kind == kind)

    def _count_risk(self, level: RiskLevel) -> int:
        return sum(1 for i in self.issues if i.risk_level == level)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "total_issues": len(self.issues),
            "high_risk": self._count_risk(RiskLevel.HIGH),
            "medium_risk": self._count_risk(RiskLevel.MEDIUM),
            "low_risk": self._count_risk(RiskLevel.LOW),
            "keydown_usages": self._count_usages("keydown"),
            "inkey_usages": self._count_usages("inkey"),
            "buffer_drains": self._count_usages("drain"),
            "ctrl_modifier_checks": self._count_usages("ctrl"),
            "alt_modifier_checks": self._count_usages("alt"),
            "shift_modifier_checks": self._count_usages("shift"),
        }

    def to_dict(self) -> Dict[str, Any]:
        level = self.risk_level
        return {
            "has_issues": self.has_issues,
            "risk_level": level.value if level else None,
            "issues": [i.to_dict() for i in self.issues],
            "suggestions": list(self.suggestions),
            "best_practices": list(self.best_practices),
            "summary": self.summary,
        }
