"""
Plain-text reports for analyzer issues, keyboard checks and porting runs.
"""

from deps import Dict, List

from .issue import (
    CompatibilityIssue,
    KeyboardBufferSafetyResult,
    PortingResult,
    RiskLevel,
    Severity,
)


class ReportGenerator:
    """Generate reports from issues and results."""

    @staticmethod
    def generate_text_report(issues: List[CompatibilityIssue], source_name: str = "input") -> str:
        """Generate a text report."""
        if not issues:
            return f"\n✓ No QB64-PE compatibility issues found in {source_name}\n"

        report = [f"\n{'='*80}"]
        report.append(f"QB64-PE Compatibility Report: {source_name}")
        report.append(f"{'='*80}\n")

        groups = (
            ("ERRORS", Severity.ERROR),
            ("WARNINGS", Severity.WARNING),
            ("INFO", Severity.INFO),
        )
        counts = {}
        for heading, severity in groups:
            selected = [i for i in issues if i.severity == severity]
            counts[severity] = len(selected)
            if not selected:
                continue
            report.append(f"{heading} ({len(selected)}):")
            report.append("-" * 80)
            for issue in selected:
                report.append(f"  Line {issue.line}, column {issue.column}: {issue.message}")
                report.append(f"    Code: {issue.pattern}")
                report.append(f"    Fix: {issue.suggestion}")
                report.append(f"    Category: {issue.category}\n")

        report.append(
            f"\nSummary: {counts[Severity.ERROR]} errors, {counts[Severity.WARNING]} warnings, "
            f"{counts[Severity.INFO]} info"
        )
        report.append("="*80)

        return "\n".join(report)

    @staticmethod
    def generate_summary(issues: List[CompatibilityIssue]) -> Dict[str, int]:
        """Generate a summary count by category."""
        summary = {}
        for issue in issues:
            summary[issue.category] = summary.get(issue.category, 0) + 1
        return summary

    @staticmethod
    def generate_keyboard_report(result: KeyboardBufferSafetyResult) -> str:
        if not result.has_issues:
            return "\n✓ No keyboard buffer issues found\n"

        report = [f"\n{'='*80}"]
        report.append(f"Keyboard Buffer Safety Report (risk: {result.risk_level.value.upper()})")
        report.append(f"{'='*80}\n")

        for level in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW):
            selected = [i for i in result.issues if i.risk_level == level]
            if not selected:
                continue
            report.append(f"{level.value.upper()} RISK ({len(selected)}):")
            report.append("-" * 80)
            for issue in selected:
                report.append(f"  Line {issue.line}: {issue.message}")
                report.append(f"    Code: {issue.pattern}")
                report.append(f"    Fix: {issue.suggestion}\n")

        if result.suggestions:
            report.append("Suggestions:")
            report.extend(f"  - {s}" for s in result.suggestions)

        summary = result.summary
        report.append(
            f"\nSummary: {summary['total_issues']} issues, {summary['keydown_usages']} _KEYDOWN "
            f"poll(s), {summary['inkey_usages']} INKEY$ read(s), {summary['buffer_drains']} drain(s)"
        )
        report.append("="*80)
        return "\n".join(report)

    @staticmethod
    def generate_porting_report(result: PortingResult) -> str:
        report = [f"\n{'='*80}"]
        report.append("QB64-PE Porting Report")
        report.append(f"{'='*80}\n")
        report.append(result.summary)
        report.append("")

        if result.transformations:
            report.append(f"TRANSFORMATIONS ({len(result.transformations)}):")
            report.append("-" * 80)
            for record in result.transformations:
                report.append(f"  [{record.pass_name}] {record.description}")
            report.append("")
        for heading, messages in (("WARNINGS", result.warnings), ("ERRORS", result.errors)):
            if not messages:
                continue
            report.append(f"{heading} ({len(messages)}):")
            report.append("-" * 80)
            report.extend(f"  {m}" for m in messages)
            report.append("")

        report.append("="*80)
        return "\n".join(report)
