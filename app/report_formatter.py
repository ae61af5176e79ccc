"""Format porting results as human-readable Markdown."""

from deps import List, datetime
from .schemas import IssueOut, PortResponse


def _title_case(s: str) -> str:
    """e.g. warning -> Warning, deprecated-metacommand -> Deprecated Metacommand."""
    if not s:
        return s
    return s.replace("-", " ").replace("_", " ").strip().lower().title()


def _issue_block_md(i: IssueOut) -> List[str]:
    """One issue as Markdown: Line N · Category · Severity, then message, code, fix."""
    lines = []
    lines.append(f"**Line {i.line} · {_title_case(i.category)} · {_title_case(i.severity)}**")
    lines.append("")
    lines.append(i.message)
    lines.append("")
    lines.append("- **Code:**")
    lines.append("```")
    lines.append(i.pattern)
    lines.append("```")
    lines.append("")
    lines.append("- **Fix:**")
    lines.append("```")
    lines.append(i.suggestion)
    lines.append("```")
    lines.append("")
    return lines


def format_port_report(result: PortResponse, remaining: List[IssueOut]) -> str:
    """Porting run as Markdown: summary, transformations, warnings, errors, the
    ported code and the issues the analyzer still finds in it."""
    lines = []
    lines.append("# QB64-PE Porting Report")
    lines.append("")
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("")
    lines.append(f"**Compatibility level: {_title_case(result.compatibility_level)}**")
    lines.append("")
    lines.append(result.summary)
    lines.append("")

    lines.append("## Transformations")
    lines.append("")
    if not result.transformations:
        lines.append("No transformations were needed.")
    for t in result.transformations:
        lines.append(f"- `{t.pass_name}`: {t.description}")
    lines.append("")

    if result.warnings:
        lines.append("## Warnings")
        lines.append("")
        lines.extend(f"- {w}" for w in result.warnings)
        lines.append("")

    if result.errors:
        lines.append("## Errors")
        lines.append("")
        lines.extend(f"- {e}" for e in result.errors)
        lines.append("")

    lines.append("## Ported code")
    lines.append("")
    lines.append("```basic")
    lines.append(result.ported_code)
    lines.append("```")
    lines.append("")

    lines.append("## Remaining issues")
    lines.append("")
    if not remaining:
        lines.append("No compatibility issues found in the ported code.")
        lines.append("")
    else:
        order = {"error": 0, "warning": 1, "info": 2}
        for i in sorted(remaining, key=lambda i: order.get(i.severity, 3)):
            lines.extend(_issue_block_md(i))

    return "\n".join(lines)
