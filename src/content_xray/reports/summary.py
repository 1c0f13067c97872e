"""Report assembly and the markdown summary."""

from __future__ import annotations

from ..analysis.models import AnalysisResult, Severity
from ..scanning.models import utc_now
from .models import Priority, Report
from .recommendations import generate_recommendations

TOP_RECOMMENDATIONS = 5

_PRIORITY_MARKERS = {
    Priority.HIGH: "[HIGH]",
    Priority.MEDIUM: "[MEDIUM]",
    Priority.LOW: "[LOW]",
}


def generate_report(
    analysis: AnalysisResult,
    source_name: str = "",
    instance_url: str = "",
    scan_duration: float = 0.0,
) -> Report:
    """Wrap an analysis with recommendations and instance metadata.

    ``scan_duration`` is in seconds.
    """
    return Report(
        scan_id=analysis.scan_id,
        generated_at=utc_now(),
        source_name=source_name,
        instance_url=instance_url,
        health_score=analysis.health_score,
        health_grade=analysis.health_grade,
        scan_duration=scan_duration,
        stats=analysis.stats,
        issues=list(analysis.issues),
        recommendations=generate_recommendations(analysis),
    )


def generate_summary(report: Report) -> str:
    """Render a report as markdown. Same report in, same text out."""
    stats = report.stats
    severity_counts = {severity: 0 for severity in Severity}
    for issue in report.issues:
        severity_counts[issue.severity] += 1

    lines = [
        "# Content X-Ray Report",
        "",
        f"**Source:** {report.source_name or 'unknown'}",
    ]
    if report.instance_url:
        lines.append(f"**Instance:** {report.instance_url}")
    lines += [
        f"**Scanned:** {report.generated_at.isoformat()}",
        f"**Duration:** {report.scan_duration:.1f}s",
        "",
        f"## Health Score: {report.health_score}/100 ({report.health_grade})",
        "",
        "### Statistics",
        f"- Total Items: {stats.total_items:,}",
        f"- Total Templates: {stats.total_templates:,}",
        f"- Total Media: {stats.total_media:,}",
        f"- Total Renderings: {stats.total_renderings:,}",
        "",
        "### Issues Found",
        f"- Critical: {severity_counts[Severity.CRITICAL]}",
        f"- Warning: {severity_counts[Severity.WARNING]}",
        f"- Info: {severity_counts[Severity.INFO]}",
    ]

    if report.recommendations:
        lines += ["", "### Top Recommendations"]
        for rec in report.recommendations[:TOP_RECOMMENDATIONS]:
            marker = _PRIORITY_MARKERS[rec.priority]
            lines.append(f"- {marker} **{rec.title}** - {rec.affected_items} items")

    return "\n".join(lines)
