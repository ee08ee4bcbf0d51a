"""
Text rendering for compatibility reports.
"""

import math
from typing import List, Optional, TextIO

from ..core.console import Colors, colorize
from .models import Category, CheckStatus, CompatibilityReport, Detail, Verdict


STATUS_MARKERS = {
    CheckStatus.PASS: ("✓", Colors.GREEN),
    CheckStatus.WARN: ("⚠", Colors.YELLOW),
    CheckStatus.FAIL: ("✗", Colors.RED),
}

VERDICT_COLORS = {
    Verdict.EXCELLENT: Colors.GREEN,
    Verdict.GOOD: Colors.GREEN,
    Verdict.FAIR: Colors.YELLOW,
    Verdict.POOR: Colors.RED,
}

SECTION_TITLES = [
    (Category.OS, "Operating System Check"),
    (Category.RUNTIME, "PHP Environment Check"),
    (Category.WEB_SERVER, "Web Server Check"),
    (Category.DATABASE, "Database Support Check"),
    (Category.FILESYSTEM, "File System Check"),
    (Category.PERFORMANCE, "Performance Check"),
]


def percent(value: float) -> int:
    """Round half away from zero, the way the percentages have always been shown."""
    return int(math.floor(value + 0.5))


def format_detail(detail: Detail, stream: Optional[TextIO] = None) -> str:
    marker = STATUS_MARKERS.get(detail.status)
    if marker is None:
        return detail.message
    symbol, color = marker
    return f"{colorize(symbol, color, stream)} {detail.message}"


def render_report(
    report: CompatibilityReport,
    stream: Optional[TextIO] = None,
    title: str = "Compatibility Test",
) -> str:
    """
    Render the report as numbered sections, a summary block and recommendations.

    Args:
        report: Computed compatibility report
        stream: Stream the text is meant for (decides on colors)
        title: Report heading

    Returns:
        Report text
    """
    lines: List[str] = [
        colorize(f"=== {title} ===", Colors.BOLD, stream),
        "Testing environment for Drupal deployment...",
        "",
    ]

    for number, (category, section) in enumerate(SECTION_TITLES, start=1):
        heading = f"{number}. {section}:"
        lines.append(colorize(heading, Colors.BOLD, stream))
        lines.append("-" * len(heading))
        for check in report.checks_for(category):
            if check.name == "extensions":
                lines.append("")
                lines.append("PHP Extensions:")
            lines.extend(format_detail(detail, stream) for detail in check.details)
        lines.append("")

    lines.append(colorize("=== COMPATIBILITY SUMMARY ===", Colors.BOLD, stream))
    for entry in report.categories:
        lines.append(f"{entry.title}: {percent(entry.score)}%")
    lines.append("")
    lines.append(f"OVERALL COMPATIBILITY: {percent(report.overall_score)}%")
    lines.append(colorize(
        f"{report.verdict.value} - {report.verdict_message}",
        VERDICT_COLORS[report.verdict],
        stream,
    ))

    lines.append("")
    lines.append(colorize("=== RECOMMENDATIONS ===", Colors.BOLD, stream))
    if report.recommendations:
        lines.extend(f"• {rec}" for rec in report.recommendations)
    else:
        lines.append("No changes needed.")

    lines.append("")
    lines.append(f"Test completed at: {report.timestamp:%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)
