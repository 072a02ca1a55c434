"""Markdown report output, grouped per state and difference type."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pagediff.models.result import ComparisonBundle, ComparisonResult


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _state_section(result: ComparisonResult) -> list[str]:
    shots = result.screenshots
    lines = [
        f"## State: {result.state}",
        "",
        "### Visual Comparison",
        "",
        f"![URL 1]({shots.highlighted_url1 or shots.url1})",
        "",
        f"![URL 2]({shots.highlighted_url2 or shots.url2})",
        "",
    ]

    if not result.differences:
        return lines + ["**No differences detected**", ""]

    lines += [f"### Summary: {len(result.differences)} difference(s) found", ""]
    by_type: dict[str, list] = {}
    for diff in result.differences:
        by_type.setdefault(diff.type, []).append(diff)

    for diff_type, diffs in by_type.items():
        lines += [
            f"#### {diff_type} Differences",
            "",
            "| Severity | Category | Details |",
            "|----------|----------|---------|",
        ]
        for diff in diffs:
            lines.append(f"| {diff.severity.upper()} | {_cell(diff.category)} | {_cell(diff.detail)} |")
        lines.append("")
    return lines


def generate_markdown_report(bundle: ComparisonBundle, output_path: Path) -> None:
    """Write a Markdown report suitable for pasting into a pull request."""
    generated = datetime.fromtimestamp(bundle.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    lines = [
        "# Page Comparison Report",
        "",
        f"**Generated:** {generated}",
        "",
        f"**URL 1:** {bundle.url1}  ",
        f"**URL 2:** {bundle.url2}",
        "",
    ]
    if bundle.description:
        lines += [bundle.description, ""]
    lines += ["---", ""]

    for result in bundle.results:
        lines += _state_section(result)
        lines += ["---", ""]

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
