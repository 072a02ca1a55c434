"""HTML report generator — produces a self-contained HTML report of a comparison bundle."""

from __future__ import annotations

import base64
import html
import logging
from datetime import datetime
from pathlib import Path

from pagediff.models.result import ComparisonBundle, ComparisonResult

logger = logging.getLogger(__name__)

SEVERITY_ORDER = ("high", "medium", "low")


def _embed_image(path: str | None) -> str:
    """Read an image file and return a base64 data URI, or empty string on failure."""
    if not path:
        return ""
    try:
        p = Path(path)
        if not p.exists() or p.stat().st_size == 0:
            return ""
        with open(p, "rb") as f:
            data = base64.b64encode(f.read()).decode()
        suffix = p.suffix.lower()
        mime = "image/png" if suffix == ".png" else "image/jpeg" if suffix in (".jpg", ".jpeg") else "image/webp"
        return f"data:{mime};base64,{data}"
    except OSError as e:
        logger.debug("Could not embed %s: %s", path, e)
        return ""


def _difference_rows(result: ComparisonResult) -> str:
    if not result.differences:
        return '<tr><td colspan="5" class="empty">No differences found</td></tr>'

    rows = ""
    for index, diff in enumerate(result.differences, 1):
        rows += f'''
        <tr class="sev-{diff.severity}">
          <td>#{index}</td>
          <td><span class="badge {diff.severity}">{diff.severity.upper()}</span></td>
          <td>{html.escape(diff.type)}</td>
          <td><strong>{html.escape(diff.category)}</strong></td>
          <td>{html.escape(diff.detail)}{f'<div class="location">{html.escape(diff.location)}</div>' if diff.location else ""}</td>
        </tr>'''
    return rows


def _screenshot_block(label: str, path: str | None) -> str:
    data_uri = _embed_image(path)
    if not data_uri:
        return ""
    return f'''
    <div class="screenshot-item">
      <img src="{data_uri}" alt="{html.escape(label)}" loading="lazy" onclick="this.classList.toggle('zoomed')"/>
      <div class="screenshot-label">{html.escape(label)}</div>
    </div>'''


def _build_state_card(bundle: ComparisonBundle, result: ComparisonResult) -> str:
    """Build the card for one interaction state."""
    summary = result.summary
    severities = " &middot; ".join(
        f"{summary.by_severity.get(s, 0)} {s}" for s in SEVERITY_ORDER
    )
    shots = result.screenshots
    screenshots = (
        _screenshot_block(f"URL 1: {bundle.url1}", shots.highlighted_url1 or shots.url1)
        + _screenshot_block(f"URL 2: {bundle.url2}", shots.highlighted_url2 or shots.url2)
        + _screenshot_block("Pixel diff", shots.diff)
    )

    card = f'''
    <div class="state-card expanded">
      <div class="state-header" onclick="this.parentElement.classList.toggle('expanded')">
        <div>
          <strong>State: {html.escape(result.state)}</strong>
          <span class="state-meta">{summary.total_differences} differences &middot; {severities}
            &middot; {summary.pixel_differences} changed pixels in {summary.regions} regions</span>
        </div>
        <span class="expand-arrow">&#9660;</span>
      </div>
      <div class="state-body">
        <table>
          <thead><tr><th></th><th>Severity</th><th>Type</th><th>Category</th><th>Detail</th></tr></thead>
          <tbody>{_difference_rows(result)}</tbody>
        </table>'''
    if screenshots:
        card += f'<div class="section"><h4>Screenshots</h4><div class="screenshots-grid">{screenshots}</div></div>'
    card += '</div></div>'
    return card


def generate_html_report(bundle: ComparisonBundle, output_path: Path) -> None:
    """Generate a self-contained HTML report with one card per state."""
    started = datetime.fromtimestamp(bundle.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    description = (
        f'<div class="description">{html.escape(bundle.description)}</div>' if bundle.description else ""
    )
    by_severity = {s: 0 for s in SEVERITY_ORDER}
    for result in bundle.results:
        for severity, count in result.summary.by_severity.items():
            by_severity[severity] = by_severity.get(severity, 0) + count

    cards = "".join(_build_state_card(bundle, r) for r in bundle.results)

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Page Comparison &mdash; {html.escape(bundle.id)}</title>
<style>
  :root {{ --high: #ff453a; --medium: #ff9f0a; --low: #0a84ff; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1rem; font-size: 0.9rem; word-break: break-all; }}
  .description {{ background: #f1f5f9; border-radius: 4px; padding: 0.5rem; margin-bottom: 1rem; font-size: 0.9rem; }}
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(130px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.high .value {{ color: var(--high); }}
  .stat.medium .value {{ color: var(--medium); }}
  .stat.low .value {{ color: var(--low); }}
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; color: white; white-space: nowrap; }}
  .badge.high {{ background: var(--high); }}
  .badge.medium {{ background: var(--medium); }}
  .badge.low {{ background: var(--low); }}
  .state-card {{ background: var(--card); border-radius: 8px; margin-bottom: 0.8rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); overflow: hidden; }}
  .state-header {{ display: flex; justify-content: space-between; align-items: center; padding: 0.7rem 1rem; cursor: pointer; user-select: none; }}
  .state-header:hover {{ background: #f8fafc; }}
  .state-meta {{ font-size: 0.78rem; color: var(--muted); margin-left: 0.5rem; }}
  .expand-arrow {{ color: var(--muted); font-size: 0.7rem; transition: transform 0.2s; }}
  .state-card.expanded .expand-arrow {{ transform: rotate(180deg); }}
  .state-body {{ display: none; padding: 0 1rem 1rem 1rem; }}
  .state-card.expanded .state-body {{ display: block; }}
  table {{ width: 100%; border-collapse: collapse; font-size: 0.85rem; margin-bottom: 1rem; }}
  th {{ text-align: left; color: var(--muted); font-weight: 600; border-bottom: 1px solid var(--border); padding: 0.35rem; }}
  td {{ border-bottom: 1px solid #f1f5f9; padding: 0.35rem; vertical-align: top; }}
  td.empty {{ color: var(--muted); text-align: center; }}
  .location {{ color: var(--muted); font-size: 0.78rem; }}
  .section h4 {{ font-size: 0.85rem; color: var(--muted); text-transform: uppercase; letter-spacing: 0.05em; margin-bottom: 0.4rem; padding-bottom: 0.25rem; border-bottom: 1px solid var(--border); }}
  .screenshots-grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); gap: 0.6rem; }}
  .screenshot-item {{ text-align: center; }}
  .screenshot-item img {{ width: 100%; border-radius: 6px; border: 1px solid var(--border); cursor: pointer; }}
  .screenshot-item img.zoomed {{ position: fixed; top: 5%; left: 5%; width: 90%; height: 90%; object-fit: contain; z-index: 1000; background: rgba(0,0,0,0.85); border: none; border-radius: 8px; padding: 1rem; }}
  .screenshot-label {{ font-size: 0.75rem; color: var(--muted); margin-top: 0.2rem; word-break: break-all; }}
</style>
</head>
<body>
<div class="container">
  <h1>Page Comparison Report</h1>
  <p class="meta">Comparison {html.escape(bundle.id)} &middot; {started}<br>
    URL 1: {html.escape(bundle.url1)}<br>URL 2: {html.escape(bundle.url2)}</p>
  {description}

  <div class="summary">
    <div class="stat"><div class="value">{bundle.total_differences}</div><div class="label">Differences</div></div>
    <div class="stat high"><div class="value">{by_severity["high"]}</div><div class="label">High</div></div>
    <div class="stat medium"><div class="value">{by_severity["medium"]}</div><div class="label">Medium</div></div>
    <div class="stat low"><div class="value">{by_severity["low"]}</div><div class="label">Low</div></div>
    <div class="stat"><div class="value">{len(bundle.results)}</div><div class="label">States</div></div>
  </div>

  {cards}
</div>
</body>
</html>'''

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
