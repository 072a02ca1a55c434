"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from pagediff.models.config import FrameworkConfig
from pagediff.models.result import ComparisonBundle

from .html_report import generate_html_report
from .json_report import generate_json_report
from .markdown_report import generate_markdown_report

logger = logging.getLogger(__name__)


class Reporter:
    """Generates reports from comparison bundles."""

    def __init__(self, config: FrameworkConfig):
        self.config = config

    def generate_reports(
        self,
        bundle: ComparisonBundle,
        output_dir: Path | None = None,
        formats: list[str] | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        formats = formats if formats is not None else self.config.report_formats
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        if "html" in formats:
            path = out_dir / f"report_{bundle.id}.html"
            logger.debug("Generating HTML report...")
            generate_html_report(bundle, path)
            generated["html"] = str(path)
            logger.info("HTML report: %s", path)

        if "json" in formats:
            path = out_dir / f"report_{bundle.id}.json"
            logger.debug("Generating JSON report...")
            generate_json_report(bundle, path)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        if "markdown" in formats:
            path = out_dir / f"report_{bundle.id}.md"
            logger.debug("Generating Markdown report...")
            generate_markdown_report(bundle, path)
            generated["markdown"] = str(path)
            logger.info("Markdown report: %s", path)

        return generated
