"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from pagediff.models.result import ComparisonBundle


def generate_json_report(bundle: ComparisonBundle, output_path: Path) -> None:
    """Write a machine-readable JSON report."""
    report = bundle.model_dump(mode="json")
    report["total_differences"] = bundle.total_differences
    for result in report["results"]:
        # Snapshots are kept in the result store; the report carries findings only.
        result.pop("data", None)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
