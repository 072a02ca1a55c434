"""Element-level diff entry point — runs the configured strategies and merges findings."""

from __future__ import annotations

import logging
from typing import Iterable

from pagediff.models.config import DiffConfig
from pagediff.models.snapshot import PageSnapshot

from .field_diff import diff_fields
from .fuzzy_diff import diff_fuzzy

logger = logging.getLogger(__name__)


def _identity(diff) -> tuple:
    if diff.kind == "currency":
        return ("currency", diff.url1_value, diff.url2_value)
    return (diff.category, diff.detail)


def merge_differences(*groups: Iterable) -> list:
    """Concatenate difference lists, keeping the first of any duplicate finding.

    A currency change seen by several strategies is one finding; the copy that
    carries coordinates wins so it can still be drawn.
    """
    merged: list = []
    index: dict[tuple, int] = {}
    for group in groups:
        for diff in group:
            key = _identity(diff)
            if key not in index:
                index[key] = len(merged)
                merged.append(diff)
                continue
            existing = merged[index[key]]
            if getattr(existing, "coordinates", None) is None and getattr(diff, "coordinates", None) is not None:
                merged[index[key]] = diff
    return merged


def diff_elements(s1: PageSnapshot, s2: PageSnapshot, config: DiffConfig | None = None) -> list:
    """Run the field and/or fuzzy diff according to ``element_diff_mode``."""
    config = config or DiffConfig()
    field_findings = diff_fields(s1, s2, config) if config.element_diff_mode in ("field", "both") else []
    fuzzy_findings = diff_fuzzy(s1, s2, config) if config.element_diff_mode in ("fuzzy", "both") else []
    differences = merge_differences(field_findings, fuzzy_findings)
    logger.info(
        "Element diff: %d differences (%d field, %d fuzzy)",
        len(differences), len(field_findings), len(fuzzy_findings),
    )
    return differences
