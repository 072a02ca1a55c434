"""Region content identification — explains each pixel region in DOM terms."""

from __future__ import annotations

import logging
from typing import Sequence

from pagediff.diff.currency import amounts_differ
from pagediff.errors import RegionAnalysisError
from pagediff.models.config import DiffConfig
from pagediff.models.difference import ContentDifference, Coordinates, CurrencyDifference
from pagediff.models.region import DiffRegion
from pagediff.models.snapshot import ElementRecord, PageSnapshot

logger = logging.getLogger(__name__)


def elements_in_region(elements: Sequence[ElementRecord], region: DiffRegion) -> list[ElementRecord]:
    """Elements whose top-left corner falls inside the region."""
    bounds = region.to_bounds()
    return [e for e in elements if bounds.contains_point(e.bounds.x, e.bounds.y)]


def _location(region: DiffRegion) -> str:
    return f"Region at ({region.x}, {region.y}) {region.width}x{region.height}"


def _preview(texts: list[str]) -> str:
    shown = "; ".join(f'"{t[:50]}"' for t in texts[:3])
    if len(texts) > 3:
        shown += f" and {len(texts) - 3} more"
    return shown


def classify_region(
    region: DiffRegion,
    snapshot1: PageSnapshot,
    snapshot2: PageSnapshot,
    config: DiffConfig,
) -> list:
    """Classify one region; an empty list means nothing explains the change."""
    inside1 = elements_in_region(snapshot1.leaf_elements, region)
    inside2 = elements_in_region(snapshot2.leaf_elements, region)
    bounds = region.to_bounds()
    location = _location(region)
    tolerance = config.position_tolerance
    differences: list = []

    explained1: set[int] = set()
    explained2: set[int] = set()
    for i, a in enumerate(inside1):
        for j, b in enumerate(inside2):
            if j in explained2:
                continue
            if abs(a.bounds.x - b.bounds.x) > tolerance or abs(a.bounds.y - b.bounds.y) > tolerance:
                continue
            change = amounts_differ(a.text, b.text)
            if change is None:
                continue
            explained1.add(i)
            explained2.add(j)
            differences.append(CurrencyDifference(
                type="Visual",
                category="Currency Amount Changed",
                severity="high",
                detail=f'"{a.text[:60]}" → "{b.text[:60]}"',
                location=location,
                url1_value=change[0],
                url2_value=change[1],
                coordinates=Coordinates(url1=bounds, url2=bounds),
            ))
            break

    texts1 = {e.text for k, e in enumerate(inside1) if k not in explained1}
    texts2 = {e.text for k, e in enumerate(inside2) if k not in explained2}
    added = sorted(texts2 - texts1)
    removed = sorted(texts1 - texts2)

    if added:
        differences.append(ContentDifference(
            type="Visual",
            category="Content Added",
            severity="medium",
            detail=_preview(added),
            location=location,
            count=len(added),
            coordinates=Coordinates(url2=bounds),
        ))
    if removed:
        differences.append(ContentDifference(
            type="Visual",
            category="Content Removed",
            severity="medium",
            detail=_preview(removed),
            location=location,
            count=len(removed),
            coordinates=Coordinates(url1=bounds),
        ))
    return differences


def identify_region_changes(
    regions: Sequence[DiffRegion],
    snapshot1: PageSnapshot,
    snapshot2: PageSnapshot,
    config: DiffConfig | None = None,
) -> list:
    """Classify every region. Regions that fail or explain nothing are skipped."""
    config = config or DiffConfig()
    differences: list = []
    unexplained = 0
    for region in regions:
        try:
            found = classify_region(region, snapshot1, snapshot2, config)
        except Exception as e:
            error = RegionAnalysisError(f"{_location(region)}: {e}")
            logger.warning("Skipping region: %s", error)
            continue
        if not found:
            unexplained += 1
        differences.extend(found)

    logger.debug(
        "Region analysis: %d findings from %d regions (%d unexplained)",
        len(differences), len(regions), unexplained,
    )
    return differences
