"""Region clustering — groups differing pixels into bounded change regions."""

from __future__ import annotations

import logging

from pagediff.models.config import DiffConfig
from pagediff.models.region import DiffRegion

logger = logging.getLogger(__name__)

_NEIGHBOURS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


class DiffMask:
    """Row-major difference mask; any non-zero byte marks a differing pixel."""

    def __init__(self, width: int, height: int, data: bytes | bytearray):
        if len(data) != width * height:
            raise ValueError(f"Mask data has {len(data)} bytes, expected {width * height}")
        self.width = width
        self.height = height
        self.data = data

    def is_set(self, x: int, y: int) -> bool:
        return self.data[y * self.width + x] != 0

    @property
    def pixel_count(self) -> int:
        return len(self.data) - self.data.count(0)


def _flood_fill(
    mask: DiffMask, start_x: int, start_y: int, visited: set[tuple[int, int]]
) -> tuple[int, int, int, int, int]:
    """8-connected fill from a seed pixel. Returns (count, min_x, min_y, max_x, max_y)."""
    width, height, data = mask.width, mask.height, mask.data
    stack = [(start_x, start_y)]
    visited.add((start_x, start_y))
    min_x = max_x = start_x
    min_y = max_y = start_y
    count = 0

    while stack:
        x, y = stack.pop()
        count += 1
        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        for dx, dy in _NEIGHBOURS:
            nx, ny = x + dx, y + dy
            if nx < 0 or ny < 0 or nx >= width or ny >= height:
                continue
            if (nx, ny) in visited or not data[ny * width + nx]:
                continue
            visited.add((nx, ny))
            stack.append((nx, ny))

    return count, min_x, min_y, max_x, max_y


def find_regions(mask: DiffMask, config: DiffConfig | None = None) -> list[DiffRegion]:
    """Scan the mask on a coarse grid and flood-fill each unvisited hit.

    Components smaller than ``min_region_pixels`` are discarded as noise; the
    rest are padded by ``region_padding`` and clamped to the canvas.
    """
    config = config or DiffConfig()
    step = max(1, config.grid_step)
    visited: set[tuple[int, int]] = set()
    regions: list[DiffRegion] = []
    discarded = 0

    for gy in range(0, mask.height, step):
        row = gy * mask.width
        for gx in range(0, mask.width, step):
            if not mask.data[row + gx] or (gx, gy) in visited:
                continue
            count, min_x, min_y, max_x, max_y = _flood_fill(mask, gx, gy, visited)
            if count < config.min_region_pixels:
                discarded += 1
                continue
            region = DiffRegion(
                x=min_x,
                y=min_y,
                width=max_x - min_x + 1,
                height=max_y - min_y + 1,
                pixel_count=count,
            )
            regions.append(region.padded(config.region_padding, mask.width, mask.height))

    logger.debug("Clustering: %d regions kept, %d noise clusters discarded", len(regions), discarded)
    return regions


def _close_enough(a: DiffRegion, b: DiffRegion, distance: float) -> bool:
    (ax, ay), (bx, by) = a.center, b.center
    return abs(ax - bx) <= distance and abs(ay - by) <= distance


def _try_merge(a: DiffRegion, b: DiffRegion, config: DiffConfig) -> DiffRegion | None:
    if not (a.overlaps(b) or _close_enough(a, b, config.merge_distance)):
        return None
    union = a.union(b)
    if union.width >= config.max_merged_size or union.height >= config.max_merged_size:
        return None
    return union


def merge_regions(regions: list[DiffRegion], config: DiffConfig | None = None) -> list[DiffRegion]:
    """Fold nearby or overlapping regions together, top to bottom.

    A grown region is checked again against everything already merged, so no
    two output regions are left that could still merge. A merge is skipped
    when the combined box would reach ``max_merged_size`` on either side; the
    region then stays standalone.
    """
    config = config or DiffConfig()
    merged: list[DiffRegion] = []

    for region in sorted(regions, key=lambda r: (r.y, r.x)):
        current = region
        grown = True
        while grown:
            grown = False
            for i, existing in enumerate(merged):
                union = _try_merge(existing, current, config)
                if union is not None:
                    del merged[i]
                    current = union
                    grown = True
                    break
        merged.append(current)

    merged.sort(key=lambda r: (r.y, r.x))
    logger.debug("Merged %d regions into %d", len(regions), len(merged))
    return merged
