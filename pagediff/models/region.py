"""Pixel diff data structures."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .snapshot import Bounds


class DiffRegion(BaseModel):
    """Bounding box over one connected cluster of differing pixels."""

    x: int
    y: int
    width: int
    height: int
    pixel_count: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def overlaps(self, other: "DiffRegion") -> bool:
        return (
            self.x < other.right and other.x < self.right
            and self.y < other.bottom and other.y < self.bottom
        )

    def union(self, other: "DiffRegion") -> "DiffRegion":
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return DiffRegion(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
            pixel_count=self.pixel_count + other.pixel_count,
        )

    def padded(self, margin: int, max_width: int, max_height: int) -> "DiffRegion":
        x = max(0, self.x - margin)
        y = max(0, self.y - margin)
        return DiffRegion(
            x=x,
            y=y,
            width=min(max_width, self.right + margin) - x,
            height=min(max_height, self.bottom + margin) - y,
            pixel_count=self.pixel_count,
        )

    def to_bounds(self) -> Bounds:
        return Bounds(x=self.x, y=self.y, width=self.width, height=self.height)


class PixelDiffResult(BaseModel):
    width: int
    height: int
    pixel_count: int = 0
    regions: list[DiffRegion] = Field(default_factory=list)
