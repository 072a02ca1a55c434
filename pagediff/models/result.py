"""Comparison result data structures produced by the orchestrator."""

from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from pydantic import BaseModel, Field

from .difference import Difference
from .snapshot import PageSnapshot


class ProgressEvent(BaseModel):
    step: int
    detail: str


class ScreenshotSet(BaseModel):
    url1: str
    url2: str
    diff: Optional[str] = None
    highlighted_url1: Optional[str] = None
    highlighted_url2: Optional[str] = None


class SnapshotPair(BaseModel):
    snapshot1: PageSnapshot
    snapshot2: PageSnapshot


class ComparisonSummary(BaseModel):
    total_differences: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    pixel_differences: int = 0
    regions: int = 0

    @classmethod
    def from_differences(
        cls, differences: list, pixel_differences: int = 0, regions: int = 0
    ) -> "ComparisonSummary":
        return cls(
            total_differences=len(differences),
            by_type=dict(Counter(d.type for d in differences)),
            by_severity=dict(Counter(d.severity for d in differences)),
            pixel_differences=pixel_differences,
            regions=regions,
        )


class ComparisonResult(BaseModel):
    """Outcome of one comparison pass (one interaction state)."""

    timestamp: int
    state: str = "default"
    config: dict[str, Any] = Field(default_factory=dict)
    screenshots: ScreenshotSet
    data: SnapshotPair
    differences: list[Difference] = Field(default_factory=list)
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)


class ComparisonBundle(BaseModel):
    """All passes of one run, persisted under its creation timestamp."""

    id: str
    timestamp: int
    url1: str
    url2: str
    description: str = ""
    interactions: list[str] = Field(default_factory=list)
    results: list[ComparisonResult] = Field(default_factory=list)

    @property
    def total_differences(self) -> int:
        return sum(len(r.differences) for r in self.results)


class ResultSummary(BaseModel):
    id: str
    timestamp: int
    url1: str
    url2: str
    total_differences: int = 0
