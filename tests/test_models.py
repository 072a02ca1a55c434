"""Tests for snapshot, difference, region and result models."""

import pytest
from pydantic import ValidationError

from pagediff.models.difference import (
    ContentDifference,
    Coordinates,
    CurrencyDifference,
    ListDifference,
    difference_adapter,
)
from pagediff.models.region import DiffRegion
from pagediff.models.result import ComparisonSummary
from pagediff.models.snapshot import Bounds, ElementRecord, PageSnapshot


class TestPageSnapshot:

    def test_visible_text_deduplicated_and_sorted(self):
        snapshot = PageSnapshot(visible_text=["zeta text", "alpha text", "zeta text"])
        assert snapshot.visible_text == ("alpha text", "zeta text")

    def test_snapshot_is_immutable(self):
        snapshot = PageSnapshot(title="Home")
        with pytest.raises(ValidationError):
            snapshot.title = "Other"

    def test_leaf_elements_skip_textless(self):
        snapshot = PageSnapshot(elements=[
            ElementRecord(tag="button", aria_label="Close"),
            ElementRecord(tag="span", text="Price"),
        ])
        assert [e.text for e in snapshot.leaf_elements] == ["Price"]

    def test_heading_keys(self):
        snapshot = PageSnapshot(headings=[{"tag": "h1", "text": "Welcome"}])
        assert snapshot.heading_keys == ("h1: Welcome",)


class TestElementRecord:

    def test_label_falls_back_to_aria(self):
        record = ElementRecord(tag="button", aria_label="Open menu")
        assert record.label == "Open menu"

    def test_dedupe_key_rounds_position(self):
        a = ElementRecord(tag="a", text="Docs", bounds=Bounds(x=10.2, y=5.4))
        b = ElementRecord(tag="a", text="Docs", bounds=Bounds(x=9.8, y=4.6))
        assert a.dedupe_key == b.dedupe_key


class TestDifferences:

    def test_escalate_raises_severity(self):
        diff = ListDifference(type="Content", category="Text Added", severity="low")
        escalated = diff.escalate("medium")
        assert escalated.severity == "medium"
        assert diff.severity == "low"

    def test_escalate_never_lowers(self):
        diff = ListDifference(type="Content", category="Text Added", severity="high")
        assert diff.escalate("low").severity == "high"

    def test_applies_to_page(self):
        diff = ContentDifference(
            type="Content",
            category="Content Added",
            coordinates=Coordinates(url2=Bounds(x=1, y=1, width=5, height=5)),
        )
        assert diff.applies_to("url2")
        assert not diff.applies_to("url1")

    def test_list_difference_never_applies(self):
        diff = ListDifference(type="Content", category="Text Added")
        assert not diff.applies_to("url1")

    def test_adapter_dispatches_on_kind(self):
        diff = difference_adapter.validate_python({
            "kind": "currency",
            "type": "Content",
            "category": "Currency Amount Changed",
            "severity": "high",
            "url1_value": "$1",
            "url2_value": "$2",
        })
        assert isinstance(diff, CurrencyDifference)
        assert diff.url2_value == "$2"


class TestDiffRegion:

    def test_union_sums_pixels(self):
        a = DiffRegion(x=0, y=0, width=10, height=10, pixel_count=50)
        b = DiffRegion(x=20, y=5, width=10, height=10, pixel_count=30)
        union = a.union(b)
        assert (union.x, union.y, union.width, union.height) == (0, 0, 30, 15)
        assert union.pixel_count == 80

    def test_padded_clamped_to_canvas(self):
        region = DiffRegion(x=5, y=5, width=10, height=10)
        padded = region.padded(10, max_width=20, max_height=100)
        assert (padded.x, padded.y) == (0, 0)
        assert padded.right == 20
        assert padded.bottom == 25

    def test_overlaps(self):
        a = DiffRegion(x=0, y=0, width=10, height=10)
        assert a.overlaps(DiffRegion(x=5, y=5, width=10, height=10))
        assert not a.overlaps(DiffRegion(x=10, y=0, width=10, height=10))


class TestComparisonSummary:

    def test_counts_by_type_and_severity(self, sample_differences):
        summary = ComparisonSummary.from_differences(sample_differences, pixel_differences=10, regions=1)
        assert summary.total_differences == 4
        assert summary.by_severity == {"high": 3, "medium": 1}
        assert summary.by_type["Content"] == 2
        assert summary.pixel_differences == 10
