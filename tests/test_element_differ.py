"""Tests for the element diff entry point and finding merge."""

from pagediff.diff.element_differ import diff_elements, merge_differences
from pagediff.models.config import DiffConfig
from pagediff.models.difference import ContentDifference, Coordinates, CurrencyDifference
from pagediff.models.snapshot import Bounds, CurrencyAmount


class TestMergeDifferences:

    def test_duplicate_category_and_detail_collapsed(self):
        a = ContentDifference(type="Content", category="Content Added", detail='"Sale"')
        b = ContentDifference(type="Visual", category="Content Added", detail='"Sale"')
        assert merge_differences([a], [b]) == [a]

    def test_currency_copy_with_coordinates_wins(self):
        plain = CurrencyDifference(
            type="Content", category="Currency Amount Changed", detail="context",
            url1_value="$1", url2_value="$2",
        )
        located = CurrencyDifference(
            type="Content", category="Currency Amount Changed", detail="other wording",
            url1_value="$1", url2_value="$2",
            coordinates=Coordinates(url1=Bounds(x=1, y=1), url2=Bounds(x=1, y=1)),
        )
        merged = merge_differences([plain], [located])
        assert merged == [located]


class TestDiffElements:

    def _currency_snapshots(self, make_snapshot, make_element):
        s1 = make_snapshot(
            currency_amounts=[CurrencyAmount(amount="$10.00", context="total")],
            elements=[make_element("Total $10.00", x=100, y=100)],
        )
        s2 = make_snapshot(
            currency_amounts=[CurrencyAmount(amount="$12.00", context="total")],
            elements=[make_element("Total $12.00", x=100, y=100)],
        )
        return s1, s2

    def test_both_modes_report_currency_once(self, make_snapshot, make_element):
        s1, s2 = self._currency_snapshots(make_snapshot, make_element)

        diffs = diff_elements(s1, s2, DiffConfig(element_diff_mode="both"))

        currency = [d for d in diffs if isinstance(d, CurrencyDifference)]
        assert len(currency) == 1
        assert currency[0].coordinates is not None

    def test_field_mode_skips_fuzzy(self, make_snapshot, make_element):
        s1 = make_snapshot(elements=[make_element("Limited offer", x=0, y=0)])
        s2 = make_snapshot()
        assert diff_elements(s1, s2, DiffConfig(element_diff_mode="field")) == []

    def test_fuzzy_mode_skips_fields(self, make_snapshot):
        s1 = make_snapshot(title="Home")
        s2 = make_snapshot(title="Other")
        assert diff_elements(s1, s2, DiffConfig(element_diff_mode="fuzzy")) == []
