"""Tests for the field-by-field snapshot diff."""

from pagediff.diff.field_diff import diff_fields
from pagediff.models.config import DiffConfig
from pagediff.models.difference import CountDifference, CurrencyDifference, ListDifference
from pagediff.models.snapshot import ButtonEntry, CurrencyAmount, FormEntry, HeadingEntry


def _by_category(differences):
    return {d.category: d for d in differences}


class TestIdenticalSnapshots:

    def test_no_differences(self, make_snapshot):
        snapshot = make_snapshot(
            headings=[HeadingEntry(tag="h1", text="Welcome")],
            buttons=[ButtonEntry(text="Submit")],
            visible_text=["Some paragraph text"],
        )
        assert diff_fields(snapshot, snapshot) == []


class TestButtons:
    """Button labels are compared as lists with quoted previews."""

    def test_submit_cancel_vs_submit_send(self, make_snapshot):
        s1 = make_snapshot(buttons=[ButtonEntry(text="Submit"), ButtonEntry(text="Cancel")])
        s2 = make_snapshot(buttons=[ButtonEntry(text="Submit"), ButtonEntry(text="Send")])

        diffs = _by_category(diff_fields(s1, s2))

        assert set(diffs) == {"Buttons Added", "Buttons Removed"}
        added, removed = diffs["Buttons Added"], diffs["Buttons Removed"]
        assert added.type == "Interactive"
        assert added.severity == "high"
        assert added.detail == '"Send"'
        assert added.count == 1
        assert removed.detail == '"Cancel"'

    def test_preview_limited(self, make_snapshot):
        s1 = make_snapshot()
        s2 = make_snapshot(buttons=[ButtonEntry(text=f"Button {i}") for i in range(8)])

        added = diff_fields(s1, s2)[0]
        assert isinstance(added, ListDifference)
        assert added.count == 8
        assert len(added.examples) == 5


class TestTitleAndHeadings:

    def test_title_change_is_high(self, make_snapshot):
        diffs = diff_fields(make_snapshot(title="Home"), make_snapshot(title="Home | Beta"))
        assert len(diffs) == 1
        assert diffs[0].category == "Page Title"
        assert diffs[0].severity == "high"
        assert diffs[0].url2_value == "Home | Beta"

    def test_heading_detail_unquoted(self, make_snapshot):
        s1 = make_snapshot(headings=[HeadingEntry(tag="h1", text="Welcome")])
        s2 = make_snapshot(headings=[HeadingEntry(tag="h2", text="Welcome")])

        diffs = _by_category(diff_fields(s1, s2))
        assert diffs["Headings Added"].detail == "h2: Welcome"
        assert diffs["Headings Removed"].detail == "h1: Welcome"
        assert diffs["Headings Added"].severity == "medium"


class TestText:

    def test_text_added_counts_all_examples_limited(self, make_snapshot):
        s1 = make_snapshot(visible_text=["Shared paragraph"])
        s2 = make_snapshot(visible_text=["Shared paragraph", "New one", "New two", "New three", "New four"])

        added = _by_category(diff_fields(s1, s2))["Text Added"]
        assert added.detail.startswith("4 new text elements. Examples: ")
        assert len(added.examples) == 3
        assert added.severity == "low"

    def test_currency_text_escalates_to_medium(self, make_snapshot):
        s1 = make_snapshot(visible_text=["Pro plan costs $19 monthly"])
        s2 = make_snapshot(visible_text=["Pro plan costs $24 monthly"])

        diffs = _by_category(diff_fields(s1, s2))
        assert diffs["Text Added"].severity == "medium"
        assert diffs["Text Removed"].severity == "medium"


class TestFormsAndStructure:

    def test_form_count_changed(self, make_snapshot):
        s1 = make_snapshot(forms=[FormEntry()])
        s2 = make_snapshot(forms=[FormEntry(), FormEntry()])

        diff = _by_category(diff_fields(s1, s2))["Form Count Changed"]
        assert isinstance(diff, CountDifference)
        assert (diff.url1_value, diff.url2_value) == ("1", "2")

    def test_structure_changed(self, make_snapshot):
        s1 = make_snapshot(structure=["header", "main", "footer"])
        s2 = make_snapshot(structure=["header", "main"])

        diff = _by_category(diff_fields(s1, s2))["Page Structure"]
        assert diff.type == "Layout"
        assert "URL 1: 3 top-level" in diff.detail


class TestStyles:

    def test_color_and_class_changes(self, make_snapshot):
        s1 = make_snapshot(
            background_colors=["rgb(255, 255, 255)", "rgb(0, 102, 204)"],
            classes=["btn", "btn-primary"],
        )
        s2 = make_snapshot(
            background_colors=["rgb(255, 255, 255)", "rgb(204, 0, 0)"],
            classes=["btn", "btn-primary", "promo"],
        )

        diffs = _by_category(diff_fields(s1, s2))

        assert diffs["Background Colors Added"].detail == "rgb(204, 0, 0)"
        assert diffs["Background Colors Removed"].detail == "rgb(0, 102, 204)"
        assert diffs["Background Colors Added"].type == "Visual"
        assert diffs["CSS Classes Added"].examples == ("promo",)
        assert "CSS Classes Removed" not in diffs

    def test_styles_can_be_ignored(self, make_snapshot):
        s1 = make_snapshot(text_colors=["rgb(0, 0, 0)"], classes=["a"])
        s2 = make_snapshot(text_colors=["rgb(20, 20, 20)"], classes=["b"])

        assert diff_fields(s1, s2, DiffConfig(compare_styles=False)) == []


class TestCurrency:

    def test_changed_amount_in_same_context(self, make_snapshot):
        s1 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$10.00", context="order total")])
        s2 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$12.00", context="order total")])

        currency = [d for d in diff_fields(s1, s2) if isinstance(d, CurrencyDifference)]
        assert len(currency) == 1
        assert (currency[0].url1_value, currency[0].url2_value) == ("$10.00", "$12.00")
        assert currency[0].severity == "high"

    def test_unrelated_contexts_ignored(self, make_snapshot):
        s1 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$10.00", context="order total")])
        s2 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$12.00", context="shipping")])

        assert not [d for d in diff_fields(s1, s2) if isinstance(d, CurrencyDifference)]

    def test_formatting_only_change_ignored(self, make_snapshot):
        s1 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$1,000", context="total price")])
        s2 = make_snapshot(currency_amounts=[CurrencyAmount(amount="$1000", context="total price")])

        assert not [d for d in diff_fields(s1, s2) if isinstance(d, CurrencyDifference)]
