"""Tests for currency detection helpers."""

from pagediff.diff.currency import (
    amount_value,
    amounts_differ,
    contains_currency,
    find_amounts,
    strip_amounts,
)


class TestFindAmounts:

    def test_symbol_prefixed(self):
        assert find_amounts("Now $1,299.99 was $1,499") == ["$1,299.99", "$1,499"]

    def test_code_suffixed(self):
        assert find_amounts("Total: 45.00 EUR") == ["45.00 EUR"]

    def test_plain_numbers_ignored(self):
        assert find_amounts("Call 555 1234 for 3 items") == []
        assert not contains_currency("Order #12345")


class TestAmountsDiffer:

    def test_changed_value(self):
        assert amounts_differ("Total $10.00", "Total $12.00") == ("$10.00", "$12.00")

    def test_same_value_different_format(self):
        assert amounts_differ("Price $1,000", "Price $1000") is None

    def test_one_side_without_amount(self):
        assert amounts_differ("Price $10", "Price on request") is None

    def test_amount_value_strips_separators(self):
        assert amount_value("£2,500.50") == 2500.5


class TestStripAmounts:

    def test_context_key_normalized(self):
        assert strip_amounts("  Monthly   Plan $9.99 ") == "monthly plan"

    def test_different_amounts_share_key(self):
        assert strip_amounts("Pro plan $19") == strip_amounts("Pro plan $24")
