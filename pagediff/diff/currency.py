"""Currency detection shared by the extractor and the differs."""

from __future__ import annotations

import re

# Written in the subset of syntax shared by Python and JavaScript regexes so
# the extractor can pass the same source into the page.
CURRENCY_PATTERN = re.compile(
    r"(?:[$€£¥₹]\s?\d[\d,]*(?:\.\d+)?)"
    r"|(?:\d[\d,]*(?:\.\d+)?\s?(?:USD|EUR|GBP|JPY|CAD|AUD))"
)

_NUMBER = re.compile(r"\d[\d,]*(?:\.\d+)?")
_WHITESPACE = re.compile(r"\s+")


def find_amounts(text: str) -> list[str]:
    """Return every currency literal in ``text`` in order of appearance."""
    return [m.group(0).strip() for m in CURRENCY_PATTERN.finditer(text or "")]


def first_amount(text: str) -> str | None:
    amounts = find_amounts(text)
    return amounts[0] if amounts else None


def amount_value(amount: str) -> float | None:
    """Numeric value of a currency literal, ignoring thousands separators."""
    match = _NUMBER.search(amount or "")
    if not match:
        return None
    try:
        return float(match.group(0).replace(",", ""))
    except ValueError:
        return None


def amounts_differ(text1: str, text2: str) -> tuple[str, str] | None:
    """If both texts carry a currency value and the values differ, return both literals."""
    a1, a2 = first_amount(text1), first_amount(text2)
    if a1 is None or a2 is None:
        return None
    if amount_value(a1) == amount_value(a2):
        return None
    return a1, a2


def strip_amounts(text: str) -> str:
    """Remove currency literals and collapse whitespace; used as a context key."""
    return normalize_text(CURRENCY_PATTERN.sub(" ", text or ""))


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(" ", (text or "")).strip().lower()


def contains_currency(text: str) -> bool:
    return CURRENCY_PATTERN.search(text or "") is not None
