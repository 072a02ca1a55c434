"""Field diff — set differences over comparable projections of two snapshots."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict

from pagediff.models.config import DiffConfig
from pagediff.models.difference import (
    CountDifference,
    CurrencyDifference,
    ListDifference,
    TitleDifference,
)
from pagediff.models.snapshot import PageSnapshot

from .currency import amount_value, contains_currency

logger = logging.getLogger(__name__)


def _missing_from(source: tuple[str, ...] | list[str], other: tuple[str, ...] | list[str]) -> list[str]:
    """Items of ``source`` not present in ``other``, encounter order, duplicates kept."""
    other_set = set(other)
    return [item for item in source if item not in other_set]


def _quoted_preview(items: list[str], limit: int) -> str:
    return "; ".join(f'"{item}"' for item in items[:limit])


def _added_removed(
    items1: tuple[str, ...] | list[str],
    items2: tuple[str, ...] | list[str],
    label: str,
    diff_type: str,
    severity: str,
    limit: int,
    quote: bool = True,
) -> list[ListDifference]:
    differences = []
    for suffix, changed in (
        ("Added", _missing_from(items2, items1)),
        ("Removed", _missing_from(items1, items2)),
    ):
        if not changed:
            continue
        detail = _quoted_preview(changed, limit) if quote else "; ".join(changed[:limit])
        differences.append(ListDifference(
            type=diff_type,
            category=f"{label} {suffix}",
            severity=severity,
            detail=detail,
            count=len(changed),
            examples=tuple(changed[:limit]),
        ))
    return differences


def _text_differences(s1: PageSnapshot, s2: PageSnapshot, limit: int) -> list[ListDifference]:
    differences = []
    for suffix, changed, verb in (
        ("Added", sorted(s2.text_set - s1.text_set), "new text elements"),
        ("Removed", sorted(s1.text_set - s2.text_set), "text elements removed"),
    ):
        if not changed:
            continue
        examples = tuple(t[:50] for t in changed[:limit])
        diff = ListDifference(
            type="Content",
            category=f"Text {suffix}",
            severity="low",
            detail=f"{len(changed)} {verb}. Examples: " + "; ".join(f'"{e}"' for e in examples),
            count=len(changed),
            examples=examples,
        )
        if any(contains_currency(t) for t in changed):
            diff = diff.escalate("medium")
        differences.append(diff)
    return differences


def _currency_differences(s1: PageSnapshot, s2: PageSnapshot) -> list[CurrencyDifference]:
    """One difference per context whose amounts changed between the pages."""
    by_context1: dict[str, list[str]] = defaultdict(list)
    by_context2: dict[str, list[str]] = defaultdict(list)
    for c in s1.currency_amounts:
        if c.context:
            by_context1[c.context].append(c.amount)
    for c in s2.currency_amounts:
        if c.context:
            by_context2[c.context].append(c.amount)

    differences = []
    for context, amounts1 in by_context1.items():
        amounts2 = by_context2.get(context)
        if not amounts2:
            continue
        values1 = Counter(amount_value(a) for a in amounts1)
        values2 = Counter(amount_value(a) for a in amounts2)
        if values1 == values2:
            continue
        old = next((a for a in amounts1 if amount_value(a) not in values2), amounts1[0])
        new = next((a for a in amounts2 if amount_value(a) not in values1), amounts2[0])
        differences.append(CurrencyDifference(
            type="Content",
            category="Currency Amount Changed",
            severity="high",
            detail=f'"{context}": {old} → {new}',
            location=context,
            url1_value=old,
            url2_value=new,
        ))
    return differences


def diff_fields(s1: PageSnapshot, s2: PageSnapshot, config: DiffConfig | None = None) -> list:
    """Compare two snapshots field by field and return categorized differences."""
    config = config or DiffConfig()
    limit = config.preview_limit
    differences: list = []

    if s1.title != s2.title:
        differences.append(TitleDifference(
            type="Text",
            category="Page Title",
            severity="high",
            detail=f'URL 1: "{s1.title}" vs URL 2: "{s2.title}"',
            url1_value=s1.title,
            url2_value=s2.title,
        ))

    differences += _added_removed(
        s1.heading_keys, s2.heading_keys, "Headings", "Content", "medium", limit, quote=False,
    )
    differences += _added_removed(
        s1.button_labels, s2.button_labels, "Buttons", "Interactive", "high", limit,
    )
    differences += _text_differences(s1, s2, config.text_preview_limit)
    differences += _added_removed(
        [f"{lk.text} -> {lk.href}" for lk in s1.links],
        [f"{lk.text} -> {lk.href}" for lk in s2.links],
        "Links", "Interactive", "medium", limit,
    )
    differences += _added_removed(
        [i.alt or i.src for i in s1.images],
        [i.alt or i.src for i in s2.images],
        "Images", "Visual", "low", limit,
    )

    if len(s1.forms) != len(s2.forms):
        differences.append(CountDifference(
            type="Interactive",
            category="Form Count Changed",
            severity="high",
            detail=f"URL 1: {len(s1.forms)} forms, URL 2: {len(s2.forms)} forms",
            url1_value=str(len(s1.forms)),
            url2_value=str(len(s2.forms)),
        ))

    if s1.structure != s2.structure:
        differences.append(CountDifference(
            type="Layout",
            category="Page Structure",
            severity="medium",
            detail=(
                f"Different DOM structure detected. URL 1: {len(s1.structure)} top-level "
                f"elements, URL 2: {len(s2.structure)} top-level elements"
            ),
            url1_value=str(len(s1.structure)),
            url2_value=str(len(s2.structure)),
        ))

    if config.compare_styles:
        for label, colors1, colors2 in (
            ("Background Colors", s1.background_colors, s2.background_colors),
            ("Text Colors", s1.text_colors, s2.text_colors),
            ("Border Colors", s1.border_colors, s2.border_colors),
        ):
            differences += _added_removed(colors1, colors2, label, "Visual", "low", limit, quote=False)
        differences += _added_removed(
            s1.classes, s2.classes, "CSS Classes", "Layout", "low", limit, quote=False,
        )

    differences += _currency_differences(s1, s2)

    logger.debug("Field diff: %d differences", len(differences))
    return differences
