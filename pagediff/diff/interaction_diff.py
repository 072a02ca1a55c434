"""Interaction diff — compares the controls found by the interactive scan and what they revealed."""

from __future__ import annotations

from typing import Sequence

from pagediff.models.difference import ContentDifference, ListDifference
from pagediff.models.snapshot import InteractionOutcome

from .currency import normalize_text


def diff_interactions(
    outcomes1: Sequence[InteractionOutcome],
    outcomes2: Sequence[InteractionOutcome],
) -> list:
    by_label1 = {o.label: o for o in outcomes1}
    by_label2 = {o.label: o for o in outcomes2}
    differences: list = []

    for suffix, changed in (
        ("Added", [label for label in by_label2 if label not in by_label1]),
        ("Removed", [label for label in by_label1 if label not in by_label2]),
    ):
        if changed:
            differences.append(ListDifference(
                type="Behavior",
                category=f"Interactive Elements {suffix}",
                severity="medium",
                detail="; ".join(changed),
                count=len(changed),
                examples=tuple(changed),
            ))

    for label, outcome1 in by_label1.items():
        outcome2 = by_label2.get(label)
        if outcome2 is None:
            continue
        if normalize_text(outcome1.content) != normalize_text(outcome2.content):
            differences.append(ContentDifference(
                type="Behavior",
                category=f'Content differs for "{label}"',
                severity="medium",
                detail="Different content loaded after interaction",
                location=label,
            ))
    return differences
