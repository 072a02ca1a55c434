"""Fuzzy spatial diff — matches elements across two snapshots by similarity.

Every record of the first page looks for its best counterpart on the second
page inside a square proximity window. The score combines four signals:

    tag equality          weight 3
    normalized text       weight 2 (1 for containment)
    aria-label equality   weight 1
    positional proximity  weight 1 (linear falloff over ``proximity_radius``)

normalized by the total weight. Matching is greedy and one-to-one: candidates
live in an index arena and a taken bitset records which are used.
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from typing import Sequence

from pagediff.models.config import DiffConfig
from pagediff.models.difference import ContentDifference, Coordinates, CurrencyDifference
from pagediff.models.snapshot import ElementRecord, PageSnapshot

from .currency import amounts_differ, normalize_text

logger = logging.getLogger(__name__)

WEIGHT_TAG = 3.0
WEIGHT_TEXT = 2.0
WEIGHT_ARIA = 1.0
WEIGHT_PROXIMITY = 1.0
TOTAL_WEIGHT = WEIGHT_TAG + WEIGHT_TEXT + WEIGHT_ARIA + WEIGHT_PROXIMITY


def dedupe_records(records: Sequence[ElementRecord]) -> list[ElementRecord]:
    """Drop records sharing position, text, label and tag, keeping the first."""
    seen: set[tuple] = set()
    unique = []
    for record in records:
        key = record.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def similarity(a: ElementRecord, b: ElementRecord, proximity_radius: float = 100) -> float:
    """Normalized similarity in [0, 1] between two element records."""
    score = 0.0
    if a.tag == b.tag:
        score += WEIGHT_TAG

    text_a, text_b = normalize_text(a.text), normalize_text(b.text)
    if text_a == text_b:
        score += WEIGHT_TEXT
    elif text_a and text_b and (text_a in text_b or text_b in text_a):
        score += WEIGHT_TEXT / 2

    if normalize_text(a.aria_label) == normalize_text(b.aria_label):
        score += WEIGHT_ARIA

    distance = math.hypot(a.bounds.x - b.bounds.x, a.bounds.y - b.bounds.y)
    if proximity_radius > 0 and distance < proximity_radius:
        score += WEIGHT_PROXIMITY * (1 - distance / proximity_radius)

    return score / TOTAL_WEIGHT


def match_records(
    source: Sequence[ElementRecord],
    target: Sequence[ElementRecord],
    config: DiffConfig,
) -> tuple[list[tuple[int, int]], list[int], list[int]]:
    """Greedy one-to-one matching.

    Returns (matched index pairs, unmatched source indices, unmatched target
    indices).
    """
    window = config.match_window
    taken = bytearray(len(target))
    pairs: list[tuple[int, int]] = []
    unmatched_source: list[int] = []

    for i, record in enumerate(source):
        best_index = -1
        best_score = config.similarity_threshold
        for j, candidate in enumerate(target):
            if taken[j]:
                continue
            if abs(candidate.bounds.x - record.bounds.x) > window:
                continue
            if abs(candidate.bounds.y - record.bounds.y) > window:
                continue
            score = similarity(record, candidate, config.proximity_radius)
            if score > best_score:
                best_index, best_score = j, score
        if best_index < 0:
            unmatched_source.append(i)
        else:
            taken[best_index] = 1
            pairs.append((i, best_index))

    unmatched_target = [j for j in range(len(target)) if not taken[j]]
    return pairs, unmatched_source, unmatched_target


def _group_unmatched(
    records: Sequence[ElementRecord], indices: list[int], min_label_length: int
) -> "OrderedDict[str, list[ElementRecord]]":
    groups: OrderedDict[str, list[ElementRecord]] = OrderedDict()
    for idx in indices:
        record = records[idx]
        label = record.label.strip()
        if len(label) < min_label_length:
            continue
        groups.setdefault(normalize_text(label), []).append(record)
    return groups


def _content_differences(
    groups: "OrderedDict[str, list[ElementRecord]]", added: bool
) -> list[ContentDifference]:
    differences = []
    for instances in groups.values():
        first = instances[0]
        label = first.label.strip()
        detail = f'"{label[:80]}"'
        if len(instances) > 1:
            detail += f" ({len(instances)} instances)"
        coordinates = Coordinates(url2=first.bounds) if added else Coordinates(url1=first.bounds)
        differences.append(ContentDifference(
            type="Content",
            category="Content Added" if added else "Content Removed",
            severity="medium",
            detail=detail,
            location=f"<{first.tag}>",
            count=len(instances),
            coordinates=coordinates,
        ))
    return differences


def diff_fuzzy(s1: PageSnapshot, s2: PageSnapshot, config: DiffConfig | None = None) -> list:
    """Match element records between two snapshots and report what changed."""
    config = config or DiffConfig()
    source = dedupe_records(s1.elements)
    target = dedupe_records(s2.elements)
    pairs, unmatched_source, unmatched_target = match_records(source, target, config)
    logger.debug(
        "Fuzzy match: %d pairs, %d unmatched in URL 1, %d unmatched in URL 2",
        len(pairs), len(unmatched_source), len(unmatched_target),
    )

    differences: list = []
    differences += _content_differences(
        _group_unmatched(source, unmatched_source, config.min_label_length), added=False,
    )
    differences += _content_differences(
        _group_unmatched(target, unmatched_target, config.min_label_length), added=True,
    )

    seen_changes: set[tuple[str, str]] = set()
    for i, j in pairs:
        a, b = source[i], target[j]
        text_a, text_b = normalize_text(a.text), normalize_text(b.text)
        if text_a == text_b or len(text_a) <= 2 or len(text_b) <= 2:
            continue
        change = amounts_differ(a.text, b.text)
        if change is None or change in seen_changes:
            # Non-currency drift is noise from dynamic content
            continue
        seen_changes.add(change)
        old, new = change
        differences.append(CurrencyDifference(
            type="Content",
            category="Currency Amount Changed",
            severity="high",
            detail=f'"{a.text[:60]}" → "{b.text[:60]}"',
            location=f"<{a.tag}>",
            url1_value=old,
            url2_value=new,
            coordinates=Coordinates(url1=a.bounds, url2=b.bounds),
        ))

    return differences
