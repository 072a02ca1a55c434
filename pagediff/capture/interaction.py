"""Interaction targeting — click an element named by a human-readable label."""

from __future__ import annotations

import logging

from playwright.async_api import Locator, Page

from pagediff.errors import InteractionTargetNotFound
from pagediff.models.config import CaptureConfig

logger = logging.getLogger(__name__)


def _candidate_locators(page: Page, label: str) -> list[tuple[str, Locator]]:
    """Locators for ``label`` in priority order: text, CSS selector, aria-label."""
    candidates: list[tuple[str, Locator]] = [
        ("exact_text", page.get_by_text(label, exact=True)),
        ("text", page.get_by_text(label)),
    ]
    # Labels like "Sign in" are not valid CSS; the locator only fails when used.
    candidates.append(("css", page.locator(label)))
    escaped = label.replace('"', '\\"')
    candidates.append(("aria_label", page.locator(f'[aria-label="{escaped}"]')))
    return candidates


async def perform_interaction(page: Page, label: str, config: CaptureConfig) -> str:
    """Click the first visible element matching ``label``.

    Returns the strategy that matched. Raises InteractionTargetNotFound when
    no strategy finds a visible element.
    """
    for strategy, locator in _candidate_locators(page, label):
        try:
            element = locator.first
            if not await element.is_visible(timeout=config.selector_visible_timeout_ms):
                continue
            await element.click(timeout=5000)
        except Exception as e:
            logger.debug("Interaction strategy %s failed for '%s': %s", strategy, label, e)
            continue
        logger.info("Clicked '%s' via %s", label, strategy)
        await page.wait_for_timeout(config.interaction_settle_ms)
        return strategy

    raise InteractionTargetNotFound(label)
