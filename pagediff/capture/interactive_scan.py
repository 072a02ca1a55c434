"""Interactive element scan — clicks tab-like controls and records what each one reveals."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from pagediff.models.config import CaptureConfig
from pagediff.models.snapshot import InteractionOutcome

logger = logging.getLogger(__name__)

INTERACTIVE_SELECTORS = [
    '[role="tab"]',
    'button[data-tab]',
    'a[role="tab"]',
    '.tab-button',
    '[aria-controls]',
]

_MAIN_CONTENT_SCRIPT = """() => {
    const main = document.querySelector('main, [role="main"], .main-content, #content');
    return (main || document.body || {}).innerText || '';
}"""


async def scan_interactive_elements(page: Page, config: CaptureConfig) -> list[InteractionOutcome]:
    """Click up to ``max_scan_per_selector`` visible matches of each selector.

    A control matched by more than one selector is clicked once, under its
    first label. Click failures are logged and skipped.
    """
    outcomes: list[InteractionOutcome] = []
    seen: set[str] = set()

    for selector in INTERACTIVE_SELECTORS:
        locator = page.locator(selector)
        try:
            count = await locator.count()
        except Exception as e:
            logger.debug("Selector %s failed: %s", selector, e)
            continue

        for index in range(min(count, config.max_scan_per_selector)):
            element = locator.nth(index)
            try:
                if not await element.is_visible():
                    continue
                text = (await element.inner_text()).strip()
                aria_label = await element.get_attribute("aria-label") or ""
                label = text or aria_label or f"Element {index}"
                if label in seen:
                    continue
                await element.click(timeout=5000)
                await page.wait_for_timeout(config.interaction_settle_ms)
                content = await page.evaluate(_MAIN_CONTENT_SCRIPT)
            except Exception as e:
                logger.debug("Could not click %s #%d: %s", selector, index, e)
                continue

            seen.add(label)
            outcomes.append(InteractionOutcome(
                label=label,
                selector=selector,
                content=(content or "")[: config.scan_content_chars],
            ))

    logger.info("Interactive scan: %d controls clicked", len(outcomes))
    return outcomes
