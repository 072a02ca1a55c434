"""Page navigation with a fallback wait strategy."""

from __future__ import annotations

import logging

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagediff.errors import NavigationTimeout
from pagediff.models.config import CaptureConfig

logger = logging.getLogger(__name__)


async def navigate(page: Page, url: str, config: CaptureConfig) -> None:
    """Load ``url`` waiting for the load event, falling back to DOMContentLoaded.

    Sites with long-polling or heavy third-party tags sometimes never fire
    ``load`` inside the timeout; the DOM is usually usable by then anyway.
    Raises NavigationTimeout only if both strategies time out.
    """
    timeout = config.navigation_timeout_ms
    try:
        await page.goto(url, wait_until="load", timeout=timeout)
    except PlaywrightTimeoutError:
        logger.warning("Load event timed out for %s, retrying with domcontentloaded", url)
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(url, timeout) from e

    if config.post_load_wait_ms:
        await page.wait_for_timeout(config.post_load_wait_ms)
