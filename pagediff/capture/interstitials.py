"""Interstitial suppression — dismisses popups, modals and banners."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from playwright.async_api import Page

from pagediff.errors import InterstitialDismissFailure
from pagediff.models.config import CaptureConfig

from .navigation import navigate

logger = logging.getLogger(__name__)

# Tried in order; the first visible match is clicked.
CLOSE_SELECTORS = [
    '[aria-label*="close" i]',
    '[aria-label*="dismiss" i]',
    'button[class*="close" i]',
    'button[class*="dismiss" i]',
    '[data-testid*="close" i]',
    '[data-testid*="dismiss" i]',
    ".modal-close",
    ".popup-close",
    ".banner-close",
    'button[title*="close" i]',
    'button:has-text("×")',
    'button:has-text("✕")',
    '[class*="close"]:has-text("×")',
    'button:has-text("No thanks")',
    'button:has-text("Not now")',
    'button:has-text("Maybe later")',
    'button:has-text("Skip")',
    ".modal-backdrop",
]

_DOM_SCAN_SCRIPT = """() => {
    const containers = document.querySelectorAll(
        '[role="dialog"], [role="alertdialog"], .modal, .popup, ' +
        '[class*="modal"], [class*="popup"], [class*="banner"]'
    );
    for (const popup of containers) {
        const style = window.getComputedStyle(popup);
        if (style.display === 'none' || style.visibility === 'hidden' || popup.offsetParent === null) {
            continue;
        }
        const closeButton = popup.querySelector(
            'button[aria-label*="close" i], button[class*="close" i], [class*="close"]'
        );
        if (closeButton) {
            closeButton.click();
            return true;
        }
    }
    return false;
}"""


def _path_and_query(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path or "/"
    return f"{path}?{parsed.query}" if parsed.query else path


async def _try_close_selectors(page: Page, config: CaptureConfig) -> str | None:
    """Click the first visible close affordance. Returns the selector used."""
    for selector in CLOSE_SELECTORS:
        try:
            element = page.locator(selector).first
            if await element.is_visible(timeout=config.selector_visible_timeout_ms):
                await element.click(timeout=2000)
                return selector
        except Exception as e:
            logger.debug("Close selector %s not usable: %s", selector, e)
            continue
    return None


async def _try_dom_scan(page: Page) -> bool:
    try:
        return bool(await page.evaluate(_DOM_SCAN_SCRIPT))
    except Exception as e:
        logger.debug("Popup DOM scan failed: %s", e)
        return False


async def dismiss_interstitials(
    page: Page,
    intended_url: str,
    config: CaptureConfig,
    _recovered: bool = False,
) -> bool:
    """Best-effort dismissal of overlays. Returns True if anything was dismissed.

    Runs up to ``max_dismiss_rounds`` rounds and stops early on a round that
    dismisses nothing. If a dismiss click navigated away (it hit a link
    underneath the overlay), the intended URL is reloaded and suppression
    runs once more. Never raises.
    """
    dismissed = False
    for round_index in range(config.max_dismiss_rounds):
        try:
            selector = await _try_close_selectors(page, config)
            if selector:
                logger.info("Dismissed overlay using selector: %s", selector)
            elif await _try_dom_scan(page):
                logger.info("Dismissed overlay via DOM scan")
            else:
                if round_index == 0:
                    logger.debug("No overlay detected on %s", intended_url)
                break
            dismissed = True
            await page.wait_for_timeout(config.dismiss_settle_ms)
        except Exception as e:
            failure = InterstitialDismissFailure(f"Round {round_index + 1} failed: {e}")
            logger.warning("%s", failure)
            break

    if not dismissed:
        return False

    try:
        current = page.url
        if _path_and_query(current) != _path_and_query(intended_url) and not _recovered:
            logger.warning(
                "Page moved to %s after dismissing an overlay, re-navigating to %s",
                current, intended_url,
            )
            await navigate(page, intended_url, config)
            await dismiss_interstitials(page, intended_url, config, _recovered=True)
    except Exception as e:
        logger.warning("Redirect recovery failed for %s: %s", intended_url, e)

    return True
