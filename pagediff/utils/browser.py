"""Browser session helpers — launch Chromium and open isolated contexts."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from pagediff.errors import RenderingSessionLaunchFailure
from pagediff.models.config import FrameworkConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Headless Chromium advertises itself; some production sites serve a
# degraded page or a bot wall to it, which would show up as a diff.
_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
if (!window.chrome) { window.chrome = {}; }
if (!window.chrome.runtime) { window.chrome.runtime = {}; }
"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium, wrapping any failure as a fatal launch error."""
    try:
        return await playwright.chromium.launch(
            headless=headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
    except Exception as e:
        raise RenderingSessionLaunchFailure(f"Could not launch browser: {e}") from e


async def create_isolated_context(
    browser: Browser,
    config: FrameworkConfig,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Open a fresh context with its own cookies and storage.

    Contexts are never shared between the two pages of a comparison or
    reused across interaction states.
    """
    context_kwargs: dict = {
        "viewport": {"width": config.viewport.width, "height": config.viewport.height},
        "user_agent": user_agent or config.user_agent or DEFAULT_USER_AGENT,
        "locale": "en-US",
        "timezone_id": "America/New_York",
        "extra_http_headers": {
            "Accept-Language": "en-US,en;q=0.9",
            **config.extra_http_headers,
        },
    }
    try:
        context = await browser.new_context(**context_kwargs)
    except Exception as e:
        raise RenderingSessionLaunchFailure(f"Could not open browser context: {e}") from e
    await context.add_init_script(_INIT_SCRIPT)
    logger.debug("Opened isolated context (%dx%d)", config.viewport.width, config.viewport.height)
    return context
