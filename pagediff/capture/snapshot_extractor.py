"""Page snapshot extraction — turns a rendered page into a comparable PageSnapshot."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.async_api import Page

from pagediff.diff.currency import CURRENCY_PATTERN, strip_amounts
from pagediff.errors import InteractionTargetNotFound
from pagediff.models.config import CaptureConfig
from pagediff.models.snapshot import (
    Bounds,
    ButtonEntry,
    CurrencyAmount,
    ElementRecord,
    FormEntry,
    FormInput,
    HeadingEntry,
    ImageEntry,
    LinkEntry,
    PageSnapshot,
)

from .interaction import perform_interaction
from .interstitials import dismiss_interstitials

logger = logging.getLogger(__name__)

FREEZE_ANIMATIONS_CSS = """
*, *::before, *::after {
    animation-duration: 0s !important;
    animation-delay: 0s !important;
    animation-iteration-count: 1 !important;
    transition-duration: 0s !important;
    transition-delay: 0s !important;
    caret-color: transparent !important;
    scroll-behavior: auto !important;
}
"""

_PAUSE_MEDIA_SCRIPT = """() => {
    document.querySelectorAll('video, audio').forEach(m => {
        try { m.pause(); m.currentTime = 0; } catch (e) {}
    });
    // Replace animated GIFs with their first frame where the canvas allows it
    document.querySelectorAll('img[src*=".gif"]').forEach(img => {
        try {
            if (!img.complete || !img.naturalWidth) return;
            const canvas = document.createElement('canvas');
            canvas.width = img.naturalWidth;
            canvas.height = img.naturalHeight;
            canvas.getContext('2d').drawImage(img, 0, 0);
            img.src = canvas.toDataURL('image/png');
        } catch (e) {}
    });
}"""

_EXTRACT_SCRIPT = """({ currencyPattern, maxNodes }) => {
    const currencyRe = new RegExp(currencyPattern, 'g');
    const skipTags = new Set(['script', 'style', 'noscript', 'template', 'svg', 'head', 'meta', 'link']);
    const textTags = new Set(['p', 'div', 'span', 'li']);
    const interactiveSelector = 'button, a[href], input, select, textarea, ' +
        '[role="button"], [role="link"], [role="tab"], [role="menuitem"]';
    const buttonSelector = 'button, input[type="button"], input[type="submit"], [role="button"]';

    const isVisible = (el, style) => {
        if (style.display === 'none' || style.visibility === 'hidden' || style.opacity === '0') return false;
        return el.offsetWidth > 0 && el.offsetHeight > 0;
    };
    const boundsOf = (el) => {
        const r = el.getBoundingClientRect();
        return {
            x: r.left + window.scrollX,
            y: r.top + window.scrollY,
            width: r.width,
            height: r.height,
        };
    };
    const textOf = (el) => (el.innerText || el.textContent || '').trim();
    const ownText = (el) => Array.from(el.childNodes)
        .filter(n => n.nodeType === Node.TEXT_NODE)
        .map(n => n.textContent)
        .join(' ')
        .trim();
    const currencyContext = (el) => {
        let node = el;
        for (let depth = 0; node && depth < 4; depth++, node = node.parentElement) {
            const t = textOf(node);
            const stripped = t.replace(currencyRe, '').replace(/\\s+/g, ' ').trim();
            if (stripped.length >= 3) return t.substring(0, 200);
        }
        return '';
    };

    const data = {
        title: document.title,
        headings: [], visibleText: [], buttons: [], links: [], forms: [],
        images: [], currency: [], elements: [], structure: [],
        backgroundColors: [], textColors: [], borderColors: [], classes: [],
    };
    if (!document.body) return data;

    const backgrounds = new Set(), textColors = new Set(), borders = new Set(), classes = new Set();
    const viewportRight = window.innerWidth;
    const stack = [document.body];
    let visited = 0;

    while (stack.length > 0) {
        const el = stack.pop();
        visited++;
        if (visited > maxNodes) break;

        const tag = el.tagName.toLowerCase();
        if (skipTags.has(tag)) continue;
        const style = window.getComputedStyle(el);
        if (style.display === 'none') continue;

        // Push children reversed so they pop in document order
        for (let i = el.children.length - 1; i >= 0; i--) stack.push(el.children[i]);

        if (!isVisible(el, style)) continue;
        const bounds = boundsOf(el);
        const text = textOf(el);

        const bg = style.backgroundColor;
        if (bg && bg !== 'rgba(0, 0, 0, 0)' && bg !== 'transparent') backgrounds.add(bg);
        if (style.color) textColors.add(style.color);
        if (style.borderColor && style.borderColor !== 'rgb(0, 0, 0)') borders.add(style.borderColor);
        if (typeof el.className === 'string') {
            el.className.split(/\\s+/).forEach(c => { if (c) classes.add(c); });
        }

        if (el.parentElement === document.body) data.structure.push(tag);

        if (/^h[1-6]$/.test(tag)) {
            data.headings.push({ tag, text, bounds });
        }
        if (textTags.has(tag) && text.length > 5 && text.length < 200 && !text.includes('\\n\\n')) {
            data.visibleText.push(text);
        }
        if (el.matches(buttonSelector)) {
            data.buttons.push({
                text: text || el.value || el.getAttribute('aria-label') || 'Unlabeled',
                role: el.getAttribute('role') || 'button',
                bounds,
            });
        }
        if (tag === 'a' && el.hasAttribute('href')) {
            const href = el.getAttribute('href');
            if (!href.includes('analytics') && !href.includes('tracking')) {
                data.links.push({ text, href, bounds });
            }
        }
        if (tag === 'form') {
            const inputs = Array.from(el.querySelectorAll('input, textarea, select')).map(inp => ({
                type: inp.type || inp.tagName.toLowerCase(),
                name: inp.name || inp.id || '',
                label: inp.getAttribute('aria-label') || inp.placeholder || '',
            }));
            data.forms.push({ inputs, bounds });
        }
        if (tag === 'img') {
            data.images.push({ alt: el.alt || '', src: (el.src || '').substring(0, 100), bounds });
        }

        const own = ownText(el);
        if (own) {
            const matches = own.match(currencyRe) || [];
            if (matches.length) {
                const context = currencyContext(el);
                for (const amount of matches) data.currency.push({ amount: amount.trim(), context, bounds });
            }
        }

        const interactive = el.matches(interactiveSelector);
        const leafText = el.children.length === 0 && own.length > 0;
        if ((interactive || leafText) && bounds.x < viewportRight) {
            data.elements.push({
                tag,
                text: text.substring(0, 200),
                aria_label: el.getAttribute('aria-label') || '',
                title: el.getAttribute('title') || '',
                alt: el.getAttribute('alt') || '',
                role: el.getAttribute('role') || '',
                bounds,
                has_icon: !!el.querySelector('svg, i, img'),
            });
        }
    }
    data.backgroundColors = Array.from(backgrounds);
    data.textColors = Array.from(textColors);
    data.borderColors = Array.from(borders);
    data.classes = Array.from(classes);
    return data;
}"""


async def freeze_page(page: Page) -> None:
    """Zero out CSS animations and transitions and pause media playback."""
    try:
        await page.add_style_tag(content=FREEZE_ANIMATIONS_CSS)
        await page.evaluate(_PAUSE_MEDIA_SCRIPT)
    except Exception as e:
        logger.debug("Could not freeze animations: %s", e)


async def wait_for_stable_content(page: Page, config: CaptureConfig) -> bool:
    """Poll body text twice; if it changed, wait one settle interval. Returns stability."""
    try:
        first = await page.evaluate("() => document.body ? document.body.innerText : ''")
        await page.wait_for_timeout(config.stability_poll_ms)
        second = await page.evaluate("() => document.body ? document.body.innerText : ''")
    except Exception as e:
        logger.debug("Stability check failed: %s", e)
        return False

    if first == second:
        logger.debug("Content stable")
    else:
        logger.debug("Content still changing, waiting %dms", config.settle_ms)
        await page.wait_for_timeout(config.settle_ms)

    if "Sign In" in second and "Password" in second:
        logger.warning("Login prompt visible, waiting %dms for auth to settle", config.auth_wait_ms)
        await page.wait_for_timeout(config.auth_wait_ms)
    return first == second


def _bounds(raw: dict[str, Any] | None) -> Bounds:
    return Bounds(**raw) if raw else Bounds()


def build_snapshot(raw: dict[str, Any], url: str = "") -> PageSnapshot:
    """Convert the raw in-page extraction into a PageSnapshot."""
    return PageSnapshot(
        url=url,
        title=raw.get("title", "") or "",
        headings=tuple(
            HeadingEntry(tag=h["tag"], text=h.get("text", ""), bounds=_bounds(h.get("bounds")))
            for h in raw.get("headings", [])
        ),
        visible_text=raw.get("visibleText", []),
        buttons=tuple(
            ButtonEntry(text=b["text"], role=b.get("role", "button"), bounds=_bounds(b.get("bounds")))
            for b in raw.get("buttons", [])
        ),
        links=tuple(
            LinkEntry(text=lk.get("text", ""), href=lk.get("href", ""), bounds=_bounds(lk.get("bounds")))
            for lk in raw.get("links", [])
        ),
        forms=tuple(
            FormEntry(
                inputs=tuple(FormInput(**i) for i in f.get("inputs", [])),
                bounds=_bounds(f.get("bounds")),
            )
            for f in raw.get("forms", [])
        ),
        images=tuple(
            ImageEntry(alt=i.get("alt", ""), src=i.get("src", ""), bounds=_bounds(i.get("bounds")))
            for i in raw.get("images", [])
        ),
        currency_amounts=tuple(
            CurrencyAmount(
                amount=c["amount"],
                context=strip_amounts(c.get("context", ""))[:80],
                bounds=_bounds(c.get("bounds")),
            )
            for c in raw.get("currency", [])
        ),
        elements=tuple(
            ElementRecord(**{**e, "bounds": _bounds(e.get("bounds"))})
            for e in raw.get("elements", [])
        ),
        structure=tuple(raw.get("structure", [])),
        background_colors=raw.get("backgroundColors", []),
        text_colors=raw.get("textColors", []),
        border_colors=raw.get("borderColors", []),
        classes=raw.get("classes", []),
    )


async def extract_snapshot(
    page: Page,
    config: CaptureConfig,
    intended_url: str = "",
    interaction: Optional[str] = None,
) -> PageSnapshot:
    """Stabilize the page, optionally interact, and extract a PageSnapshot.

    Navigation is the caller's job. Missing elements only shrink the lists;
    if the in-page extraction itself fails an empty snapshot is returned.
    """
    url = intended_url or page.url

    if config.disable_animations:
        await freeze_page(page)

    await dismiss_interstitials(page, url, config)

    if interaction:
        try:
            await perform_interaction(page, interaction, config)
        except InteractionTargetNotFound as e:
            logger.warning("%s; snapshotting without it", e)

    await wait_for_stable_content(page, config)

    try:
        raw = await page.evaluate(
            _EXTRACT_SCRIPT,
            {"currencyPattern": CURRENCY_PATTERN.pattern, "maxNodes": config.max_dom_nodes},
        )
    except Exception as e:
        logger.error("Snapshot extraction failed for %s: %s", url, e)
        return PageSnapshot(url=url)

    snapshot = build_snapshot(raw, url=url)
    logger.debug(
        "Snapshot of %s: %d headings, %d text nodes, %d buttons, %d elements",
        url, len(snapshot.headings), len(snapshot.visible_text),
        len(snapshot.buttons), len(snapshot.elements),
    )
    return snapshot
