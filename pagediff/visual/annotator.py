"""Annotated rendering — draws severity-coloured boxes over screenshots."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from pagediff.models.difference import PageSide

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    "high": ((255, 69, 58), "HIGH"),
    "medium": ((255, 159, 10), "MED"),
    "low": ((10, 132, 255), "LOW"),
}

FILL_ALPHA = 48
BORDER_WIDTH = 3


def _draw_box(draw: ImageDraw.ImageDraw, box, color, label: str, font) -> None:
    x0, y0, x1, y1 = box
    draw.rectangle(box, fill=color + (FILL_ALPHA,), outline=color + (255,), width=BORDER_WIDTH)
    text_box = draw.textbbox((0, 0), label, font=font)
    text_w = text_box[2] - text_box[0]
    text_h = text_box[3] - text_box[1]
    label_y = y0 - text_h - 6 if y0 >= text_h + 6 else y0
    draw.rectangle((x0, label_y, x0 + text_w + 8, label_y + text_h + 6), fill=color + (255,))
    draw.text((x0 + 4, label_y + 2), label, fill=(255, 255, 255, 255), font=font)


def render_annotations(
    image_path: str | Path,
    output_path: str | Path,
    differences: Sequence,
    page: PageSide,
) -> int:
    """Draw every difference located on ``page``. Returns the number of boxes drawn.

    When nothing applies the screenshot is copied as-is rather than re-encoded.
    """
    applicable = [
        (index, diff) for index, diff in enumerate(differences, 1) if diff.applies_to(page)
    ]
    if not applicable:
        shutil.copy2(image_path, output_path)
        return 0

    with Image.open(image_path) as source:
        base = source.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = ImageFont.load_default()

    for index, diff in applicable:
        bounds = diff.coordinates.for_page(page)
        color, short = SEVERITY_COLORS.get(diff.severity, SEVERITY_COLORS["low"])
        box = (
            int(bounds.x),
            int(bounds.y),
            int(bounds.x + max(bounds.width, 1)),
            int(bounds.y + max(bounds.height, 1)),
        )
        _draw_box(draw, box, color, f"#{index} {short}", font)

    Image.alpha_composite(base, overlay).convert("RGB").save(output_path)
    logger.debug("Annotated %d differences on %s", len(applicable), output_path)
    return len(applicable)


def annotate_pair(
    image1: str | Path,
    image2: str | Path,
    output1: str | Path,
    output2: str | Path,
    differences: Sequence,
) -> tuple[str, str]:
    """Render both pages' annotated copies; on failure fall back to plain copies."""
    for source, target, page in ((image1, output1, "url1"), (image2, output2, "url2")):
        try:
            render_annotations(source, target, differences, page)
        except Exception as e:
            logger.error("Annotating %s failed: %s", page, e)
            shutil.copy2(source, target)
    return str(output1), str(output2)
