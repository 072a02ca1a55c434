"""Pixel diff — perceptual per-pixel comparison of two full-page screenshots."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageChops

from pagediff.errors import ImageDimensionMismatch
from pagediff.models.config import DiffConfig
from pagediff.models.region import PixelDiffResult

from .clustering import DiffMask, find_regions, merge_regions

logger = logging.getLogger(__name__)

# Largest possible weighted YIQ delta, as used by pixelmatch
MAX_COLOR_DELTA = 35215.0
# Y, I and Q weights of the delta
_BAND_WEIGHTS = (0.5053, 0.299, 0.1957)
# Each band's contribution is scaled so the threshold lands on this value
_THRESHOLD_LEVEL = 128
# Maps the halved, 128-centred RGB difference to the halved, 128-centred YIQ
# difference. The I and Q rows sum to zero.
_YIQ_MATRIX = (
    0.29889531, 0.58662247, 0.11448223, 0.0,
    0.59597799, -0.2741761, -0.32180189, 128.0,
    0.21147017, -0.52261711, 0.31114694, 128.0,
)


def load_image(source: str | Path | bytes) -> Image.Image:
    """Open a PNG path or raw bytes as an RGB image."""
    if isinstance(source, bytes):
        return Image.open(io.BytesIO(source)).convert("RGB")
    return Image.open(source).convert("RGB")


def pad_to_canvas(
    img1: Image.Image,
    img2: Image.Image,
    background: tuple[int, int, int] = (255, 255, 255),
) -> tuple[Image.Image, Image.Image]:
    """Place both images top-left on a shared canvas; nothing is cropped or scaled."""
    width = max(img1.width, img2.width)
    height = max(img1.height, img2.height)

    def _pad(img: Image.Image) -> Image.Image:
        if img.size == (width, height):
            return img
        canvas = Image.new("RGB", (width, height), background)
        canvas.paste(img, (0, 0))
        return canvas

    return _pad(img1), _pad(img2)


def _band_lut(weight: float, max_delta: float) -> list[int]:
    # A band value v stands for a component delta of 2 * (v - 128)
    return [
        min(255, int(weight * (2 * (v - 128)) ** 2 * _THRESHOLD_LEVEL / max_delta))
        for v in range(256)
    ]


# ---------------------------------------------------------------------------
# Anti-aliasing detection
# ---------------------------------------------------------------------------


def _brightness(pixels, x: int, y: int) -> float:
    r, g, b = pixels[x, y][:3]
    return r * 0.29889531 + g * 0.58662247 + b * 0.11448223


def _has_many_siblings(pixels, x1: int, y1: int, width: int, height: int) -> bool:
    """True if more than two neighbours share the exact colour of (x1, y1)."""
    x0, y0 = max(x1 - 1, 0), max(y1 - 1, 0)
    x2, y2 = min(x1 + 1, width - 1), min(y1 + 1, height - 1)
    zeroes = 1 if x1 in (x0, x2) or y1 in (y0, y2) else 0
    colour = pixels[x1, y1]

    for x in range(x0, x2 + 1):
        for y in range(y0, y2 + 1):
            if x == x1 and y == y1:
                continue
            if pixels[x, y] == colour:
                zeroes += 1
                if zeroes > 2:
                    return True
    return False


def _is_antialiased(pixels, other, x1: int, y1: int, width: int, height: int) -> bool:
    """Whether (x1, y1) looks like an anti-aliased edge pixel in ``pixels``.

    The pixel must sit between a darker and a brighter neighbour, have at most
    two equally bright neighbours, and the darkest or brightest neighbour must
    lie inside a flat area in both images.
    """
    x0, y0 = max(x1 - 1, 0), max(y1 - 1, 0)
    x2, y2 = min(x1 + 1, width - 1), min(y1 + 1, height - 1)
    zeroes = 1 if x1 in (x0, x2) or y1 in (y0, y2) else 0
    centre = _brightness(pixels, x1, y1)
    min_delta = max_delta = 0.0
    min_pos = max_pos = None

    for x in range(x0, x2 + 1):
        for y in range(y0, y2 + 1):
            if x == x1 and y == y1:
                continue
            delta = centre - _brightness(pixels, x, y)
            if delta == 0:
                zeroes += 1
                if zeroes > 2:
                    return False
            elif delta < min_delta:
                min_delta, min_pos = delta, (x, y)
            elif delta > max_delta:
                max_delta, max_pos = delta, (x, y)

    if min_pos is None or max_pos is None:
        return False

    return any(
        _has_many_siblings(pixels, px, py, width, height)
        and _has_many_siblings(other, px, py, width, height)
        for px, py in (min_pos, max_pos)
    )


def _drop_antialiased(mask: bytearray, img1: Image.Image, img2: Image.Image) -> int:
    """Clear mask pixels that are anti-aliasing in either image. Returns the count."""
    width, height = img1.size
    pixels1, pixels2 = img1.load(), img2.load()
    dropped = 0

    index = mask.find(255)
    while index >= 0:
        y, x = divmod(index, width)
        if (
            _is_antialiased(pixels1, pixels2, x, y, width, height)
            or _is_antialiased(pixels2, pixels1, x, y, width, height)
        ):
            mask[index] = 0
            dropped += 1
        index = mask.find(255, index + 1)
    return dropped


def compute_diff_mask(
    img1: Image.Image,
    img2: Image.Image,
    threshold: float = 0.1,
    ignore_antialiasing: bool = True,
) -> DiffMask:
    """Mark pixels whose weighted YIQ distance exceeds ``threshold``.

    Raises ImageDimensionMismatch if the images differ in size. With
    ``ignore_antialiasing`` each marked pixel is checked against its 3x3
    neighbourhood and dropped if it is an anti-aliased edge in either image.
    """
    if img1.size != img2.size:
        raise ImageDimensionMismatch(img1.size, img2.size)
    if img1.mode != "RGB":
        img1 = img1.convert("RGB")
    if img2.mode != "RGB":
        img2 = img2.convert("RGB")

    max_delta = max(MAX_COLOR_DELTA * threshold * threshold, 1e-9)
    signed = ImageChops.subtract(img1, img2, scale=2.0, offset=128)
    deltas = signed.convert("RGB", _YIQ_MATRIX).split()

    combined = None
    for band, weight in zip(deltas, _BAND_WEIGHTS):
        term = band.point(_band_lut(weight, max_delta))
        combined = term if combined is None else ImageChops.add(combined, term)

    mask = bytearray(combined.point(lambda p: 255 if p >= _THRESHOLD_LEVEL else 0).tobytes())
    if ignore_antialiasing:
        dropped = _drop_antialiased(mask, img1, img2)
        logger.debug("Ignored %d anti-aliased pixels", dropped)

    return DiffMask(img1.width, img1.height, mask)


def render_diff_image(base: Image.Image, mask: DiffMask, output_path: str | Path) -> None:
    """Write changed pixels in red over a faded greyscale copy of ``base``."""
    mask_img = Image.frombytes("L", (mask.width, mask.height), bytes(mask.data))
    faded = Image.blend(
        base.convert("L").convert("RGB"),
        Image.new("RGB", base.size, (255, 255, 255)),
        0.7,
    )
    red = Image.new("RGB", base.size, (255, 0, 0))
    Image.composite(red, faded, mask_img).save(output_path)


def diff_screenshots(
    path1: str | Path | bytes,
    path2: str | Path | bytes,
    config: DiffConfig | None = None,
    diff_path: str | Path | None = None,
) -> PixelDiffResult:
    """Compare two screenshots and cluster the differing pixels into regions."""
    config = config or DiffConfig()
    img1, img2 = load_image(path1), load_image(path2)

    try:
        mask = compute_diff_mask(img1, img2, config.pixel_threshold, config.ignore_antialiasing)
    except ImageDimensionMismatch as e:
        logger.info("%s; padding to a common canvas", e)
        img1, img2 = pad_to_canvas(img1, img2, config.background_color)
        mask = compute_diff_mask(img1, img2, config.pixel_threshold, config.ignore_antialiasing)

    pixel_count = mask.pixel_count
    regions = merge_regions(find_regions(mask, config), config)
    logger.info("Pixel diff: %d differing pixels in %d regions", pixel_count, len(regions))

    if diff_path:
        try:
            render_diff_image(img1, mask, diff_path)
        except Exception as e:
            logger.warning("Could not write diff image %s: %s", diff_path, e)

    return PixelDiffResult(
        width=mask.width,
        height=mask.height,
        pixel_count=pixel_count,
        regions=regions,
    )
