"""Error taxonomy for the comparison pipeline.

``RenderingSessionLaunchFailure``, ``NavigationTimeout`` and ``IdenticalTargetsError``
reach callers; the rest are raised and recovered inside the stage that owns them.
"""

from __future__ import annotations


class PageDiffError(Exception):
    """Base class for pipeline errors."""


class NavigationTimeout(PageDiffError):
    """Both the primary and the fallback wait strategy timed out."""

    def __init__(self, url: str, timeout_ms: int):
        super().__init__(f"Navigation to {url} timed out after {timeout_ms}ms")
        self.url = url
        self.timeout_ms = timeout_ms


class InterstitialDismissFailure(PageDiffError):
    """An overlay was found but could not be dismissed."""


class InteractionTargetNotFound(PageDiffError):
    """No element matched the configured interaction label."""

    def __init__(self, label: str):
        super().__init__(f"No element found for interaction '{label}'")
        self.label = label


class ImageDimensionMismatch(PageDiffError):
    """Two rasters were compared without first aligning their sizes."""

    def __init__(self, size1: tuple[int, int], size2: tuple[int, int]):
        super().__init__(f"Image sizes differ: {size1} vs {size2}")
        self.size1 = size1
        self.size2 = size2


class RegionAnalysisError(PageDiffError):
    """Classifying one diff region failed."""


class RenderingSessionLaunchFailure(PageDiffError):
    """The browser or one of its contexts could not be started."""


class IdenticalTargetsError(PageDiffError, ValueError):
    """Both page identifiers point at the same page."""
