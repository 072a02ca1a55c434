"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from pagediff.models.config import CaptureConfig, DiffConfig, FrameworkConfig
from pagediff.models.difference import (
    ContentDifference,
    Coordinates,
    CurrencyDifference,
    ListDifference,
    TitleDifference,
)
from pagediff.models.result import (
    ComparisonBundle,
    ComparisonResult,
    ComparisonSummary,
    ScreenshotSet,
    SnapshotPair,
)
from pagediff.models.snapshot import Bounds, ElementRecord, PageSnapshot


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def capture_config() -> CaptureConfig:
    """Capture config with every wait shortened to zero."""
    return CaptureConfig(
        post_load_wait_ms=0,
        stability_poll_ms=0,
        settle_ms=0,
        auth_wait_ms=0,
        dismiss_settle_ms=0,
        interaction_settle_ms=0,
    )


@pytest.fixture
def diff_config() -> DiffConfig:
    return DiffConfig()


@pytest.fixture
def framework_config(tmp_path: Path, capture_config: CaptureConfig) -> FrameworkConfig:
    """Framework config writing everything under tmp_path."""
    return FrameworkConfig(
        capture=capture_config,
        output_dir=str(tmp_path / "screenshots"),
        results_dir=str(tmp_path / "results"),
        report_output_dir=str(tmp_path / "reports"),
    )


# ============================================================================
# Snapshot Fixtures
# ============================================================================


@pytest.fixture
def make_element():
    """Factory for ElementRecord at a position."""

    def _make(text: str = "", tag: str = "span", x: float = 0, y: float = 0, **kwargs: Any) -> ElementRecord:
        return ElementRecord(
            tag=tag,
            text=text,
            bounds=Bounds(x=x, y=y, width=kwargs.pop("width", 100), height=kwargs.pop("height", 20)),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_snapshot():
    """Factory for PageSnapshot with sensible defaults."""

    def _make(**kwargs: Any) -> PageSnapshot:
        kwargs.setdefault("url", "https://example.com")
        kwargs.setdefault("title", "Example")
        return PageSnapshot(**kwargs)

    return _make


@pytest.fixture
def empty_snapshot() -> PageSnapshot:
    return PageSnapshot(url="https://example.com")


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_image(tmp_path: Path):
    """Factory writing a PNG filled with white plus optional black boxes."""

    def _make(name: str, size=(200, 200), boxes=(), color=(255, 255, 255)) -> Path:
        img = Image.new("RGB", size, color)
        for box in boxes:
            img.paste((0, 0, 0), box)
        path = tmp_path / name
        img.save(path)
        return path

    return _make


# ============================================================================
# Result Fixtures
# ============================================================================


@pytest.fixture
def sample_differences() -> list:
    return [
        TitleDifference(
            type="Text",
            category="Page Title",
            severity="high",
            detail='URL 1: "Home" vs URL 2: "Home <beta>"',
            url1_value="Home",
            url2_value="Home <beta>",
        ),
        ListDifference(
            type="Interactive",
            category="Buttons Added",
            severity="high",
            detail='"Send"',
            count=1,
            examples=("Send",),
        ),
        CurrencyDifference(
            type="Content",
            category="Currency Amount Changed",
            severity="high",
            detail='"Total $10.00" → "Total $12.00"',
            url1_value="$10.00",
            url2_value="$12.00",
            coordinates=Coordinates(
                url1=Bounds(x=10, y=10, width=80, height=20),
                url2=Bounds(x=12, y=10, width=80, height=20),
            ),
        ),
        ContentDifference(
            type="Content",
            category="Content Added",
            severity="medium",
            detail='"Free shipping"',
            coordinates=Coordinates(url2=Bounds(x=20, y=60, width=100, height=20)),
        ),
    ]


@pytest.fixture
def make_bundle(sample_differences: list):
    """Factory for a stored comparison bundle."""

    def _make(timestamp: int = 1700000000000, differences: list | None = None, **kwargs: Any) -> ComparisonBundle:
        diffs = sample_differences if differences is None else differences
        result = ComparisonResult(
            timestamp=timestamp,
            screenshots=kwargs.pop(
                "screenshots", ScreenshotSet(url1="missing1.png", url2="missing2.png"),
            ),
            data=SnapshotPair(
                snapshot1=PageSnapshot(url="https://a.example.com", title="Home"),
                snapshot2=PageSnapshot(url="https://b.example.com", title="Home <beta>"),
            ),
            differences=diffs,
            summary=ComparisonSummary.from_differences(diffs, pixel_differences=1200, regions=2),
        )
        return ComparisonBundle(
            id=str(timestamp),
            timestamp=timestamp,
            url1=kwargs.pop("url1", "https://a.example.com"),
            url2=kwargs.pop("url2", "https://b.example.com"),
            description=kwargs.pop("description", "Staging check"),
            results=[result],
        )

    return _make


# ============================================================================
# Playwright Mocks
# ============================================================================


@pytest.fixture
def mock_page() -> MagicMock:
    """Page mock where nothing is visible and every evaluate returns None."""
    page = MagicMock()
    page.url = "https://example.com/"
    page.goto = AsyncMock()
    page.evaluate = AsyncMock(return_value=None)
    page.wait_for_timeout = AsyncMock()
    page.add_style_tag = AsyncMock()
    page.screenshot = AsyncMock()

    locator = MagicMock()
    locator.first.is_visible = AsyncMock(return_value=False)
    locator.first.click = AsyncMock()
    page.locator.return_value = locator
    page.get_by_text.return_value = locator
    return page
