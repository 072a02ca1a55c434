"""Comparison orchestrator — drives capture, diff, render and persist for every state."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from playwright.async_api import Browser, Page, async_playwright

from pagediff.capture.interactive_scan import scan_interactive_elements
from pagediff.capture.navigation import navigate
from pagediff.capture.snapshot_extractor import extract_snapshot
from pagediff.diff.element_differ import diff_elements, merge_differences
from pagediff.diff.interaction_diff import diff_interactions
from pagediff.models.config import FrameworkConfig
from pagediff.models.result import (
    ComparisonBundle,
    ComparisonResult,
    ComparisonSummary,
    ProgressEvent,
    ScreenshotSet,
    SnapshotPair,
)
from pagediff.models.snapshot import PageSnapshot
from pagediff.reporter.reporter import Reporter
from pagediff.store.result_store import ResultStore
from pagediff.url_utils import parse_interactions, slugify, validate_targets
from pagediff.utils.browser import create_isolated_context, launch_browser
from pagediff.visual.annotator import annotate_pair
from pagediff.visual.pixel_diff import diff_screenshots
from pagediff.visual.region_identifier import identify_region_changes

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class ComparisonState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    COMPARING = "comparing"
    RENDERING = "rendering"
    PERSISTED = "persisted"


class ComparisonOrchestrator:
    """Runs the full comparison pipeline for a default view plus interaction states.

    Each state gets two fresh browser contexts, so nothing an interaction
    changed carries over into the next state. A failure in any state aborts
    the run and nothing is persisted.
    """

    def __init__(
        self,
        config: FrameworkConfig,
        store: ResultStore | None = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.store = store or ResultStore(Path(config.results_dir))
        self.progress = progress
        self.output_dir = Path(config.output_dir)
        self.state = ComparisonState.IDLE
        self._step = 0

    def run(
        self, url1: str, url2: str, interactions: str = "", description: str = ""
    ) -> ComparisonBundle:
        """Synchronous wrapper around :meth:`compare`."""
        return asyncio.run(self.compare(url1, url2, interactions, description))

    async def compare(
        self, url1: str, url2: str, interactions: str = "", description: str = ""
    ) -> ComparisonBundle:
        validate_targets(url1, url2)
        labels = parse_interactions(interactions)
        timestamp = int(time.time() * 1000)
        start = time.time()
        self._step = 0
        self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info("=== Comparing %s vs %s (%d states) ===", url1, url2, len(labels) + 1)
        results: list[ComparisonResult] = []

        async with async_playwright() as p:
            browser = await launch_browser(p, headless=self.config.headless)
            try:
                for label in [None, *labels]:
                    results.append(
                        await self._compare_state(browser, url1, url2, label, timestamp)
                    )
            finally:
                await browser.close()

        bundle = ComparisonBundle(
            id=str(timestamp),
            timestamp=timestamp,
            url1=url1,
            url2=url2,
            description=description,
            interactions=labels,
            results=results,
        )
        self.store.save(bundle)
        self._set_state(ComparisonState.PERSISTED)
        self._emit(f"Comparison saved: {bundle.total_differences} differences")
        logger.info(
            "=== Comparison %s complete: %d differences in %.1fs ===",
            bundle.id, bundle.total_differences, time.time() - start,
        )
        return bundle

    def generate_reports(self, bundle: ComparisonBundle) -> dict[str, str]:
        return Reporter(self.config).generate_reports(bundle)

    # ------------------------------------------------------------------
    # One state
    # ------------------------------------------------------------------

    async def _compare_state(
        self,
        browser: Browser,
        url1: str,
        url2: str,
        interaction: str | None,
        timestamp: int,
    ) -> ComparisonResult:
        state_name = interaction or "default"
        prefix = self.output_dir / f"{timestamp}_{slugify(state_name)}"
        shot1 = f"{prefix}_url1.png"
        shot2 = f"{prefix}_url2.png"

        self._set_state(ComparisonState.CAPTURING)
        self._emit(f"[{state_name}] Loading both pages")
        contexts = []
        try:
            contexts.append(await create_isolated_context(browser, self.config))
            contexts.append(await create_isolated_context(browser, self.config))
            page1 = await contexts[0].new_page()
            page2 = await contexts[1].new_page()

            snapshot1, snapshot2 = await asyncio.gather(
                self._capture(page1, url1, interaction),
                self._capture(page2, url2, interaction),
            )

            self._emit(f"[{state_name}] Capturing screenshots")
            await asyncio.gather(
                page1.screenshot(path=shot1, full_page=True),
                page2.screenshot(path=shot2, full_page=True),
            )

            if interaction is None and self.config.capture.scan_interactive_elements:
                self._emit(f"[{state_name}] Scanning interactive elements")
                outcomes1, outcomes2 = await asyncio.gather(
                    scan_interactive_elements(page1, self.config.capture),
                    scan_interactive_elements(page2, self.config.capture),
                )
                snapshot1 = snapshot1.model_copy(update={"interactions": tuple(outcomes1)})
                snapshot2 = snapshot2.model_copy(update={"interactions": tuple(outcomes2)})
        finally:
            for context in contexts:
                await context.close()

        return self._analyze(
            state_name, timestamp, url1, url2, snapshot1, snapshot2, shot1, shot2, prefix,
        )

    async def _capture(self, page: Page, url: str, interaction: str | None) -> PageSnapshot:
        await navigate(page, url, self.config.capture)
        return await extract_snapshot(
            page, self.config.capture, intended_url=url, interaction=interaction,
        )

    def _analyze(
        self,
        state_name: str,
        timestamp: int,
        url1: str,
        url2: str,
        snapshot1: PageSnapshot,
        snapshot2: PageSnapshot,
        shot1: str,
        shot2: str,
        prefix: Path,
    ) -> ComparisonResult:
        diff_config = self.config.diff

        self._set_state(ComparisonState.COMPARING)
        self._emit(f"[{state_name}] Comparing page structure")
        element_differences = diff_elements(snapshot1, snapshot2, diff_config)

        self._emit(f"[{state_name}] Comparing pixels")
        diff_path = f"{prefix}_diff.png"
        pixel_result = diff_screenshots(shot1, shot2, diff_config, diff_path=diff_path)
        region_differences = identify_region_changes(
            pixel_result.regions, snapshot1, snapshot2, diff_config,
        )
        differences = [
            *merge_differences(element_differences, region_differences),
            *diff_interactions(snapshot1.interactions, snapshot2.interactions),
        ]

        self._set_state(ComparisonState.RENDERING)
        self._emit(f"[{state_name}] Highlighting {len(differences)} differences")
        highlighted1, highlighted2 = annotate_pair(
            shot1, shot2,
            f"{prefix}_url1_highlighted.png", f"{prefix}_url2_highlighted.png",
            differences,
        )

        logger.info(
            "[%s] %d differences, %d changed pixels in %d regions",
            state_name, len(differences), pixel_result.pixel_count, len(pixel_result.regions),
        )
        return ComparisonResult(
            timestamp=timestamp,
            state=state_name,
            config={"url1": url1, "url2": url2, "interaction": state_name},
            screenshots=ScreenshotSet(
                url1=shot1,
                url2=shot2,
                diff=diff_path if Path(diff_path).exists() else None,
                highlighted_url1=highlighted1,
                highlighted_url2=highlighted2,
            ),
            data=SnapshotPair(snapshot1=snapshot1, snapshot2=snapshot2),
            differences=differences,
            summary=ComparisonSummary.from_differences(
                differences,
                pixel_differences=pixel_result.pixel_count,
                regions=len(pixel_result.regions),
            ),
        )

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def _set_state(self, state: ComparisonState) -> None:
        logger.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state

    def _emit(self, detail: str) -> None:
        self._step += 1
        if self.progress is None:
            return
        try:
            self.progress(ProgressEvent(step=self._step, detail=detail))
        except Exception as e:
            logger.debug("Progress observer failed: %s", e)
