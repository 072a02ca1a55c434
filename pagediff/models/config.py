"""Configuration models for page comparisons."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ViewportConfig(BaseModel):
    width: int = 1920
    height: int = 1080
    name: str = "desktop"


class CaptureConfig(BaseModel):
    """Timing and limits for loading and snapshotting a page."""

    navigation_timeout_ms: int = 30000
    post_load_wait_ms: int = 3000
    stability_poll_ms: int = 1500
    settle_ms: int = 1500
    auth_wait_ms: int = 5000
    max_dismiss_rounds: int = 3
    dismiss_settle_ms: int = 1500
    selector_visible_timeout_ms: int = 1000
    interaction_settle_ms: int = 1500
    max_dom_nodes: int = 20000
    disable_animations: bool = True
    # Click tab-like controls after the default capture and compare what they reveal
    scan_interactive_elements: bool = False
    max_scan_per_selector: int = 5
    scan_content_chars: int = 500


class DiffConfig(BaseModel):
    """Thresholds for element matching and pixel clustering.

    The defaults were tuned by hand on content-heavy marketing pages and are
    not expected to fit every page density.
    """

    element_diff_mode: Literal["field", "fuzzy", "both"] = "both"
    compare_styles: bool = True

    # Fuzzy element matching
    similarity_threshold: float = 0.6
    match_window: int = 200
    proximity_radius: int = 100
    min_label_length: int = 4

    # Field diff previews
    preview_limit: int = 5
    text_preview_limit: int = 3

    # Pixel diff
    pixel_threshold: float = 0.1
    ignore_antialiasing: bool = True
    background_color: tuple[int, int, int] = (255, 255, 255)

    # Region clustering
    grid_step: int = 4
    min_region_pixels: int = 500
    region_padding: int = 10
    merge_distance: int = 100
    max_merged_size: int = 800

    # Region content identification
    position_tolerance: int = 50


class FrameworkConfig(BaseModel):
    # Browser
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    user_agent: Optional[str] = None
    headless: bool = True
    extra_http_headers: dict[str, str] = Field(default_factory=dict)

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)

    # Output
    output_dir: str = "./screenshots"
    results_dir: str = "./results"
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])  # html, json, markdown
    report_output_dir: str = "./pagediff-reports"

    @field_validator("extra_http_headers", mode="before")
    @classmethod
    def resolve_env_headers(cls, v: dict) -> dict:
        if not isinstance(v, dict):
            return v
        resolved = {}
        for name, value in v.items():
            if isinstance(value, str) and value.startswith("env:"):
                env_var = value[4:]
                env_value = os.environ.get(env_var)
                if env_value is None:
                    raise ValueError(f"Environment variable '{env_var}' not set")
                value = env_value
            resolved[name] = value
        return resolved

    @classmethod
    def load(cls, path: str | Path) -> "FrameworkConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
