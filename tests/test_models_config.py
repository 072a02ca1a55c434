"""Tests for configuration models."""

import json

import pytest
from pydantic import ValidationError

from pagediff.models.config import CaptureConfig, DiffConfig, FrameworkConfig, ViewportConfig


class TestDefaults:
    """Defaults match the values the pipeline was tuned with."""

    def test_viewport_defaults(self):
        viewport = ViewportConfig()
        assert (viewport.width, viewport.height) == (1920, 1080)

    def test_capture_defaults(self):
        config = CaptureConfig()
        assert config.navigation_timeout_ms == 30000
        assert config.max_dismiss_rounds == 3
        assert config.disable_animations is True

    def test_diff_defaults(self):
        config = DiffConfig()
        assert config.element_diff_mode == "both"
        assert config.similarity_threshold == 0.6
        assert config.match_window == 200
        assert config.pixel_threshold == 0.1
        assert config.min_region_pixels == 500
        assert config.merge_distance == 100
        assert config.max_merged_size == 800

    def test_invalid_diff_mode_rejected(self):
        with pytest.raises(ValidationError):
            DiffConfig(element_diff_mode="semantic")


class TestEnvHeaders:
    """extra_http_headers resolves env: references."""

    def test_env_value_resolved(self, monkeypatch):
        monkeypatch.setenv("PAGEDIFF_TOKEN", "secret-token")
        config = FrameworkConfig(extra_http_headers={"Authorization": "env:PAGEDIFF_TOKEN"})
        assert config.extra_http_headers["Authorization"] == "secret-token"

    def test_plain_value_kept(self):
        config = FrameworkConfig(extra_http_headers={"X-Env": "staging"})
        assert config.extra_http_headers == {"X-Env": "staging"}

    def test_missing_env_var_raises(self, monkeypatch):
        monkeypatch.delenv("PAGEDIFF_MISSING", raising=False)
        with pytest.raises(ValidationError, match="PAGEDIFF_MISSING"):
            FrameworkConfig(extra_http_headers={"Authorization": "env:PAGEDIFF_MISSING"})


class TestLoadSave:

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        FrameworkConfig(headless=False, diff=DiffConfig(min_region_pixels=200)).save(path)

        loaded = FrameworkConfig.load(path)
        assert loaded.headless is False
        assert loaded.diff.min_region_pixels == 200

    def test_load_partial_file_fills_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"results_dir": "/tmp/out"}))

        loaded = FrameworkConfig.load(path)
        assert loaded.results_dir == "/tmp/out"
        assert loaded.capture.settle_ms == 1500

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FrameworkConfig.load(tmp_path / "nope.json")
