"""Tests for the JSON result store."""

import json

import pytest

from pagediff.models.difference import CurrencyDifference
from pagediff.store.result_store import ResultStore


class TestResultStore:

    def test_save_and_load(self, tmp_path, make_bundle):
        store = ResultStore(tmp_path / "results")
        bundle = make_bundle(timestamp=1700000000000)

        path = store.save(bundle)
        loaded = store.load("1700000000000")

        assert path.name == "1700000000000.json"
        assert loaded.url1 == bundle.url1
        assert loaded.total_differences == bundle.total_differences
        assert isinstance(loaded.results[0].differences[2], CurrencyDifference)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ResultStore(tmp_path).load("123")

    def test_list_newest_first(self, tmp_path, make_bundle):
        store = ResultStore(tmp_path)
        for ts in (1700000000000, 1700000300000, 1700000100000):
            store.save(make_bundle(timestamp=ts))

        summaries = store.list_summaries()

        assert [s.timestamp for s in summaries] == [1700000300000, 1700000100000, 1700000000000]
        assert summaries[0].total_differences == 4

    def test_unreadable_files_skipped(self, tmp_path, make_bundle):
        store = ResultStore(tmp_path)
        store.save(make_bundle())
        (tmp_path / "broken.json").write_text("{not json")
        (tmp_path / "partial.json").write_text(json.dumps({"timestamp": 1}))

        assert len(store.list_summaries()) == 1

    def test_missing_directory_lists_nothing(self, tmp_path):
        assert ResultStore(tmp_path / "absent").list_summaries() == []
