"""Result store — persists comparison bundles as JSON files keyed by timestamp."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pagediff.models.result import ComparisonBundle, ResultSummary

logger = logging.getLogger(__name__)


class ResultStore:
    """One ``<timestamp>.json`` file per bundle; writes never share a key."""

    def __init__(self, results_dir: Path):
        self.results_dir = Path(results_dir)

    def _path(self, result_id: str) -> Path:
        return self.results_dir / f"{result_id}.json"

    def save(self, bundle: ComparisonBundle) -> Path:
        """Persist a bundle and return its file path."""
        self.results_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(bundle.id)
        with open(path, "w") as f:
            json.dump(bundle.model_dump(mode="json"), f, indent=2, default=str)
        logger.debug("Saved comparison %s to %s", bundle.id, path)
        return path

    def load(self, result_id: str) -> ComparisonBundle:
        path = self._path(result_id)
        if not path.exists():
            raise FileNotFoundError(f"Result not found: {result_id}")
        with open(path) as f:
            data = json.load(f)
        return ComparisonBundle.model_validate(data)

    def list_summaries(self) -> list[ResultSummary]:
        """Summaries of every stored bundle, newest first. Unreadable files are skipped."""
        if not self.results_dir.exists():
            return []

        summaries = []
        for path in self.results_dir.glob("*.json"):
            try:
                with open(path) as f:
                    data = json.load(f)
                summaries.append(ResultSummary(
                    id=path.stem,
                    timestamp=data["timestamp"],
                    url1=data["url1"],
                    url2=data["url2"],
                    total_differences=sum(
                        len(r.get("differences", [])) for r in data.get("results", [])
                    ),
                ))
            except Exception as e:
                logger.debug("Could not read result %s: %s", path, e)
                continue

        summaries.sort(key=lambda s: s.timestamp, reverse=True)
        return summaries
