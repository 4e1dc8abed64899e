from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from termtype.core.config import app_dir
from termtype.core.session import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultRecord:
    """A stored result, as read back from disk."""

    wpm: float
    accuracy: float
    timestamp: str
    elapsed: float = 0.0
    correct: int = 0
    incorrect: int = 0


class ResultStore:
    """Append-only history of finished tests, grouped by session key.

    File: ``results.json`` in :func:`app_dir`.  Failing to write is logged and
    otherwise ignored; the session has already produced its result.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or app_dir() / "results.json"
        self._results = self._load()

    @property
    def path(self) -> Path:
        return self._file_path

    def save(self, result: Result) -> None:
        record = ResultRecord(
            wpm=result.wpm,
            accuracy=result.accuracy,
            timestamp=result.timestamp,
            elapsed=result.elapsed,
            correct=result.correct,
            incorrect=result.incorrect,
        )
        self._results.setdefault(result.config.key, []).append(record)
        self._save()

    def keys(self) -> List[str]:
        return sorted(self._results)

    def history(self, key: str) -> List[ResultRecord]:
        """All results for *key*, oldest first."""
        return list(self._results.get(key, []))

    def latest(self, key: str, count: int = 5) -> List[ResultRecord]:
        """The *count* most recent results for *key*, newest first."""
        return list(reversed(self._results.get(key, [])))[:count]

    def best(self, key: str) -> Optional[ResultRecord]:
        records = self._results.get(key)
        if not records:
            return None
        return max(records, key=lambda r: (r.wpm, r.accuracy))

    def is_empty(self) -> bool:
        return not any(self._results.values())

    def _load(self) -> Dict[str, List[ResultRecord]]:
        results: Dict[str, List[ResultRecord]] = {}
        if not self._file_path.exists():
            return results
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load results from %s: %s", self._file_path, e)
            return results
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed results file %s", self._file_path)
            return results

        for key, entries in payload.items():
            if not isinstance(entries, list):
                continue
            records = []
            for value in entries:
                if not isinstance(value, dict):
                    continue
                try:
                    record = ResultRecord(
                        wpm=float(value.get("wpm", 0.0)),
                        accuracy=float(value.get("accuracy", 0.0)),
                        timestamp=str(value.get("timestamp", "")),
                        elapsed=float(value.get("elapsed", 0.0)),
                        correct=int(value.get("correct", 0)),
                        incorrect=int(value.get("incorrect", 0)),
                    )
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping malformed result under %s: %s", key, e)
                    continue
                records.append(record)
            results[key] = records
        return results

    def _save(self) -> None:
        payload = {
            key: [asdict(r) for r in records]
            for key, records in self._results.items()
        }
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save results to %s: %s", self._file_path, e)
