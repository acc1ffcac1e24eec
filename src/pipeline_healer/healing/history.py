"""Append-only audit trail of analyses and fix attempts."""

import itertools
import json
import os
from datetime import datetime, timezone
from pathlib import Path

from ..models import DetectedFailure, FixSuggestion

LOG_EXCERPT_LIMIT = 1000

# Per-process sequence keeps names unique within one timestamp tick
_sequence = itertools.count()


class HistoryStore:
    """Write one JSON document per record into a directory.

    Records are never updated or read back. File names combine a UTC
    timestamp, the process id and a sequence number, and files are opened in
    exclusive-create mode, so concurrent writers cannot clobber each other.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def record_analysis(
        self,
        platform: str,
        log: str | None,
        failures: list[DetectedFailure],
        suggestions: list[FixSuggestion],
    ) -> Path:
        """Persist the result of one log analysis."""
        record = {
            "timestamp": _now().isoformat(),
            "platform": platform,
            "failures": [f.to_dict() for f in failures],
            "suggestions": [s.to_dict() for s in suggestions],
        }
        if log is not None:
            record["log_excerpt"] = excerpt(log)
        return self._write("analysis", record)

    def record_fix_attempt(
        self,
        platform: str,
        suggestion: FixSuggestion,
        success: bool,
        output: str | None,
        error: str | None,
    ) -> Path:
        """Persist the outcome of one fix attempt."""
        record = {
            "timestamp": _now().isoformat(),
            "platform": platform,
            "failure": suggestion.failure.to_dict(),
            "fixes": [fix.to_dict() for fix in suggestion.fixes],
            "success": success,
            "output": output,
            "error": error,
        }
        return self._write("fix-attempt", record)

    def _write(self, kind: str, record: dict) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)

        stamp = _now().strftime("%Y%m%dT%H%M%S%fZ")
        path = self.directory / f"{kind}-{stamp}-{os.getpid()}-{next(_sequence)}.json"

        # Serialize first so a bad record never leaves a partial file behind
        payload = json.dumps(record, indent=2)
        with open(path, "x", encoding="utf-8") as f:
            f.write(payload)

        return path


def excerpt(log: str) -> str:
    """First LOG_EXCERPT_LIMIT characters of a log, marked when cut."""
    if len(log) > LOG_EXCERPT_LIMIT:
        return log[:LOG_EXCERPT_LIMIT] + "..."
    return log


def _now() -> datetime:
    return datetime.now(timezone.utc)
