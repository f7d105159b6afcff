"""Row stores for pulse responses.

Every store exposes ``insert`` and ``list_all`` and is handed to the service
explicitly; nothing in the pipeline keeps a module-level store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Mapping, Protocol

import orjson

from .utils import append_jsonl

logger = logging.getLogger(__name__)


class PulseStoreError(Exception):
    pass


class PulseStore(Protocol):
    def insert(self, row: Mapping[str, Any]) -> None:
        ...

    def list_all(self) -> List[Dict[str, Any]]:
        ...


class InMemoryPulseStore:
    def __init__(self) -> None:
        self._rows: List[Dict[str, Any]] = []
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def insert(self, row: Mapping[str, Any]) -> None:
        with self._lock:
            self._rows.append(dict(row))

    def list_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(row) for row in self._rows]


class JsonlPulseStore:
    """Append-only JSONL file, one response per line."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = Lock()

    def insert(self, row: Mapping[str, Any]) -> None:
        with self._lock:
            try:
                append_jsonl(self.path, row)
            except (OSError, TypeError) as exc:
                raise PulseStoreError(f"Could not append to {self.path}: {exc}") from exc

    def list_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            if not self.path.exists():
                return []
            try:
                lines = self.path.read_bytes().splitlines()
            except OSError as exc:
                raise PulseStoreError(f"Could not read {self.path}: {exc}") from exc
        rows: List[Dict[str, Any]] = []
        for line_no, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                logger.warning("Skipping undecodable line %d in %s: %s", line_no, self.path, exc)
                continue
            if not isinstance(entry, dict):
                logger.warning("Skipping non-object line %d in %s", line_no, self.path)
                continue
            rows.append(entry)
        return rows


class FallbackPulseStore:
    """Write to ``primary``; capture into ``fallback`` when it fails."""

    def __init__(self, primary: PulseStore, fallback: PulseStore | None = None) -> None:
        self.primary = primary
        self.fallback = fallback if fallback is not None else InMemoryPulseStore()

    def insert(self, row: Mapping[str, Any]) -> None:
        try:
            self.primary.insert(row)
        except PulseStoreError as exc:
            logger.warning("Primary pulse store unavailable, capturing response in fallback: %s", exc)
            self.fallback.insert(row)

    def list_all(self) -> List[Dict[str, Any]]:
        captured = self.fallback.list_all()
        try:
            rows = self.primary.list_all()
        except PulseStoreError as exc:
            logger.warning("Primary pulse store unreadable, serving %d fallback rows: %s", len(captured), exc)
            return captured
        return rows + captured


__all__ = [
    "FallbackPulseStore",
    "InMemoryPulseStore",
    "JsonlPulseStore",
    "PulseStore",
    "PulseStoreError",
]
