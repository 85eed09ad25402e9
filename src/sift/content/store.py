"""Persistence collaborators for content items.

The engine only talks to a ``ContentRepository``; it never decides how
items are stored.  Two implementations ship here: a JSON-backed store
that loads on init and saves after every write, and an in-memory one
for tests and throwaway sessions.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from sift.content.models import ContentItem

logger = logging.getLogger(__name__)

STORE_FILENAME = ".sift-content.json"


@runtime_checkable
class ContentRepository(Protocol):
    """Storage contract the engine depends on."""

    def get_all(self) -> list[ContentItem]: ...

    def get(self, item_id: str) -> ContentItem | None: ...

    def upsert(self, item: ContentItem) -> None: ...

    def delete(self, item_id: str) -> bool: ...


class InMemoryContentRepository:
    """Dict-backed repository; nothing survives the process."""

    def __init__(self, items: list[ContentItem] | None = None) -> None:
        self._items: dict[str, ContentItem] = {item.id: item for item in items or []}
        self._lock = threading.Lock()

    def get_all(self) -> list[ContentItem]:
        with self._lock:
            return list(self._items.values())

    def get(self, item_id: str) -> ContentItem | None:
        with self._lock:
            return self._items.get(item_id)

    def upsert(self, item: ContentItem) -> None:
        with self._lock:
            self._items[item.id] = item

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    items: list[ContentItem] = Field(default_factory=list)


class JsonContentRepository:
    """JSON-backed repository for content items.

    Loads the store file on init and saves after every mutation.
    """

    def __init__(self, directory: Path) -> None:
        self._path = directory / STORE_FILENAME
        self._lock = threading.Lock()
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt content store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            self._data.model_dump_json(indent=2),
            encoding="utf-8",
        )

    # ── Read operations ──────────────────────────────────────────

    def get_all(self) -> list[ContentItem]:
        """Return every stored item."""
        with self._lock:
            return list(self._data.items)

    def get(self, item_id: str) -> ContentItem | None:
        """Return an item by id, or None if not found."""
        with self._lock:
            for item in self._data.items:
                if item.id == item_id:
                    return item
        return None

    # ── Write operations ─────────────────────────────────────────

    def upsert(self, item: ContentItem) -> None:
        """Insert or replace an item by id."""
        with self._lock:
            self._data.items = [i for i in self._data.items if i.id != item.id]
            self._data.items.append(item)
            self._save()

    def delete(self, item_id: str) -> bool:
        """Remove an item by id.  Returns False if it was not stored."""
        with self._lock:
            remaining = [i for i in self._data.items if i.id != item_id]
            if len(remaining) == len(self._data.items):
                return False
            self._data.items = remaining
            self._save()
            return True
