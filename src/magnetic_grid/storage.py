"""Persistence for committed layouts.

Layouts are stored as the flat record list produced by
``LayoutSerializer`` under a string key. Repositories raise
``StorageError`` on failure; callers decide whether that is fatal.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from magnetic_grid.config import MagneticGridSettings, get_settings
from magnetic_grid.exceptions import LayoutDefinitionError, StorageError
from magnetic_grid.grid.models import Layout
from magnetic_grid.layout.serializer import LayoutSerializer

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LayoutRepository(ABC):
    """Key-value store for layouts."""

    @abstractmethod
    def load(self, key: str) -> Layout | None:
        """Return the stored layout, or None when nothing is stored."""

    @abstractmethod
    def save(self, key: str, layout: Layout) -> None:
        """Persist ``layout`` under ``key``, replacing any previous value."""

    @abstractmethod
    def has(self, key: str) -> bool: ...

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove the stored layout; a missing key is not an error."""


class InMemoryLayoutRepository(LayoutRepository):
    """Repository held in process memory. Stores serialized records so a
    load never hands back objects shared with the caller."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> Layout | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return LayoutSerializer.from_json(raw)

    def save(self, key: str, layout: Layout) -> None:
        self._data[key] = LayoutSerializer.to_json(layout, indent=None)

    def has(self, key: str) -> bool:
        return key in self._data

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileLayoutRepository(LayoutRepository):
    """One JSON file per key inside ``directory``.

    Usage:
        repo = JsonFileLayoutRepository("~/.magnetic-grid")
        repo.save("contact_form", layout)
        layout = repo.load("contact_form")
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    @classmethod
    def from_settings(cls, settings: MagneticGridSettings | None = None) -> JsonFileLayoutRepository:
        """Repository rooted at the configured storage directory.

        Raises:
            ConfigurationError: No storage directory is configured.
        """
        settings = settings or get_settings()
        return cls(settings.require_storage())

    def path_for(self, key: str) -> Path:
        if not key:
            raise StorageError(key, "key must not be empty")
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def load(self, key: str) -> Layout | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(key, f"cannot read {path}: {e}") from e
        try:
            return LayoutSerializer.from_json(text)
        except LayoutDefinitionError as e:
            logger.warning("Corrupt layout file, ignoring: %s", path)
            raise StorageError(key, f"corrupt layout in {path}: {e}") from e

    def save(self, key: str, layout: Layout) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(LayoutSerializer.to_json(layout), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StorageError(key, f"cannot write {path}: {e}") from e
        logger.debug("Saved %d field(s) to %s", len(layout), path)

    def has(self, key: str) -> bool:
        return self.path_for(key).exists()

    def clear(self, key: str) -> None:
        path = self.path_for(key)
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            raise StorageError(key, f"cannot remove {path}: {e}") from e
