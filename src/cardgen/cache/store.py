"""JSON-file key/value store — one document per artifact category."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from cardgen.errors.exceptions import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)


class FileCache:
    """Key → artifact map mirrored to a single JSON object on disk.

    The file is loaded once (explicitly via ``load()`` or lazily on first
    access). A missing, unreadable or corrupt file is treated as an empty
    cache. Every ``put`` rewrites the whole document before returning.
    """

    def __init__(self, path: Path | str, name: str = "") -> None:
        self._path = Path(path)
        self._name = name or self._path.stem
        self._data: dict[str, Any] = {}
        self._loaded = False
        self.hits = 0
        self.misses = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        """(Re)load the document from disk, degrading to empty on failure."""
        self._data = {}
        self._loaded = True

        if not self._path.exists():
            logger.info("No existing %s file at %s, starting fresh", self._name, self._path)
            return

        try:
            raw = self._path.read_text(encoding="utf-8")
            parsed = json.loads(raw) if raw.strip() else {}
            if not isinstance(parsed, dict):
                raise CacheReadError(
                    f"Expected JSON object, got {type(parsed).__name__}",
                    path=self._path,
                )
        except CacheReadError as e:
            logger.warning("Ignoring %s cache at %s: %s", self._name, self._path, e.message)
            return
        except (OSError, ValueError) as e:
            err = CacheReadError(str(e), path=self._path, original=e)
            logger.warning("Ignoring %s cache at %s: %s", self._name, self._path, err.message)
            return

        self._data = parsed
        logger.info("Loaded %d %s entries", len(self._data), self._name)

    def get(self, key: str) -> Any | None:
        self._ensure_loaded()
        value = self._data.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: str, artifact: Any) -> None:
        """Insert or overwrite ``key`` and persist the full map.

        Raises CacheWriteError if the document could not be written; the
        in-memory value is kept either way.
        """
        self._ensure_loaded()
        self._data[key] = artifact
        self.save()
        logger.debug("Saved %s for key %s", self._name, key)

    def save(self) -> None:
        """Write the in-memory map to disk atomically."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise CacheWriteError(
                f"Failed to write {self._name} cache: {e}", path=self._path, original=e
            ) from e

    def clear(self) -> None:
        self._data = {}
        self._loaded = True
        self.save()

    def keys(self) -> list[str]:
        self._ensure_loaded()
        return list(self._data)

    def items(self) -> list[tuple[str, Any]]:
        self._ensure_loaded()
        return list(self._data.items())

    def __contains__(self, key: object) -> bool:
        self._ensure_loaded()
        return key in self._data

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()
