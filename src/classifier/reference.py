"""
HTS Reference Document
======================

The classification prompt can be enriched with a static HTS reference text.
The document is optional: when it cannot be read, classification falls back
to the model's own knowledge instead of failing the request.

Every implementation of `ReferenceSource` honours the same contract: `load()`
returns the reference text (possibly empty) and never raises. A retrieval
based source (chunked, embedded, vector searched) would be one more subclass;
the handler and prompt builder only ever see the returned string.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from common.config import Settings

log = structlog.get_logger(__name__)


def _read_reference(path: Path) -> str | None:
    """Read the document as UTF-8, returning None (and logging) on failure."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, ValueError) as e:
        log.warning(
            "Could not read HTS document; proceeding without HTS context",
            path=str(path),
            error=str(e),
        )
        return None
    log.info("Loaded HTS document", chars=len(content), path=str(path))
    return content


class ReferenceSource(ABC):
    """Abstract source of reference text for the classification prompt."""

    @abstractmethod
    def load(self) -> str:
        """Return the reference text, or an empty string. Must not raise."""
        raise NotImplementedError


class FileReferenceSource(ReferenceSource):
    """Reads the reference document from disk on every call."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str:
        return _read_reference(self.path) or ""


class CachedFileReferenceSource(ReferenceSource):
    """
    Keeps the reference document in memory and re-reads it only when the
    file's modification time changes.

    One instance is meant to be shared by all requests of a process, so the
    cache is guarded by a lock. A failed read is not cached: the next call
    tries the disk again.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._content: str | None = None
        self._mtime_ns: int | None = None

    def load(self) -> str:
        with self._lock:
            try:
                mtime_ns = self.path.stat().st_mtime_ns
            except OSError:
                mtime_ns = None

            if (
                self._content is not None
                and mtime_ns is not None
                and mtime_ns == self._mtime_ns
            ):
                return self._content

            content = _read_reference(self.path)
            if content is None:
                self._content = None
                self._mtime_ns = None
                return ""

            self._content = content
            self._mtime_ns = mtime_ns
            return content

    def invalidate(self) -> None:
        """Drop the cached text so the next `load` reads the file again."""
        with self._lock:
            self._content = None
            self._mtime_ns = None


def build_reference_source(settings: Settings) -> ReferenceSource:
    """Return the reference source selected by ``HTS_DOCUMENT_CACHE``."""
    if settings.HTS_DOCUMENT_CACHE:
        return CachedFileReferenceSource(settings.HTS_DOCUMENT_PATH)
    return FileReferenceSource(settings.HTS_DOCUMENT_PATH)
