"""Persisted analysis history: one JSON key holding the whole list, rewritten on each append."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config import HISTORY_KEY, HISTORY_PATH
from errors import StorageError
from schemas.history_entry import HistoryEntry
from utils.helpers import timestamp_id
from utils.logger import get_logger

logger = get_logger(__name__)


class HistoryStore:
    """
    Insertion-ordered list of HistoryEntry mirrored to a JSON file.
    The file holds a single object; this store owns the entry under `key`.
    No incremental updates, no deletion except clear().
    """

    def __init__(self, path: Optional[Path] = None, key: str = HISTORY_KEY) -> None:
        self._path = Path(path) if path is not None else HISTORY_PATH
        self._key = key
        self._entries: List[HistoryEntry] = []
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def entries(self) -> List[HistoryEntry]:
        """Copy of the entries in insertion order."""
        if not self._loaded:
            self.load()
        return list(self._entries)

    def __len__(self) -> int:
        return len(self.entries)

    def _read_document(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading history from %s: %s", self._path, e)
            return {}
        if not isinstance(doc, dict):
            logger.error("History file %s is not a JSON object; ignoring", self._path)
            return {}
        return doc

    def _write_document(self, doc: Dict[str, Any]) -> None:
        """Atomically replace the file with doc. Raises StorageError on any OS failure."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        except OSError as e:
            logger.error("Could not write history to %s: %s", self._path, e)
            raise StorageError(f"Could not save history: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except BaseException as e:
            if os.path.exists(tmp):
                os.remove(tmp)
            if isinstance(e, OSError):
                logger.error("Could not write history to %s: %s", self._path, e)
                raise StorageError(f"Could not save history: {e}") from e
            raise

    def load(self) -> List[HistoryEntry]:
        """
        Read the persisted list. Missing file or key gives an empty history;
        a corrupt file is logged and treated as empty; invalid entries are skipped.
        """
        raw = self._read_document().get(self._key) or []
        if not isinstance(raw, list):
            logger.error("History key %s is not a list; ignoring", self._key)
            raw = []
        entries: List[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid history entry: %s", e)
        self._entries = entries
        self._loaded = True
        logger.info("Loaded %s history entries from %s", len(entries), self._path)
        return list(entries)

    def append(self, entry: HistoryEntry) -> None:
        """Add entry at the end and rewrite the whole persisted list."""
        if not self._loaded:
            self.load()
        entries = self._entries + [entry]
        doc = self._read_document()
        doc[self._key] = [e.to_record() for e in entries]
        self._write_document(doc)
        self._entries = entries
        logger.info("Saved history entry id=%s (total %s)", entry.id, len(self._entries))

    def clear(self) -> None:
        """Remove every entry; the file is deleted when it holds nothing else."""
        doc = self._read_document()
        doc.pop(self._key, None)
        if doc:
            self._write_document(doc)
        elif self._path.exists():
            try:
                self._path.unlink()
            except OSError as e:
                logger.error("Could not remove history file %s: %s", self._path, e)
                raise StorageError(f"Could not clear history: {e}") from e
        self._entries = []
        self._loaded = True
        logger.info("Cleared history at %s", self._path)

    def next_id(self) -> int:
        """Creation-timestamp id strictly greater than any stored id."""
        ids = [e.id for e in self.entries]
        return timestamp_id(max(ids) if ids else None)
