"""
termbook Term Store

Thread-safe owner of the term table and its persisted file.

Architecture contract:
- One reader/writer lock guards the table: define() shared, mutations exclusive
- Keys are normalized (lower-cased) on every entry point
- Every successful mutation is written to disk before the lock is released
- A failed save rolls the mutation back, so memory never diverges from disk
- Saves are atomic: temp file + fsync + os.replace
- load() reports its outcome instead of raising; the host decides to abort or start empty

Property of Uncompromising Sensors LLC.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

from sdk.logging import getLogger

from . import codec
from .errors import DecodeError, EncodeError, NotFoundError, StorageError
from .rwlock import ReadWriteLock
from .termTable import TermTable, normalizeTerm


def _checkEncodable(*texts: str):
    """Reject text the codec could not write (lone surrogates from undecodable input)."""
    for text in texts:
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(f"Text is not valid UTF-8: {text!r}") from e


class LoadStatus(str, Enum):
    """Outcome of TermStore.load()"""
    LOADED = "loaded"      # File read and decoded
    MISSING = "missing"    # No file yet, empty table is the valid initial state
    FAILED = "failed"      # File exists but could not be read or decoded


@dataclass
class LoadResult:
    status: LoadStatus
    count: int = 0
    error: Optional[Exception] = None
    collisions: List[str] = field(default_factory=list)  # Terms whose case variants were merged

    @property
    def ok(self) -> bool:
        return self.status != LoadStatus.FAILED


class TermStore:
    """
    Concurrent term -> definition store with durable persistence.

    The table is private; callers only ever see copies or single values.
    """

    def __init__(self, filePath):
        """
        Args:
            filePath: Path of the persisted dictionary file (need not exist)
        """
        self.filePath = Path(filePath)
        self.log = getLogger()
        self._lock = ReadWriteLock()
        self._table = TermTable()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> LoadResult:
        """
        Replace the table with the contents of the persisted file.

        Never raises for a missing, unreadable or corrupt file; the outcome is
        in the returned LoadResult and the table is left empty on failure.
        """
        with self._lock.writeLocked():
            self._table = TermTable()

            try:
                data = self.filePath.read_bytes()
            except FileNotFoundError:
                self.log.info(f"[TermStore] No dictionary file at {self.filePath}, starting empty")
                return LoadResult(LoadStatus.MISSING)
            except OSError as e:
                self.log.error(f"[TermStore] Failed to read {self.filePath}: {e}")
                return LoadResult(LoadStatus.FAILED, error=StorageError(str(e), self.filePath))

            try:
                entries = codec.decode(data)
            except DecodeError as e:
                self.log.error(f"[TermStore] Failed to decode {self.filePath}: {e}")
                return LoadResult(LoadStatus.FAILED, error=e)

            self._table = TermTable(entries)
            for term in self._table.collisions:
                self.log.warning(f"[TermStore] Keys differing only by case collapsed into '{term}', "
                                 f"kept {self._table.lookup(term)!r}")

            self.log.info(f"[TermStore] Loaded {len(self._table)} terms from {self.filePath}")
            return LoadResult(LoadStatus.LOADED, count=len(self._table),
                              collisions=list(self._table.collisions))

    def save(self):
        """Write the whole table to disk."""
        with self._lock.writeLocked():
            self._save()

    def _save(self):
        """
        Atomic write of the full table. Caller holds the write lock.

        Raises:
            EncodeError: table content cannot be encoded (nothing written)
            StorageError: file could not be written (previous file kept)
        """
        tmpPath = self.filePath.with_name(self.filePath.name + '.tmp')

        try:
            data = codec.encode(self._table.snapshot())
            self.filePath.parent.mkdir(parents=True, exist_ok=True)
            with open(tmpPath, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmpPath, self.filePath)
        except OSError as e:
            try:
                tmpPath.unlink()
            except OSError:
                pass
            raise StorageError(f"Cannot write {self.filePath}: {e}", self.filePath) from e

        self.log.debug(f"[TermStore] Saved {len(self._table)} terms", bytes=len(data))

    def quarantine(self) -> Optional[Path]:
        """
        Move the persisted file aside (after a failed load), so the next save
        does not overwrite data that might still be recoverable.

        Returns:
            New path of the file, or None if there was no file
        """
        with self._lock.writeLocked():
            if not self.filePath.exists():
                return None

            stamp = datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%S.%fZ')
            target = self.filePath.with_name(f"{self.filePath.name}.corrupt-{stamp}")
            suffix = 1
            while target.exists():
                target = self.filePath.with_name(f"{self.filePath.name}.corrupt-{stamp}-{suffix}")
                suffix += 1

            try:
                os.replace(self.filePath, target)
            except OSError as e:
                raise StorageError(f"Cannot move {self.filePath} aside: {e}", self.filePath) from e

            self.log.warning(f"[TermStore] Moved unreadable dictionary to {target}")
            return target

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def define(self, term: str) -> str:
        """
        Definition of a term, case-insensitively.

        Raises:
            NotFoundError: term is not defined
        """
        key = normalizeTerm(term)
        with self._lock.readLocked():
            definition = self._table.lookup(key)

        if definition is None:
            raise NotFoundError(key)
        return definition

    def addDefine(self, term: str, definition: str):
        """
        Define a new term and persist the table.

        Raises:
            ValueError: definition is empty
            AlreadyExistsError: term is already defined (table unchanged)
            StorageError: save failed (table rolled back)
            EncodeError: term or definition cannot be stored as UTF-8 (table unchanged)
        """
        if not definition:
            raise ValueError("Definition must not be empty")
        _checkEncodable(term, definition)

        key = normalizeTerm(term)
        with self._lock.writeLocked():
            self._table.insert(key, definition)
            try:
                self._save()
            except (StorageError, EncodeError):
                self._table.erase(key)
                self.log.error(f"[TermStore] Save failed, add of {key!r} rolled back")
                raise

        self.log.info("[TermStore] Added term", term=key)

    def removeDefine(self, term: str) -> str:
        """
        Remove a term and persist the table.

        Returns:
            The definition the term had

        Raises:
            NotFoundError: term is not defined
            StorageError: save failed (term restored)
            EncodeError: table could not be encoded (term restored)
        """
        key = normalizeTerm(term)
        with self._lock.writeLocked():
            definition = self._table.erase(key)
            try:
                self._save()
            except (StorageError, EncodeError):
                self._table.insert(key, definition)
                self.log.error(f"[TermStore] Save failed, removal of {key!r} rolled back")
                raise

        self.log.info("[TermStore] Removed term", term=key)
        return definition

    def terms(self) -> List[str]:
        """Sorted list of defined terms."""
        with self._lock.readLocked():
            return sorted(self._table)

    def __len__(self) -> int:
        with self._lock.readLocked():
            return len(self._table)
