"""
Signal Record Store (Imperative Shell)

Holds the ordered in-memory collection of ``SignalRecord`` objects and keeps
the backing text file in sync with it.  Every mutating operation rewrites
the whole file (truncate, then write); there is no incremental append,
locking, or atomic rename.

Ordering: records appear in load order followed by registration order.
Deletion preserves the relative order of the remaining records.

Package Location: src/trafficreg/data/store.py
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional

from ..records.codec import decode_lines, encode_records
from ..records.models import SignalRecord, TrafficRegError

log = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path("traffic_signals.txt")


class DuplicateIdError(TrafficRegError):
    """Registration attempted with an id already present in the store."""

    def __init__(self, signal_id: int):
        super().__init__(f"Signal ID {signal_id} already exists")
        self.signal_id = signal_id


class NotFoundError(TrafficRegError):
    """Lookup, update, or delete against an id that is not in the store."""

    def __init__(self, signal_id: int):
        super().__init__(f"Signal ID {signal_id} not found")
        self.signal_id = signal_id


class SignalStore:
    """CRUD store for traffic signal records backed by a flat text file.

    Responsibilities:
        - Id uniqueness on registration (not on load).
        - In-place density / timing updates.
        - Full-file rewrite after every create, update, and delete.
        - Tolerant loading: missing file is empty, bad lines are dropped.
        - A failed write (``OSError``) undoes the in-memory change before
          the error propagates, so memory never runs ahead of the file.

    Args:
        path: Backing file location.  Nothing is read until ``load()``.
    """

    def __init__(self, path: Path = DEFAULT_DATA_FILE) -> None:
        self.path = Path(path)
        self._records: List[SignalRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SignalRecord]:
        return iter(list(self._records))

    def __contains__(self, signal_id: object) -> bool:
        return any(r.id == signal_id for r in self._records)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _index_of(self, signal_id: int) -> Optional[int]:
        for i, record in enumerate(self._records):
            if record.id == signal_id:
                return i
        return None

    def _require(self, signal_id: int) -> SignalRecord:
        idx = self._index_of(signal_id)
        if idx is None:
            raise NotFoundError(signal_id)
        return self._records[idx]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, signal_id: int) -> Optional[SignalRecord]:
        """Return the record with ``signal_id``, or ``None``.

        Args:
            signal_id: Identifier to look up.

        Returns:
            The stored record (live object), or ``None`` when absent.
        """
        idx = self._index_of(signal_id)
        return None if idx is None else self._records[idx]

    def list(self) -> List[SignalRecord]:
        """Return the ordered records.  The returned list is a copy."""
        return list(self._records)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register(
        self,
        signal_id: int,
        location: str,
        density: int,
        timing: int,
    ) -> SignalRecord:
        """Append a new record and persist the collection.

        Args:
            signal_id: New, unique identifier.
            location:  Free-text location.
            density:   Initial congestion level (%).
            timing:    Green-light duration (s).

        Returns:
            The newly stored record.

        Raises:
            DuplicateIdError: ``signal_id`` is already registered.  The store
                and the backing file are left untouched.
        """
        if signal_id in self:
            raise DuplicateIdError(signal_id)
        record = SignalRecord(
            id=signal_id, location=location, density=density, timing=timing
        )
        self._records.append(record)
        try:
            self.persist()
        except OSError:
            self._records.pop()
            raise
        log.info(
            "Registered signal",
            extra={"signal_id": signal_id, "congested": record.congested},
        )
        return record

    def update_density(self, signal_id: int, density: int) -> SignalRecord:
        """Set a record's density (congestion follows) and persist.

        Raises:
            NotFoundError: No record has ``signal_id``.
        """
        record = self._require(signal_id)
        previous, record.density = record.density, density
        try:
            self.persist()
        except OSError:
            record.density = previous
            raise
        log.info(
            "Updated density",
            extra={
                "signal_id": signal_id,
                "density": density,
                "congested": record.congested,
            },
        )
        return record

    def update_timing(self, signal_id: int, timing: int) -> SignalRecord:
        """Set a record's green-light timing and persist.

        Raises:
            NotFoundError: No record has ``signal_id``.
        """
        record = self._require(signal_id)
        previous, record.timing = record.timing, timing
        try:
            self.persist()
        except OSError:
            record.timing = previous
            raise
        log.info(
            "Updated timing",
            extra={"signal_id": signal_id, "timing": timing},
        )
        return record

    def delete(self, signal_id: int) -> SignalRecord:
        """Remove the record with ``signal_id`` and persist.

        Returns:
            The removed record.

        Raises:
            NotFoundError: No record has ``signal_id``.
        """
        idx = self._index_of(signal_id)
        if idx is None:
            raise NotFoundError(signal_id)
        record = self._records.pop(idx)
        try:
            self.persist()
        except OSError:
            self._records.insert(idx, record)
            raise
        log.info("Deleted signal", extra={"signal_id": signal_id})
        return record

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def persist(self) -> None:
        """Rewrite the backing file with every record, one per line."""
        with self.path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(encode_records(self._records))
        log.debug(
            "Persisted store",
            extra={"path": str(self.path), "records": len(self._records)},
        )

    def load(self) -> int:
        """Replace the in-memory collection with the backing file contents.

        A missing file yields an empty store.  Lines that do not decode to a
        full record are dropped and only logged at DEBUG level.  Duplicate
        ids in the file are accepted as-is.

        Returns:
            Number of records loaded.
        """
        self._records = []
        if not self.path.exists():
            log.info(
                "Backing file not found; starting empty",
                extra={"path": str(self.path)},
            )
            return 0

        with self.path.open(
            "r", encoding="utf-8", errors="surrogateescape", newline=""
        ) as fh:
            records, errors = decode_lines(fh)

        for err in errors:
            log.debug(
                "Skipping malformed line %d: %s",
                err.line_number,
                err,
                extra={"path": str(self.path), "line_number": err.line_number},
            )
        self._records = records
        log.info(
            "Loaded store",
            extra={
                "path": str(self.path),
                "loaded": len(records),
                "skipped": len(errors),
            },
        )
        return len(records)


# ---------------------------------------------------------------------------
# Module-level convenience wrapper
# ---------------------------------------------------------------------------

def open_store(path: Path = DEFAULT_DATA_FILE) -> SignalStore:
    """Create a ``SignalStore`` for ``path`` and load it.

    Args:
        path: Backing file location.

    Returns:
        Loaded store.
    """
    store = SignalStore(path)
    store.load()
    return store
