"""
SOLPRISM Commitment Store

Append-only, in-process history of commitments. A store is owned by a
single SolprismShield; nothing else appends to it.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from .trace import CommitmentResult


class CommitmentStore(ABC):
    """
    Abstract interface for commitment history.

    Implementations must be:
    - Append-only (entries are never removed or reordered)
    - Consistent (concurrent appends never drop an entry)
    - Snapshot-safe (returned lists are copies)
    """

    @abstractmethod
    def append(self, commitment: CommitmentResult) -> None:
        """Append a commitment to the history."""
        pass

    @abstractmethod
    def snapshot(self) -> List[CommitmentResult]:
        """Return a copy of the full history in commit order."""
        pass

    @abstractmethod
    def query(
        self,
        action_type: Optional[str] = None,
        since_ms: Optional[int] = None,
        until_ms: Optional[int] = None
    ) -> List[CommitmentResult]:
        """Query commitments by action type and commit time."""
        pass

    def __len__(self) -> int:
        return len(self.snapshot())


class InMemoryCommitmentStore(CommitmentStore):
    """
    In-memory commitment store.

    Not persistent across restarts; export ``snapshot()`` with
    ``commitments_to_list`` to keep a history.
    """

    def __init__(self):
        self._records: List[CommitmentResult] = []
        self._lock = threading.Lock()

    def append(self, commitment: CommitmentResult) -> None:
        with self._lock:
            self._records.append(commitment)

    def snapshot(self) -> List[CommitmentResult]:
        with self._lock:
            return self._records[:]

    def query(
        self,
        action_type: Optional[str] = None,
        since_ms: Optional[int] = None,
        until_ms: Optional[int] = None
    ) -> List[CommitmentResult]:
        records = self.snapshot()

        if action_type:
            records = [r for r in records if r.trace.action.type == action_type]
        if since_ms is not None:
            records = [r for r in records if r.timestamp >= since_ms]
        if until_ms is not None:
            records = [r for r in records if r.timestamp <= until_ms]

        return records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
