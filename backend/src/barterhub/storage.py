"""
Storage interface for the barter engine, plus the in-memory store used by
tests and single-process deployments.

The engine never touches a database directly. It reads whole record types,
upserts single records, and commits multi-record changes (a settlement
touches a task, a member and an asset) as one atomic unit.
"""
import copy
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .errors import ConcurrentModification
from .models import RecordKind, RECORD_TYPES

# Partition key attribute per record type
ID_ATTRIBUTES = {
    RecordKind.MEMBER: 'memberId',
    RecordKind.ASSET: 'assetId',
    RecordKind.TASK: 'taskId',
    RecordKind.COUNTER: 'counterId',
}


@dataclass
class Write:
    """
    One record change inside an atomic commit.

    Args:
        record: Member, Asset or Task to put (or to delete)
        expected_status: If set, the stored record must currently have this
            status or the whole commit is refused
        expected_count: If set, the stored Counter must currently hold this
            count (0 also matches a counter that does not exist yet)
        delete: Remove the record instead of putting it
    """
    record: Any
    expected_status: Optional[str] = None
    expected_count: Optional[int] = None
    delete: bool = False

    @property
    def kind(self) -> RecordKind:
        return self.record.kind


class Store:
    """Persistence collaborator required by the engine."""

    def load_all(self, kind: RecordKind) -> List[Any]:
        raise NotImplementedError

    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        raise NotImplementedError

    def upsert(self, record: Any) -> None:
        raise NotImplementedError

    def delete(self, kind: RecordKind, record_id: str) -> None:
        raise NotImplementedError

    def atomic_commit(self, writes: Iterable[Write]) -> None:
        raise NotImplementedError


class InMemoryStore(Store):
    """
    Dict-backed store. Records are kept as serialized items, so every read
    hands out a fresh object and callers can never mutate stored state
    without going through upsert/atomic_commit.
    """

    def __init__(self):
        self._tables: Dict[RecordKind, Dict[str, Dict[str, Any]]] = {
            kind: {} for kind in RecordKind
        }
        self._lock = threading.Lock()

    def load_all(self, kind: RecordKind) -> List[Any]:
        record_type = RECORD_TYPES[kind]
        with self._lock:
            items = [copy.deepcopy(item) for item in self._tables[kind].values()]
        return [record_type.from_item(item) for item in items]

    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        with self._lock:
            item = self._tables[kind].get(record_id)
            item = copy.deepcopy(item) if item is not None else None
        if item is None:
            return None
        return RECORD_TYPES[kind].from_item(item)

    def upsert(self, record: Any) -> None:
        with self._lock:
            self._tables[record.kind][record.record_id] = record.to_item()

    def delete(self, kind: RecordKind, record_id: str) -> None:
        with self._lock:
            self._tables[kind].pop(record_id, None)

    def atomic_commit(self, writes: Iterable[Write]) -> None:
        writes = list(writes)
        with self._lock:
            # Check every guard before touching anything
            for write in writes:
                current = self._tables[write.kind].get(write.record.record_id)
                if write.expected_status is not None:
                    if current is None or current.get('status') != write.expected_status:
                        raise ConcurrentModification(
                            f"{write.kind.value} {write.record.record_id} is no longer "
                            f"in status '{write.expected_status}'"
                        )
                if write.expected_count is not None:
                    stored_count = current.get('count', 0) if current is not None else 0
                    if stored_count != write.expected_count:
                        raise ConcurrentModification(
                            f"{write.kind.value} {write.record.record_id} moved from "
                            f"{write.expected_count} to {stored_count}"
                        )

            for write in writes:
                table = self._tables[write.kind]
                if write.delete:
                    table.pop(write.record.record_id, None)
                else:
                    table[write.record.record_id] = write.record.to_item()
