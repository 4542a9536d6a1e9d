"""
In-memory record store.

Used by tests and by the `memory` storage backend setting. Contents are
lost when the process exits.
"""

import copy
import threading
from typing import Dict, Any, List, Optional

from coffeelog.errors import ConflictError, NotFoundError
from coffeelog.models import RecordKey
from coffeelog.updates import UpdateInstruction


class MemoryBackend:
    """Dictionary-backed store keyed by (owner, occurred_at)."""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None):
        self._items: Dict[RecordKey, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        for item in items or []:
            self.put_record(item)

    @property
    def backend_type(self) -> str:
        return "memory"

    def get_record(self, key: RecordKey) -> Optional[Dict[str, Any]]:
        with self._lock:
            item = self._items.get(RecordKey(*key))
            return copy.deepcopy(item) if item is not None else None

    def put_record(self, item: Dict[str, Any]) -> None:
        key = RecordKey(item["userId"], item["timestamp"])
        with self._lock:
            if key in self._items:
                raise ConflictError(f"Record already exists: {key.occurred_at}")
            self._items[key] = copy.deepcopy(item)

    def update_record(self, instruction: UpdateInstruction) -> Dict[str, Any]:
        key = RecordKey(*instruction.key)
        with self._lock:
            item = self._items.get(key)
            if item is None:
                raise NotFoundError(f"No record at {key.owner}/{key.occurred_at}")
            item.update(instruction.assignments())
            return copy.deepcopy(item)

    def query_records(self, owner: str, limit: int = 10) -> List[Dict[str, Any]]:
        with self._lock:
            items = [item for key, item in self._items.items() if key.owner == owner]
        items.sort(key=lambda item: item["timestamp"], reverse=True)
        return copy.deepcopy(items[:limit])
