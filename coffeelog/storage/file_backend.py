"""
File-based Record Store for Coffee Log.

Implements the RecordStore protocol using local JSON files, one file per
owner. This is the default storage mechanism.

Structure:
- {data_dir}/{owner}.json: {"owner": str, "entries": {timestamp: item}}

A file that parses but has the wrong shape is read as empty. A file that
is not valid JSON raises StorageError and is never overwritten.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Any, List, Optional

from coffeelog.errors import ConflictError, NotFoundError, StorageError
from coffeelog.models import RecordKey
from coffeelog.updates import UpdateInstruction

logger = logging.getLogger(__name__)


class FileBackend:
    """
    Local file-based record store.

    Every read-modify-write runs under one lock, so updates to the same key
    from concurrent requests are applied one after another.
    """

    def __init__(self, data_dir: str):
        """
        Initialize FileBackend.

        Args:
            data_dir: Directory holding the per-owner JSON files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    @property
    def backend_type(self) -> str:
        return "file"

    def _owner_path(self, owner: str) -> Path:
        safe_owner = "".join(c for c in owner if c.isalnum() or c in ("-", "_"))
        if not safe_owner:
            raise StorageError(f"Invalid owner id: {owner!r}")
        return self.data_dir / f"{safe_owner}.json"

    def _load_entries(self, owner: str) -> Dict[str, Dict[str, Any]]:
        path = self._owner_path(owner)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read records for {owner}: {e}") from e

        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, dict):
            logger.warning(f"Malformed entries in {path}, treating as empty")
            return {}
        return entries

    def _save_entries(self, owner: str, entries: Dict[str, Dict[str, Any]]) -> None:
        path = self._owner_path(owner)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"owner": owner, "entries": entries}, f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f"Failed to write records for {owner}: {e}") from e

    # --- Record Operations ---

    def get_record(self, key: RecordKey) -> Optional[Dict[str, Any]]:
        owner, occurred_at = key
        with self._lock:
            return self._load_entries(owner).get(occurred_at)

    def put_record(self, item: Dict[str, Any]) -> None:
        owner, occurred_at = item["userId"], item["timestamp"]
        with self._lock:
            entries = self._load_entries(owner)
            if occurred_at in entries:
                raise ConflictError(f"Record already exists: {occurred_at}")
            entries[occurred_at] = item
            self._save_entries(owner, entries)

    def update_record(self, instruction: UpdateInstruction) -> Dict[str, Any]:
        owner, occurred_at = instruction.key
        with self._lock:
            entries = self._load_entries(owner)
            item = entries.get(occurred_at)
            if item is None:
                raise NotFoundError(f"No record at {owner}/{occurred_at}")
            item.update(instruction.assignments())
            self._save_entries(owner, entries)
            return item

    def query_records(self, owner: str, limit: int = 10) -> List[Dict[str, Any]]:
        with self._lock:
            entries = self._load_entries(owner)
        newest_first = sorted(entries, reverse=True)
        return [entries[ts] for ts in newest_first[:limit]]
