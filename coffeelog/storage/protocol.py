"""
RecordStore Protocol Definition.

This module defines the interface that all record stores must implement.
MemoryBackend (tests), FileBackend (local JSON files) and SupabaseBackend
(cloud) conform to this protocol.

Items passed across this interface use the wire representation of a record
(userId, timestamp, amount, unit, rating?, location?).
"""

from typing import Protocol, Dict, Any, List, Optional, runtime_checkable

from coffeelog.models import RecordKey
from coffeelog.updates import UpdateInstruction


@runtime_checkable
class RecordStore(Protocol):
    """
    Key-value store of coffee records addressed by (owner, occurred_at).
    """

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier ('memory', 'file' or 'supabase')."""
        ...

    def get_record(self, key: RecordKey) -> Optional[Dict[str, Any]]:
        """
        Look up one record.

        Args:
            key: (owner, occurred_at) of the record

        Returns:
            The record item, or None if no record exists at that key
        """
        ...

    def put_record(self, item: Dict[str, Any]) -> None:
        """
        Insert a new record.

        Args:
            item: Full record item including userId and timestamp

        Raises:
            ConflictError: If a record already exists at the item's key
        """
        ...

    def update_record(self, instruction: UpdateInstruction) -> Dict[str, Any]:
        """
        Apply all SET clauses of an instruction to an existing record.

        The clauses are applied together or not at all.

        Args:
            instruction: Validated update instruction

        Returns:
            The record item after the update

        Raises:
            NotFoundError: If no record exists at the instruction's key
        """
        ...

    def query_records(self, owner: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        List an owner's records, newest first.

        Args:
            owner: Partition key
            limit: Maximum number of records to return
        """
        ...
