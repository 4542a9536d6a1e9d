"""
Supabase Record Store for Coffee Log.

Implements the RecordStore protocol on a Supabase (PostgreSQL) table with
the composite primary key (user_id, timestamp):

    create table coffee_intake (
        user_id   text not null,
        timestamp text not null,
        amount    numeric not null,
        unit      text not null,
        rating    smallint check (rating between 1 and 5),
        location  text,
        primary key (user_id, timestamp)
    );

Requires: pip install supabase
"""

import logging
import os
from typing import Dict, Any, List, Optional

from supabase import create_client, Client

from coffeelog.errors import ConflictError, NotFoundError
from coffeelog.models import RecordKey
from coffeelog.updates import UpdateInstruction

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "coffee_intake"

# Column name -> wire item key
_COLUMN_TO_ITEM = {
    "user_id": "userId",
    "timestamp": "timestamp",
    "amount": "amount",
    "unit": "unit",
    "rating": "rating",
    "location": "location",
}
_ITEM_TO_COLUMN = {v: k for k, v in _COLUMN_TO_ITEM.items()}


def _row_to_item(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a table row to a wire item, dropping NULL optional columns."""
    return {
        item_key: row[column]
        for column, item_key in _COLUMN_TO_ITEM.items()
        if row.get(column) is not None
    }


def _item_to_row(item: Dict[str, Any]) -> Dict[str, Any]:
    return {_ITEM_TO_COLUMN[k]: v for k, v in item.items() if k in _ITEM_TO_COLUMN}


class SupabaseBackend:
    """
    Cloud-based record store using Supabase.

    Updates are a single PostgREST PATCH filtered on both key columns, so all
    SET clauses of an instruction land in one statement.
    """

    def __init__(
        self,
        table_name: str = DEFAULT_TABLE,
        client: Optional[Client] = None,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None
    ):
        """
        Initialize SupabaseBackend.

        Args:
            table_name: Table holding the records
            client: Optional pre-configured Supabase client
            supabase_url: Supabase project URL (or use SUPABASE_URL env)
            supabase_key: Supabase key (or use SUPABASE_KEY env)
        """
        self._table_name = table_name

        if client:
            self._client = client
        else:
            url = supabase_url or os.environ.get("SUPABASE_URL")
            key = supabase_key or os.environ.get("SUPABASE_KEY")

            if not url or not key:
                raise ValueError(
                    "Supabase URL and key required. "
                    "Set SUPABASE_URL and SUPABASE_KEY environment variables."
                )

            self._client = create_client(url, key)

    @property
    def backend_type(self) -> str:
        return "supabase"

    def _table(self):
        return self._client.table(self._table_name)

    # --- Record Operations ---

    def get_record(self, key: RecordKey) -> Optional[Dict[str, Any]]:
        owner, occurred_at = key
        response = self._table()\
            .select("*")\
            .eq("user_id", owner)\
            .eq("timestamp", occurred_at)\
            .execute()

        rows = response.data or []
        return _row_to_item(rows[0]) if rows else None

    def put_record(self, item: Dict[str, Any]) -> None:
        key = RecordKey(item["userId"], item["timestamp"])
        if self.get_record(key) is not None:
            raise ConflictError(f"Record already exists: {key.occurred_at}")

        try:
            self._table().insert(_item_to_row(item)).execute()
        except Exception as e:
            logger.error(f"Failed to insert record {key.occurred_at}: {e}")
            raise

    def update_record(self, instruction: UpdateInstruction) -> Dict[str, Any]:
        owner, occurred_at = instruction.key
        try:
            response = self._table()\
                .update(_item_to_row(instruction.assignments()))\
                .eq("user_id", owner)\
                .eq("timestamp", occurred_at)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to update record {occurred_at}: {e}")
            raise

        rows = response.data or []
        if not rows:
            raise NotFoundError(f"No record at {owner}/{occurred_at}")
        return _row_to_item(rows[0])

    def query_records(self, owner: str, limit: int = 10) -> List[Dict[str, Any]]:
        response = self._table()\
            .select("*")\
            .eq("user_id", owner)\
            .order("timestamp", desc=True)\
            .limit(limit)\
            .execute()

        return [_row_to_item(row) for row in response.data or []]
