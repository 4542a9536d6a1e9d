"""
Append-only entry creation and the recent-entries query.

Records are created once and never re-created: an occupied key is a
conflict, not an overwrite.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, TYPE_CHECKING

from coffeelog.errors import ConflictError, StorageError, ValidationError
from coffeelog.models import UNITS, CoffeeRecord
from coffeelog.updates import validate_location, validate_rating

if TYPE_CHECKING:
    from coffeelog.storage.protocol import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


def now_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_new_record(owner: str, payload: Mapping[str, Any],
                     timestamp: Optional[str] = None) -> CoffeeRecord:
    """
    Validate a create payload and build the record to insert.

    The owner is always the server's fixed owner; any userId in the payload
    is ignored. A missing timestamp is filled with the current time.

    Raises:
        ValidationError: On a bad amount, unit, rating or location
    """
    amount = payload.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        raise ValidationError("amount must be a positive number")

    unit = payload.get("unit")
    if unit not in UNITS:
        raise ValidationError(f"unit must be one of {', '.join(UNITS)}")

    occurred_at = payload.get("timestamp") or timestamp or now_timestamp()
    if not isinstance(occurred_at, str):
        raise ValidationError("timestamp must be an ISO-8601 string")

    record = CoffeeRecord(owner=owner, occurred_at=occurred_at, amount=amount, unit=unit)
    if payload.get("rating") is not None:
        record.rating = validate_rating(payload["rating"])
    if payload.get("location"):
        record.location = validate_location(payload["location"])
    return record


def add_entry(store: "RecordStore", record: CoffeeRecord) -> CoffeeRecord:
    """
    Insert a new record.

    Raises:
        ConflictError: If a record already exists at the same key
        StorageError: If the store fails
    """
    try:
        store.put_record(record.to_item())
    except (ConflictError, StorageError):
        raise
    except Exception as e:
        logger.error(f"Failed to add record {record.occurred_at}: {e}")
        raise StorageError(f"Failed to add record {record.occurred_at}: {e}") from e
    logger.info(f"Added {record.amount} {record.unit} at {record.occurred_at}")
    return record


def recent_entries(store: "RecordStore", owner: str,
                   limit: int = DEFAULT_RECENT_LIMIT) -> List[CoffeeRecord]:
    """Return the owner's last `limit` records, newest first."""
    try:
        items = store.query_records(owner, limit=limit)
    except StorageError:
        raise
    except Exception as e:
        logger.error(f"Failed to query records for {owner}: {e}")
        raise StorageError(f"Failed to query records: {e}") from e
    return [CoffeeRecord.from_item(item) for item in items]
