"""
Selective update construction for coffee records.

Turns a sparse Patch into a single atomic update instruction of SET
clauses, one per present field, and executes it against a RecordStore.

Rules:
- Presence is decided per field, never from truthiness. An empty location
  string is a real value.
- Clearing a rating is expressed by leaving it out of the patch: the
  instruction only ever sets fields.
- Everything is validated before the store is touched, so an invalid patch
  is never partially applied.
- Store failures surface as StorageError. There are no retries here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, TYPE_CHECKING

from coffeelog.errors import StorageError, ValidationError
from coffeelog.models import (
    MAX_RATING,
    MIN_RATING,
    MUTABLE_FIELDS,
    CoffeeRecord,
    Patch,
    RecordKey,
)

if TYPE_CHECKING:
    from coffeelog.storage.protocol import RecordStore

logger = logging.getLogger(__name__)

RATING_OUT_OF_RANGE = "rating out of range"
LOCATION_NOT_TEXT = "location must be text"
NO_FIELDS_TO_UPDATE = "no fields to update"


@dataclass(frozen=True)
class SetClause:
    """One `#name = :value` assignment of an update instruction."""
    attribute: str
    value: Any

    @property
    def name_placeholder(self) -> str:
        return f"#{self.attribute}"

    @property
    def value_placeholder(self) -> str:
        return f":{self.attribute}"


@dataclass
class UpdateInstruction:
    """All SET clauses for one record, applied together or not at all."""
    key: RecordKey
    clauses: List[SetClause] = field(default_factory=list)

    @property
    def expression(self) -> str:
        """Store-native update expression, e.g. 'SET #rating = :rating'."""
        parts = [f"{c.name_placeholder} = {c.value_placeholder}" for c in self.clauses]
        return "SET " + ", ".join(parts)

    def assignments(self) -> Dict[str, Any]:
        """Attribute -> value mapping that each store applies."""
        return {c.attribute: c.value for c in self.clauses}


def validate_rating(value: Any) -> int:
    """
    Check a raw rating value.

    Booleans, floats, strings and None are rejected rather than coerced.

    Raises:
        ValidationError: If the value is not an integer in 1..5
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(RATING_OUT_OF_RANGE)
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(RATING_OUT_OF_RANGE)
    return value


def validate_location(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(LOCATION_NOT_TEXT)
    return value


_VALIDATORS = {
    "rating": validate_rating,
    "location": validate_location,
}


def build_update_instruction(key: RecordKey, patch: Patch) -> UpdateInstruction:
    """
    Validate a patch and build the update instruction for it.

    Raises:
        ValidationError: On an invalid field value or a patch with no fields
    """
    instruction = UpdateInstruction(key=key)
    for name in MUTABLE_FIELDS:
        if not patch.has(name):
            continue
        value = _VALIDATORS[name](patch.get(name))
        instruction.clauses.append(SetClause(attribute=name, value=value))

    if not instruction.clauses:
        raise ValidationError(NO_FIELDS_TO_UPDATE)
    return instruction


def apply_patch(store: "RecordStore", key: RecordKey, patch: Patch) -> CoffeeRecord:
    """
    Apply a sparse patch to one record and return the updated record.

    Args:
        store: Record store to update
        key: (owner, occurred_at) of the record
        patch: Fields to set

    Raises:
        ValidationError: If the patch is invalid; the store is not touched
        StorageError: If the store fails, including when the key does not exist
    """
    instruction = build_update_instruction(key, patch)
    logger.debug(f"Applying {instruction.expression} to {key.owner}/{key.occurred_at}")

    try:
        item = store.update_record(instruction)
    except StorageError:
        raise
    except Exception as e:
        logger.error(f"Failed to update record {key.occurred_at}: {e}")
        raise StorageError(f"Failed to update record {key.occurred_at}: {e}") from e

    return CoffeeRecord.from_item(item)
