"""
Data model for Coffee Log.

A CoffeeRecord is one coffee-consumption event, addressed by the two-part
key (owner, occurred_at). The wire/store representation uses the keys
userId, timestamp, amount, unit, rating, location; optional fields that
are absent are omitted from the item entirely.

A Patch is a sparse edit of a record's mutable fields. Presence of a field
(not its truthiness) is what asks for it to be updated.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional

UNITS = ("cups", "ml", "oz", "fl_oz")

# Fields a patch may touch. Identity (owner, occurred_at) is never mutable.
MUTABLE_FIELDS = ("rating", "location")

MIN_RATING = 1
MAX_RATING = 5


class RecordKey(NamedTuple):
    """Two-part store key: partition by owner, sort by occurrence time."""
    owner: str
    occurred_at: str


@dataclass
class CoffeeRecord:
    """One persisted coffee-consumption event."""
    owner: str
    occurred_at: str
    amount: float
    unit: str
    rating: Optional[int] = None
    location: Optional[str] = None

    @property
    def id(self) -> str:
        """The externally visible record id is the occurrence timestamp."""
        return self.occurred_at

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.owner, self.occurred_at)

    def to_item(self) -> Dict[str, Any]:
        """Convert to the wire/store representation, omitting absent fields."""
        item: Dict[str, Any] = {
            "userId": self.owner,
            "timestamp": self.occurred_at,
            "amount": self.amount,
            "unit": self.unit,
        }
        if self.rating is not None:
            item["rating"] = self.rating
        if self.location is not None:
            item["location"] = self.location
        return item

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "CoffeeRecord":
        """
        Build a record from a wire/store item.

        Raises:
            KeyError: If an identity or quantity key is missing
        """
        return cls(
            owner=item["userId"],
            occurred_at=item["timestamp"],
            amount=item["amount"],
            unit=item["unit"],
            rating=item.get("rating"),
            location=item.get("location"),
        )


class Patch:
    """
    Sparse edit intent for a record's mutable fields.

    Only fields passed explicitly are present:

        Patch(location="Office")           # rating absent, left untouched
        Patch(location="")                 # clears the location text
        Patch(rating=4, location="Home")   # both present

    Values are stored raw; validation happens when the patch is applied.
    """

    def __init__(self, **fields: Any):
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise TypeError(f"Not a mutable field: {', '.join(sorted(unknown))}")
        self._fields: Dict[str, Any] = {
            name: fields[name] for name in MUTABLE_FIELDS if name in fields
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Patch":
        """Read a patch from a wire payload. Keys other than mutable fields are ignored."""
        return cls(**{name: payload[name] for name in MUTABLE_FIELDS if name in payload})

    def has(self, name: str) -> bool:
        return name in self._fields

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    @property
    def present_fields(self) -> List[str]:
        return list(self._fields)

    def to_payload(self) -> Dict[str, Any]:
        """Wire payload containing only the present fields."""
        return dict(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Patch):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"Patch({inner})"
