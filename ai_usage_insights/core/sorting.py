"""
Record ordering.

Sorts usage records by one field in either direction. Each sortable field
is mapped to a typed accessor producing a ``SortValue`` so that numbers,
text and timestamps are each compared the right way.

Ordering rules, applied per pair:
1. A record whose value is absent sorts first in ascending order and last
   in descending order.
2. Equal values compare equal; the sort is stable.
3. Numbers compare by difference.
4. Text compares by locale-aware collation, not code point.
5. Timestamps compare by epoch milliseconds.
6. Any other or mixed pairing compares the textual forms by collation.
7. Rules 2-6 are negated for descending order. Rule 1 is not.

Rule 1 is a known quirk: absent values are not pushed to a fixed end, the
anchor side follows the direction. It is kept as-is.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pyuca import Collator

from ai_usage_insights.storage.models import UsageRecord

logger = logging.getLogger(__name__)


class SortOrder(Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class SortField(Enum):
    """Record fields that can be used as a sort key."""
    ID = "id"
    MODEL = "model"
    PROVIDER = "provider"
    INPUT = "input"
    OUTPUT = "output"
    INPUT_TOKENS = "input_tokens"
    OUTPUT_TOKENS = "output_tokens"
    COST = "cost"
    TIMESTAMP = "timestamp"
    RESPONSE_TIME = "response_time"
    MODEL_VERSION = "model_version"


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class InstantValue:
    value: datetime

    @property
    def epoch_millis(self) -> float:
        value = self.value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000


@dataclass(frozen=True)
class UnknownValue:
    value: Any


SortValue = Union[NumberValue, TextValue, InstantValue, UnknownValue]


def _text(value: Optional[str]) -> Optional[SortValue]:
    return None if value is None else TextValue(value)


_ACCESSORS: Dict[SortField, Callable[[UsageRecord], Optional[SortValue]]] = {
    SortField.ID: lambda r: _text(r.id),
    SortField.MODEL: lambda r: _text(r.model),
    SortField.PROVIDER: lambda r: TextValue(r.provider.value),
    SortField.INPUT: lambda r: _text(r.input),
    SortField.OUTPUT: lambda r: _text(r.output),
    SortField.INPUT_TOKENS: lambda r: NumberValue(r.input_tokens),
    SortField.OUTPUT_TOKENS: lambda r: NumberValue(r.output_tokens),
    SortField.COST: lambda r: NumberValue(r.cost),
    SortField.TIMESTAMP: lambda r: InstantValue(r.timestamp),
    SortField.RESPONSE_TIME: lambda r: NumberValue(r.response_time),
    SortField.MODEL_VERSION: lambda r: _text(r.model_version),
}


def sort_value(record: UsageRecord, key: SortField) -> Optional[SortValue]:
    """Extract the typed sort value of ``key`` from a record (None if absent)."""
    return _ACCESSORS[key](record)


# Unicode Collation Algorithm table; read-only after construction.
_COLLATOR = Collator()


def collation_key(text: str) -> Tuple[Tuple[int, ...], str]:
    """Build a Unicode collation key for text.

    Punctuation and symbols sort before digits, digits before letters,
    accents and case only break ties (lowercase first). Strings with
    identical collation weights fall back to code point order.
    """
    return (_COLLATOR.sort_key(text), text)


def compare_text(a: str, b: str) -> int:
    key_a, key_b = collation_key(a), collation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def compare_values(a: SortValue, b: SortValue) -> int:
    """Compare two present sort values in ascending order."""
    if a == b:
        return 0
    if isinstance(a, NumberValue) and isinstance(b, NumberValue):
        diff = a.value - b.value
        return (diff > 0) - (diff < 0)
    if isinstance(a, TextValue) and isinstance(b, TextValue):
        return compare_text(a.value, b.value)
    if isinstance(a, InstantValue) and isinstance(b, InstantValue):
        diff = a.epoch_millis - b.epoch_millis
        return (diff > 0) - (diff < 0)
    return compare_text(str(a.value), str(b.value))


def compare_records(
    a: UsageRecord,
    b: UsageRecord,
    key: SortField,
    order: SortOrder
) -> int:
    """Compare two records by ``key`` honouring the direction-aware absent anchor."""
    value_a = sort_value(a, key)
    value_b = sort_value(b, key)

    # Absent values anchor to the front for ASC and to the back for DESC.
    if value_a is None and value_b is None:
        return 0
    if value_a is None:
        return -1 if order == SortOrder.ASC else 1
    if value_b is None:
        return 1 if order == SortOrder.ASC else -1

    comparison = compare_values(value_a, value_b)
    return comparison if order == SortOrder.ASC else -comparison


def coerce_sort_field(key: Union[SortField, str]) -> SortField:
    """Accept a ``SortField`` or its string value."""
    if isinstance(key, SortField):
        return key
    try:
        return SortField(key)
    except ValueError:
        valid = [f.value for f in SortField]
        raise ValueError(f"Unknown sort key '{key}', must be one of: {valid}")


def coerce_sort_order(order: Union[SortOrder, str]) -> SortOrder:
    """Accept a ``SortOrder`` or its string value (case-insensitive)."""
    if isinstance(order, SortOrder):
        return order
    try:
        return SortOrder(str(order).lower())
    except ValueError:
        valid = [o.value for o in SortOrder]
        raise ValueError(f"Unknown sort order '{order}', must be one of: {valid}")


def apply_sorting(
    records: Sequence[UsageRecord],
    key: Union[SortField, str],
    order: Union[SortOrder, str] = SortOrder.ASC
) -> List[UsageRecord]:
    """Return a new list of records ordered by ``key``.

    The sort is stable and the input sequence is left untouched.

    Args:
        records: Records to order
        key: Field to sort by
        order: ``asc`` or ``desc``

    Returns:
        Newly ordered list of the same records

    Raises:
        ValueError: If key or order is not recognised
    """
    key = coerce_sort_field(key)
    order = coerce_sort_order(order)

    ordered = sorted(records, key=cmp_to_key(lambda a, b: compare_records(a, b, key, order)))
    logger.debug("Sorted %d records by %s %s", len(ordered), key.value, order.value)
    return ordered
