"""
Record filtering.

Narrows a record sequence to those matching every supplied criterion.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Sequence, Union

from ai_usage_insights.storage.models import normalize_timestamp, Provider, UsageRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateRange:
    """Inclusive timestamp window. A missing bound leaves that side open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        """Store bounds as naive UTC, matching record timestamps."""
        if self.start is not None:
            object.__setattr__(self, "start", normalize_timestamp(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", normalize_timestamp(self.end))


@dataclass(frozen=True)
class NumericRange:
    """Inclusive numeric window. A missing bound leaves that side open."""
    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class FilterCriteria:
    """Independently applicable constraints on usage records.

    Every field is optional. An absent range, an empty allowed set or an
    empty search string places no constraint on that dimension.
    """
    models: FrozenSet[str] = field(default_factory=frozenset)
    providers: FrozenSet[Union[Provider, str]] = field(default_factory=frozenset)
    date_range: Optional[DateRange] = None
    cost_range: Optional[NumericRange] = None
    token_range: Optional[NumericRange] = None
    search: Optional[str] = None

    def __post_init__(self):
        """Normalize allowed sets so callers may pass lists or provider names.

        Names that are not a known provider are kept as-is and match no record.
        """
        object.__setattr__(self, "models", frozenset(self.models or ()))
        object.__setattr__(
            self,
            "providers",
            frozenset(_coerce_provider(p) for p in (self.providers or ()))
        )

    def is_empty(self) -> bool:
        """Whether no dimension constrains anything."""
        return (
            not self.models
            and not self.providers
            and self.date_range is None
            and self.cost_range is None
            and self.token_range is None
            and not self.search
        )

    def matches(self, record: UsageRecord) -> bool:
        """Check a record against every specified criterion (logical AND)."""
        if self.models and record.model not in self.models:
            return False
        if self.providers and record.provider not in self.providers:
            return False

        if self.date_range is not None:
            if self.date_range.start is not None and record.timestamp < self.date_range.start:
                return False
            if self.date_range.end is not None and record.timestamp > self.date_range.end:
                return False

        if self.cost_range is not None and not self.cost_range.contains(record.cost):
            return False
        if self.token_range is not None and not self.token_range.contains(record.total_tokens):
            return False

        if self.search:
            needle = self.search.lower()
            if needle not in record.input.lower() and needle not in record.output.lower():
                return False

        return True


def _coerce_provider(value: Union[Provider, str]) -> Union[Provider, str]:
    if isinstance(value, Provider):
        return value
    try:
        return Provider(str(value).lower())
    except ValueError:
        return str(value)


def apply_filters(records: Sequence[UsageRecord], criteria: FilterCriteria) -> List[UsageRecord]:
    """Return the records satisfying all criteria, in input order.

    Contradictory criteria (for example min > max) are not an error; they
    simply match nothing.

    Args:
        records: Records to filter (left unmodified)
        criteria: Constraints to apply

    Returns:
        New list holding the matching records
    """
    if criteria.is_empty():
        return list(records)

    matched = [record for record in records if criteria.matches(record)]
    logger.debug("Filtered %d records down to %d", len(records), len(matched))
    return matched
