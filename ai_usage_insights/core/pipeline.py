"""
Query composition.

Runs filter, optional sort and aggregation for a ``QueryConfig``.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .analytics import AnalyticsSummary, compute_analytics
from .filters import FilterCriteria, apply_filters
from .sorting import SortField, SortOrder, apply_sorting
from ai_usage_insights.storage.models import UsageRecord


@dataclass(frozen=True)
class QueryConfig:
    """Filter and sort settings for one query."""
    filters: FilterCriteria = field(default_factory=FilterCriteria)
    sort_key: Optional[SortField] = None
    sort_order: SortOrder = SortOrder.ASC


@dataclass(frozen=True)
class QueryResult:
    """Records selected by a query and their summary."""
    records: List[UsageRecord]
    summary: AnalyticsSummary


def run_query(records: Sequence[UsageRecord], config: QueryConfig) -> QueryResult:
    """Filter, then sort if a key is configured, then aggregate."""
    selected = apply_filters(records, config.filters)
    if config.sort_key is not None:
        selected = apply_sorting(selected, config.sort_key, config.sort_order)
    return QueryResult(records=selected, summary=compute_analytics(selected))
