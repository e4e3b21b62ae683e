"""
AI Usage Insights.

Filtering, sorting and aggregate analytics over AI model usage records.
"""

from .core import (
    AnalyticsSummary,
    DateRange,
    FilterCriteria,
    ModelStats,
    NumericRange,
    QueryConfig,
    QueryResult,
    SortField,
    SortOrder,
    apply_filters,
    apply_sorting,
    compute_analytics,
    group_by_model,
    run_query,
)
from .storage.models import Provider, UsageRecord

__all__ = [
    "AnalyticsSummary",
    "DateRange",
    "FilterCriteria",
    "ModelStats",
    "NumericRange",
    "Provider",
    "QueryConfig",
    "QueryResult",
    "SortField",
    "SortOrder",
    "UsageRecord",
    "apply_filters",
    "apply_sorting",
    "compute_analytics",
    "group_by_model",
    "run_query",
]
