"""
Core modules for AI Usage Insights.

This package contains the pure query pipeline: filtering, sorting
and analytics aggregation over usage records.
"""

from .analytics import AnalyticsSummary, ModelStats, compute_analytics, group_by_model
from .filters import DateRange, FilterCriteria, NumericRange, apply_filters
from .pipeline import QueryConfig, QueryResult, run_query
from .sorting import SortField, SortOrder, apply_sorting

__all__ = [
    "AnalyticsSummary",
    "DateRange",
    "FilterCriteria",
    "ModelStats",
    "NumericRange",
    "QueryConfig",
    "QueryResult",
    "SortField",
    "SortOrder",
    "apply_filters",
    "apply_sorting",
    "compute_analytics",
    "group_by_model",
    "run_query",
]
