"""
Usage analytics aggregation.

Reduces a record sequence into cost, latency and token statistics,
overall and per model.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ai_usage_insights.storage.models import UsageRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelStats:
    """Averages computed over one model's records."""
    avg_cost: float
    avg_tokens: float
    avg_response_time: float
    request_count: int = 0


@dataclass(frozen=True)
class AnalyticsSummary:
    """Aggregate statistics over a record set."""
    total_cost: float = 0.0
    avg_cost: float = 0.0
    avg_response_time: float = 0.0
    token_efficiency: float = 0.0
    model_stats: Dict[str, ModelStats] = field(default_factory=dict)
    record_count: int = 0


def token_efficiency(record: UsageRecord) -> float:
    """Output tokens produced per input token, with the denominator floored at 1."""
    return record.output_tokens / max(record.input_tokens, 1)


def group_by_model(records: Sequence[UsageRecord]) -> Dict[str, List[UsageRecord]]:
    """Group records by model, keyed in order of first appearance."""
    grouped: Dict[str, List[UsageRecord]] = {}
    for record in records:
        grouped.setdefault(record.model, []).append(record)
    return grouped


def compute_model_stats(records: Sequence[UsageRecord]) -> ModelStats:
    """Compute per-model averages. ``records`` must be non-empty."""
    count = len(records)
    return ModelStats(
        avg_cost=sum(r.cost for r in records) / count,
        avg_tokens=sum(r.total_tokens for r in records) / count,
        avg_response_time=sum(r.response_time for r in records) / count,
        request_count=count
    )


def compute_analytics(records: Sequence[UsageRecord]) -> AnalyticsSummary:
    """Summarize cost, latency and token efficiency for a record set.

    An empty sequence yields a summary of zeros with no model statistics.

    Args:
        records: Records to aggregate (left unmodified)

    Returns:
        AnalyticsSummary for the whole set and for each observed model
    """
    if not records:
        return AnalyticsSummary()

    count = len(records)
    total_cost = sum(r.cost for r in records)

    model_stats = {
        model: compute_model_stats(model_records)
        for model, model_records in group_by_model(records).items()
    }

    summary = AnalyticsSummary(
        total_cost=total_cost,
        avg_cost=total_cost / count,
        avg_response_time=sum(r.response_time for r in records) / count,
        token_efficiency=sum(token_efficiency(r) for r in records) / count,
        model_stats=model_stats,
        record_count=count
    )
    logger.debug("Aggregated %d records across %d models", count, len(model_stats))
    return summary
