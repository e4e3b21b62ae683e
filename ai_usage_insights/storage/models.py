"""
Data models for usage records.

Defines the immutable record shape consumed by the query pipeline.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def normalize_timestamp(value: datetime) -> datetime:
    """Convert aware datetimes to naive UTC so all timestamps compare."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Provider(Enum):
    """Model providers a usage record can originate from."""
    OPENAI = "openai"
    GEMINI = "gemini"


@dataclass(frozen=True)
class UsageRecord:
    """Immutable record of a single AI model invocation.

    Carries the prompt/response pair together with the cost, token and
    latency metadata used for filtering, sorting and aggregation.
    """
    id: str
    model: str
    provider: Provider
    input: str
    output: str
    input_tokens: int
    output_tokens: int
    cost: float
    timestamp: datetime
    response_time: float  # milliseconds
    model_version: Optional[str] = None

    def __post_init__(self):
        """Validate numeric metadata and store the timestamp as naive UTC."""
        object.__setattr__(self, "timestamp", normalize_timestamp(self.timestamp))
        if self.input_tokens < 0:
            raise ValueError("input_tokens cannot be negative")
        if self.output_tokens < 0:
            raise ValueError("output_tokens cannot be negative")
        if self.cost < 0:
            raise ValueError("cost cannot be negative")
        if self.response_time < 0:
            raise ValueError("response_time cannot be negative")

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens
