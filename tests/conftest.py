"""
Shared fixtures for the test suite.
"""

from datetime import datetime

import pytest

from ai_usage_insights.storage.models import Provider, UsageRecord


def build_record(**overrides) -> UsageRecord:
    """Create a usage record with sensible defaults."""
    values = dict(
        id="rec-1",
        model="gpt-4",
        provider=Provider.OPENAI,
        input="Hello world",
        output="Hi there",
        input_tokens=100,
        output_tokens=50,
        cost=0.03,
        timestamp=datetime(2024, 1, 1, 12, 0, 0),
        response_time=500.0,
        model_version=None,
    )
    values.update(overrides)
    return UsageRecord(**values)


@pytest.fixture
def make_record():
    """Factory fixture for usage records."""
    return build_record


@pytest.fixture
def sample_records():
    """A small mixed dataset across models and providers."""
    return [
        build_record(
            id="r1", model="gpt-4", provider=Provider.OPENAI,
            input="Hello world", output="Greetings",
            input_tokens=100, output_tokens=50, cost=0.03, response_time=500.0,
            timestamp=datetime(2024, 1, 1, 9, 0, 0), model_version="0613"
        ),
        build_record(
            id="r2", model="gpt-4", provider=Provider.OPENAI,
            input="Summarize this report", output="The report says hello",
            input_tokens=200, output_tokens=80, cost=0.05, response_time=700.0,
            timestamp=datetime(2024, 1, 2, 9, 0, 0)
        ),
        build_record(
            id="r3", model="gemini-pro", provider=Provider.GEMINI,
            input="Translate to French", output="Traduire en français",
            input_tokens=0, output_tokens=40, cost=0.01, response_time=300.0,
            timestamp=datetime(2024, 1, 3, 9, 0, 0), model_version="1.0"
        ),
        build_record(
            id="r4", model="gpt-3.5-turbo", provider=Provider.OPENAI,
            input="Write a poem", output="Roses are red",
            input_tokens=20, output_tokens=60, cost=0.002, response_time=250.0,
            timestamp=datetime(2024, 1, 4, 9, 0, 0)
        ),
    ]
