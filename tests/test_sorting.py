"""
Unit tests for record sorting.

Tests typed comparisons, stability, and the direction-aware placement
of records with absent values.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ai_usage_insights.core.sorting import (
    apply_sorting,
    compare_text,
    compare_values,
    InstantValue,
    NumberValue,
    SortField,
    SortOrder,
    sort_value,
    TextValue,
    UnknownValue
)
from ai_usage_insights.storage.models import Provider


def _ids(records):
    return [r.id for r in records]


class TestCompareValues:
    """Test per-variant comparators."""

    def test_numbers_compare_by_difference(self):
        assert compare_values(NumberValue(1), NumberValue(2)) < 0
        assert compare_values(NumberValue(2.5), NumberValue(1)) > 0
        assert compare_values(NumberValue(3), NumberValue(3.0)) == 0

    def test_text_is_case_insensitive_at_primary_level(self):
        assert compare_text("apple", "Banana") < 0
        assert compare_text("Banana", "apple") > 0

    def test_text_lowercase_before_uppercase(self):
        assert compare_text("a", "A") < 0
        assert compare_text("A", "b") < 0

    def test_text_accents_sort_with_base_letter(self):
        assert compare_text("éclair", "fig") < 0
        assert compare_text("eclair", "éclair") < 0

    @pytest.mark.parametrize("before, after", [
        ("a_", "a1"),
        ("a~", "ab"),
        ("a{", "a1"),
        ("a|", "aa"),
        ("a-b", "a0"),
    ])
    def test_punctuation_sorts_before_digits_and_letters(self, before, after):
        assert compare_text(before, after) < 0
        assert compare_text(after, before) > 0

    def test_digits_sort_before_letters(self):
        assert compare_text("a9", "aa") < 0

    def test_identical_text_compares_equal(self):
        assert compare_text("gpt-4", "gpt-4") == 0

    def test_naive_instant_is_read_as_utc(self):
        naive = InstantValue(datetime(2024, 1, 1, 0, 0))
        aware = InstantValue(datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))
        assert naive.epoch_millis == aware.epoch_millis == 1704067200000

    def test_naive_and_aware_instants_compare_by_utc(self):
        naive = InstantValue(datetime(2024, 1, 1, 12, 0))
        aware = InstantValue(datetime(2024, 1, 1, 13, 0, tzinfo=timezone(timedelta(hours=2))))
        assert compare_values(aware, naive) < 0

    def test_instants_compare_by_epoch(self):
        earlier = InstantValue(datetime(2024, 1, 1, tzinfo=timezone.utc))
        later = InstantValue(datetime(2024, 1, 2, tzinfo=timezone.utc))
        assert compare_values(earlier, later) < 0
        assert compare_values(later, earlier) > 0

    def test_unknown_falls_back_to_text(self):
        assert compare_values(UnknownValue(10), UnknownValue(9)) < 0  # "10" < "9"
        assert compare_values(NumberValue(10), TextValue("9")) < 0


class TestSortValue:
    """Test typed accessors."""

    def test_accessor_variants(self, make_record):
        record = make_record(model_version=None)
        assert sort_value(record, SortField.COST) == NumberValue(0.03)
        assert sort_value(record, SortField.MODEL) == TextValue("gpt-4")
        assert sort_value(record, SortField.PROVIDER) == TextValue("openai")
        assert isinstance(sort_value(record, SortField.TIMESTAMP), InstantValue)
        assert sort_value(record, SortField.MODEL_VERSION) is None

    def test_every_field_has_an_accessor(self, make_record):
        record = make_record(model_version="v1")
        for field in SortField:
            assert sort_value(record, field) is not None


class TestApplySorting:
    """Test ordering semantics."""

    def test_numeric_ascending(self, sample_records):
        result = apply_sorting(sample_records, SortField.COST, SortOrder.ASC)
        assert _ids(result) == ["r4", "r3", "r1", "r2"]

    def test_numeric_descending(self, sample_records):
        result = apply_sorting(sample_records, SortField.RESPONSE_TIME, SortOrder.DESC)
        assert _ids(result) == ["r2", "r1", "r3", "r4"]

    def test_timestamp_descending(self, sample_records):
        result = apply_sorting(sample_records, SortField.TIMESTAMP, "desc")
        assert _ids(result) == ["r4", "r3", "r2", "r1"]

    def test_text_uses_collation(self, make_record):
        data = [
            make_record(id="1", model="beta"),
            make_record(id="2", model="Alpha"),
            make_record(id="3", model="alpha"),
        ]
        result = apply_sorting(data, SortField.MODEL, SortOrder.ASC)
        assert _ids(result) == ["3", "2", "1"]

    def test_string_key_and_order_are_accepted(self, sample_records):
        result = apply_sorting(sample_records, "input_tokens", "ASC")
        assert _ids(result) == ["r3", "r4", "r1", "r2"]

    def test_default_order_is_ascending(self, sample_records):
        assert apply_sorting(sample_records, SortField.COST) == apply_sorting(
            sample_records, SortField.COST, SortOrder.ASC
        )

    def test_unknown_key_raises_error(self, sample_records):
        with pytest.raises(ValueError, match="Unknown sort key"):
            apply_sorting(sample_records, "latency")

    def test_unknown_order_raises_error(self, sample_records):
        with pytest.raises(ValueError, match="Unknown sort order"):
            apply_sorting(sample_records, SortField.COST, "sideways")

    def test_input_is_not_mutated(self, sample_records):
        original = list(sample_records)
        result = apply_sorting(sample_records, SortField.COST, SortOrder.DESC)
        assert sample_records == original
        assert result is not sample_records

    def test_sort_is_stable(self, make_record):
        data = [
            make_record(id="a", provider=Provider.OPENAI, cost=0.02),
            make_record(id="b", provider=Provider.GEMINI, cost=0.01),
            make_record(id="c", provider=Provider.OPENAI, cost=0.03),
            make_record(id="d", provider=Provider.GEMINI, cost=0.04),
        ]
        assert _ids(apply_sorting(data, SortField.PROVIDER, SortOrder.ASC)) == ["b", "d", "a", "c"]
        assert _ids(apply_sorting(data, SortField.PROVIDER, SortOrder.DESC)) == ["a", "c", "b", "d"]

    def test_sorting_is_idempotent(self, sample_records):
        once = apply_sorting(sample_records, SortField.OUTPUT_TOKENS, SortOrder.DESC)
        twice = apply_sorting(once, SortField.OUTPUT_TOKENS, SortOrder.DESC)
        assert once == twice

    def test_reversing_direction_reverses_distinct_values(self, sample_records):
        asc = apply_sorting(sample_records, SortField.COST, SortOrder.ASC)
        desc = apply_sorting(sample_records, SortField.COST, SortOrder.DESC)
        assert desc == list(reversed(asc))


class TestAbsentValueAnchoring:
    """Records with an absent key value move to the front for ascending
    order and to the back for descending order."""

    @pytest.fixture
    def versioned(self, make_record):
        return [
            make_record(id="v2", model_version="2.0"),
            make_record(id="none-a", model_version=None),
            make_record(id="v1", model_version="1.0"),
            make_record(id="none-b", model_version=None),
        ]

    def test_absent_values_first_when_ascending(self, versioned):
        result = apply_sorting(versioned, SortField.MODEL_VERSION, SortOrder.ASC)
        assert _ids(result) == ["none-a", "none-b", "v1", "v2"]

    def test_absent_values_last_when_descending(self, versioned):
        result = apply_sorting(versioned, SortField.MODEL_VERSION, SortOrder.DESC)
        assert _ids(result) == ["v2", "v1", "none-a", "none-b"]

    def test_absent_values_keep_relative_order(self, versioned):
        for order in SortOrder:
            result = apply_sorting(versioned, SortField.MODEL_VERSION, order)
            absent = [r.id for r in result if r.model_version is None]
            assert absent == ["none-a", "none-b"]

    def test_reversal_moves_absent_values_to_opposite_anchor(self, versioned):
        asc = apply_sorting(versioned, SortField.MODEL_VERSION, SortOrder.ASC)
        desc = apply_sorting(versioned, SortField.MODEL_VERSION, SortOrder.DESC)
        assert _ids(asc)[:2] == ["none-a", "none-b"]
        assert _ids(desc)[-2:] == ["none-a", "none-b"]
        assert desc != list(reversed(asc))
