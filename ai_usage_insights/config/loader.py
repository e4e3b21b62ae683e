"""
Query configuration loading.

Reads filter and sort settings from YAML with strict validation.
"""

from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

import yaml

from ai_usage_insights.core.filters import DateRange, FilterCriteria, NumericRange
from ai_usage_insights.core.pipeline import QueryConfig
from ai_usage_insights.core.sorting import SortOrder, coerce_sort_field, coerce_sort_order
from ai_usage_insights.storage.loader import parse_timestamp
from ai_usage_insights.storage.models import Provider


def load_query_config(path: str) -> QueryConfig:
    """Load and validate a query configuration from a YAML file.

    Strict validation ensures a typo in a filter name is reported instead
    of silently widening the result set.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated QueryConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Query config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    return parse_query_config(raw_config)


def parse_query_config(raw_config: Dict[str, Any]) -> QueryConfig:
    """Build a QueryConfig from an already-loaded mapping.

    Raises:
        ValueError: If configuration is invalid
    """
    allowed_top_keys = {'filters', 'sort'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    filters_data = raw_config.get('filters') or {}
    if not isinstance(filters_data, dict):
        raise ValueError("'filters' must be a dictionary")
    filters = _parse_filters(filters_data)

    sort_data = raw_config.get('sort') or {}
    if not isinstance(sort_data, dict):
        raise ValueError("'sort' must be a dictionary")

    unknown_sort_keys = set(sort_data.keys()) - {'key', 'order'}
    if unknown_sort_keys:
        raise ValueError(f"Unknown sort keys: {unknown_sort_keys}")

    sort_key = None
    if sort_data.get('key') is not None:
        sort_key = coerce_sort_field(sort_data['key'])

    sort_order = SortOrder.ASC
    if sort_data.get('order') is not None:
        sort_order = coerce_sort_order(sort_data['order'])

    return QueryConfig(filters=filters, sort_key=sort_key, sort_order=sort_order)


def _parse_filters(data: Dict[str, Any]) -> FilterCriteria:
    """Parse and validate the ``filters`` section."""
    allowed_keys = {'models', 'providers', 'date_range', 'cost_range', 'token_range', 'search'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in filters: {unknown_keys}")

    models = data.get('models') or []
    if not isinstance(models, list) or not all(isinstance(m, str) for m in models):
        raise ValueError("'models' in filters must be a list of strings")

    providers = data.get('providers') or []
    if not isinstance(providers, list) or not all(isinstance(p, str) for p in providers):
        raise ValueError("'providers' in filters must be a list of strings")

    search = data.get('search')
    if search is not None and not isinstance(search, str):
        raise ValueError("'search' in filters must be a string")

    return FilterCriteria(
        models=frozenset(models),
        providers=parse_providers(providers),
        date_range=_parse_date_range(data.get('date_range')),
        cost_range=_parse_numeric_range(data.get('cost_range'), "filters.cost_range"),
        token_range=_parse_numeric_range(data.get('token_range'), "filters.token_range"),
        search=search
    )


def parse_providers(values: Iterable[str]) -> FrozenSet[Provider]:
    """Resolve provider names, rejecting any that are not a known provider.

    Raises:
        ValueError: If a name is not a known provider
    """
    providers = set()
    for value in values:
        try:
            providers.add(Provider(value.lower()))
        except ValueError:
            valid = [p.value for p in Provider]
            raise ValueError(f"Unknown provider '{value}', must be one of: {valid}")
    return frozenset(providers)


def _parse_date_range(data: Any) -> Optional[DateRange]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("'date_range' in filters must be a dictionary")

    unknown_keys = set(data.keys()) - {'start', 'end'}
    if unknown_keys:
        raise ValueError(f"Unknown keys in filters.date_range: {unknown_keys}")

    start = data.get('start')
    end = data.get('end')
    return DateRange(
        start=parse_timestamp(start, "'start' in filters.date_range") if start is not None else None,
        end=parse_timestamp(end, "'end' in filters.date_range") if end is not None else None
    )


def _parse_numeric_range(data: Any, path: str) -> Optional[NumericRange]:
    """Parse an inclusive min/max range.

    Args:
        data: Range mapping or None
        path: Path for error messages

    Returns:
        NumericRange, or None when the section is absent

    Raises:
        ValueError: If the range is malformed
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must be a dictionary")

    unknown_keys = set(data.keys()) - {'min', 'max'}
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    bounds = {}
    for bound in ('min', 'max'):
        value = data.get(bound)
        if value is None:
            bounds[bound] = None
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{bound}' in {path} must be a number")
        bounds[bound] = float(value)

    return NumericRange(min=bounds['min'], max=bounds['max'])
